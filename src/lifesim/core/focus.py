"""Start / pause / complete workflow for working on a task.

This is the caller that keeps the single active session invariant: starting
a task always ends whatever session was running before.
"""

from __future__ import annotations

from lifesim.core.repositories import TaskRepository
from lifesim.core.schema import Session, Task, TaskStatus
from lifesim.core.sessions import SessionEngine
from lifesim.core.storage import StoreError


class FocusTracker:
    def __init__(self, tasks: TaskRepository, engine: SessionEngine) -> None:
        self.tasks = tasks
        self.engine = engine

    def _require_task(self, task_id: str) -> Task:
        task = self.tasks.get(task_id)
        if task is None:
            raise StoreError(f"Task '{task_id}' not found")
        return task

    def start_task(self, task_id: str) -> Session:
        """End any running session, then start one on this task (IN_PROGRESS)."""
        self._require_task(task_id)
        previous = self.engine.end_active_session()
        if previous is not None:
            prev_task = self.tasks.get(previous.task_id)
            if prev_task is not None and prev_task.status == TaskStatus.in_progress:
                self.tasks.upsert(id=prev_task.id, status=TaskStatus.planned)
        session = self.engine.start_session(task_id)
        self.tasks.upsert(id=task_id, status=TaskStatus.in_progress)
        return session

    def pause_task(self, task_id: str) -> Session | None:
        """End this task's session and put the task back to PLANNED."""
        self._require_task(task_id)
        ended = self.engine.end_session_for_task(task_id)
        self.tasks.upsert(id=task_id, status=TaskStatus.planned)
        return ended

    def complete_task(self, task_id: str) -> Task:
        """End the active session if it belongs to this task and mark it DONE."""
        self._require_task(task_id)
        if self.engine.has_active_session(task_id):
            self.engine.end_active_session()
        return self.tasks.upsert(id=task_id, status=TaskStatus.done)
