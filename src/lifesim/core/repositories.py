"""Per-entity CRUD over a KeyValueStore.

Every mutation reads the whole collection, changes it in memory and writes the
whole collection back. References between records are not checked here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from lifesim.core.schema import (
    GoalArc,
    Record,
    Session,
    Task,
    TaskStatus,
    TaskType,
    _now,
)
from lifesim.core.storage import Collection, KeyValueStore, StoreError

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

Clock = Callable[[], datetime]


class _Repository(Generic[R]):
    collection: Collection
    model: type[R]

    def __init__(self, kv: KeyValueStore, clock: Clock = _now) -> None:
        self.kv = kv
        self.clock = clock

    def list(self) -> list[R]:
        records = []
        for raw in self.kv.get(self.collection):
            try:
                records.append(self.model.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed %s record %r: %s",
                    self.collection.value,
                    raw.get("id") if isinstance(raw, dict) else raw,
                    e.errors()[0]["msg"],
                )
        return records

    def get(self, record_id: str) -> R | None:
        for record in self.list():
            if record.id == record_id:
                return record
        return None

    def delete(self, record_id: str) -> bool:
        records = self.list()
        kept = [r for r in records if r.id != record_id]
        if len(kept) == len(records):
            return False
        self._save(kept)
        return True

    def _save(self, records: list[R]) -> None:
        if not self.kv.set(self.collection, [r.to_json_dict() for r in records]):
            raise StoreError(f"Failed to write {self.collection.value}")

    def _index_of(self, records: list[R], record_id: str | None) -> int:
        if record_id is None:
            return -1
        for idx, record in enumerate(records):
            if record.id == record_id:
                return idx
        return -1

    def _merge(self, existing: R, fields: dict[str, Any]) -> R:
        data = existing.model_dump()
        data.update(fields)
        data["updated_at"] = self.clock()
        return self.model.model_validate(data)


class GoalRepository(_Repository[GoalArc]):
    collection = Collection.goals
    model = GoalArc

    def upsert(self, id: str | None = None, **fields: Any) -> GoalArc:
        """Merge fields onto the goal with this id, or create a new goal.

        A new goal always gets a freshly generated id.
        """
        goals = self.list()
        idx = self._index_of(goals, id)
        if idx >= 0:
            goal = self._merge(goals[idx], fields)
            goals[idx] = goal
        else:
            timestamp = self.clock()
            is_active = fields.get("is_active")
            goal = GoalArc(
                title=fields.get("title") or "",
                description=fields.get("description") or "",
                target_date=fields.get("target_date"),
                created_at=timestamp,
                updated_at=timestamp,
                is_active=True if is_active is None else is_active,
            )
            goals.append(goal)
        self._save(goals)
        return goal

    def active(self) -> list[GoalArc]:
        return [g for g in self.list() if g.is_active]


class TaskRepository(_Repository[Task]):
    collection = Collection.tasks
    model = Task

    def upsert(self, id: str | None = None, **fields: Any) -> Task:
        """Merge fields onto the task with this id, or create a new task.

        ``completed_at`` follows ``status``: set when the task becomes DONE,
        cleared when it leaves DONE.
        """
        tasks = self.list()
        idx = self._index_of(tasks, id)
        if idx >= 0:
            task = self._merge(tasks[idx], fields)
            if task.status == TaskStatus.done:
                if task.completed_at is None:
                    task.completed_at = task.updated_at
            else:
                task.completed_at = None
            tasks[idx] = task
        else:
            timestamp = self.clock()
            status = fields.get("status") or TaskStatus.backlog
            task = Task(
                title=fields.get("title") or "",
                description=fields.get("description"),
                type=fields.get("type") or TaskType.side,
                status=status,
                goal_arc_id=fields.get("goal_arc_id"),
                estimated_minutes=fields.get("estimated_minutes"),
                due_date=fields.get("due_date"),
                created_at=timestamp,
                updated_at=timestamp,
            )
            if task.status == TaskStatus.done:
                task.completed_at = timestamp
            tasks.append(task)
        self._save(tasks)
        return task

    def quick_add(
        self,
        title: str,
        type: TaskType = TaskType.side,
        goal_arc_id: str | None = None,
    ) -> Task:
        """Create a task that is ready to work on (PLANNED)."""
        return self.upsert(
            title=title, type=type, status=TaskStatus.planned, goal_arc_id=goal_arc_id
        )

    def update_status(self, task_id: str, status: TaskStatus) -> Task | None:
        if self.get(task_id) is None:
            return None
        return self.upsert(id=task_id, status=status)

    def link_to_goal(self, task_id: str, goal_arc_id: str | None) -> Task | None:
        if self.get(task_id) is None:
            return None
        return self.upsert(id=task_id, goal_arc_id=goal_arc_id)

    def by_status(self, status: TaskStatus) -> list[Task]:
        return [t for t in self.list() if t.status == status]

    def by_goal(self, goal_arc_id: str) -> list[Task]:
        return [t for t in self.list() if t.goal_arc_id == goal_arc_id]

    def active(self) -> list[Task]:
        """Tasks that are not DONE."""
        return [t for t in self.list() if t.status != TaskStatus.done]

    def completed_on(self, day: date) -> list[Task]:
        return [
            t for t in self.list() if t.completed_at is not None and t.completed_at.date() == day
        ]


class SessionRepository(_Repository[Session]):
    collection = Collection.sessions
    model = Session

    def upsert(self, id: str | None = None, **fields: Any) -> Session:
        sessions = self.list()
        idx = self._index_of(sessions, id)
        if idx >= 0:
            data = sessions[idx].model_dump()
            data.update(fields)
            session = Session.model_validate(data)
            sessions[idx] = session
        else:
            session = Session(
                task_id=fields["task_id"],
                started_at=fields.get("started_at") or self.clock(),
                notes=fields.get("notes"),
            )
            sessions.append(session)
        self._save(sessions)
        return session

    def by_task(self, task_id: str) -> list[Session]:
        return [s for s in self.list() if s.task_id == task_id]

    def active(self) -> Session | None:
        for session in self.list():
            if session.is_active:
                return session
        return None
