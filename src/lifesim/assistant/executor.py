"""Applies validated operations to the repositories."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from lifesim.assistant.operations import (
    AssistantOperation,
    CreateGoal,
    CreateTask,
    DeleteGoal,
    DeleteTask,
    LinkTaskToGoal,
    SuggestTodayTasks,
    UpdateGoal,
    UpdateTask,
)
from lifesim.core.schema import TaskStatus, TaskType
from lifesim.core.store import LifeStore

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    success: bool
    operation: AssistantOperation
    message: str


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


class OperationExecutor:
    """Executes one operation at a time; failures become results, never exceptions."""

    def __init__(self, store: LifeStore) -> None:
        self.store = store

    def execute(self, op: AssistantOperation) -> OperationResult:
        try:
            success, message = self._apply(op)
        except Exception as e:
            logger.exception("Operation %s failed", op.type)
            return OperationResult(False, op, f"Error executing operation: {e}")
        return OperationResult(success, op, message)

    def execute_all(self, operations: list[AssistantOperation]) -> list[OperationResult]:
        return [self.execute(op) for op in operations]

    def _apply(self, op: AssistantOperation) -> tuple[bool, str]:
        goals = self.store.goals
        tasks = self.store.tasks
        p = op.payload

        if isinstance(op, CreateGoal):
            goal = goals.upsert(**p.changes())
            return True, f'Created goal "{goal.title}"'

        if isinstance(op, UpdateGoal):
            if goals.get(p.goal_id) is None:
                return False, f"Goal not found: {p.goal_id}"
            goal = goals.upsert(id=p.goal_id, **p.changes("goal_id"))
            return True, f'Updated goal "{goal.title}"'

        if isinstance(op, DeleteGoal):
            existing = goals.get(p.goal_id)
            if existing is None or not goals.delete(p.goal_id):
                return False, f"Failed to delete goal: {p.goal_id}"
            return True, f'Deleted goal "{existing.title}"'

        if isinstance(op, CreateTask):
            fields = p.changes()
            fields.setdefault("type", TaskType.side)
            fields.setdefault("status", TaskStatus.planned)
            task = tasks.upsert(**fields)
            return True, f'Created task "{task.title}"'

        if isinstance(op, UpdateTask):
            if tasks.get(p.task_id) is None:
                return False, f"Task not found: {p.task_id}"
            task = tasks.upsert(id=p.task_id, **p.changes("task_id"))
            return True, f'Updated task "{task.title}"'

        if isinstance(op, DeleteTask):
            existing = tasks.get(p.task_id)
            if existing is None or not tasks.delete(p.task_id):
                return False, f"Failed to delete task: {p.task_id}"
            return True, f'Deleted task "{existing.title}"'

        if isinstance(op, LinkTaskToGoal):
            task = tasks.link_to_goal(p.task_id, p.goal_arc_id)
            if task is None:
                return False, f"Failed to link task: {p.task_id}"
            if p.goal_arc_id:
                return True, f'Linked "{task.title}" to goal'
            return True, f'Unlinked "{task.title}" from goal'

        if isinstance(op, SuggestTodayTasks):
            # Informational only, nothing is written.
            reason = f": {p.reason}" if p.reason else ""
            return True, f"Suggested {len(p.task_ids)} task(s) for today{reason}"

        return False, "Unknown operation type"


def summarize_results(results: list[OperationResult]) -> str | None:
    """One line such as "Created 2 goals, Created 1 task, 1 action failed"."""
    if not results:
        return None

    succeeded = [r for r in results if r.success]
    failed = len(results) - len(succeeded)

    def _count(*types: str) -> int:
        return sum(1 for r in succeeded if r.operation.type in types)

    parts = []
    goal_creates = _count("CREATE_GOAL")
    task_creates = _count("CREATE_TASK")
    updates = _count("UPDATE_GOAL", "UPDATE_TASK")
    deletes = _count("DELETE_GOAL", "DELETE_TASK")
    links = _count("LINK_TASK_TO_GOAL")

    if goal_creates:
        parts.append(f"Created {_plural(goal_creates, 'goal')}")
    if task_creates:
        parts.append(f"Created {_plural(task_creates, 'task')}")
    if updates:
        parts.append(f"Updated {_plural(updates, 'item')}")
    if deletes:
        parts.append(f"Deleted {_plural(deletes, 'item')}")
    if links:
        parts.append(f"Linked {_plural(links, 'task')}")
    if failed:
        parts.append(f"{_plural(failed, 'action')} failed")

    return ", ".join(parts) if parts else None
