"""Batch import of goals and tasks linked through placeholder goal ids."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lifesim.assistant.operations import AssistantOperation, CreateGoal, CreateTask
from lifesim.core.schema import TaskStatus, TaskType
from lifesim.core.store import LifeStore

logger = logging.getLogger(__name__)

TEMP_GOAL_PREFIX = "TEMP_GOAL_"


@dataclass
class ImportResult:
    goals_created: int = 0
    tasks_created: int = 0
    errors: list[str] = field(default_factory=list)


class ImportExecutor:
    """Creates every goal first, then every task with placeholders resolved.

    The n-th CREATE_GOAL in the batch (1-based) answers to ``TEMP_GOAL_<n>``.
    A task pointing at a placeholder with no created goal, or at a goal id
    that does not exist, is stored unlinked.
    """

    def __init__(self, store: LifeStore) -> None:
        self.store = store

    def execute(self, operations: list[AssistantOperation]) -> ImportResult:
        result = ImportResult()
        temp_ids: dict[str, str] = {}

        goal_ops = [op for op in operations if isinstance(op, CreateGoal)]
        for ordinal, op in enumerate(goal_ops, start=1):
            try:
                goal = self.store.goals.upsert(**op.payload.changes())
            except Exception as e:
                logger.warning("Import: goal %r failed: %s", op.payload.title, e)
                result.errors.append(f'Failed to create goal "{op.payload.title}": {e}')
                continue
            temp_ids[f"{TEMP_GOAL_PREFIX}{ordinal}"] = goal.id
            result.goals_created += 1

        known_goals = {g.id for g in self.store.goals.list()}
        task_ops = [op for op in operations if isinstance(op, CreateTask)]
        for op in task_ops:
            fields = op.payload.changes()
            goal_ref = fields.get("goal_arc_id")
            if goal_ref and goal_ref.startswith(TEMP_GOAL_PREFIX):
                fields["goal_arc_id"] = temp_ids.get(goal_ref)
            elif goal_ref and goal_ref not in known_goals:
                logger.info("Import: dropping unknown goalArcId %r", goal_ref)
                fields["goal_arc_id"] = None
            fields.setdefault("type", TaskType.side)
            fields.setdefault("status", TaskStatus.planned)
            try:
                self.store.tasks.upsert(**fields)
            except Exception as e:
                logger.warning("Import: task %r failed: %s", op.payload.title, e)
                result.errors.append(f'Failed to create task "{op.payload.title}": {e}')
                continue
            result.tasks_created += 1

        return result
