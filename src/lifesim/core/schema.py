"""Pydantic v2 models for goals, tasks, sessions and derived summaries."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _uuid() -> str:
    return str(uuid.uuid4())


class Record(BaseModel):
    """Base for persisted records: camelCase on disk, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# -- Enums --


class TaskType(str, Enum):
    main = "MAIN"
    side = "SIDE"
    daily = "DAILY"
    maintenance = "MAINTENANCE"


class TaskStatus(str, Enum):
    backlog = "BACKLOG"
    planned = "PLANNED"
    in_progress = "IN_PROGRESS"
    done = "DONE"


class AvatarState(str, Enum):
    idle = "IDLE"
    working = "WORKING"
    resting = "RESTING"


# -- Entities --


class GoalArc(Record):
    id: str = Field(default_factory=_uuid)
    title: str = Field(min_length=1)
    description: str = ""
    target_date: date | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
    is_active: bool = True


class Task(Record):
    id: str = Field(default_factory=_uuid)
    title: str = Field(min_length=1)
    description: str | None = None
    type: TaskType = TaskType.side
    status: TaskStatus = TaskStatus.backlog
    goal_arc_id: str | None = None
    estimated_minutes: float | None = Field(default=None, ge=0)
    due_date: date | None = None
    completed_at: datetime | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.done


class Session(Record):
    id: str = Field(default_factory=_uuid)
    task_id: str
    started_at: datetime = Field(default_factory=_now)
    ended_at: datetime | None = None
    duration_minutes: int | None = None
    notes: str | None = None

    @property
    def is_active(self) -> bool:
        return self.ended_at is None


# -- Derived views --


class DaySummary(Record):
    """Per-day aggregate for the history view. Read-only, computed from sessions."""

    day: date = Field(alias="date")
    total_minutes: int = 0
    tasks_completed: int = 0
    sessions: list[Session] = Field(default_factory=list)


class TodayStats(Record):
    focus_minutes: int = 0
    tasks_completed: int = 0
