"""Operation vocabulary: the mutations an assistant or importer may request.

Each operation is ``{"type": <variant>, "payload": {...}}``. Payload fields are
camelCase on the wire. Optional fields with unusable values (an unknown task
type, an unparseable date, a negative estimate) are coerced to absent instead
of failing the whole operation; required fields are strict.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from lifesim.core.schema import TaskStatus, TaskType

RequiredText = Annotated[str, Field(min_length=1, strict=True)]


def _optional_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _optional_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _optional_minutes(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if math.isfinite(value) and value >= 0 else None


def _optional_enum(enum_cls: type, value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return None


class Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def changes(self, *exclude: str) -> dict[str, Any]:
        """Fields that were given a value, snake_case, minus the excluded keys."""
        return self.model_dump(exclude_none=True, exclude=set(exclude))


class _TaskFields(Payload):
    description: str | None = None
    type: TaskType | None = None
    status: TaskStatus | None = None
    estimated_minutes: float | None = None
    due_date: date | None = None

    _text = field_validator("description", mode="before")(_optional_text)
    _due = field_validator("due_date", mode="before")(_optional_date)
    _minutes = field_validator("estimated_minutes", mode="before")(_optional_minutes)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> TaskType | None:
        return _optional_enum(TaskType, value)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> TaskStatus | None:
        return _optional_enum(TaskStatus, value)


# -- Payloads --


class CreateGoalPayload(Payload):
    title: RequiredText
    description: str | None = None
    target_date: date | None = None

    _text = field_validator("description", mode="before")(_optional_text)
    _target = field_validator("target_date", mode="before")(_optional_date)


class UpdateGoalPayload(Payload):
    goal_id: RequiredText
    title: str | None = None
    description: str | None = None
    target_date: date | None = None
    is_active: bool | None = None

    _text = field_validator("title", "description", mode="before")(_optional_text)
    _target = field_validator("target_date", mode="before")(_optional_date)

    @field_validator("is_active", mode="before")
    @classmethod
    def _coerce_active(cls, value: Any) -> bool | None:
        return value if isinstance(value, bool) else None


class DeleteGoalPayload(Payload):
    goal_id: RequiredText


class CreateTaskPayload(_TaskFields):
    title: RequiredText
    goal_arc_id: str | None = None

    _goal = field_validator("goal_arc_id", mode="before")(_optional_text)


class UpdateTaskPayload(_TaskFields):
    task_id: RequiredText
    title: str | None = None

    _title = field_validator("title", mode="before")(_optional_text)


class DeleteTaskPayload(Payload):
    task_id: RequiredText


class LinkTaskToGoalPayload(Payload):
    task_id: RequiredText
    goal_arc_id: Annotated[str, Field(strict=True)] | None = None

    @field_validator("goal_arc_id", mode="before")
    @classmethod
    def _empty_is_unlink(cls, value: Any) -> Any:
        return None if value == "" else value


class SuggestTodayTasksPayload(Payload):
    task_ids: list[str]
    reason: str | None = None

    _reason = field_validator("reason", mode="before")(_optional_text)

    @field_validator("task_ids", mode="before")
    @classmethod
    def _only_strings(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [item for item in value if isinstance(item, str)]
        return value


# -- Operations --


class CreateGoal(BaseModel):
    type: Literal["CREATE_GOAL"] = "CREATE_GOAL"
    payload: CreateGoalPayload


class UpdateGoal(BaseModel):
    type: Literal["UPDATE_GOAL"] = "UPDATE_GOAL"
    payload: UpdateGoalPayload


class DeleteGoal(BaseModel):
    type: Literal["DELETE_GOAL"] = "DELETE_GOAL"
    payload: DeleteGoalPayload


class CreateTask(BaseModel):
    type: Literal["CREATE_TASK"] = "CREATE_TASK"
    payload: CreateTaskPayload


class UpdateTask(BaseModel):
    type: Literal["UPDATE_TASK"] = "UPDATE_TASK"
    payload: UpdateTaskPayload


class DeleteTask(BaseModel):
    type: Literal["DELETE_TASK"] = "DELETE_TASK"
    payload: DeleteTaskPayload


class LinkTaskToGoal(BaseModel):
    type: Literal["LINK_TASK_TO_GOAL"] = "LINK_TASK_TO_GOAL"
    payload: LinkTaskToGoalPayload


class SuggestTodayTasks(BaseModel):
    type: Literal["SUGGEST_TODAY_TASKS"] = "SUGGEST_TODAY_TASKS"
    payload: SuggestTodayTasksPayload


AssistantOperation = Annotated[
    Union[
        CreateGoal,
        UpdateGoal,
        DeleteGoal,
        CreateTask,
        UpdateTask,
        DeleteTask,
        LinkTaskToGoal,
        SuggestTodayTasks,
    ],
    Field(discriminator="type"),
]

operation_adapter: TypeAdapter[AssistantOperation] = TypeAdapter(AssistantOperation)


def dump_operation(op: AssistantOperation) -> dict[str, Any]:
    """Wire form of an operation: camelCase payload, absent fields omitted.

    ``goalArcId: null`` is kept on LINK_TASK_TO_GOAL since null means unlink.
    """
    data = op.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(op, LinkTaskToGoal):
        data["payload"].setdefault("goalArcId", None)
    return data
