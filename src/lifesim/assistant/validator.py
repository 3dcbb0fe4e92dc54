"""Validation of untrusted operations and of the model's response envelopes.

``validate_operation`` never raises: it returns ``Accepted`` with a typed
operation or ``Rejected`` with the reason. Envelope parsers drop rejected
operations, keep the rest, and fall back to a safe reply when the content is
not usable at all.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

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
    dump_operation,
    operation_adapter,
)

logger = logging.getLogger(__name__)

APOLOGY = (
    "I apologize, but I encountered an issue processing that request. "
    "Could you try rephrasing?"
)
MAX_RAW_FALLBACK = 500

IMPORT_TYPES = ("CREATE_GOAL", "CREATE_TASK")


@dataclass
class ValidationContext:
    """Ids of the goals and tasks that operations may reference."""

    goal_ids: set[str] = field(default_factory=set)
    task_ids: set[str] = field(default_factory=set)

    @classmethod
    def from_request(cls, context: dict[str, Any] | None) -> ValidationContext:
        """Build from a request ``context`` object (``{goals: [...], tasks: [...]}``)."""
        context = context or {}

        def _ids(items: Any) -> set[str]:
            if not isinstance(items, list):
                return set()
            return {
                item["id"] for item in items if isinstance(item, dict) and isinstance(item.get("id"), str)
            }

        return cls(goal_ids=_ids(context.get("goals")), task_ids=_ids(context.get("tasks")))

    @classmethod
    def from_store(cls, store) -> ValidationContext:
        return cls(
            goal_ids={g.id for g in store.goals.list()},
            task_ids={t.id for t in store.tasks.list()},
        )


@dataclass
class Accepted:
    operation: AssistantOperation


@dataclass
class Rejected:
    raw: Any
    reason: str


ValidationResult = Accepted | Rejected


def _decode(raw: Any, allowed: tuple[str, ...] | None = None) -> ValidationResult:
    if not isinstance(raw, dict) or "type" not in raw or "payload" not in raw:
        return Rejected(raw, "not an object with type and payload")
    if allowed is not None and raw["type"] not in allowed:
        return Rejected(raw, f"operation type {raw['type']!r} not allowed here")
    try:
        return Accepted(operation_adapter.validate_python(raw))
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(part) for part in first["loc"])
        return Rejected(raw, f"{where}: {first['msg']}")


def validate_operation(raw: Any, context: ValidationContext) -> ValidationResult:
    """Decode one operation and check its references against ``context``."""
    decoded = _decode(raw)
    if isinstance(decoded, Rejected):
        return decoded
    op = decoded.operation
    p = op.payload

    if isinstance(op, (UpdateGoal, DeleteGoal)):
        if p.goal_id not in context.goal_ids:
            return Rejected(raw, f"goal not found: {p.goal_id}")
    elif isinstance(op, CreateTask):
        # An unknown goal reference is dropped, the task is still created.
        if p.goal_arc_id is not None and p.goal_arc_id not in context.goal_ids:
            logger.info("Dropping unknown goalArcId %r from CREATE_TASK", p.goal_arc_id)
            p.goal_arc_id = None
    elif isinstance(op, (UpdateTask, DeleteTask)):
        if p.task_id not in context.task_ids:
            return Rejected(raw, f"task not found: {p.task_id}")
    elif isinstance(op, LinkTaskToGoal):
        if p.task_id not in context.task_ids:
            return Rejected(raw, f"task not found: {p.task_id}")
        # Unlike CREATE_TASK, an unknown goal rejects the whole link.
        if p.goal_arc_id is not None and p.goal_arc_id not in context.goal_ids:
            return Rejected(raw, f"goal not found: {p.goal_arc_id}")
    elif isinstance(op, SuggestTodayTasks):
        p.task_ids = [task_id for task_id in p.task_ids if task_id in context.task_ids]
        if not p.task_ids:
            return Rejected(raw, "no known task ids to suggest")
    return decoded


def validate_import_operation(raw: Any) -> ValidationResult:
    """Structural check only: CREATE_GOAL and CREATE_TASK, placeholders kept."""
    return _decode(raw, allowed=IMPORT_TYPES)


# -- Envelopes --


@dataclass
class AssistantReply:
    assistant_message: str
    operations: list[AssistantOperation] = field(default_factory=list)
    rejected: list[Rejected] = field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        return {
            "assistantMessage": self.assistant_message,
            "operations": [dump_operation(op) for op in self.operations],
        }


@dataclass
class ImportReply:
    summary: str
    operations: list[AssistantOperation] = field(default_factory=list)
    rejected: list[Rejected] = field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "operations": [dump_operation(op) for op in self.operations],
        }


def _collect(items: Any, check) -> tuple[list[AssistantOperation], list[Rejected]]:
    accepted: list[AssistantOperation] = []
    rejected: list[Rejected] = []
    if not isinstance(items, list):
        return accepted, rejected
    for raw in items:
        result = check(raw)
        if isinstance(result, Accepted):
            accepted.append(result.operation)
        else:
            logger.info("Dropping operation: %s", result.reason)
            rejected.append(result)
    return accepted, rejected


def parse_assistant_response(content: str, context: ValidationContext) -> AssistantReply:
    """Parse ``{assistantMessage, operations}`` from model output. Never raises."""
    try:
        parsed = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        parsed = None
    if not isinstance(parsed, dict) or not isinstance(parsed.get("assistantMessage"), str):
        logger.warning("Unusable assistant response, falling back: %.200s", content)
        text = content if isinstance(content, str) and len(content) <= MAX_RAW_FALLBACK else APOLOGY
        return AssistantReply(assistant_message=text)

    operations, rejected = _collect(
        parsed.get("operations"), lambda raw: validate_operation(raw, context)
    )
    return AssistantReply(
        assistant_message=parsed["assistantMessage"], operations=operations, rejected=rejected
    )


def parse_import_response(content: str) -> ImportReply:
    """Parse ``{summary, operations}`` from model output. Never raises."""
    try:
        parsed = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        parsed = None
    if not isinstance(parsed, dict):
        logger.warning("Unusable import response: %.200s", content)
        return ImportReply(summary="Failed to parse data")

    operations, rejected = _collect(parsed.get("operations"), validate_import_operation)
    summary = parsed.get("summary")
    return ImportReply(
        summary=summary if isinstance(summary, str) and summary else "Data processed",
        operations=operations,
        rejected=rejected,
    )
