"""MCP server exposing the life-sim store as resources and tools."""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from lifesim.assistant.executor import OperationExecutor, summarize_results
from lifesim.assistant.importer import ImportExecutor
from lifesim.assistant.operations import dump_operation
from lifesim.assistant.validator import (
    Accepted,
    ValidationContext,
    validate_import_operation,
    validate_operation,
)
from lifesim.core.storage import StoreError
from lifesim.core.store import LifeStore
from lifesim.utils.paths import find_data_root

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "life-sim",
    instructions=(
        "Life Sim tracks goal arcs, tasks and focus sessions. "
        "Read resources for the current state and use tools to change it."
    ),
)

_store: LifeStore | None = None


def _get_store() -> LifeStore:
    """Return the module-level store, opening it from the data root if needed."""
    global _store
    if _store is None:
        root = find_data_root()
        if root is None:
            raise RuntimeError("No life-sim store found (run `life-sim init` or set LIFE_SIM_HOME)")
        _store = LifeStore.at(root)
    return _store


def set_store(store: LifeStore | None) -> None:
    """Override the module-level store (used in tests)."""
    global _store
    _store = store


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


# ---------------------------------------------------------------------------
# Resources (read-only)
# ---------------------------------------------------------------------------


@mcp.resource("lifesim://goals")
def resource_goals() -> str:
    """All goal arcs."""
    return _dumps([g.to_json_dict() for g in _get_store().goals.list()])


@mcp.resource("lifesim://tasks")
def resource_tasks() -> str:
    """All tasks."""
    return _dumps([t.to_json_dict() for t in _get_store().tasks.list()])


@mcp.resource("lifesim://history")
def resource_history() -> str:
    """Focus minutes per day, most recent first."""
    days = _get_store().engine.get_sessions_by_day()
    return _dumps([d.model_dump(mode="json", by_alias=True, exclude_none=True) for d in days])


@mcp.resource("lifesim://today")
def resource_today() -> str:
    """Today's progress and the active session."""
    return _dumps(_get_store().summary())


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool()
def lifesim_apply_operations(operations: list[dict]) -> str:
    """Validate assistant operations against the store and apply them.

    Each operation is ``{"type": ..., "payload": {...}}`` using the same
    types as the HTTP assistant endpoint. Invalid ones are skipped and
    reported under ``rejected``.
    """
    store = _get_store()
    context = ValidationContext.from_store(store)
    accepted = []
    rejected = []
    for raw in operations:
        checked = validate_operation(raw, context)
        if isinstance(checked, Accepted):
            accepted.append(checked.operation)
        else:
            rejected.append({"operation": raw, "reason": checked.reason})

    results = OperationExecutor(store).execute_all(accepted)
    return _dumps({
        "results": [
            {"success": r.success, "message": r.message, "operation": dump_operation(r.operation)}
            for r in results
        ],
        "rejected": rejected,
        "summary": summarize_results(results),
    })


@mcp.tool()
def lifesim_import_operations(operations: list[dict]) -> str:
    """Create goals and tasks in one batch.

    Only CREATE_GOAL and CREATE_TASK are accepted. A task may reference the
    n-th goal of the batch as ``TEMP_GOAL_<n>`` in ``goalArcId``.
    """
    accepted = []
    rejected = []
    for raw in operations:
        checked = validate_import_operation(raw)
        if isinstance(checked, Accepted):
            accepted.append(checked.operation)
        else:
            rejected.append({"operation": raw, "reason": checked.reason})

    result = ImportExecutor(_get_store()).execute(accepted)
    return _dumps({
        "goalsCreated": result.goals_created,
        "tasksCreated": result.tasks_created,
        "errors": result.errors,
        "rejected": rejected,
    })


@mcp.tool()
def lifesim_start_task(task_id: str) -> str:
    """Start a focus session on a task, ending any other running session."""
    try:
        session = _get_store().focus.start_task(task_id)
    except StoreError as e:
        return json.dumps({"error": str(e)})
    return _dumps({"status": "started", "session": session.to_json_dict()})


@mcp.tool()
def lifesim_pause_task(task_id: str) -> str:
    """End the task's running session and set it back to PLANNED."""
    try:
        ended = _get_store().focus.pause_task(task_id)
    except StoreError as e:
        return json.dumps({"error": str(e)})
    return _dumps({"status": "paused", "session": ended.to_json_dict() if ended else None})


@mcp.tool()
def lifesim_complete_task(task_id: str) -> str:
    """Mark a task DONE, ending its session if it is running."""
    try:
        task = _get_store().focus.complete_task(task_id)
    except StoreError as e:
        return json.dumps({"error": str(e)})
    return _dumps({"status": "done", "task": task.to_json_dict()})


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """Run the MCP server on stdio."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
