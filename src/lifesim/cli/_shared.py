"""Shared CLI utilities to avoid circular imports."""

from __future__ import annotations

import typer

from lifesim.core.schema import GoalArc, Task
from lifesim.core.storage import StoreError
from lifesim.core.store import LifeStore
from lifesim.utils.output import error
from lifesim.utils.paths import find_data_root

FORMAT_OPTION = typer.Option(None, "--format", "-F", help="Output format: json or text")


def get_store() -> LifeStore:
    """Resolve the data root and return a LifeStore."""
    root = find_data_root()
    if root is None:
        error("No life-sim store found (run `life-sim init` or set LIFE_SIM_HOME)")
        raise typer.Exit(1)
    try:
        return LifeStore.at(root)
    except StoreError as e:
        error(str(e))
        raise typer.Exit(1)


def _match(records: list, ref: str, kind: str):
    exact = [r for r in records if r.id == ref]
    if exact:
        return exact[0]
    prefixed = [r for r in records if r.id.startswith(ref)]
    if len(prefixed) == 1:
        return prefixed[0]
    if len(prefixed) > 1:
        error(f"Ambiguous {kind} id '{ref}' ({len(prefixed)} matches)")
    else:
        error(f"{kind.capitalize()} '{ref}' not found")
    raise typer.Exit(1)


def resolve_goal(store: LifeStore, ref: str) -> GoalArc:
    """Find a goal by id or unique id prefix, or exit."""
    return _match(store.goals.list(), ref, "goal")


def resolve_task(store: LifeStore, ref: str) -> Task:
    """Find a task by id or unique id prefix, or exit."""
    return _match(store.tasks.list(), ref, "task")


def short_id(record_id: str) -> str:
    return record_id[:8]
