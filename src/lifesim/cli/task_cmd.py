"""Task subcommands: list, add, status, link, rm."""

from __future__ import annotations

from typing import Optional

import typer

from lifesim.cli._shared import FORMAT_OPTION, get_store, resolve_goal, resolve_task, short_id
from lifesim.core.schema import TaskStatus, TaskType
from lifesim.utils.config import load_global_config
from lifesim.utils.output import error, info, output, output_table, success

task_app = typer.Typer(no_args_is_help=True)

_STATUS_ORDER = {
    TaskStatus.in_progress: 0,
    TaskStatus.planned: 1,
    TaskStatus.backlog: 2,
    TaskStatus.done: 3,
}


def _parse_enum(enum_cls, value: str, option: str):
    try:
        return enum_cls(value.upper())
    except ValueError:
        valid = ", ".join(m.value for m in enum_cls)
        error(f"Invalid {option}: '{value}'. Valid values: {valid}")
        raise typer.Exit(1)


@task_app.command("list")
def task_list(
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Filter by status"),
    goal: Optional[str] = typer.Option(None, "--goal", "-g", help="Filter by goal id"),
    active: bool = typer.Option(False, "--active", help="Only tasks that are not DONE"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """List tasks, in-progress first."""
    store = get_store()
    if status:
        tasks = store.tasks.by_status(_parse_enum(TaskStatus, status, "status"))
    elif active:
        tasks = store.tasks.active()
    else:
        tasks = store.tasks.list()
    if goal:
        goal_id = resolve_goal(store, goal).id
        tasks = [t for t in tasks if t.goal_arc_id == goal_id]
    tasks.sort(key=lambda t: _STATUS_ORDER[t.status])

    if fmt == "json":
        output(tasks, fmt="json")
        return
    if not tasks:
        info("No tasks. Use `life-sim task add <title>` to create one.")
        return
    goal_titles = {g.id: g.title for g in store.goals.list()}
    active_session = store.engine.get_active_session()
    rows = [
        {
            "id": short_id(t.id),
            "title": t.title + (" *" if active_session and active_session.task_id == t.id else ""),
            "type": t.type.value,
            "status": t.status.value,
            "goal": goal_titles.get(t.goal_arc_id, t.goal_arc_id),
        }
        for t in tasks
    ]
    output_table(rows, columns=["id", "title", "type", "status", "goal"])


@task_app.command("add")
def task_add(
    title: str = typer.Argument(..., help="Task title"),
    type: Optional[str] = typer.Option(None, "--type", "-t", help="MAIN, SIDE, DAILY or MAINTENANCE"),
    goal: Optional[str] = typer.Option(None, "--goal", "-g", help="Goal id to link"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Quick-add a PLANNED task."""
    store = get_store()
    type_value = type or load_global_config().get("default_task_type") or TaskType.side.value
    task_type = _parse_enum(TaskType, type_value, "type")
    goal_id = resolve_goal(store, goal).id if goal else None
    task = store.tasks.quick_add(title, task_type, goal_id)
    if fmt == "json":
        output(task, fmt="json")
    else:
        success(f'Created task "{task.title}" ({short_id(task.id)})')


@task_app.command("status")
def task_status(
    task_ref: str = typer.Argument(..., help="Task id (or unique prefix)"),
    status: str = typer.Argument(..., help="BACKLOG, PLANNED, IN_PROGRESS or DONE"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Set the status of a task."""
    store = get_store()
    task = resolve_task(store, task_ref)
    updated = store.tasks.update_status(task.id, _parse_enum(TaskStatus, status, "status"))
    if fmt == "json":
        output(updated, fmt="json")
    else:
        success(f'"{updated.title}" is now {updated.status.value}')


@task_app.command("link")
def task_link(
    task_ref: str = typer.Argument(..., help="Task id (or unique prefix)"),
    goal: Optional[str] = typer.Argument(None, help="Goal id; omit to unlink"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Link a task to a goal, or unlink it."""
    store = get_store()
    task = resolve_task(store, task_ref)
    goal_id = resolve_goal(store, goal).id if goal else None
    updated = store.tasks.link_to_goal(task.id, goal_id)
    if fmt == "json":
        output(updated, fmt="json")
    elif goal_id:
        success(f'Linked "{updated.title}" to goal')
    else:
        success(f'Unlinked "{updated.title}" from goal')


@task_app.command("rm")
def task_rm(
    task_ref: str = typer.Argument(..., help="Task id (or unique prefix)"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Delete a task."""
    store = get_store()
    task = resolve_task(store, task_ref)
    store.tasks.delete(task.id)
    if fmt == "json":
        output({"id": task.id, "status": "removed"}, fmt="json")
    else:
        success(f'Deleted task "{task.title}"')
