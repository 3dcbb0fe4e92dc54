"""Focus subcommands (start, pause, done, stop) and the history view."""

from __future__ import annotations

from typing import Optional

import typer

from lifesim.cli._shared import FORMAT_OPTION, get_store, resolve_task
from lifesim.core.storage import StoreError
from lifesim.utils.output import error, info, output, output_table, success

focus_app = typer.Typer(no_args_is_help=True)


@focus_app.command("start")
def focus_start(
    task_ref: str = typer.Argument(..., help="Task id (or unique prefix)"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Start working on a task. Any running session is ended first."""
    store = get_store()
    task = resolve_task(store, task_ref)
    try:
        session = store.focus.start_task(task.id)
    except StoreError as e:
        error(str(e))
        raise typer.Exit(1)
    if fmt == "json":
        output(session, fmt="json")
    else:
        success(f'Started "{task.title}"')


@focus_app.command("pause")
def focus_pause(
    task_ref: str = typer.Argument(..., help="Task id (or unique prefix)"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """End the task's session and put it back to PLANNED."""
    store = get_store()
    task = resolve_task(store, task_ref)
    ended = store.focus.pause_task(task.id)
    if fmt == "json":
        output({"task": task.id, "session": ended}, fmt="json")
    elif ended is not None:
        success(f'Paused "{task.title}" after {ended.duration_minutes} min')
    else:
        info(f'"{task.title}" had no running session; set back to PLANNED')


@focus_app.command("done")
def focus_done(
    task_ref: str = typer.Argument(..., help="Task id (or unique prefix)"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Complete a task, ending its session if it is the active one."""
    store = get_store()
    task = resolve_task(store, task_ref)
    updated = store.focus.complete_task(task.id)
    if fmt == "json":
        output(updated, fmt="json")
    else:
        success(f'Completed "{updated.title}"')


@focus_app.command("stop")
def focus_stop(fmt: Optional[str] = FORMAT_OPTION) -> None:
    """End the active session, whatever task it belongs to."""
    store = get_store()
    ended = store.engine.end_active_session()
    if fmt == "json":
        output({"session": ended}, fmt="json")
    elif ended is None:
        info("No active session")
    else:
        success(f"Session ended after {ended.duration_minutes} min")


def history_command(
    limit: int = typer.Option(14, "--limit", "-n", min=1, help="Number of days to show"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Focused minutes per day, most recent first."""
    store = get_store()
    days = store.engine.get_sessions_by_day()[:limit]
    if fmt == "json":
        output(days, fmt="json")
        return
    if not days:
        info("No sessions recorded yet")
        return
    rows = [
        {
            "date": d.day.isoformat(),
            "minutes": d.total_minutes,
            "tasks": d.tasks_completed,
            "sessions": len(d.sessions),
        }
        for d in days
    ]
    output_table(rows, columns=["date", "minutes", "tasks", "sessions"])
