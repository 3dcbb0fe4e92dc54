"""Typer app: top-level command groups and root commands (init, status, serve)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import typer

from lifesim.cli._shared import FORMAT_OPTION, get_store
from lifesim.core.avatar import get_avatar_emoji, get_avatar_message, get_avatar_state
from lifesim.core.store import LifeStore
from lifesim.core.storage import StoreError
from lifesim.utils.output import configure_logging, error, output, success
from lifesim.utils.paths import HOME_ENV, STORE_DIR

app = typer.Typer(
    name="life-sim",
    help="Life Sim: goals, tasks and focus sessions, with an AI assistant.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr"),
) -> None:
    configure_logging(verbose)


@app.command()
def init(fmt: Optional[str] = FORMAT_OPTION) -> None:
    """Create the .life-sim data directory here (or in $LIFE_SIM_HOME)."""
    override = os.environ.get(HOME_ENV)
    root = Path(override).expanduser() if override else Path.cwd()
    try:
        LifeStore.init(root)
    except StoreError as e:
        error(str(e))
        raise typer.Exit(1)
    store_dir = root.resolve() / STORE_DIR
    if fmt == "json":
        output({"path": str(store_dir), "status": "initialized"}, fmt="json")
    else:
        success(f"Initialized life-sim store at {store_dir}")


@app.command()
def status(fmt: Optional[str] = FORMAT_OPTION) -> None:
    """Avatar, today's progress and store counts."""
    store = get_store()
    summary_data = store.summary()
    state = get_avatar_state(store.engine.get_active_session())
    summary_data["avatar"] = state.value

    if fmt == "json":
        output(summary_data, fmt="json")
        return

    from rich.panel import Panel
    from lifesim.utils.output import console

    console.print(Panel(f"{get_avatar_emoji(state)}  [bold]{get_avatar_message(state)}[/bold]", title="Life Sim"))
    if summary_data["active_task"]:
        console.print(f"  Working on: {summary_data['active_task']}")
    console.print(f"  Focus today: {summary_data['focus_minutes_today']} min")
    console.print(f"  Completed today: {summary_data['tasks_completed_today']}")
    console.print(f"  Goals: {summary_data['goal_count']} ({summary_data['active_goal_count']} active)")
    console.print(f"  Tasks: {summary_data['task_count']} ({summary_data['open_task_count']} open)")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
) -> None:
    """Run the assistant HTTP API."""
    import uvicorn

    uvicorn.run("lifesim.api.app:app", host=host, port=port)


# Register subcommand groups
from lifesim.cli.goal_cmd import goal_app
from lifesim.cli.task_cmd import task_app
from lifesim.cli.focus_cmd import focus_app, history_command
from lifesim.cli.assistant_cmd import assistant_app
from lifesim.cli.config_cmd import config_app

app.add_typer(goal_app, name="goal", help="Manage goal arcs")
app.add_typer(task_app, name="task", help="Manage tasks")
app.add_typer(focus_app, name="focus", help="Start, pause and finish focus sessions")
app.add_typer(assistant_app, name="assistant", help="Talk to the AI assistant")
app.add_typer(config_app, name="config", help="Manage global configuration")

app.command("history")(history_command)
