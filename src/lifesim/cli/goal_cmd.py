"""Goal subcommands: list, show, add, update, rm."""

from __future__ import annotations

from datetime import date
from typing import Optional

import typer

from lifesim.cli._shared import FORMAT_OPTION, get_store, resolve_goal, short_id
from lifesim.utils.output import console, error, info, output, output_table, success

goal_app = typer.Typer(no_args_is_help=True)


def parse_date(value: str | None, option: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        error(f"Invalid date for {option}: '{value}' (expected YYYY-MM-DD)")
        raise typer.Exit(1)


@goal_app.command("list")
def goal_list(
    active: bool = typer.Option(False, "--active", help="Only active goals"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """List goals."""
    store = get_store()
    goals = store.goals.active() if active else store.goals.list()
    if fmt == "json":
        output(goals, fmt="json")
        return
    if not goals:
        info("No goals yet. Use `life-sim goal add <title>` to create one.")
        return
    rows = []
    for g in goals:
        tasks = store.tasks.by_goal(g.id)
        done = sum(1 for t in tasks if t.is_done)
        rows.append({
            "id": short_id(g.id),
            "title": g.title,
            "target": g.target_date,
            "progress": f"{done}/{len(tasks)}",
            "active": "yes" if g.is_active else "no",
        })
    output_table(rows, columns=["id", "title", "target", "progress", "active"])


@goal_app.command("show")
def goal_show(
    goal_ref: str = typer.Argument(..., help="Goal id (or unique prefix)"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Show a goal and its tasks."""
    store = get_store()
    goal = resolve_goal(store, goal_ref)
    tasks = store.tasks.by_goal(goal.id)
    if fmt == "json":
        output({"goal": goal, "tasks": tasks}, fmt="json")
        return
    console.print(f"[bold]{goal.title}[/bold]  ({goal.id})")
    if goal.description:
        console.print(f"  {goal.description}")
    console.print(f"  Target: {goal.target_date or '(none)'}")
    console.print(f"  Active: {'yes' if goal.is_active else 'no'}")
    if tasks:
        console.print("  Tasks:")
        for t in tasks:
            console.print(f"    [{t.status.value}] {t.title} ({short_id(t.id)})")


@goal_app.command("add")
def goal_add(
    title: str = typer.Argument(..., help="Goal title"),
    description: str = typer.Option("", "--description", "-d", help="Goal description"),
    target_date: Optional[str] = typer.Option(None, "--target-date", "-t", help="Target date YYYY-MM-DD"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Create a goal."""
    store = get_store()
    goal = store.goals.upsert(
        title=title,
        description=description,
        target_date=parse_date(target_date, "--target-date"),
    )
    if fmt == "json":
        output(goal, fmt="json")
    else:
        success(f'Created goal "{goal.title}" ({short_id(goal.id)})')


@goal_app.command("update")
def goal_update(
    goal_ref: str = typer.Argument(..., help="Goal id (or unique prefix)"),
    title: Optional[str] = typer.Option(None, "--title", help="New title"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New description"),
    target_date: Optional[str] = typer.Option(None, "--target-date", "-t", help="New target date"),
    active: Optional[bool] = typer.Option(None, "--active/--inactive", help="Mark active or inactive"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Update fields of a goal."""
    store = get_store()
    goal = resolve_goal(store, goal_ref)
    changes = {
        "title": title,
        "description": description,
        "target_date": parse_date(target_date, "--target-date"),
        "is_active": active,
    }
    goal = store.goals.upsert(id=goal.id, **{k: v for k, v in changes.items() if v is not None})
    if fmt == "json":
        output(goal, fmt="json")
    else:
        success(f'Updated goal "{goal.title}"')


@goal_app.command("rm")
def goal_rm(
    goal_ref: str = typer.Argument(..., help="Goal id (or unique prefix)"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Delete a goal. Linked tasks keep their reference until unlinked."""
    store = get_store()
    goal = resolve_goal(store, goal_ref)
    store.goals.delete(goal.id)
    orphans = store.tasks.by_goal(goal.id)
    if fmt == "json":
        output({"id": goal.id, "status": "removed", "linked_tasks": len(orphans)}, fmt="json")
    else:
        success(f'Deleted goal "{goal.title}"')
        if orphans:
            info(f"{len(orphans)} task(s) still reference it; use `life-sim task link <id>` to unlink")
