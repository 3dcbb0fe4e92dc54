"""Assistant subcommands: ask (chat with proposed edits) and import (free text)."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import typer

from lifesim.assistant.executor import OperationExecutor, summarize_results
from lifesim.assistant.importer import ImportExecutor
from lifesim.assistant.operations import AssistantOperation, dump_operation
from lifesim.assistant.prompts import context_from_store
from lifesim.assistant.service import ApiError, AssistantService
from lifesim.cli._shared import FORMAT_OPTION, get_store
from lifesim.utils.output import console, error, info, output, success

assistant_app = typer.Typer(no_args_is_help=True)

service_factory = AssistantService


def _describe(op: AssistantOperation) -> str:
    payload = dump_operation(op)["payload"]
    label = payload.get("title") or payload.get("goalId") or payload.get("taskId") or ""
    if op.type == "SUGGEST_TODAY_TASKS":
        label = f"{len(payload['taskIds'])} task(s)"
    return f"{op.type} {label}".rstrip()


def _run(coro):
    try:
        return asyncio.run(coro)
    except ApiError as e:
        error(f"{e.error} (HTTP {e.status_code})")
        raise typer.Exit(1)


def _confirm(operations: list[AssistantOperation], yes: bool) -> bool:
    console.print("Proposed changes:")
    for op in operations:
        console.print(f"  - {_describe(op)}")
    return yes or typer.confirm("Apply these changes?", default=False)


@assistant_app.command("ask")
def assistant_ask(
    message: str = typer.Argument(..., help="Message for the assistant"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Apply proposed changes without asking"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Send a message; show the reply and apply the proposed operations."""
    store = get_store()
    body = {"message": message, "conversationHistory": [], "context": context_from_store(store)}
    reply = _run(service_factory().chat(body))

    if fmt == "json":
        response = reply.to_response()
        if yes and reply.operations:
            results = OperationExecutor(store).execute_all(reply.operations)
            response["results"] = [{"success": r.success, "message": r.message} for r in results]
        output(response, fmt="json")
        return

    console.print(reply.assistant_message)
    if not reply.operations:
        return
    if not _confirm(reply.operations, yes):
        info("No changes applied")
        return
    results = OperationExecutor(store).execute_all(reply.operations)
    for r in results:
        (success if r.success else error)(r.message)
    summary = summarize_results(results)
    if summary:
        info(summary)


@assistant_app.command("import")
def assistant_import(
    file: Optional[str] = typer.Argument(None, help="Text file to import (reads stdin if omitted)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Create without asking"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Turn free text into goals and tasks."""
    if file:
        raw = Path(file).read_text()
    elif not sys.stdin.isatty():
        raw = sys.stdin.read()
    else:
        error("Provide a file or pipe text via stdin")
        raise typer.Exit(1)

    store = get_store()
    reply = _run(service_factory().import_data({"rawData": raw}))

    if fmt == "json":
        response = reply.to_response()
        if yes and reply.operations:
            result = ImportExecutor(store).execute(reply.operations)
            response["result"] = {
                "goalsCreated": result.goals_created,
                "tasksCreated": result.tasks_created,
                "errors": result.errors,
            }
        output(response, fmt="json")
        return

    console.print(reply.summary)
    if not reply.operations:
        info("Nothing to import")
        return
    if not _confirm(reply.operations, yes):
        info("Nothing imported")
        return
    result = ImportExecutor(store).execute(reply.operations)
    success(f"Imported {result.goals_created} goal(s) and {result.tasks_created} task(s)")
    for err in result.errors:
        error(err)
