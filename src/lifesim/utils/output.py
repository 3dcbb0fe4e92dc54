"""Output formatting: JSON when piped or asked for, rich text otherwise."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console()
error_console = Console(stderr=True)


def is_piped() -> bool:
    return not sys.stdout.isatty()


def _jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(data, list):
        return [_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {key: _jsonable(value) for key, value in data.items()}
    return data


def output(data: Any, fmt: str | None = None) -> None:
    """Print data as JSON or text. If fmt is None: json when piped, text on a TTY."""
    if fmt is None:
        fmt = "json" if is_piped() else "text"

    if fmt == "json":
        if isinstance(data, str):
            print(json.dumps({"value": data}))
        else:
            print(json.dumps(_jsonable(data), indent=2, default=str))
    elif isinstance(data, str):
        console.print(data)
    else:
        console.print_json(json.dumps(_jsonable(data), default=str))


def output_table(
    rows: list[dict[str, Any]], columns: list[str], fmt: str | None = None, title: str | None = None
) -> None:
    if fmt is None:
        fmt = "json" if is_piped() else "text"

    if fmt == "json":
        print(json.dumps(rows, indent=2, default=str))
    else:
        table = Table(title=title)
        for col in columns:
            table.add_column(col.replace("_", " ").title())
        for row in rows:
            table.add_row(*[str(row.get(col) if row.get(col) is not None else "") for col in columns])
        console.print(table)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def error(msg: str) -> None:
    error_console.print(f"[red]Error:[/red] {msg}")


def success(msg: str) -> None:
    console.print(f"[green]{msg}[/green]")


def info(msg: str) -> None:
    console.print(f"[dim]{msg}[/dim]")
