"""
CLI utility helpers: output formatting, exit codes and context construction.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, is_dataclass
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from adrspine.core.settings import AdrSettings, get_settings
from adrspine.ops.context import OperationContext
from adrspine.ops.result import OperationResult

console = Console()
err_console = Console(stderr=True)


# ── Context helpers ──────────────────────────────────────────────────────


@dataclass
class CliState:
    """Global options captured by the root callback."""

    root: Path | None = None
    settings: AdrSettings | None = None


def get_state(ctx: typer.Context | None) -> CliState:
    if ctx is not None and isinstance(ctx.obj, CliState):
        return ctx.obj
    return CliState()


def make_context(
    ctx: typer.Context | None = None,
    *,
    dry_run: bool = False,
) -> OperationContext:
    """Create an ``OperationContext`` for a CLI command from the global options."""
    state = get_state(ctx)
    settings = state.settings or get_settings()
    return OperationContext.from_settings(
        settings, root=state.root, caller="cli", dry_run=dry_run
    )


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Response dataclasses become dicts; anything else is shown as a single value."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def print_warnings(result: OperationResult) -> None:
    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")


def fail(result: OperationResult) -> None:
    """Print the error of a failed result and exit with its code."""
    err = result.error
    msg = err.message if err else "Unknown error"
    code = err.code if err else "ERROR"
    err_console.print(f"[bold red]Error[/bold red] ({code}): {escape(msg)}")
    raise typer.Exit(code=err.exit_code if err else 1)


def output_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def output_result(
    result: OperationResult,
    *,
    as_json: bool = False,
    title: str = "",
    empty: str = "No items.",
) -> None:
    """Render an ``OperationResult`` to the terminal, exiting non-zero on failure."""
    print_warnings(result)
    if not result.success:
        fail(result)

    data = result.data

    if as_json:
        payload = _to_dict(data) if not isinstance(data, list | tuple) else [_to_dict(d) for d in data]
        output_json(payload)
        return

    if isinstance(data, list):
        if not data:
            console.print(f"[dim]{empty}[/dim]")
            return
        _print_table(data, title=title)
    else:
        _print_dict(_to_dict(data), title=title)


# ── Private helpers ──────────────────────────────────────────────────────


def _print_table(items: list, *, title: str = "") -> None:
    """One row per item, columns taken from the first item."""
    first = _to_dict(items[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in first:
        table.add_column(col, overflow="fold")
    for item in items:
        d = _to_dict(item)
        table.add_row(*(_cell(v) for v in d.values()))
    console.print(table)


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """One ``key: value`` line per field, as used by ``adr show``."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {_cell(v)}")


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, list | tuple):
        return escape(", ".join(str(v) for v in value)) or "-"
    return escape(str(value))
