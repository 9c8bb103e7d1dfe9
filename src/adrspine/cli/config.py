"""
CLI: ``adr config``: show the effective configuration.
"""

from __future__ import annotations

import json

import typer
from rich.table import Table

from adrspine.cli.utils import console, get_state, output_json
from adrspine.core.settings import find_project_root, get_settings


def config(
    ctx: typer.Context,
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show the effective configuration (ADR_* environment, .env, --root)."""
    state = get_state(ctx)
    settings = state.settings or get_settings()
    values = settings.model_dump(mode="json")
    values["root"] = str(state.root if state.root is not None else settings.resolve_root())

    if format == "json":
        output_json(values)
        return

    if format == "env":
        for key, value in sorted(values.items()):
            if isinstance(value, list):
                value = json.dumps(value)
            console.print(f"ADR_{key.upper()}={value}", markup=False, highlight=False, soft_wrap=True)
        return

    console.print(f"[bold]Project Root:[/bold] {find_project_root()}")
    table = Table()
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in values.items():
        table.add_row(key, ", ".join(value) if isinstance(value, list) else str(value))
    console.print(table)
