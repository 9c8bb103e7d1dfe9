"""
Root Typer application for the ``adr`` command.

The callback resolves settings and the global options, configures structlog
and hands a :class:`CliState` to every command through ``ctx.obj``.
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError as SettingsError
from typer import Typer

from adrspine.cli.utils import CliState, err_console

app = Typer(
    name="adr",
    help="adr: Architecture Decision Record lifecycle management.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("adr-spine")
        except PackageNotFoundError:
            from adrspine import __version__ as v
        typer.echo(f"adr-spine {v}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    root: Path | None = typer.Option(
        None,
        "--root",
        help="ADR store directory (default: docs/adr under the project root).",
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR (default: ADR_LOG_LEVEL)."
    ),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """adr: create, accept, deprecate and supersede architecture decisions."""
    from adrspine.core.logging import LogContext, configure_logging
    from adrspine.core.settings import get_settings

    try:
        settings = get_settings()
    except SettingsError as exc:
        err_console.print(f"[bold red]Configuration Error:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc

    level = (log_level or settings.log_level).upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        err_console.print(f"[bold red]Error[/bold red]: unknown log level {log_level!r}")
        raise typer.Exit(code=1)
    configure_logging(level=level, json_format=settings.json_logs)

    ctx.obj = CliState(root=root, settings=settings)
    if ctx.invoked_subcommand:
        ctx.with_resource(LogContext(command=ctx.invoked_subcommand))


# ── Command registration ─────────────────────────────────────────────────

from adrspine.cli.config import config  # noqa: E402
from adrspine.cli.decisions import accept, deprecate, list_, new, show, supersede  # noqa: E402
from adrspine.cli.maintenance import index, validate  # noqa: E402

app.command("new")(new)
app.command("accept")(accept)
app.command("deprecate")(deprecate)
app.command("supersede")(supersede)
app.command("list")(list_)
app.command("show")(show)
app.command("validate")(validate)
app.command("index")(index)
app.command("config")(config)


if __name__ == "__main__":
    app()
