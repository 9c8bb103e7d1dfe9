"""adr-spine CLI: the ``adr`` command (Typer + rich)."""

from adrspine.cli.app import app

__all__ = ["app"]
