"""Fixtures for end-to-end tests through the ``adr`` Typer app."""

from __future__ import annotations

from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from adrspine.cli.app import app


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def adr_root(tmp_path: Path) -> Path:
    return tmp_path / "adr"


@pytest.fixture
def invoke(adr_root: Path):
    """Run ``adr --root <tmp> <args...>`` and return the click Result."""
    runner = CliRunner()

    def _invoke(*args: str):
        return runner.invoke(app, ["--root", str(adr_root), *args])

    return _invoke


@pytest.fixture
def new_adr(invoke):
    """Create a decision through the CLI and return its id."""

    def _new(title: str, *extra: str) -> str:
        result = invoke("new", title, "--decider", "Alice", "--tag", "architecture",
                        "--impact", "All services", *extra)
        assert result.exit_code == 0, result.output
        return result.stdout.splitlines()[0]

    return _new
