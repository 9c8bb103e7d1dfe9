"""
Shared pytest fixtures for adr-spine tests.

This module provides:
- A temporary Document Store on ``tmp_path`` with a pinned clock
- Factories for creating decisions in a given lifecycle state
- Helpers for writing hand-crafted (possibly broken) document files
- Environment isolation for ``ADR_*`` settings
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from adrspine.core.clock import FixedClock
from adrspine.core.lifecycle import LifecycleEngine
from adrspine.core.models import AdrDocument, DocumentDefaults, Partition
from adrspine.core.settings import clear_settings_cache
from adrspine.core.store import DocumentStore
from tests._support.documents import TODAY


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        markers = {mark.name for mark in item.iter_markers()}
        if markers.intersection({"unit", "integration"}):
            continue
        if test_path.parts[0] == "cli":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Environment isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch):
    """Drop ADR_* variables and the settings cache around every test."""
    for key in list(os.environ):
        if key.startswith("ADR_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Store fixtures
# =============================================================================


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to 2026-10-17."""
    return FixedClock(TODAY)


@pytest.fixture
def store(tmp_path: Path, clock: FixedClock) -> DocumentStore:
    """Empty store with all four partitions created."""
    s = DocumentStore(tmp_path / "adr", clock=clock)
    s.ensure_layout()
    return s


@pytest.fixture
def engine(store: DocumentStore, clock: FixedClock) -> LifecycleEngine:
    return LifecycleEngine(store, clock=clock)


COMPLETE = DocumentDefaults(
    deciders=("Alice", "Bob"),
    tags=frozenset({"architecture"}),
    impact="All bounded contexts",
)


@pytest.fixture
def proposed(store: DocumentStore):
    """Factory: ``proposed("slug", **defaults) -> AdrDocument`` (metadata complete)."""

    def _create(slug: str, **overrides) -> AdrDocument:
        fields = {
            "deciders": COMPLETE.deciders,
            "tags": COMPLETE.tags,
            "impact": COMPLETE.impact,
            **overrides,
        }
        return store.create(slug, DocumentDefaults(**fields))

    return _create


@pytest.fixture
def accepted(proposed, engine: LifecycleEngine):
    """Factory: create a decision and accept it."""

    def _create(slug: str, **overrides) -> AdrDocument:
        doc = proposed(slug, **overrides)
        return engine.accept(doc.id).unwrap().document

    return _create


@pytest.fixture
def write_raw(store: DocumentStore):
    """Write a hand-crafted file: ``write_raw(Partition.ACCEPTED, "ADR-0004-x.md", text)``."""

    def _write(partition: Partition, name: str, text: str) -> Path:
        path = store.partition_dir(partition) / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
