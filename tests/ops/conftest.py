"""Fixtures for operation tests."""

from __future__ import annotations

from dataclasses import replace

import pytest

from adrspine.core.clock import FixedClock
from adrspine.core.store import DocumentStore
from adrspine.ops.context import OperationContext


@pytest.fixture
def ctx(store: DocumentStore, clock: FixedClock) -> OperationContext:
    return OperationContext(store=store, clock=clock, caller="test", default_deciders=["Alice"])


@pytest.fixture
def dry_ctx(ctx: OperationContext) -> OperationContext:
    return replace(ctx, dry_run=True)
