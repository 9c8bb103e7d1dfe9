"""
Request-scoped context for operations.

Every operation function receives an :class:`OperationContext` as its first
argument. The context carries the Document Store, the clock that supplies
"today", caller identity, the dry-run flag and arbitrary metadata.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from adrspine.core.clock import Clock, SystemClock
from adrspine.core.settings import AdrSettings
from adrspine.core.store import DocumentStore


@dataclass
class OperationContext:
    """Context passed to every operation function.

    Attributes:
        store: The Document Store operations act on.
        clock: Source of transition and creation dates.
        request_id: Unique ID for this operation invocation (auto-generated).
        caller: Origin of the request: ``"cli"``, ``"sdk"`` or ``"test"``.
        dry_run: When ``True``, operations return a preview without writing.
        default_deciders: Deciders used when a new decision names none.
        metadata: Arbitrary key/value pairs forwarded to logging.
    """

    store: DocumentStore
    clock: Clock = field(default_factory=SystemClock)
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    dry_run: bool = False
    default_deciders: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_settings(
        cls,
        settings: AdrSettings,
        *,
        root: Path | None = None,
        clock: Clock | None = None,
        caller: str = "sdk",
        dry_run: bool = False,
    ) -> OperationContext:
        """Build a context whose store is configured from *settings*.

        *root* overrides ``settings.root``; relative paths are taken as given
        (relative to the working directory).
        """
        clock = clock or SystemClock()
        store = DocumentStore(
            root if root is not None else settings.resolve_root(),
            extension=settings.extension,
            index_name=settings.index_name,
            clock=clock,
        )
        return cls(
            store=store,
            clock=clock,
            caller=caller,
            dry_run=dry_run,
            default_deciders=list(settings.default_deciders),
        )
