"""
ID Allocator.

Derives the next decision number from the documents on disk every time it is
asked. There is no counter file to go stale: the filenames across all four
partitions are the only source of truth.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from adrspine.core.errors import ErrorContext, IntegrityError

if TYPE_CHECKING:
    from adrspine.core.store import DocumentStore, StoredFile


def find_duplicate_ids(files: list[StoredFile]) -> dict[int, list[StoredFile]]:
    """Ids carried by more than one file, including one document in two partitions."""
    by_id: dict[int, list[StoredFile]] = defaultdict(list)
    for stored in files:
        by_id[stored.adr_id].append(stored)
    return {adr_id: group for adr_id, group in by_id.items() if len(group) > 1}


class IdAllocator:
    """Hands out ``max(existing ids) + 1``."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def next_id(self) -> int:
        files = self.store.scan()
        duplicates = find_duplicate_ids(files)
        if duplicates:
            adr_id, group = min(duplicates.items())
            locations = ", ".join(f"{f.partition.value}/{f.path.name}" for f in group)
            raise IntegrityError(
                f"ADR-{adr_id:04d} is used by {len(group)} files ({locations}); "
                "resolve the duplicate before creating new decisions",
                context=ErrorContext(adr_id=adr_id, operation="next_id"),
            )
        return max((f.adr_id for f in files), default=0) + 1


__all__ = ["IdAllocator", "find_duplicate_ids"]
