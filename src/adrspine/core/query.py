"""
Query Engine.

``QueryEngine.list()`` returns a :class:`DocumentQuery`: a lazy, finite and
restartable iterable. Nothing is read when the query is built; every
iteration re-scans the store, so a query object held across a mutation sees
the new state on its next pass.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from adrspine.core.models import AdrDocument, Status
from adrspine.core.store import DocumentStore


@dataclass(frozen=True, slots=True)
class DocumentFilter:
    status: Status | None = None
    tag: str | None = None

    def matches(self, doc: AdrDocument) -> bool:
        if self.status is not None and doc.status is not self.status:
            return False
        if self.tag is not None and self.tag not in doc.tags:
            return False
        return True


class DocumentQuery:
    """Re-evaluated from the full store on each iteration, sorted by id."""

    def __init__(self, store: DocumentStore, criteria: DocumentFilter):
        self._store = store
        self.criteria = criteria

    def __iter__(self) -> Iterator[AdrDocument]:
        # Unparseable files are skipped here; `adr validate` reports them.
        for doc in self._store.documents():
            if self.criteria.matches(doc):
                yield doc

    def count(self) -> int:
        return sum(1 for _ in self)

    def first(self) -> AdrDocument | None:
        return next(iter(self), None)


class QueryEngine:
    def __init__(self, store: DocumentStore):
        self.store = store

    def list(self, status: Status | None = None, tag: str | None = None) -> DocumentQuery:
        return DocumentQuery(self.store, DocumentFilter(status=status, tag=tag))


__all__ = ["DocumentFilter", "DocumentQuery", "QueryEngine"]
