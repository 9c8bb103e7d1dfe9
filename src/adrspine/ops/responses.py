"""
Typed response objects for operations.

Each dataclass represents the *output* of a single operation beyond the
generic :class:`OperationResult` envelope. Responses carry only domain data,
no exit codes and no terminal formatting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from adrspine.core.models import AdrDocument

# ------------------------------------------------------------------ #
# Decision views
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class DecisionSummary:
    """One row of ``adr list``."""

    id: str
    title: str
    status: str
    date: str
    tags: str
    slug: str

    @classmethod
    def from_document(cls, doc: AdrDocument) -> DecisionSummary:
        return cls(
            id=doc.ref,
            title=doc.title or doc.slug,
            status=doc.status.value,
            date=doc.date,
            tags=", ".join(sorted(doc.tags)),
            slug=doc.slug,
        )


@dataclass(frozen=True, slots=True)
class DecisionDetail:
    """Full metadata of one decision for ``adr show``."""

    id: str
    slug: str
    title: str
    status: str
    date: str
    deciders: list[str]
    tags: list[str]
    impact: str
    supersedes: str | None
    superseded_by: str | None
    sections: list[str]
    path: str

    @classmethod
    def from_document(cls, doc: AdrDocument, path: str) -> DecisionDetail:
        return cls(
            id=doc.ref,
            slug=doc.slug,
            title=doc.title,
            status=doc.status.value,
            date=doc.date,
            deciders=list(doc.deciders),
            tags=sorted(doc.tags),
            impact=doc.impact,
            supersedes=_ref(doc.supersedes),
            superseded_by=_ref(doc.superseded_by),
            sections=doc.section_names,
            path=path,
        )


def _ref(adr_id: int | None) -> str | None:
    return None if adr_id is None else f"ADR-{adr_id:04d}"


# ------------------------------------------------------------------ #
# Lifecycle responses
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """Result payload for new / accept / deprecate."""

    id: str
    slug: str
    previous_status: str | None
    status: str
    date: str
    path: str
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class SupersedeResult:
    """Result payload for :func:`adrspine.ops.decisions.supersede_decision`."""

    old_id: str
    new_id: str
    old_path: str
    new_path: str
    dry_run: bool = False


# ------------------------------------------------------------------ #
# Maintenance responses
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Result payload for :func:`adrspine.ops.validation.validate_decisions`.

    ``findings`` lists what is still wrong (after fixing, when requested);
    ``fixed`` lists what the fix pass repaired.
    """

    findings: list[dict[str, Any]] = field(default_factory=list)
    fixed: list[dict[str, Any]] = field(default_factory=list)
    errors: int = 0
    warnings: int = 0
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class IndexResult:
    """Result payload for :func:`adrspine.ops.index.rebuild_index`."""

    path: str
    total: int
    counts: dict[str, int] = field(default_factory=dict)
    changed: bool = True
    dry_run: bool = False
