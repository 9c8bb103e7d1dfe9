"""
ADR domain model.

An :class:`AdrDocument` is an immutable value. Every change (lifecycle field
updates, auto-fixes, link writes) is expressed as ``doc.evolve(**patch)``,
which returns a new document and leaves the original untouched. Persistence
is the Document Store's job.

Manifesto:
    - **Immutable records:** frozen dataclasses, pure patches
    - **Status drives location:** Partition is derived from Status, never stored
    - **Identity in the filename:** ``ADR-<4-digit-id>-<slug>.<ext>``

Architecture:
    ::

        Status ──(1:1)──► Partition directory
          Proposed    → proposed/
          Accepted    → accepted/
          Deprecated  → deprecated/
          Superseded  → superseded/

        AdrDocument
          id, slug, title, status, deciders, date, tags, impact
          supersedes / superseded_by      (written only by LinkManager)
          preamble, sections[Problem, Decision, Rationale, Enforcement, References]

Tags:
    domain-model, dataclass, immutable, adr-spine
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any


class Status(str, Enum):
    """Lifecycle state of a decision."""

    PROPOSED = "Proposed"
    ACCEPTED = "Accepted"
    DEPRECATED = "Deprecated"
    SUPERSEDED = "Superseded"

    @property
    def partition(self) -> Partition:
        return Partition(self.name.lower())

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @classmethod
    def parse(cls, text: str) -> Status:
        """Case-insensitive lookup by value; raises ValueError for unknown text."""
        wanted = text.strip().lower()
        for status in cls:
            if status.value.lower() == wanted:
                return status
        raise ValueError(f"unknown status: {text!r}")


class Partition(str, Enum):
    """Status-named directory holding documents in that lifecycle state."""

    PROPOSED = "proposed"
    ACCEPTED = "accepted"
    DEPRECATED = "deprecated"
    SUPERSEDED = "superseded"

    @property
    def status(self) -> Status:
        return Status[self.name]


TERMINAL_STATUSES = frozenset({Status.DEPRECATED, Status.SUPERSEDED})

# Canonical section order; Rationale is optional.
SECTION_NAMES: tuple[str, ...] = ("Problem", "Decision", "Rationale", "Enforcement", "References")
REQUIRED_SECTIONS: tuple[str, ...] = ("Problem", "Decision", "Enforcement", "References")

# Explicit placeholder written by auto-fix into an empty Tags field.
TAG_PLACEHOLDER = "untagged"

LINK_FIELDS = frozenset({"supersedes", "superseded_by"})

SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
FILENAME_RE = re.compile(r"^ADR-(?P<id>\d{4,})-(?P<slug>[a-z0-9]+(?:-[a-z0-9]+)*)\.(?P<ext>[A-Za-z0-9]+)$")
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_REF_RE = re.compile(r"^(?:ADR-?)?0*(?P<id>\d+)$", re.IGNORECASE)


def slugify(text: str) -> str:
    """Kebab-case a title: ``"Event Storage v2"`` -> ``"event-storage-v2"``."""
    return re.sub(r"[^a-z0-9]+", "-", text.strip().lower()).strip("-")


def format_id(adr_id: int) -> str:
    """External representation of an id: ``21`` -> ``"ADR-0021"``."""
    return f"ADR-{adr_id:04d}"


def parse_id(text: str) -> int | None:
    """Parse ``"21"``, ``"0021"``, ``"ADR-0021"``; ``None`` if *text* is not an id."""
    match = _REF_RE.match(text.strip())
    if not match:
        return None
    return int(match.group("id"))


def filename_for(adr_id: int, slug: str, extension: str = "md") -> str:
    return f"{format_id(adr_id)}-{slug}.{extension}"


@dataclass(frozen=True, slots=True)
class Section:
    """Named body block. Text is opaque to the core."""

    name: str
    text: str = ""


@dataclass(frozen=True, slots=True)
class DocumentDefaults:
    """Metadata supplied when a decision is created."""

    title: str | None = None
    deciders: tuple[str, ...] = ()
    tags: frozenset[str] = frozenset()
    impact: str = ""
    sections: tuple[Section, ...] | None = None


@dataclass(frozen=True, slots=True)
class AdrDocument:
    """
    A single architecture decision.

    Attributes:
        id: Unique, never reused; rendered as ``ADR-0021``
        slug: Kebab-case identifier, immutable
        title: Human title
        status: Current lifecycle state
        deciders: Ordered names; must be non-empty to validate
        date: Date text as written (ISO ``YYYY-MM-DD`` when well-formed)
        tags: Unordered labels used for filtering
        impact: Free-text scope description
        supersedes: Id of the decision this one replaces
        superseded_by: Id of the decision that replaced this one
        preamble: Text between metadata and the first section
        sections: Ordered body blocks
    """

    id: int
    slug: str
    status: Status
    date: str
    title: str = ""
    deciders: tuple[str, ...] = ()
    tags: frozenset[str] = field(default_factory=frozenset)
    impact: str = ""
    supersedes: int | None = None
    superseded_by: int | None = None
    preamble: str = ""
    sections: tuple[Section, ...] = ()

    @property
    def ref(self) -> str:
        return format_id(self.id)

    @property
    def partition(self) -> Partition:
        return self.status.partition

    @property
    def date_value(self) -> date | None:
        """Typed date, or ``None`` when the text is not ISO ``YYYY-MM-DD``."""
        if not ISO_DATE_RE.match(self.date):
            return None
        try:
            return date.fromisoformat(self.date)
        except ValueError:
            return None

    @property
    def section_names(self) -> list[str]:
        return [s.name for s in self.sections]

    def filename(self, extension: str = "md") -> str:
        return filename_for(self.id, self.slug, extension)

    def section(self, name: str) -> Section | None:
        for section in self.sections:
            if section.name.lower() == name.lower():
                return section
        return None

    def evolve(self, **patch: Any) -> AdrDocument:
        """Pure ``(document, patch) -> document`` transform.

        ``id`` and ``slug`` are immutable once assigned.
        """
        for frozen_field in ("id", "slug"):
            if frozen_field in patch and patch[frozen_field] != getattr(self, frozen_field):
                raise ValueError(f"{frozen_field} is immutable once assigned")
        if isinstance(patch.get("date"), date):
            patch["date"] = patch["date"].isoformat()
        if "tags" in patch:
            patch["tags"] = frozenset(patch["tags"])
        if "deciders" in patch:
            patch["deciders"] = tuple(patch["deciders"])
        return replace(self, **patch)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict for JSON output."""
        return {
            "id": self.id,
            "ref": self.ref,
            "slug": self.slug,
            "title": self.title,
            "status": self.status.value,
            "deciders": list(self.deciders),
            "date": self.date,
            "tags": sorted(self.tags),
            "impact": self.impact,
            "supersedes": self.supersedes,
            "superseded_by": self.superseded_by,
            "sections": self.section_names,
        }


__all__ = [
    "Status",
    "Partition",
    "Section",
    "DocumentDefaults",
    "AdrDocument",
    "TERMINAL_STATUSES",
    "SECTION_NAMES",
    "REQUIRED_SECTIONS",
    "TAG_PLACEHOLDER",
    "LINK_FIELDS",
    "SLUG_RE",
    "FILENAME_RE",
    "ISO_DATE_RE",
    "slugify",
    "format_id",
    "parse_id",
    "filename_for",
]
