"""
Index Builder.

Pure projection from the document set to the derived index: documents grouped
by status (id ascending) and by tag (tag name ascending, ids ascending) with
counts. The index is always rebuilt from scratch and never patched, so it
cannot drift from the store; rendering carries no timestamp so two rebuilds
of an unchanged store are byte-identical.

Examples:
    >>> index = build_index(store.documents())
    >>> index.counts[Status.ACCEPTED]
    12
    >>> text = render_index(index)

Tags:
    index, projection, deterministic, adr-spine
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from adrspine.core.logging import get_logger
from adrspine.core.models import AdrDocument, Status, filename_for, format_id

if TYPE_CHECKING:
    from adrspine.core.store import DocumentStore

logger = get_logger(__name__)

INDEX_MARKER = "<!-- Generated by adr-spine. Do not edit; run `adr index` to regenerate. -->"


@dataclass(frozen=True, slots=True)
class IndexEntry:
    id: int
    slug: str
    title: str
    status: Status
    date: str
    tags: tuple[str, ...]
    supersedes: int | None = None
    superseded_by: int | None = None

    @classmethod
    def from_document(cls, doc: AdrDocument) -> IndexEntry:
        return cls(
            id=doc.id,
            slug=doc.slug,
            title=doc.title or doc.slug,
            status=doc.status,
            date=doc.date,
            tags=tuple(sorted(doc.tags)),
            supersedes=doc.supersedes,
            superseded_by=doc.superseded_by,
        )

    @property
    def ref(self) -> str:
        return format_id(self.id)

    def relative_path(self, extension: str = "md") -> str:
        return f"{self.status.partition.value}/{filename_for(self.id, self.slug, extension)}"


@dataclass(frozen=True, slots=True)
class IndexGroup:
    key: str
    entries: tuple[IndexEntry, ...]

    @property
    def count(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class IndexDocument:
    """Derived summary of the whole store."""

    by_status: tuple[IndexGroup, ...]
    by_tag: tuple[IndexGroup, ...]

    @property
    def total(self) -> int:
        return sum(group.count for group in self.by_status)

    @property
    def counts(self) -> dict[Status, int]:
        return {Status(group.key): group.count for group in self.by_status}


def build_index(docs: list[AdrDocument]) -> IndexDocument:
    """Group *docs* by status and by tag. Pure and deterministic."""
    entries = sorted((IndexEntry.from_document(doc) for doc in docs), key=lambda e: e.id)

    by_status = tuple(
        IndexGroup(status.value, tuple(e for e in entries if e.status is status))
        for status in Status
    )

    tagged: dict[str, list[IndexEntry]] = defaultdict(list)
    for entry in entries:
        for tag in entry.tags:
            tagged[tag].append(entry)
    by_tag = tuple(IndexGroup(tag, tuple(tagged[tag])) for tag in sorted(tagged))

    return IndexDocument(by_status=by_status, by_tag=by_tag)


def _cell(text: str) -> str:
    return text.replace("|", "\\|")


def _links(entry: IndexEntry) -> str:
    parts = []
    if entry.supersedes is not None:
        parts.append(f"supersedes {format_id(entry.supersedes)}")
    if entry.superseded_by is not None:
        parts.append(f"superseded by {format_id(entry.superseded_by)}")
    return "; ".join(parts)


def render_index(index: IndexDocument, *, extension: str = "md") -> str:
    """Render the index as Markdown."""
    lines = [
        "# Architecture Decision Records",
        "",
        INDEX_MARKER,
        "",
        f"Total: {index.total}",
        "",
        "| Status | Count |",
        "|---|---:|",
    ]
    lines.extend(f"| {group.key} | {group.count} |" for group in index.by_status)

    for group in index.by_status:
        lines.extend(["", f"## {group.key} ({group.count})", ""])
        if not group.entries:
            lines.append("_None._")
            continue
        lines.append("| ID | Title | Date | Tags | Links |")
        lines.append("|---|---|---|---|---|")
        for entry in group.entries:
            lines.append(
                f"| [{entry.ref}]({entry.relative_path(extension)}) | {_cell(entry.title)} "
                f"| {_cell(entry.date)} | {_cell(', '.join(entry.tags))} | {_links(entry)} |"
            )

    lines.extend(["", "## By Tag"])
    if not index.by_tag:
        lines.extend(["", "_None._"])
    for group in index.by_tag:
        lines.extend(["", f"### {group.key} ({group.count})", ""])
        for entry in group.entries:
            lines.append(
                f"- [{entry.ref}]({entry.relative_path(extension)}) {entry.title} ({entry.status.value})"
            )

    return "\n".join(lines) + "\n"


@dataclass(frozen=True, slots=True)
class IndexRebuild:
    """What :func:`rebuild_index` built, and whether the file on disk differed."""

    index: IndexDocument
    path: Path
    changed: bool
    dry_run: bool = False


def rebuild_index(store: DocumentStore, *, dry_run: bool = False) -> IndexRebuild:
    """Build from the current store contents and replace the persisted index.

    The file is only written when its rendering differs from what is on
    disk, so an unchanged store leaves the index (and its mtime) alone.
    """
    index = build_index(store.documents())
    text = render_index(index, extension=store.extension)
    changed = store.read_index() != text
    if changed and not dry_run:
        store.write_index(text)
        logger.info("index_rebuilt", path=str(store.index_path), total=index.total)
    return IndexRebuild(index, store.index_path, changed, dry_run)


__all__ = [
    "rebuild_index",
    "IndexRebuild",
    "INDEX_MARKER",
    "IndexEntry",
    "IndexGroup",
    "IndexDocument",
    "build_index",
    "render_index",
]
