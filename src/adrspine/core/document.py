"""
Persisted document format: parser and renderer.

A document file starts with a metadata block of ``Key: value`` lines,
terminated by the first blank line, followed by an optional preamble and
``## <Section>`` blocks::

    Title: Domain Layer Pure
    Status: Accepted
    Deciders: Alice, Bob
    Date: 2026-10-17
    Tags: architecture, domain
    Impact: All bounded contexts
    Supersedes: ADR-0003

    ## Problem
    ...

The parser produces a typed :class:`~adrspine.core.models.AdrDocument` and
rejects malformed blocks with :class:`~adrspine.core.errors.ValidationError`
rather than defaulting silently. Field *content* problems (an empty deciders
list, a date written as ``Jan 5``) are not parse errors: they parse into the
record and are reported by the Validator, which can fix some of them.

Guardrails:
    ❌ DON'T: Guess a status from an unrecognized value
    ✅ DO: Reject the block and let the Validator surface the file

    ❌ DON'T: Reorder or reflow section text
    ✅ DO: Round-trip body text byte-for-byte (modulo edge blank lines)

Tags:
    parser, renderer, file-format, metadata, adr-spine
"""

from __future__ import annotations

import re

from adrspine.core.errors import ValidationError
from adrspine.core.models import AdrDocument, Section, Status, format_id, parse_id

_LINE_RE = re.compile(r"^(?P<key>[A-Za-z][A-Za-z _-]*?)\s*:\s*(?P<value>.*)$")
_SECTION_RE = re.compile(r"^##\s+(?P<name>\S.*?)\s*$")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")

# Canonical key -> rendered label, in rendering order.
_KEYS: dict[str, str] = {
    "title": "Title",
    "status": "Status",
    "deciders": "Deciders",
    "date": "Date",
    "tags": "Tags",
    "impact": "Impact",
    "supersedes": "Supersedes",
    "superseded-by": "Superseded-By",
}
_REQUIRED_KEYS = ("status", "deciders", "date")


def _canonical_key(raw: str) -> str:
    return re.sub(r"[\s_]+", "-", raw.strip().lower())


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_metadata(lines: list[str], *, source: str = "<document>") -> dict[str, str]:
    """Parse the ``Key: value`` block into a canonical-key dict."""
    metadata: dict[str, str] = {}
    for lineno, line in enumerate(lines, start=1):
        match = _LINE_RE.match(line)
        if not match:
            raise ValidationError(
                f"{source}: line {lineno} is not a 'Key: value' metadata line",
                value=line,
                constraint="metadata-line",
            )
        key = _canonical_key(match.group("key"))
        if key not in _KEYS:
            raise ValidationError(
                f"{source}: unknown metadata key {match.group('key')!r}",
                field=key,
                constraint="known-key",
            )
        if key in metadata:
            raise ValidationError(
                f"{source}: duplicate metadata key {_KEYS[key]!r}",
                field=key,
                constraint="unique-key",
            )
        metadata[key] = match.group("value").strip()

    missing = [_KEYS[k] for k in _REQUIRED_KEYS if k not in metadata]
    if missing:
        raise ValidationError(
            f"{source}: missing required metadata {', '.join(missing)}",
            field=missing[0].lower(),
            constraint="required-key",
        )
    return metadata


def _parse_link(metadata: dict[str, str], key: str, source: str) -> int | None:
    raw = metadata.get(key, "")
    if not raw:
        return None
    adr_id = parse_id(raw)
    if adr_id is None:
        raise ValidationError(
            f"{source}: {_KEYS[key]} must reference an ADR id, got {raw!r}",
            field=key,
            value=raw,
            constraint="adr-reference",
        )
    return adr_id


def _parse_body(lines: list[str]) -> tuple[str, tuple[Section, ...]]:
    preamble: list[str] = []
    sections: list[tuple[str, list[str]]] = []
    in_fence = False
    for line in lines:
        if _FENCE_RE.match(line):
            in_fence = not in_fence
        match = None if in_fence else _SECTION_RE.match(line)
        if match:
            sections.append((match.group("name"), []))
        elif sections:
            sections[-1][1].append(line)
        else:
            preamble.append(line)

    def _text(block: list[str]) -> str:
        return "\n".join(block).strip("\n").rstrip()

    return _text(preamble), tuple(Section(name, _text(body)) for name, body in sections)


def parse_document(text: str, *, adr_id: int, slug: str, source: str = "<document>") -> AdrDocument:
    """Parse document text into an :class:`AdrDocument`.

    ``adr_id`` and ``slug`` come from the filename, which is the identity of
    record; the metadata block never repeats them.

    Raises:
        ValidationError: empty document, malformed or incomplete metadata
            block, unrecognized status, non-id link reference.
    """
    lines = text.splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    if not lines:
        raise ValidationError(f"{source}: document is empty", constraint="non-empty")

    try:
        blank = next(i for i, line in enumerate(lines) if not line.strip())
    except StopIteration:
        blank = len(lines)
    metadata = parse_metadata(lines[:blank], source=source)

    try:
        status = Status.parse(metadata["status"])
    except ValueError as exc:
        raise ValidationError(
            f"{source}: unrecognized status {metadata['status']!r}",
            field="status",
            value=metadata["status"],
            constraint="status",
            cause=exc,
        ) from exc

    preamble, sections = _parse_body(lines[blank + 1:])
    return AdrDocument(
        id=adr_id,
        slug=slug,
        title=metadata.get("title", ""),
        status=status,
        deciders=tuple(_split_list(metadata["deciders"])),
        date=metadata["date"],
        tags=frozenset(_split_list(metadata.get("tags", ""))),
        impact=metadata.get("impact", ""),
        supersedes=_parse_link(metadata, "supersedes", source),
        superseded_by=_parse_link(metadata, "superseded-by", source),
        preamble=preamble,
        sections=sections,
    )


def render_document(doc: AdrDocument) -> str:
    """Render an :class:`AdrDocument` to its persisted text form."""
    values = {
        "title": doc.title,
        "status": doc.status.value,
        "deciders": ", ".join(doc.deciders),
        "date": doc.date,
        "tags": ", ".join(sorted(doc.tags)),
        "impact": " ".join(doc.impact.split()),
        "supersedes": format_id(doc.supersedes) if doc.supersedes is not None else None,
        "superseded-by": format_id(doc.superseded_by) if doc.superseded_by is not None else None,
    }
    out = [f"{_KEYS[key]}: {value}".rstrip() for key, value in values.items() if value is not None]
    out.append("")

    if doc.preamble.strip():
        out.append(doc.preamble.strip("\n").rstrip())
        out.append("")

    for section in doc.sections:
        out.append(f"## {section.name}")
        out.append("")
        if section.text.strip():
            out.append(section.text.strip("\n").rstrip())
            out.append("")

    return "\n".join(out).rstrip("\n") + "\n"


__all__ = ["parse_document", "parse_metadata", "render_document"]
