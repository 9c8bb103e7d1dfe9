"""
Validator: metadata, content and store-integrity checks with mechanical auto-fix.

Manifesto:
    Only repairs that cannot change architectural meaning are automated:

    - **Date reformatting** when the written date has exactly one reading
    - **Tag placeholder** (``untagged``) for an empty Tags field
    - **Index regeneration** when the index has drifted from the documents

    Everything touching status, links or decision content is reported and
    left for a human.

Architecture:
    ::

        validate_all()
          ├── store scan        unparseable / misnamed / staged / duplicate ids
          ├── per document      validate(doc, known_ids)
          ├── links             validate_links(docs)
          └── index             rendered fresh vs. INDEX.md on disk

        fix(findings) ──► update_fields() per document ──► rebuild_index()

Examples:
    >>> normalize_date("Jan 5", today=date(2026, 3, 1))
    datetime.date(2026, 1, 5)
    >>> normalize_date("03/04/2026", today=date(2026, 5, 1)) is None   # ambiguous
    True

Tags:
    validation, auto-fix, integrity, findings, adr-spine
"""

from __future__ import annotations

import calendar
import re
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Any

from adrspine.core.clock import Clock
from adrspine.core.errors import AdrError, ValidationError
from adrspine.core.findings import Finding, FindingCategory, FixAction, Severity
from adrspine.core.ids import find_duplicate_ids
from adrspine.core.index import build_index, rebuild_index, render_index
from adrspine.core.links import validate_links
from adrspine.core.logging import get_logger
from adrspine.core.models import (
    REQUIRED_SECTIONS,
    TAG_PLACEHOLDER,
    AdrDocument,
    format_id,
)
from adrspine.core.result import Err
from adrspine.core.store import DocumentStore

logger = get_logger(__name__)


# =============================================================================
# DATE NORMALISATION
# =============================================================================

_MONTHS: dict[str, int] = {}
for _number in range(1, 13):
    _MONTHS[calendar.month_name[_number].lower()] = _number
    _MONTHS[calendar.month_abbr[_number].lower()] = _number
_MONTHS["sept"] = 9

_ORDINAL = r"(?P<day>\d{1,2})(?:st|nd|rd|th)?"
_MONTH = r"(?P<month>[A-Za-z]+)\.?"
_YEAR = r"(?P<year>\d{4})"

_NAMED_FORMS = [
    re.compile(rf"^{_MONTH}\s+{_ORDINAL}(?:,?\s+{_YEAR})?$"),      # Jan 5, January 5, 2024
    re.compile(rf"^{_ORDINAL}\s+{_MONTH}(?:,?\s+{_YEAR})?$"),      # 5 Jan 2024
]
_YEAR_FIRST = re.compile(r"^(?P<year>\d{4})[-/.](?P<month>\d{1,2})[-/.](?P<day>\d{1,2})$")
_COMPACT = re.compile(r"^(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})$")
_YEAR_LAST = re.compile(r"^(?P<a>\d{1,2})[-/.](?P<b>\d{1,2})[-/.](?P<year>\d{4})$")


def _build(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def normalize_date(text: str, today: date) -> date | None:
    """Return the single date *text* can mean, or ``None``.

    A missing year is taken from *today*, falling back to the previous year
    when that would put the date in the future. Numeric ``a/b/yyyy`` forms
    are accepted only when day and month cannot be swapped.
    """
    value = " ".join(text.strip().split())
    if not value:
        return None

    for pattern in _NAMED_FORMS:
        match = pattern.match(value)
        if not match:
            continue
        month = _MONTHS.get(match.group("month").lower())
        if month is None:
            return None
        day = int(match.group("day"))
        if match.group("year"):
            return _build(int(match.group("year")), month, day)
        candidate = _build(today.year, month, day)
        if candidate is not None and candidate > today:
            candidate = _build(today.year - 1, month, day)
        return candidate

    for pattern in (_YEAR_FIRST, _COMPACT):
        match = pattern.match(value)
        if match:
            return _build(int(match.group("year")), int(match.group("month")), int(match.group("day")))

    match = _YEAR_LAST.match(value)
    if match:
        a, b, year = int(match.group("a")), int(match.group("b")), int(match.group("year"))
        readings = {d for d in (_build(year, a, b), _build(year, b, a)) if d is not None}
        if len(readings) == 1:
            return readings.pop()
    return None


# =============================================================================
# FIX REPORT
# =============================================================================


@dataclass(frozen=True, slots=True)
class FixReport:
    """What ``fix`` changed and what still needs a human."""

    applied: tuple[Finding, ...] = ()
    remaining: tuple[Finding, ...] = ()

    @property
    def ok(self) -> bool:
        return not any(f.is_error for f in self.remaining)


# =============================================================================
# VALIDATOR
# =============================================================================


class Validator:
    """
    Checks documents and the store they live in.

    Args:
        store: The Document Store to inspect
        clock: Supplies "today" for year inference during date fixes
    """

    def __init__(self, store: DocumentStore, *, clock: Clock | None = None):
        self.store = store
        self.clock = clock or store.clock

    # ------------------------------------------------------------------ #
    # Per document
    # ------------------------------------------------------------------ #

    def validate(self, doc: AdrDocument, known_ids: set[int]) -> list[Finding]:
        """Checks that need only *doc* and the set of ids present in the store."""
        findings: list[Finding] = []

        def add(code: str, severity: Severity, message: str, **kwargs: Any) -> None:
            findings.append(Finding(code, severity, message, adr_id=doc.id, **kwargs))

        if doc.date_value is None:
            fixed = normalize_date(doc.date, self.clock.today())
            fix = None
            if fixed is not None:
                fix = FixAction("patch", f"Rewrite date {doc.date!r} as {fixed.isoformat()}",
                                {"date": fixed.isoformat()})
            add("date-format", Severity.ERROR,
                f"{doc.ref} date {doc.date!r} is not YYYY-MM-DD", field="date", fix=fix)

        if not doc.deciders:
            add("deciders-empty", Severity.ERROR, f"{doc.ref} names no deciders", field="deciders")

        if not doc.tags:
            add("tags-empty", Severity.WARNING, f"{doc.ref} has no tags", field="tags",
                fix=FixAction("patch", f"Set tags to {TAG_PLACEHOLDER!r}", {"tags": [TAG_PLACEHOLDER]}))

        if not doc.impact.strip():
            add("impact-empty", Severity.WARNING, f"{doc.ref} does not describe its impact",
                field="impact")

        present = {name.lower() for name in doc.section_names}
        for name in REQUIRED_SECTIONS:
            if name.lower() not in present:
                add("section-missing", Severity.WARNING,
                    f"{doc.ref} has no '## {name}' section",
                    category=FindingCategory.CONTENT, field=name)

        for name, target in (("supersedes", doc.supersedes), ("superseded_by", doc.superseded_by)):
            if target is not None and target not in known_ids:
                add("reference-missing", Severity.ERROR,
                    f"{doc.ref} {name.replace('_', ' ')} {format_id(target)}, which does not exist",
                    category=FindingCategory.INTEGRITY, field=name)

        return findings

    # ------------------------------------------------------------------ #
    # Whole store
    # ------------------------------------------------------------------ #

    def validate_all(self) -> list[Finding]:
        """Every check, store-level findings first, then per document, links, index."""
        findings: list[Finding] = []
        entries = self.store.load_all()
        files = [entry.file for entry in entries]

        for path in self.store.stray_files():
            findings.append(Finding(
                "misnamed-file", Severity.WARNING,
                f"{path.name} does not match ADR-<id>-<slug>.{self.store.extension}; it is ignored",
                category=FindingCategory.INTEGRITY, path=str(path),
            ))
        for path in self.store.staged_artifacts():
            findings.append(Finding(
                "staged-artifact", Severity.WARNING,
                f"{path.name} was left by an interrupted write; inspect and remove it",
                category=FindingCategory.INTEGRITY, path=str(path),
            ))

        for entry in entries:
            if isinstance(entry.result, Err):
                error = entry.result.error
                code = "status-unknown" if getattr(error, "field", None) == "status" else "unparseable"
                message = error.message if isinstance(error, AdrError) else str(error)
                findings.append(Finding(
                    code, Severity.ERROR, message,
                    adr_id=entry.file.adr_id, path=str(entry.file.path),
                    field=error.field if isinstance(error, ValidationError) else None,
                ))

        for adr_id, group in sorted(find_duplicate_ids(files).items()):
            slugs = {f.slug for f in group}
            where = ", ".join(f"{f.partition.value}/{f.path.name}" for f in group)
            kind = "present in more than one partition" if len(slugs) == 1 else "used by more than one document"
            findings.append(Finding(
                "duplicate-id", Severity.ERROR, f"{format_id(adr_id)} is {kind}: {where}",
                category=FindingCategory.INTEGRITY, adr_id=adr_id,
            ))

        by_slug: dict[str, set[int]] = defaultdict(set)
        for stored in files:
            by_slug[stored.slug].add(stored.adr_id)
        for slug, ids in sorted(by_slug.items()):
            if len(ids) > 1:
                findings.append(Finding(
                    "duplicate-slug", Severity.ERROR,
                    f"Slug {slug!r} is used by {', '.join(format_id(i) for i in sorted(ids))}",
                    category=FindingCategory.INTEGRITY, adr_id=min(ids),
                ))

        docs = [entry.document for entry in entries if entry.document is not None]
        for entry in entries:
            doc = entry.document
            if doc is not None and doc.partition is not entry.file.partition:
                findings.append(Finding(
                    "partition-mismatch", Severity.ERROR,
                    f"{doc.ref} has status {doc.status.value} but lives in {entry.file.partition.value}/",
                    category=FindingCategory.INTEGRITY, adr_id=doc.id, path=str(entry.file.path),
                    field="status",
                ))

        known_ids = {f.adr_id for f in files}
        for doc in docs:
            findings.extend(self.validate(doc, known_ids))

        # Missing targets are already reported per document as reference-missing.
        findings.extend(f for f in validate_links(docs) if f.code != "link-dangling")

        stale = self._check_index(docs)
        if stale is not None:
            findings.append(stale)

        logger.debug(
            "validation_complete",
            documents=len(entries),
            errors=sum(1 for f in findings if f.is_error),
            warnings=sum(1 for f in findings if not f.is_error),
        )
        return findings

    def _check_index(self, docs: list[AdrDocument]) -> Finding | None:
        current = self.store.read_index()
        if current is None and not docs:
            return None
        expected = render_index(build_index(docs), extension=self.store.extension)
        if current == expected:
            return None
        message = (
            f"{self.store.index_name} is missing" if current is None
            else f"{self.store.index_name} is out of date with the documents"
        )
        return Finding(
            "index-stale", Severity.WARNING, message,
            category=FindingCategory.INDEX, path=str(self.store.index_path),
            fix=FixAction("rebuild-index", f"Regenerate {self.store.index_name}"),
        )

    # ------------------------------------------------------------------ #
    # Auto-fix
    # ------------------------------------------------------------------ #

    def fix(self, findings: list[Finding]) -> FixReport:
        """Apply every mechanical fix in *findings*; the index is rebuilt afterwards."""
        applied: list[Finding] = []
        remaining: list[Finding] = [f for f in findings if not f.fixable]

        patches: dict[int, list[Finding]] = defaultdict(list)
        index_fixes: list[Finding] = []
        for finding in findings:
            if finding.fix is None:
                continue
            if finding.fix.kind == "patch" and finding.adr_id is not None:
                patches[finding.adr_id].append(finding)
            elif finding.fix.kind == "rebuild-index":
                index_fixes.append(finding)
            else:
                remaining.append(finding)

        for adr_id, group in sorted(patches.items()):
            patch: dict[str, Any] = {}
            for finding in group:
                patch.update(finding.fix.patch)
            try:
                doc = self.store.read(adr_id)
                self.store.update_fields(doc, patch)
            except AdrError as exc:
                logger.warning("fix_failed", adr_id=adr_id, code=exc.code, error=exc.message)
                remaining.extend(group)
                continue
            logger.info("fix_applied", adr_id=adr_id, fields=sorted(patch))
            applied.extend(group)

        if applied or index_fixes:
            try:
                rebuild_index(self.store)
            except AdrError as exc:
                logger.warning("fix_failed", code=exc.code, error=exc.message)
                remaining.extend(index_fixes)
            else:
                applied.extend(index_fixes)

        return FixReport(applied=tuple(applied), remaining=tuple(remaining))


__all__ = ["Validator", "FixReport", "normalize_date"]
