"""
Validation findings.

A :class:`Finding` is one problem spotted by the Validator or the Link
Manager. Findings are values: they carry enough to report the problem and,
for the few mechanical cases, a :class:`FixAction` describing the exact
patch that resolves it.

Manifesto:
    Findings must be actionable:

    - **severity:** ERROR fails ``adr validate``, WARNING does not
    - **code:** stable identifier for filtering and tests
    - **message:** human-readable explanation
    - **fix:** present only when the repair cannot change architectural meaning

Examples:
    >>> f = Finding("date-format", Severity.ERROR, "Date 'Jan 5' is not YYYY-MM-DD", adr_id=4)
    >>> f.is_error, f.fixable
    (True, False)

Tags:
    findings, validation, severity, auto-fix, adr-spine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """ERROR blocks (exit code 1); WARNING is reported only."""

    ERROR = "ERROR"
    WARNING = "WARNING"


class FindingCategory(str, Enum):
    """Where the problem lives."""

    METADATA = "METADATA"      # A single document's fields
    CONTENT = "CONTENT"        # Body sections and free text
    INTEGRITY = "INTEGRITY"    # Store-wide: ids, partitions, links
    INDEX = "INDEX"            # Derived index drift


@dataclass(frozen=True, slots=True)
class FixAction:
    """A mechanical repair.

    ``kind`` is ``"patch"`` (apply ``patch`` to the document through the
    store) or ``"rebuild-index"``.
    """

    kind: str
    description: str
    patch: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Finding:
    """One validation problem."""

    code: str
    severity: Severity
    message: str
    category: FindingCategory = FindingCategory.METADATA
    adr_id: int | None = None
    path: str | None = None
    field: str | None = None
    fix: FixAction | None = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def fixable(self) -> bool:
        return self.fix is not None

    @property
    def ref(self) -> str:
        return f"ADR-{self.adr_id:04d}" if self.adr_id is not None else "-"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "code": self.code,
            "severity": self.severity.value,
            "category": self.category.value,
            "message": self.message,
        }
        if self.adr_id is not None:
            result["adr_id"] = self.adr_id
        if self.path:
            result["path"] = self.path
        if self.field:
            result["field"] = self.field
        if self.fix is not None:
            result["fix"] = self.fix.description
        return result


def errors_only(findings: list[Finding]) -> list[Finding]:
    return [f for f in findings if f.is_error]


__all__ = ["Severity", "FindingCategory", "FixAction", "Finding", "errors_only"]
