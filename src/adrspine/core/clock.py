"""
Clock abstraction.

Lifecycle transitions stamp documents with "today"; tests pin the date with
:class:`FixedClock` instead of patching ``datetime``.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Wall clock (UTC)."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock frozen at a given instant."""

    def __init__(self, fixed: datetime | date):
        if not isinstance(fixed, datetime):
            fixed = datetime(fixed.year, fixed.month, fixed.day, tzinfo=UTC)
        self._fixed = fixed

    def now(self) -> datetime:
        return self._fixed

    def today(self) -> date:
        return self._fixed.date()


__all__ = ["Clock", "SystemClock", "FixedClock"]
