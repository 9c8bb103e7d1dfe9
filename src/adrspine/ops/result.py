"""
Operation result envelope.

Every operation function returns an :class:`OperationResult`. The Lifecycle
Engine speaks ``Ok``/``Err`` (``adrspine.core.result``); the ops layer turns
those into this envelope, which also carries warnings, timing and the exit
code the CLI should use, so commands never inspect exception types.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from adrspine.core.errors import AdrError, ErrorCategory, categorize_error

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class OperationError:
    """Why an operation failed.

    Attributes:
        code: Stable machine code (``NOT_FOUND``, ``INVALID_TRANSITION``, ...).
        message: One-line explanation for humans.
        category: Error family, when known.
        details: Context such as the ADR id, path or offending field.
        exit_code: Process exit code for this failure.
    """

    code: str
    message: str
    category: ErrorCategory | None = None
    details: dict[str, Any] = field(default_factory=dict)
    exit_code: int = 1


@dataclass
class OperationResult(Generic[T]):
    """Success/failure envelope with an optional payload.

    Build with :meth:`ok`, :meth:`fail` or :meth:`from_error`. A failed
    result may still carry ``data`` (a validation report lists its findings
    even when it fails).
    """

    success: bool
    data: T | None = None
    error: OperationError | None = None
    warnings: list[str] = field(default_factory=list)
    elapsed_ms: float = 0.0

    @classmethod
    def ok(
        cls,
        data: T,
        *,
        warnings: list[str] | None = None,
        elapsed_ms: float = 0.0,
    ) -> OperationResult[T]:
        return cls(success=True, data=data, warnings=warnings or [], elapsed_ms=elapsed_ms)

    @classmethod
    def fail(
        cls,
        code: str,
        message: str,
        *,
        category: ErrorCategory | None = None,
        details: dict[str, Any] | None = None,
        exit_code: int = 1,
        data: T | None = None,
        warnings: list[str] | None = None,
        elapsed_ms: float = 0.0,
    ) -> OperationResult[T]:
        error = OperationError(code, message, category, details or {}, exit_code)
        return cls(
            success=False,
            data=data,
            error=error,
            warnings=warnings or [],
            elapsed_ms=elapsed_ms,
        )

    @classmethod
    def from_error(
        cls,
        exc: Exception,
        *,
        elapsed_ms: float = 0.0,
        warnings: list[str] | None = None,
    ) -> OperationResult[T]:
        """Failed result for a raised or ``Err``-wrapped exception.

        ``AdrError`` keeps its code, category and exit code; anything else
        is reported as ``INTERNAL`` with exit code 1.
        """
        if isinstance(exc, AdrError):
            details = exc.to_dict()
            details.pop("message", None)
            return cls.fail(
                exc.code,
                exc.message,
                category=exc.category,
                details=details,
                exit_code=exc.exit_code,
                warnings=warnings,
                elapsed_ms=elapsed_ms,
            )
        return cls.fail(
            "INTERNAL",
            str(exc) or type(exc).__name__,
            category=categorize_error(exc),
            details={"error_type": type(exc).__name__},
            warnings=warnings,
            elapsed_ms=elapsed_ms,
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain dict for JSON output; empty parts are left out."""
        d: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            d["data"] = self.data
        if self.error is not None:
            d["error"] = {
                "code": self.error.code,
                "message": self.error.message,
                "exit_code": self.error.exit_code,
            }
            if self.error.category is not None:
                d["error"]["category"] = self.error.category.value
            if self.error.details:
                d["error"]["details"] = self.error.details
        if self.warnings:
            d["warnings"] = self.warnings
        if self.elapsed_ms:
            d["elapsed_ms"] = round(self.elapsed_ms, 2)
        return d


class _Timer:
    __slots__ = ("_start",)

    def __init__(self) -> None:
        self._start = time.perf_counter()

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000


def start_timer() -> _Timer:
    """Stopwatch started now; read ``timer.elapsed_ms`` when done."""
    return _Timer()
