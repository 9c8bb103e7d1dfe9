"""
Structured error types for adr-spine.

Provides the typed error hierarchy raised by the Document Store and Link
Manager and carried inside ``Err`` results by the Lifecycle Engine. Every
error knows its category, a stable machine-readable ``code``, and the exit
code the CLI boundary maps it to.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure kind, never a bare Exception
    - **Rich Context:** Errors carry the ADR id, slug and path involved
    - **Error Chaining:** Filesystem failures keep the original OSError as cause
    - **Boundary Mapping:** Only the CLI turns an error into an exit code

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────────┐
        │                          AdrError                              │
        │          (category, code, exit_code, context, cause)           │
        ├───────────────────────────────────────────────────────────────┤
        │                                                                │
        │  NotFoundError          InvalidTransitionError   CycleError    │
        │  (LOOKUP, exit 2)       (LIFECYCLE, exit 2)      (LIFECYCLE)   │
        │                                                                │
        │  ConflictError          IntegrityError           StorageError  │
        │  (CONFLICT, exit 2)     (INTEGRITY, exit 1)      (STORAGE, 1)  │
        │                                                                │
        │  ValidationError                                               │
        │  (VALIDATION, exit 1)                                          │
        └───────────────────────────────────────────────────────────────┘

Examples:
    >>> error = NotFoundError("No ADR matches 'event-storage-v3'")
    >>> error.code
    'NOT_FOUND'
    >>> error.exit_code
    2

    >>> try:
    ...     raise PermissionError("read-only filesystem")
    ... except OSError as e:
    ...     raise StorageError("Failed to stage ADR-0004", artifact="accepted/.tmp", cause=e)
    Traceback (most recent call last):
    ...
    StorageError: Failed to stage ADR-0004

Guardrails:
    ❌ DON'T: Let a raw OSError escape from the store
    ✅ DO: Wrap it in StorageError with the artifact path

    ❌ DON'T: Report a one-sided supersede link as a ValidationError
    ✅ DO: Use IntegrityError, it is a store-level inconsistency

Tags:
    error-handling, exception-hierarchy, error-context, adr-spine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    LOOKUP = "LOOKUP"             # Unknown id or slug
    LIFECYCLE = "LIFECYCLE"       # Illegal transition, supersede cycles
    CONFLICT = "CONFLICT"         # Duplicate slug, competing link
    INTEGRITY = "INTEGRITY"       # Duplicate id, broken link, partition mismatch
    VALIDATION = "VALIDATION"     # Metadata schema violations
    STORAGE = "STORAGE"           # Filesystem failures mid-operation
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields cover what almost every ADR failure needs to point at; the
    ``metadata`` dict holds anything else. ``to_dict()`` drops unset fields
    so log lines stay short.

    Attributes:
        adr_id: Numeric id of the decision involved
        slug: Slug of the decision involved
        path: Filesystem path that was being read or written
        partition: Partition name (proposed, accepted, ...)
        operation: Lifecycle or store operation name
        metadata: Additional key-value pairs
    """

    adr_id: int | None = None
    slug: str | None = None
    path: str | None = None
    partition: str | None = None
    operation: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["adr_id", "slug", "path", "partition", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class AdrError(Exception):
    """
    Base exception for all adr-spine errors.

    Subclasses set ``default_category``, ``code`` and ``exit_code`` as class
    attributes; instances add a message, optional context and an optional
    chained cause.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    code: str = "INTERNAL"
    exit_code: int = 1

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> AdrError:
        """
        Add context to the error (fluent API).

        Known ErrorContext fields are set directly, anything else lands in
        ``context.metadata``.

        Examples:
            >>> err = NotFoundError("missing").with_context(slug="x", hint="typo?")
            >>> err.context.slug, err.context.metadata["hint"]
            ('x', 'typo?')
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.code})"


# =============================================================================
# REQUEST ERRORS (exit code 2)
# =============================================================================


class NotFoundError(AdrError):
    """No document matches the given id or slug in any partition."""

    default_category = ErrorCategory.LOOKUP
    code = "NOT_FOUND"
    exit_code = 2

    def __init__(self, message: str, *, ref: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.ref = ref


class InvalidTransitionError(AdrError):
    """Illegal lifecycle change, including any transition out of a terminal state."""

    default_category = ErrorCategory.LIFECYCLE
    code = "INVALID_TRANSITION"
    exit_code = 2

    def __init__(
        self,
        message: str,
        *,
        current: str | None = None,
        target: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.current = current
        self.target = target


class CycleError(AdrError):
    """Superseding would make the supersede chain reference itself."""

    default_category = ErrorCategory.LIFECYCLE
    code = "CYCLE"
    exit_code = 2

    def __init__(self, message: str, *, chain: list[int] | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.chain = chain or []


class ConflictError(AdrError):
    """Slug already in use, or a replacement that already supersedes another ADR."""

    default_category = ErrorCategory.CONFLICT
    code = "CONFLICT"
    exit_code = 2


# =============================================================================
# STORE ERRORS (exit code 1)
# =============================================================================


class IntegrityError(AdrError):
    """Duplicate id, broken or one-sided link, partition/status mismatch."""

    default_category = ErrorCategory.INTEGRITY
    code = "INTEGRITY"
    exit_code = 1


class ValidationError(AdrError):
    """
    Metadata schema violation.

    Raised by the document parser for malformed metadata blocks and by the
    store for invalid slugs or empty deciders at creation time.
    """

    default_category = ErrorCategory.VALIDATION
    code = "VALIDATION_FAILED"
    exit_code = 1

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.constraint = constraint

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        if self.constraint:
            result["constraint"] = self.constraint
        return result


class StorageError(AdrError):
    """
    Filesystem failure mid-operation.

    ``artifact`` names the partially written file (if any) left behind for
    manual inspection; the source document is untouched whenever this is
    raised from a move.
    """

    default_category = ErrorCategory.STORAGE
    code = "STORAGE"
    exit_code = 1

    def __init__(self, message: str, *, artifact: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.artifact = artifact

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.artifact:
            result["artifact"] = self.artifact
        return result


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, AdrError):
        return error.category
    if isinstance(error, OSError):
        return ErrorCategory.STORAGE
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "AdrError",
    "NotFoundError",
    "InvalidTransitionError",
    "CycleError",
    "ConflictError",
    "IntegrityError",
    "ValidationError",
    "StorageError",
    "categorize_error",
]
