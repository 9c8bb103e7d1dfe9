"""
Result envelope for consistent success/failure handling.

Lifecycle operations return ``Ok[T]`` on success or ``Err[T]`` wrapping an
:class:`~adrspine.core.errors.AdrError` on failure, so no store fault escapes
the Lifecycle Engine as an unhandled exception. The ops layer turns a
``Result`` into an ``OperationResult`` for the CLI.

Manifesto:
    - **Explicit over Implicit:** Expected failures (unknown slug, illegal
      transition) are values, not exceptions callers might miss
    - **Pattern matching:** callers ``match`` on ``Ok(value)`` / ``Err(error)``

Architecture:
    ::

        ┌───────────────────────────────────────┐
        │               Result[T]               │
        ├───────────────────┬───────────────────┤
        │      Ok[T]        │      Err[T]       │
        ├───────────────────┼───────────────────┤
        │ • value: T        │ • error: Exc      │
        │ • map()           │ • map() (no-op)   │
        │ • unwrap()        │ • unwrap_or()     │
        └───────────────────┴───────────────────┘

Examples:
    >>> from adrspine.core.result import Ok, Err, Result
    >>> def parse_id(text: str) -> Result[int]:
    ...     if not text.isdigit():
    ...         return Err(ValueError(f"not an id: {text}"))
    ...     return Ok(int(text))
    >>> match parse_id("0021"):
    ...     case Ok(value):
    ...         print(f"ADR-{value:04d}")
    ...     case Err(error):
    ...         print(f"Error: {error}")
    ADR-0021

Tags:
    result-pattern, error-handling, adr-spine
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful result containing a value.

    Examples:
        >>> Ok(10).map(lambda x: x * 2).unwrap()
        20
        >>> Ok(42).is_ok()
        True
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Failed result containing an error.

    ``unwrap()`` re-raises the wrapped error; prefer pattern matching or
    ``unwrap_or()`` in callers that expect failures.

    Examples:
        >>> err = Err(ValueError("bad"))
        >>> err.is_err()
        True
        >>> err.unwrap_or(0)
        0
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Ok[T] | Err[T]


__all__ = ["Ok", "Err", "Result"]
