"""
Operations layer: the business logic behind every ``adr`` command.

The ops package provides typed request/response functions over the core
components with consistent patterns:

- All functions accept ``OperationContext`` as first argument
- All functions return ``OperationResult[T]`` (never raise)
- All functions are transport-agnostic (no Typer, no rich)
- Mutating functions honour ``dry_run`` for safe previews

Usage::

    from adrspine.ops import OperationContext
    from adrspine.ops.decisions import accept_decision
    from adrspine.ops.requests import AcceptDecisionRequest

    ctx = OperationContext(store=DocumentStore("docs/adr"))
    result = accept_decision(ctx, AcceptDecisionRequest(ref="ADR-0021"))
    assert result.success
"""

from adrspine.ops.context import OperationContext
from adrspine.ops.result import OperationError, OperationResult

__all__ = [
    "OperationContext",
    "OperationError",
    "OperationResult",
]
