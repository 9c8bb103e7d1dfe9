"""
Index operations.

Regenerates the derived index document from the current store contents.
"""

from __future__ import annotations

from adrspine.core import index as core_index
from adrspine.core.logging import get_logger
from adrspine.ops.context import OperationContext
from adrspine.ops.responses import IndexResult
from adrspine.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def rebuild_index(ctx: OperationContext) -> OperationResult[IndexResult]:
    """Rebuild the index from scratch; a no-op write when nothing changed."""
    timer = start_timer()

    try:
        rebuilt = core_index.rebuild_index(ctx.store, dry_run=ctx.dry_run)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)

    return OperationResult.ok(
        IndexResult(
            path=str(rebuilt.path),
            total=rebuilt.index.total,
            counts={status.value: count for status, count in rebuilt.index.counts.items()},
            changed=rebuilt.changed,
            dry_run=rebuilt.dry_run,
        ),
        elapsed_ms=timer.elapsed_ms,
    )
