"""
Decision operations.

Create, transition, list and show decisions. Wires the Lifecycle Engine and
Query Engine to the CLI; every function takes an :class:`OperationContext`
and returns an :class:`OperationResult` without raising.
"""

from __future__ import annotations

import getpass

from adrspine.core.lifecycle import LifecycleEngine, SupersedeOutcome, TransitionOutcome
from adrspine.core.logging import get_logger
from adrspine.core.models import SLUG_RE, DocumentDefaults, Status, slugify
from adrspine.core.query import QueryEngine
from adrspine.core.result import Err, Ok, Result
from adrspine.ops.context import OperationContext
from adrspine.ops.requests import (
    AcceptDecisionRequest,
    DeprecateDecisionRequest,
    GetDecisionRequest,
    ListDecisionsRequest,
    NewDecisionRequest,
    SupersedeDecisionRequest,
)
from adrspine.ops.responses import (
    DecisionDetail,
    DecisionSummary,
    SupersedeResult,
    TransitionResult,
)
from adrspine.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def _engine(ctx: OperationContext) -> LifecycleEngine:
    return LifecycleEngine(ctx.store, clock=ctx.clock)


def _transition_result(ctx: OperationContext, outcome: TransitionOutcome) -> TransitionResult:
    doc = outcome.document
    previous = None if outcome.previous is doc.status else outcome.previous.value
    return TransitionResult(
        id=doc.ref,
        slug=doc.slug,
        previous_status=previous,
        status=doc.status.value,
        date=doc.date,
        path=str(ctx.store.path_for(doc)),
        dry_run=outcome.dry_run,
    )


def _finish_transition(
    ctx: OperationContext,
    result: Result[TransitionOutcome],
    timer,
) -> OperationResult[TransitionResult]:
    match result:
        case Ok(outcome):
            return OperationResult.ok(
                _transition_result(ctx, outcome),
                warnings=list(outcome.warnings),
                elapsed_ms=timer.elapsed_ms,
            )
        case Err(error):
            logger.warning("op_failed", error=str(error), request_id=ctx.request_id)
            return OperationResult.from_error(error, elapsed_ms=timer.elapsed_ms)


def _default_deciders(ctx: OperationContext) -> tuple[str, ...]:
    if ctx.default_deciders:
        return tuple(ctx.default_deciders)
    try:
        return (getpass.getuser(),)
    except (KeyError, OSError):
        return ()


# ------------------------------------------------------------------ #
# Lifecycle
# ------------------------------------------------------------------ #


def new_decision(
    ctx: OperationContext,
    request: NewDecisionRequest,
) -> OperationResult[TransitionResult]:
    """Create a ``Proposed`` decision with the next free id."""
    timer = start_timer()

    if request.slug:
        slug, title = request.slug, request.title or None
    elif SLUG_RE.match(request.title):
        slug, title = request.title, None
    else:
        slug, title = slugify(request.title), request.title.strip() or None
    if not slug:
        return OperationResult.fail(
            "VALIDATION_FAILED",
            f"Cannot derive a slug from {request.title!r}",
            details={"field": "slug"},
            elapsed_ms=timer.elapsed_ms,
        )

    deciders = tuple(d.strip() for d in request.deciders if d.strip()) or _default_deciders(ctx)
    if not deciders:
        return OperationResult.fail(
            "VALIDATION_FAILED",
            "At least one decider is required (pass --decider or set ADR_DEFAULT_DECIDERS)",
            details={"field": "deciders"},
            elapsed_ms=timer.elapsed_ms,
        )

    defaults = DocumentDefaults(
        title=title,
        deciders=deciders,
        tags=frozenset(t.strip() for t in request.tags if t.strip()),
        impact=request.impact.strip(),
    )
    try:
        result = _engine(ctx).propose(slug, defaults, dry_run=ctx.dry_run)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)
    return _finish_transition(ctx, result, timer)


def accept_decision(
    ctx: OperationContext,
    request: AcceptDecisionRequest,
) -> OperationResult[TransitionResult]:
    """Promote a ``Proposed`` decision to ``Accepted``."""
    timer = start_timer()
    try:
        result = _engine(ctx).accept(request.ref, dry_run=ctx.dry_run)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)
    return _finish_transition(ctx, result, timer)


def deprecate_decision(
    ctx: OperationContext,
    request: DeprecateDecisionRequest,
) -> OperationResult[TransitionResult]:
    """Retire a ``Proposed`` or ``Accepted`` decision without a replacement."""
    timer = start_timer()
    try:
        result = _engine(ctx).deprecate(request.ref, request.reason, dry_run=ctx.dry_run)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)
    return _finish_transition(ctx, result, timer)


def supersede_decision(
    ctx: OperationContext,
    request: SupersedeDecisionRequest,
) -> OperationResult[SupersedeResult]:
    """Replace an ``Accepted`` decision with another, linking both ways."""
    timer = start_timer()
    try:
        result: Result[SupersedeOutcome] = _engine(ctx).supersede(
            request.old_ref, request.new_ref, dry_run=ctx.dry_run
        )
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)

    match result:
        case Ok(outcome):
            payload = SupersedeResult(
                old_id=outcome.old.ref,
                new_id=outcome.new.ref,
                old_path=str(ctx.store.path_for(outcome.old)),
                new_path=str(ctx.store.path_for(outcome.new)),
                dry_run=outcome.dry_run,
            )
            return OperationResult.ok(
                payload, warnings=list(outcome.warnings), elapsed_ms=timer.elapsed_ms
            )
        case Err(error):
            logger.warning("op_failed", error=str(error), request_id=ctx.request_id)
            return OperationResult.from_error(error, elapsed_ms=timer.elapsed_ms)


# ------------------------------------------------------------------ #
# Queries
# ------------------------------------------------------------------ #


def list_decisions(
    ctx: OperationContext,
    request: ListDecisionsRequest,
) -> OperationResult[list[DecisionSummary]]:
    """List decisions, optionally filtered by status and tag, by id ascending."""
    timer = start_timer()

    status = None
    if request.status:
        try:
            status = Status.parse(request.status)
        except ValueError:
            return OperationResult.fail(
                "VALIDATION_FAILED",
                f"Unknown status {request.status!r} (expected one of "
                f"{', '.join(s.value for s in Status)})",
                details={"field": "status"},
                elapsed_ms=timer.elapsed_ms,
            )

    try:
        query = QueryEngine(ctx.store).list(status=status, tag=request.tag)
        summaries = [DecisionSummary.from_document(doc) for doc in query]
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)

    return OperationResult.ok(summaries, elapsed_ms=timer.elapsed_ms)


def get_decision(
    ctx: OperationContext,
    request: GetDecisionRequest,
) -> OperationResult[DecisionDetail]:
    """Show one decision by id or slug."""
    timer = start_timer()
    try:
        stored = ctx.store.locate(request.ref)
        doc = ctx.store.load(stored)
    except Exception as exc:
        logger.warning("op_failed", error=str(exc), ref=request.ref)
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)

    return OperationResult.ok(
        DecisionDetail.from_document(doc, str(stored.path)),
        elapsed_ms=timer.elapsed_ms,
    )
