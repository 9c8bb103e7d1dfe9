"""
Validation operations.

Runs the Validator over the whole store and, on request, applies the
mechanical fixes. Findings are reported in the payload even when the
operation fails, so callers can show what is wrong.
"""

from __future__ import annotations

from adrspine.core.findings import Finding, errors_only
from adrspine.core.logging import get_logger
from adrspine.core.validator import Validator
from adrspine.ops.context import OperationContext
from adrspine.ops.requests import ValidateRequest
from adrspine.ops.responses import ValidationReport
from adrspine.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def validate_decisions(
    ctx: OperationContext,
    request: ValidateRequest,
) -> OperationResult[ValidationReport]:
    """Validate every decision; fail when any ERROR finding remains."""
    timer = start_timer()

    try:
        validator = Validator(ctx.store, clock=ctx.clock)
        findings = validator.validate_all()

        fixed: list[Finding] = []
        remaining: list[Finding] = findings
        if request.fix and ctx.dry_run:
            fixed = [f for f in findings if f.fixable]
            remaining = [f for f in findings if not f.fixable]
        elif request.fix:
            outcome = validator.fix(findings)
            fixed, remaining = list(outcome.applied), list(outcome.remaining)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)

    errors = len(errors_only(remaining))
    report = ValidationReport(
        findings=[f.to_dict() for f in remaining],
        fixed=[f.to_dict() for f in fixed],
        errors=errors,
        warnings=len(remaining) - errors,
        dry_run=ctx.dry_run,
    )
    logger.info("validation_finished", errors=errors, warnings=report.warnings, fixed=len(fixed))

    if errors:
        return OperationResult.fail(
            "VALIDATION_FAILED",
            f"{errors} error(s) found",
            details={"errors": errors, "warnings": report.warnings},
            data=report,
            elapsed_ms=timer.elapsed_ms,
        )
    return OperationResult.ok(report, elapsed_ms=timer.elapsed_ms)
