"""
CLI: ``adr validate`` and ``adr index``.
"""

from __future__ import annotations

import typer
from rich.markup import escape
from rich.table import Table

from adrspine.cli.utils import console, fail, make_context, output_json, output_result


def _findings_table(findings: list[dict], title: str) -> Table:
    table = Table(title=title, show_lines=False, pad_edge=False)
    table.add_column("Severity")
    table.add_column("Code")
    table.add_column("ADR")
    table.add_column("Message", overflow="fold")
    for finding in findings:
        severity = finding["severity"]
        style = "red" if severity == "ERROR" else "yellow"
        adr = f"ADR-{finding['adr_id']:04d}" if "adr_id" in finding else "-"
        table.add_row(f"[{style}]{severity}[/{style}]", finding["code"], adr, escape(finding["message"]))
    return table


def validate(
    ctx: typer.Context,
    fix: bool = typer.Option(False, "--fix", help="Apply mechanical fixes (dates, tag placeholder, index)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="With --fix, list fixes without applying them"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Check every decision and the store; exit 1 when errors remain."""
    from adrspine.ops.requests import ValidateRequest
    from adrspine.ops.validation import validate_decisions

    result = validate_decisions(make_context(ctx, dry_run=dry_run), ValidateRequest(fix=fix))
    report = result.data
    if report is None:
        output_result(result, as_json=json_out)
        return

    if json_out:
        output_json({
            "success": result.success,
            "errors": report.errors,
            "warnings": report.warnings,
            "findings": report.findings,
            "fixed": report.fixed,
            "dry_run": report.dry_run,
        })
    else:
        if report.fixed:
            verb = "Would fix" if report.dry_run else "Fixed"
            console.print(_findings_table(report.fixed, f"{verb} ({len(report.fixed)})"))
        if report.findings:
            console.print(_findings_table(report.findings, "Findings"))
        console.print(f"{report.errors} error(s), {report.warnings} warning(s)")

    if not result.success:
        if json_out:
            raise typer.Exit(code=result.error.exit_code)
        fail(result)


def index(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Report whether the index is stale without writing"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Regenerate the index document from the decisions on disk."""
    from adrspine.ops.index import rebuild_index

    result = rebuild_index(make_context(ctx, dry_run=dry_run))
    if json_out or not result.success:
        output_result(result, as_json=json_out)
        return
    data = result.data
    if not data.changed:
        console.print(f"Index up to date ({data.total} decisions)")
    elif data.dry_run:
        console.print(f"[dim](dry run)[/dim] Index is stale ({data.total} decisions): {data.path}")
    else:
        console.print(f"Index rebuilt ({data.total} decisions): {data.path}")
