"""
CLI: ``adr new | accept | deprecate | supersede | list | show``.
"""

from __future__ import annotations

import typer

from adrspine.cli.utils import (
    console,
    err_console,
    fail,
    make_context,
    output_result,
    print_warnings,
)
from adrspine.ops.responses import SupersedeResult, TransitionResult
from adrspine.ops.result import OperationResult


def _report_transition(result: OperationResult[TransitionResult], as_json: bool) -> None:
    if as_json or not result.success:
        output_result(result, as_json=as_json)
        return
    print_warnings(result)
    data = result.data
    prefix = "[dim](dry run)[/dim] " if data.dry_run else ""
    if data.previous_status:
        console.print(f"{prefix}{data.id} {data.previous_status} -> [bold]{data.status}[/bold]")
    else:
        console.print(f"{prefix}{data.id} [bold]{data.status}[/bold]")
    err_console.print(f"[dim]{data.path}[/dim]")


def new(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Decision title or kebab-case slug"),
    slug: str | None = typer.Option(None, "--slug", help="Explicit slug (default: derived from the title)"),
    decider: list[str] | None = typer.Option(None, "--decider", "-d", help="Decider (repeatable)"),
    tag: list[str] | None = typer.Option(None, "--tag", "-t", help="Tag (repeatable)"),
    impact: str = typer.Option("", "--impact", "-i", help="Scope of the decision"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the id that would be assigned"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Create a Proposed decision and print its id."""
    from adrspine.ops.decisions import new_decision
    from adrspine.ops.requests import NewDecisionRequest

    request = NewDecisionRequest(
        title=title,
        slug=slug,
        deciders=tuple(decider or ()),
        tags=tuple(tag or ()),
        impact=impact,
    )
    result = new_decision(make_context(ctx, dry_run=dry_run), request)
    if json_out or not result.success:
        output_result(result, as_json=json_out)
        return
    print_warnings(result)
    typer.echo(result.data.id)
    verb = "Would create" if result.data.dry_run else "Created"
    err_console.print(f"[dim]{verb} {result.data.path}[/dim]")


def accept(
    ctx: typer.Context,
    ref: str = typer.Argument(..., help="Id (21, 0021, ADR-0021) or slug"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Promote a Proposed decision to Accepted."""
    from adrspine.ops.decisions import accept_decision
    from adrspine.ops.requests import AcceptDecisionRequest

    result = accept_decision(make_context(ctx, dry_run=dry_run), AcceptDecisionRequest(ref=ref))
    _report_transition(result, json_out)


def deprecate(
    ctx: typer.Context,
    ref: str = typer.Argument(..., help="Id or slug"),
    reason: str | None = typer.Option(None, "--reason", "-r", help="Recorded in the deprecation notice"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Retire a decision without a replacement."""
    from adrspine.ops.decisions import deprecate_decision
    from adrspine.ops.requests import DeprecateDecisionRequest

    result = deprecate_decision(
        make_context(ctx, dry_run=dry_run), DeprecateDecisionRequest(ref=ref, reason=reason)
    )
    _report_transition(result, json_out)


def supersede(
    ctx: typer.Context,
    old: str = typer.Argument(..., help="The Accepted decision being replaced"),
    new: str = typer.Argument(..., help="The replacement decision"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Mark OLD as superseded by NEW, linking both documents."""
    from adrspine.ops.decisions import supersede_decision
    from adrspine.ops.requests import SupersedeDecisionRequest

    result: OperationResult[SupersedeResult] = supersede_decision(
        make_context(ctx, dry_run=dry_run), SupersedeDecisionRequest(old_ref=old, new_ref=new)
    )
    if json_out:
        output_result(result, as_json=True)
        return
    print_warnings(result)
    if not result.success:
        fail(result)
    data = result.data
    prefix = "[dim](dry run)[/dim] " if data.dry_run else ""
    console.print(f"{prefix}{data.old_id} [bold]Superseded[/bold] by {data.new_id}")


def list_(
    ctx: typer.Context,
    status: str | None = typer.Option(None, "--status", "-s", help="Proposed, Accepted, Deprecated or Superseded"),
    tag: str | None = typer.Option(None, "--tag", "-t"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List decisions by id, optionally filtered."""
    from adrspine.ops.decisions import list_decisions
    from adrspine.ops.requests import ListDecisionsRequest

    result = list_decisions(make_context(ctx), ListDecisionsRequest(status=status, tag=tag))
    output_result(result, as_json=json_out, title="Decisions", empty="No decisions.")


def show(
    ctx: typer.Context,
    ref: str = typer.Argument(..., help="Id or slug"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show one decision's metadata."""
    from adrspine.ops.decisions import get_decision
    from adrspine.ops.requests import GetDecisionRequest

    result = get_decision(make_context(ctx), GetDecisionRequest(ref=ref))
    output_result(result, as_json=json_out, title=result.data.id if result.success else "")
