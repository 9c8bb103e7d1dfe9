"""
Typed request objects for operations.

Each dataclass represents the *input* contract for a single operation
function. Requests carry only transport-agnostic data, never Typer params.
"""

from __future__ import annotations

from dataclasses import dataclass

# ------------------------------------------------------------------ #
# Lifecycle
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class NewDecisionRequest:
    """Request for :func:`adrspine.ops.decisions.new_decision`.

    Attributes:
        title: Human title or an already kebab-cased slug.
        slug: Explicit slug; derived from *title* when omitted.
        deciders: Deciders; context defaults apply when empty.
        tags: Initial tags.
        impact: Free-text scope description.
    """

    title: str = ""
    slug: str | None = None
    deciders: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    impact: str = ""


@dataclass(frozen=True, slots=True)
class AcceptDecisionRequest:
    """Request for :func:`adrspine.ops.decisions.accept_decision`."""

    ref: str = ""


@dataclass(frozen=True, slots=True)
class DeprecateDecisionRequest:
    """Request for :func:`adrspine.ops.decisions.deprecate_decision`."""

    ref: str = ""
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class SupersedeDecisionRequest:
    """Request for :func:`adrspine.ops.decisions.supersede_decision`.

    Attributes:
        old_ref: The Accepted decision being replaced.
        new_ref: The replacement decision.
    """

    old_ref: str = ""
    new_ref: str = ""


# ------------------------------------------------------------------ #
# Queries
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class ListDecisionsRequest:
    """Request for :func:`adrspine.ops.decisions.list_decisions`."""

    status: str | None = None
    tag: str | None = None


@dataclass(frozen=True, slots=True)
class GetDecisionRequest:
    """Request for :func:`adrspine.ops.decisions.get_decision`."""

    ref: str = ""


# ------------------------------------------------------------------ #
# Maintenance
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class ValidateRequest:
    """Request for :func:`adrspine.ops.validation.validate_decisions`."""

    fix: bool = False
