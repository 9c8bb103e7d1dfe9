"""
Lifecycle Engine: the Propose -> Accept -> {Deprecate | Supersede} state machine.

Manifesto:
    - **Explicit transitions:** the allowed moves are data (``TRANSITIONS``)
    - **Terminal means terminal:** nothing leaves Deprecated or Superseded,
      and trying is always an InvalidTransitionError, never a silent no-op
    - **Results, not raises:** every public operation returns ``Ok``/``Err``
    - **Status and location together:** a status change is always a move

Architecture:
    ::

                    accept                supersede
        Proposed ─────────────► Accepted ─────────────► Superseded
            │                      │
            │ deprecate            │ deprecate
            └──────────────┬───────┘
                           ▼
                       Deprecated

    Every successful transition stamps ``date`` with today's date, moves the
    file to the partition named by the new status, and regenerates the index.

Tags:
    state-machine, lifecycle, transitions, adr-spine
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from adrspine.core.clock import Clock
from adrspine.core.errors import (
    AdrError,
    ConflictError,
    CycleError,
    ErrorContext,
    IntegrityError,
    InvalidTransitionError,
    StorageError,
)
from adrspine.core.index import IndexRebuild, rebuild_index
from adrspine.core.links import LinkManager, supersedes_chain
from adrspine.core.logging import LogContext, get_logger
from adrspine.core.models import AdrDocument, DocumentDefaults, Status, format_id
from adrspine.core.result import Err, Ok, Result
from adrspine.core.store import DocumentStore

logger = get_logger(__name__)

T = TypeVar("T")

TRANSITIONS: dict[Status, frozenset[Status]] = {
    Status.PROPOSED: frozenset({Status.ACCEPTED, Status.DEPRECATED}),
    Status.ACCEPTED: frozenset({Status.DEPRECATED, Status.SUPERSEDED}),
    Status.DEPRECATED: frozenset(),
    Status.SUPERSEDED: frozenset(),
}


def can_transition(current: Status, target: Status) -> bool:
    return target in TRANSITIONS[current]


def _require(doc: AdrDocument, target: Status, verb: str) -> None:
    if can_transition(doc.status, target):
        return
    if doc.status.is_terminal:
        reason = f"{doc.status.value} is a terminal state"
    else:
        allowed = sorted(s.value for s in TRANSITIONS[doc.status])
        reason = f"a {doc.status.value} decision can only become {' or '.join(allowed)}"
    raise InvalidTransitionError(
        f"Cannot {verb} {doc.ref} ({doc.slug}): {reason}",
        current=doc.status.value,
        target=target.value,
        context=ErrorContext(adr_id=doc.id, slug=doc.slug, operation=verb),
    )


@dataclass(frozen=True, slots=True)
class TransitionOutcome:
    """A document after a successful transition (or as it would be, when ``dry_run``)."""

    document: AdrDocument
    previous: Status
    warnings: tuple[str, ...] = ()
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class SupersedeOutcome:
    """Both sides of a supersede pair as stored (or as they would be, when ``dry_run``)."""

    old: AdrDocument
    new: AdrDocument
    warnings: tuple[str, ...] = ()
    dry_run: bool = False


class LifecycleEngine:
    """
    Drives lifecycle transitions over a Document Store.

    Args:
        store: The Document Store to operate on
        clock: Source of the transition date (defaults to the store's clock)
        links: Link Manager (one is created for *store* when omitted)
        rebuild: Index regeneration hook run after every mutation
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        clock: Clock | None = None,
        links: LinkManager | None = None,
        rebuild: Callable[[DocumentStore], IndexRebuild] = rebuild_index,
    ):
        self.store = store
        self.clock = clock or store.clock
        self.links = links or LinkManager(store)
        self._rebuild = rebuild

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def propose(
        self, slug: str, defaults: DocumentDefaults | None = None, *, dry_run: bool = False
    ) -> Result[TransitionOutcome]:
        """Create a new decision in ``Proposed``."""

        def _propose() -> TransitionOutcome:
            if dry_run:
                return TransitionOutcome(self.store.plan(slug, defaults), Status.PROPOSED, dry_run=True)
            doc = self.store.create(slug, defaults)
            return TransitionOutcome(doc, Status.PROPOSED, self._refresh_index())

        return self._run("propose", _propose)

    def accept(self, ref: int | str, *, dry_run: bool = False) -> Result[TransitionOutcome]:
        """``Proposed`` -> ``Accepted``."""

        def _accept() -> TransitionOutcome:
            doc = self._read_placed(ref)
            _require(doc, Status.ACCEPTED, "accept")
            accepted = doc.evolve(status=Status.ACCEPTED, date=self.clock.today())
            if dry_run:
                return TransitionOutcome(accepted, doc.status, dry_run=True)
            stored = self.store.move(accepted, doc.partition, accepted.partition)
            return TransitionOutcome(stored, doc.status, self._refresh_index())

        return self._run("accept", _accept)

    def deprecate(
        self, ref: int | str, reason: str | None = None, *, dry_run: bool = False
    ) -> Result[TransitionOutcome]:
        """``Proposed | Accepted`` -> ``Deprecated``, prepending a notice to the body."""

        def _deprecate() -> TransitionOutcome:
            doc = self._read_placed(ref)
            _require(doc, Status.DEPRECATED, "deprecate")
            today = self.clock.today()
            notice = f"> **Deprecated** on {today.isoformat()}"
            if reason and reason.strip():
                notice += f": {' '.join(reason.split())}"
            preamble = f"{notice}\n\n{doc.preamble}" if doc.preamble.strip() else notice
            deprecated = doc.evolve(status=Status.DEPRECATED, date=today, preamble=preamble)
            if dry_run:
                return TransitionOutcome(deprecated, doc.status, dry_run=True)
            stored = self.store.move(deprecated, doc.partition, deprecated.partition)
            return TransitionOutcome(stored, doc.status, self._refresh_index())

        return self._run("deprecate", _deprecate)

    def supersede(
        self, old_ref: int | str, new_ref: int | str, *, dry_run: bool = False
    ) -> Result[SupersedeOutcome]:
        """``Accepted`` -> ``Superseded``, linking *old* and *new* both ways."""

        def _supersede() -> SupersedeOutcome:
            old = self._read_placed(old_ref)
            _require(old, Status.SUPERSEDED, "supersede")
            new = self._read_placed(new_ref)
            warnings = self._check_replacement(old, new)
            today = self.clock.today()

            if dry_run:
                return SupersedeOutcome(
                    old.evolve(status=Status.SUPERSEDED, superseded_by=new.id, date=today),
                    new.evolve(supersedes=old.id),
                    warnings,
                    dry_run=True,
                )
            old_stored, new_stored = self.links.link(old, new, on=today)
            warnings += self._refresh_index()
            return SupersedeOutcome(old_stored, new_stored, warnings)

        return self._run("supersede", _supersede)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _read_placed(self, ref: int | str) -> AdrDocument:
        """Read *ref*, refusing a document whose status disagrees with its directory."""
        stored = self.store.locate(ref)
        doc = self.store.load(stored)
        if doc.partition is not stored.partition:
            raise IntegrityError(
                f"{doc.ref} has status {doc.status.value} but lives in {stored.partition.value}/; "
                "run `adr validate` and move it by hand",
                context=ErrorContext(adr_id=doc.id, slug=doc.slug, partition=stored.partition.value),
            )
        return doc

    def _check_replacement(self, old: AdrDocument, new: AdrDocument) -> tuple[str, ...]:
        context = ErrorContext(adr_id=old.id, slug=old.slug, operation="supersede")
        if new.id == old.id:
            raise CycleError(f"{old.ref} cannot supersede itself", chain=[old.id], context=context)

        by_id = {doc.id: doc for doc in self.store.documents()}

        # new already reaching old through another document; a direct
        # new -> old link is a half-written supersede and is completed instead.
        forward = supersedes_chain(new, by_id)
        if old.id in forward[1:]:
            loop = [new.id, *forward[: forward.index(old.id, 1) + 1]]
            raise CycleError(
                f"{new.ref} already supersedes {old.ref} through "
                + " -> ".join(format_id(i) for i in loop),
                chain=loop,
                context=context,
            )

        if new.supersedes is not None and new.supersedes != old.id:
            raise ConflictError(
                f"{new.ref} already supersedes {format_id(new.supersedes)}",
                context=context,
            )

        # The new link is new -> old; a loop exists if old already leads back to new.
        chain = supersedes_chain(old, by_id)
        if new.id in chain:
            loop = [new.id, old.id, *chain[: chain.index(new.id) + 1]]
            raise CycleError(
                f"{new.ref} superseding {old.ref} would create a cycle: "
                + " -> ".join(format_id(i) for i in loop),
                chain=loop,
                context=context,
            )

        if new.status is Status.PROPOSED:
            return (f"Replacement {new.ref} is still Proposed",)
        if new.status.is_terminal:
            return (f"Replacement {new.ref} is {new.status.value}",)
        return ()

    def _refresh_index(self) -> tuple[str, ...]:
        """Rebuild the index; a failure leaves it stale but does not undo the mutation."""
        try:
            self._rebuild(self.store)
        except AdrError as exc:
            logger.warning("index_rebuild_failed", error=exc.message)
            return (f"Index not rebuilt ({exc.message}); run `adr index`",)
        return ()

    def _run(self, operation: str, fn: Callable[[], T]) -> Result[T]:
        with LogContext(operation=operation):
            try:
                outcome = fn()
            except AdrError as exc:
                logger.info("transition_rejected", code=exc.code, error=exc.message)
                return Err(exc)
            except OSError as exc:
                logger.error("transition_io_failed", error=str(exc))
                return Err(StorageError(f"{operation} failed: {exc}", cause=exc))
        return Ok(outcome)


__all__ = [
    "TRANSITIONS",
    "can_transition",
    "TransitionOutcome",
    "SupersedeOutcome",
    "LifecycleEngine",
]
