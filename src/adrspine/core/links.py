"""
Link Manager: sole owner of ``supersedes`` / ``superseded_by``.

Every write of either field goes through :meth:`LinkManager.link`; the
Document Store refuses link changes from any other caller. That removes the
class of bug where one side of the pair is updated and the other forgotten.

Write order inside :meth:`LinkManager.link`::

    1. new.supersedes = old.id           (in place, new's partition)
    2. old.status = Superseded
       old.superseded_by = new.id        (move old -> superseded/)
       old.date = on

If step 2 fails, the store is left with a one-sided link that the next
:func:`validate_links` pass reports as an integrity error.

Tags:
    links, referential-integrity, supersede, adr-spine
"""

from __future__ import annotations

from datetime import date

from adrspine.core.findings import Finding, FindingCategory, Severity
from adrspine.core.logging import get_logger
from adrspine.core.models import AdrDocument, Partition, Status, format_id
from adrspine.core.store import DocumentStore

logger = get_logger(__name__)


def supersedes_chain(start: AdrDocument, by_id: dict[int, AdrDocument]) -> list[int]:
    """Ids reached by following ``supersedes`` from *start* (excluding *start*).

    Stops at a missing target or at the first repeated id, which is included
    so callers can tell a loop from a dead end.
    """
    chain: list[int] = []
    seen = {start.id}
    current = start
    while current.supersedes is not None:
        target_id = current.supersedes
        chain.append(target_id)
        if target_id in seen or target_id not in by_id:
            break
        seen.add(target_id)
        current = by_id[target_id]
    return chain


def _error(code: str, message: str, doc: AdrDocument, field: str) -> Finding:
    return Finding(
        code=code,
        severity=Severity.ERROR,
        message=message,
        category=FindingCategory.INTEGRITY,
        adr_id=doc.id,
        field=field,
    )


def validate_links(docs: list[AdrDocument]) -> list[Finding]:
    """Report dangling, one-directional, self-referencing and cyclic links."""
    by_id = {doc.id: doc for doc in docs}
    findings: list[Finding] = []

    for doc in sorted(docs, key=lambda d: d.id):
        if doc.supersedes is not None:
            target = by_id.get(doc.supersedes)
            if doc.supersedes == doc.id:
                findings.append(_error("link-self", f"{doc.ref} supersedes itself", doc, "supersedes"))
            elif target is None:
                findings.append(_error(
                    "link-dangling",
                    f"{doc.ref} supersedes {format_id(doc.supersedes)}, which does not exist",
                    doc, "supersedes",
                ))
            elif target.superseded_by != doc.id:
                findings.append(_error(
                    "link-one-sided",
                    f"{doc.ref} supersedes {target.ref} but {target.ref} is not marked "
                    f"superseded by {doc.ref}",
                    doc, "supersedes",
                ))
            else:
                chain = supersedes_chain(doc, by_id)
                if chain and chain[-1] in {doc.id, *chain[:-1]}:
                    path = " -> ".join(format_id(i) for i in [doc.id, *chain])
                    findings.append(_error("link-cycle", f"Supersede chain loops: {path}", doc, "supersedes"))

        if doc.superseded_by is not None:
            target = by_id.get(doc.superseded_by)
            if doc.superseded_by == doc.id:
                findings.append(_error("link-self", f"{doc.ref} is superseded by itself", doc, "superseded_by"))
            elif target is None:
                findings.append(_error(
                    "link-dangling",
                    f"{doc.ref} is superseded by {format_id(doc.superseded_by)}, which does not exist",
                    doc, "superseded_by",
                ))
            elif target.supersedes != doc.id:
                findings.append(_error(
                    "link-one-sided",
                    f"{doc.ref} is superseded by {target.ref} but {target.ref} does not "
                    f"reference {doc.ref} in Supersedes",
                    doc, "superseded_by",
                ))
            if doc.status is not Status.SUPERSEDED:
                findings.append(_error(
                    "link-status",
                    f"{doc.ref} has Superseded-By set but status {doc.status.value}",
                    doc, "superseded_by",
                ))
        elif doc.status is Status.SUPERSEDED:
            findings.append(_error(
                "link-missing",
                f"{doc.ref} is Superseded but names no replacement",
                doc, "superseded_by",
            ))

    return findings


class LinkManager:
    """Writes both sides of a supersede pair through the Document Store."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def link(self, old: AdrDocument, new: AdrDocument, *, on: date) -> tuple[AdrDocument, AdrDocument]:
        """Record that *new* supersedes *old*; returns ``(old, new)`` as stored."""
        linked_new = self.store._apply(new, {"supersedes": old.id}, allow_links=True)
        logger.info("adr_link_written", adr_id=new.id, supersedes=old.id)

        superseded = old.evolve(status=Status.SUPERSEDED, superseded_by=new.id, date=on)
        moved_old = self.store.move(
            superseded, old.partition, Partition.SUPERSEDED, _allow_links=True
        )
        logger.info("adr_superseded", adr_id=old.id, superseded_by=new.id)
        return moved_old, linked_new

    def validate_links(self, docs: list[AdrDocument] | None = None) -> list[Finding]:
        return validate_links(self.store.documents() if docs is None else docs)


__all__ = ["LinkManager", "validate_links", "supersedes_chain"]
