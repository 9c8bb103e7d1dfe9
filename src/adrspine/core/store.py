"""
Filesystem-backed Document Store.

Owns durable create / read / update / move of decision documents across the
four status partitions, plus the generated sibling index document.

Manifesto:
    A crash at any point must leave every decision readable from at least one
    location. Every write therefore goes through the same path:

    1. **Stage:** write a temp file in the destination directory, fsync it
    2. **Verify:** read the staged bytes back and parse them
    3. **Commit:** ``os.replace`` the staged file onto its final name
    4. **Delete:** only for moves, remove the source copy last

    Before step 3 the original is untouched. Between 3 and 4 the document is
    durably readable at its new location and at worst duplicated, which the
    Validator reports as an integrity error instead of resolving it.

Architecture:
    ::

        <root>/
          proposed/    ADR-0021-domain-layer-pure.md
          accepted/    ADR-0003-event-storage-v1.md
          deprecated/
          superseded/
          INDEX.md     (generated, fully replaced on every rebuild)

Guardrails:
    ❌ DON'T: Write supersedes / superseded_by through update_fields()
    ✅ DO: Go through adrspine.core.links.LinkManager

    ❌ DON'T: Change status without moving the file
    ✅ DO: move(doc.evolve(status=...), from_partition, to_partition)

    ❌ DON'T: Assume a single copy per id
    ✅ DO: Treat multiple copies as an IntegrityError and surface it

Tags:
    storage, filesystem, durability, atomic-write, adr-spine
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from adrspine.core.clock import Clock, SystemClock
from adrspine.core.document import parse_document, render_document
from adrspine.core.errors import (
    ConflictError,
    ErrorContext,
    IntegrityError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from adrspine.core.logging import get_logger
from adrspine.core.models import (
    FILENAME_RE,
    LINK_FIELDS,
    SLUG_RE,
    AdrDocument,
    DocumentDefaults,
    Partition,
    Status,
    parse_id,
    slugify,
)
from adrspine.core.result import Err, Ok, Result
from adrspine.core.template import skeleton_sections

logger = get_logger(__name__)

_PARTITION_ORDER = {p: i for i, p in enumerate(Partition)}


@dataclass(frozen=True, slots=True)
class StoredFile:
    """A document-shaped file found in a partition directory."""

    path: Path
    partition: Partition
    adr_id: int
    slug: str


@dataclass(frozen=True, slots=True)
class StoreEntry:
    """A stored file together with the outcome of parsing it."""

    file: StoredFile
    result: Result[AdrDocument]

    @property
    def document(self) -> AdrDocument | None:
        return self.result.value if isinstance(self.result, Ok) else None


@contextmanager
def _io_guard(action: str, path: Path, **context: Any) -> Iterator[None]:
    """Turn OSError into StorageError naming the artifact."""
    try:
        yield
    except OSError as exc:
        raise StorageError(
            f"Failed to {action} {path}: {exc}",
            artifact=str(path),
            context=ErrorContext(path=str(path), operation=action, **context),
            cause=exc,
        ) from exc


def _read_document(path: Path, **context: Any) -> str:
    """Read a document as UTF-8; undecodable bytes make it unparseable, not a crash."""
    with _io_guard("read", path, **context):
        raw = path.read_bytes()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError(
            f"{path.name} is not valid UTF-8 (byte {exc.start})",
            field="encoding",
            constraint="utf-8",
            context=ErrorContext(path=str(path), **context),
            cause=exc,
        ) from exc


def _check_header_values(defaults: DocumentDefaults) -> None:
    """Refuse values the one-line ``Key: value`` header cannot hold."""
    single = [("title", defaults.title or ""), ("impact", defaults.impact)]
    listed = [("deciders", d) for d in defaults.deciders] + [("tags", t) for t in sorted(defaults.tags)]
    for field, value in single + listed:
        if "\n" in value or "\r" in value:
            raise ValidationError(
                f"{field.capitalize()} {value!r} spans more than one line",
                field=field,
                value=value,
                constraint="single-line",
            )
    for field, value in listed:
        if "," in value:
            raise ValidationError(
                f"{field.capitalize()} entry {value!r} contains a comma, the list separator",
                field=field,
                value=value,
                constraint="no-comma",
            )


class DocumentStore:
    """
    Collection of decision documents rooted at a directory.

    Args:
        root: Directory holding the partitions and the index document
        extension: Document file extension (without dot)
        index_name: Name of the generated index document
        clock: Source of "today" for new documents
    """

    def __init__(
        self,
        root: Path | str,
        *,
        extension: str = "md",
        index_name: str = "INDEX.md",
        clock: Clock | None = None,
    ):
        self.root = Path(root)
        self.extension = extension.lstrip(".")
        self.index_name = index_name
        self.clock = clock or SystemClock()

    def __repr__(self) -> str:
        return f"DocumentStore({str(self.root)!r})"

    # ------------------------------------------------------------------ #
    # Layout
    # ------------------------------------------------------------------ #

    def partition_dir(self, partition: Partition) -> Path:
        return self.root / partition.value

    @property
    def index_path(self) -> Path:
        return self.root / self.index_name

    def ensure_layout(self) -> None:
        for partition in Partition:
            with _io_guard("create directory", self.partition_dir(partition)):
                self.partition_dir(partition).mkdir(parents=True, exist_ok=True)

    def path_for(self, doc: AdrDocument, partition: Partition | None = None) -> Path:
        return self.partition_dir(partition or doc.partition) / doc.filename(self.extension)

    # ------------------------------------------------------------------ #
    # Scanning
    # ------------------------------------------------------------------ #

    def _candidates(self) -> Iterator[tuple[Partition, Path]]:
        suffix = f".{self.extension}"
        for partition in Partition:
            directory = self.partition_dir(partition)
            if not directory.is_dir():
                continue
            with _io_guard("list", directory, partition=partition.value):
                paths = sorted(directory.iterdir())
            for path in paths:
                if path.is_file() and path.suffix == suffix and not path.name.startswith("."):
                    yield partition, path

    def scan(self) -> list[StoredFile]:
        """Every correctly named document file, ordered by id then partition."""
        files = []
        for partition, path in self._candidates():
            match = FILENAME_RE.match(path.name)
            if match and match.group("ext") == self.extension:
                files.append(
                    StoredFile(path, partition, int(match.group("id")), match.group("slug"))
                )
        files.sort(key=lambda f: (f.adr_id, _PARTITION_ORDER[f.partition], f.slug))
        return files

    def stray_files(self) -> list[Path]:
        """Files with the document extension whose names do not encode an identity."""
        return [path for _, path in self._candidates() if not FILENAME_RE.match(path.name)]

    def staged_artifacts(self) -> list[Path]:
        """Temp files left behind by an interrupted write."""
        found: list[Path] = []
        for directory in [self.root, *(self.partition_dir(p) for p in Partition)]:
            if directory.is_dir():
                with _io_guard("list", directory):
                    found.extend(sorted(directory.glob(".*.tmp")))
        return found

    def load(self, stored: StoredFile) -> AdrDocument:
        text = _read_document(stored.path, adr_id=stored.adr_id)
        return parse_document(
            text, adr_id=stored.adr_id, slug=stored.slug, source=str(stored.path)
        )

    def load_all(self) -> list[StoreEntry]:
        """Parse every stored file; parse failures are kept, not dropped."""
        entries = []
        for stored in self.scan():
            try:
                result: Result[AdrDocument] = Ok(self.load(stored))
            except (ValidationError, StorageError) as exc:
                result = Err(exc)
            entries.append(StoreEntry(stored, result))
        return entries

    def documents(self) -> list[AdrDocument]:
        """Every parseable document, sorted by id."""
        return [entry.document for entry in self.load_all() if entry.document is not None]

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    def locate(self, ref: int | str) -> StoredFile:
        """Find the single file for an id (``21``, ``"0021"``, ``"ADR-0021"``) or slug."""
        adr_id = ref if isinstance(ref, int) else parse_id(ref)
        slug = None if isinstance(ref, int) else ref.strip()

        matches = [
            f for f in self.scan()
            if (adr_id is not None and f.adr_id == adr_id) or (slug is not None and f.slug == slug)
        ]
        if not matches:
            raise NotFoundError(f"No ADR matches {ref!r}", ref=str(ref)).with_context(
                adr_id=adr_id, slug=slug
            )
        if len(matches) > 1:
            locations = ", ".join(f"{m.partition.value}/{m.path.name}" for m in matches)
            raise IntegrityError(
                f"{ref!r} resolves to {len(matches)} files: {locations}",
                context=ErrorContext(adr_id=matches[0].adr_id, slug=matches[0].slug),
            )
        return matches[0]

    def read(self, ref: int | str) -> AdrDocument:
        """Read a document by id or slug from whichever partition holds it."""
        return self.load(self.locate(ref))

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def create(self, slug: str, defaults: DocumentDefaults | None = None) -> AdrDocument:
        """Allocate an id and write a new ``Proposed`` document."""
        doc = self.plan(slug, defaults)
        self.ensure_layout()
        written = self._write_verified(doc, self.path_for(doc))
        logger.info("adr_created", adr_id=doc.id, slug=slug, path=str(self.path_for(doc)))
        return written

    def plan(self, slug: str, defaults: DocumentDefaults | None = None) -> AdrDocument:
        """Build the document :meth:`create` would write, without writing it."""
        from adrspine.core.ids import IdAllocator

        defaults = defaults or DocumentDefaults()
        if not SLUG_RE.match(slug):
            raise ValidationError(
                f"Slug {slug!r} is not kebab-case (try {slugify(slug)!r})",
                field="slug",
                value=slug,
                constraint="kebab-case",
            )
        if parse_id(slug) is not None:
            raise ValidationError(
                f"Slug {slug!r} would be read as an ADR id",
                field="slug",
                value=slug,
                constraint="not-an-id",
            )
        _check_header_values(defaults)
        existing = [f for f in self.scan() if f.slug == slug]
        if existing:
            raise ConflictError(
                f"Slug {slug!r} is already used by ADR-{existing[0].adr_id:04d}",
                context=ErrorContext(adr_id=existing[0].adr_id, slug=slug),
            )

        title = defaults.title or slug.replace("-", " ").title()
        return AdrDocument(
            id=IdAllocator(self).next_id(),
            slug=slug,
            title=title,
            status=Status.PROPOSED,
            date=self.clock.today().isoformat(),
            deciders=tuple(defaults.deciders),
            tags=frozenset(defaults.tags),
            impact=defaults.impact,
            sections=defaults.sections if defaults.sections is not None else skeleton_sections(title),
        )

    def update_fields(self, doc: AdrDocument, patch: dict[str, Any]) -> AdrDocument:
        """Apply a metadata patch in place (same partition).

        Link fields are refused; status changes that would change partition
        must go through :meth:`move`.
        """
        return self._apply(doc, patch, allow_links=False)

    def move(
        self,
        doc: AdrDocument,
        from_partition: Partition,
        to_partition: Partition,
        *,
        _allow_links: bool = False,
    ) -> AdrDocument:
        """Relocate *doc* between partitions: write new, verify, delete old.

        *doc* is the already-patched document; its status must match
        *to_partition*.
        """
        if doc.partition is not to_partition:
            raise IntegrityError(
                f"{doc.ref} has status {doc.status.value} but is being moved to {to_partition.value}/",
                context=ErrorContext(adr_id=doc.id, partition=to_partition.value),
            )
        source = self.path_for(doc, from_partition)
        target = self.path_for(doc, to_partition)
        if not source.is_file():
            raise NotFoundError(
                f"{doc.ref} is not in {from_partition.value}/", ref=doc.ref
            ).with_context(adr_id=doc.id, path=str(source))
        if target.exists():
            raise IntegrityError(
                f"{doc.ref} already exists in {to_partition.value}/; refusing to create a duplicate",
                context=ErrorContext(adr_id=doc.id, path=str(target)),
            )
        current = self.load(StoredFile(source, from_partition, doc.id, doc.slug))
        self._guard_links(current, doc, allow_links=_allow_links)

        written = self._write_verified(doc, target)
        try:
            source.unlink()
        except OSError as exc:
            raise StorageError(
                f"{doc.ref} was written to {target} but {source} could not be removed; "
                "the document is duplicated until the old copy is deleted",
                artifact=str(source),
                context=ErrorContext(adr_id=doc.id, path=str(source), operation="move"),
                cause=exc,
            ) from exc

        logger.info(
            "adr_moved",
            adr_id=doc.id,
            from_partition=from_partition.value,
            to_partition=to_partition.value,
        )
        return written

    def write_index(self, text: str) -> Path:
        """Replace the index document wholesale."""
        self.root.mkdir(parents=True, exist_ok=True)
        self._atomic_write(self.index_path, text)
        return self.index_path

    def read_index(self) -> str | None:
        if not self.index_path.is_file():
            return None
        with _io_guard("read", self.index_path):
            return self.index_path.read_text(encoding="utf-8", errors="replace")

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _apply(self, doc: AdrDocument, patch: dict[str, Any], *, allow_links: bool) -> AdrDocument:
        if not allow_links and LINK_FIELDS & patch.keys():
            raise IntegrityError(
                f"Refusing to write {sorted(LINK_FIELDS & patch.keys())} on {doc.ref}; "
                "supersede links are owned by the LinkManager",
                context=ErrorContext(adr_id=doc.id, operation="update_fields"),
            )
        updated = doc.evolve(**patch)
        if updated.partition is not doc.partition:
            raise IntegrityError(
                f"Status change {doc.status.value} -> {updated.status.value} on {doc.ref} "
                "requires a partition move",
                context=ErrorContext(adr_id=doc.id, operation="update_fields"),
            )
        path = self.path_for(doc)
        if not path.is_file():
            raise NotFoundError(f"{doc.ref} is not in {doc.partition.value}/", ref=doc.ref)
        written = self._write_verified(updated, path)
        logger.debug("adr_updated", adr_id=doc.id, fields=sorted(patch))
        return written

    @staticmethod
    def _guard_links(current: AdrDocument, updated: AdrDocument, *, allow_links: bool) -> None:
        if allow_links:
            return
        for name in LINK_FIELDS:
            if getattr(current, name) != getattr(updated, name):
                raise IntegrityError(
                    f"Refusing to change {name} on {updated.ref} outside the LinkManager",
                    context=ErrorContext(adr_id=updated.id, operation="move"),
                )

    def _write_verified(self, doc: AdrDocument, target: Path) -> AdrDocument:
        """Stage, verify, commit, verify again. Returns the document as stored."""
        text = render_document(doc)
        self._atomic_write(target, text, verify=lambda staged: self._verify(staged, doc, text))
        return self._verify(target, doc, text)

    def _verify(self, path: Path, doc: AdrDocument, expected: str) -> AdrDocument:
        try:
            actual = _read_document(path, adr_id=doc.id)
        except ValidationError as exc:
            raise StorageError(
                f"Verification failed for {path}: {exc.message}",
                artifact=str(path),
                cause=exc,
            ) from exc
        if actual != expected:
            raise StorageError(
                f"Verification failed for {path}: content differs from what was written",
                artifact=str(path),
                context=ErrorContext(adr_id=doc.id, path=str(path), operation="verify"),
            )
        try:
            return parse_document(actual, adr_id=doc.id, slug=doc.slug, source=str(path))
        except ValidationError as exc:
            raise StorageError(
                f"Verification failed for {path}: written document does not parse",
                artifact=str(path),
                cause=exc,
            ) from exc

    def _atomic_write(self, path: Path, content: str, verify=None) -> None:
        """Write *content* to a temp file beside *path*, fsync, optionally verify, then rename.

        On any failure the temp file is removed and *path* is left as it was.
        """
        with _io_guard("create directory", path.parent):
            path.parent.mkdir(parents=True, exist_ok=True)
        with _io_guard("stage", path):
            fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
        tmp_path = Path(tmp_name)
        try:
            with _io_guard("write", tmp_path):
                with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
                    handle.write(content)
                    handle.flush()
                    os.fsync(handle.fileno())
            if verify is not None:
                verify(tmp_path)
            with _io_guard("commit", path):
                os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise


__all__ = ["DocumentStore", "StoredFile", "StoreEntry"]
