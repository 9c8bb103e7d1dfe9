"""adr-spine core: the decision model and the components that act on it.

Architecture::

    Layer 1 -- Types, Errors, Ambient
        errors.py          Structured error hierarchy (AdrError and subclasses)
        result.py          Result[T] envelope (Ok / Err)
        logging.py         structlog configuration
        settings.py        pydantic-settings configuration (ADR_*)
        clock.py           Clock / SystemClock / FixedClock

    Layer 2 -- Model & Persistence
        models.py          Status, Partition, AdrDocument
        document.py        Metadata block parser / renderer
        template.py        Initial section skeleton
        ids.py             ID Allocator
        store.py           Document Store (stage, verify, commit, delete)

    Layer 3 -- Behaviour
        links.py           Link Manager (sole writer of supersede links)
        lifecycle.py       Lifecycle Engine (transition table)
        findings.py        Finding / Severity / FixAction
        validator.py       Validator and auto-fix
        index.py           Index Builder
        query.py           Query Engine
"""

from adrspine.core.errors import (
    AdrError,
    ConflictError,
    CycleError,
    IntegrityError,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from adrspine.core.models import AdrDocument, Partition, Section, Status
from adrspine.core.result import Err, Ok, Result
from adrspine.core.store import DocumentStore

__all__ = [
    "AdrDocument",
    "AdrError",
    "ConflictError",
    "CycleError",
    "DocumentStore",
    "Err",
    "IntegrityError",
    "InvalidTransitionError",
    "NotFoundError",
    "Ok",
    "Partition",
    "Result",
    "Section",
    "Status",
    "StorageError",
    "ValidationError",
]
