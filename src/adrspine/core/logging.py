"""
Structured logging for adr-spine.

Every module logs through structlog with snake_case event names
(``adr_created``, ``adr_moved``, ``index_rebuilt``, ``op_failed``). Output
goes to stderr so that what a command prints on stdout (an id, a table, a
JSON document) can be piped.

Architecture:
    ::

        configure_logging(level="INFO", json_format=None)
            │
            ▼
        TimeStamper(iso)
        merge_contextvars      command / operation bound by LogContext
        add_log_level
        StackInfoRenderer, set_exc_info
        ├── json:    service="adr-spine", format_exc_info, JSONRenderer
        └── console: ConsoleRenderer (colours only on a tty)

    ``json_format=None`` picks JSON whenever stderr is not a terminal, which
    is what CI jobs running ``adr validate`` want.

Examples:
    >>> configure_logging(level="DEBUG")
    >>> logger = get_logger(__name__)
    >>> with LogContext(command="accept"):
    ...     logger.info("adr_moved", adr_id=21, to_partition="accepted")

Tags:
    logging, structlog, observability, adr-spine
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SERVICE_NAME = "adr-spine"


def _add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Looked up per logger so pytest's capsys and CliRunner redirection apply.
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str = "WARNING", json_format: bool | None = None) -> None:
    """Configure structlog for the process.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_format: True for JSON lines, False for the console renderer,
            None to decide from whether stderr is a terminal
    """
    if json_format is None:
        json_format = not sys.stderr.isatty()

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if json_format:
        processors += [_add_service, structlog.processors.format_exc_info]
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Logger for a module; *name* is carried as the ``logger_name`` key."""
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name, logger_name=name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


class LogContext:
    """Bind keys for the duration of a ``with`` block (or a Typer context resource)."""

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self._context)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "LogContext",
]
