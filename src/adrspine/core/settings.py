"""
Centralized settings for adr-spine.

Manifesto:
    One validated, cached settings object instead of each command parsing
    environment variables on its own. Values come from ``ADR_*`` environment
    variables or a ``.env`` file at the project root; the CLI ``--root``
    option overrides the store location.

    - **Pydantic validation:** Type-checked at startup, not mid-command
    - **Environment-driven:** ``ADR_ROOT``, ``ADR_LOG_LEVEL``, ...
    - **Sensible defaults:** ``docs/adr`` under the project root

Examples:
    >>> from adrspine.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.root.name
    'adr'

Tags:
    settings, configuration, pydantic, environment, adr-spine
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def find_project_root(start: Path | None = None) -> Path:
    """Walk upward from *start* to find the project root.

    Recognised root markers (checked in order):

    * ``pyproject.toml``
    * ``.git`` directory

    Falls back to *start* (or cwd) when no marker is found.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        if (directory / "pyproject.toml").exists():
            return directory
        if (directory / ".git").exists():
            return directory
    return current


class AdrSettings(BaseSettings):
    """adr-spine configuration.

    Fields
    ──────
    root              : Directory holding the four partitions and the index
    extension         : Document file extension (without dot)
    index_name        : Generated index document name (sibling of partitions)
    default_deciders  : Deciders used by ``adr new`` when none are given
    log_level         : structlog level
    log_format        : ``console``, ``json`` or ``auto`` (JSON when not a tty)
    """

    model_config = SettingsConfigDict(
        env_prefix="ADR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Store ────────────────────────────────────────────────────
    root: Path = Field(default=Path("docs/adr"), description="ADR store directory")
    extension: str = Field(default="md")
    index_name: str = Field(default="INDEX.md")

    # ── Authoring ────────────────────────────────────────────────
    default_deciders: list[str] = Field(default_factory=list)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="auto")

    @field_validator("extension")
    @classmethod
    def _strip_dot(cls, value: str) -> str:
        return value.lstrip(".") or "md"

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in {"console", "json", "auto"}:
            raise ValueError(f"log_format must be console, json or auto, got {value!r}")
        return value

    @property
    def json_logs(self) -> bool | None:
        """Tri-state flag for :func:`adrspine.core.logging.configure_logging`."""
        if self.log_format == "auto":
            return None
        return self.log_format == "json"

    def resolve_root(self, project_root: Path | None = None) -> Path:
        """Absolute store root; relative roots are anchored at the project root."""
        if self.root.is_absolute():
            return self.root
        return (project_root or find_project_root()) / self.root


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, AdrSettings] = {}


def get_settings(
    *,
    project_root: Path | None = None,
    _force_reload: bool = False,
) -> AdrSettings:
    """Load, validate, and cache an :class:`AdrSettings` instance.

    Parameters
    ----------
    project_root:
        Override the auto-detected project root (where ``.env`` is read).
    _force_reload:
        Bypass cache and reload.
    """
    root = (project_root or find_project_root()).resolve()
    cache_key = str(root)

    if not _force_reload and cache_key in _settings_cache:
        return _settings_cache[cache_key]

    env_file = root / ".env"
    settings = AdrSettings(
        _env_file=env_file if env_file.is_file() else None,  # type: ignore[call-arg]
    )
    _settings_cache[cache_key] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "AdrSettings",
    "clear_settings_cache",
    "find_project_root",
    "get_settings",
]
