"""Tests for settings loading and the logging setup."""

from pathlib import Path

import pytest
import structlog
from pydantic import ValidationError as PydanticValidationError

from adrspine.core.logging import LogContext, configure_logging, get_logger
from adrspine.core.settings import AdrSettings, find_project_root, get_settings


class TestAdrSettings:
    def test_defaults(self, tmp_path):
        settings = get_settings(project_root=tmp_path)
        assert settings.root == Path("docs/adr")
        assert settings.extension == "md"
        assert settings.index_name == "INDEX.md"
        assert settings.default_deciders == []
        assert settings.json_logs is None

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ADR_ROOT", "architecture/decisions")
        monkeypatch.setenv("ADR_EXTENSION", ".markdown")
        monkeypatch.setenv("ADR_DEFAULT_DECIDERS", '["Alice", "Bob"]')
        monkeypatch.setenv("ADR_LOG_FORMAT", "JSON")
        settings = get_settings(project_root=tmp_path)
        assert settings.root == Path("architecture/decisions")
        assert settings.extension == "markdown"
        assert settings.default_deciders == ["Alice", "Bob"]
        assert settings.json_logs is True

    def test_env_file_at_project_root(self, tmp_path):
        (tmp_path / ".env").write_text("ADR_INDEX_NAME=README.md\n", encoding="utf-8")
        assert get_settings(project_root=tmp_path).index_name == "README.md"

    def test_cached_per_project_root(self, tmp_path, monkeypatch):
        first = get_settings(project_root=tmp_path)
        monkeypatch.setenv("ADR_EXTENSION", "txt")
        assert get_settings(project_root=tmp_path) is first
        assert get_settings(project_root=tmp_path, _force_reload=True).extension == "txt"

    def test_rejects_unknown_log_format(self):
        with pytest.raises(PydanticValidationError):
            AdrSettings(log_format="xml")

    def test_resolve_root(self, tmp_path):
        assert AdrSettings().resolve_root(tmp_path) == tmp_path / "docs" / "adr"
        absolute = tmp_path / "elsewhere"
        assert AdrSettings(root=absolute).resolve_root(Path("/ignored")) == absolute


class TestFindProjectRoot:
    def test_walks_up_to_pyproject(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == tmp_path.resolve()

    def test_git_directory(self, tmp_path):
        (tmp_path / ".git").mkdir()
        nested = tmp_path / "docs"
        nested.mkdir()
        assert find_project_root(nested) == tmp_path.resolve()


@pytest.fixture
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.mark.usefixtures("_reset_structlog")
class TestLogging:
    def test_json_logs_go_to_stderr(self, capsys):
        configure_logging(level="INFO", json_format=True)
        with LogContext(command="accept"):
            get_logger("adrspine.test").info("adr_moved", adr_id=3)
        get_logger("adrspine.test").info("after_context")
        captured = capsys.readouterr()
        assert captured.out == ""
        first, second = captured.err.strip().splitlines()
        assert '"command": "accept"' in first
        assert '"logger_name": "adrspine.test"' in first
        assert '"service": "adr-spine"' in first
        assert "command" not in second

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        get_logger().info("hidden")
        assert capsys.readouterr().err == ""
