"""Tests for validation and index operations."""

from adrspine.core.models import Partition
from adrspine.ops.index import rebuild_index
from adrspine.ops.requests import ValidateRequest
from adrspine.ops.validation import validate_decisions
from tests._support.documents import document_text


class TestValidateDecisions:
    def test_clean_store(self, ctx):
        result = validate_decisions(ctx, ValidateRequest())
        assert result.success
        assert result.data.findings == []
        assert result.data.errors == 0

    def test_errors_fail_with_report(self, ctx, write_raw):
        write_raw(Partition.ACCEPTED, "ADR-0004-x.md", document_text(date_text="Jan 5", impact=""))
        result = validate_decisions(ctx, ValidateRequest())
        assert not result.success
        assert result.error.code == "VALIDATION_FAILED"
        assert result.error.exit_code == 1
        report = result.data
        assert report.errors == 1
        assert {f["code"] for f in report.findings} == {"date-format", "impact-empty", "index-stale"}

    def test_fix(self, ctx, store, write_raw):
        write_raw(Partition.ACCEPTED, "ADR-0004-x.md", document_text(date_text="Jan 5", impact=""))
        result = validate_decisions(ctx, ValidateRequest(fix=True))
        assert result.success
        assert [f["code"] for f in result.data.findings] == ["impact-empty"]
        assert result.data.warnings == 1
        assert store.read(4).date == "2026-01-05"

    def test_fix_dry_run_reports_without_writing(self, dry_ctx, store, write_raw):
        write_raw(Partition.ACCEPTED, "ADR-0004-x.md", document_text(date_text="Jan 5"))
        result = validate_decisions(dry_ctx, ValidateRequest(fix=True))
        assert result.success
        assert result.data.dry_run
        assert {f["code"] for f in result.data.fixed} == {"date-format", "index-stale"}
        assert store.read(4).date == "Jan 5"
        assert store.read_index() is None


class TestRebuildIndex:
    def test_writes_and_counts(self, ctx, store, proposed):
        proposed("use-postgres")
        result = rebuild_index(ctx)
        assert result.success
        assert result.data.changed
        assert result.data.total == 1
        assert result.data.counts == {"Proposed": 1, "Accepted": 0, "Deprecated": 0, "Superseded": 0}
        assert store.read_index() is not None

    def test_unchanged_second_run(self, ctx, proposed):
        proposed("use-postgres")
        rebuild_index(ctx)
        assert rebuild_index(ctx).data.changed is False

    def test_unchanged_after_lifecycle_refresh(self, ctx, store, engine):
        engine.propose("use-postgres").unwrap()
        result = rebuild_index(ctx)
        assert result.data.changed is False
        assert result.data.path == str(store.index_path)

    def test_dry_run(self, dry_ctx, store, proposed):
        proposed("use-postgres")
        result = rebuild_index(dry_ctx)
        assert result.data.changed
        assert store.read_index() is None
