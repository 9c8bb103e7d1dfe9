"""Tests for decision operations (new / accept / deprecate / supersede / list / show)."""

from unittest.mock import patch

import pytest

from adrspine.core.errors import ErrorCategory
from adrspine.core.models import Partition
from adrspine.ops.decisions import (
    accept_decision,
    deprecate_decision,
    get_decision,
    list_decisions,
    new_decision,
    supersede_decision,
)
from adrspine.ops.requests import (
    AcceptDecisionRequest,
    DeprecateDecisionRequest,
    GetDecisionRequest,
    ListDecisionsRequest,
    NewDecisionRequest,
    SupersedeDecisionRequest,
)


def _new(ctx, title: str, **fields) -> str:
    result = new_decision(ctx, NewDecisionRequest(title=title, **fields))
    assert result.success, result.error
    return result.data.id


class TestNewDecision:
    def test_title_becomes_slug(self, ctx, store):
        result = new_decision(ctx, NewDecisionRequest(title="Domain Layer Pure", tags=("domain",)))
        assert result.success
        assert result.data.id == "ADR-0001"
        assert result.data.slug == "domain-layer-pure"
        assert result.data.status == "Proposed"
        assert result.data.previous_status is None
        doc = store.read(1)
        assert doc.title == "Domain Layer Pure"
        assert doc.deciders == ("Alice",)
        assert doc.tags == frozenset({"domain"})

    def test_kebab_title_is_used_as_slug(self, ctx, store):
        assert _new(ctx, "event-storage-v2") == "ADR-0001"
        assert store.read(1).title == "Event Storage V2"

    def test_explicit_deciders_win(self, ctx, store):
        _new(ctx, "Use Postgres", deciders=("Bob", " ", "Carol"))
        assert store.read(1).deciders == ("Bob", "Carol")

    def test_falls_back_to_login_name(self, ctx, store):
        ctx.default_deciders = []
        with patch("adrspine.ops.decisions.getpass.getuser", return_value="dev"):
            _new(ctx, "Use Postgres")
        assert store.read(1).deciders == ("dev",)

    def test_no_deciders_at_all(self, ctx):
        ctx.default_deciders = []
        with patch("adrspine.ops.decisions.getpass.getuser", side_effect=KeyError("uid")):
            result = new_decision(ctx, NewDecisionRequest(title="Use Postgres"))
        assert not result.success
        assert result.error.code == "VALIDATION_FAILED"
        assert result.error.details == {"field": "deciders"}

    def test_unsluggable_title(self, ctx):
        result = new_decision(ctx, NewDecisionRequest(title="!!!"))
        assert result.error.code == "VALIDATION_FAILED"

    def test_duplicate_slug_exit_code(self, ctx):
        _new(ctx, "Use Postgres")
        result = new_decision(ctx, NewDecisionRequest(title="Use Postgres"))
        assert result.error.code == "CONFLICT"
        assert result.error.exit_code == 2

    def test_dry_run(self, dry_ctx, store):
        result = new_decision(dry_ctx, NewDecisionRequest(title="Use Postgres"))
        assert result.success
        assert result.data.dry_run
        assert result.data.path.endswith("proposed/ADR-0001-use-postgres.md")
        assert store.scan() == []


class TestTransitions:
    def test_accept(self, ctx, store):
        _new(ctx, "Use Postgres")
        result = accept_decision(ctx, AcceptDecisionRequest(ref="use-postgres"))
        assert result.success
        assert result.data.previous_status == "Proposed"
        assert result.data.status == "Accepted"
        assert store.locate(1).partition is Partition.ACCEPTED

    def test_accept_unknown(self, ctx):
        result = accept_decision(ctx, AcceptDecisionRequest(ref="ADR-0042"))
        assert result.error.code == "NOT_FOUND"
        assert result.error.category is ErrorCategory.LOOKUP
        assert result.error.exit_code == 2

    def test_deprecate_with_reason(self, ctx, store):
        _new(ctx, "Use Postgres")
        result = deprecate_decision(ctx, DeprecateDecisionRequest(ref="1", reason="Moved to SaaS"))
        assert result.data.status == "Deprecated"
        assert store.read(1).preamble.endswith(": Moved to SaaS")

    def test_deprecate_twice(self, ctx):
        _new(ctx, "Use Postgres")
        deprecate_decision(ctx, DeprecateDecisionRequest(ref="1"))
        result = deprecate_decision(ctx, DeprecateDecisionRequest(ref="1"))
        assert result.error.code == "INVALID_TRANSITION"
        assert result.error.exit_code == 2

    def test_supersede(self, ctx, store):
        _new(ctx, "event-storage-v1")
        _new(ctx, "event-storage-v2")
        accept_decision(ctx, AcceptDecisionRequest(ref="1"))
        accept_decision(ctx, AcceptDecisionRequest(ref="2"))
        result = supersede_decision(ctx, SupersedeDecisionRequest(old_ref="event-storage-v1", new_ref="2"))
        assert result.success
        assert result.data.old_id == "ADR-0001"
        assert "superseded/" in result.data.old_path
        assert result.warnings == []

    def test_supersede_with_proposed_replacement_warns(self, ctx):
        _new(ctx, "event-storage-v1")
        _new(ctx, "event-storage-v2")
        accept_decision(ctx, AcceptDecisionRequest(ref="1"))
        result = supersede_decision(ctx, SupersedeDecisionRequest(old_ref="1", new_ref="2"))
        assert result.success
        assert result.warnings == ["Replacement ADR-0002 is still Proposed"]

    def test_supersede_cycle(self, ctx):
        _new(ctx, "event-storage-v1")
        accept_decision(ctx, AcceptDecisionRequest(ref="1"))
        result = supersede_decision(ctx, SupersedeDecisionRequest(old_ref="1", new_ref="1"))
        assert result.error.code == "CYCLE"
        assert result.error.exit_code == 2

    def test_unexpected_exception_is_internal(self, ctx):
        with patch("adrspine.ops.decisions.LifecycleEngine.accept", side_effect=RuntimeError("bug")):
            result = accept_decision(ctx, AcceptDecisionRequest(ref="1"))
        assert result.error.code == "INTERNAL"
        assert result.error.exit_code == 1


class TestQueries:
    @pytest.fixture
    def populated(self, ctx):
        _new(ctx, "Use Postgres", tags=("storage",))
        _new(ctx, "Domain Layer Pure", tags=("domain",))
        accept_decision(ctx, AcceptDecisionRequest(ref="1"))
        return ctx

    def test_list_all(self, populated):
        result = list_decisions(populated, ListDecisionsRequest())
        assert [s.id for s in result.data] == ["ADR-0001", "ADR-0002"]

    def test_list_by_status_is_case_insensitive(self, populated):
        result = list_decisions(populated, ListDecisionsRequest(status="accepted"))
        assert [s.slug for s in result.data] == ["use-postgres"]

    def test_list_by_tag(self, populated):
        result = list_decisions(populated, ListDecisionsRequest(tag="domain"))
        assert [s.tags for s in result.data] == ["domain"]

    def test_list_unknown_status(self, populated):
        result = list_decisions(populated, ListDecisionsRequest(status="Rejected"))
        assert result.error.code == "VALIDATION_FAILED"

    def test_get(self, populated):
        result = get_decision(populated, GetDecisionRequest(ref="ADR-0001"))
        detail = result.data
        assert detail.slug == "use-postgres"
        assert detail.status == "Accepted"
        assert detail.deciders == ["Alice"]
        assert detail.path.endswith("accepted/ADR-0001-use-postgres.md")

    def test_get_unknown(self, populated):
        assert get_decision(populated, GetDecisionRequest(ref="nope")).error.code == "NOT_FOUND"
