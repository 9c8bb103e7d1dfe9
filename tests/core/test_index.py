"""Tests for the Index Builder."""

from adrspine.core.index import INDEX_MARKER, build_index, rebuild_index, render_index
from adrspine.core.models import AdrDocument, Status


def _doc(adr_id: int, status: Status, *tags: str, **extra) -> AdrDocument:
    return AdrDocument(
        id=adr_id,
        slug=f"decision-{adr_id}",
        title=f"Decision {adr_id}",
        status=status,
        date="2026-10-17",
        tags=frozenset(tags),
        **extra,
    )


class TestBuildIndex:
    def test_every_status_has_a_group(self):
        index = build_index([])
        assert [g.key for g in index.by_status] == ["Proposed", "Accepted", "Deprecated", "Superseded"]
        assert index.total == 0

    def test_groups_sorted_by_id(self):
        docs = [_doc(3, Status.ACCEPTED, "storage"), _doc(1, Status.ACCEPTED, "storage", "domain")]
        index = build_index(docs)
        assert [e.id for e in index.by_status[1].entries] == [1, 3]
        assert [(g.key, g.count) for g in index.by_tag] == [("domain", 1), ("storage", 2)]

    def test_counts(self):
        index = build_index([_doc(1, Status.PROPOSED), _doc(2, Status.ACCEPTED), _doc(3, Status.ACCEPTED)])
        assert index.counts == {
            Status.PROPOSED: 1,
            Status.ACCEPTED: 2,
            Status.DEPRECATED: 0,
            Status.SUPERSEDED: 0,
        }


class TestRenderIndex:
    def test_deterministic_regardless_of_input_order(self):
        docs = [_doc(2, Status.DEPRECATED, "b"), _doc(1, Status.PROPOSED, "a")]
        assert render_index(build_index(docs)) == render_index(build_index(list(reversed(docs))))

    def test_content(self):
        docs = [
            _doc(1, Status.SUPERSEDED, "storage", superseded_by=2),
            _doc(2, Status.ACCEPTED, "storage", supersedes=1),
        ]
        text = render_index(build_index(docs))
        assert INDEX_MARKER in text
        assert "Total: 2" in text
        assert "| [ADR-0002](accepted/ADR-0002-decision-2.md) | Decision 2 |" in text
        assert "superseded by ADR-0002" in text
        assert "## Deprecated (0)\n\n_None._" in text
        assert "### storage (2)" in text

    def test_pipes_escaped(self):
        doc = AdrDocument(id=1, slug="a", title="A | B", status=Status.PROPOSED, date="d")
        assert "A \\| B" in render_index(build_index([doc]))


class TestRebuildIndex:
    def test_writes_beside_partitions(self, store, proposed):
        proposed("domain-layer-pure")
        rebuilt = rebuild_index(store)
        assert rebuilt.changed
        assert rebuilt.index.total == 1
        assert rebuilt.path == store.index_path
        assert store.read_index() == render_index(rebuilt.index)

    def test_full_replacement(self, store, proposed):
        store.write_index("hand edited\n")
        proposed("domain-layer-pure")
        assert rebuild_index(store).changed
        assert "hand edited" not in store.read_index()

    def test_unchanged_store_is_not_rewritten(self, store, proposed):
        proposed("domain-layer-pure")
        rebuild_index(store)
        store.index_path.touch()
        touched = store.index_path.stat().st_mtime_ns
        assert rebuild_index(store).changed is False
        assert store.index_path.stat().st_mtime_ns == touched

    def test_dry_run_reports_without_writing(self, store, proposed):
        proposed("domain-layer-pure")
        rebuilt = rebuild_index(store, dry_run=True)
        assert rebuilt.changed
        assert rebuilt.dry_run
        assert store.read_index() is None
