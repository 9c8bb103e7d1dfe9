"""Tests for the Query Engine."""

from adrspine.core.models import Partition, Status
from adrspine.core.query import DocumentFilter, QueryEngine
from tests._support.documents import document_text


class TestQueryEngine:
    def test_filters_by_status_and_tag(self, store, proposed, accepted):
        proposed("a-one", tags=frozenset({"storage"}))
        accepted("b-two", tags=frozenset({"storage", "events"}))
        accepted("c-three", tags=frozenset({"domain"}))
        engine = QueryEngine(store)

        assert [d.slug for d in engine.list()] == ["a-one", "b-two", "c-three"]
        assert [d.slug for d in engine.list(status=Status.ACCEPTED)] == ["b-two", "c-three"]
        assert [d.slug for d in engine.list(tag="storage")] == ["a-one", "b-two"]
        assert engine.list(status=Status.ACCEPTED, tag="storage").count() == 1

    def test_lazy_and_restartable(self, store, proposed, engine):
        """A query built before a mutation sees the new state on its next pass."""
        doc = proposed("domain-layer-pure")
        accepted_only = QueryEngine(store).list(status=Status.ACCEPTED)
        assert list(accepted_only) == []

        engine.accept(doc.id).unwrap()
        assert [d.id for d in accepted_only] == [doc.id]
        assert [d.id for d in accepted_only] == [doc.id]

    def test_skips_unparseable(self, store, proposed, write_raw):
        proposed("good-one")
        write_raw(Partition.ACCEPTED, "ADR-0002-bad.md", document_text(status="Rejected"))
        assert QueryEngine(store).list().count() == 1

    def test_skips_non_utf8(self, store, proposed):
        proposed("good-one")
        (store.partition_dir(Partition.ACCEPTED) / "ADR-0002-latin1.md").write_bytes(b"Status: Accepted\n\xff\n")
        assert [d.slug for d in QueryEngine(store).list()] == ["good-one"]

    def test_first(self, store):
        assert QueryEngine(store).list().first() is None


class TestDocumentFilter:
    def test_empty_filter_matches_everything(self, store, proposed):
        assert DocumentFilter().matches(proposed("a-one"))
