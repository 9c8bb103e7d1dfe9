"""Tests for id allocation."""

import pytest

from adrspine.core.errors import IntegrityError
from adrspine.core.ids import IdAllocator, find_duplicate_ids
from adrspine.core.models import Partition
from tests._support.documents import document_text


class TestIdAllocator:
    def test_empty_store_starts_at_one(self, store):
        assert IdAllocator(store).next_id() == 1

    def test_max_plus_one_across_partitions(self, store, write_raw):
        write_raw(Partition.SUPERSEDED, "ADR-0012-old.md", document_text(status="Superseded"))
        write_raw(Partition.PROPOSED, "ADR-0003-new.md", document_text(status="Proposed"))
        assert IdAllocator(store).next_id() == 13

    def test_reflects_disk_on_every_call(self, store, proposed):
        allocator = IdAllocator(store)
        assert allocator.next_id() == 1
        proposed("first-one")
        assert allocator.next_id() == 2

    def test_unparseable_files_still_count(self, store, write_raw):
        """The filename is the source of truth, even when the content is broken."""
        write_raw(Partition.ACCEPTED, "ADR-0009-broken.md", "garbage\n")
        assert IdAllocator(store).next_id() == 10

    def test_duplicate_id_blocks_allocation(self, store, write_raw):
        write_raw(Partition.ACCEPTED, "ADR-0004-a.md", document_text())
        write_raw(Partition.DEPRECATED, "ADR-0004-b.md", document_text(status="Deprecated"))
        with pytest.raises(IntegrityError, match="ADR-0004 is used by 2 files"):
            IdAllocator(store).next_id()


class TestFindDuplicateIds:
    def test_groups_only_repeats(self, store, write_raw):
        write_raw(Partition.ACCEPTED, "ADR-0001-a.md", document_text())
        write_raw(Partition.ACCEPTED, "ADR-0002-b.md", document_text())
        write_raw(Partition.PROPOSED, "ADR-0002-b.md", document_text(status="Proposed"))
        duplicates = find_duplicate_ids(store.scan())
        assert list(duplicates) == [2]
        assert [f.partition for f in duplicates[2]] == [Partition.PROPOSED, Partition.ACCEPTED]
