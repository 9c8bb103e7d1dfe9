"""End-to-end tests for ``adr new | accept | deprecate | supersede | list | show``."""

import json


class TestNew:
    def test_prints_id(self, new_adr, adr_root):
        assert new_adr("Domain Layer Pure") == "ADR-0001"
        assert (adr_root / "proposed" / "ADR-0001-domain-layer-pure.md").is_file()
        assert (adr_root / "INDEX.md").is_file()

    def test_ids_increase(self, new_adr):
        new_adr("First One")
        assert new_adr("Second One") == "ADR-0002"

    def test_duplicate_slug_exits_2(self, new_adr, invoke):
        new_adr("Use Postgres")
        result = invoke("new", "use-postgres", "--decider", "Bob")
        assert result.exit_code == 2
        assert "CONFLICT" in result.output

    def test_invalid_slug_exits_1(self, invoke):
        result = invoke("new", "Anything", "--slug", "Not Kebab", "--decider", "Bob")
        assert result.exit_code == 1

    def test_dry_run(self, invoke, adr_root):
        result = invoke("new", "Use Postgres", "--decider", "Bob", "--dry-run")
        assert result.exit_code == 0
        assert result.stdout.splitlines()[0] == "ADR-0001"
        assert not (adr_root / "proposed" / "ADR-0001-use-postgres.md").exists()

    def test_json(self, invoke):
        result = invoke("new", "Use Postgres", "--decider", "Bob", "--json")
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["id"] == "ADR-0001"
        assert payload["status"] == "Proposed"


class TestTransitions:
    def test_accept(self, new_adr, invoke, adr_root):
        new_adr("Use Postgres")
        result = invoke("accept", "use-postgres")
        assert result.exit_code == 0
        assert "Proposed -> Accepted" in result.stdout
        assert (adr_root / "accepted" / "ADR-0001-use-postgres.md").is_file()
        assert not (adr_root / "proposed" / "ADR-0001-use-postgres.md").exists()

    def test_accept_unknown_exits_2(self, invoke):
        result = invoke("accept", "event-storage-v3")
        assert result.exit_code == 2
        assert "NOT_FOUND" in result.output

    def test_accept_twice_exits_2(self, new_adr, invoke):
        new_adr("Use Postgres")
        invoke("accept", "1")
        result = invoke("accept", "1")
        assert result.exit_code == 2
        assert "INVALID_TRANSITION" in result.output

    def test_deprecate_with_reason(self, new_adr, invoke, adr_root):
        new_adr("Use Postgres")
        result = invoke("deprecate", "ADR-0001", "--reason", "Moved to a managed service")
        assert result.exit_code == 0
        text = (adr_root / "deprecated" / "ADR-0001-use-postgres.md").read_text(encoding="utf-8")
        assert "> **Deprecated** on " in text
        assert "Moved to a managed service" in text

    def test_supersede(self, new_adr, invoke, adr_root):
        new_adr("event-storage-v1")
        new_adr("event-storage-v2")
        invoke("accept", "1")
        invoke("accept", "2")
        result = invoke("supersede", "event-storage-v1", "event-storage-v2")
        assert result.exit_code == 0
        assert "ADR-0001 Superseded by ADR-0002" in result.stdout
        old = (adr_root / "superseded" / "ADR-0001-event-storage-v1.md").read_text(encoding="utf-8")
        new = (adr_root / "accepted" / "ADR-0002-event-storage-v2.md").read_text(encoding="utf-8")
        assert "Superseded-By: ADR-0002" in old
        assert "Supersedes: ADR-0001" in new

    def test_supersede_twice_exits_2(self, new_adr, invoke):
        for title in ("a-one", "b-two", "c-three"):
            new_adr(title)
        for ref in ("1", "2", "3"):
            invoke("accept", ref)
        assert invoke("supersede", "1", "2").exit_code == 0
        result = invoke("supersede", "1", "3")
        assert result.exit_code == 2

    def test_supersede_proposed_replacement_warns(self, new_adr, invoke):
        new_adr("event-storage-v1")
        new_adr("event-storage-v2")
        invoke("accept", "1")
        result = invoke("supersede", "1", "2")
        assert result.exit_code == 0
        assert "still Proposed" in result.output


class TestQueries:
    def test_list_after_accept(self, new_adr, invoke):
        new_adr("Use Postgres")
        new_adr("Domain Layer Pure")
        invoke("accept", "2")
        result = invoke("list", "--status", "Accepted", "--json")
        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert [row["id"] for row in rows] == ["ADR-0002"]

    def test_list_empty(self, invoke):
        result = invoke("list")
        assert result.exit_code == 0
        assert "No decisions." in result.stdout

    def test_list_table(self, new_adr, invoke):
        new_adr("Use Postgres")
        result = invoke("list")
        assert "ADR-0001" in result.stdout
        assert "Proposed" in result.stdout

    def test_list_unknown_status(self, invoke):
        assert invoke("list", "--status", "Rejected").exit_code == 1

    def test_show_json(self, new_adr, invoke):
        new_adr("Use Postgres")
        result = invoke("show", "use-postgres", "--json")
        assert result.exit_code == 0
        detail = json.loads(result.stdout)
        assert detail["deciders"] == ["Alice"]
        assert detail["tags"] == ["architecture"]
        assert detail["sections"][0] == "Problem"

    def test_show_unknown(self, invoke):
        assert invoke("show", "42").exit_code == 2
