"""
Tests for DiaryDB, the store facade.

Exercises every public operation end to end against a real SQLite file
in a temporary data directory.
"""
import sqlite3
import threading
import time
from contextlib import closing
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from diary.core.exceptions import (
    CryptoError,
    DatabaseError,
    DecryptionError,
    EntryNotFoundError,
    KeyVaultError,
    StoreInitError,
    ValidationError,
)
from diary.database.manager import DiaryDB
from diary.database.models import Entry, Relationship


def _raw_rows(db, sql, params=()):
    """Read rows straight from the database file, bypassing the store."""
    with closing(sqlite3.connect(db.db_path)) as conn:
        return conn.execute(sql, params).fetchall()


class TestConstruction:
    def test_creates_files(self, test_db, data_dir):
        assert (data_dir / "encryption.key").exists()
        assert (data_dir / "diary.db").exists()

    def test_schema_tables(self, test_db):
        names = {row[0] for row in _raw_rows(test_db, "SELECT name FROM sqlite_master WHERE type='table'")}
        assert {"entries", "tags", "diary_tags", "relationships"} <= names

    def test_reopen_is_idempotent(self, data_dir):
        with DiaryDB(data_dir=data_dir) as first:
            entry_id = first.save_entry(None, "Kept", "still here", ["t"])
            first.initialize_schema()

        with DiaryDB(data_dir=data_dir) as second:
            second.initialize_schema()
            entry = second.get_entry(entry_id)

        assert entry.content == "still here"
        assert entry.tags == ["t"]

    def test_unusable_data_dir_raises_key_vault_error(self, tmp_dir):
        blocker = tmp_dir / "file"
        blocker.write_text("x")
        with pytest.raises(KeyVaultError):
            DiaryDB(data_dir=blocker / "data")

    def test_unopenable_database_raises_store_init_error(self, data_dir):
        (data_dir / "diary.db").mkdir(parents=True)
        with pytest.raises(StoreInitError):
            DiaryDB(data_dir=data_dir)

    def test_log_dir_enables_logging(self, data_dir, log_dir):
        db = DiaryDB(data_dir=data_dir, log_dir=log_dir)
        try:
            db.save_entry(None, "Logged", "swordfish-secret", [])
        finally:
            db.close()

        log_text = (log_dir / "system" / "database.log").read_text(encoding="utf-8")
        assert "save_entry_completed" in log_text
        assert "swordfish-secret" not in log_text

    def test_foreign_keys_enabled_on_pooled_connections(self, test_db):
        sessions = [test_db.SessionLocal() for _ in range(3)]
        try:
            assert all(
                test_db.health_monitor.foreign_keys_enabled(session) for session in sessions
            )
        finally:
            for session in sessions:
                session.close()


class TestLifecycle:
    def test_close_wipes_key_and_blocks_operations(self, test_db):
        test_db.close()

        assert test_db.closed
        assert test_db._key.is_wiped
        with pytest.raises(DatabaseError, match="closed"):
            test_db.list_entries()

    def test_close_is_idempotent(self, test_db):
        test_db.close()
        test_db.close()


class TestScenarios:
    def test_create_and_read(self, test_db):
        entry_id = test_db.save_entry(None, "Monday", "Dear diary, today…", ["work", "ideas"])
        entry = test_db.get_entry(entry_id)

        assert len(entry_id) == 36
        assert entry.id == entry_id
        assert entry.title == "Monday"
        assert entry.content == "Dear diary, today…"
        assert sorted(entry.tags) == ["ideas", "work"]
        assert entry.created_at == entry.updated_at
        assert entry.created_at.tzinfo is not None

    def test_update_moves_updated_at_only(self, test_db):
        entry_id = test_db.save_entry(None, "Draft", "v1", ["a", "b"])
        before = test_db.get_entry(entry_id)
        time.sleep(0.01)

        assert test_db.save_entry(entry_id, "Final", "v2", ["c"]) == entry_id
        after = test_db.get_entry(entry_id)

        assert after.title == "Final"
        assert after.content == "v2"
        assert after.tags == ["c"]
        assert after.created_at == before.created_at
        assert after.updated_at > after.created_at

    def test_update_with_no_tags_clears_them(self, test_db):
        entry_id = test_db.save_entry(None, "Tagged", "body", ["a"])
        test_db.save_entry(entry_id, "Tagged", "body", [])
        assert test_db.get_entry(entry_id).tags == []

    def test_search_by_tag(self, test_db):
        work_1 = test_db.save_entry(None, "One", "1", ["work"])
        test_db.save_entry(None, "Two", "2", ["home"])
        work_3 = test_db.save_entry(None, "Three", "3", ["work", "home"])

        found = test_db.search_entries_by_tag("work")

        assert [e.id for e in found] == [work_3, work_1]
        assert test_db.search_entries_by_tag("Work") == []
        assert test_db.search_entries_by_tag("missing") == []

    def test_delete_cascades(self, test_db):
        parent = test_db.save_entry(None, "Parent", "p", ["shared"])
        child = test_db.save_entry(None, "Child", "c", ["shared"])
        other = test_db.save_entry(None, "Other", "o", [])
        test_db.add_relationship(parent, child)
        test_db.add_relationship(other, parent, "mentions")
        kept = test_db.add_relationship(other, child)

        test_db.delete_entry(parent)

        with pytest.raises(EntryNotFoundError):
            test_db.get_entry(parent)
        assert _raw_rows(test_db, "SELECT COUNT(*) FROM diary_tags WHERE entry_id = ?", (parent,)) == [(0,)]
        assert [r.id for r in test_db.get_relationships(child)] == [kept]
        assert test_db.get_relationships(parent) == []
        assert [t.name for t in test_db.list_tags()] == ["shared"]
        assert test_db.get_entry(child).tags == ["shared"]

    def test_graph_direction(self, test_db):
        parent = test_db.save_entry(None, "Parent", "p", ["x"])
        child = test_db.save_entry(None, "Child", "c", [])
        rel_id = test_db.add_relationship(parent, child, "depends_on")

        graph = test_db.get_graph()
        edge = next(e for e in graph.edges if e.id == rel_id)

        assert edge.source == child
        assert edge.target == parent
        assert edge.label == "depends_on"

    def test_bodies_encrypted_at_rest(self, test_db):
        secret = "the password is swordfish"
        entry_id = test_db.save_entry(None, "Plain title", secret, ["visible-tag"])

        [(title, body)] = _raw_rows(test_db, "SELECT title, body FROM entries WHERE id = ?", (entry_id,))

        assert title == "Plain title"
        assert secret not in body
        assert body.startswith('{"nonce":[')
        assert test_db.cipher.decrypt(body) == secret
        assert secret.encode() not in test_db.db_path.read_bytes()


class TestSaveEntry:
    def test_empty_title_rejected(self, test_db):
        with pytest.raises(ValidationError):
            test_db.save_entry(None, "", "body", ["t"])
        assert test_db.list_entries() == []
        assert test_db.list_tags() == []

    def test_duplicate_tags_deduplicated(self, test_db):
        entry_id = test_db.save_entry(None, "Dup", "body", ["a", "a", "b", "a"])
        assert test_db.get_entry(entry_id).tags == ["a", "b"]

    def test_tag_names_unique_across_entries(self, test_db):
        test_db.save_entry(None, "One", "1", ["shared"])
        test_db.save_entry(None, "Two", "2", ["shared"])
        assert [t.name for t in test_db.list_tags()] == ["shared"]

    def test_tag_names_case_sensitive_and_untrimmed(self, test_db):
        entry_id = test_db.save_entry(None, "Case", "body", ["Work", "work", " work "])
        assert sorted(test_db.get_entry(entry_id).tags) == sorted(["Work", "work", " work "])

    def test_unknown_id_without_tags_is_accepted(self, test_db):
        ghost = "00000000-0000-4000-8000-000000000000"
        assert test_db.save_entry(ghost, "Ghost", "body", []) == ghost
        with pytest.raises(EntryNotFoundError):
            test_db.get_entry(ghost)

    def test_unknown_id_with_tags_rolls_back(self, test_db):
        ghost = "00000000-0000-4000-8000-000000000000"
        with pytest.raises(DatabaseError):
            test_db.save_entry(ghost, "Ghost", "body", ["orphan"])
        assert test_db.list_tags() == []

    def test_unencodable_body_raises_crypto_error(self, test_db):
        with pytest.raises(CryptoError):
            test_db.save_entry(None, "t", "bad \udcff body", [])
        assert test_db.list_entries() == []

    def test_unencodable_title_or_tag_rejected(self, test_db):
        with pytest.raises(ValidationError):
            test_db.save_entry(None, "bad \udcff title", "body", [])
        with pytest.raises(ValidationError):
            test_db.save_entry(None, "t", "body", ["ok", "bad \udcff"])
        assert test_db.list_entries() == []
        assert test_db.list_tags() == []

    def test_unencodable_lookup_keys_rejected(self, test_db):
        with pytest.raises(ValidationError):
            test_db.get_entry("\udcff")
        with pytest.raises(ValidationError):
            test_db.search_entries_by_tag("\udcff")

    def test_unicode_round_trip(self, test_db):
        entry_id = test_db.save_entry(None, "Título ✓", "日本語 🙂", ["café"])
        entry = test_db.get_entry(entry_id)
        assert (entry.title, entry.content, entry.tags) == ("Título ✓", "日本語 🙂", ["café"])


class TestListEntries:
    def test_newest_first(self, test_db):
        ids = [test_db.save_entry(None, f"E{i}", str(i), []) for i in range(3)]
        assert [e.id for e in test_db.list_entries()] == list(reversed(ids))

    def test_ties_broken_by_insertion_order(self, test_db):
        ids = [test_db.save_entry(None, f"E{i}", str(i), []) for i in range(3)]
        with test_db.session_scope() as session:
            session.execute(
                update(Entry).values(created_at="2024-01-01T00:00:00.000000+00:00")
            )

        assert [e.id for e in test_db.list_entries()] == list(reversed(ids))

    def test_decrypt_failure_fails_whole_call(self, test_db):
        test_db.save_entry(None, "Good", "fine", [])
        bad = test_db.save_entry(None, "Bad", "soon broken", [])
        with test_db.session_scope() as session:
            session.execute(update(Entry).where(Entry.id == bad).values(body="{}"))

        with pytest.raises(DecryptionError):
            test_db.list_entries()

    def test_unparseable_timestamp_falls_back_to_now(self, test_db):
        entry_id = test_db.save_entry(None, "Odd", "body", [])
        with test_db.session_scope() as session:
            session.execute(
                update(Entry).where(Entry.id == entry_id).values(created_at="garbage")
            )

        entry = test_db.get_entry(entry_id)
        assert abs(datetime.now(timezone.utc) - entry.created_at) < timedelta(minutes=1)


class TestDeleteEntry:
    def test_unknown_id(self, test_db):
        with pytest.raises(EntryNotFoundError) as exc_info:
            test_db.delete_entry("nope")
        assert exc_info.value.entry_id == "nope"

    def test_second_delete_fails(self, test_db):
        entry_id = test_db.save_entry(None, "Once", "body", [])
        test_db.delete_entry(entry_id)
        with pytest.raises(EntryNotFoundError):
            test_db.delete_entry(entry_id)


class TestRelationships:
    @pytest.fixture
    def pair(self, test_db):
        return (
            test_db.save_entry(None, "Parent", "p", []),
            test_db.save_entry(None, "Child", "c", []),
        )

    def test_defaults(self, test_db, pair):
        parent, child = pair
        rel_id = test_db.add_relationship(parent, child)
        [record] = test_db.get_relationships(child)

        assert record.id == rel_id
        assert record.parent_id == parent
        assert record.child_id == child
        assert record.relationship_type == "depends_on"
        assert datetime.fromisoformat(record.created_at).tzinfo is not None

    def test_explicit_id_and_kind(self, test_db, pair):
        parent, child = pair
        assert test_db.add_relationship(parent, child, "follows", "rel-1") == "rel-1"
        assert test_db.get_relationships(parent)[0].relationship_type == "follows"

    def test_empty_kind_stored_as_given(self, test_db, pair):
        parent, child = pair
        test_db.add_relationship(parent, child, "")
        test_db.add_relationship(parent, child, None)
        kinds = [r.relationship_type for r in test_db.get_relationships(parent)]
        assert kinds == ["", "depends_on"]

    def test_all_missing(self, test_db):
        with pytest.raises(ValidationError, match="Empty relationship parameters - operation aborted"):
            test_db.add_relationship(None, None, None)

    def test_missing_parent(self, test_db, pair):
        with pytest.raises(ValidationError, match="Parent ID is required"):
            test_db.add_relationship("", pair[1])

    def test_missing_child(self, test_db, pair):
        with pytest.raises(ValidationError, match="Child ID is required"):
            test_db.add_relationship(pair[0], None, "kind")

    def test_unknown_endpoint(self, test_db, pair):
        with pytest.raises(DatabaseError, match="FOREIGN KEY"):
            test_db.add_relationship(pair[0], "missing")

    def test_self_loops_and_duplicates_allowed(self, test_db, pair):
        parent, child = pair
        loop = test_db.add_relationship(parent, parent)
        first = test_db.add_relationship(parent, child)
        second = test_db.add_relationship(parent, child)

        assert [r.id for r in test_db.get_relationships(parent)] == [loop, first, second]

    def test_delete(self, test_db, pair):
        rel_id = test_db.add_relationship(*pair)
        test_db.delete_relationship(rel_id)
        test_db.delete_relationship(rel_id)
        test_db.delete_relationship("never-existed")
        assert test_db.get_relationships(pair[0]) == []

    def test_created_at_reemitted(self, test_db, pair):
        rel_id = test_db.add_relationship(*pair)
        with test_db.session_scope() as session:
            session.execute(
                update(Relationship)
                .where(Relationship.id == rel_id)
                .values(created_at="2024-05-01T12:00:00Z")
            )
        assert test_db.get_relationships(pair[0])[0].created_at == "2024-05-01T12:00:00+00:00"


class TestGraph:
    def test_empty(self, test_db):
        graph = test_db.get_graph()
        assert graph.nodes == [] and graph.edges == []

    def test_layout(self, test_db):
        a = test_db.save_entry(None, "A", "a", ["x", "y"])
        b = test_db.save_entry(None, "B", "b", ["x"])
        rel_id = test_db.add_relationship(a, b, "refines")

        graph = test_db.get_graph()
        tags = {t.name: t.id for t in test_db.list_tags()}

        assert [n.node_type for n in graph.nodes] == ["diary", "diary", "tag", "tag"]
        assert graph.nodes[0].properties["title"] == "A"
        assert set(graph.nodes[0].properties) == {"title", "created_at"}
        assert graph.nodes[2].properties == {"name": graph.nodes[2].label}

        tagging_ids = {e.id for e in graph.edges[:3]}
        assert tagging_ids == {
            f"tag-{a}-{tags['x']}",
            f"tag-{a}-{tags['y']}",
            f"tag-{b}-{tags['x']}",
        }
        assert {e.label for e in graph.edges[:3]} == {"tagged_as_x", "tagged_as_y"}
        assert graph.edges[3].id == rel_id

    def test_edges_reference_nodes(self, test_db):
        a = test_db.save_entry(None, "A", "a", ["x"])
        b = test_db.save_entry(None, "B", "b", ["y"])
        test_db.add_relationship(a, b)
        test_db.add_relationship(b, b)

        graph = test_db.get_graph()
        node_ids = graph.node_ids()
        assert all(e.source in node_ids and e.target in node_ids for e in graph.edges)

    def test_timestamps_forwarded_verbatim(self, test_db):
        entry_id = test_db.save_entry(None, "A", "a", [])
        [(stored,)] = _raw_rows(test_db, "SELECT created_at FROM entries WHERE id = ?", (entry_id,))
        assert test_db.get_graph().nodes[0].properties["created_at"] == stored


class TestHealthCheck:
    def test_healthy_store(self, test_db):
        test_db.save_entry(None, "A", "a", ["x"])
        report = test_db.health_check()

        assert report["status"] == "healthy"
        assert report["issues"] == []
        assert report["metrics"]["foreign_keys_enabled"] is True
        assert report["metrics"]["performance"]["table_counts"]["entries"] == 1


class TestConcurrency:
    def test_parallel_saves(self, test_db):
        errors = []

        def worker(n):
            try:
                for i in range(10):
                    test_db.save_entry(None, f"T{n}-{i}", f"body {n} {i}", [f"t{n}", "all"])
            except Exception as e:  # collected for the assertion below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(test_db.list_entries()) == 80
        assert len(test_db.search_entries_by_tag("all")) == 80
        assert len(test_db.list_tags()) == 9

    def test_instances_share_one_lock(self, test_db, data_dir):
        with DiaryDB(data_dir=data_dir) as other:
            assert other._lock is test_db._lock

            entered = threading.Event()
            done = threading.Event()

            def writer():
                entered.set()
                other.save_entry(None, "Other", "from second instance", [])
                done.set()

            with test_db.session_scope():
                thread = threading.Thread(target=writer)
                thread.start()
                entered.wait(timeout=5)
                assert not done.wait(timeout=0.2)

            thread.join(timeout=5)
            assert done.is_set()
        assert [e.title for e in test_db.list_entries()] == ["Other"]
