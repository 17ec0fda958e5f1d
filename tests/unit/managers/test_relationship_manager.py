"""
test_relationship_manager.py
----------------------------
Unit tests for RelationshipManager.
"""
import pytest

from diary.core.exceptions import DatabaseError, ValidationError
from diary.database.models import Relationship


@pytest.fixture
def entries(entry_manager):
    return [entry_manager.save(None, f"E{i}", "b", []) for i in range(3)]


class TestAdd:
    def test_generates_id_and_default_kind(self, relationship_manager, db_session, entries):
        rel_id = relationship_manager.add(entries[0], entries[1])
        row = db_session.get(Relationship, rel_id)

        assert len(rel_id) == 36
        assert row.kind == "depends_on"
        assert row.parent_id == entries[0]
        assert row.child_id == entries[1]

    def test_duplicate_id_rejected(self, relationship_manager, entries):
        relationship_manager.add(entries[0], entries[1], relationship_id="same")
        with pytest.raises(DatabaseError, match="Data integrity violation"):
            relationship_manager.add(entries[1], entries[2], relationship_id="same")

    @pytest.mark.parametrize(
        "parent, child, kind, message",
        [
            (None, None, None, "Empty relationship parameters"),
            ("", "", "", "Empty relationship parameters"),
            (None, "c", None, "Parent ID is required"),
            ("p", "", "kind", "Child ID is required"),
            (None, None, "kind", "Parent ID is required"),
        ],
    )
    def test_validation(self, relationship_manager, parent, child, kind, message):
        with pytest.raises(ValidationError, match=message):
            relationship_manager.add(parent, child, kind)


class TestQueries:
    def test_for_entry_either_endpoint(self, relationship_manager, entries):
        a, b, c = entries
        r1 = relationship_manager.add(a, b)
        r2 = relationship_manager.add(c, a, "mentions")
        relationship_manager.add(b, c)

        records = relationship_manager.for_entry(a)

        assert [r.id for r in records] == [r1, r2]
        assert records[1].relationship_type == "mentions"

    def test_unparseable_created_at(self, relationship_manager, db_session, entries):
        db_session.add(
            Relationship(id="odd", parent_id=entries[0], child_id=entries[1], created_at="??")
        )
        db_session.flush()

        [record] = relationship_manager.for_entry(entries[0])
        assert record.created_at.endswith("+00:00")

    def test_delete_counts(self, relationship_manager, entries):
        rel_id = relationship_manager.add(entries[0], entries[1])
        assert relationship_manager.delete(rel_id) == 1
        assert relationship_manager.delete(rel_id) == 0
