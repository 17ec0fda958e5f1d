"""
test_tag_manager.py
-------------------
Unit tests for TagManager.

Tags are the simplest entity in the store: an exact, unique name.
"""
import pytest

from diary.core.exceptions import ValidationError
from diary.database.models import Tag


class TestTagManagerGet:
    """Test TagManager.get() method."""

    def test_get_returns_none_when_not_found(self, tag_manager):
        assert tag_manager.get("nonexistent") is None

    def test_get_empty_returns_none(self, tag_manager):
        assert tag_manager.get("") is None

    def test_get_returns_tag_when_found(self, tag_manager, db_session):
        db_session.add(Tag(name="python"))
        db_session.flush()

        result = tag_manager.get("python")
        assert result is not None
        assert result.name == "python"

    def test_get_is_exact(self, tag_manager, db_session):
        db_session.add(Tag(name="python"))
        db_session.flush()

        assert tag_manager.get("Python") is None
        assert tag_manager.get(" python") is None


class TestTagManagerGetOrCreate:
    """Test TagManager.get_or_create() method."""

    def test_creates_new_tag(self, tag_manager):
        tag = tag_manager.get_or_create("journal")

        assert tag.name == "journal"
        assert len(tag.id) == 36

    def test_returns_existing_tag(self, tag_manager):
        first = tag_manager.get_or_create("journal")
        second = tag_manager.get_or_create("journal")

        assert first.id == second.id

    def test_case_variants_are_distinct(self, tag_manager):
        assert tag_manager.get_or_create("Work").id != tag_manager.get_or_create("work").id

    def test_empty_name_rejected(self, tag_manager):
        with pytest.raises(ValidationError):
            tag_manager.get_or_create("")


class TestTagManagerGetAll:
    def test_empty(self, tag_manager):
        assert tag_manager.get_all() == []

    def test_ordered_by_name(self, tag_manager):
        for name in ["zeta", "alpha", "mid"]:
            tag_manager.get_or_create(name)

        assert [t.name for t in tag_manager.get_all()] == ["alpha", "mid", "zeta"]
