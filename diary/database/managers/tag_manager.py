#!/usr/bin/env python3
"""
tag_manager.py
--------------------
Manages Tag rows.

Tags are the simplest entity in the store: a unique, case-sensitive
string. They are created lazily the first time an entry uses them and
are never deleted here.

Usage:
    tag_mgr = TagManager(session, logger)

    tag = tag_mgr.get_or_create("work")
    all_tags = tag_mgr.get_all()
"""
from typing import List, Optional

from diary.core.validators import DataValidator
from diary.database.decorators import handle_db_errors, log_database_operation
from diary.database.models import Tag
from .base_manager import BaseManager


class TagManager(BaseManager):
    """Manages Tag table operations."""

    @handle_db_errors
    @log_database_operation("get_tag")
    def get(self, name: str) -> Optional[Tag]:
        """
        Look up a tag by exact name.

        Args:
            name: Tag text, matched byte for byte

        Returns:
            Tag if found, None otherwise
        """
        if not name:
            return None
        return self.session.query(Tag).filter_by(name=name).first()

    @handle_db_errors
    @log_database_operation("get_or_create_tag")
    def get_or_create(self, name: str) -> Tag:
        """
        Return the tag called name, creating it if needed.

        Args:
            name: Tag text

        Returns:
            The existing or newly created Tag

        Raises:
            ValidationError: If name is empty
        """
        DataValidator.require_text(name, "Tag name cannot be empty")
        return self._get_or_create(Tag, {"name": name})

    @handle_db_errors
    @log_database_operation("get_all_tags")
    def get_all(self) -> List[Tag]:
        """All tags ordered by name."""
        return self._get_all(Tag, order_by="name")
