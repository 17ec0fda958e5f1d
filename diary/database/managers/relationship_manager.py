#!/usr/bin/env python3
"""
relationship_manager.py
--------------------
Manages directed, typed links between entries.

A relationship points from a child entry to a parent entry and carries
a free-form kind label ("depends_on" unless told otherwise). Self-loops,
cycles and duplicate links are all accepted.

Usage:
    rel_mgr = RelationshipManager(session, logger)
    rel_id = rel_mgr.add(parent_id, child_id, kind="follows")
    links = rel_mgr.for_entry(parent_id)
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, literal_column, or_, select

from diary.core.exceptions import ValidationError
from diary.core.logging_manager import safe_logger
from diary.core.validators import DataValidator
from diary.dataclasses import RelationshipRecord
from diary.database.decorators import handle_db_errors, log_database_operation
from diary.database.models import DEFAULT_RELATIONSHIP_KIND, Relationship, new_uuid
from .base_manager import BaseManager


class RelationshipManager(BaseManager):
    """Manages the relationships table."""

    @handle_db_errors
    @log_database_operation("add_relationship")
    def add(
        self,
        parent_id: Optional[str],
        child_id: Optional[str],
        kind: Optional[str] = None,
        relationship_id: Optional[str] = None,
    ) -> str:
        """
        Insert a relationship.

        Args:
            parent_id: Entry the link points to
            child_id: Entry the link starts from
            kind: Label stored as given; None means "depends_on"
            relationship_id: Id to use; a fresh UUID when None

        Returns:
            The relationship id

        Raises:
            ValidationError: If an endpoint is missing
            DatabaseError: If an endpoint does not exist or the id is taken
        """
        if not parent_id and not child_id and not kind:
            raise ValidationError("Empty relationship parameters - operation aborted")
        if not parent_id:
            raise ValidationError("Parent ID is required")
        if not child_id:
            raise ValidationError("Child ID is required")

        relationship = Relationship(
            id=relationship_id or new_uuid(),
            parent_id=parent_id,
            child_id=child_id,
            kind=DEFAULT_RELATIONSHIP_KIND if kind is None else kind,
            created_at=DataValidator.timestamp_now(),
        )
        self.session.add(relationship)
        self.session.flush()
        return relationship.id

    @handle_db_errors
    @log_database_operation("delete_relationship")
    def delete(self, relationship_id: str) -> int:
        """
        Delete a relationship by id.

        Returns:
            Rows removed; zero for an unknown id
        """
        result = self.session.execute(
            delete(Relationship).where(Relationship.id == relationship_id)
        )
        return result.rowcount

    @handle_db_errors
    @log_database_operation("get_relationships")
    def for_entry(self, entry_id: str) -> List[RelationshipRecord]:
        """
        Relationships in which the entry is parent or child.

        Args:
            entry_id: Entry id

        Returns:
            Records in insertion order
        """
        stmt = (
            select(Relationship)
            .where(
                or_(
                    Relationship.parent_id == entry_id,
                    Relationship.child_id == entry_id,
                )
            )
            .order_by(literal_column("relationships.rowid"))
        )
        return [self.to_record(rel) for rel in self.session.execute(stmt).scalars()]

    def to_record(self, relationship: Relationship) -> RelationshipRecord:
        """Detach a row, normalizing created_at to RFC 3339."""
        parsed = DataValidator.parse_timestamp(relationship.created_at)
        if parsed is None:
            safe_logger(self.logger).log_warning(
                "Unparseable timestamp, substituting current time",
                {"relationship_id": relationship.id, "value": relationship.created_at},
            )
            parsed = datetime.now(timezone.utc)

        return RelationshipRecord(
            id=relationship.id,
            parent_id=relationship.parent_id,
            child_id=relationship.child_id,
            relationship_type=relationship.kind,
            created_at=parsed.isoformat(),
        )
