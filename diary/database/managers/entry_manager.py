#!/usr/bin/env python3
"""
entry_manager.py
--------------------
Manager for Entry CRUD operations and tag reconciliation.

Entry is the central entity of the store. Its body is encrypted on the
way in and decrypted on the way out; everything else is plaintext.

Key Features:
    - Upsert with full replacement of the tag set
    - Reads returning detached DiaryEntry records
    - Newest-first listing and exact tag search
    - Delete with explicit removal of taggings and relationships

Usage:
    entry_mgr = EntryManager(session, cipher, logger)
    entry_id = entry_mgr.save(None, "Monday", "dear diary", ["work"])
    entry = entry_mgr.get(entry_id)
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, insert, literal_column, or_, select, update
from sqlalchemy.orm import Session, selectinload

from diary.core.exceptions import EntryNotFoundError
from diary.core.logging_manager import DiaryLogger, safe_logger
from diary.core.validators import DataValidator
from diary.crypto import EnvelopeCipher
from diary.dataclasses import DiaryEntry
from diary.database.decorators import handle_db_errors, log_database_operation
from diary.database.models import Entry, Relationship, diary_tags, new_uuid
from .base_manager import BaseManager
from .tag_manager import TagManager

# Newest first; rows sharing a created_at fall back to insertion order.
NEWEST_FIRST = (Entry.created_at.desc(), literal_column("entries.rowid").desc())


class EntryManager(BaseManager):
    """
    Manager for Entry CRUD operations.

    The manager never commits: every method runs inside the transaction
    of the session it was given.
    """

    def __init__(
        self,
        session: Session,
        cipher: EnvelopeCipher,
        logger: Optional[DiaryLogger] = None,
    ):
        """
        Initialize EntryManager.

        Args:
            session: SQLAlchemy session
            cipher: EnvelopeCipher used for entry bodies
            logger: Optional logger for operation tracking
        """
        super().__init__(session, logger)
        self.cipher = cipher
        self._tag_mgr = TagManager(session, logger)

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("save_entry")
    def save(
        self,
        entry_id: Optional[str],
        title: str,
        body: str,
        tags: Optional[Sequence[str]] = None,
    ) -> str:
        """
        Create a new entry or overwrite an existing one.

        With an id, title, body and updated_at are replaced and the tag
        set is cleared before the new tags are attached. An id that
        matches no row updates nothing; the id is still returned.

        Args:
            entry_id: Existing entry id, or None to create
            title: Non-empty plaintext title
            body: Plaintext body, encrypted before it reaches the session
            tags: Tag names; duplicates are ignored

        Returns:
            The entry id

        Raises:
            ValidationError: If title is empty or a tag name is invalid
            CryptoError: If body is not a string
            DatabaseError: If the engine rejects a statement
        """
        DataValidator.require_text(title, "Entry title cannot be empty")
        names = DataValidator.unique_names(tags)
        for name in names:
            DataValidator.require_text(name, "Tag name cannot be empty")

        envelope = self.cipher.encrypt(body)
        now = DataValidator.timestamp_now()

        if entry_id is not None:
            stmt = (
                update(Entry)
                .where(Entry.id == entry_id)
                .values(title=title, body=envelope, updated_at=now)
            )
            result = self._execute_with_retry(lambda: self.session.execute(stmt))
            if result.rowcount == 0:
                safe_logger(self.logger).log_warning(
                    "Update matched no entry", {"entry_id": entry_id}
                )
            self.session.execute(
                delete(diary_tags).where(diary_tags.c.entry_id == entry_id)
            )
        else:
            entry_id = new_uuid()
            self.session.add(
                Entry(
                    id=entry_id,
                    title=title,
                    body=envelope,
                    created_at=now,
                    updated_at=now,
                )
            )
            self._execute_with_retry(self.session.flush)

        for name in names:
            tag = self._tag_mgr.get_or_create(name)
            self.session.execute(
                insert(diary_tags)
                .prefix_with("OR IGNORE")
                .values(entry_id=entry_id, tag_id=tag.id)
            )

        safe_logger(self.logger).log_debug(
            "Entry saved", {"entry_id": entry_id, "tag_count": len(names)}
        )
        return entry_id

    @handle_db_errors
    @log_database_operation("delete_entry")
    def delete(self, entry_id: str) -> Dict[str, int]:
        """
        Delete an entry with its relationships and taggings.

        Rows are removed explicitly (relationships, taggings, entry) so a
        connection without foreign key enforcement leaves no orphans.

        Args:
            entry_id: Entry to delete

        Returns:
            Number of rows removed per table

        Raises:
            EntryNotFoundError: If no entry has this id
        """
        relationships = self.session.execute(
            delete(Relationship).where(
                or_(
                    Relationship.parent_id == entry_id,
                    Relationship.child_id == entry_id,
                )
            )
        )
        taggings = self.session.execute(
            delete(diary_tags).where(diary_tags.c.entry_id == entry_id)
        )
        entries = self.session.execute(delete(Entry).where(Entry.id == entry_id))

        if entries.rowcount == 0:
            raise EntryNotFoundError(entry_id)

        return {
            "relationships": relationships.rowcount,
            "taggings": taggings.rowcount,
            "entries": entries.rowcount,
        }

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("get_entry")
    def get(self, entry_id: str) -> DiaryEntry:
        """
        Fetch and decrypt one entry.

        Raises:
            EntryNotFoundError: If no entry has this id
            DecryptionError: If the stored envelope does not open
        """
        entry = self.session.execute(
            select(Entry)
            .where(Entry.id == entry_id)
            .options(selectinload(Entry.tags))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return self.to_record(entry)

    @handle_db_errors
    @log_database_operation("list_entries")
    def list_all(self) -> List[DiaryEntry]:
        """All entries, newest first. One bad envelope fails the call."""
        stmt = (
            select(Entry)
            .options(selectinload(Entry.tags))
            .order_by(*NEWEST_FIRST)
            .execution_options(populate_existing=True)
        )
        return [self.to_record(entry) for entry in self.session.execute(stmt).scalars()]

    @handle_db_errors
    @log_database_operation("search_entries_by_tag")
    def search_by_tag(self, tag_name: str) -> List[DiaryEntry]:
        """
        Entries carrying the tag with exactly this name, newest first.

        Args:
            tag_name: Tag text, matched byte for byte

        Returns:
            Matching entries; empty if the tag does not exist
        """
        tag = self._tag_mgr.get(tag_name)
        if tag is None:
            return []

        stmt = (
            select(Entry)
            .join(diary_tags, diary_tags.c.entry_id == Entry.id)
            .where(diary_tags.c.tag_id == tag.id)
            .options(selectinload(Entry.tags))
            .order_by(*NEWEST_FIRST)
            .execution_options(populate_existing=True)
        )
        return [self.to_record(entry) for entry in self.session.execute(stmt).scalars()]

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def to_record(self, entry: Entry) -> DiaryEntry:
        """Decrypt an Entry row into a detached DiaryEntry."""
        return DiaryEntry(
            id=entry.id,
            title=entry.title,
            content=self.cipher.decrypt(entry.body),
            created_at=self._timestamp(entry, "created_at"),
            updated_at=self._timestamp(entry, "updated_at"),
            tags=entry.tag_names,
        )

    def _timestamp(self, entry: Entry, column: str) -> datetime:
        raw = getattr(entry, column)
        parsed = DataValidator.parse_timestamp(raw)
        if parsed is None:
            # Lossy: an unreadable timestamp is reported as the current time
            safe_logger(self.logger).log_warning(
                "Unparseable timestamp, substituting current time",
                {"entry_id": entry.id, "column": column, "value": raw},
            )
            return datetime.now(timezone.utc)
        return parsed

