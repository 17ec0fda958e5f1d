#!/usr/bin/env python3
"""
manager.py
--------------------
Database manager for the encrypted diary store.

Provides the DiaryDB class, the single entry point callers use. It owns
the SQLite engine and its connection pool, the process key and the
envelope cipher, and serializes every public operation behind one lock.

Handles:
    - Key custody via KeyVault and body encryption via EnvelopeCipher
    - Engine and pool setup with foreign keys enforced per connection
    - Idempotent schema creation
    - Transaction management with automatic rollback
    - Delegation to the entity managers

Core Operations:
    Entries:
        - save_entry: Create or overwrite an entry and its tag set
        - get_entry: Retrieve and decrypt one entry
        - list_entries: All entries, newest first
        - search_entries_by_tag: Entries carrying one exact tag
        - delete_entry: Remove an entry, its taggings and relationships

    Relationships:
        - add_relationship / delete_relationship / get_relationships

    Projection & Maintenance:
        - get_graph: Entries, tags and links as a labeled graph
        - list_tags: Every tag by name
        - health_check: Orphan and integrity report

Notes
==============
- Only entry bodies are encrypted; titles and tag names are plaintext
- The key file is stored unencrypted next to the database and relies on
  filesystem permissions
- All timestamps are UTC RFC 3339 strings
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

# --- Third party ---
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

# --- Local imports ---
from diary.core.exceptions import DatabaseError, StoreInitError
from diary.core.logging_manager import DiaryLogger, safe_logger
from diary.core.paths import db_path as default_db_path
from diary.core.paths import get_data_dir
from diary.crypto import EnvelopeCipher, KeyVault, SecretKey
from diary.dataclasses import DiaryEntry, GraphData, RelationshipRecord, TagRecord
from .decorators import DatabaseOperation
from .health_monitor import HealthMonitor
from .managers import EntryManager, GraphManager, RelationshipManager, TagManager
from .models import Base


# Serializes every public operation of every DiaryDB in this process
_STORE_LOCK = threading.RLock()


# ----- Main Database Manager -----
class DiaryDB:
    """
    Main database manager for the diary store.

    Attributes:
        - data_dir (Path): Directory holding encryption.key and diary.db.
        - db_path (Path): Filesystem path to the SQLite database file.
        - engine (Engine): SQLAlchemy engine instance.
        - SessionLocal (sessionmaker): SQLAlchemy session factory.
        - logger (DiaryLogger | None): Operation logger.

    Thread safety:
        Every public operation holds one process-wide re-entrant lock from
        connection checkout to commit. Calls from several threads run one
        after another, including calls on different DiaryDB instances
        opened on the same data directory.

    Usage:
        db = DiaryDB()
        entry_id = db.save_entry(None, "Monday", "dear diary", ["work"])
        print(db.get_entry(entry_id).content)
        db.close()
    """

    # ---- Initialization ----
    def __init__(
        self,
        data_dir: Optional[Union[str, Path]] = None,
        log_dir: Optional[Union[str, Path]] = None,
        pool_size: int = 5,
        max_overflow: int = 0,
        echo: bool = False,
    ) -> None:
        """
        Load the key, open the engine and create the schema.

        Args:
            data_dir (str | Path): Data directory (platform default if None)
            log_dir (str | Path): Directory for log files (optional)
            pool_size (int): Connections kept in the pool
            max_overflow (int): Extra connections allowed beyond pool_size
            echo (bool): Echo SQL statements through SQLAlchemy logging

        Raises:
            KeyVaultError: If the key cannot be loaded or created
            StoreInitError: If the engine or schema cannot be set up
        """
        self.data_dir = get_data_dir(data_dir)
        self.db_path = default_db_path(self.data_dir)
        self._lock = _STORE_LOCK
        self._closed = False

        # --- Logging ---
        if log_dir:
            self.log_dir = Path(log_dir).expanduser().resolve() / "system"
            self.logger: Optional[DiaryLogger] = DiaryLogger(
                self.log_dir,
                component_name="database",
            )
        else:
            self.log_dir = None
            self.logger = None

        # --- Key custody ---
        self.vault = KeyVault(self.data_dir, logger=self.logger)
        self._key: SecretKey = self.vault.load_or_create()
        self.cipher = EnvelopeCipher(self._key)

        self.health_monitor = HealthMonitor(self.logger)

        try:
            self._setup_engine(pool_size, max_overflow, echo)
        except Exception:
            self._key.wipe()
            raise

    def _setup_engine(self, pool_size: int, max_overflow: int, echo: bool) -> None:
        """Initialize database engine, session factory and schema."""
        logger = safe_logger(self.logger)
        try:
            logger.log_operation(
                "database_init_start",
                {"db_path": str(self.db_path), "pool_size": pool_size},
            )

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=echo,
                poolclass=QueuePool,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                connect_args={"check_same_thread": False},
            )
            event.listen(self.engine, "connect", self._on_connect)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )

            self.initialize_schema()

            logger.log_operation("database_init_complete", {"success": True})

        except Exception as e:
            logger.log_error(e, {"operation": "database_init"})
            raise StoreInitError(f"Database initialization failed: {e}") from e

    def _on_connect(self, dbapi_connection, connection_record) -> None:
        """Enforce foreign keys on every new pooled connection."""
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.execute("PRAGMA foreign_keys")
            row = cursor.fetchone()
        finally:
            cursor.close()

        if not row or row[0] != 1:
            safe_logger(self.logger).log_warning(
                "Foreign key enforcement could not be enabled on connection",
                {"db_path": str(self.db_path)},
            )

    def initialize_schema(self) -> None:
        """Create any missing tables and indexes. Safe to re-run."""
        with DatabaseOperation(self.logger, "initialize_schema"):
            Base.metadata.create_all(self.engine)

    # ---- Session Management ----
    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a locked, transactional scope around operations.

        Commits on success, rolls back on any exception and always
        returns the connection to the pool.

        Usage:
            with db.session_scope() as session:
                TagManager(session, db.logger).get_all()
        """
        with self._lock:
            if self._closed:
                raise DatabaseError("Database is closed")

            session = self.SessionLocal()
            session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
            logger = safe_logger(self.logger)
            logger.log_debug("session_start", {"session_id": session_id})

            try:
                yield session
                session.commit()
                logger.log_debug("session_commit", {"session_id": session_id})

            except Exception as e:
                session.rollback()
                logger.log_error(
                    e, {"operation": "session_rollback", "session_id": session_id}
                )
                raise
            finally:
                session.close()
                logger.log_debug("session_close", {"session_id": session_id})

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def save_entry(
        self,
        entry_id: Optional[str],
        title: str,
        body: str,
        tags: Optional[Sequence[str]] = None,
    ) -> str:
        """
        Create (entry_id None) or overwrite an entry, replacing its tags.

        Returns:
            The entry id
        """
        with self.session_scope() as session:
            return EntryManager(session, self.cipher, self.logger).save(
                entry_id, title, body, tags
            )

    def get_entry(self, entry_id: str) -> DiaryEntry:
        """
        Fetch one decrypted entry.

        Raises:
            EntryNotFoundError: If no entry has this id
        """
        with self.session_scope() as session:
            return EntryManager(session, self.cipher, self.logger).get(entry_id)

    def list_entries(self) -> List[DiaryEntry]:
        """All entries ordered by created_at, newest first."""
        with self.session_scope() as session:
            return EntryManager(session, self.cipher, self.logger).list_all()

    def search_entries_by_tag(self, tag: str) -> List[DiaryEntry]:
        """Entries carrying the exact tag name, newest first."""
        with self.session_scope() as session:
            return EntryManager(session, self.cipher, self.logger).search_by_tag(tag)

    def delete_entry(self, entry_id: str) -> None:
        """
        Delete an entry together with its taggings and relationships.

        After the commit the remaining references are counted and any
        leftovers are logged as a warning.

        Raises:
            EntryNotFoundError: If no entry has this id
        """
        with self._lock:
            with self.session_scope() as session:
                removed = EntryManager(session, self.cipher, self.logger).delete(
                    entry_id
                )

            self._verify_deleted(entry_id, removed)

    def _verify_deleted(self, entry_id: str, removed: Dict[str, int]) -> None:
        logger = safe_logger(self.logger)
        with self.session_scope() as session:
            fk_enabled = self.health_monitor.foreign_keys_enabled(session)
            remaining = self.health_monitor.count_entry_references(session, entry_id)

        logger.log_debug(
            "Entry deleted",
            {"entry_id": entry_id, "removed": removed, "foreign_keys": fk_enabled},
        )
        if any(remaining.values()):
            logger.log_warning(
                "Rows still reference deleted entry",
                {"entry_id": entry_id, **remaining},
            )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------

    def add_relationship(
        self,
        parent_id: Optional[str],
        child_id: Optional[str],
        kind: Optional[str] = None,
        relationship_id: Optional[str] = None,
    ) -> str:
        """
        Link child_id to parent_id.

        Returns:
            The relationship id
        """
        with self.session_scope() as session:
            return RelationshipManager(session, self.logger).add(
                parent_id, child_id, kind, relationship_id
            )

    def delete_relationship(self, relationship_id: str) -> None:
        """Delete a relationship; an unknown id is not an error."""
        with self.session_scope() as session:
            RelationshipManager(session, self.logger).delete(relationship_id)

    def get_relationships(self, entry_id: str) -> List[RelationshipRecord]:
        """Relationships touching the entry, in insertion order."""
        with self.session_scope() as session:
            return RelationshipManager(session, self.logger).for_entry(entry_id)

    # -------------------------------------------------------------------------
    # Projection & Maintenance
    # -------------------------------------------------------------------------

    def get_graph(self) -> GraphData:
        """Entries and tags as nodes, taggings and relationships as edges."""
        with self.session_scope() as session:
            return GraphManager(session, self.logger).build()

    def list_tags(self) -> List[TagRecord]:
        """Every tag, ordered by name."""
        with self.session_scope() as session:
            return [
                TagRecord(id=tag.id, name=tag.name)
                for tag in TagManager(session, self.logger).get_all()
            ]

    def health_check(self) -> Dict[str, Any]:
        """Run the HealthMonitor report against the live database."""
        with self.session_scope() as session:
            report = self.health_monitor.health_check(session)
        report["metrics"]["db_path"] = str(self.db_path)
        return report

    # ---- Lifecycle ----
    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Dispose of the pool and wipe the key. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.engine.dispose()
            self._key.wipe()
            safe_logger(self.logger).log_operation(
                "database_closed", {"db_path": str(self.db_path)}
            )
            if self.logger:
                self.logger.close()

    def __enter__(self) -> "DiaryDB":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
