#!/usr/bin/env python3
"""
health_monitor.py
-----------------
Database health monitoring for the diary store.

Detects rows that break the store's invariants: taggings or relationships
pointing at missing entries or tags, entries whose timestamps run
backwards, and bodies that are not ciphertext envelopes.

Key Features:
    - Foreign key enforcement check for the current connection
    - Orphaned record detection for taggings and relationships
    - Per-entry reference counting used after deletes
    - Table counts and database size metrics

Usage:
    from diary.database.health_monitor import HealthMonitor

    monitor = HealthMonitor(logger=db.logger)
    with db.session_scope() as session:
        report = monitor.health_check(session)
        if report["status"] != "healthy":
            print(report["issues"])

Health Report Structure:
    {
        "status": "healthy" | "warning",
        "issues": ["2 orphaned records found", ...],
        "metrics": {
            "foreign_keys_enabled": True,
            "orphaned_records": {"taggings_without_entry": 0, ...},
            "integrity": {"updated_before_created": 0, ...},
            "performance": {"table_counts": {...}, "size_bytes": 20480}
        },
        "recommendations": ["..."]
    }

Notes:
    - Health checks never modify the database
    - Failed checks raise HealthCheckError
"""
from typing import Any, Dict, Optional

from sqlalchemy import func, or_, select, text
from sqlalchemy.orm import Session

from diary.core.exceptions import HealthCheckError
from diary.core.logging_manager import DiaryLogger, safe_logger
from .decorators import handle_db_errors, log_database_operation
from .models import Entry, Relationship, Tag, diary_tags

ENVELOPE_PREFIX = '{"nonce":'


class HealthMonitor:
    """
    Database health monitoring for the diary store.

    Stateless apart from the logger; every check runs in the session
    passed by the caller.
    """

    def __init__(self, logger: Optional[DiaryLogger] = None) -> None:
        """
        Initialize health monitor.

        Args:
            logger: Optional logger for health operations
        """
        self.logger = logger

    # -------------------------------------------------------------------------
    # Individual checks
    # -------------------------------------------------------------------------

    @staticmethod
    def foreign_keys_enabled(session: Session) -> bool:
        """Whether the connection behind this session enforces foreign keys."""
        return bool(session.execute(text("PRAGMA foreign_keys")).scalar())

    def check_orphaned_records(self, session: Session) -> Dict[str, int]:
        """
        Count rows whose foreign keys point at nothing.

        Only possible if rows were written on a connection without
        foreign key enforcement.

        Args:
            session: SQLAlchemy session

        Returns:
            Dictionary with orphan counts by kind
        """
        entry_ids = select(Entry.id)
        tag_ids = select(Tag.id)

        def count(stmt) -> int:
            return session.execute(stmt).scalar_one()

        return {
            "taggings_without_entry": count(
                select(func.count())
                .select_from(diary_tags)
                .where(diary_tags.c.entry_id.not_in(entry_ids))
            ),
            "taggings_without_tag": count(
                select(func.count())
                .select_from(diary_tags)
                .where(diary_tags.c.tag_id.not_in(tag_ids))
            ),
            "relationships_without_endpoint": count(
                select(func.count())
                .select_from(Relationship)
                .where(
                    or_(
                        Relationship.parent_id.not_in(entry_ids),
                        Relationship.child_id.not_in(entry_ids),
                    )
                )
            ),
        }

    def count_entry_references(self, session: Session, entry_id: str) -> Dict[str, int]:
        """
        Count taggings and relationships still referring to an entry.

        Args:
            session: SQLAlchemy session
            entry_id: Entry id, usually one that was just deleted

        Returns:
            {"taggings": n, "relationships": m}
        """
        taggings = session.execute(
            select(func.count())
            .select_from(diary_tags)
            .where(diary_tags.c.entry_id == entry_id)
        ).scalar_one()
        relationships = session.execute(
            select(func.count())
            .select_from(Relationship)
            .where(
                or_(
                    Relationship.parent_id == entry_id,
                    Relationship.child_id == entry_id,
                )
            )
        ).scalar_one()
        return {"taggings": taggings, "relationships": relationships}

    def check_data_integrity(self, session: Session) -> Dict[str, int]:
        """
        Check entry rows for invariant violations.

        Args:
            session: SQLAlchemy session

        Returns:
            Dictionary with violation counts
        """
        def count(*criteria) -> int:
            return session.execute(
                select(func.count()).select_from(Entry).where(*criteria)
            ).scalar_one()

        return {
            "updated_before_created": count(Entry.updated_at < Entry.created_at),
            "bodies_not_encrypted": count(Entry.body.not_like(f"{ENVELOPE_PREFIX}%")),
        }

    def _get_performance_metrics(self, session: Session) -> Dict[str, Any]:
        """Table counts and on-disk size."""
        metrics: Dict[str, Any] = {}

        def count(table) -> int:
            return session.execute(
                select(func.count()).select_from(table)
            ).scalar_one()

        metrics["table_counts"] = {
            "entries": count(Entry),
            "tags": count(Tag),
            "taggings": count(diary_tags),
            "relationships": count(Relationship),
        }

        page_count = session.execute(text("PRAGMA page_count")).scalar() or 0
        page_size = session.execute(text("PRAGMA page_size")).scalar() or 0
        metrics["size_bytes"] = page_count * page_size

        metrics["index_count"] = len(
            session.execute(text("PRAGMA index_list('entries')")).fetchall()
        )
        return metrics

    # -------------------------------------------------------------------------
    # Full report
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("health_check")
    def health_check(self, session: Session) -> Dict[str, Any]:
        """
        Run every check and summarize.

        Args:
            session: SQLAlchemy session

        Returns:
            Dictionary with health status, issues and metrics

        Raises:
            HealthCheckError: If a check cannot be executed
        """
        health: Dict[str, Any] = {
            "status": "healthy",
            "issues": [],
            "metrics": {},
            "recommendations": [],
        }

        try:
            session.execute(text("SELECT 1"))

            health["metrics"]["foreign_keys_enabled"] = self.foreign_keys_enabled(session)
            health["metrics"]["orphaned_records"] = self.check_orphaned_records(session)
            health["metrics"]["integrity"] = self.check_data_integrity(session)
            health["metrics"]["performance"] = self._get_performance_metrics(session)

            health = self._evaluate_health_status(health)

        except Exception as e:
            safe_logger(self.logger).log_error(e, {"operation": "health_check"})
            raise HealthCheckError(f"Health check failed: {e}") from e

        return health

    # (metric group, key, issue message, recommendation)
    _HEALTH_RULES = [
        (
            "integrity",
            "updated_before_created",
            "Entries with updated_at earlier than created_at",
            "Re-save the affected entries to refresh updated_at",
        ),
        (
            "integrity",
            "bodies_not_encrypted",
            "Entries whose body is not a ciphertext envelope",
            "Re-save the affected entries so their bodies are encrypted",
        ),
    ]

    def _evaluate_health_status(self, health: Dict[str, Any]) -> Dict[str, Any]:
        """
        Derive status, issues and recommendations from the metrics.

        Args:
            health: Current health dictionary

        Returns:
            Updated health dictionary
        """
        metrics = health["metrics"]

        if not metrics.get("foreign_keys_enabled", True):
            health["issues"].append("Foreign key enforcement is disabled")
            health["recommendations"].append(
                "Check that the connection hook runs PRAGMA foreign_keys = ON"
            )

        total_orphans = sum(metrics.get("orphaned_records", {}).values())
        if total_orphans > 0:
            health["issues"].append(f"{total_orphans} orphaned records found")
            health["recommendations"].append(
                "Delete taggings and relationships that reference missing rows"
            )

        for group, key, issue_msg, recommendation in self._HEALTH_RULES:
            found = metrics.get(group, {}).get(key, 0)
            if found > 0:
                health["issues"].append(f"{issue_msg}: {found}")
                health["recommendations"].append(recommendation)

        if health["issues"]:
            health["status"] = "warning"

        return health
