#!/usr/bin/env python3
"""
base_manager.py
--------------------
Common ground for the diary's entity managers.

A manager wraps one SQLAlchemy session handed to it by
DiaryDB.session_scope() and never commits: the scope owns the
transaction, so a failure anywhere in an operation rolls back all of it.

Helpers:
    - _execute_with_retry: re-run a statement while SQLite reports a lock
    - _get_or_create: look a row up by unique fields, inserting if absent
    - _get_all: list rows of one model, filtered and ordered

Usage:
    class TagManager(BaseManager):
        def get_or_create(self, name: str) -> Tag:
            return self._get_or_create(Tag, {"name": name})
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from abc import ABC
from typing import Any, Callable, Dict, List, Optional, Protocol, Type, TypeVar

# --- Third party imports ---
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Mapped, Session

# --- Local imports ---
from diary.core.exceptions import DatabaseError
from diary.core.logging_manager import DiaryLogger, safe_logger


class HasId(Protocol):
    """Any mapped model keyed by a string id."""

    id: Mapped[str]


T = TypeVar("T", bound=HasId)

# Substrings of SQLite messages for a lock held by another connection
LOCK_MARKERS = ("database is locked", "database table is locked", "busy")


def is_lock_error(error: OperationalError) -> bool:
    """Whether SQLite refused the statement only because of a lock."""
    message = str(error.orig if error.orig is not None else error).lower()
    return any(marker in message for marker in LOCK_MARKERS)


class BaseManager(ABC):
    """
    Base for managers bound to one session.

    Attributes:
        session: Session of the enclosing session_scope()
        logger: Optional DiaryLogger; a NullLogger is used when None
    """

    def __init__(self, session: Session, logger: Optional[DiaryLogger] = None):
        self.session = session
        self.logger = logger

    def _execute_with_retry(
        self,
        operation: Callable[[], Any],
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> Any:
        """
        Call operation, retrying with exponential backoff on a lock.

        The store's own lock serializes writers inside one process, so a
        lock error means another process holds the file. Any other
        OperationalError propagates on the first attempt.

        Args:
            operation: Zero-argument callable issuing the statement
            max_retries: Total attempts before giving up
            retry_delay: Delay before the second attempt; doubled each time

        Returns:
            Whatever operation returns

        Raises:
            OperationalError: The last lock error, or any other engine error
        """
        if max_retries < 1:
            raise DatabaseError("max_retries must be at least 1")

        delay = retry_delay
        for attempt in range(1, max_retries + 1):
            try:
                return operation()
            except OperationalError as e:
                if attempt == max_retries or not is_lock_error(e):
                    raise
                safe_logger(self.logger).log_debug(
                    "Database locked, retrying",
                    {"attempt": attempt, "max_retries": max_retries, "delay": delay},
                )
                time.sleep(delay)
                delay *= 2

    def _get_or_create(
        self,
        model_class: Type[T],
        lookup_fields: Dict[str, Any],
        extra_fields: Optional[Dict[str, Any]] = None,
    ) -> T:
        """
        Return the row matching lookup_fields, inserting it when absent.

        The new row is flushed at once so its generated id can be used by
        Core statements later in the same transaction. A constraint
        failure propagates and aborts the transaction.

        Args:
            model_class: Mapped model
            lookup_fields: Column values identifying the row
            extra_fields: Extra column values used only on insert
        """
        existing = self.session.execute(
            select(model_class).filter_by(**lookup_fields)
        ).scalar_one_or_none()
        if existing is not None:
            return existing

        row = model_class(**{**lookup_fields, **(extra_fields or {})})
        self.session.add(row)
        self.session.flush()

        safe_logger(self.logger).log_debug(
            f"Created {model_class.__name__}", {"id": row.id}
        )
        return row

    def _get_all(
        self,
        model_class: Type[T],
        order_by: Optional[str] = None,
        **filters: Any,
    ) -> List[T]:
        """Rows of model_class matching filters, ordered by the named column."""
        stmt = select(model_class).filter_by(**filters)
        if order_by is not None:
            stmt = stmt.order_by(getattr(model_class, order_by))
        return list(self.session.execute(stmt).scalars())
