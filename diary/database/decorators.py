#!/usr/bin/env python3
"""
decorators.py
--------------------
Timing, logging and error translation for database work.

- DatabaseOperation: context manager that times a block, logs its
  outcome and turns SQLAlchemy failures into DatabaseError
- log_database_operation: decorator form of the timing and logging
- handle_db_errors: decorator form of the translation

Manager methods stack the two decorators:

    @handle_db_errors
    @log_database_operation("save_entry")
    def save(self, ...): ...

so the failure is logged with the engine's own exception before it is
wrapped.
"""
from __future__ import annotations

from datetime import datetime
from functools import wraps
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from diary.core.exceptions import DatabaseError, ValidationError
from diary.core.logging_manager import DiaryLogger, safe_logger


def translate_error(error: SQLAlchemyError) -> DatabaseError:
    """DatabaseError carrying the DBAPI message (or SQLAlchemy's own)."""
    detail = getattr(error, "orig", None) or error
    if isinstance(error, IntegrityError):
        return DatabaseError(f"Data integrity violation: {detail}")
    return DatabaseError(f"Database operation failed: {detail}")


class DatabaseOperation:
    """
    Time and log one unit of database work.

    On success logs '<name>_completed' with the duration. On failure
    logs the exception and, when translate is set, re-raises SQLAlchemy
    errors as DatabaseError chained to the original. Other exceptions
    always propagate unchanged.

    Usage:
        with DatabaseOperation(self.logger, "initialize_schema"):
            Base.metadata.create_all(engine)
    """

    def __init__(
        self,
        logger: Optional[DiaryLogger],
        operation_name: str,
        details: Optional[Dict[str, Any]] = None,
        translate: bool = True,
    ) -> None:
        self.logger = safe_logger(logger)
        self.operation_name = operation_name
        self.details = details or {}
        self.translate = translate
        self.started: Optional[datetime] = None

    @property
    def operation_id(self) -> str:
        return f"{self.operation_name}_{self.started:%Y%m%d_%H%M%S_%f}"

    def _elapsed(self) -> float:
        return (datetime.now() - self.started).total_seconds()

    def __enter__(self) -> "DatabaseOperation":
        self.started = datetime.now()
        self.logger.log_debug(
            f"Starting {self.operation_name}",
            {"operation_id": self.operation_id, **self.details},
        )
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            self.logger.log_operation(
                f"{self.operation_name}_completed",
                {
                    **self.details,
                    "operation_id": self.operation_id,
                    "duration_seconds": self._elapsed(),
                    "success": True,
                },
            )
            return False

        self.logger.log_error(
            exc,
            {
                **self.details,
                "operation": self.operation_name,
                "operation_id": self.operation_id,
                "duration_seconds": self._elapsed(),
            },
        )
        if self.translate and isinstance(exc, SQLAlchemyError):
            raise translate_error(exc) from exc
        return False


def log_database_operation(operation_name: str):
    """
    Log timing and outcome of a manager method.

    The logger is read from the instance's 'logger' attribute at call
    time. Exceptions are logged and re-raised untouched.

    Args:
        operation_name: Name used in the log records
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            with DatabaseOperation(
                getattr(self, "logger", None),
                operation_name,
                {"args_count": len(args), "kwargs_keys": sorted(kwargs)},
                translate=False,
            ):
                return function(self, *args, **kwargs)

        return wrapper

    return decorator


def handle_db_errors(function: Callable) -> Callable:
    """
    Re-raise SQLAlchemy errors from function as DatabaseError.

    The sqlite3 driver encodes bound strings itself and raises
    UnicodeEncodeError unwrapped; that surfaces as ValidationError.
    """

    @wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except SQLAlchemyError as e:
            raise translate_error(e) from e
        except UnicodeEncodeError as e:
            raise ValidationError(f"Text is not valid UTF-8 (position {e.start})") from e

    return wrapper
