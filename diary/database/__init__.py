#!/usr/bin/env python3
"""
Diary Database Package
---------------------------
Encrypted journal store built on SQLAlchemy and SQLite.

This package provides:
- DiaryDB: the store facade (entries, tags, relationships, graph)
- Entity managers working inside a DiaryDB session
- Health monitoring
- Error translation and operation logging decorators
"""

from .manager import DiaryDB
from diary.core.exceptions import (
    DatabaseError,
    EntryNotFoundError,
    HealthCheckError,
    StoreInitError,
    ValidationError,
)
from .health_monitor import HealthMonitor
from .decorators import (
    DatabaseOperation,
    handle_db_errors,
    log_database_operation,
)

__all__ = [
    # Main manager
    "DiaryDB",
    # Exceptions
    "DatabaseError",
    "EntryNotFoundError",
    "HealthCheckError",
    "StoreInitError",
    "ValidationError",
    # Core modules
    "HealthMonitor",
    # Decorators
    "DatabaseOperation",
    "handle_db_errors",
    "log_database_operation",
]
