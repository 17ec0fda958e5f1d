"""
Diary Package
===============================

An encrypted local journal store with a tag and relationship graph.

Entry bodies are sealed with AES-256-GCM before they reach the SQLite
database; titles, tags and links stay plaintext so they can be searched
and projected as a graph.

Main Components:
    - crypto: Key custody and envelope encryption
    - database: SQLAlchemy models, entity managers and the DiaryDB facade
    - dataclasses: Detached records returned to callers
    - core: Logging, validation, paths and exceptions

Primary Interfaces:
    - diary.database.manager.DiaryDB: Main store interface
    - diary.database.cli: Command-line interface (diarydb)

Example Usage:
    >>> from diary import DiaryDB
    >>> db = DiaryDB(data_dir="/tmp/diary")
    >>> entry_id = db.save_entry(None, "Monday", "dear diary", ["work"])
    >>> db.get_entry(entry_id).tags
    ['work']
    >>> db.close()
"""

__version__ = "0.1.0"

# Expose primary interfaces for convenience
from diary.database.manager import DiaryDB
from diary.core.paths import get_data_dir, get_log_dir

__all__ = [
    "DiaryDB",
    "get_data_dir",
    "get_log_dir",
]
