#!/usr/bin/env python3
"""
managers package
--------------------
Entity managers for the diary database.

Each manager handles the operations for one concern and inherits from
BaseManager. Managers work inside a session owned by DiaryDB and never
commit on their own.

Available Managers:
    BaseManager: Abstract base class with common utilities
    TagManager: Tag lookup and lazy creation
    EntryManager: Entry upsert, reads, search and delete
    RelationshipManager: Directed links between entries
    GraphManager: Graph projection of entries, tags and links

Usage:
    from diary.database.managers import EntryManager, TagManager

    entry_mgr = EntryManager(session, cipher, logger)
    tag_mgr = TagManager(session, logger)
"""
from .base_manager import BaseManager
from .tag_manager import TagManager
from .entry_manager import EntryManager
from .relationship_manager import RelationshipManager
from .graph_manager import GraphManager

__all__ = [
    "BaseManager",
    "TagManager",
    "EntryManager",
    "RelationshipManager",
    "GraphManager",
]
