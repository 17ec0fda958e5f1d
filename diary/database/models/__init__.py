"""
Database Models Package
------------------------

SQLAlchemy ORM models for the diary database.

- base: Base class and UUID helper
- associations: diary_tags many-to-many table
- core: Entry model
- entities: Tag, Relationship

Usage:
    from diary.database.models import Entry, Tag, Relationship
"""
from .base import Base, new_uuid
from .associations import diary_tags
from .core import Entry
from .entities import DEFAULT_RELATIONSHIP_KIND, Relationship, Tag

__all__ = [
    "Base",
    "new_uuid",
    "diary_tags",
    "Entry",
    "Tag",
    "Relationship",
    "DEFAULT_RELATIONSHIP_KIND",
]
