"""
Association Tables
-------------------

Many-to-many relationship tables for the diary database.

- diary_tags: entries <-> tags

This is a pure association table with no additional metadata. Both
foreign keys cascade so that deleting an entry or a tag removes its
taggings at the schema level.
"""
# --- Third party imports ---
from sqlalchemy import Column, ForeignKey, Table, Text

# --- Local imports ---
from .base import Base

diary_tags = Table(
    "diary_tags",
    Base.metadata,
    Column(
        "entry_id",
        Text,
        ForeignKey("entries.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Text,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)
