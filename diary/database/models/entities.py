"""
Entity Models
--------------

Tags and inter-entry relationships.

Models:
    - Tag: User-defined label, unique and case-sensitive by name
    - Relationship: Directed, typed link from a parent entry to a child entry
"""

# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import TYPE_CHECKING, List

# --- Third party imports ---
from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from .associations import diary_tags
from .base import Base, new_uuid

if TYPE_CHECKING:
    from .core import Entry

DEFAULT_RELATIONSHIP_KIND = "depends_on"


class Tag(Base):
    """
    A keyword tag.

    Tags are created lazily the first time an entry uses them and are
    never removed by the store, even once unused.

    Attributes:
        id: v4 UUID primary key
        name: Tag text, unique, stored exactly as given
    """

    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    entries: Mapped[List["Entry"]] = relationship(
        "Entry",
        secondary=diary_tags,
        back_populates="tags",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id!r}, name={self.name!r})>"


class Relationship(Base):
    """
    A directed link between two entries.

    Self-loops and cycles are allowed; ordering semantics belong to the
    consumer.

    Attributes:
        id: Caller-supplied or v4 UUID primary key
        parent_id: Entry the link points to
        child_id: Entry the link starts from
        kind: Free-form label, default "depends_on"
        created_at: RFC 3339 creation instant
    """

    __tablename__ = "relationships"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_uuid)
    parent_id: Mapped[str] = mapped_column(
        Text, ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    child_id: Mapped[str] = mapped_column(
        Text, ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind: Mapped[str] = mapped_column(
        Text, nullable=False, default=DEFAULT_RELATIONSHIP_KIND
    )
    created_at: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<Relationship(id={self.id!r}, {self.child_id!r} "
            f"-[{self.kind}]-> {self.parent_id!r})>"
        )
