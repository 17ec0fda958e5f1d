"""
Core Models
------------

Central model for the diary database.

Models:
    - Entry: A journal entry with an encrypted body

Every column is TEXT. Timestamps are stored as RFC 3339 strings so that
ORDER BY created_at sorts chronologically and rows written by other tools
are forwarded verbatim.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .associations import diary_tags
from .base import Base, new_uuid

if TYPE_CHECKING:
    from .entities import Tag


# ----- Entry Model -----
class Entry(Base):
    """
    A journal entry.

    The body column only ever holds an envelope produced by the
    EnvelopeCipher; title and tag names are plaintext.

    Attributes:
        id: v4 UUID primary key
        title: Plaintext title (non-empty)
        body: JSON ciphertext envelope
        created_at: RFC 3339 creation instant
        updated_at: RFC 3339 last modification instant

    Relationships:
        tags: Many-to-many with Tag, ordered by name. Read-only: taggings
            are written through explicit statements in EntryManager.
    """

    __tablename__ = "entries"
    __table_args__ = (
        CheckConstraint("title != ''", name="ck_entry_non_empty_title"),
    )

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    updated_at: Mapped[str] = mapped_column(Text, nullable=False)

    tags: Mapped[List["Tag"]] = relationship(
        "Tag",
        secondary=diary_tags,
        order_by="Tag.name",
        back_populates="entries",
        viewonly=True,
    )

    @property
    def tag_names(self) -> List[str]:
        return [tag.name for tag in self.tags]

    def __repr__(self) -> str:
        return f"<Entry(id={self.id!r}, title={self.title!r})>"
