#!/usr/bin/env python3
"""
diary_entry.py
-------------------

Plain records returned by the store.

These are detached from the database session: the body is already
decrypted, timestamps are parsed, and tags are a list of names. Each
record offers to_dict() producing the JSON shape used at the boundary.
"""
from __future__ import annotations

# --- Standard Library ---
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List


@dataclass
class DiaryEntry:
    """
    A decrypted journal entry.

    Fields:
    - id:         UUID of the entry
    - title:      Plaintext title
    - content:    Decrypted body
    - created_at: Creation instant (aware, UTC)
    - updated_at: Last modification instant (aware, UTC)
    - tags:       Tag names attached to the entry
    """
    id:         str
    title:      str
    content:    str
    created_at: datetime
    updated_at: datetime
    tags:       List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with RFC 3339 timestamps."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "tags": list(self.tags),
        }


@dataclass
class TagRecord:
    """A tag and its id."""
    id:   str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}
