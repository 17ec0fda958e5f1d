#!/usr/bin/env python3
"""
relationship.py
-------------------

Record for a directed, typed link between two entries.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class RelationshipRecord:
    """
    A relationship as seen by callers.

    The kind is exposed as `relationship_type` and created_at is an
    RFC 3339 string.
    """
    id:                str
    parent_id:         str
    child_id:          str
    relationship_type: str
    created_at:        str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "child_id": self.child_id,
            "relationship_type": self.relationship_type,
            "created_at": self.created_at,
        }
