"""
dataclasses package
-------------------
Detached records returned by the diary store.

- DiaryEntry / TagRecord: decrypted entries and tags
- RelationshipRecord: entry-to-entry links
- GraphNode / GraphEdge / GraphData: graph projection
"""
from diary.dataclasses.diary_entry import DiaryEntry, TagRecord
from diary.dataclasses.relationship import RelationshipRecord
from diary.dataclasses.graph import (
    NODE_TYPE_DIARY,
    NODE_TYPE_TAG,
    GraphData,
    GraphEdge,
    GraphNode,
)

__all__ = [
    "DiaryEntry",
    "TagRecord",
    "RelationshipRecord",
    "GraphNode",
    "GraphEdge",
    "GraphData",
    "NODE_TYPE_DIARY",
    "NODE_TYPE_TAG",
]
