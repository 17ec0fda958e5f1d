#!/usr/bin/env python3
"""
graph.py
-------------------

Labeled multigraph projection of the store.

Nodes are entries (node_type "diary") and tags (node_type "tag").
Edges are taggings (entry -> tag) and relationships (child -> parent).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

NODE_TYPE_DIARY = "diary"
NODE_TYPE_TAG = "tag"


@dataclass
class GraphNode:
    """A node with a free-form property bag."""
    id:         str
    label:      str
    node_type:  str
    properties: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "node_type": self.node_type,
            "properties": dict(self.properties),
        }


@dataclass
class GraphEdge:
    """A directed, labeled edge."""
    id:     str
    source: str
    target: str
    label:  str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "label": self.label,
        }


@dataclass
class GraphData:
    """Nodes (entries, then tags) and edges (taggings, then relationships)."""
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    def node_ids(self) -> Set[str]:
        return {node.id for node in self.nodes}

    def dangling_edges(self) -> List[GraphEdge]:
        """Edges whose source or target is not among the nodes."""
        ids = self.node_ids()
        return [e for e in self.edges if e.source not in ids or e.target not in ids]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }
