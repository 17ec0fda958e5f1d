#!/usr/bin/env python3
"""
graph_manager.py
--------------------
Projects the store as a labeled multigraph.

Node order: every entry, then every tag.
Edge order: every tagging (entry -> tag), then every relationship
(child -> parent). Within each block rows come in insertion order.

Timestamps are forwarded exactly as stored and bodies are never read,
so building the graph does not touch the key.
"""
from __future__ import annotations

from sqlalchemy import literal_column, select

from diary.core.logging_manager import safe_logger
from diary.dataclasses import (
    NODE_TYPE_DIARY,
    NODE_TYPE_TAG,
    GraphData,
    GraphEdge,
    GraphNode,
)
from diary.database.decorators import handle_db_errors, log_database_operation
from diary.database.models import Entry, Relationship, Tag, diary_tags
from .base_manager import BaseManager


class GraphManager(BaseManager):
    """Builds GraphData from the current contents of the database."""

    @handle_db_errors
    @log_database_operation("get_graph")
    def build(self) -> GraphData:
        graph = GraphData()

        entries = self.session.execute(
            select(Entry.id, Entry.title, Entry.created_at).order_by(
                literal_column("entries.rowid")
            )
        )
        for entry_id, title, created_at in entries:
            graph.nodes.append(
                GraphNode(
                    id=entry_id,
                    label=title,
                    node_type=NODE_TYPE_DIARY,
                    properties={"title": title, "created_at": created_at},
                )
            )

        tags = self.session.execute(
            select(Tag.id, Tag.name).order_by(literal_column("tags.rowid"))
        )
        for tag_id, name in tags:
            graph.nodes.append(
                GraphNode(
                    id=tag_id,
                    label=name,
                    node_type=NODE_TYPE_TAG,
                    properties={"name": name},
                )
            )

        taggings = self.session.execute(
            select(diary_tags.c.entry_id, diary_tags.c.tag_id, Tag.name)
            .join(Tag, Tag.id == diary_tags.c.tag_id)
            .order_by(literal_column("diary_tags.rowid"))
        )
        for entry_id, tag_id, name in taggings:
            graph.edges.append(
                GraphEdge(
                    id=f"tag-{entry_id}-{tag_id}",
                    source=entry_id,
                    target=tag_id,
                    label=f"tagged_as_{name}",
                )
            )

        relationships = self.session.execute(
            select(
                Relationship.id,
                Relationship.parent_id,
                Relationship.child_id,
                Relationship.kind,
            ).order_by(literal_column("relationships.rowid"))
        )
        for rel_id, parent_id, child_id, kind in relationships:
            graph.edges.append(
                GraphEdge(id=rel_id, source=child_id, target=parent_id, label=kind)
            )

        dangling = graph.dangling_edges()
        if dangling:
            # Only reachable when rows were written without foreign keys
            safe_logger(self.logger).log_warning(
                "Graph edges reference missing nodes",
                {"count": len(dangling), "edge_ids": [e.id for e in dangling[:10]]},
            )

        return graph
