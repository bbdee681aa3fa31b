"""Tagging of edges made redundant by structural nesting."""

from __future__ import annotations

import logging
from typing import Iterable

from compound_nodes.core.config import Settings, settings
from compound_nodes.graph.elements import GraphEdge
from compound_nodes.graph.store import GraphStore

logger = logging.getLogger(__name__)


class StructuralEdgeTagger:
    def __init__(self, store: GraphStore, config: Settings = settings) -> None:
        self.store = store
        self.tag_name = config.STRUCTURAL_EDGE_CLASS

    def tag(self, node_id: str, parent_id: str) -> int:
        """Tag every edge from `node_id` to `parent_id`. Returns how many matched."""
        edges = self.store.find_edges(node_id, parent_id)
        if not edges:
            return 0
        with self.store.batch():
            for edge in edges:
                self.store.add_class(edge, self.tag_name)
        logger.debug("[%s] Tagged %d edge(s) to %s as structural", node_id, len(edges), parent_id)
        return len(edges)

    def clear(self, edges: Iterable[GraphEdge]) -> None:
        with self.store.batch():
            for edge in edges:
                self.store.remove_class(edge, self.tag_name)


__all__ = ["StructuralEdgeTagger"]
