"""Placeholder parent nodes for references that point at no note."""

from __future__ import annotations

import logging
from typing import List

from compound_nodes.core.config import Settings, settings
from compound_nodes.core.exceptions import PlaceholderCreationError
from compound_nodes.graph.elements import GraphNode
from compound_nodes.graph.store import GraphStore

logger = logging.getLogger(__name__)


class PlaceholderRegistry:
    """Create or reuse minimal nodes standing in for unresolved parents."""

    def __init__(self, store: GraphStore, config: Settings = settings) -> None:
        self.store = store
        self.config = config
        self._created: List[str] = []

    @property
    def created(self) -> List[str]:
        """Identities of placeholders created by this registry, in order."""
        return list(self._created)

    def ensure(self, placeholder_id: str) -> GraphNode:
        existing = self.store.get_node(placeholder_id)
        if existing is not None:
            if not existing.has_class(self.config.PARENT_NODE_CLASS):
                self.store.add_class(existing, self.config.PARENT_NODE_CLASS)
                logger.debug("[%s] Applied '%s' to existing node", placeholder_id, self.config.PARENT_NODE_CLASS)
            return existing

        logger.debug("[%s] Creating placeholder node", placeholder_id)
        with self.store.batch():
            try:
                node = self.store.add_node(placeholder_id, {"id": placeholder_id})
            except Exception as exc:
                raise PlaceholderCreationError(
                    error_code="PLACEHOLDER_ADD_FAILED",
                    message=f"Could not add placeholder node '{placeholder_id}'",
                    details={"error": str(exc)},
                ) from exc

            try:
                self.store.set_data(placeholder_id, "label", placeholder_id)
                self.store.set_data(placeholder_id, "is_placeholder", True)
                self.store.add_class(node, self.config.PLACEHOLDER_CLASS)
                self.store.add_class(node, self.config.PARENT_NODE_CLASS)
            except Exception as exc:
                logger.error("[%s] Failed to initialise placeholder, removing it: %s", placeholder_id, exc)
                self.store.remove_node(placeholder_id)
                raise PlaceholderCreationError(
                    error_code="PLACEHOLDER_INIT_FAILED",
                    message=f"Could not initialise placeholder node '{placeholder_id}'",
                    details={"error": str(exc)},
                ) from exc

        self._created.append(placeholder_id)
        logger.info("[%s] Placeholder parent node created", placeholder_id)
        return node


__all__ = ["PlaceholderRegistry"]
