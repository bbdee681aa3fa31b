"""Structural parent assignment for compound nodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from compound_nodes.core.exceptions import AttachError
from compound_nodes.graph.elements import GraphNode
from compound_nodes.graph.store import GraphStore

logger = logging.getLogger(__name__)


class AttachOutcome(Enum):
    ATTACHED = "attached"
    SELF_PARENT = "self_parent"
    CYCLE = "cycle"
    MISSING_PARENT = "missing_parent"


@dataclass(frozen=True)
class AttachResult:
    node_id: str
    parent_id: str
    outcome: AttachOutcome

    @property
    def ok(self) -> bool:
        return self.outcome is AttachOutcome.ATTACHED


class CompoundTreeBuilder:
    """Move nodes under their structural parent while keeping the graph a forest."""

    def __init__(self, store: GraphStore) -> None:
        self.store = store

    def attach(self, node: GraphNode, target_parent_id: str) -> AttachResult:
        if node.id == target_parent_id:
            logger.warning("[%s] Refusing to move node into itself", node.id)
            return AttachResult(node.id, target_parent_id, AttachOutcome.SELF_PARENT)

        if self.store.get_node(target_parent_id) is None:
            logger.warning("[%s] Parent node %s is not in the graph", node.id, target_parent_id)
            return AttachResult(node.id, target_parent_id, AttachOutcome.MISSING_PARENT)

        if self.is_ancestor(node.id, target_parent_id):
            logger.warning(
                "[%s] Moving into %s would create a parent cycle; leaving node where it is",
                node.id,
                target_parent_id,
            )
            return AttachResult(node.id, target_parent_id, AttachOutcome.CYCLE)

        try:
            with self.store.batch():
                self.store.move(node.id, target_parent_id)
        except Exception as exc:
            raise AttachError(
                error_code="ATTACH_FAILED",
                message=f"Could not move '{node.id}' into '{target_parent_id}'",
                details={"error": str(exc)},
            ) from exc

        current = self.store.get_node(node.id)
        if current is None or current.parent != target_parent_id:
            logger.warning(
                "[%s] Post-move parent (%s) does not match target (%s)",
                node.id,
                current.parent if current else None,
                target_parent_id,
            )
        else:
            logger.debug("[%s] Moved into %s", node.id, target_parent_id)
        return AttachResult(node.id, target_parent_id, AttachOutcome.ATTACHED)

    def is_ancestor(self, candidate_id: str, node_id: str) -> bool:
        """True if `candidate_id` appears on the parent chain of `node_id`."""
        seen = set()
        current: Optional[GraphNode] = self.store.get_node(node_id)
        while current is not None and current.parent is not None:
            if current.parent == candidate_id:
                return True
            if current.parent in seen:
                return False
            seen.add(current.parent)
            current = self.store.get_node(current.parent)
        return False

    def reset(self, nodes: Iterable[GraphNode]) -> int:
        """Detach every node from its structural parent. Returns the count."""
        detached = 0
        with self.store.batch():
            for node in nodes:
                if node.parent is not None:
                    self.store.move(node.id, None)
                    detached += 1
        return detached


__all__ = ["AttachOutcome", "AttachResult", "CompoundTreeBuilder"]
