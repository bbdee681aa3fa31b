"""Nesting depth computation over the structural forest."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from compound_nodes.graph.elements import DEPTH_UNCALCULATED, GraphNode
from compound_nodes.graph.store import GraphStore

logger = logging.getLogger(__name__)


@dataclass
class DepthReport:
    """Outcome of a depth pass.

    Attributes:
        depths: Final depth per node identity.
        roots: Nodes with no structural parent in the graph.
        unreached: Nodes no root reaches; they fall back to depth 0.
        cycle_members: Nodes found on a structural parent cycle.
    """

    depths: Dict[str, int] = field(default_factory=dict)
    roots: List[str] = field(default_factory=list)
    unreached: List[str] = field(default_factory=list)
    cycle_members: Set[str] = field(default_factory=set)

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycle_members)


class DepthCalculator:
    """Assign `depth` to every node: 0 for roots, parent depth + 1 below."""

    def __init__(self, store: GraphStore) -> None:
        self.store = store

    def compute(self, nodes: Optional[List[GraphNode]] = None) -> DepthReport:
        if nodes is None:
            nodes = self.store.nodes()
        index = {node.id: node for node in nodes}
        children: Dict[str, List[str]] = {}
        report = DepthReport()

        for node in nodes:
            if node.parent is None or node.parent not in index:
                report.roots.append(node.id)
            else:
                children.setdefault(node.parent, []).append(node.id)

        depths: Dict[str, int] = {node.id: DEPTH_UNCALCULATED for node in nodes}

        for root_id in report.roots:
            stack: List[Tuple[str, int, FrozenSet[str]]] = [(root_id, 0, frozenset())]
            while stack:
                node_id, depth, path = stack.pop()
                if node_id in path:
                    report.cycle_members.add(node_id)
                    continue
                if depths[node_id] != DEPTH_UNCALCULATED:
                    continue
                depths[node_id] = depth
                below = path | {node_id}
                for child_id in reversed(children.get(node_id, [])):
                    stack.append((child_id, depth + 1, below))

        for node_id, depth in depths.items():
            if depth == DEPTH_UNCALCULATED:
                report.unreached.append(node_id)
                depths[node_id] = 0

        if report.unreached:
            report.cycle_members.update(self._find_cycles(report.unreached, index))
            logger.warning(
                "%d node(s) unreachable from any root; depth set to 0: %s",
                len(report.unreached),
                ", ".join(sorted(report.unreached)),
            )

        with self.store.batch():
            for node in nodes:
                self.store.set_data(node.id, "depth", DEPTH_UNCALCULATED)
            for node_id, depth in depths.items():
                self.store.set_data(node_id, "depth", depth)

        report.depths = depths
        return report

    @staticmethod
    def _find_cycles(candidates: List[str], index: Dict[str, GraphNode]) -> Set[str]:
        """Walk parent chains from unreached nodes and collect the loops they end in."""
        members: Set[str] = set()
        for start in candidates:
            order: List[str] = []
            position: Dict[str, int] = {}
            current = start
            while current in index and current not in position:
                position[current] = len(order)
                order.append(current)
                parent = index[current].parent
                if parent is None:
                    break
                current = parent
            else:
                if current in position:
                    members.update(order[position[current] :])
        return members


__all__ = ["DepthCalculator", "DepthReport"]
