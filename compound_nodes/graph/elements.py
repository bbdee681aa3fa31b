"""Graph elements handed to the core by the host store.

- GraphNode: a note (or placeholder) with data attributes and classes
- GraphEdge: a link between two nodes
- ensure_node / ensure_edge: boundary validation of host elements
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set

DEPTH_UNCALCULATED = -1


@dataclass
class GraphNode:
    """A node in the live graph.

    Attributes:
        id: Unique identity of the node within its graph.
        data: Host-owned attributes (path, label, parent, depth, ...).
        classes: Style classes attached to the node.
    """

    id: str
    data: Dict[str, Any] = field(default_factory=dict)
    classes: Set[str] = field(default_factory=set)

    @property
    def path(self) -> Optional[str]:
        return self.data.get("path")

    @property
    def label(self) -> str:
        return self.data.get("label") or self.id

    @property
    def parent(self) -> Optional[str]:
        """Identity of the structural parent, if any."""
        return self.data.get("parent")

    @property
    def depth(self) -> int:
        return self.data.get("depth", DEPTH_UNCALCULATED)

    @property
    def is_placeholder(self) -> bool:
        return bool(self.data.get("is_placeholder", False))

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def has_class(self, name: str) -> bool:
        return name in self.classes


@dataclass
class GraphEdge:
    """A directed link between two nodes."""

    id: str
    source: str
    target: str
    data: Dict[str, Any] = field(default_factory=dict)
    classes: Set[str] = field(default_factory=set)

    def has_class(self, name: str) -> bool:
        return name in self.classes


class InvalidElementError(TypeError):
    """Raised when the host hands the core something that is not a graph element."""


def ensure_node(element: object) -> GraphNode:
    if not isinstance(element, GraphNode):
        raise InvalidElementError(f"Expected GraphNode, got {type(element).__name__}")
    if not isinstance(element.id, str) or not element.id:
        raise InvalidElementError(f"Node identity must be a non-empty string, got {element.id!r}")
    return element


def ensure_edge(element: object) -> GraphEdge:
    if not isinstance(element, GraphEdge):
        raise InvalidElementError(f"Expected GraphEdge, got {type(element).__name__}")
    return element
