"""Live graph store contract and the in-memory reference implementation."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, ContextManager, Dict, Iterator, List, Optional, Protocol, runtime_checkable

from compound_nodes.graph.elements import GraphEdge, GraphNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreEvent:
    """A single change applied to the store."""

    kind: str
    element_id: str


StoreListener = Callable[[List[StoreEvent]], None]


@runtime_checkable
class GraphStore(Protocol):
    """Capabilities the core needs from the host graph store."""

    def nodes(self) -> List[GraphNode]:
        ...

    def edges(self) -> List[GraphEdge]:
        ...

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        ...

    def find_edges(self, source: str, target: str) -> List[GraphEdge]:
        ...

    def children(self, node_id: str) -> List[GraphNode]:
        ...

    def batch(self) -> ContextManager[None]:
        ...

    def add_node(self, node_id: str, data: Optional[Dict[str, Any]] = None) -> GraphNode:
        ...

    def remove_node(self, node_id: str) -> None:
        ...

    def move(self, node_id: str, parent_id: Optional[str]) -> None:
        ...

    def set_data(self, node_id: str, key: str, value: Any) -> None:
        ...

    def add_class(self, element: GraphNode | GraphEdge, name: str) -> None:
        ...

    def remove_class(self, element: GraphNode | GraphEdge, name: str) -> None:
        ...


class InMemoryGraphStore:
    """Dictionary-backed graph store.

    Mutations made inside `batch()` are applied immediately but listeners are
    only notified once the outermost batch closes, so readers never observe a
    half-applied batch.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, GraphNode] = {}
        self._edges: Dict[str, GraphEdge] = {}
        self._listeners: List[StoreListener] = []
        self._pending: List[StoreEvent] = []
        self._batch_depth = 0

    # Queries

    def nodes(self) -> List[GraphNode]:
        return list(self._nodes.values())

    def edges(self) -> List[GraphEdge]:
        return list(self._edges.values())

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self._nodes.get(node_id)

    def get_edge(self, edge_id: str) -> Optional[GraphEdge]:
        return self._edges.get(edge_id)

    def find_edges(self, source: str, target: str) -> List[GraphEdge]:
        return [edge for edge in self._edges.values() if edge.source == source and edge.target == target]

    def children(self, node_id: str) -> List[GraphNode]:
        return [node for node in self._nodes.values() if node.parent == node_id]

    # Change notification

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @contextmanager
    def batch(self) -> Iterator[None]:
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._flush()

    def _emit(self, kind: str, element_id: str) -> None:
        self._pending.append(StoreEvent(kind=kind, element_id=element_id))
        if self._batch_depth == 0:
            self._flush()

    def _flush(self) -> None:
        if not self._pending:
            return
        events, self._pending = self._pending, []
        for listener in list(self._listeners):
            listener(events)

    # Mutations

    def add_node(self, node_id: str, data: Optional[Dict[str, Any]] = None) -> GraphNode:
        if node_id in self._nodes:
            raise ValueError(f"Node '{node_id}' already exists")
        payload = dict(data or {})
        parent = payload.get("parent")
        if parent is not None and parent not in self._nodes:
            raise KeyError(f"Parent '{parent}' does not exist")
        node = GraphNode(id=node_id, data=payload)
        self._nodes[node_id] = node
        self._emit("add_node", node_id)
        return node

    def remove_node(self, node_id: str) -> None:
        node = self._nodes.pop(node_id, None)
        if node is None:
            return
        for edge_id in [edge.id for edge in self._edges.values() if node_id in (edge.source, edge.target)]:
            del self._edges[edge_id]
            self._emit("remove_edge", edge_id)
        for child in self.children(node_id):
            child.data.pop("parent", None)
            self._emit("move", child.id)
        self._emit("remove_node", node_id)

    def add_edge(self, source: str, target: str, edge_id: Optional[str] = None, **data: Any) -> GraphEdge:
        for endpoint in (source, target):
            if endpoint not in self._nodes:
                raise KeyError(f"Edge endpoint '{endpoint}' does not exist")
        edge_id = edge_id or f"{source}->{target}"
        if edge_id in self._edges:
            raise ValueError(f"Edge '{edge_id}' already exists")
        edge = GraphEdge(id=edge_id, source=source, target=target, data=dict(data))
        self._edges[edge_id] = edge
        self._emit("add_edge", edge_id)
        return edge

    def move(self, node_id: str, parent_id: Optional[str]) -> None:
        node = self._require(node_id)
        if parent_id is None:
            node.data.pop("parent", None)
        else:
            self._require(parent_id)
            node.data["parent"] = parent_id
        self._emit("move", node_id)

    def set_data(self, node_id: str, key: str, value: Any) -> None:
        self._require(node_id).data[key] = value
        self._emit("data", node_id)

    def add_class(self, element: GraphNode | GraphEdge, name: str) -> None:
        if name not in element.classes:
            element.classes.add(name)
            self._emit("class", element.id)

    def remove_class(self, element: GraphNode | GraphEdge, name: str) -> None:
        if name in element.classes:
            element.classes.discard(name)
            self._emit("class", element.id)

    def _require(self, node_id: str) -> GraphNode:
        node = self._nodes.get(node_id)
        if node is None:
            raise KeyError(f"Node '{node_id}' does not exist")
        return node

    def __len__(self) -> int:
        return len(self._nodes)


__all__ = ["GraphStore", "InMemoryGraphStore", "StoreEvent", "StoreListener"]
