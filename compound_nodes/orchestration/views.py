"""Hosted graph views the manager drives."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from compound_nodes.graph.store import GraphStore, InMemoryGraphStore

logger = logging.getLogger(__name__)


class GraphView(Protocol):
    """One visualization instance of a graph."""

    view_id: str
    store: Optional[GraphStore]

    def is_ready(self) -> bool:
        ...

    def restart_layout(self) -> None:
        ...

    def refresh_node(self, node_id: str) -> None:
        ...


class GraphHost(Protocol):
    """The visualization host that owns views."""

    def active_views(self) -> List[GraphView]:
        ...


class StaticGraphView:
    """A view over an in-memory store, used by the CLI, the API and tests."""

    def __init__(self, view_id: str, store: Optional[InMemoryGraphStore] = None, *, ready: bool = True) -> None:
        self.view_id = view_id
        self.store = store if store is not None else InMemoryGraphStore()
        self.ready = ready
        self.layout_runs = 0
        self.refreshed: List[str] = []

    def is_ready(self) -> bool:
        return self.ready

    def restart_layout(self) -> None:
        self.layout_runs += 1
        logger.debug("[%s] Layout restarted", self.view_id)

    def refresh_node(self, node_id: str) -> None:
        self.refreshed.append(node_id)


class StaticGraphHost:
    def __init__(self, views: Optional[List[GraphView]] = None) -> None:
        self.views: List[GraphView] = list(views or [])

    def active_views(self) -> List[GraphView]:
        return list(self.views)


__all__ = ["GraphHost", "GraphView", "StaticGraphHost", "StaticGraphView"]
