from typing import Any, Dict, Iterable, Optional, Tuple

import pytest

from compound_nodes.graph.store import InMemoryGraphStore


class StubMetadata:
    """Parent declarations keyed by note path, links resolved by exact text."""

    def __init__(self, parents: Optional[Dict[str, Any]] = None, links: Optional[Dict[str, str]] = None) -> None:
        self.parents = parents or {}
        self.links = links or {}
        self.refreshed = []

    def parent_field(self, path):
        return self.parents.get(path)

    def resolve_link(self, link_text, source_path):
        return self.links.get(link_text)

    def refresh(self, path):
        self.refreshed.append(path)


def build_graph(
    parents: Dict[str, Optional[str]],
    edges: Iterable[Tuple[str, str]] = (),
) -> Tuple[InMemoryGraphStore, StubMetadata]:
    """Store with one note per key; every existing note is linkable by its id."""

    store = InMemoryGraphStore()
    metadata = StubMetadata()
    for node_id, parent in parents.items():
        path = f"{node_id}.md"
        store.add_node(node_id, {"path": path, "label": node_id})
        metadata.parents[path] = parent
        metadata.links[node_id] = node_id
    for source, target in edges:
        store.add_edge(source, target)
    return store, metadata


@pytest.fixture
def graph_factory():
    return build_graph


def structure(store: InMemoryGraphStore):
    """Snapshot of everything a build derives, for idempotence checks."""

    return (
        {node.id: (node.parent, node.depth, frozenset(node.classes)) for node in store.nodes()},
        {edge.id: frozenset(edge.classes) for edge in store.edges()},
    )


@pytest.fixture
def snapshot():
    return structure


@pytest.fixture
def metadata_factory():
    return StubMetadata
