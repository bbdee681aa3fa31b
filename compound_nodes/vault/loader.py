"""Build an in-memory graph of notes and links from a vault index."""

from __future__ import annotations

import logging

from compound_nodes.graph.store import InMemoryGraphStore
from compound_nodes.vault.index import VaultIndex

logger = logging.getLogger(__name__)


def load_vault_graph(index: VaultIndex) -> InMemoryGraphStore:
    """One node per note, one edge per distinct resolved wikilink."""

    store = InMemoryGraphStore()
    with store.batch():
        for note in index.notes():
            store.add_node(note.node_id, {"path": note.path, "label": note.name})

        for note in index.notes():
            for link in note.links:
                target_id = index.resolve_link(link, note.path)
                if target_id is None or target_id == note.node_id:
                    continue
                if store.find_edges(note.node_id, target_id):
                    continue
                store.add_edge(note.node_id, target_id)

    logger.info("Loaded vault graph with %d node(s) and %d edge(s)", len(store), len(store.edges()))
    return store


__all__ = ["load_vault_graph"]
