"""Compound hierarchy build endpoints."""

from __future__ import annotations

import logging
import uuid
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, status

from compound_nodes.api.schemas import (
    BuildSummary,
    EdgeOut,
    HierarchyRequest,
    HierarchyResponse,
    NodeOut,
    VaultHierarchyRequest,
)
from compound_nodes.core.config import settings
from compound_nodes.core.exceptions import ApplicationError, ValidationError
from compound_nodes.graph.processor import BuildReport, MetadataProvider
from compound_nodes.graph.store import InMemoryGraphStore
from compound_nodes.orchestration.manager import CompoundNodeManager
from compound_nodes.orchestration.notices import CollectingNotifier
from compound_nodes.orchestration.views import StaticGraphView
from compound_nodes.vault.index import VaultIndex, link_path
from compound_nodes.vault.loader import load_vault_graph

logger = logging.getLogger(__name__)

router = APIRouter(tags=["hierarchy"])


class PayloadMetadata:
    """Metadata provider over the nodes of a request body.

    Link text is matched against node ids first, then paths, path stems,
    labels and finally the request aliases. Within one tier the first node
    wins.
    """

    def __init__(self, payload: HierarchyRequest) -> None:
        self._parents: Dict[str, Any] = {}
        self._tiers: List[Dict[str, str]] = [{}, {}, {}, {}, {}]
        ids, paths, stems, labels, aliases = self._tiers
        for node in payload.nodes:
            self._parents[node.path] = node.parent
            ids.setdefault(node.id.casefold(), node.id)
            paths.setdefault(node.path.casefold(), node.id)
            stems.setdefault(PurePosixPath(node.path).stem.casefold(), node.id)
            if node.label:
                labels.setdefault(node.label.casefold(), node.id)
        for alias, node_id in payload.aliases.items():
            aliases.setdefault(alias.casefold(), node_id)

    def parent_field(self, path: str) -> Any:
        return self._parents.get(path)

    def resolve_link(self, link_text: str, source_path: str) -> Optional[str]:
        key = link_path(link_text).casefold()
        for tier in self._tiers:
            if key in tier:
                return tier[key]
        return None


def _store_from_payload(payload: HierarchyRequest) -> InMemoryGraphStore:
    store = InMemoryGraphStore()
    try:
        with store.batch():
            for node in payload.nodes:
                data = {"path": node.path}
                if node.label:
                    data["label"] = node.label
                store.add_node(node.id, data)
            for edge in payload.edges:
                store.add_edge(edge.source, edge.target, edge_id=edge.id)
    except (KeyError, ValueError) as exc:
        raise ValidationError(f"Invalid graph payload: {exc}") from exc
    return store


async def _build(store: InMemoryGraphStore, metadata: MetadataProvider) -> HierarchyResponse:
    notifier = CollectingNotifier()
    manager = CompoundNodeManager(metadata, notifier=notifier)
    view = StaticGraphView(f"api-{uuid.uuid4().hex[:8]}", store)
    report = await manager.handle_graph_created(view)
    manager.handle_graph_destroyed(view)
    if report is None:
        raise ApplicationError(
            "; ".join(notifier.messages) or "Compound node build failed",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code="build_failed",
        )
    return _serialize(store, report)


def _serialize(store: InMemoryGraphStore, report: BuildReport) -> HierarchyResponse:
    nodes: List[NodeOut] = [
        NodeOut(
            id=node.id,
            label=node.label,
            path=node.path,
            parent=node.parent,
            depth=node.depth,
            classes=sorted(node.classes),
            is_placeholder=node.is_placeholder,
        )
        for node in store.nodes()
    ]
    edges: List[EdgeOut] = [
        EdgeOut(id=edge.id, source=edge.source, target=edge.target, classes=sorted(edge.classes))
        for edge in store.edges()
    ]
    return HierarchyResponse(nodes=nodes, edges=edges, summary=BuildSummary(**report.summary()))


@router.post("/hierarchy", response_model=HierarchyResponse)
async def build_hierarchy(payload: HierarchyRequest) -> HierarchyResponse:
    """Derive compound nesting for a graph supplied in the request body."""

    store = _store_from_payload(payload)
    return await _build(store, PayloadMetadata(payload))


@router.post("/vault/hierarchy", response_model=HierarchyResponse)
async def build_vault_hierarchy(payload: VaultHierarchyRequest) -> HierarchyResponse:
    """Derive compound nesting for a directory of Markdown notes."""

    index = VaultIndex.from_directory(payload.path, settings)
    store = load_vault_graph(index)
    return await _build(store, index)
