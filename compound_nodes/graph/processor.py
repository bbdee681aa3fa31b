"""Per-build orchestration of the compound hierarchy derivation."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from opentelemetry import trace

from compound_nodes.core.config import Settings, settings
from compound_nodes.core.exceptions import HostUnavailableError, NodeProcessingError
from compound_nodes.graph.depth import DepthCalculator, DepthReport
from compound_nodes.graph.edges import StructuralEdgeTagger
from compound_nodes.graph.elements import GraphEdge, GraphNode, InvalidElementError, ensure_edge, ensure_node
from compound_nodes.graph.placeholders import PlaceholderRegistry
from compound_nodes.graph.resolver import (
    LinkResolver,
    NoReference,
    ParentReferenceResolver,
    Resolved,
    Unresolved,
)
from compound_nodes.graph.store import GraphStore
from compound_nodes.graph.tree import AttachOutcome, CompoundTreeBuilder
from compound_nodes.utils.monitoring import observe_node, observe_placeholders

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class MetadataProvider(LinkResolver, Protocol):
    def parent_field(self, path: str) -> Any:
        """Raw value of the parent field declared by the note at `path`."""
        ...


@dataclass
class BuildReport:
    """What a single build did to the graph."""

    attached: Dict[str, str] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)
    rejected: Dict[str, str] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    placeholders: List[str] = field(default_factory=list)
    tagged_edges: int = 0
    depth: Optional[DepthReport] = None
    duration_seconds: float = 0.0

    def summary(self) -> Dict[str, Any]:
        return {
            "attached": len(self.attached),
            "skipped": len(self.skipped),
            "rejected": len(self.rejected),
            "failed": len(self.failed),
            "placeholders": list(self.placeholders),
            "tagged_edges": self.tagged_edges,
            "cycle_members": sorted(self.depth.cycle_members) if self.depth else [],
            "duration_seconds": round(self.duration_seconds, 6),
        }


class GraphProcessor:
    """Derive compound nesting for one graph. Construct, `run()` once, discard."""

    def __init__(self, store: Optional[GraphStore], metadata: MetadataProvider, config: Settings = settings) -> None:
        if store is None or not isinstance(store, GraphStore):
            raise HostUnavailableError(
                error_code="GRAPH_STORE_UNAVAILABLE",
                message="Graph store is not available; cannot build compound nodes.",
                details={"store": type(store).__name__},
            )
        self.store = store
        self.metadata = metadata
        self.config = config
        self.resolver = ParentReferenceResolver(metadata)
        self.placeholders = PlaceholderRegistry(store, config)
        self.tree = CompoundTreeBuilder(store)
        self.tagger = StructuralEdgeTagger(store, config)
        self.depths = DepthCalculator(store)
        self._ran = False

    def run(self) -> BuildReport:
        if self._ran:
            raise RuntimeError("GraphProcessor instances are single use")
        self._ran = True

        started = time.perf_counter()
        report = BuildReport()
        with tracer.start_as_current_span("compound_nodes.build") as span:
            nodes = self._valid_nodes()
            self._reset(nodes)
            span.set_attribute("graph.nodes", len(nodes))
            logger.info("Processing %d node(s) for parent relationships", len(nodes))

            for node in nodes:
                try:
                    self._process_node(node, report)
                except NodeProcessingError as exc:
                    logger.error("[%s] %s", node.id, exc)
                    report.failed[node.id] = str(exc)
                    observe_node("failed")
                except Exception as exc:
                    logger.exception("[%s] Unexpected error while processing node: %s", node.id, exc)
                    report.failed[node.id] = str(exc)
                    observe_node("failed")

            # Placeholders created above join the forest here.
            nodes = self._valid_nodes()
            report.depth = self.depths.compute(nodes)
            self._mark_parent_nodes(nodes)
            report.placeholders = self.placeholders.created
            observe_placeholders(len(report.placeholders))

            span.set_attribute("graph.attached", len(report.attached))
            span.set_attribute("graph.failed", len(report.failed))
            span.set_attribute("graph.cycles", len(report.depth.cycle_members))

        report.duration_seconds = time.perf_counter() - started
        logger.info(
            "Build finished: %d attached, %d rejected, %d failed, %d placeholder(s)",
            len(report.attached),
            len(report.rejected),
            len(report.failed),
            len(report.placeholders),
        )
        return report

    def _valid_nodes(self) -> List[GraphNode]:
        nodes: List[GraphNode] = []
        for element in self.store.nodes():
            try:
                nodes.append(ensure_node(element))
            except InvalidElementError as exc:
                logger.warning("Invalid node object encountered: %s", exc)
        return nodes

    def _valid_edges(self) -> List[GraphEdge]:
        edges: List[GraphEdge] = []
        for element in self.store.edges():
            try:
                edges.append(ensure_edge(element))
            except InvalidElementError as exc:
                logger.warning("Invalid edge object encountered: %s", exc)
        return edges

    def _reset(self, nodes: List[GraphNode]) -> None:
        """Clear structure derived by an earlier build of the same graph."""
        with self.store.batch():
            detached = self.tree.reset(nodes)
            self.tagger.clear(self._valid_edges())
            for node in nodes:
                self.store.remove_class(node, self.config.PARENT_NODE_CLASS)
        if detached:
            logger.debug("Detached %d node(s) from a previous build", detached)

    def _process_node(self, node: GraphNode, report: BuildReport) -> None:
        path = node.path
        if not path or not self.config.is_markdown(path):
            logger.debug("[%s] Skipping: not a markdown note", node.id)
            report.skipped.append(node.id)
            observe_node("skipped")
            return

        value = self.metadata.parent_field(path)
        reference = self.resolver.resolve(value, path)

        if isinstance(reference, NoReference):
            logger.debug("[%s] Skipping: no valid parent link (value=%r)", node.id, value)
            report.skipped.append(node.id)
            observe_node("skipped")
            return

        if isinstance(reference, Resolved):
            target_id = reference.target_id
            if self.store.get_node(target_id) is None:
                logger.warning("[%s] Parent %s resolved but is not in this graph; skipping", node.id, target_id)
                report.rejected[node.id] = AttachOutcome.MISSING_PARENT.value
                observe_node(AttachOutcome.MISSING_PARENT.value)
                return
        elif isinstance(reference, Unresolved):
            target_id = reference.text
            if target_id == node.id:
                report.rejected[node.id] = AttachOutcome.SELF_PARENT.value
                observe_node(AttachOutcome.SELF_PARENT.value)
                logger.warning("[%s] Refusing to move node into itself", node.id)
                return
            self.placeholders.ensure(target_id)
        else:
            raise NodeProcessingError(
                error_code="UNKNOWN_PARENT_REFERENCE",
                message=f"Unsupported parent reference {reference!r}",
                details={"path": path},
            )

        result = self.tree.attach(node, target_id)
        if not result.ok:
            report.rejected[node.id] = result.outcome.value
            observe_node(result.outcome.value)
            return

        report.attached[node.id] = target_id
        report.tagged_edges += self.tagger.tag(node.id, target_id)
        observe_node("attached")

    def _mark_parent_nodes(self, nodes: List[GraphNode]) -> None:
        with self.store.batch():
            for node in nodes:
                if node.parent is not None:
                    parent = self.store.get_node(node.parent)
                    if parent is not None:
                        self.store.add_class(parent, self.config.PARENT_NODE_CLASS)


__all__ = ["BuildReport", "GraphProcessor", "MetadataProvider"]
