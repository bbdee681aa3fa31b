"""Graph module - compound hierarchy derivation.

Exports:
- GraphNode / GraphEdge: live graph elements
- GraphStore / InMemoryGraphStore: host store contract and reference store
- ParentReferenceResolver, PlaceholderRegistry, CompoundTreeBuilder,
  StructuralEdgeTagger, DepthCalculator: the derivation steps
- GraphProcessor / BuildReport: one build over a whole graph
"""

from compound_nodes.graph.depth import DepthCalculator, DepthReport
from compound_nodes.graph.edges import StructuralEdgeTagger
from compound_nodes.graph.elements import DEPTH_UNCALCULATED, GraphEdge, GraphNode, InvalidElementError
from compound_nodes.graph.placeholders import PlaceholderRegistry
from compound_nodes.graph.processor import BuildReport, GraphProcessor, MetadataProvider
from compound_nodes.graph.resolver import NoReference, ParentReferenceResolver, Resolved, Unresolved
from compound_nodes.graph.store import GraphStore, InMemoryGraphStore, StoreEvent
from compound_nodes.graph.tree import AttachOutcome, AttachResult, CompoundTreeBuilder

__all__ = [
    "AttachOutcome",
    "AttachResult",
    "BuildReport",
    "CompoundTreeBuilder",
    "DEPTH_UNCALCULATED",
    "DepthCalculator",
    "DepthReport",
    "GraphEdge",
    "GraphNode",
    "GraphProcessor",
    "GraphStore",
    "InMemoryGraphStore",
    "InvalidElementError",
    "MetadataProvider",
    "NoReference",
    "ParentReferenceResolver",
    "PlaceholderRegistry",
    "Resolved",
    "StoreEvent",
    "StructuralEdgeTagger",
    "Unresolved",
]
