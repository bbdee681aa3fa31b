"""
compound_nodes - nest notes inside the parent they declare.

A flat graph of notes and links is turned into a compound hierarchy: each
note that declares `parent: "[[Other]]"` in its frontmatter is moved inside
that note, unresolved parents get placeholder nodes, every node gets a
nesting depth and links duplicated by the nesting are tagged.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("compound-nodes")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

from compound_nodes.graph import BuildReport, GraphProcessor, InMemoryGraphStore
from compound_nodes.orchestration import CompoundNodeManager

__all__ = ["BuildReport", "CompoundNodeManager", "GraphProcessor", "InMemoryGraphStore", "__version__"]
