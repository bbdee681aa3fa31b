"""Command line entry point: build compound nesting for a vault and print it."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, TextIO

from compound_nodes.core.config import settings
from compound_nodes.core.exceptions import ApplicationError
from compound_nodes.core.observability import setup_logging, setup_tracing
from compound_nodes.graph.elements import GraphNode
from compound_nodes.graph.processor import BuildReport
from compound_nodes.graph.store import InMemoryGraphStore
from compound_nodes.orchestration.manager import CompoundNodeManager
from compound_nodes.orchestration.views import StaticGraphView
from compound_nodes.vault.index import VaultIndex
from compound_nodes.vault.loader import load_vault_graph

logger = logging.getLogger(__name__)


async def build_vault(vault: Path) -> tuple[InMemoryGraphStore, Optional[BuildReport]]:
    index = VaultIndex.from_directory(vault, settings)
    store = load_vault_graph(index)
    manager = CompoundNodeManager(index)
    report = await manager.handle_graph_created(StaticGraphView("cli", store))
    return store, report


def render_tree(store: InMemoryGraphStore, out: TextIO) -> None:
    children: Dict[Optional[str], List[GraphNode]] = {}
    for node in store.nodes():
        children.setdefault(node.parent, []).append(node)

    def emit(node: GraphNode) -> None:
        marker = " (placeholder)" if node.is_placeholder else ""
        out.write(f"{'  ' * node.depth}- {node.label}{marker}\n")
        for child in sorted(children.get(node.id, []), key=lambda n: n.label.casefold()):
            emit(child)

    for root in sorted(children.get(None, []), key=lambda n: n.label.casefold()):
        emit(root)


def render_json(store: InMemoryGraphStore, report: BuildReport, out: TextIO) -> None:
    payload = {
        "nodes": [
            {
                "id": node.id,
                "label": node.label,
                "parent": node.parent,
                "depth": node.depth,
                "classes": sorted(node.classes),
                "is_placeholder": node.is_placeholder,
            }
            for node in store.nodes()
        ],
        "edges": [
            {"id": edge.id, "source": edge.source, "target": edge.target, "classes": sorted(edge.classes)}
            for edge in store.edges()
        ],
        "summary": report.summary(),
    }
    json.dump(payload, out, indent=2)
    out.write("\n")


def run_server(host: str = "0.0.0.0", port: int = 8080) -> None:
    import uvicorn

    from compound_nodes.api.main import app

    uvicorn.run(app, host=host, port=port)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Nest notes inside the parent declared in their frontmatter")
    parser.add_argument("vault", nargs="?", type=Path, default=settings.VAULT_PATH, help="Vault directory")
    parser.add_argument("--json", action="store_true", help="Print nodes, edges and build summary as JSON")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP API instead of building a vault")
    parser.add_argument("--port", type=int, default=8080, help="Port for --serve")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args(argv)

    if args.serve:
        run_server(port=args.port)
        return 0

    if args.vault is None:
        parser.error("a vault directory is required (argument or VAULT_PATH)")

    setup_logging(args.log_level)
    setup_tracing()

    try:
        store, report = asyncio.run(build_vault(args.vault))
    except ApplicationError as exc:
        logger.error("%s", exc.message)
        return 2
    if report is None:
        return 1

    if args.json:
        render_json(store, report, sys.stdout)
    else:
        render_tree(store, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
