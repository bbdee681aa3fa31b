"""Monitoring utilities leveraging Prometheus client."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

builds_total = Counter(
    "compound_nodes_builds_total",
    "Total compound hierarchy builds",
    ["status"],
)

node_outcomes_total = Counter(
    "compound_nodes_node_outcomes_total",
    "Per-node processing outcomes",
    ["outcome"],
)

placeholders_created_total = Counter(
    "compound_nodes_placeholders_created_total",
    "Placeholder parent nodes created for unresolved references",
)

build_duration_seconds = Histogram(
    "compound_nodes_build_duration_seconds",
    "Duration of a compound hierarchy build",
)


def observe_build(status: str, duration_seconds: float) -> None:
    builds_total.labels(status=status).inc()
    if status == "completed":
        build_duration_seconds.observe(duration_seconds)


def observe_node(outcome: str) -> None:
    node_outcomes_total.labels(outcome=outcome).inc()


def observe_placeholders(count: int) -> None:
    if count:
        placeholders_created_total.inc(count)
