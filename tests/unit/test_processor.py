import pytest

from compound_nodes.core.exceptions import HostUnavailableError
from compound_nodes.graph.processor import GraphProcessor
from compound_nodes.graph.resolver import NO_REFERENCE
from compound_nodes.graph.store import InMemoryGraphStore


class ExplodingMetadata:
    def __init__(self, inner, bad_path):
        self.inner = inner
        self.bad_path = bad_path

    def parent_field(self, path):
        if path == self.bad_path:
            raise RuntimeError("frontmatter unreadable")
        return self.inner.parent_field(path)

    def resolve_link(self, link_text, source_path):
        return self.inner.resolve_link(link_text, source_path)


def _run(store, metadata):
    return GraphProcessor(store, metadata).run()


def test_nodes_without_parents_stay_roots(graph_factory):
    store, metadata = graph_factory({"A": None, "B": None, "C": None})

    report = _run(store, metadata)

    assert all(node.parent is None and node.depth == 0 for node in store.nodes())
    assert report.placeholders == []
    assert report.attached == {}
    assert sorted(report.skipped) == ["A", "B", "C"]


def test_resolved_parent_nests_child_and_tags_edge(graph_factory):
    store, metadata = graph_factory({"A": None, "B": "[[A]]"}, edges=[("B", "A")])

    report = _run(store, metadata)

    a, b = store.get_node("A"), store.get_node("B")
    assert b.parent == "A"
    assert (a.depth, b.depth) == (0, 1)
    assert a.has_class("parent-node")
    assert store.get_edge("B->A").has_class("structural-parent-edge")
    assert report.tagged_edges == 1


def test_unresolved_parent_creates_placeholder(graph_factory):
    store, metadata = graph_factory({"C": "[[Missing]]"})

    report = _run(store, metadata)

    missing = store.get_node("Missing")
    assert missing is not None
    assert missing.label == "Missing"
    assert missing.is_placeholder
    assert missing.has_class("placeholder-node")
    assert missing.has_class("parent-node")
    assert store.get_node("C").parent == "Missing"
    assert (missing.depth, store.get_node("C").depth) == (0, 1)
    assert report.placeholders == ["Missing"]


def test_self_reference_is_rejected(graph_factory):
    store, metadata = graph_factory({"D": "[[D]]"})

    report = _run(store, metadata)

    d = store.get_node("D")
    assert d.parent is None
    assert d.depth == 0
    assert report.rejected == {"D": "self_parent"}
    assert not d.has_class("parent-node")


def test_unresolved_self_reference_creates_no_placeholder(metadata_factory):
    store = InMemoryGraphStore()
    store.add_node("Lonely", {"path": "Lonely.md"})
    metadata = metadata_factory(parents={"Lonely.md": "[[Lonely]]"})

    report = _run(store, metadata)

    assert report.rejected == {"Lonely": "self_parent"}
    assert len(store) == 1


def test_shared_missing_parent_gets_one_placeholder(graph_factory):
    store, metadata = graph_factory({"E": "[[Missing2]]", "F": "[[Missing2]]"})

    report = _run(store, metadata)

    assert report.placeholders == ["Missing2"]
    assert [node.id for node in store.nodes() if node.is_placeholder] == ["Missing2"]
    assert {child.id for child in store.children("Missing2")} == {"E", "F"}
    assert store.get_node("E").depth == store.get_node("F").depth == 1


def test_two_node_cycle_terminates_with_defined_depths(graph_factory):
    store, metadata = graph_factory({"A": "[[B]]", "B": "[[A]]"})

    report = _run(store, metadata)

    assert store.get_node("A").parent == "B"
    assert store.get_node("B").parent is None
    assert report.rejected == {"B": "cycle"}
    assert (store.get_node("A").depth, store.get_node("B").depth) == (1, 0)
    assert not report.depth.has_cycles


def test_deep_chain_depths(graph_factory):
    store, metadata = graph_factory({"root": None, "a": "[[root]]", "b": "[[a]]", "c": "[[b]]"})

    _run(store, metadata)

    assert [store.get_node(n).depth for n in ("root", "a", "b", "c")] == [0, 1, 2, 3]
    assert store.get_node("c").has_class("parent-node") is False
    assert store.get_node("b").has_class("parent-node")


def test_non_markdown_and_pathless_nodes_are_skipped(metadata_factory):
    store = InMemoryGraphStore()
    store.add_node("img", {"path": "diagram.png"})
    store.add_node("tag")
    store.add_node("A", {"path": "A.md"})
    metadata = metadata_factory(parents={"diagram.png": "[[A]]"}, links={"A": "A"})

    report = _run(store, metadata)

    assert store.get_node("img").parent is None
    assert set(report.skipped) == {"img", "tag", "A"}


def test_resolved_parent_missing_from_graph_is_skipped(metadata_factory):
    store = InMemoryGraphStore()
    store.add_node("B", {"path": "B.md"})
    metadata = metadata_factory(parents={"B.md": "[[A]]"}, links={"A": "A"})

    report = _run(store, metadata)

    assert store.get_node("B").parent is None
    assert store.get_node("A") is None
    assert report.rejected == {"B": "missing_parent"}


def test_failure_on_one_node_does_not_stop_the_others(graph_factory):
    store, metadata = graph_factory({"A": None, "B": "[[A]]", "C": "[[A]]"})

    report = _run(store, ExplodingMetadata(metadata, "B.md"))

    assert "B" in report.failed
    assert store.get_node("B").parent is None
    assert store.get_node("C").parent == "A"
    assert report.depth is not None


def test_invalid_elements_are_skipped(graph_factory):
    class MixedStore(InMemoryGraphStore):
        def nodes(self):
            return [object()] + super().nodes()

    store = MixedStore()
    store.add_node("A", {"path": "A.md"})
    store.add_node("B", {"path": "B.md"})
    _, metadata = graph_factory({"A": None, "B": "[[A]]"})

    report = _run(store, metadata)

    assert report.attached == {"B": "A"}
    assert store.get_node("B").depth == 1


def test_unknown_reference_kind_fails_only_that_node(graph_factory):
    store, metadata = graph_factory({"A": None, "B": "[[A]]"})
    processor = GraphProcessor(store, metadata)

    class OddResolver:
        def resolve(self, value, source_path):
            return object() if source_path == "B.md" else NO_REFERENCE

    processor.resolver = OddResolver()
    report = processor.run()

    assert "UNKNOWN_PARENT_REFERENCE" in report.failed["B"]
    assert report.skipped == ["A"]
    assert store.get_node("B").parent is None


def test_missing_store_aborts_before_processing(graph_factory):
    _, metadata = graph_factory({"A": None})

    with pytest.raises(HostUnavailableError):
        GraphProcessor(None, metadata)

    with pytest.raises(HostUnavailableError):
        GraphProcessor(object(), metadata)


def test_processor_is_single_use(graph_factory):
    store, metadata = graph_factory({"A": None})
    processor = GraphProcessor(store, metadata)
    processor.run()

    with pytest.raises(RuntimeError):
        processor.run()


def test_build_is_idempotent(graph_factory, snapshot):
    store, metadata = graph_factory(
        {"A": None, "B": "[[A]]", "C": "[[Missing]]", "D": "[[D]]", "E": "[[B]]"},
        edges=[("B", "A"), ("E", "B"), ("A", "E")],
    )

    _run(store, metadata)
    first = snapshot(store)
    _run(store, metadata)

    assert snapshot(store) == first


def test_rebuild_follows_changed_declarations(graph_factory):
    store, metadata = graph_factory({"A": None, "B": "[[A]]", "C": None}, edges=[("B", "A")])
    _run(store, metadata)

    metadata.parents["B.md"] = "[[C]]"
    _run(store, metadata)

    assert store.get_node("B").parent == "C"
    assert store.get_node("B").depth == 1
    assert not store.get_node("A").has_class("parent-node")
    assert store.get_node("C").has_class("parent-node")
    assert not store.get_edge("B->A").has_class("structural-parent-edge")


def test_forest_and_tagging_properties_hold(graph_factory):
    store, metadata = graph_factory(
        {
            "A": "[[B]]",
            "B": "[[C]]",
            "C": "[[A]]",
            "D": "[[X]]",
            "E": "[[D]]",
            "F": "[[F]]",
            "G": None,
        },
        edges=[("A", "B"), ("B", "C"), ("C", "A"), ("E", "D"), ("D", "E"), ("G", "A")],
    )

    _run(store, metadata)

    for node in store.nodes():
        seen = set()
        current = node
        while current.parent is not None:
            assert current.id not in seen
            seen.add(current.id)
            current = store.get_node(current.parent)
        if node.parent is None:
            assert node.depth == 0
        else:
            assert node.depth == store.get_node(node.parent).depth + 1

    relations = {(node.id, node.parent) for node in store.nodes() if node.parent is not None}
    for edge in store.edges():
        assert edge.has_class("structural-parent-edge") == ((edge.source, edge.target) in relations)
