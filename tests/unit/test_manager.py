import asyncio

import pytest

from compound_nodes.core.exceptions import HostUnavailableError
from compound_nodes.orchestration.manager import GENERIC_FAILURE_NOTICE, CompoundNodeManager
from compound_nodes.orchestration.notices import CollectingNotifier
from compound_nodes.orchestration.readiness import ReadinessWaiter
from compound_nodes.orchestration.views import StaticGraphHost, StaticGraphView
from compound_nodes.vault.index import VaultIndex
from compound_nodes.vault.loader import load_vault_graph


class InstantClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.now += seconds
        await asyncio.sleep(0)


class CrashingLayoutView(StaticGraphView):
    def restart_layout(self):
        raise RuntimeError("layout engine crashed")


class BrokenMetadata:
    def parent_field(self, path):
        return "[[A]]"

    def resolve_link(self, link_text, source_path):
        return "A"


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def manager_factory(notifier):
    def factory(metadata, timeout=1.0):
        clock = InstantClock()
        waiter = ReadinessWaiter(timeout=timeout, interval=0.1, clock=clock, sleep=clock.sleep)
        return CompoundNodeManager(metadata, notifier=notifier, waiter=waiter)

    return factory


@pytest.mark.asyncio
async def test_build_nests_nodes_and_restarts_layout(graph_factory, manager_factory, notifier):
    store, metadata = graph_factory({"A": None, "B": "[[A]]"})
    view = StaticGraphView("main", store)
    manager = manager_factory(metadata)

    report = await manager.handle_graph_created(view)

    assert report is not None
    assert store.get_node("B").parent == "A"
    assert view.layout_runs == 1
    assert manager.reports["main"] is report
    assert notifier.messages == []


@pytest.mark.asyncio
async def test_readiness_timeout_notifies_and_leaves_graph_untouched(graph_factory, manager_factory, notifier):
    store, metadata = graph_factory({"A": None, "B": "[[A]]"})
    view = StaticGraphView("main", store, ready=False)
    manager = manager_factory(metadata)

    report = await manager.build(view)

    assert report is None
    assert store.get_node("B").parent is None
    assert view.layout_runs == 0
    assert len(notifier.messages) == 1
    assert "Timed out" in notifier.messages[0]


@pytest.mark.asyncio
async def test_missing_store_notifies(graph_factory, manager_factory, notifier):
    _, metadata = graph_factory({"A": None})
    view = StaticGraphView("main")
    view.store = None
    manager = manager_factory(metadata)

    assert await manager.build(view) is None
    assert notifier.messages == ["Graph store is not available; cannot build compound nodes."]


@pytest.mark.asyncio
async def test_unexpected_failure_issues_generic_notice(manager_factory, notifier):
    view = CrashingLayoutView("main")
    manager = manager_factory(BrokenMetadata())

    assert await manager.build(view) is None
    assert notifier.messages == [GENERIC_FAILURE_NOTICE]


def test_bind_missing_host_raises_and_notifies(graph_factory, notifier):
    _, metadata = graph_factory({})
    manager = CompoundNodeManager(metadata, notifier=notifier)

    with pytest.raises(HostUnavailableError):
        manager.bind_host(None)

    assert len(notifier.messages) == 1


def test_bind_host_registers_active_views(graph_factory):
    _, metadata = graph_factory({})
    manager = CompoundNodeManager(metadata)
    views = [StaticGraphView("one"), StaticGraphView("two")]

    manager.bind_host(StaticGraphHost(views))

    assert [view.view_id for view in manager.views()] == ["one", "two"]


@pytest.mark.asyncio
async def test_concurrent_builds_of_one_view_are_serialized(graph_factory, manager_factory, monkeypatch):
    store, metadata = graph_factory({"A": None, "B": "[[A]]", "C": "[[Missing]]"})
    view = StaticGraphView("main", store)
    manager = manager_factory(metadata)

    active = 0
    overlaps = []
    original = manager._build_locked

    async def tracked(target):
        nonlocal active
        active += 1
        overlaps.append(active)
        await asyncio.sleep(0)
        try:
            return await original(target)
        finally:
            active -= 1

    monkeypatch.setattr(manager, "_build_locked", tracked)

    reports = await asyncio.gather(*(manager.build(view) for _ in range(3)))

    assert all(report is not None for report in reports)
    assert max(overlaps) == 1
    assert [node.id for node in store.nodes() if node.is_placeholder] == ["Missing"]
    assert view.layout_runs == 3
    assert manager._view_locks == {}


@pytest.mark.asyncio
async def test_file_change_rebuilds_and_refreshes_matching_nodes(graph_factory, manager_factory):
    store, metadata = graph_factory({"A": None, "B": None, "C": None})
    view = StaticGraphView("main", store)
    idle = StaticGraphView("idle", ready=False)
    manager = manager_factory(metadata)
    manager.register(view)
    manager.register(idle)
    await manager.build(view)

    metadata.parents["B.md"] = "[[A]]"
    await manager.handle_file_change("B.md")

    assert metadata.refreshed == ["B.md"]
    assert store.get_node("B").parent == "A"
    assert view.refreshed == ["B"]
    assert idle.refreshed == []
    assert view.layout_runs == 2


@pytest.mark.asyncio
async def test_destroyed_view_is_forgotten(graph_factory, manager_factory):
    store, metadata = graph_factory({"A": None})
    view = StaticGraphView("main", store)
    manager = manager_factory(metadata)
    await manager.handle_graph_created(view)

    manager.handle_graph_destroyed(view)

    assert manager.views() == []
    assert "main" not in manager.reports


@pytest.mark.asyncio
async def test_view_destroyed_mid_build_keeps_no_report_or_lock(graph_factory, manager_factory):
    store, metadata = graph_factory({"A": None, "B": "[[A]]"})
    view = StaticGraphView("main", store, ready=False)
    manager = manager_factory(metadata, timeout=100.0)
    manager.register(view)

    task = asyncio.create_task(manager.build(view))
    await asyncio.sleep(0)
    manager.handle_graph_destroyed(view)
    view.ready = True
    report = await task

    assert report is not None
    assert store.get_node("B").parent == "A"
    assert manager.reports == {}
    assert manager._view_locks == {}
    assert manager._lock_users == {}


@pytest.mark.asyncio
async def test_file_change_with_absolute_path_refreshes_vault_note(tmp_path, manager_factory):
    (tmp_path / "A.md").write_text("# A\n", encoding="utf-8")
    (tmp_path / "B.md").write_text("# B\n", encoding="utf-8")
    index = VaultIndex.from_directory(tmp_path)
    store = load_vault_graph(index)
    view = StaticGraphView("main", store)
    manager = manager_factory(index)
    await manager.handle_graph_created(view)

    (tmp_path / "B.md").write_text('---\nparent: "[[A]]"\n---\n', encoding="utf-8")
    await manager.handle_file_change(str(tmp_path / "B.md"))

    assert store.get_node("B").parent == "A"
    assert view.refreshed == ["B"]
