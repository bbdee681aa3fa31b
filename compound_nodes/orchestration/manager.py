"""Lifecycle management of compound node builds across graph views."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from compound_nodes.core.config import Settings, settings
from compound_nodes.core.exceptions import BuildAbortedError, HostUnavailableError
from compound_nodes.graph.processor import BuildReport, GraphProcessor, MetadataProvider
from compound_nodes.orchestration.notices import LoggingNotifier, Notifier
from compound_nodes.orchestration.readiness import ReadinessWaiter
from compound_nodes.orchestration.views import GraphHost, GraphView
from compound_nodes.utils.monitoring import observe_build

logger = logging.getLogger(__name__)

GENERIC_FAILURE_NOTICE = "Error initializing compound nodes."


class CompoundNodeManager:
    """Run one build per graph view at a time and react to note changes."""

    def __init__(
        self,
        metadata: MetadataProvider,
        *,
        notifier: Optional[Notifier] = None,
        waiter: Optional[ReadinessWaiter] = None,
        config: Settings = settings,
    ) -> None:
        self.metadata = metadata
        self.notifier = notifier or LoggingNotifier()
        self.waiter = waiter or ReadinessWaiter(config=config)
        self.config = config
        self.host: Optional[GraphHost] = None
        self.reports: Dict[str, BuildReport] = {}
        self._views: Dict[str, GraphView] = {}
        self._view_locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._lock_guard = asyncio.Lock()

    def bind_host(self, host: Optional[GraphHost]) -> None:
        if host is None:
            logger.error("Graph visualization host could not be loaded or found.")
            self.notifier.notify("Graph host not found. Compound nodes require a graph visualization host.")
            raise HostUnavailableError(
                error_code="GRAPH_HOST_UNAVAILABLE",
                message="Graph visualization host is not available.",
            )
        self.host = host
        for view in host.active_views():
            self.register(view)
        logger.info("Graph host bound with %d active view(s)", len(self._views))

    def register(self, view: GraphView) -> None:
        self._views[view.view_id] = view

    def unregister(self, view_id: str) -> None:
        self._views.pop(view_id, None)
        self.reports.pop(view_id, None)

    def views(self) -> List[GraphView]:
        return list(self._views.values())

    async def handle_graph_created(self, view: GraphView) -> Optional[BuildReport]:
        self.register(view)
        return await self.build(view)

    def handle_graph_destroyed(self, view: GraphView) -> None:
        self.unregister(view.view_id)

    async def build(self, view: GraphView) -> Optional[BuildReport]:
        """Build compound nodes for `view`; returns None when the build failed.

        The report is kept in `reports` only while the view is registered.
        """

        lock = await self._acquire_lock(view.view_id)
        try:
            async with lock:
                report = await self._guarded_build(view)
        finally:
            await self._release_lock(view.view_id, lock)

        if report is None:
            return None
        if self._views.get(view.view_id) is view:
            self.reports[view.view_id] = report
        else:
            logger.debug("[%s] View no longer registered; discarding report", view.view_id)
        observe_build("completed", report.duration_seconds)
        return report

    async def _guarded_build(self, view: GraphView) -> Optional[BuildReport]:
        logger.debug("[%s] Build started", view.view_id)
        try:
            return await self._build_locked(view)
        except BuildAbortedError as exc:
            logger.error("[%s] Build aborted: %s", view.view_id, exc)
            self.notifier.notify(exc.message)
            observe_build("aborted", 0.0)
        except Exception as exc:
            logger.exception("[%s] Uncaught error while building compound nodes: %s", view.view_id, exc)
            self.notifier.notify(GENERIC_FAILURE_NOTICE)
            observe_build("failed", 0.0)
        finally:
            logger.debug("[%s] Build finished", view.view_id)
        return None

    async def _build_locked(self, view: GraphView) -> BuildReport:
        if view.store is None:
            raise HostUnavailableError(
                error_code="GRAPH_STORE_UNAVAILABLE",
                message="Graph store is not available; cannot build compound nodes.",
                details={"view_id": view.view_id},
            )
        await self.waiter.wait(view.is_ready, name=f"view {view.view_id}")
        report = GraphProcessor(view.store, self.metadata, self.config).run()
        view.restart_layout()
        return report

    async def handle_file_change(self, path: str) -> None:
        """Refresh metadata for `path` and rebuild every ready view."""

        relative_path = getattr(self.metadata, "relative_path", None)
        if callable(relative_path):
            path = relative_path(path)
        refresh = getattr(self.metadata, "refresh", None)
        if callable(refresh):
            refresh(path)

        for view in self.views():
            if not view.is_ready():
                logger.debug("[%s] Not ready; ignoring change to %s", view.view_id, path)
                continue
            if self.config.REBUILD_ON_CHANGE:
                logger.info("[%s] Rebuilding compound nodes after change to %s", view.view_id, path)
                await self.build(view)
            if view.store is None:
                continue
            for node in view.store.nodes():
                if node.path == path:
                    view.refresh_node(node.id)

    async def _acquire_lock(self, view_id: str) -> asyncio.Lock:
        async with self._lock_guard:
            lock = self._view_locks.get(view_id)
            if lock is None:
                lock = asyncio.Lock()
                self._view_locks[view_id] = lock
            self._lock_users[view_id] = self._lock_users.get(view_id, 0) + 1
            return lock

    async def _release_lock(self, view_id: str, lock: asyncio.Lock) -> None:
        # Waiters still share the lock; prune after the last user.
        async with self._lock_guard:
            users = self._lock_users.get(view_id, 0) - 1
            if users > 0:
                self._lock_users[view_id] = users
                return
            self._lock_users.pop(view_id, None)
            if self._view_locks.get(view_id) is lock:
                self._view_locks.pop(view_id, None)


__all__ = ["CompoundNodeManager", "GENERIC_FAILURE_NOTICE"]
