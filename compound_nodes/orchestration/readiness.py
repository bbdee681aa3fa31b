"""Bounded waiting for a graph view to report readiness."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from opentelemetry import trace

from compound_nodes.core.config import Settings, settings
from compound_nodes.core.exceptions import ReadinessTimeoutError

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class ReadinessWaiter:
    """Poll a readiness probe until it passes or a deadline expires.

    The clock and sleep function are injectable so tests can drive the wait
    with a virtual clock instead of real time.
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
        config: Settings = settings,
    ) -> None:
        self.timeout = config.READINESS_TIMEOUT_SECONDS if timeout is None else timeout
        self.interval = config.READINESS_POLL_INTERVAL_SECONDS if interval is None else interval
        self.clock = clock
        self.sleep = sleep

    async def wait(self, probe: Callable[[], bool], *, name: str = "graph") -> float:
        """Return the seconds waited; raise `ReadinessTimeoutError` past the deadline."""

        started = self.clock()
        if probe():
            logger.debug("%s already ready", name)
            return 0.0

        deadline = started + self.timeout
        with tracer.start_as_current_span("compound_nodes.wait_ready") as span:
            span.set_attribute("readiness.timeout", self.timeout)
            while True:
                remaining = deadline - self.clock()
                if remaining <= 0:
                    logger.error("Timed out after %.1fs waiting for %s to become ready", self.timeout, name)
                    raise ReadinessTimeoutError(
                        error_code="READINESS_TIMEOUT",
                        message=f"Timed out waiting for {name} to become ready",
                        details={"timeout_seconds": self.timeout},
                    )
                await self.sleep(min(self.interval, remaining))
                if probe():
                    waited = self.clock() - started
                    span.set_attribute("readiness.waited", waited)
                    logger.debug("%s ready after %.2fs", name, waited)
                    return waited


__all__ = ["ReadinessWaiter"]
