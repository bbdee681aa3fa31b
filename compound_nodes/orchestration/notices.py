"""User-visible notices."""

from __future__ import annotations

import logging
from typing import List, Protocol

logger = logging.getLogger("compound_nodes.notices")


class Notifier(Protocol):
    def notify(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Send notices to the `compound_nodes.notices` logger."""

    def notify(self, message: str) -> None:
        logger.warning(message)


class CollectingNotifier:
    """Keep notices in memory, for hosts that render them later."""

    def __init__(self) -> None:
        self.messages: List[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)


__all__ = ["CollectingNotifier", "LoggingNotifier", "Notifier"]
