from .manager import CompoundNodeManager
from .notices import CollectingNotifier, LoggingNotifier, Notifier
from .readiness import ReadinessWaiter
from .views import GraphHost, GraphView, StaticGraphHost, StaticGraphView

__all__ = [
    "CollectingNotifier",
    "CompoundNodeManager",
    "GraphHost",
    "GraphView",
    "LoggingNotifier",
    "Notifier",
    "ReadinessWaiter",
    "StaticGraphHost",
    "StaticGraphView",
]
