from .config import Settings, get_settings, settings
from .exceptions import (
    AttachError,
    BuildAbortedError,
    CompoundNodesError,
    HostUnavailableError,
    NodeProcessingError,
    ParentResolutionError,
    PlaceholderCreationError,
    ReadinessTimeoutError,
)

__all__ = [
    "AttachError",
    "BuildAbortedError",
    "CompoundNodesError",
    "HostUnavailableError",
    "NodeProcessingError",
    "ParentResolutionError",
    "PlaceholderCreationError",
    "ReadinessTimeoutError",
    "Settings",
    "get_settings",
    "settings",
]
