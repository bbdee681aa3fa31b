"""Custom exception hierarchy for the compound node service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import status


class ApplicationError(Exception):
    """Base application error with HTTP semantics."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "application_error"

    def __init__(self, message: str, *, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.message = message


class NotFoundError(ApplicationError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ValidationError(ApplicationError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"


@dataclass
class CompoundNodesError(Exception):
    """Base class for build errors with structured payloads."""

    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        base = f"[{self.error_code}] {self.message}"
        if self.details:
            return f"{base} :: {self.details}"
        return base


class BuildAbortedError(CompoundNodesError):
    """Fatal to a whole build; nothing in the graph was touched."""


class HostUnavailableError(BuildAbortedError):
    """Raised when the graph visualization host or its store is missing."""


class ReadinessTimeoutError(BuildAbortedError):
    """Raised when a graph view does not report readiness before the deadline."""


class NodeProcessingError(CompoundNodesError):
    """Recoverable failure scoped to a single node."""


class ParentResolutionError(NodeProcessingError):
    """Raised when the link resolver fails while resolving a parent reference."""


class PlaceholderCreationError(NodeProcessingError):
    """Raised when a placeholder parent node cannot be created."""


class AttachError(NodeProcessingError):
    """Raised when the store refuses to reparent a node."""
