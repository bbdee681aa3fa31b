"""Parent reference parsing and resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from compound_nodes.core.exceptions import ParentResolutionError

logger = logging.getLogger(__name__)

LINK_OPEN = "[["
LINK_CLOSE = "]]"


class LinkResolver(Protocol):
    def resolve_link(self, link_text: str, source_path: str) -> Optional[str]:
        """Return the identity of the node `link_text` points at, or None."""
        ...


@dataclass(frozen=True)
class Resolved:
    target_id: str


@dataclass(frozen=True)
class Unresolved:
    text: str


@dataclass(frozen=True)
class NoReference:
    pass


ParentReference = Union[Resolved, Unresolved, NoReference]
NO_REFERENCE = NoReference()


def extract_link_text(value: object) -> Optional[str]:
    """Return the text inside a `[[...]]` declaration, or None if malformed."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not (value.startswith(LINK_OPEN) and value.endswith(LINK_CLOSE)):
        return None
    inner = value[len(LINK_OPEN) : -len(LINK_CLOSE)].strip()
    if not inner or "[" in inner or "]" in inner:
        return None
    return inner


class ParentReferenceResolver:
    """Turn a node's declared parent value into a resolution outcome."""

    def __init__(self, links: LinkResolver) -> None:
        self.links = links

    def resolve(self, value: object, source_path: str) -> ParentReference:
        link_text = extract_link_text(value)
        if link_text is None:
            return NO_REFERENCE

        try:
            target_id = self.links.resolve_link(link_text, source_path)
        except Exception as exc:
            raise ParentResolutionError(
                error_code="PARENT_RESOLUTION_FAILED",
                message=f"Could not resolve parent link '{link_text}'",
                details={"source_path": source_path, "error": str(exc)},
            ) from exc

        if target_id:
            return Resolved(target_id)
        return Unresolved(link_text)


__all__ = [
    "LinkResolver",
    "NO_REFERENCE",
    "NoReference",
    "ParentReference",
    "ParentReferenceResolver",
    "Resolved",
    "Unresolved",
    "extract_link_text",
]
