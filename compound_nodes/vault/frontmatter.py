"""YAML frontmatter and wikilink extraction for Markdown notes."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Tuple

import yaml

logger = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_WIKILINK_RE = re.compile(r"\[\[([^\[\]|#]+?)(?:#[^\[\]|]*)?(?:\|[^\[\]]*)?\]\]")


def parse_frontmatter(content: str) -> Tuple[Dict[str, Any], str]:
    """Split Markdown content into (frontmatter mapping, body).

    Content without a leading `---` block has empty frontmatter. A block that
    is not valid YAML, or is not a mapping, is treated as empty.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return {}, content

    body = content[match.end() :]
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        logger.warning("Ignoring malformed frontmatter: %s", exc)
        return {}, body

    if data is None:
        return {}, body
    if not isinstance(data, dict):
        logger.warning("Ignoring frontmatter that is not a mapping (%s)", type(data).__name__)
        return {}, body
    return data, body


def extract_wikilinks(content: str) -> List[str]:
    """Return `[[target]]` link paths in order, without headings or aliases."""
    return [match.group(1).strip() for match in _WIKILINK_RE.finditer(content) if match.group(1).strip()]


def frontmatter_links(frontmatter: Dict[str, Any]) -> List[str]:
    """Collect wikilinks written as frontmatter string values."""
    links: List[str] = []
    stack: List[Any] = list(frontmatter.values())
    while stack:
        value = stack.pop(0)
        if isinstance(value, str):
            links.extend(extract_wikilinks(value))
        elif isinstance(value, list):
            stack.extend(value)
    return links


__all__ = ["extract_wikilinks", "frontmatter_links", "parse_frontmatter"]
