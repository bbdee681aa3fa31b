"""Metadata index over a directory of Markdown notes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterator, List, Optional

from compound_nodes.core.config import Settings, settings
from compound_nodes.core.exceptions import NotFoundError
from compound_nodes.vault.frontmatter import extract_wikilinks, frontmatter_links, parse_frontmatter

logger = logging.getLogger(__name__)


@dataclass
class NoteRecord:
    """A note as seen by the index.

    Attributes:
        path: Vault-relative POSIX path including the suffix.
        frontmatter: Parsed YAML frontmatter.
        links: Wikilink targets from the body and from frontmatter values.
    """

    path: str
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    links: List[str] = field(default_factory=list)

    @property
    def node_id(self) -> str:
        return str(PurePosixPath(self.path).with_suffix(""))

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).stem

    @property
    def folder(self) -> str:
        return str(PurePosixPath(self.path).parent)


def link_path(link_text: str) -> str:
    """Strip `#heading` and `|alias` parts from a link."""
    return link_text.split("|", 1)[0].split("#", 1)[0].strip()


class VaultIndex:
    """Frontmatter and link resolution for every note under `root`."""

    def __init__(self, root: Path, config: Settings = settings) -> None:
        self.root = Path(root)
        self.config = config
        self._notes: Dict[str, NoteRecord] = {}
        self._paths_by_id: Dict[str, str] = {}

    @classmethod
    def from_directory(cls, root: Path, config: Settings = settings) -> "VaultIndex":
        index = cls(root, config)
        index.scan()
        return index

    def scan(self) -> int:
        if not self.root.is_dir():
            raise NotFoundError(f"Vault directory '{self.root}' does not exist")
        self._notes.clear()
        self._paths_by_id.clear()
        for file_path in sorted(self.root.rglob("*")):
            relative = file_path.relative_to(self.root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if file_path.is_file() and self.config.is_markdown(file_path.name):
                self._load(relative.as_posix())
        logger.info("Indexed %d note(s) under %s", len(self._notes), self.root)
        return len(self._notes)

    def refresh(self, path: str) -> None:
        """Re-read a single note after it changed, or forget it if it is gone."""
        path = self.relative_path(path)
        if (self.root / path).is_file():
            self._load(path)
        else:
            self._forget(path)
            logger.debug("Dropped %s from the index", path)

    def notes(self) -> Iterator[NoteRecord]:
        yield from self._notes.values()

    def get(self, path: str) -> Optional[NoteRecord]:
        return self._notes.get(self.relative_path(path))

    def __len__(self) -> int:
        return len(self._notes)

    # MetadataProvider

    def parent_field(self, path: str) -> Any:
        note = self.get(path)
        if note is None:
            return None
        return note.frontmatter.get(self.config.PARENT_FIELD)

    def resolve_link(self, link_text: str, source_path: str) -> Optional[str]:
        target = link_path(link_text)
        if not target:
            return None

        wanted = target.casefold()
        for candidate in (wanted, f"{wanted}{self.config.markdown_suffixes[0]}"):
            for note in self._notes.values():
                if note.path.casefold() == candidate:
                    return note.node_id

        name = PurePosixPath(wanted).name
        matches = [note for note in self._notes.values() if note.name.casefold() == name]
        if not matches:
            return None
        source_folder = str(PurePosixPath(self.relative_path(source_path)).parent)
        matches.sort(key=lambda note: (note.folder != source_folder, len(note.path), note.path))
        return matches[0].node_id

    def _load(self, path: str) -> None:
        try:
            content = (self.root / path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            self._forget(path)
            return
        frontmatter, body = parse_frontmatter(content)
        links = frontmatter_links(frontmatter) + extract_wikilinks(body)
        record = NoteRecord(path=path, frontmatter=frontmatter, links=links)

        owner = self._paths_by_id.get(record.node_id)
        if owner is not None and owner != path:
            # Notes differing only in suffix share a node id; the first one indexed keeps it.
            logger.warning("Skipping %s: node id %r is already used by %s", path, record.node_id, owner)
            return
        self._notes[path] = record
        self._paths_by_id[record.node_id] = path

    def _forget(self, path: str) -> None:
        record = self._notes.pop(path, None)
        if record is not None and self._paths_by_id.get(record.node_id) == path:
            del self._paths_by_id[record.node_id]

    def relative_path(self, path: str) -> str:
        """Vault-relative POSIX form of `path`, which may be absolute."""
        candidate = Path(path)
        if candidate.is_absolute():
            try:
                return candidate.relative_to(self.root).as_posix()
            except ValueError:
                return candidate.as_posix()
        return PurePosixPath(path).as_posix()


__all__ = ["NoteRecord", "VaultIndex", "link_path"]
