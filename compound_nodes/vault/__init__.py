from .frontmatter import extract_wikilinks, parse_frontmatter
from .index import NoteRecord, VaultIndex
from .loader import load_vault_graph

__all__ = ["NoteRecord", "VaultIndex", "extract_wikilinks", "load_vault_graph", "parse_frontmatter"]
