"""Build compound note nesting for a vault directory."""

from __future__ import annotations

import sys

from compound_nodes.cli import main

if __name__ == "__main__":
    sys.exit(main())
