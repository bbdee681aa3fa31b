from . import admin, hierarchy

__all__ = ["admin", "hierarchy"]
