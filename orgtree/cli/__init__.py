"""OrgTree management CLI."""

from orgtree import __version__

__all__ = ["__version__"]
