from orgtree.core.directory.layout import Branch, DirectoryLayout, ObjectClasses
from orgtree.core.directory.paths import (ComponentKind, EntryPath,
                                          PathComponent, PathGrammar)

__all__ = [
    "Branch",
    "ComponentKind",
    "DirectoryLayout",
    "EntryPath",
    "ObjectClasses",
    "PathComponent",
    "PathGrammar",
]
