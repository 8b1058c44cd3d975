"""Directory store infrastructure module."""
from .factory import create_directory_store
from .memory import InMemoryDirectoryStore
from .store import DirectoryEntry, DirectoryStore, SearchScope

__all__ = [
    'DirectoryEntry',
    'DirectoryStore',
    'InMemoryDirectoryStore',
    'SearchScope',
    'create_directory_store'
]
