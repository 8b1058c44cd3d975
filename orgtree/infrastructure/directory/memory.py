"""Dict-backed directory store for development and tests"""

import threading
from typing import Dict, List, Optional, Tuple

from orgtree.core.directory.paths import escape_rdn_value, split_dn
from orgtree.core.errors import (
    AbsentValueError,
    AlreadyExistsError,
    DuplicateValueError,
    InvalidPathError,
    NotFoundError,
)
from orgtree.infrastructure.directory.store import (
    OBJECT_CLASS_ATTRIBUTE,
    DirectoryEntry,
    DirectoryStore,
    SearchScope,
)
from orgtree.infrastructure.logging import get_logger

logger = get_logger(__name__)

_Key = Tuple[str, ...]


def _normalize(dn: str) -> _Key:
    """Case-folded RDN tuple, leaf first"""
    return tuple(
        f"{attribute.lower()}={escape_rdn_value(value).lower()}"
        for attribute, value in split_dn(dn)
    )


class InMemoryDirectoryStore(DirectoryStore):
    """Directory store keeping entries in a dict.

    DNs and attribute values compare case-insensitively and search results
    come back in insertion order. The suffix entry is created on
    construction; every other entry needs an existing parent.
    """

    def __init__(self, base_dn: str):
        self.base_dn = base_dn
        self._entries: Dict[_Key, DirectoryEntry] = {}
        self._lock = threading.RLock()

        attribute, value = split_dn(base_dn)[0]
        self._entries[_normalize(base_dn)] = DirectoryEntry(
            dn=base_dn,
            attributes={
                OBJECT_CLASS_ATTRIBUTE: ["top", "organization"],
                attribute: [value],
            },
        )

    def search(
        self, base_dn: str, scope: SearchScope, object_class: Optional[str] = None
    ) -> List[DirectoryEntry]:
        with self._instrumented("search", base_dn):
            base = self._key(base_dn)
            with self._lock:
                if base is None or base not in self._entries:
                    return []

                results = []
                for key, entry in self._entries.items():
                    if not self._in_scope(key, base, scope):
                        continue
                    if object_class and not entry.has_value(OBJECT_CLASS_ATTRIBUTE, object_class):
                        continue
                    results.append(self._copy(entry))
                return results

    def read_entry(self, dn: str) -> Optional[DirectoryEntry]:
        with self._instrumented("read", dn):
            key = self._key(dn)
            with self._lock:
                entry = self._entries.get(key) if key is not None else None
                return self._copy(entry) if entry else None

    def add_entry(self, dn: str, attributes: Dict[str, List[str]]) -> None:
        with self._instrumented("add", dn):
            key = self._key(dn)
            if key is None:
                raise InvalidPathError(dn, "unparseable distinguished name")
            with self._lock:
                if key in self._entries:
                    raise AlreadyExistsError("Entry", dn)
                if key[1:] not in self._entries:
                    raise NotFoundError("Parent entry", dn)
                self._entries[key] = DirectoryEntry(
                    dn=dn,
                    attributes={name: list(values) for name, values in attributes.items()},
                )
            logger.debug("directory_entry_added", dn=dn)

    def add_attribute_value(self, dn: str, attribute: str, value: str) -> None:
        with self._instrumented("modify_add", dn):
            with self._lock:
                entry = self._require(dn)
                if entry.has_value(attribute, value):
                    raise DuplicateValueError(dn, attribute, value)
                name = self._attribute_name(entry, attribute)
                entry.attributes.setdefault(name, []).append(value)

    def remove_attribute_value(self, dn: str, attribute: str, value: str) -> None:
        with self._instrumented("modify_delete", dn):
            with self._lock:
                entry = self._require(dn)
                if not entry.has_value(attribute, value):
                    raise AbsentValueError(dn, attribute, value)
                name = self._attribute_name(entry, attribute)
                remaining = [v for v in entry.attributes[name] if v.lower() != value.lower()]
                if remaining:
                    entry.attributes[name] = remaining
                else:
                    del entry.attributes[name]

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _require(self, dn: str) -> DirectoryEntry:
        key = self._key(dn)
        entry = self._entries.get(key) if key is not None else None
        if entry is None:
            raise NotFoundError("Entry", dn)
        return entry

    @staticmethod
    def _key(dn: str) -> Optional[_Key]:
        try:
            return _normalize(dn)
        except InvalidPathError:
            return None

    @staticmethod
    def _in_scope(key: _Key, base: _Key, scope: SearchScope) -> bool:
        if scope == SearchScope.BASE:
            return key == base
        if scope == SearchScope.ONE_LEVEL:
            return key[1:] == base
        return len(key) >= len(base) and key[len(key) - len(base):] == base

    @staticmethod
    def _attribute_name(entry: DirectoryEntry, attribute: str) -> str:
        for name in entry.attributes:
            if name.lower() == attribute.lower():
                return name
        return attribute

    @staticmethod
    def _copy(entry: DirectoryEntry) -> DirectoryEntry:
        return DirectoryEntry(
            dn=entry.dn,
            attributes={name: list(values) for name, values in entry.attributes.items()},
        )
