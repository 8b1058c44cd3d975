"""Directory store contract shared by the LDAP and in-memory backends"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from orgtree.core.errors import (
    AlreadyExistsError,
    NotFoundError,
    OrgTreeError,
    StoreUnavailableError,
    ValueConflictError,
)
from orgtree.infrastructure.logging import get_logger
from orgtree.infrastructure.metrics import (
    MetricsContext,
    directory_operation_duration_seconds,
    directory_operations_total,
)

logger = get_logger(__name__)

OBJECT_CLASS_ATTRIBUTE = "objectClass"


class SearchScope(str, Enum):
    """How far below the search base a search reaches"""

    BASE = "base"
    ONE_LEVEL = "one_level"
    SUBTREE = "subtree"


@dataclass
class DirectoryEntry:
    """An entry returned by the store: its DN and multi-valued attributes"""

    dn: str
    attributes: Dict[str, List[str]] = field(default_factory=dict)

    def get(self, attribute: str) -> List[str]:
        """Values of an attribute, matching the name case-insensitively"""
        wanted = attribute.lower()
        for name, values in self.attributes.items():
            if name.lower() == wanted:
                return list(values)
        return []

    def has_value(self, attribute: str, value: str) -> bool:
        wanted = value.lower()
        return any(v.lower() == wanted for v in self.get(attribute))

    @property
    def object_classes(self) -> List[str]:
        return self.get(OBJECT_CLASS_ATTRIBUTE)


def _outcome(error: OrgTreeError) -> str:
    if isinstance(error, NotFoundError):
        return "not_found"
    if isinstance(error, AlreadyExistsError):
        return "already_exists"
    if isinstance(error, ValueConflictError):
        return "conflict"
    if isinstance(error, StoreUnavailableError):
        return "unavailable"
    return "error"


class DirectoryStore(ABC):
    """Primitive operations on a hierarchical directory.

    Implementations raise only ``OrgTreeError`` subclasses:

    * ``add_entry`` raises ``AlreadyExistsError`` when the entry exists and
      ``NotFoundError`` when its parent is missing.
    * ``add_attribute_value`` raises ``DuplicateValueError`` when the value is
      already present.
    * ``remove_attribute_value`` raises ``AbsentValueError`` when the value is
      not present.
    * Both mutations raise ``NotFoundError`` when the entry is missing.
    * Connection and protocol failures raise ``StoreUnavailableError``.

    ``search`` returns an empty list when the search base does not exist.
    """

    @abstractmethod
    def search(
        self, base_dn: str, scope: SearchScope, object_class: Optional[str] = None
    ) -> List[DirectoryEntry]:
        ...

    @abstractmethod
    def read_entry(self, dn: str) -> Optional[DirectoryEntry]:
        ...

    @abstractmethod
    def add_entry(self, dn: str, attributes: Dict[str, List[str]]) -> None:
        ...

    @abstractmethod
    def add_attribute_value(self, dn: str, attribute: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_attribute_value(self, dn: str, attribute: str, value: str) -> None:
        ...

    @abstractmethod
    def ping(self) -> bool:
        """True when the directory can be reached"""

    def entry_exists(self, dn: str) -> bool:
        return self.read_entry(dn) is not None

    def close(self) -> None:
        pass

    @contextmanager
    def _instrumented(self, operation: str, dn: str) -> Iterator[None]:
        """Record duration and outcome of one store primitive"""
        with MetricsContext(directory_operation_duration_seconds, operation=operation):
            try:
                yield
            except OrgTreeError as e:
                outcome = _outcome(e)
                directory_operations_total.labels(operation=operation, outcome=outcome).inc()
                if outcome == "unavailable":
                    logger.warning(
                        "directory_operation_failed",
                        operation=operation,
                        dn=dn,
                        error=e.message,
                    )
                else:
                    logger.debug(
                        "directory_operation_rejected",
                        operation=operation,
                        dn=dn,
                        outcome=outcome,
                    )
                raise
            else:
                directory_operations_total.labels(operation=operation, outcome="success").inc()
