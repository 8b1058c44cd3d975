"""Attribute sets for new entries and ordered multi-entry creation"""

from contextlib import contextmanager
from typing import Dict, Iterator, List, Sequence, Tuple

from orgtree.core.directory.layout import DirectoryLayout
from orgtree.core.directory.paths import EntryPath, PathGrammar
from orgtree.core.errors import OrgTreeError, PartialCreationError
from orgtree.infrastructure.directory.store import OBJECT_CLASS_ATTRIBUTE, DirectoryStore
from orgtree.infrastructure.metrics import lifecycle_operations_total

Attributes = Dict[str, List[str]]
CreationStep = Tuple[EntryPath, Attributes]

# groupOfNames requires at least one member value
MEMBER_PLACEHOLDER = ""


def organizational_unit_attributes(layout: DirectoryLayout, path: EntryPath) -> Attributes:
    return {
        OBJECT_CLASS_ATTRIBUTE: ["top", layout.object_classes.organizational_unit],
        layout.ou_attribute: [path.name],
    }


def group_attributes(layout: DirectoryLayout, path: EntryPath) -> Attributes:
    return {
        OBJECT_CLASS_ATTRIBUTE: ["top", layout.object_classes.group],
        layout.cn_attribute: [path.name],
        layout.member_attribute: [MEMBER_PLACEHOLDER],
    }


def create_in_order(store: DirectoryStore, operation: str, steps: Sequence[CreationStep]) -> List[str]:
    """Add entries one after another without rollback.

    A failure on the first entry propagates unchanged. A failure on a later
    entry raises ``PartialCreationError`` listing what was already written.
    """
    created: List[str] = []
    for path, attributes in steps:
        dn = str(path)
        try:
            store.add_entry(dn, attributes)
        except OrgTreeError as e:
            if not created:
                raise
            raise PartialCreationError(operation, created, dn, e) from e
        created.append(dn)
    return created


def create_missing(store: DirectoryStore, steps: Sequence[CreationStep]) -> List[str]:
    """Add only the entries that are absent, in order"""
    created: List[str] = []
    for path, attributes in steps:
        dn = str(path)
        if store.entry_exists(dn):
            continue
        store.add_entry(dn, attributes)
        created.append(dn)
    return created


def add_member_reference(store: DirectoryStore, grammar: PathGrammar, group_path: EntryPath, uid: str) -> str:
    """Add ``uid`` to a group's member attribute; not idempotent"""
    value = str(grammar.member_reference(group_path, uid))
    store.add_attribute_value(str(group_path), grammar.layout.member_attribute, value)
    return value


def remove_member_reference(store: DirectoryStore, grammar: PathGrammar, group_path: EntryPath, uid: str) -> str:
    """Remove ``uid`` from a group's member attribute; not idempotent"""
    value = str(grammar.member_reference(group_path, uid))
    store.remove_attribute_value(str(group_path), grammar.layout.member_attribute, value)
    return value


@contextmanager
def track_lifecycle(operation: str) -> Iterator[None]:
    """Count a lifecycle operation by outcome"""
    try:
        yield
    except OrgTreeError as e:
        lifecycle_operations_total.labels(operation=operation, outcome=type(e).__name__).inc()
        raise
    else:
        lifecycle_operations_total.labels(operation=operation, outcome="success").inc()
