"""Group lifecycle: creation, reconciliation, administrators and members"""

from typing import List

from orgtree.core.directory.paths import EntryPath, PathGrammar
from orgtree.core.errors import NotFoundError, ValidationError
from orgtree.core.services.entries import (
    CreationStep,
    add_member_reference,
    create_in_order,
    create_missing,
    group_attributes,
    remove_member_reference,
    track_lifecycle,
)
from orgtree.infrastructure.directory.store import DirectoryStore
from orgtree.infrastructure.logging import get_logger

logger = get_logger(__name__)


class GroupService:
    """Creates groups and mutates their administrator and member lists"""

    def __init__(self, store: DirectoryStore, grammar: PathGrammar):
        self.store = store
        self.grammar = grammar
        self.layout = grammar.layout

    def create_group(self, name: str, org_path: EntryPath) -> EntryPath:
        """Write the group, then its group administrator subgroup"""
        group_path = self.grammar.build_group_path(org_path, name)
        if self.grammar.is_reserved_group(group_path):
            raise ValidationError([f"'{group_path.name}' is a reserved group name"])

        with track_lifecycle("create_group"):
            create_in_order(self.store, "create_group", self._structure(group_path))
        logger.info("group_created", group=str(group_path), organization=str(org_path))
        return group_path

    def reconcile_group(self, group_path: EntryPath) -> List[str]:
        """Create the group administrator subgroup if it is missing"""
        if not self.store.entry_exists(str(group_path)):
            raise NotFoundError("Group", str(group_path))
        with track_lifecycle("reconcile_group"):
            created = create_missing(self.store, self._structure(group_path)[1:])
        logger.info("group_reconciled", group=str(group_path), created=created)
        return created

    def add_group_admin(self, group_path: EntryPath, uid: str) -> None:
        admin_group = self.grammar.group_admin_group_path(group_path)
        with track_lifecycle("add_group_admin"):
            add_member_reference(self.store, self.grammar, admin_group, uid)
        logger.info("group_admin_added", group=str(group_path), admin_uid=uid)

    def remove_group_admin(self, group_path: EntryPath, uid: str) -> None:
        admin_group = self.grammar.group_admin_group_path(group_path)
        with track_lifecycle("remove_group_admin"):
            remove_member_reference(self.store, self.grammar, admin_group, uid)
        logger.info("group_admin_removed", group=str(group_path), admin_uid=uid)

    def add_group_member(self, group_path: EntryPath, uid: str) -> None:
        with track_lifecycle("add_group_member"):
            add_member_reference(self.store, self.grammar, group_path, uid)
        logger.info("group_member_added", group=str(group_path), member_uid=uid)

    def remove_group_member(self, group_path: EntryPath, uid: str) -> None:
        with track_lifecycle("remove_group_member"):
            remove_member_reference(self.store, self.grammar, group_path, uid)
        logger.info("group_member_removed", group=str(group_path), member_uid=uid)

    def _structure(self, group_path: EntryPath) -> List[CreationStep]:
        admin_group = self.grammar.group_admin_group_path(group_path)
        return [
            (group_path, group_attributes(self.layout, group_path)),
            (admin_group, group_attributes(self.layout, admin_group)),
        ]
