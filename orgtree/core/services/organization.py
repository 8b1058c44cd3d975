"""Organization lifecycle: creation, reconciliation and administrators"""

from typing import List

from orgtree.core.directory.layout import Branch
from orgtree.core.directory.paths import EntryPath, PathGrammar
from orgtree.core.errors import NotFoundError
from orgtree.core.services.entries import (
    CreationStep,
    add_member_reference,
    create_in_order,
    create_missing,
    group_attributes,
    organizational_unit_attributes,
    remove_member_reference,
    track_lifecycle,
)
from orgtree.infrastructure.directory.store import DirectoryStore
from orgtree.infrastructure.logging import get_logger

logger = get_logger(__name__)


class OrganizationService:
    """Creates organizations and maintains their administrator group.

    An organization is three entries: the organization itself, its groups
    container and its domain administrator group. They are written in that
    order and nothing is rolled back when a later write fails.
    """

    def __init__(self, store: DirectoryStore, grammar: PathGrammar):
        self.store = store
        self.grammar = grammar
        self.layout = grammar.layout

    def create_organization(self, name: str, branch: Branch) -> EntryPath:
        org_path = self.grammar.build_org_path(self.grammar.branch_root(branch), name)
        with track_lifecycle("create_organization"):
            create_in_order(self.store, "create_organization", self._structure(org_path))
        logger.info("organization_created", organization=str(org_path), branch=branch.value)
        return org_path

    def create_sub_organization(self, name: str, parent_org: EntryPath) -> EntryPath:
        org_path = self.grammar.build_sub_org_path(parent_org, name)
        with track_lifecycle("create_sub_organization"):
            create_in_order(self.store, "create_sub_organization", self._structure(org_path))
        logger.info(
            "sub_organization_created",
            organization=str(org_path),
            parent=str(parent_org),
        )
        return org_path

    def reconcile_organization(self, org_path: EntryPath) -> List[str]:
        """Create whichever of the container and admin group are missing"""
        if not self.store.entry_exists(str(org_path)):
            raise NotFoundError("Organization", str(org_path))
        with track_lifecycle("reconcile_organization"):
            created = create_missing(self.store, self._structure(org_path)[1:])
        logger.info("organization_reconciled", organization=str(org_path), created=created)
        return created

    def add_org_admin(self, org_path: EntryPath, uid: str) -> None:
        admin_group = self.grammar.domain_admin_group_path(org_path)
        with track_lifecycle("add_org_admin"):
            add_member_reference(self.store, self.grammar, admin_group, uid)
        logger.info("org_admin_added", organization=str(org_path), admin_uid=uid)

    def remove_org_admin(self, org_path: EntryPath, uid: str) -> None:
        admin_group = self.grammar.domain_admin_group_path(org_path)
        with track_lifecycle("remove_org_admin"):
            remove_member_reference(self.store, self.grammar, admin_group, uid)
        logger.info("org_admin_removed", organization=str(org_path), admin_uid=uid)

    def _structure(self, org_path: EntryPath) -> List[CreationStep]:
        container = self.grammar.build_groups_container_path(org_path)
        admin_group = self.grammar.domain_admin_group_path(org_path)
        return [
            (org_path, organizational_unit_attributes(self.layout, org_path)),
            (container, organizational_unit_attributes(self.layout, container)),
            (admin_group, group_attributes(self.layout, admin_group)),
        ]
