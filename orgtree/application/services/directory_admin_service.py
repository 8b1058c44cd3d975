"""Directory administration service.

This service is the single entry point used by the HTTP API and the CLI.
Each operation validates its input, resolves the target names to directory
paths, authorizes the acting principal and then lists or mutates through
the core services. Callers only ever see DTOs or ``OrgTreeError``
subclasses.
"""

from typing import List, Optional

from orgtree.application.dto.directory_dto import (
    GroupDTO,
    OrganizationDTO,
    ReconcileResultDTO
)
from orgtree.application.services.base import ServiceBase
from orgtree.core.authorization.models import Capability
from orgtree.core.authorization.service import AuthorizationService
from orgtree.core.config import Settings
from orgtree.core.directory.layout import Branch, DirectoryLayout
from orgtree.core.directory.paths import PathGrammar
from orgtree.core.errors import ValidationError
from orgtree.core.services.bootstrap import DirectoryBootstrapper
from orgtree.core.services.group import GroupService
from orgtree.core.services.lookup import DirectoryLookup
from orgtree.core.services.organization import OrganizationService
from orgtree.core.services.visibility import VisibilityService
from orgtree.infrastructure.directory.factory import create_directory_store
from orgtree.infrastructure.directory.store import DirectoryStore


class DirectoryAdminService(ServiceBase):
    """Authorized facade over organizations and groups."""

    def __init__(self, store: DirectoryStore, layout: DirectoryLayout):
        """Initialize the directory administration service.

        Args:
            store: Directory store all operations go through
            layout: Names and schema identifiers of the directory tree
        """
        super().__init__()
        self.store = store
        self.layout = layout
        self.grammar = PathGrammar(layout)
        self.lookup = DirectoryLookup(store, self.grammar)
        self.authorization = AuthorizationService(store, self.grammar)
        self.visibility = VisibilityService(self.lookup, self.authorization)
        self.organizations = OrganizationService(store, self.grammar)
        self.groups = GroupService(store, self.grammar)
        self.bootstrapper = DirectoryBootstrapper(store, self.grammar)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DirectoryAdminService":
        """Build the service over the directory backend named in settings."""
        return cls(create_directory_store(settings), settings.directory_layout())

    def initialize(self) -> None:
        """Initialize service resources."""
        self.logger.info("directory_admin_service_initialized", base_dn=self.layout.base_dn)

    def cleanup(self) -> None:
        """Release the directory store."""
        self.store.close()
        self.logger.info("directory_admin_service_cleanup")

    def ping(self) -> bool:
        return self.store.ping()

    def bootstrap(self, branch: str, super_admin_uid: Optional[str] = None) -> List[str]:
        """Create the skeleton of a branch; no authorization is applied."""
        return self.bootstrapper.ensure_branch(Branch.parse(branch), super_admin_uid)

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    def list_organizations(
        self,
        uid: str,
        branch: str,
        name: Optional[str] = None,
        nested: bool = False
    ) -> List[OrganizationDTO]:
        """List the organizations visible to ``uid``.

        Args:
            uid: Acting principal
            branch: Branch name
            name: Optional anchor organization
            nested: Include the whole subtree instead of direct children

        Returns:
            Visible organizations, anchor first when one is named
        """
        uid = self._require_uid(uid)
        paths = self.visibility.list_organizations(
            uid, Branch.parse(branch), name=name or None, nested=nested
        )
        return [OrganizationDTO.from_path(self.grammar, path) for path in paths]

    def create_organization(self, uid: str, branch: str, name: str) -> OrganizationDTO:
        uid = self._require_uid(uid)
        target_branch = Branch.parse(branch)
        self._require_name(name, "Organization name")
        self.authorization.require(uid, Capability.CREATE_ORGANIZATION, target_branch)
        org_path = self.organizations.create_organization(name, target_branch)
        return OrganizationDTO.from_path(self.grammar, org_path)

    def create_sub_organization(
        self, uid: str, branch: str, parent_name: str, name: str
    ) -> OrganizationDTO:
        uid = self._require_uid(uid)
        self._require_name(name, "Sub-organization name")
        parent = self.lookup.require_organization(parent_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.CREATE_SUB_ORGANIZATION, parent)
        org_path = self.organizations.create_sub_organization(name, parent)
        return OrganizationDTO.from_path(self.grammar, org_path)

    def list_org_admins(self, uid: str, branch: str, org_name: str) -> List[str]:
        uid = self._require_uid(uid)
        org_path = self.lookup.require_organization(org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.VIEW_ORGANIZATION, org_path)
        return self.lookup.members_of(self.grammar.domain_admin_group_path(org_path))

    def add_org_admin(self, uid: str, branch: str, org_name: str, admin_uid: str) -> None:
        uid = self._require_uid(uid)
        admin_uid = self._require_name(admin_uid, "Admin uid")
        org_path = self.lookup.require_organization(org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.MANAGE_ORGANIZATION, org_path)
        self.organizations.add_org_admin(org_path, admin_uid)

    def remove_org_admin(self, uid: str, branch: str, org_name: str, admin_uid: str) -> None:
        uid = self._require_uid(uid)
        admin_uid = self._require_name(admin_uid, "Admin uid")
        org_path = self.lookup.require_organization(org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.MANAGE_ORGANIZATION, org_path)
        self.organizations.remove_org_admin(org_path, admin_uid)

    def reconcile_organization(self, uid: str, branch: str, org_name: str) -> ReconcileResultDTO:
        """Re-create the groups container and admin group of an organization if missing."""
        uid = self._require_uid(uid)
        org_path = self.lookup.require_organization(org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.MANAGE_ORGANIZATION, org_path)
        created = self.organizations.reconcile_organization(org_path)
        return ReconcileResultDTO(dn=str(org_path), created=created)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def list_groups(self, uid: str, branch: str) -> List[GroupDTO]:
        uid = self._require_uid(uid)
        paths = self.visibility.list_groups(uid, Branch.parse(branch))
        return [GroupDTO.from_path(self.grammar, path) for path in paths]

    def find_group(self, uid: str, branch: str, org_name: str, group_name: str) -> GroupDTO:
        uid = self._require_uid(uid)
        group_path = self.lookup.require_group(group_name, org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.VIEW_GROUP, group_path)
        return GroupDTO.from_path(self.grammar, group_path)

    def create_group(self, uid: str, branch: str, org_name: str, name: str) -> GroupDTO:
        uid = self._require_uid(uid)
        self._require_name(name, "Group name")
        self._require_name(org_name, "Organization name")
        org_path = self.lookup.require_organization(org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.CREATE_GROUP, org_path)
        group_path = self.groups.create_group(name, org_path)
        return GroupDTO.from_path(self.grammar, group_path)

    def list_group_admins(
        self, uid: str, branch: str, org_name: str, group_name: str
    ) -> List[str]:
        uid = self._require_uid(uid)
        group_path = self.lookup.require_group(group_name, org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.VIEW_GROUP, group_path)
        return self.lookup.members_of(self.grammar.group_admin_group_path(group_path))

    def add_group_admin(
        self, uid: str, branch: str, org_name: str, group_name: str, admin_uid: str
    ) -> None:
        uid = self._require_uid(uid)
        admin_uid = self._require_name(admin_uid, "Admin uid")
        group_path = self.lookup.require_group(group_name, org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.MANAGE_GROUP_ADMINS, group_path)
        self.groups.add_group_admin(group_path, admin_uid)

    def remove_group_admin(
        self, uid: str, branch: str, org_name: str, group_name: str, admin_uid: str
    ) -> None:
        uid = self._require_uid(uid)
        admin_uid = self._require_name(admin_uid, "Admin uid")
        group_path = self.lookup.require_group(group_name, org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.MANAGE_GROUP_ADMINS, group_path)
        self.groups.remove_group_admin(group_path, admin_uid)

    def list_group_members(
        self, uid: str, branch: str, org_name: str, group_name: str
    ) -> List[str]:
        uid = self._require_uid(uid)
        group_path = self.lookup.require_group(group_name, org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.VIEW_GROUP, group_path)
        return self.lookup.members_of(group_path)

    def add_group_member(
        self, uid: str, branch: str, org_name: str, group_name: str, member_uid: str
    ) -> None:
        uid = self._require_uid(uid)
        member_uid = self._require_name(member_uid, "Member uid")
        group_path = self.lookup.require_group(group_name, org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.MANAGE_GROUP_MEMBERS, group_path)
        self.groups.add_group_member(group_path, member_uid)

    def remove_group_member(
        self, uid: str, branch: str, org_name: str, group_name: str, member_uid: str
    ) -> None:
        uid = self._require_uid(uid)
        member_uid = self._require_name(member_uid, "Member uid")
        group_path = self.lookup.require_group(group_name, org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.MANAGE_GROUP_MEMBERS, group_path)
        self.groups.remove_group_member(group_path, member_uid)

    def reconcile_group(
        self, uid: str, branch: str, org_name: str, group_name: str
    ) -> ReconcileResultDTO:
        """Re-create the group administrator subgroup if missing."""
        uid = self._require_uid(uid)
        group_path = self.lookup.require_group(group_name, org_name, Branch.parse(branch))
        self.authorization.require(uid, Capability.MANAGE_GROUP_ADMINS, group_path)
        created = self.groups.reconcile_group(group_path)
        return ReconcileResultDTO(dn=str(group_path), created=created)

    @staticmethod
    def _require_uid(uid: Optional[str]) -> str:
        if uid is None or not uid.strip():
            raise ValidationError(["uid is required"])
        return uid.strip()

    @staticmethod
    def _require_name(value: Optional[str], what: str) -> str:
        if value is None or not value.strip():
            raise ValidationError([f"{what} is required"])
        return value.strip()
