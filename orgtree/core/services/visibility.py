"""Which organizations and groups a principal gets to see"""

from typing import List, Optional

from orgtree.core.authorization.service import AuthorizationService
from orgtree.core.directory.layout import Branch
from orgtree.core.directory.paths import EntryPath
from orgtree.core.services.lookup import DirectoryLookup, unique_paths
from orgtree.infrastructure.logging import get_logger

logger = get_logger(__name__)


class VisibilityService:
    """Computes organization and group listings per principal.

    ``nested=False`` lists only direct child organizations of an anchor,
    ``nested=True`` its whole subtree. Reserved groups and groups containers
    never show up.
    """

    def __init__(self, lookup: DirectoryLookup, authorization: AuthorizationService):
        self.lookup = lookup
        self.authorization = authorization
        self.grammar = lookup.grammar

    def list_organizations(
        self,
        uid: str,
        branch: Branch,
        name: Optional[str] = None,
        nested: bool = False,
    ) -> List[EntryPath]:
        if self.authorization.is_super_admin(uid, branch):
            if name:
                anchor = self.lookup.scan_organization(name, branch)
                result = [anchor] + self.lookup.child_organizations(anchor, nested)
            else:
                result = self.lookup.organizations_under(self.grammar.branch_root(branch), nested)
            return self._finish(uid, branch, result, scope="super_admin")

        if name:
            anchor = self.lookup.require_organization(name, branch)
            result = []
            if self.authorization.can_view_organization(uid, anchor):
                result.append(anchor)
            result.extend(self._viewable_children(uid, anchor, nested))
            return self._finish(uid, branch, result, scope="named")

        result = []
        for anchor in self._administered_organizations(uid, branch):
            result.append(anchor)
            result.extend(self._viewable_children(uid, anchor, nested))
        return self._finish(uid, branch, result, scope="administered")

    def list_groups(self, uid: str, branch: Branch) -> List[EntryPath]:
        root = self.grammar.branch_root(branch)
        if self.authorization.is_super_admin(uid, branch):
            return self._finish(uid, branch, self.lookup.groups_under(root), scope="super_admin", kind="groups")

        result = []
        for org_path in self._administered_organizations(uid, branch):
            container = self.grammar.build_groups_container_path(org_path)
            result.extend(self.lookup.groups_under(container))

        for group_path in self.lookup.groups_under(root):
            if self.authorization.is_group_admin_direct(uid, group_path):
                result.append(group_path)

        return self._finish(uid, branch, result, scope="administered", kind="groups")

    def _administered_organizations(self, uid: str, branch: Branch) -> List[EntryPath]:
        every_org = self.lookup.organizations_under(self.grammar.branch_root(branch), nested=True)
        return [org for org in every_org if self.authorization.is_org_admin_direct(uid, org)]

    def _viewable_children(self, uid: str, anchor: EntryPath, nested: bool) -> List[EntryPath]:
        return [
            child
            for child in self.lookup.child_organizations(anchor, nested)
            if self.authorization.can_view_organization(uid, child)
        ]

    @staticmethod
    def _finish(
        uid: str, branch: Branch, paths: List[EntryPath], scope: str, kind: str = "organizations"
    ) -> List[EntryPath]:
        result = unique_paths(paths)
        logger.debug(
            "visibility_computed",
            uid=uid,
            branch=branch.value,
            kind=kind,
            scope=scope,
            count=len(result),
        )
        return result
