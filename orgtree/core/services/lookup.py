"""Name resolution and structural searches over the directory tree"""

from typing import Iterable, List, Optional

from orgtree.core.directory.layout import Branch
from orgtree.core.directory.paths import ComponentKind, EntryPath, PathGrammar
from orgtree.core.errors import InvalidPathError, NotFoundError
from orgtree.infrastructure.directory.store import DirectoryStore, SearchScope
from orgtree.infrastructure.logging import get_logger

logger = get_logger(__name__)


def unique_paths(paths: Iterable[EntryPath]) -> List[EntryPath]:
    """Drop repeated paths, keeping first-seen order"""
    seen = set()
    result = []
    for path in paths:
        if path not in seen:
            seen.add(path)
            result.append(path)
    return result


class DirectoryLookup:
    """Finds organizations, groups and members by name or by position"""

    def __init__(self, store: DirectoryStore, grammar: PathGrammar):
        self.store = store
        self.grammar = grammar
        self.layout = grammar.layout

    def find_organization(self, name: str, branch: Branch) -> Optional[EntryPath]:
        """Resolve an organization name within a branch.

        A top-level organization wins. Otherwise the first organization with
        that name in a subtree scan of the branch is returned, so duplicate
        names in different parts of the tree resolve to whichever the store
        lists first.
        """
        root = self.grammar.branch_root(branch)
        direct = self.grammar.build_org_path(root, name)
        if self.store.entry_exists(str(direct)):
            return direct

        wanted = direct.name.lower()
        for org_path in self.organizations_under(root, nested=True):
            if org_path.name.lower() == wanted:
                return org_path
        return None

    def require_organization(self, name: str, branch: Branch) -> EntryPath:
        org_path = self.find_organization(name, branch)
        if org_path is None:
            raise NotFoundError("Organization", name)
        return org_path

    def scan_organization(self, name: str, branch: Branch) -> EntryPath:
        """First organization named ``name`` in a subtree scan of the branch.

        Unlike ``find_organization`` a top-level organization gets no
        precedence; the store order alone decides between duplicates.
        """
        wanted = name.strip().lower()
        for org_path in self.organizations_under(self.grammar.branch_root(branch), nested=True):
            if org_path.name.lower() == wanted:
                return org_path
        raise NotFoundError("Organization", name)

    def find_group(self, name: str, org_name: str, branch: Branch) -> Optional[EntryPath]:
        """Resolve a group directly inside a named organization"""
        org_path = self.find_organization(org_name, branch)
        if org_path is None:
            return None
        group_path = self.grammar.build_group_path(org_path, name)
        if self.store.entry_exists(str(group_path)):
            return group_path
        return None

    def require_group(self, name: str, org_name: str, branch: Branch) -> EntryPath:
        org_path = self.require_organization(org_name, branch)
        group_path = self.grammar.build_group_path(org_path, name)
        if not self.store.entry_exists(str(group_path)):
            raise NotFoundError("Group", f"{org_name}/{name}")
        return group_path

    def organizations_under(self, container: EntryPath, nested: bool) -> List[EntryPath]:
        """Organizations in a groups container, directly or at any depth"""
        scope = SearchScope.SUBTREE if nested else SearchScope.ONE_LEVEL
        return self._search_kind(
            container, scope, self.layout.object_classes.organizational_unit,
            ComponentKind.ORGANIZATION,
        )

    def child_organizations(self, org_path: EntryPath, nested: bool) -> List[EntryPath]:
        """Organizations below ``org_path``, excluding ``org_path`` itself"""
        container = self.grammar.build_groups_container_path(org_path)
        return self.organizations_under(container, nested)

    def groups_under(self, base: EntryPath) -> List[EntryPath]:
        """Non-reserved groups anywhere below ``base`` that belong to an organization"""
        groups = self._search_kind(
            base, SearchScope.SUBTREE, self.layout.object_classes.group, ComponentKind.GROUP
        )
        result = []
        for group in groups:
            if self.grammar.is_reserved_group(group):
                continue
            try:
                self.grammar.organization_of(group)
            except InvalidPathError as e:
                logger.debug("directory_entry_skipped", dn=str(group), reason=e.reason)
                continue
            result.append(group)
        return result

    def members_of(self, group_path: EntryPath) -> List[str]:
        """uids referenced by a group's member attribute, placeholder excluded"""
        entry = self.store.read_entry(str(group_path))
        if entry is None:
            raise NotFoundError("Group", str(group_path))

        members = []
        for value in entry.get(self.layout.member_attribute):
            uid = self.grammar.principal_of(value)
            if uid is not None and uid not in members:
                members.append(uid)
        return members

    def _search_kind(
        self, base: EntryPath, scope: SearchScope, object_class: str, kind: ComponentKind
    ) -> List[EntryPath]:
        paths = []
        for entry in self.store.search(str(base), scope, object_class):
            path = self.grammar.try_parse(entry.dn)
            if path is None:
                logger.debug("directory_entry_skipped", dn=entry.dn, reason="unparseable")
                continue
            if path.kind == kind and path.is_descendant_of(base):
                paths.append(path)
        return unique_paths(paths)
