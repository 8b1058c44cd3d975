"""Permission resolution over the directory tree.

Every predicate reads the relevant administrator group straight from the
store; nothing is cached between calls. An absent administrator group
counts as "not a member" while store failures propagate.
"""

from typing import Union

from orgtree.core.authorization.models import (
    AuthorizationResult,
    AuthorizationRule,
    Capability,
)
from orgtree.core.directory.layout import Branch
from orgtree.core.directory.paths import ComponentKind, EntryPath, PathGrammar
from orgtree.core.errors import InvalidPathError, PermissionDeniedError
from orgtree.infrastructure.directory.store import DirectoryStore
from orgtree.infrastructure.logging import get_logger
from orgtree.infrastructure.metrics import authorization_decisions_total

logger = get_logger(__name__)

Target = Union[Branch, EntryPath]


class AuthorizationService:
    """Decides what a principal may do to organizations and groups"""

    def __init__(self, store: DirectoryStore, grammar: PathGrammar):
        self.store = store
        self.grammar = grammar
        self.layout = grammar.layout

    # ------------------------------------------------------------------
    # Membership predicates
    # ------------------------------------------------------------------

    def is_super_admin(self, uid: str, branch: Branch) -> bool:
        return self._is_member(uid, self.grammar.super_admin_group_path(branch))

    def is_org_admin_direct(self, uid: str, org_path: EntryPath) -> bool:
        return self._is_member(uid, self.grammar.domain_admin_group_path(org_path))

    def is_org_admin_inherited(self, uid: str, org_path: EntryPath) -> bool:
        """Direct administrator of the organization or of any enclosing one"""
        if self.is_org_admin_direct(uid, org_path):
            return True
        for ancestor in self.grammar.iter_ancestor_organizations(org_path):
            if self.is_org_admin_direct(uid, ancestor):
                return True
        return False

    def is_group_admin_direct(self, uid: str, group_path: EntryPath) -> bool:
        return self._is_member(uid, self.grammar.group_admin_group_path(group_path))

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    def can_create_organization(self, uid: str, branch: Branch) -> bool:
        return self.check(uid, Capability.CREATE_ORGANIZATION, branch).allowed

    def can_create_sub_organization(self, uid: str, parent_org: EntryPath) -> bool:
        return self.check(uid, Capability.CREATE_SUB_ORGANIZATION, parent_org).allowed

    def can_manage_organization(self, uid: str, org_path: EntryPath) -> bool:
        return self.check(uid, Capability.MANAGE_ORGANIZATION, org_path).allowed

    def can_view_organization(self, uid: str, org_path: EntryPath) -> bool:
        return self.check(uid, Capability.VIEW_ORGANIZATION, org_path).allowed

    def can_create_group(self, uid: str, org_path: EntryPath) -> bool:
        return self.check(uid, Capability.CREATE_GROUP, org_path).allowed

    def can_manage_group_admins(self, uid: str, group_path: EntryPath) -> bool:
        return self.check(uid, Capability.MANAGE_GROUP_ADMINS, group_path).allowed

    def can_view_group(self, uid: str, group_path: EntryPath) -> bool:
        return self.check(uid, Capability.VIEW_GROUP, group_path).allowed

    def can_manage_group_members(self, uid: str, group_path: EntryPath) -> bool:
        return self.check(uid, Capability.MANAGE_GROUP_MEMBERS, group_path).allowed

    def check(self, uid: str, capability: Capability, target: Target) -> AuthorizationResult:
        """Evaluate a capability for ``uid`` over ``target``"""
        result = self._evaluate(uid, capability, target)

        authorization_decisions_total.labels(
            capability=capability.value,
            allowed=str(result.allowed).lower()
        ).inc()
        logger.info(
            "authorization_check",
            uid=uid,
            capability=capability.value,
            target=str(target.value if isinstance(target, Branch) else target),
            allowed=result.allowed,
            rule=result.rule.value if result.rule else None,
            reason=result.reason
        )
        return result

    def require(self, uid: str, capability: Capability, target: Target) -> AuthorizationResult:
        """Like ``check`` but raises ``PermissionDeniedError`` on deny"""
        result = self.check(uid, capability, target)
        if not result.allowed:
            raise PermissionDeniedError(
                result.reason or "Permission denied",
                {
                    "uid": uid,
                    "capability": capability.value,
                    "target": str(target.value if isinstance(target, Branch) else target),
                },
            )
        return result

    def _evaluate(self, uid: str, capability: Capability, target: Target) -> AuthorizationResult:
        if capability == Capability.CREATE_ORGANIZATION:
            branch = self._branch_of(target)
            if self.is_super_admin(uid, branch):
                return AuthorizationResult.allow(AuthorizationRule.SUPER_ADMIN)
            return AuthorizationResult.deny(
                "Only super administrators may create organizations"
            )

        if capability == Capability.MANAGE_GROUP_MEMBERS:
            group_path = self._expect(target, ComponentKind.GROUP)
            # Neither super administrators nor organization administrators qualify
            if self.is_group_admin_direct(uid, group_path):
                return AuthorizationResult.allow(AuthorizationRule.GROUP_ADMIN)
            return AuthorizationResult.deny(
                "Only group administrators may manage group members"
            )

        if capability in (Capability.MANAGE_GROUP_ADMINS, Capability.VIEW_GROUP):
            group_path = self._expect(target, ComponentKind.GROUP)
            if self.is_super_admin(uid, self._branch_of(group_path)):
                return AuthorizationResult.allow(AuthorizationRule.SUPER_ADMIN)
            if self.is_org_admin_inherited(uid, self.grammar.organization_of(group_path)):
                return AuthorizationResult.allow(AuthorizationRule.ORG_ADMIN)
            if self.is_group_admin_direct(uid, group_path):
                return AuthorizationResult.allow(AuthorizationRule.GROUP_ADMIN)
            return AuthorizationResult.deny(
                "Not an administrator of the group or its organization"
            )

        org_path = self._expect(target, ComponentKind.ORGANIZATION)
        if self.is_super_admin(uid, self._branch_of(org_path)):
            return AuthorizationResult.allow(AuthorizationRule.SUPER_ADMIN)
        if self.is_org_admin_inherited(uid, org_path):
            return AuthorizationResult.allow(AuthorizationRule.ORG_ADMIN)
        return AuthorizationResult.deny(
            "Not an administrator of the organization or any enclosing organization"
        )

    def _is_member(self, uid: str, admin_group_path: EntryPath) -> bool:
        entry = self.store.read_entry(str(admin_group_path))
        if entry is None:
            return False
        wanted = uid.lower()
        for value in entry.get(self.layout.member_attribute):
            principal = self.grammar.principal_of(value)
            if principal is not None and principal.lower() == wanted:
                return True
        return False

    @staticmethod
    def _branch_of(target: Target) -> Branch:
        if isinstance(target, Branch):
            return target
        branch = target.branch
        if branch is None:
            raise InvalidPathError(str(target), "path is not inside a branch")
        return branch

    @staticmethod
    def _expect(target: Target, kind: ComponentKind) -> EntryPath:
        if not isinstance(target, EntryPath) or target.kind != kind:
            raise InvalidPathError(str(target), f"expected a {kind.value} path")
        return target
