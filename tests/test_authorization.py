"""Tests for permission resolution"""

import pytest

from orgtree.core.authorization.models import (AuthorizationResult,
                                               AuthorizationRule, Capability)
from orgtree.core.directory.layout import Branch
from orgtree.core.errors import InvalidPathError, PermissionDeniedError

SUPER_ADMIN = "root"


class TestMembershipPredicates:
    """Test the raw administrator group checks"""

    def test_super_admin_is_per_branch(self, authorization, store, grammar, tree):
        assert authorization.is_super_admin(SUPER_ADMIN, Branch.INTERNAL)
        assert authorization.is_super_admin("ROOT", Branch.INTERNAL)
        assert not authorization.is_super_admin("alice", Branch.INTERNAL)

        store.remove_attribute_value(
            str(grammar.super_admin_group_path(Branch.EXTERNAL)),
            "member",
            str(grammar.member_reference(grammar.super_admin_group_path(Branch.EXTERNAL), SUPER_ADMIN)),
        )
        assert not authorization.is_super_admin(SUPER_ADMIN, Branch.EXTERNAL)
        assert authorization.is_super_admin(SUPER_ADMIN, Branch.INTERNAL)

    def test_direct_org_admin(self, authorization, tree):
        assert authorization.is_org_admin_direct("alice", tree["acme"])
        assert not authorization.is_org_admin_direct("alice", tree["research"])
        assert authorization.is_org_admin_direct("rita", tree["research"])

    def test_inherited_org_admin(self, authorization, tree):
        """Test administration flows down to nested organizations only"""
        assert authorization.is_org_admin_inherited("alice", tree["lab"])
        assert authorization.is_org_admin_inherited("rita", tree["lab"])
        assert not authorization.is_org_admin_inherited("rita", tree["acme"])
        assert not authorization.is_org_admin_inherited("gina", tree["lab"])

    def test_inherited_org_admin_deep_chain(self, authorization, organizations, tree):
        """Test inheritance across three or more ancestors"""
        deep = organizations.create_sub_organization("Deep", tree["lab"])
        deeper = organizations.create_sub_organization("Deeper", deep)

        assert authorization.is_org_admin_inherited("alice", deeper)
        assert authorization.is_org_admin_inherited("rita", deeper)
        assert not authorization.is_org_admin_inherited("gina", deeper)
        assert not authorization.is_org_admin_direct("alice", deeper)

    def test_inherited_org_admin_at_own_level(self, authorization, tree):
        assert authorization.is_org_admin_inherited("alice", tree["acme"])
        assert not authorization.is_org_admin_inherited("gina", tree["acme"])

    def test_group_admin(self, authorization, tree):
        assert authorization.is_group_admin_direct("bob", tree["eng"])
        assert not authorization.is_group_admin_direct("alice", tree["eng"])
        assert not authorization.is_group_admin_direct("carol", tree["eng"])

    def test_missing_admin_group_means_no(self, authorization, grammar, tree):
        ghost = grammar.build_sub_org_path(tree["acme"], "Ghost")
        assert not authorization.is_org_admin_direct("alice", ghost)
        assert authorization.is_org_admin_inherited("alice", ghost)

    def test_placeholder_member_matches_nobody(self, authorization, tree):
        assert not authorization.is_org_admin_direct("", tree["lab"])
        assert not authorization.is_group_admin_direct("", tree["sales"])


class TestCapabilities:
    """Test composite capabilities"""

    def test_create_organization(self, authorization, tree):
        assert authorization.can_create_organization(SUPER_ADMIN, Branch.INTERNAL)
        assert not authorization.can_create_organization("alice", Branch.INTERNAL)

    @pytest.mark.parametrize(
        "uid,org,allowed",
        [
            (SUPER_ADMIN, "lab", True),
            ("alice", "acme", True),
            ("alice", "lab", True),
            ("rita", "research", True),
            ("rita", "acme", False),
            ("gina", "acme", False),
            ("bob", "acme", False),
        ],
    )
    def test_organization_capabilities(self, authorization, tree, uid, org, allowed):
        """Test sub-org creation, management, viewing and group creation agree"""
        target = tree[org]
        assert authorization.can_create_sub_organization(uid, target) is allowed
        assert authorization.can_manage_organization(uid, target) is allowed
        assert authorization.can_view_organization(uid, target) is allowed
        assert authorization.can_create_group(uid, target) is allowed

    @pytest.mark.parametrize(
        "uid,allowed",
        [(SUPER_ADMIN, True), ("alice", True), ("bob", True), ("rita", False), ("carol", False)],
    )
    def test_manage_group_admins(self, authorization, tree, uid, allowed):
        assert authorization.can_manage_group_admins(uid, tree["eng"]) is allowed
        assert authorization.can_view_group(uid, tree["eng"]) is allowed

    @pytest.mark.parametrize(
        "uid,allowed",
        [(SUPER_ADMIN, False), ("alice", False), ("bob", True), ("carol", False)],
    )
    def test_manage_group_members(self, authorization, tree, uid, allowed):
        """Test only direct group administrators manage members"""
        assert authorization.can_manage_group_members(uid, tree["eng"]) is allowed

    def test_check_reports_rule(self, authorization, tree):
        result = authorization.check("alice", Capability.MANAGE_GROUP_ADMINS, tree["eng"])
        assert result.allowed
        assert result.rule == AuthorizationRule.ORG_ADMIN

        result = authorization.check(SUPER_ADMIN, Capability.MANAGE_ORGANIZATION, tree["acme"])
        assert result.rule == AuthorizationRule.SUPER_ADMIN

        result = authorization.check("carol", Capability.VIEW_GROUP, tree["eng"])
        assert not result.allowed
        assert result.rule is None

    def test_require_raises(self, authorization, tree):
        with pytest.raises(PermissionDeniedError) as exc_info:
            authorization.require("gina", Capability.MANAGE_ORGANIZATION, tree["acme"])
        assert exc_info.value.details["capability"] == "manage_organization"
        assert exc_info.value.details["uid"] == "gina"

    def test_wrong_target_kind(self, authorization, tree):
        with pytest.raises(InvalidPathError):
            authorization.check("alice", Capability.MANAGE_GROUP_MEMBERS, tree["acme"])
        with pytest.raises(InvalidPathError):
            authorization.check("alice", Capability.MANAGE_ORGANIZATION, tree["eng"])

    def test_no_cached_decisions(self, authorization, organizations, tree):
        """Test decisions reflect the directory at call time"""
        assert not authorization.can_manage_organization("dave", tree["globex"])
        organizations.add_org_admin(tree["globex"], "dave")
        assert authorization.can_manage_organization("dave", tree["globex"])
        organizations.remove_org_admin(tree["globex"], "dave")
        assert not authorization.can_manage_organization("dave", tree["globex"])


class TestAuthorizationResult:
    """Test AuthorizationResult helpers"""

    def test_allow(self):
        result = AuthorizationResult.allow(AuthorizationRule.GROUP_ADMIN)
        assert result.allowed
        assert result.reason == "Access granted"

    def test_deny(self):
        result = AuthorizationResult.deny("nope")
        assert not result.allowed
        assert result.reason == "nope"
