"""Tests for organization and group listings"""

import pytest

from orgtree.core.directory.layout import Branch
from orgtree.core.errors import NotFoundError

SUPER_ADMIN = "root"
INTERNAL = Branch.INTERNAL


def names(paths):
    return [path.name for path in paths]


class TestListOrganizations:
    """Test organization listings per principal"""

    def test_super_admin_sees_top_level(self, visibility, tree):
        assert names(visibility.list_organizations(SUPER_ADMIN, INTERNAL)) == ["Acme", "Globex"]

    def test_super_admin_nested(self, visibility, tree):
        result = visibility.list_organizations(SUPER_ADMIN, INTERNAL, nested=True)
        assert names(result) == ["Acme", "Research", "Lab", "Globex"]

    def test_super_admin_named_anchor(self, visibility, tree):
        """Test the anchor comes first, followed by its children"""
        assert names(visibility.list_organizations(SUPER_ADMIN, INTERNAL, name="Acme")) == [
            "Acme", "Research"
        ]
        assert names(
            visibility.list_organizations(SUPER_ADMIN, INTERNAL, name="Acme", nested=True)
        ) == ["Acme", "Research", "Lab"]

    def test_org_admin_sees_administered(self, visibility, tree):
        assert names(visibility.list_organizations("alice", INTERNAL)) == ["Acme", "Research"]
        assert names(visibility.list_organizations("alice", INTERNAL, nested=True)) == [
            "Acme", "Research", "Lab"
        ]
        assert names(visibility.list_organizations("rita", INTERNAL)) == ["Research", "Lab"]

    def test_named_anchor_not_administered(self, visibility, tree):
        """Test an anchor the principal cannot view is left out"""
        assert names(visibility.list_organizations("rita", INTERNAL, name="Acme")) == ["Research"]
        assert visibility.list_organizations("gina", INTERNAL, name="Acme") == []

    def test_unrelated_principal(self, visibility, tree):
        assert visibility.list_organizations("carol", INTERNAL) == []
        assert visibility.list_organizations("bob", INTERNAL, nested=True) == []

    def test_unknown_anchor(self, visibility, tree):
        with pytest.raises(NotFoundError):
            visibility.list_organizations(SUPER_ADMIN, INTERNAL, name="Initech")
        with pytest.raises(NotFoundError):
            visibility.list_organizations("alice", INTERNAL, name="Initech")

    def test_super_admin_anchor_from_subtree_scan(self, visibility, organizations, tree):
        """Test a duplicate name resolves to the first organization the scan meets"""
        nested_dup = organizations.create_sub_organization("Dup", tree["acme"])
        organizations.create_organization("Dup", INTERNAL)

        assert visibility.list_organizations(SUPER_ADMIN, INTERNAL, name="Dup") == [nested_dup]

    def test_no_duplicates(self, visibility, organizations, tree):
        """Test overlapping administered subtrees are listed once"""
        organizations.add_org_admin(tree["research"], "alice")
        assert names(visibility.list_organizations("alice", INTERNAL, nested=True)) == [
            "Acme", "Research", "Lab"
        ]

    def test_branches_are_separate(self, visibility, organizations, tree):
        assert visibility.list_organizations(SUPER_ADMIN, Branch.EXTERNAL) == []
        organizations.create_organization("Partner", Branch.EXTERNAL)
        assert names(visibility.list_organizations(SUPER_ADMIN, Branch.EXTERNAL)) == ["Partner"]
        assert names(visibility.list_organizations(SUPER_ADMIN, INTERNAL)) == ["Acme", "Globex"]


class TestListGroups:
    """Test group listings per principal"""

    def test_super_admin_sees_all(self, visibility, tree):
        assert names(visibility.list_groups(SUPER_ADMIN, INTERNAL)) == ["eng", "sales"]

    def test_reserved_groups_hidden(self, visibility, tree):
        listed = names(visibility.list_groups(SUPER_ADMIN, INTERNAL))
        assert "DomainAdministrator" not in listed
        assert "GroupAdministrator" not in listed
        assert "SuperAdministrators" not in listed

    @pytest.mark.parametrize(
        "uid,expected",
        [("alice", ["eng"]), ("bob", ["eng"]), ("gina", ["sales"]), ("carol", []), ("rita", [])],
    )
    def test_administered_groups(self, visibility, tree, uid, expected):
        assert names(visibility.list_groups(uid, INTERNAL)) == expected

    def test_groups_of_nested_organizations(self, visibility, groups, tree):
        """Test an org admin also sees groups of nested organizations"""
        groups.create_group("lab-team", tree["research"])
        assert names(visibility.list_groups("alice", INTERNAL)) == ["eng", "lab-team"]
        assert names(visibility.list_groups("rita", INTERNAL)) == ["lab-team"]
        assert names(visibility.list_groups("gina", INTERNAL)) == ["sales"]

    def test_org_and_group_admin_listed_once(self, visibility, groups, tree):
        groups.add_group_admin(tree["eng"], "alice")
        assert names(visibility.list_groups("alice", INTERNAL)) == ["eng"]

    def test_group_without_organization_skipped(self, visibility, admin_service, store, tree):
        """Test a group placed directly in a branch root does not break listings"""
        store.add_entry(
            "cn=legacy,ou=groups,ou=internal,o=sreemat",
            {"objectClass": ["top", "groupOfNames"], "cn": ["legacy"], "member": [""]},
        )

        assert names(visibility.list_groups(SUPER_ADMIN, INTERNAL)) == ["eng", "sales"]
        assert names(visibility.list_groups("bob", INTERNAL)) == ["eng"]
        assert [group.name for group in admin_service.list_groups(SUPER_ADMIN, "internal")] == [
            "eng", "sales"
        ]
