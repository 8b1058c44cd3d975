"""Tests for the directory path grammar"""

import pytest

from orgtree.core.directory.layout import Branch, DirectoryLayout
from orgtree.core.directory.paths import (ComponentKind, PathGrammar,
                                          escape_rdn_value, split_dn,
                                          unescape_rdn_value)
from orgtree.core.errors import InvalidPathError, ValidationError

ROOT_DN = "ou=groups,ou=internal,o=sreemat"
ACME_DN = f"ou=Acme,{ROOT_DN}"
RESEARCH_DN = f"ou=Research,ou=groups,{ACME_DN}"
ENG_DN = f"cn=eng,ou=groups,{ACME_DN}"


@pytest.fixture
def root(grammar):
    return grammar.branch_root(Branch.INTERNAL)


@pytest.fixture
def acme(grammar, root):
    return grammar.build_org_path(root, "Acme")


@pytest.fixture
def research(grammar, acme):
    return grammar.build_sub_org_path(acme, "Research")


@pytest.fixture
def eng(grammar, acme):
    return grammar.build_group_path(acme, "eng")


class TestBuilders:
    """Test building paths from structured names"""

    def test_anchors(self, grammar):
        """Test fixed branch anchors"""
        assert str(grammar.suffix_path()) == "o=sreemat"
        assert str(grammar.branch_path(Branch.EXTERNAL)) == "ou=external,o=sreemat"
        assert str(grammar.branch_root(Branch.INTERNAL)) == ROOT_DN
        assert (
            str(grammar.super_admin_group_path(Branch.INTERNAL))
            == f"cn=SuperAdministrators,{ROOT_DN}"
        )

    def test_organization_paths(self, acme, research):
        """Test top-level and nested organization paths"""
        assert str(acme) == ACME_DN
        assert acme.kind == ComponentKind.ORGANIZATION
        assert str(research) == RESEARCH_DN
        assert research.kind == ComponentKind.ORGANIZATION

    def test_group_and_admin_paths(self, grammar, acme, eng):
        """Test group, admin group and member reference paths"""
        assert str(eng) == ENG_DN
        assert eng.kind == ComponentKind.GROUP
        assert str(grammar.domain_admin_group_path(acme)) == f"cn=DomainAdministrator,{ACME_DN}"
        assert str(grammar.group_admin_group_path(eng)) == f"cn=GroupAdministrator,{ENG_DN}"

        member = grammar.member_reference(eng, "carol")
        assert str(member) == f"uid=carol,{ENG_DN}"
        assert member.kind == ComponentKind.PRINCIPAL

    def test_org_requires_groups_container(self, grammar, acme):
        """Test organizations cannot be appended to an organization directly"""
        with pytest.raises(InvalidPathError):
            grammar.build_org_path(acme, "Nested")

    def test_blank_names_rejected(self, grammar, root, acme):
        """Test empty names fail validation"""
        with pytest.raises(ValidationError):
            grammar.build_org_path(root, "   ")
        with pytest.raises(ValidationError):
            grammar.build_group_path(acme, "")
        with pytest.raises(ValidationError):
            grammar.member_reference(grammar.build_group_path(acme, "eng"), "")

    def test_names_are_trimmed(self, grammar, root):
        assert grammar.build_org_path(root, "  Acme ").name == "Acme"

    def test_admin_group_placement(self, grammar, acme, eng):
        """Test reserved admin groups only go where they belong"""
        with pytest.raises(InvalidPathError):
            grammar.build_admin_group_path(acme, "GroupAdministrator")
        with pytest.raises(InvalidPathError):
            grammar.build_admin_group_path(eng, "DomainAdministrator")

        domain_admins = grammar.domain_admin_group_path(acme)
        with pytest.raises(InvalidPathError):
            grammar.group_admin_group_path(domain_admins)

    def test_members_only_in_groups(self, grammar, acme):
        with pytest.raises(InvalidPathError):
            grammar.member_reference(acme, "alice")

    def test_special_characters_escaped(self, grammar, root):
        """Test names with DN special characters"""
        org = grammar.build_org_path(root, "R&D, Inc")
        assert str(org) == f"ou=R&D\\, Inc,{ROOT_DN}"
        assert grammar.parse(str(org)).name == "R&D, Inc"


class TestParsing:
    """Test parsing DN strings against the grammar"""

    def test_parse_matches_builders(self, grammar, root, acme, research, eng):
        for path in (root, acme, research, eng, grammar.group_admin_group_path(eng)):
            assert grammar.parse(str(path)) == path

    def test_parse_kinds(self, grammar):
        assert grammar.parse("ou=internal,o=sreemat").kind == ComponentKind.BRANCH
        assert grammar.parse(ROOT_DN).kind == ComponentKind.GROUPS_CONTAINER
        assert grammar.parse(f"uid=carol,{ENG_DN}").kind == ComponentKind.PRINCIPAL
        assert grammar.parse(f"cn=SuperAdministrators,{ROOT_DN}").kind == ComponentKind.GROUP

    def test_parse_is_case_insensitive(self, grammar, acme):
        parsed = grammar.parse("OU=acme,OU=Groups,ou=INTERNAL,O=SreeMat")
        assert parsed == acme
        assert parsed.branch == Branch.INTERNAL

    @pytest.mark.parametrize(
        "dn",
        [
            "ou=Acme,ou=groups,ou=internal,o=other",
            "ou=partners,o=sreemat",
            "ou=Acme,ou=internal,o=sreemat",
            f"cn=eng,{ACME_DN}",
            f"ou=Research,{ACME_DN}",
            f"cn=GroupAdministrator,cn=DomainAdministrator,{ACME_DN}",
            f"cn=nested,{ENG_DN}",
            "",
        ],
    )
    def test_parse_rejects_malformed(self, grammar, dn):
        """Test DNs outside the grammar"""
        with pytest.raises(InvalidPathError):
            grammar.parse(dn)

    def test_try_parse(self, grammar, acme):
        assert grammar.try_parse(ACME_DN) == acme
        assert grammar.try_parse("cn=nobody,o=elsewhere") is None

    def test_custom_layout(self):
        """Test a layout with a different suffix and container name"""
        grammar = PathGrammar(
            DirectoryLayout(base_dn="dc=example,dc=com", groups_container_name="units")
        )
        org = grammar.build_org_path(grammar.branch_root(Branch.EXTERNAL), "Partner")
        assert str(org) == "ou=Partner,ou=units,ou=external,dc=example,dc=com"
        assert grammar.parse(str(org)) == org


class TestExtraction:
    """Test navigation helpers"""

    def test_parent_organization(self, grammar, acme, research):
        assert grammar.parent_organization(research) == acme
        assert grammar.parent_organization(acme) is None

    def test_parent_organization_requires_org(self, grammar, eng):
        with pytest.raises(InvalidPathError):
            grammar.parent_organization(eng)

    def test_ancestors_nearest_first(self, grammar, acme, research):
        lab = grammar.build_sub_org_path(research, "Lab")
        assert list(grammar.iter_ancestor_organizations(lab)) == [research, acme]
        assert list(grammar.iter_ancestor_organizations(acme)) == []

    def test_organization_of_group(self, grammar, acme, eng):
        assert grammar.organization_of(eng) == acme
        with pytest.raises(InvalidPathError):
            grammar.organization_of(acme)

    def test_extract_name(self, grammar, root, acme, eng):
        assert grammar.extract_name(acme) == "Acme"
        assert grammar.extract_name(eng) == "eng"
        assert grammar.extract_name(root) is None

    def test_principal_of(self, grammar):
        """Test reading the uid out of member values"""
        assert grammar.principal_of(f"uid=alice,cn=DomainAdministrator,{ACME_DN}") == "alice"
        assert grammar.principal_of("UID=Bob,o=sreemat") == "Bob"
        assert grammar.principal_of("") is None
        assert grammar.principal_of("cn=someone,o=sreemat") is None
        assert grammar.principal_of("not a dn") is None

    def test_reserved_groups(self, grammar, acme, eng):
        assert grammar.is_reserved_group(grammar.domain_admin_group_path(acme))
        assert grammar.is_reserved_group(grammar.group_admin_group_path(eng))
        assert not grammar.is_reserved_group(eng)

    def test_structure_navigation(self, grammar, root, acme, research):
        """Test parent, branch root and descendant checks"""
        assert root.is_branch_root
        assert root.parent is None
        assert acme.parent == root
        assert research.is_descendant_of(acme)
        assert not acme.is_descendant_of(research)
        assert not acme.is_descendant_of(acme)
        assert acme.branch == Branch.INTERNAL

    def test_paths_hash_case_insensitively(self, grammar, acme):
        other = grammar.build_org_path(grammar.branch_root(Branch.INTERNAL), "ACME")
        assert other == acme
        assert len({acme, other}) == 1


class TestDnHelpers:
    """Test low-level DN string helpers"""

    def test_escape_rdn_value(self):
        assert escape_rdn_value("a,b") == "a\\,b"
        assert escape_rdn_value(" lead") == "\\ lead"
        assert escape_rdn_value("trail ") == "trail\\ "
        assert escape_rdn_value("#hash") == "\\#hash"
        assert escape_rdn_value("plain") == "plain"

    def test_unescape_rdn_value(self):
        assert unescape_rdn_value("a\\,b") == "a,b"
        assert unescape_rdn_value("caf\\C3\\A9") == "café"
        with pytest.raises(ValueError):
            unescape_rdn_value("broken\\")

    def test_split_dn(self):
        assert split_dn("cn=eng, ou=Acme ,o=sreemat") == [
            ("cn", "eng"), ("ou", "Acme"), ("o", "sreemat")
        ]
        assert split_dn("ou=a\\,b,o=x") == [("ou", "a,b"), ("o", "x")]

    @pytest.mark.parametrize("dn", ["", "   ", "noequals,o=x", "ou=a+cn=b,o=x", "ou=,o=x"])
    def test_split_dn_rejects(self, dn):
        with pytest.raises(InvalidPathError):
            split_dn(dn)
