"""Tests for the in-memory directory store"""

import pytest

from orgtree.core.errors import (AbsentValueError, AlreadyExistsError,
                                 DuplicateValueError, InvalidPathError,
                                 NotFoundError)
from orgtree.infrastructure.directory.memory import InMemoryDirectoryStore
from orgtree.infrastructure.directory.store import SearchScope

BASE = "o=sreemat"


@pytest.fixture
def empty_store():
    directory = InMemoryDirectoryStore(BASE)
    directory.add_entry("ou=internal,o=sreemat", {"objectClass": ["organizationalUnit"], "ou": ["internal"]})
    directory.add_entry("ou=a,ou=internal,o=sreemat", {"objectClass": ["organizationalUnit"], "ou": ["a"]})
    directory.add_entry(
        "cn=g,ou=a,ou=internal,o=sreemat",
        {"objectClass": ["groupOfNames"], "cn": ["g"], "member": [""]},
    )
    return directory


class TestEntries:
    """Test adding and reading entries"""

    def test_suffix_created(self):
        directory = InMemoryDirectoryStore(BASE)
        assert directory.entry_exists(BASE)
        assert len(directory) == 1

    def test_read_is_case_insensitive(self, empty_store):
        entry = empty_store.read_entry("OU=A,ou=Internal,O=SREEMAT")
        assert entry is not None
        assert entry.dn == "ou=a,ou=internal,o=sreemat"
        assert entry.get("OU") == ["a"]

    def test_read_missing(self, empty_store):
        assert empty_store.read_entry("ou=missing,o=sreemat") is None
        assert empty_store.read_entry("garbage") is None

    def test_add_existing(self, empty_store):
        with pytest.raises(AlreadyExistsError):
            empty_store.add_entry("ou=A,ou=internal,o=sreemat", {"ou": ["A"]})

    def test_add_without_parent(self, empty_store):
        with pytest.raises(NotFoundError):
            empty_store.add_entry("ou=x,ou=missing,o=sreemat", {"ou": ["x"]})

    def test_add_unparseable(self, empty_store):
        with pytest.raises(InvalidPathError):
            empty_store.add_entry("not a dn", {})

    def test_returned_entries_are_copies(self, empty_store):
        """Test callers cannot mutate stored entries"""
        entry = empty_store.read_entry("cn=g,ou=a,ou=internal,o=sreemat")
        entry.attributes["member"].append("uid=x")
        assert empty_store.read_entry("cn=g,ou=a,ou=internal,o=sreemat").get("member") == [""]


class TestAttributeValues:
    """Test multi-valued attribute mutations"""

    GROUP = "cn=g,ou=a,ou=internal,o=sreemat"

    def test_add_and_remove_value(self, empty_store):
        empty_store.add_attribute_value(self.GROUP, "member", "uid=bob,o=sreemat")
        assert empty_store.read_entry(self.GROUP).get("member") == ["", "uid=bob,o=sreemat"]

        empty_store.remove_attribute_value(self.GROUP, "MEMBER", "UID=BOB,o=sreemat")
        assert empty_store.read_entry(self.GROUP).get("member") == [""]

    def test_duplicate_value(self, empty_store):
        empty_store.add_attribute_value(self.GROUP, "member", "uid=bob,o=sreemat")
        with pytest.raises(DuplicateValueError):
            empty_store.add_attribute_value(self.GROUP, "member", "uid=Bob,o=sreemat")

    def test_absent_value(self, empty_store):
        with pytest.raises(AbsentValueError):
            empty_store.remove_attribute_value(self.GROUP, "member", "uid=nobody,o=sreemat")

    def test_missing_entry(self, empty_store):
        with pytest.raises(NotFoundError):
            empty_store.add_attribute_value("cn=none,o=sreemat", "member", "x")
        with pytest.raises(NotFoundError):
            empty_store.remove_attribute_value("cn=none,o=sreemat", "member", "x")

    def test_removing_last_value_drops_attribute(self, empty_store):
        empty_store.remove_attribute_value(self.GROUP, "member", "")
        assert empty_store.read_entry(self.GROUP).get("member") == []


class TestSearch:
    """Test search scopes and object class filtering"""

    def test_scopes(self, empty_store):
        base = "ou=internal,o=sreemat"
        assert [e.dn for e in empty_store.search(base, SearchScope.BASE)] == [base]
        assert [e.dn for e in empty_store.search(base, SearchScope.ONE_LEVEL)] == [
            "ou=a,ou=internal,o=sreemat"
        ]
        assert [e.dn for e in empty_store.search(base, SearchScope.SUBTREE)] == [
            base,
            "ou=a,ou=internal,o=sreemat",
            "cn=g,ou=a,ou=internal,o=sreemat",
        ]

    def test_object_class_filter(self, empty_store):
        results = empty_store.search(BASE, SearchScope.SUBTREE, object_class="GROUPOFNAMES")
        assert [e.dn for e in results] == ["cn=g,ou=a,ou=internal,o=sreemat"]

    def test_missing_base(self, empty_store):
        assert empty_store.search("ou=missing,o=sreemat", SearchScope.SUBTREE) == []

    def test_ping(self, empty_store):
        assert empty_store.ping() is True
