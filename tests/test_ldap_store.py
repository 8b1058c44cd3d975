"""Tests for the ldap3-backed directory store"""

from types import SimpleNamespace

import pytest

ldap3 = pytest.importorskip("ldap3")

from ldap3.core.exceptions import LDAPBindError  # noqa: E402

from orgtree.core.config import Settings  # noqa: E402
from orgtree.core.errors import (AbsentValueError, AlreadyExistsError,  # noqa: E402
                                 DuplicateValueError, NotFoundError,
                                 StoreUnavailableError)
from orgtree.infrastructure.directory.factory import create_directory_store  # noqa: E402
from orgtree.infrastructure.directory.ldap_store import LdapDirectoryStore  # noqa: E402
from orgtree.infrastructure.directory.store import SearchScope  # noqa: E402

ORG_DN = "ou=Acme,ou=groups,ou=internal,o=sreemat"


class FakeConnection:
    """Stands in for ldap3.Connection and answers with scripted results"""

    def __init__(self, directory, server, user=None, password=None, auto_bind=False, receive_timeout=None):
        self.directory = directory
        self.user = user
        self.password = password
        self.auto_bind = auto_bind
        self.result = {}
        self.entries = []
        self.unbound = False
        directory.connections.append(self)

    def _answer(self, call):
        self.directory.calls.append(call)
        code = self.directory.codes.pop(0) if self.directory.codes else 0
        self.result = {"result": code, "description": "scripted", "message": ""}
        return code == 0

    def search(self, search_base, search_filter, search_scope, attributes):
        self.entries = list(self.directory.entries)
        return self._answer(("search", search_base, search_filter, search_scope))

    def add(self, dn, attributes=None):
        return self._answer(("add", dn, attributes))

    def modify(self, dn, changes):
        return self._answer(("modify", dn, changes))

    def unbind(self):
        self.unbound = True


class FakeDirectory:
    def __init__(self):
        self.codes = []
        self.entries = []
        self.calls = []
        self.connections = []
        self.bind_error = None

    def connect(self, server, **kwargs):
        if self.bind_error is not None:
            raise self.bind_error
        return FakeConnection(self, server, **kwargs)


@pytest.fixture
def fake_directory(monkeypatch):
    directory = FakeDirectory()
    monkeypatch.setattr(ldap3, "Connection", directory.connect)
    return directory


@pytest.fixture
def ldap_store():
    return LdapDirectoryStore(
        host="ldap.example.com",
        port=389,
        bind_dn="cn=admin,o=sreemat",
        bind_password="secret",
    )


class TestSearch:
    """Test search and read translation"""

    def test_search_maps_entries(self, fake_directory, ldap_store):
        fake_directory.entries = [
            SimpleNamespace(
                entry_dn=ORG_DN,
                entry_attributes_as_dict={"objectClass": ["organizationalUnit"], "ou": "Acme"},
            )
        ]

        results = ldap_store.search("ou=groups,ou=internal,o=sreemat", SearchScope.ONE_LEVEL, "organizationalUnit")

        assert len(results) == 1
        assert results[0].dn == ORG_DN
        assert results[0].get("ou") == ["Acme"]
        _, base, search_filter, scope = fake_directory.calls[0]
        assert base == "ou=groups,ou=internal,o=sreemat"
        assert search_filter == "(objectClass=organizationalUnit)"
        assert scope == ldap3.LEVEL

    def test_connection_per_operation(self, fake_directory, ldap_store):
        """Test each primitive binds its own connection and unbinds it"""
        ldap_store.search(ORG_DN, SearchScope.BASE)
        ldap_store.search(ORG_DN, SearchScope.SUBTREE)

        assert len(fake_directory.connections) == 2
        assert all(conn.unbound for conn in fake_directory.connections)
        assert fake_directory.connections[0].user == "cn=admin,o=sreemat"
        assert fake_directory.connections[0].auto_bind is True

    def test_missing_base_is_empty(self, fake_directory, ldap_store):
        fake_directory.codes = [32]
        assert ldap_store.search(ORG_DN, SearchScope.SUBTREE) == []

    def test_read_entry(self, fake_directory, ldap_store):
        fake_directory.entries = [
            SimpleNamespace(entry_dn=ORG_DN, entry_attributes_as_dict={"member": [b"uid=a,o=sreemat"]})
        ]
        entry = ldap_store.read_entry(ORG_DN)
        assert entry.get("member") == ["uid=a,o=sreemat"]

        fake_directory.entries = []
        fake_directory.codes = [32]
        assert ldap_store.read_entry(ORG_DN) is None

    def test_protocol_failure(self, fake_directory, ldap_store):
        fake_directory.codes = [50]
        with pytest.raises(StoreUnavailableError):
            ldap_store.search(ORG_DN, SearchScope.BASE)


class TestMutations:
    """Test result code translation for adds and modifies"""

    def test_add_entry(self, fake_directory, ldap_store):
        ldap_store.add_entry(ORG_DN, {"objectClass": ["organizationalUnit"], "ou": ["Acme"]})
        assert fake_directory.calls[0][:2] == ("add", ORG_DN)

    @pytest.mark.parametrize(
        "code,error",
        [(68, AlreadyExistsError), (32, NotFoundError), (53, StoreUnavailableError)],
    )
    def test_add_entry_failures(self, fake_directory, ldap_store, code, error):
        fake_directory.codes = [code]
        with pytest.raises(error):
            ldap_store.add_entry(ORG_DN, {"ou": ["Acme"]})

    def test_add_attribute_value(self, fake_directory, ldap_store):
        ldap_store.add_attribute_value(ORG_DN, "member", "uid=bob,o=sreemat")
        _, dn, changes = fake_directory.calls[0]
        assert dn == ORG_DN
        assert changes == {"member": [(ldap3.MODIFY_ADD, ["uid=bob,o=sreemat"])]}

    def test_remove_attribute_value(self, fake_directory, ldap_store):
        ldap_store.remove_attribute_value(ORG_DN, "member", "uid=bob,o=sreemat")
        _, _, changes = fake_directory.calls[0]
        assert changes == {"member": [(ldap3.MODIFY_DELETE, ["uid=bob,o=sreemat"])]}

    def test_value_conflicts(self, fake_directory, ldap_store):
        fake_directory.codes = [20]
        with pytest.raises(DuplicateValueError):
            ldap_store.add_attribute_value(ORG_DN, "member", "uid=bob,o=sreemat")

        fake_directory.codes = [16]
        with pytest.raises(AbsentValueError):
            ldap_store.remove_attribute_value(ORG_DN, "member", "uid=bob,o=sreemat")

        fake_directory.codes = [32]
        with pytest.raises(NotFoundError):
            ldap_store.remove_attribute_value(ORG_DN, "member", "uid=bob,o=sreemat")


class TestAvailability:
    """Test connection failures"""

    def test_bind_failure(self, fake_directory, ldap_store):
        fake_directory.bind_error = LDAPBindError("invalid credentials")
        with pytest.raises(StoreUnavailableError) as exc_info:
            ldap_store.add_entry(ORG_DN, {"ou": ["Acme"]})
        assert exc_info.value.operation == "add"

    def test_ping(self, fake_directory, ldap_store):
        assert ldap_store.ping() is True
        fake_directory.bind_error = LDAPBindError("unreachable")
        assert ldap_store.ping() is False


class TestFactory:
    """Test backend selection"""

    def test_ldap_backend(self):
        store = create_directory_store(
            Settings(directory_backend="ldap", ldap_host="ldap.example.com", ldap_port=636, ldap_use_ssl=True)
        )
        assert isinstance(store, LdapDirectoryStore)
        assert store.host == "ldap.example.com"
        assert store.port == 636
