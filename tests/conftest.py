"""Pytest configuration and fixtures"""

from typing import Dict

import pytest
from fastapi.testclient import TestClient

from orgtree.application.services.directory_admin_service import DirectoryAdminService
from orgtree.core.authorization.service import AuthorizationService
from orgtree.core.directory.layout import Branch, DirectoryLayout
from orgtree.core.directory.paths import PathGrammar
from orgtree.core.services.bootstrap import DirectoryBootstrapper
from orgtree.core.services.group import GroupService
from orgtree.core.services.lookup import DirectoryLookup
from orgtree.core.services.organization import OrganizationService
from orgtree.core.services.visibility import VisibilityService
from orgtree.infrastructure.directory.memory import InMemoryDirectoryStore
from orgtree.infrastructure.logging import setup_logging
from orgtree.main import create_app

SUPER_ADMIN = "root"


@pytest.fixture(autouse=True)
def quiet_logging():
    """Route structured logs to stderr at WARNING for every test"""
    setup_logging(log_level="WARNING", log_format="console")


@pytest.fixture
def layout() -> DirectoryLayout:
    """Default directory layout rooted at o=sreemat"""
    return DirectoryLayout()


@pytest.fixture
def grammar(layout: DirectoryLayout) -> PathGrammar:
    return PathGrammar(layout)


@pytest.fixture
def store(layout: DirectoryLayout, grammar: PathGrammar) -> InMemoryDirectoryStore:
    """In-memory directory with both branches bootstrapped and 'root' as super admin"""
    directory = InMemoryDirectoryStore(layout.base_dn)
    bootstrapper = DirectoryBootstrapper(directory, grammar)
    for branch in Branch:
        bootstrapper.ensure_branch(branch, SUPER_ADMIN)
    return directory


@pytest.fixture
def lookup(store, grammar) -> DirectoryLookup:
    return DirectoryLookup(store, grammar)


@pytest.fixture
def authorization(store, grammar) -> AuthorizationService:
    return AuthorizationService(store, grammar)


@pytest.fixture
def visibility(lookup, authorization) -> VisibilityService:
    return VisibilityService(lookup, authorization)


@pytest.fixture
def organizations(store, grammar) -> OrganizationService:
    return OrganizationService(store, grammar)


@pytest.fixture
def groups(store, grammar) -> GroupService:
    return GroupService(store, grammar)


@pytest.fixture
def tree(grammar, organizations, groups) -> Dict[str, object]:
    """A small internal tree.

    Acme (admin alice)
      Research (admin rita)
        Lab
      group eng (group admin bob, member carol)
    Globex (admin gina)
      group sales
    """
    internal = Branch.INTERNAL
    acme = organizations.create_organization("Acme", internal)
    research = organizations.create_sub_organization("Research", acme)
    lab = organizations.create_sub_organization("Lab", research)
    globex = organizations.create_organization("Globex", internal)

    organizations.add_org_admin(acme, "alice")
    organizations.add_org_admin(research, "rita")
    organizations.add_org_admin(globex, "gina")

    eng = groups.create_group("eng", acme)
    groups.add_group_admin(eng, "bob")
    groups.add_group_member(eng, "carol")
    sales = groups.create_group("sales", globex)

    return {
        "acme": acme,
        "research": research,
        "lab": lab,
        "globex": globex,
        "eng": eng,
        "sales": sales,
    }


@pytest.fixture
def admin_service(store, layout) -> DirectoryAdminService:
    return DirectoryAdminService(store, layout)


@pytest.fixture
def client(admin_service) -> TestClient:
    """FastAPI test client over the in-memory directory"""
    return TestClient(create_app(admin_service))
