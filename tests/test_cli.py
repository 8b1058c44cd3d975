"""Tests for the orgtree command line interface"""

import json

import pytest
import yaml
from fastapi.testclient import TestClient
from typer.testing import CliRunner

from orgtree.application.services.directory_admin_service import DirectoryAdminService
from orgtree.cli import __version__
from orgtree.cli.main import app
from orgtree.cli.utils.api_client import APIClient
from orgtree.core.directory.layout import Branch
from orgtree.infrastructure.directory.memory import InMemoryDirectoryStore
from orgtree.main import create_app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "cli.yml"


@pytest.fixture
def cli(monkeypatch, config_file, admin_service, tree):
    """Invoke the CLI against the API served in-process"""
    api = TestClient(create_app(admin_service))

    def api_client(base_url, uid=None, debug=False):
        return APIClient(base_url, uid=uid, debug=debug, http_client=api)

    monkeypatch.setattr("orgtree.cli.utils.context.APIClient", api_client)
    monkeypatch.setenv("ORGTREE_API_ENDPOINT", "http://testserver")
    for name in ("ORGTREE_UID", "ORGTREE_OUTPUT_FORMAT", "ORGTREE_DEFAULT_BRANCH"):
        monkeypatch.delenv(name, raising=False)

    def invoke(*args):
        return runner.invoke(app, ["--config", str(config_file), *args])

    return invoke


def json_output(result):
    return json.loads(result.output)


class TestGlobalOptions:
    """Test top-level options"""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"OrgTree CLI v{__version__}" in result.output

    def test_requires_acting_principal(self, cli):
        result = cli("org", "list")
        assert result.exit_code == 1
        assert "No acting principal" in result.output


class TestOrganizationCommands:
    """Test org subcommands"""

    def test_list(self, cli):
        result = cli("--as", "alice", "-o", "json", "org", "list")
        assert result.exit_code == 0
        assert [org["name"] for org in json_output(result)] == ["Acme", "Research"]

    def test_list_nested_from_anchor(self, cli):
        result = cli("--as", "root", "-o", "json", "org", "list", "--name", "Acme", "--nested")
        assert [org["name"] for org in json_output(result)] == ["Acme", "Research", "Lab"]

    def test_list_table(self, cli):
        result = cli("--as", "gina", "org", "list")
        assert result.exit_code == 0
        assert "Globex" in result.output

    def test_create(self, cli):
        result = cli("--as", "root", "org", "create", "Initech")
        assert result.exit_code == 0
        assert "Organization 'Initech' created successfully" in result.output

    def test_create_forbidden(self, cli):
        result = cli("--as", "alice", "org", "create", "Initech")
        assert result.exit_code == 1
        assert "Not allowed to create organization" in result.output

    def test_create_duplicate(self, cli):
        result = cli("--as", "root", "org", "create", "Acme")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_create_sub(self, cli):
        result = cli("--as", "rita", "org", "create-sub", "Research", "Field")
        assert result.exit_code == 0
        assert "created under 'Research'" in result.output

    def test_admins(self, cli):
        """Test adding, listing and removing organization admins"""
        result = cli("--as", "alice", "org", "add-admin", "Acme", "ann")
        assert result.exit_code == 0

        result = cli("--as", "ann", "-o", "json", "org", "admins", "Acme")
        assert json_output(result) == ["alice", "ann"]

        result = cli("--as", "ann", "org", "remove-admin", "Acme", "alice")
        assert result.exit_code == 0
        assert "no longer an administrator" in result.output

    def test_reconcile(self, cli):
        result = cli("--as", "alice", "org", "reconcile", "Acme")
        assert result.exit_code == 0
        assert "Organization 'Acme' is complete" in result.output

    def test_default_branch_from_environment(self, cli, monkeypatch):
        monkeypatch.setenv("ORGTREE_DEFAULT_BRANCH", "external")
        result = cli("--as", "root", "-o", "json", "org", "list")
        assert json_output(result) == []


class TestGroupCommands:
    """Test group subcommands"""

    def test_list(self, cli):
        result = cli("--as", "bob", "-o", "json", "group", "list")
        assert [group["name"] for group in json_output(result)] == ["eng"]

    def test_show(self, cli):
        result = cli("--as", "alice", "-o", "json", "group", "show", "Acme", "eng")
        assert json_output(result)["organization"] == "Acme"

        result = cli("--as", "alice", "group", "show", "Acme", "ghost")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_create(self, cli):
        result = cli("--as", "alice", "group", "create", "Acme", "qa")
        assert result.exit_code == 0
        assert "Group 'qa' created in 'Acme'" in result.output

        result = cli("--as", "alice", "group", "create", "Acme", "qa")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_members(self, cli):
        """Test member management is limited to the group administrator"""
        result = cli("--as", "alice", "group", "add-member", "Acme", "eng", "dave")
        assert result.exit_code == 1
        assert "Not allowed to add group member" in result.output

        result = cli("--as", "bob", "group", "add-member", "Acme", "eng", "dave")
        assert result.exit_code == 0

        result = cli("--as", "bob", "-o", "json", "group", "members", "Acme", "eng")
        assert json_output(result) == ["carol", "dave"]

        result = cli("--as", "bob", "group", "remove-member", "Acme", "eng", "erin")
        assert result.exit_code == 1
        assert "is not a member" in result.output

    def test_admins(self, cli):
        result = cli("--as", "gina", "group", "add-admin", "Globex", "sales", "sam")
        assert result.exit_code == 0

        result = cli("--as", "sam", "-o", "json", "group", "admins", "Globex", "sales")
        assert json_output(result) == ["sam"]

        result = cli("--as", "sam", "group", "remove-admin", "Globex", "sales", "sam")
        assert result.exit_code == 0

    def test_reconcile(self, cli):
        result = cli("--as", "bob", "group", "reconcile", "Acme", "eng")
        assert result.exit_code == 0
        assert "Group 'eng' is complete" in result.output


class TestConfigCommand:
    """Test reading and writing the CLI configuration file"""

    def test_set_and_get(self, cli, config_file):
        result = cli("config", "set", "uid", "alice")
        assert result.exit_code == 0
        assert yaml.safe_load(config_file.read_text())["uid"] == "alice"

        result = cli("config", "get", "uid")
        assert result.output.strip() == "alice"

        result = cli("-o", "json", "org", "list")
        assert [org["name"] for org in json_output(result)] == ["Acme", "Research"]

    def test_unknown_action(self, cli):
        result = cli("config", "drop")
        assert result.exit_code == 1

    def test_list(self, cli):
        result = cli("config", "list")
        assert result.exit_code == 0
        assert "api_endpoint" in result.output


class TestInitCommand:
    """Test bootstrapping the directory"""

    @pytest.fixture
    def fresh_service(self, monkeypatch, layout):
        service = DirectoryAdminService(InMemoryDirectoryStore(layout.base_dn), layout)
        monkeypatch.setattr(
            "orgtree.cli.main.DirectoryAdminService.from_settings", lambda settings: service
        )
        return service

    def test_init(self, fresh_service, config_file):
        result = runner.invoke(
            app, ["--config", str(config_file), "-o", "json", "init", "--super-admin", "root"]
        )
        assert result.exit_code == 0
        created = json_output(result)
        assert "cn=SuperAdministrators,ou=groups,ou=internal,o=sreemat" in created
        assert "cn=SuperAdministrators,ou=groups,ou=external,o=sreemat" in created
        assert fresh_service.authorization.is_super_admin("root", Branch.INTERNAL)

    def test_init_twice(self, fresh_service, config_file):
        args = ["--config", str(config_file), "init", "--super-admin", "root"]
        runner.invoke(app, args)
        result = runner.invoke(app, args)
        assert result.exit_code == 0
        assert "Directory already initialized" in result.output

    def test_init_invalid_branch(self, fresh_service, config_file):
        result = runner.invoke(app, ["--config", str(config_file), "init", "--branch", "partners"])
        assert result.exit_code == 1
        assert "Bootstrap failed" in result.output
