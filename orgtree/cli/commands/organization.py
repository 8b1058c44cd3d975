"""Organization management commands."""

from typing import Optional

import typer

from orgtree.cli.utils.api_client import APIError
from orgtree.cli.utils.context import CLIContext

app = typer.Typer(help="Manage organizations")

ORG_COLUMNS = ["name", "parent", "branch", "dn"]


BranchOption = typer.Option(
    None, "--branch", "-b", help="Branch: internal or external (default from config)"
)


@app.command("list")
def list_organizations(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Anchor organization to list from"
    ),
    nested: bool = typer.Option(False, "--nested", help="Include the whole subtree"),
    branch: Optional[str] = BranchOption,
    no_headers: bool = typer.Option(False, "--no-headers", help="Hide table headers"),
):
    """
    List organizations visible to the acting principal.

    Example:
        orgtree --as alice org list --name Acme --nested
    """
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            organizations = client.list_organizations(
                cli_ctx.branch(branch), name=name, nested=nested
            )
    except APIError as e:
        cli_ctx.fail("list organizations", e)

    cli_ctx.formatter.print_list(
        organizations,
        columns=ORG_COLUMNS,
        title="Organizations",
        no_headers=no_headers,
    )


@app.command("create")
def create_organization(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Organization name"),
    branch: Optional[str] = BranchOption,
):
    """
    Create a top-level organization (super administrators only).

    Example:
        orgtree --as root org create Acme --branch external
    """
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            organization = client.create_organization(cli_ctx.branch(branch), name)
    except APIError as e:
        if e.status_code == 409:
            cli_ctx.formatter.print_error(f"Organization '{name}' already exists")
            raise typer.Exit(1)
        cli_ctx.fail("create organization", e)

    cli_ctx.formatter.print_success(f"Organization '{name}' created successfully")
    if cli_ctx.debug:
        cli_ctx.formatter.print_detail(organization, title="Organization Details")


@app.command("create-sub")
def create_sub_organization(
    ctx: typer.Context,
    parent: str = typer.Argument(..., help="Parent organization name"),
    name: str = typer.Argument(..., help="Sub-organization name"),
    branch: Optional[str] = BranchOption,
):
    """
    Create an organization nested under an existing one.

    Example:
        orgtree --as alice org create-sub Acme Research
    """
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            organization = client.create_sub_organization(
                cli_ctx.branch(branch), parent, name
            )
    except APIError as e:
        if e.status_code == 409:
            cli_ctx.formatter.print_error(
                f"Organization '{name}' already exists under '{parent}'"
            )
            raise typer.Exit(1)
        cli_ctx.fail("create sub-organization", e)

    cli_ctx.formatter.print_success(f"Sub-organization '{name}' created under '{parent}'")
    if cli_ctx.debug:
        cli_ctx.formatter.print_detail(organization, title="Organization Details")


@app.command("admins")
def list_org_admins(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Organization name"),
    branch: Optional[str] = BranchOption,
):
    """List the administrators of an organization."""
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            admins = client.list_org_admins(cli_ctx.branch(branch), org)
    except APIError as e:
        cli_ctx.fail("list organization admins", e)

    cli_ctx.formatter.print_values(admins, column="uid", title=f"Administrators of {org}")


@app.command("add-admin")
def add_org_admin(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Organization name"),
    uid: str = typer.Argument(..., help="Principal to make administrator"),
    branch: Optional[str] = BranchOption,
):
    """
    Make a principal administrator of an organization.

    Example:
        orgtree --as root org add-admin Acme alice
    """
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            client.add_org_admin(cli_ctx.branch(branch), org, uid)
    except APIError as e:
        cli_ctx.fail("add organization admin", e)

    cli_ctx.formatter.print_success(f"'{uid}' is now an administrator of '{org}'")


@app.command("remove-admin")
def remove_org_admin(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Organization name"),
    uid: str = typer.Argument(..., help="Administrator to remove"),
    branch: Optional[str] = BranchOption,
):
    """Remove an administrator from an organization."""
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            client.remove_org_admin(cli_ctx.branch(branch), org, uid)
    except APIError as e:
        cli_ctx.fail("remove organization admin", e)

    cli_ctx.formatter.print_success(f"'{uid}' is no longer an administrator of '{org}'")


@app.command("reconcile")
def reconcile_organization(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Organization name"),
    branch: Optional[str] = BranchOption,
):
    """
    Re-create the groups container and admin group of an organization.

    Use after a creation that failed part way.
    """
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            result = client.reconcile_organization(cli_ctx.branch(branch), org)
    except APIError as e:
        cli_ctx.fail("reconcile organization", e)

    if result["created"]:
        cli_ctx.formatter.print_values(result["created"], column="dn", title="Created entries")
    else:
        cli_ctx.formatter.print_success(f"Organization '{org}' is complete")
