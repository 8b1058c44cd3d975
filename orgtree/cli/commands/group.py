"""Group management commands."""

from typing import Optional

import typer

from orgtree.cli.utils.api_client import APIError
from orgtree.cli.utils.context import CLIContext

app = typer.Typer(help="Manage groups")

GROUP_COLUMNS = ["name", "organization", "branch", "dn"]

BranchOption = typer.Option(
    None, "--branch", "-b", help="Branch: internal or external (default from config)"
)


@app.command("list")
def list_groups(
    ctx: typer.Context,
    branch: Optional[str] = BranchOption,
    no_headers: bool = typer.Option(False, "--no-headers", help="Hide table headers"),
):
    """
    List groups visible to the acting principal.

    Example:
        orgtree --as alice group list
    """
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            groups = client.list_groups(cli_ctx.branch(branch))
    except APIError as e:
        cli_ctx.fail("list groups", e)

    cli_ctx.formatter.print_list(
        groups, columns=GROUP_COLUMNS, title="Groups", no_headers=no_headers
    )


@app.command("show")
def show_group(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Owning organization name"),
    name: str = typer.Argument(..., help="Group name"),
    branch: Optional[str] = BranchOption,
):
    """Show a group of an organization."""
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            group = client.get_group(cli_ctx.branch(branch), org, name)
    except APIError as e:
        if e.status_code == 404:
            cli_ctx.formatter.print_error(f"Group '{name}' not found in '{org}'")
            raise typer.Exit(1)
        cli_ctx.fail("get group", e)

    cli_ctx.formatter.print_detail(group, title=f"Group: {name}")


@app.command("create")
def create_group(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Owning organization name"),
    name: str = typer.Argument(..., help="Group name"),
    branch: Optional[str] = BranchOption,
):
    """
    Create a group with its administrator subgroup.

    Example:
        orgtree --as alice group create Acme engineering
    """
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            group = client.create_group(cli_ctx.branch(branch), org, name)
    except APIError as e:
        if e.status_code == 409:
            cli_ctx.formatter.print_error(f"Group '{name}' already exists in '{org}'")
            raise typer.Exit(1)
        cli_ctx.fail("create group", e)

    cli_ctx.formatter.print_success(f"Group '{name}' created in '{org}'")
    if cli_ctx.debug:
        cli_ctx.formatter.print_detail(group, title="Group Details")


@app.command("members")
def list_members(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Owning organization name"),
    name: str = typer.Argument(..., help="Group name"),
    branch: Optional[str] = BranchOption,
):
    """List the members of a group."""
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            members = client.list_group_members(cli_ctx.branch(branch), org, name)
    except APIError as e:
        cli_ctx.fail("list group members", e)

    cli_ctx.formatter.print_values(members, column="uid", title=f"Members of {name}")


@app.command("add-member")
def add_member(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Owning organization name"),
    name: str = typer.Argument(..., help="Group name"),
    uid: str = typer.Argument(..., help="Principal to add"),
    branch: Optional[str] = BranchOption,
):
    """
    Add a principal to a group (group administrators only).

    Example:
        orgtree --as bob group add-member Acme engineering carol
    """
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            client.add_group_member(cli_ctx.branch(branch), org, name, uid)
    except APIError as e:
        if e.status_code == 409:
            cli_ctx.formatter.print_warning(f"'{uid}' is already a member of '{name}'")
            raise typer.Exit(1)
        cli_ctx.fail("add group member", e)

    cli_ctx.formatter.print_success(f"'{uid}' added to group '{name}'")


@app.command("remove-member")
def remove_member(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Owning organization name"),
    name: str = typer.Argument(..., help="Group name"),
    uid: str = typer.Argument(..., help="Member to remove"),
    branch: Optional[str] = BranchOption,
):
    """Remove a principal from a group."""
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            client.remove_group_member(cli_ctx.branch(branch), org, name, uid)
    except APIError as e:
        if e.status_code == 409:
            cli_ctx.formatter.print_warning(f"'{uid}' is not a member of '{name}'")
            raise typer.Exit(1)
        cli_ctx.fail("remove group member", e)

    cli_ctx.formatter.print_success(f"'{uid}' removed from group '{name}'")


@app.command("admins")
def list_admins(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Owning organization name"),
    name: str = typer.Argument(..., help="Group name"),
    branch: Optional[str] = BranchOption,
):
    """List the administrators of a group."""
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            admins = client.list_group_admins(cli_ctx.branch(branch), org, name)
    except APIError as e:
        cli_ctx.fail("list group admins", e)

    cli_ctx.formatter.print_values(admins, column="uid", title=f"Administrators of {name}")


@app.command("add-admin")
def add_admin(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Owning organization name"),
    name: str = typer.Argument(..., help="Group name"),
    uid: str = typer.Argument(..., help="Principal to make group administrator"),
    branch: Optional[str] = BranchOption,
):
    """Make a principal administrator of a group."""
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            client.add_group_admin(cli_ctx.branch(branch), org, name, uid)
    except APIError as e:
        cli_ctx.fail("add group admin", e)

    cli_ctx.formatter.print_success(f"'{uid}' is now an administrator of group '{name}'")


@app.command("remove-admin")
def remove_admin(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Owning organization name"),
    name: str = typer.Argument(..., help="Group name"),
    uid: str = typer.Argument(..., help="Administrator to remove"),
    branch: Optional[str] = BranchOption,
):
    """Remove an administrator from a group."""
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            client.remove_group_admin(cli_ctx.branch(branch), org, name, uid)
    except APIError as e:
        cli_ctx.fail("remove group admin", e)

    cli_ctx.formatter.print_success(f"'{uid}' is no longer an administrator of group '{name}'")


@app.command("reconcile")
def reconcile_group(
    ctx: typer.Context,
    org: str = typer.Argument(..., help="Owning organization name"),
    name: str = typer.Argument(..., help="Group name"),
    branch: Optional[str] = BranchOption,
):
    """Re-create the administrator subgroup of a group if it is missing."""
    cli_ctx: CLIContext = ctx.obj

    try:
        with cli_ctx.get_api_client() as client:
            result = client.reconcile_group(cli_ctx.branch(branch), org, name)
    except APIError as e:
        cli_ctx.fail("reconcile group", e)

    if result["created"]:
        cli_ctx.formatter.print_values(result["created"], column="dn", title="Created entries")
    else:
        cli_ctx.formatter.print_success(f"Group '{name}' is complete")
