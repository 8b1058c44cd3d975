"""OrgTree management CLI."""

from pathlib import Path
from typing import List, Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

from orgtree.application.services.directory_admin_service import DirectoryAdminService
from orgtree.cli import __version__
from orgtree.cli.commands import group, organization
from orgtree.cli.utils.config import ConfigManager
from orgtree.cli.utils.context import CLIContext
from orgtree.cli.utils.output import OutputFormatter
from orgtree.core.config import settings
from orgtree.core.directory.layout import Branch
from orgtree.core.errors import OrgTreeError
from orgtree.infrastructure.logging import setup_logging

app = typer.Typer(
    name="orgtree",
    help="OrgTree CLI - administer organizations and groups in the directory",
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
    pretty_exceptions_enable=False,
)

console = Console()


def version_callback(value: bool):
    """Display version and exit."""
    if value:
        console.print(f"OrgTree CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug output",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: table, json, yaml",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    acting_uid: Optional[str] = typer.Option(
        None,
        "--as",
        help="Principal to act as (overrides the configured uid)",
    ),
):
    """
    OrgTree Management CLI

    Administer organizations, groups and their administrators through the
    OrgTree API. [cyan]orgtree init[/cyan] works on the directory directly.
    """
    config_manager = ConfigManager(config_file)
    formatter = OutputFormatter(
        output_format or config_manager.get("output_format", "table"), console=console
    )

    ctx.obj = CLIContext(
        debug=debug,
        config=config_manager,
        formatter=formatter,
        console=console,
        acting_uid=acting_uid,
    )

    if debug:
        console.print("[dim]Debug mode enabled[/dim]")


app.add_typer(organization.app, name="org", help="Manage organizations")
app.add_typer(group.app, name="group", help="Manage groups")


@app.command("init")
def init_command(
    ctx: typer.Context,
    super_admin: Optional[str] = typer.Option(
        None,
        "--super-admin",
        "-s",
        help="Principal to add to the super administrator group",
    ),
    branch: Optional[str] = typer.Option(
        None,
        "--branch",
        "-b",
        help="Only bootstrap this branch (default: both)",
    ),
):
    """
    Create the branch skeletons and super administrator groups.

    Connects to the directory configured through ORGTREE settings
    (environment or .env), not to the API.

    Example:
        orgtree init --super-admin root
    """
    cli_ctx: CLIContext = ctx.obj
    setup_logging(log_level="DEBUG" if cli_ctx.debug else "WARNING")

    branches: List[str] = [branch] if branch else [b.value for b in Branch]
    service = DirectoryAdminService.from_settings(settings)
    created: List[str] = []

    try:
        for name in branches:
            created.extend(service.bootstrap(name, super_admin))
    except OrgTreeError as e:
        cli_ctx.formatter.print_error(f"Bootstrap failed: {e.message}")
        raise typer.Exit(1)
    finally:
        service.cleanup()

    if created:
        cli_ctx.formatter.print_values(created, column="dn", title="Created entries")
    else:
        cli_ctx.formatter.print_success("Directory already initialized")


@app.command("config")
def config_command(
    ctx: typer.Context,
    action: str = typer.Argument(..., help="Action: get, set, list"),
    key: Optional[str] = typer.Argument(None, help="Configuration key"),
    value: Optional[str] = typer.Argument(None, help="Configuration value"),
):
    """
    Manage configuration settings.

    Examples:
        orgtree config list
        orgtree config get api_endpoint
        orgtree config set uid alice
    """
    cli_ctx: CLIContext = ctx.obj
    config = cli_ctx.config

    if action == "list":
        table = Table(title="Configuration Settings")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")

        for item_key, item_value in config.get_all().items():
            table.add_row(item_key, "[dim]-[/dim]" if item_value is None else str(item_value))

        console.print(table)

    elif action == "get":
        if not key:
            cli_ctx.formatter.print_error("Key is required for get action")
            raise typer.Exit(1)

        stored = config.get(key)
        if stored is not None:
            console.print(stored)
        else:
            cli_ctx.formatter.print_warning(f"Configuration key '{key}' not found")

    elif action == "set":
        if not key or value is None:
            cli_ctx.formatter.print_error("Both key and value are required for set action")
            raise typer.Exit(1)

        config.set(key, value)
        config.save()
        cli_ctx.formatter.print_success(f"Configuration updated: {key} = {value}")

    else:
        cli_ctx.formatter.print_error(f"Unknown action '{action}'. Use: get, set, or list")
        raise typer.Exit(1)


@app.command("doctor")
def doctor_command(ctx: typer.Context):
    """
    Diagnose CLI configuration and API connectivity.
    """
    cli_ctx: CLIContext = ctx.obj
    console.print("[bold]OrgTree CLI Doctor[/bold]\n")

    console.print("Configuration:")
    config_path = cli_ctx.config.config_path
    if config_path.exists():
        console.print(f"  [green]✓[/green] Configuration file found: {config_path}")
    else:
        console.print(f"  [yellow]⚠[/yellow] Configuration file not found: {config_path}")

    api_endpoint = cli_ctx.config.get("api_endpoint")
    if api_endpoint:
        console.print(f"  [green]✓[/green] API endpoint configured: {api_endpoint}")
        try:
            response = httpx.get(f"{api_endpoint.rstrip('/')}/ready", timeout=5.0)
        except httpx.HTTPError as e:
            console.print(f"  [red]✗[/red] Failed to connect to API: {e}")
        else:
            if response.status_code == 200:
                console.print("  [green]✓[/green] API is ready and the directory is reachable")
            else:
                console.print(f"  [red]✗[/red] API returned status {response.status_code}")
    else:
        console.print("  [yellow]⚠[/yellow] API endpoint not configured")

    uid = cli_ctx.acting_uid or cli_ctx.config.get("uid")
    if uid:
        console.print(f"  [green]✓[/green] Acting as: {uid}")
    else:
        console.print("  [yellow]⚠[/yellow] No acting principal. Run:")
        console.print("    [cyan]orgtree config set uid <uid>[/cyan]")


if __name__ == "__main__":
    app()
