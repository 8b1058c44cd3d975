"""CLI context management."""

from dataclasses import dataclass
from typing import NoReturn, Optional

import typer
from rich.console import Console

from orgtree.cli.utils.api_client import APIClient, APIError
from orgtree.cli.utils.config import ConfigManager
from orgtree.cli.utils.output import OutputFormatter


@dataclass
class CLIContext:
    """Context object passed through CLI commands."""

    debug: bool
    config: ConfigManager
    formatter: OutputFormatter
    console: Console
    acting_uid: Optional[str] = None

    def fail(self, action: str, error: APIError) -> NoReturn:
        """Report a failed API call and exit with status 1."""
        if error.status_code == 401:
            self.formatter.print_error("No acting principal; pass --as <uid>")
        elif error.status_code == 403:
            self.formatter.print_error(f"Not allowed to {action}")
        else:
            self.formatter.print_error(f"Failed to {action}: {error}")
        raise typer.Exit(1)

    def branch(self, explicit: Optional[str] = None) -> str:
        """Branch given on the command line, else the configured default."""
        return explicit or self.config.get("default_branch", "internal")

    def get_api_client(self) -> APIClient:
        """
        Get configured API client.

        Returns:
            APIClient instance acting as the configured principal
        """
        api_endpoint = self.config.get("api_endpoint")
        uid = self.acting_uid or self.config.get("uid")

        if not api_endpoint:
            self.formatter.print_error("API endpoint not configured")
            self.console.print("Run: [cyan]orgtree config set api_endpoint <url>[/cyan]")
            raise typer.Exit(1)

        if not uid:
            self.formatter.print_error("No acting principal; pass --as <uid>")
            raise typer.Exit(1)

        return APIClient(
            base_url=api_endpoint,
            uid=uid,
            debug=self.debug,
        )
