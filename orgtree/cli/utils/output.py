"""Output formatting utilities for CLI."""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console
from rich.table import Table


class OutputFormat(Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


class OutputFormatter:
    """Handle output formatting for different formats."""

    def __init__(self, format_type: str = "table", console: Optional[Console] = None):
        """
        Initialize output formatter.

        Args:
            format_type: Output format (table, json, yaml)
            console: Console to write to
        """
        self.console = console or Console()
        try:
            self.format = OutputFormat(format_type.lower())
        except ValueError:
            self.format = OutputFormat.TABLE

    def _print_raw(self, text: str):
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def _dump(self, data: Any) -> bool:
        """Write data as JSON or YAML; False when the format is a table."""
        if self.format == OutputFormat.JSON:
            self._print_raw(json.dumps(data, indent=2, default=str))
            return True
        if self.format == OutputFormat.YAML:
            self._print_raw(yaml.safe_dump(data, default_flow_style=False).rstrip())
            return True
        return False

    def print_list(
        self,
        items: List[Dict[str, Any]],
        columns: Optional[List[str]] = None,
        title: Optional[str] = None,
        no_headers: bool = False,
    ):
        """
        Print a list of items.

        Args:
            items: List of items to print
            columns: Column names to display (for table format)
            title: Table title (for table format)
            no_headers: Whether to hide headers (for table format)
        """
        if self._dump(items):
            return

        if not items:
            self.console.print("[dim]No items found[/dim]")
            return

        if not columns:
            columns = list(items[0].keys())

        table = Table(title=title, show_header=not no_headers)

        for col in columns:
            table.add_column(col.replace("_", " ").title())

        for item in items:
            row = []
            for col in columns:
                value = item.get(col, "")
                if value is None:
                    value = "[dim]-[/dim]"
                elif isinstance(value, bool):
                    value = "[green]✓[/green]" if value else "[red]✗[/red]"
                else:
                    value = str(value)
                row.append(value)
            table.add_row(*row)

        self.console.print(table)

    def print_values(self, values: List[str], column: str, title: Optional[str] = None):
        """Print a flat list of strings such as principal uids."""
        if self._dump(values):
            return
        self.print_list([{column: value} for value in values], columns=[column], title=title)

    def print_detail(
        self,
        item: Dict[str, Any],
        title: Optional[str] = None,
    ):
        """
        Print detailed view of a single item.

        Args:
            item: Item to print
            title: Optional title
        """
        if self._dump(item):
            return

        if title:
            self.console.print(f"[bold]{title}[/bold]\n")

        for key, value in item.items():
            formatted_key = key.replace("_", " ").title()

            if value is None:
                formatted_value = "[dim]Not set[/dim]"
            elif isinstance(value, bool):
                formatted_value = "[green]Yes[/green]" if value else "[red]No[/red]"
            elif isinstance(value, (list, dict)):
                formatted_value = json.dumps(value, indent=2)
            else:
                formatted_value = str(value)

            self.console.print(f"[cyan]{formatted_key}:[/cyan] {formatted_value}")

    def print_success(self, message: str):
        """Print success message."""
        if not self._dump({"status": "success", "message": message}):
            self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str):
        """Print error message."""
        if not self._dump({"status": "error", "message": message}):
            self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str):
        """Print warning message."""
        if not self._dump({"status": "warning", "message": message}):
            self.console.print(f"[yellow]⚠[/yellow] {message}")
