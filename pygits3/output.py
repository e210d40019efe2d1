"""Console output formatting for the CLI."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputFormatter:
    """Formats CLI output as rich text or JSON."""

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress everything except errors
            console: Console for regular output
            err_console: Console for warnings and errors
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    def print(self, message: str = "") -> None:
        if self.quiet or self.json_output:
            return
        self.console.print(escape(message), highlight=False)

    def info(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self.console.print(escape(message), highlight=False)

    def success(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self.console.print(f"[green]{escape(message)}[/green]", highlight=False)

    def warning(self, message: str) -> None:
        if self.quiet:
            return
        self.err_console.print(
            f"[yellow]{escape(message)}[/yellow]", highlight=False
        )

    def error(self, message: str) -> None:
        self.err_console.print(
            f"[red]Error: {escape(message)}[/red]", highlight=False
        )

    def output_json(self, data: Any) -> None:
        """Print data as JSON regardless of the quiet flag."""
        self.console.print_json(json.dumps(data, default=str))

    def print_summary(self, title: str, rows: list[tuple[str, str]]) -> None:
        """Print a two-column summary table.

        Args:
            title: Table title
            rows: List of (label, value) tuples
        """
        if self.json_output:
            self.output_json({label: value for label, value in rows})
            return
        if self.quiet:
            return

        # Keep the title on one line
        table = Table(title=title, show_header=False, min_width=len(title) + 4)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        for label, value in rows:
            table.add_row(label, value)
        self.console.print(table)
