"""
Rich terminal output utilities for the undecorate CLI.

Provides panels, tables and highlighted source output. When rich output is
disabled (``--no-rich``) everything is written with plain ``print``.
"""

from typing import Any, Dict, List, Optional, Union

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table


class RichOutputManager:
    """Manages rich terminal output with fallback to plain text."""

    def __init__(self, use_rich: bool = True):
        """Initialize the output manager."""
        self.use_rich = use_rich
        self.console = Console() if use_rich else None

    def _print(self, text: str = "") -> None:
        if self.use_rich:
            self.console.print(text)
        else:
            print(text)

    def print_header(self, title: str, subtitle: Optional[str] = None) -> None:
        """Print a formatted header."""
        if self.use_rich:
            if subtitle:
                header_text = f"[bold blue]{escape(title)}[/bold blue]\n[dim]{escape(subtitle)}[/dim]"
            else:
                header_text = f"[bold blue]{escape(title)}[/bold blue]"

            self.console.print(Panel(header_text, border_style="blue", padding=(1, 2)))
        else:
            print(f"\n=== {title} ===")
            if subtitle:
                print(subtitle)
            print()

    def print_section(self, title: str) -> None:
        """Print a section separator."""
        if self.use_rich:
            self.console.rule(f"[bold]{escape(title)}[/bold]", style="blue")
        else:
            print(f"\n--- {title} ---")

    def print_success(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[green]✓[/green] {escape(message)}")
        else:
            print(f"✓ {message}")

    def print_warning(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")
        else:
            print(f"⚠ {message}")

    def print_error(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[red]✗[/red] {escape(message)}")
        else:
            print(f"✗ {message}")

    def print_info(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[blue]ℹ[/blue] {escape(message)}")
        else:
            print(f"ℹ {message}")

    def create_table(self, title: str, columns: List[str]) -> Union[Table, Dict[str, Any]]:
        """Create a rich table, or a plain dict-based table when rich is off."""
        if self.use_rich:
            table = Table(title=title, show_header=True, header_style="bold blue")
            for column in columns:
                table.add_column(column)
            return table
        return {"title": title, "columns": columns, "rows": []}

    def add_table_row(self, table: Union[Table, Dict[str, Any]], *values) -> None:
        """Add a row to the table."""
        if isinstance(table, Table):
            table.add_row(*[escape(str(v)) for v in values])
        else:
            table["rows"].append(values)

    def print_table(self, table: Union[Table, Dict[str, Any]]) -> None:
        """Print the table."""
        if isinstance(table, Table):
            self.console.print(table)
            return

        print(f"\n{table['title']}")
        print("-" * len(table["title"]))

        header = " | ".join(table["columns"])
        print(header)
        print("-" * len(header))

        for row in table["rows"]:
            print(" | ".join(str(v) for v in row))
        print()

    def print_code(self, code: str, language: str = "typescript", title: Optional[str] = None) -> None:
        """Print code with syntax highlighting."""
        if title:
            self.print_section(title)

        if self.use_rich:
            self.console.print(Syntax(code, language, theme="monokai", line_numbers=True))
        else:
            print(code)


rich_output = RichOutputManager()


def set_rich_enabled(enabled: bool) -> None:
    """Enable or disable rich output globally."""
    global rich_output
    rich_output = RichOutputManager(use_rich=enabled)


def get_rich_output() -> RichOutputManager:
    """Get the global rich output manager."""
    return rich_output
