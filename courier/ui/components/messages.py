"""Status lines printed below the displayed table."""

from typing import Optional

from rich.console import Console
from rich.markup import escape

from courier.utils.console import get_console


class StatusMessage:
    """Simple status messages without panels.

    Also serves as the command bridge's status channel.
    """

    def __init__(self, console: Optional[Console] = None, verbose: bool = True):
        self.console = console or get_console()
        self.verbose = verbose

    def success(self, message: str) -> None:
        """Print success message."""
        self.console.print(f"[green]✓ {escape(message)}[/green]")

    def error(self, message: str) -> None:
        """Print error message."""
        self.console.print(f"[red]✗ {escape(message)}[/red]")

    def warning(self, message: str) -> None:
        """Print warning message."""
        self.console.print(f"[yellow]⚠ {escape(message)}[/yellow]")

    def info(self, message: str) -> None:
        """Print progress message."""
        if self.verbose:
            self.console.print(f"[dim]{escape(message)}[/dim]")
