"""Interactive shell for Courier."""

import argparse
import shlex
from typing import Any, Dict, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory
from prompt_toolkit.validation import ValidationError, Validator
from rich.align import Align
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from courier.features.mail import SessionController
from courier.utils.errors import BackendError, CourierError
from courier.utils.logging import get_logger
from courier.utils.paths import SHELL_HISTORY_PATH

from .cli_parser import setup_argument_parser
from .router import CommandRouter

logger = get_logger(__name__)

built_in_commands = {
    "help": "show this help message",
    "?": "show this help message",
    "exit": "exit the shell",
    "quit": "exit the shell",
    "reload": "reload configuration",
    "clear": "clear the screen",
}

# Session-wide options that the shell parser accepts but cannot apply.
STARTUP_OPTIONS = ("account", "mailbox", "config", "log_level", "picker")


def namespace_to_dict(ns) -> Dict[str, Any]:
    """Convert argparse Namespace to dictionary."""
    return {k: v for k, v in vars(ns).items() if v is not None}


def report_error(console: Console, error: CourierError) -> None:
    """Print a CourierError as status lines.

    Backend diagnostics already shown by the bridge are not repeated.
    """
    if isinstance(error, BackendError) and error.reported:
        return
    for line in error.lines:
        console.print(f"[red]✗ {escape(line)}[/red]")


class CommandValidator(Validator):
    """Validator for shell commands."""

    def __init__(self, all_commands: set) -> None:
        super().__init__()
        self.all_commands = all_commands

    def validate(self, document) -> None:
        text = document.text.strip()
        if not text:
            return

        cmd = text.split()[0]
        if cmd not in self.all_commands:
            raise ValidationError(message=f"Unknown command: {cmd}", cursor_position=0)


class CourierShell:
    """Interactive REPL over one mail session."""

    PROMPT = "courier > "

    def __init__(
        self,
        controller: SessionController,
        session: Optional[PromptSession] = None,
    ) -> None:
        self.controller = controller
        self.console = controller.console
        self.router = CommandRouter(controller)
        self.parser = setup_argument_parser(exit_on_error=False)
        self.mail_commands = self.router.get_available_commands()
        self.all_commands = set(built_in_commands).union(self.mail_commands)

        if session is None:
            SHELL_HISTORY_PATH.parent.mkdir(parents=True, exist_ok=True)
            session = PromptSession(
                history=FileHistory(str(SHELL_HISTORY_PATH)),
                auto_suggest=AutoSuggestFromHistory(),
                completer=WordCompleter(sorted(self.all_commands)),
                validator=CommandValidator(self.all_commands),
                validate_while_typing=False,
            )
        self.session = session

    def _print_help(self) -> None:
        table = Table(title="Courier Commands", expand=True, show_lines=False)
        table.add_column("Command", style="cyan", no_wrap=True)
        table.add_column("Description", style="magenta")
        for cmd, desc in {**self.mail_commands, **built_in_commands}.items():
            table.add_row(cmd, desc)

        self.console.print(table)
        self.console.print(
            "[dim]ROW is a line of the listing (first message is 1); "
            "RANGE is N or N-M.[/dim]"
        )

    def dispatch(self, command: str) -> bool:
        """Run one shell line.

        Returns:
            False if the shell should exit, True otherwise
        """
        command = command.strip()
        if not command:
            return True

        if command in {"help", "?"}:
            self._print_help()
            return True

        if command in {"exit", "quit"}:
            return False

        if command == "clear":
            self.console.clear()
            return True

        if command == "reload":
            try:
                self.controller.reload_config()
                self.console.print("[green]Configuration reloaded.[/green]")
            except CourierError as e:
                logger.error(f"Failed to reload configuration: {e}")
                report_error(self.console, e)
            return True

        try:
            ns = self.parser.parse_args(shlex.split(command))
        except SystemExit:
            return True
        except (argparse.ArgumentError, ValueError) as e:
            self.console.print(f"[red]Invalid command: {escape(str(e))}[/red]")
            return True

        if not ns.command:
            self.console.print("[red]Could not determine command name.[/red]")
            return True

        startup_only = [
            f"--{option.replace('_', '-')}"
            for option in STARTUP_OPTIONS
            if getattr(ns, option, None) is not None
        ]
        if startup_only:
            self.console.print(
                f"[red]{', '.join(startup_only)} only apply when starting courier; "
                "use the account and mailbox commands instead.[/red]"
            )
            return True

        args = namespace_to_dict(ns)
        try:
            self.router.route(ns.command, args)

        except CourierError as e:
            logger.warning(f"Command '{ns.command}' failed: {e}")
            report_error(self.console, e)

        except KeyboardInterrupt:
            logger.warning("Command cancelled by user")
            self.console.print("\n[yellow]Cancelled[/yellow]")

        except Exception as e:
            logger.error(f"Command '{ns.command}' failed", exc_info=True)
            self.console.print(f"[red]Command failed:[/red] {escape(str(e))}")

        return True

    def run(self) -> int:
        """Run the interactive shell until exit.

        Returns:
            Exit code
        """
        self.console.print(
            Panel(
                Align.center(
                    Text.from_markup(
                        "[bold cyan]Courier[/bold cyan]\n\n"
                        "Type [bold]help[/bold] or [bold]?[/bold] for a list of commands.\n"
                        "Type [bold]exit[/bold] or [bold]quit[/bold] to leave the shell.",
                        justify="center",
                    )
                ),
                border_style="dim cyan",
                padding=(1, 2),
            )
        )

        try:
            self.controller.start()
            self.controller.list_envelopes(propagate=False)
        except CourierError as e:
            report_error(self.console, e)

        while True:
            try:
                command = self.session.prompt(self.PROMPT)
            except EOFError:
                break
            except KeyboardInterrupt:
                continue

            if not self.dispatch(command):
                break

        self.controller.shutdown()
        self.console.print("[dim cyan]Goodbye![/dim cyan]")
        return 0
