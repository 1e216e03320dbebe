"""Main CLI entry point: one-shot commands or the interactive shell."""

from typing import List, Optional

from rich.console import Console

from courier.features.mail import SessionController
from courier.utils.config_manager import ConfigManager
from courier.utils.console import get_console
from courier.utils.errors import CourierError
from courier.utils.logging import get_logger, init_logging

from .cli_parser import setup_argument_parser
from .router import CommandRouter
from .shell import CourierShell, namespace_to_dict, report_error

logger = get_logger(__name__)

ROW_COMMANDS = frozenset(
    {"read", "reply", "forward", "attachments", "copy", "move", "delete", "flag"}
)


def create_controller(args, console: Optional[Console] = None) -> SessionController:
    """Load configuration, set up logging and build the session controller.

    Command-line options override the loaded configuration for this run only.
    """
    config = ConfigManager(args.config)
    if args.picker:
        config.set_config("ui.picker", args.picker, persist=False)
    if args.log_level:
        config.set_config("logging.log_level", args.log_level, persist=False)

    init_logging(config.config.logging.log_level, config.config.logging.log_to_file)

    controller = SessionController(config, console=console)
    if args.account:
        controller.state.set_account(args.account, config.session.default_mailbox)
    if args.mailbox:
        controller.state.set_mailbox(args.mailbox)
    return controller


def run_command(controller: SessionController, args) -> int:
    """Run a single command and return its exit code."""
    try:
        controller.start()
        router = CommandRouter(controller)
        if args.command in ROW_COMMANDS:
            # Rows address the first page of the current mailbox.
            controller.list_envelopes()
        return 0 if router.route(args.command, namespace_to_dict(args)) else 1

    except CourierError as e:
        logger.error(f"Command '{args.command}' failed: {e}")
        report_error(controller.console, e)
        return 1

    finally:
        controller.shutdown()


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code
    """
    console = get_console()
    parser = setup_argument_parser()
    args = parser.parse_args(argv)

    try:
        controller = create_controller(args, console)
    except CourierError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        return 1

    try:
        if args.command:
            return run_command(controller, args)
        return CourierShell(controller).run()

    except KeyboardInterrupt:
        controller.shutdown()
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        console.print(f"[red]Fatal error: {e}[/red]")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
