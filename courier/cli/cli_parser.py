"""Argument parser configuration for the Courier CLI and shell."""

import argparse

from courier import __version__
from courier.utils.config_manager import PICKER_CHOICES


## Argument Adding Utilities

def add_row_argument(parser: argparse.ArgumentParser) -> None:
    """Add the row number of a message in the displayed listing."""

    parser.add_argument(
        "row",
        type=int,
        help="Row number in the displayed listing (first message is 1)"
    )

def add_range_argument(parser: argparse.ArgumentParser) -> None:
    """Add a row range argument (N or N-M)."""

    parser.add_argument(
        "range",
        help="Row or inclusive row range, e.g. 3 or 2-5"
    )

def add_global_arguments(parser: argparse.ArgumentParser) -> None:
    """Add options that apply to the whole session."""

    parser.add_argument("--account", help="Account to use instead of the default")
    parser.add_argument("--mailbox", help="Mailbox to open (default from config)")
    parser.add_argument("--config", help="Path to an alternative config file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for this run"
    )
    parser.add_argument(
        "--picker",
        choices=PICKER_CHOICES,
        help="Picker to use for interactive selection"
    )


## Command Setup Functions

def setup_listing_commands(subparsers) -> None:
    """Setup list, paging, mailbox, account and search commands."""

    list_parser = subparsers.add_parser(
        "list",
        help="List envelopes of the current mailbox"
    )
    list_parser.add_argument(
        "--page",
        type=int,
        help="Page to show (first page is 0)"
    )

    subparsers.add_parser("next", help="Show the next page")
    subparsers.add_parser("prev", help="Show the previous page")
    subparsers.add_parser("mailboxes", help="List mailboxes")
    subparsers.add_parser("table", help="Show the last listing again")

    mailbox_parser = subparsers.add_parser(
        "mailbox",
        help="Switch mailbox (pick one when NAME is omitted)"
    )
    mailbox_parser.add_argument("name", nargs="?", help="Mailbox name")

    account_parser = subparsers.add_parser(
        "account",
        help="Switch account (pick one when NAME is omitted)"
    )
    account_parser.add_argument("name", nargs="?", help="Account name")

    search_parser = subparsers.add_parser(
        "search",
        help="List envelopes matching a backend query"
    )
    search_parser.add_argument("query", nargs="+", help="Backend search query")

def setup_message_commands(subparsers) -> None:
    """Setup read, compose and attachment commands."""

    read_parser = subparsers.add_parser("read", help="Read a message")
    add_row_argument(read_parser)

    subparsers.add_parser("write", help="Compose a new message")
    subparsers.add_parser("edit", help="Resume the draft being edited")

    reply_parser = subparsers.add_parser("reply", help="Reply to a message")
    add_row_argument(reply_parser)
    reply_parser.add_argument(
        "--all",
        action="store_true",
        help="Reply to all recipients"
    )

    forward_parser = subparsers.add_parser("forward", help="Forward a message")
    add_row_argument(forward_parser)

    attachments_parser = subparsers.add_parser(
        "attachments",
        help="Download the attachments of a message"
    )
    add_row_argument(attachments_parser)

def setup_batch_commands(subparsers) -> None:
    """Setup copy, move, delete and flag commands."""

    for name, verb in (("copy", "Copy"), ("move", "Move")):
        parser = subparsers.add_parser(name, help=f"{verb} messages to another mailbox")
        add_range_argument(parser)
        parser.add_argument(
            "target",
            nargs="?",
            help="Target mailbox (pick one when omitted)"
        )

    delete_parser = subparsers.add_parser("delete", help="Delete messages")
    add_range_argument(delete_parser)
    delete_parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip confirmation"
    )

    flag_parser = subparsers.add_parser("flag", help="Add or remove a message flag")
    flag_parser.add_argument("action", choices=["add", "remove"], help="Flag operation")
    flag_parser.add_argument("flag", help="Flag name, e.g. seen or flagged")
    add_range_argument(flag_parser)


## Main Parser Setup

def setup_argument_parser(exit_on_error: bool = True) -> argparse.ArgumentParser:
    """Setup the main argument parser for the Courier CLI."""

    parser = argparse.ArgumentParser(
        prog="courier",
        description="Terminal mail front-end for the himalaya CLI",
        epilog="Run without a command to start the interactive shell.",
        exit_on_error=exit_on_error,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Courier {__version__}",
    )
    add_global_arguments(parser)

    subparsers = parser.add_subparsers(
        dest="command",
        help="Command to execute"
    )

    setup_listing_commands(subparsers)
    setup_message_commands(subparsers)
    setup_batch_commands(subparsers)

    return parser

