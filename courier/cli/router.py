"""Routes CLI and shell commands to the session controller."""

from typing import Any, Callable, Dict, Optional

from courier.core.bridge import Aborted, Diagnostic
from courier.features.mail import SessionController
from courier.utils.logging import get_logger, log_call

logger = get_logger(__name__)

COMMANDS = {
    "list": "list envelopes of the current mailbox (--page N)",
    "next": "show the next page",
    "prev": "show the previous page",
    "mailboxes": "list mailboxes",
    "mailbox": "switch mailbox (picker when NAME is omitted)",
    "account": "switch account (picker when NAME is omitted)",
    "search": "list envelopes matching a backend query",
    "table": "show the last listing again",
    "read": "read the message on ROW",
    "write": "compose a new message",
    "reply": "reply to the message on ROW (--all for everyone)",
    "forward": "forward the message on ROW",
    "edit": "resume the draft being edited",
    "attachments": "download the attachments of the message on ROW",
    "copy": "copy RANGE to a mailbox",
    "move": "move RANGE to a mailbox",
    "delete": "delete RANGE (--yes skips confirmation)",
    "flag": "add or remove a flag on RANGE",
}


def _succeeded(result: Any) -> bool:
    if result is None or isinstance(result, (Diagnostic, Aborted)):
        return False
    return result if isinstance(result, bool) else True


class CommandRouter:
    """Routes commands to session controller operations."""

    def __init__(self, controller: SessionController):
        self.controller = controller

    def get_available_commands(self) -> Dict[str, str]:
        return dict(COMMANDS)

    @log_call
    def route(self, command: str, args: Optional[Dict[str, Any]] = None) -> bool:
        """Route a command to its handler.

        Returns:
            True if the operation completed successfully

        Raises:
            ValueError: If command is unknown
        """
        args = args or {}
        handler = self._get_handler(command)
        if handler is None:
            logger.warning(f"Unknown command: {command}")
            raise ValueError(f"Unknown command: {command}")

        return _succeeded(handler(args))

    def _get_handler(self, command: str) -> Optional[Callable[[Dict[str, Any]], Any]]:
        c = self.controller
        handlers = {
            "list": self._handle_list,
            "next": lambda args: c.next_page(),
            "prev": lambda args: c.prev_page(),
            "mailboxes": lambda args: c.list_mailboxes(),
            "mailbox": lambda args: c.select_mailbox(args.get("name")),
            "account": lambda args: c.select_account(args.get("name")),
            "search": lambda args: c.search(" ".join(args["query"])),
            "table": lambda args: c.show_table(),
            "read": lambda args: c.read(args["row"]),
            "write": lambda args: c.compose("write"),
            "reply": lambda args: c.compose(
                "reply-all" if args.get("all") else "reply", args["row"]
            ),
            "forward": lambda args: c.compose("forward", args["row"]),
            "edit": lambda args: c.edit_draft(),
            "attachments": lambda args: c.attachments(args["row"]),
            "copy": lambda args: c.copy(args["range"], args.get("target")),
            "move": lambda args: c.move(args["range"], args.get("target")),
            "delete": lambda args: c.delete(args["range"], assume_yes=args.get("yes", False)),
            "flag": lambda args: c.flag(args["action"], args["flag"], args["range"]),
        }
        return handlers.get(command)

    def _handle_list(self, args: Dict[str, Any]):
        page = args.get("page")
        if page is not None:
            return self.controller.go_to_page(page)
        return self.controller.list_envelopes()
