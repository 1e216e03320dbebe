"""Mail session display coordinator (uses shared UI components)."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.text import Text

from courier.ui.components import ConfirmPrompt, RenderedTable, StatusMessage


class MailDisplay:
    """Coordinates display for the mail session."""

    def __init__(self, console: Optional[Console] = None):
        self.message = StatusMessage(console)
        self.console = console or self.message.console
        self.confirm = ConfirmPrompt(self.console)

    # Views

    def show_table(self, table: RenderedTable, title: Optional[str] = None) -> None:
        if title:
            self.console.print(f"[bold cyan]{escape(title)}[/bold cyan]")
        self.console.print(table.to_text())
        if not table.rows:
            self.console.print("[dim]No entries[/dim]")

    def show_message(self, text: str, message_id: str) -> None:
        self.console.print(Rule(f"Message {message_id}"))
        self.console.print(Text(text))
        self.console.print(Rule())

    # Confirmation prompts

    def confirm_delete(self, ids: str) -> bool:
        return self.confirm.ask(f"Delete message(s) {ids}?", default=False)

    # Status messages

    def show_transferred(self, ids: str, action: str, target: str) -> None:
        verb = "copied" if action == "copy" else "moved"
        self.message.success(f"Message(s) {ids} {verb} to {target}")

    def show_deleted(self, ids: str) -> None:
        self.message.success(f"Message(s) {ids} deleted")

    def show_flagged(self, ids: str, action: str, flag: str) -> None:
        verb = "added to" if action == "add" else "removed from"
        self.message.success(f"Flag {flag} {verb} message(s) {ids}")

    def show_draft_result(self, state: str) -> None:
        texts = {
            "sent": "Message sent",
            "saved": "Draft saved",
            "discarded": "Draft discarded",
        }
        self.message.success(texts.get(state, f"Draft {state}"))

    def show_cancelled(self, what: str = "Operation") -> None:
        self.message.warning(f"{what} cancelled")

    def show_info(self, message: str) -> None:
        self.message.success(message)

    def show_error(self, message: str) -> None:
        self.message.error(message)
