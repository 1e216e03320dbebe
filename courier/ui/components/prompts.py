"""User prompt components."""

from enum import Enum
from typing import Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt

from courier.utils.console import get_console


class DraftChoice(str, Enum):
    """Answers to the question asked when a draft's editor is closed."""

    SEND = "send"
    SAVE = "draft"
    DISCARD = "quit"
    CANCEL = "cancel"


class ConfirmPrompt:
    """Confirmation prompt component.

    Used by: delete.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_console()

    def ask(self, message: str, default: bool = False) -> bool:
        """Ask yes/no confirmation; interruption counts as no."""
        try:
            return Confirm.ask(message, default=default, console=self.console)
        except (KeyboardInterrupt, EOFError):
            return False


class DraftChoicePrompt:
    """Asks what to do with a draft once its editor closes."""

    QUESTION = "(s)end, (d)raft, (q)uit or (c)ancel?"
    KEYS = {
        "s": DraftChoice.SEND,
        "d": DraftChoice.SAVE,
        "q": DraftChoice.DISCARD,
        "c": DraftChoice.CANCEL,
    }

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_console()

    def ask(self) -> DraftChoice:
        """Return the chosen action; interruption counts as cancel."""
        try:
            answer = Prompt.ask(
                self.QUESTION,
                choices=list(self.KEYS),
                default="s",
                show_choices=False,
                console=self.console,
            )
        except (KeyboardInterrupt, EOFError):
            return DraftChoice.CANCEL

        return self.KEYS[answer.strip().lower()]
