"""Session state shared by the controller: account, mailbox, page and draft."""

from dataclasses import dataclass
from typing import Optional

from .models import Draft


@dataclass
class SessionState:
    """Current selection of the interactive session.

    Owned by the session controller; every mutation goes through the
    methods below and is visible to the next read.
    """

    account: Optional[str] = None
    mailbox: str = "INBOX"
    page: int = 0
    draft: Optional[Draft] = None

    def set_account(self, name: Optional[str], mailbox: str = "INBOX") -> None:
        """Switch account; the mailbox is reset since names differ per account."""
        self.account = name or None
        self.set_mailbox(mailbox)

    def set_mailbox(self, name: str) -> None:
        self.mailbox = name
        self.page = 0

    def next_page(self) -> int:
        self.page += 1
        return self.page

    def prev_page(self) -> int:
        self.page = max(0, self.page - 1)
        return self.page

    def go_to_page(self, page: int) -> int:
        self.page = max(0, page)
        return self.page

    def current_mailbox(self) -> str:
        return self.mailbox

    def current_page(self) -> int:
        return self.page
