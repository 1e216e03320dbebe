"""Draft lifecycle: compose, checkpoint and finalize a single composition."""

from enum import Enum
from typing import Any, Optional

from courier.core.bridge import (
    Aborted,
    CLIInvocation,
    CommandBridge,
    Diagnostic,
    Outcome,
    Success,
)
from courier.core.models import Draft
from courier.core.session import SessionState
from courier.ui.components.prompts import DraftChoice
from courier.utils.errors import BackendError, DraftError
from courier.utils.logging import get_logger, log_call

logger = get_logger(__name__)


class DraftState(str, Enum):
    EMPTY = "empty"
    EDITING = "editing"
    SAVED = "saved"
    SENT = "sent"
    DISCARDED = "discarded"
    CANCELLED = "cancelled"


# Compose kind -> backend template command.
COMPOSE_COMMANDS = {
    "write": "template_write",
    "reply": "template_reply",
    "reply-all": "template_reply_all",
    "forward": "template_forward",
}


def template_text(payload: Any) -> str:
    """Raw message text from a template response."""
    if payload is None:
        return ""
    if isinstance(payload, dict):
        return str(payload.get("raw") or payload.get("template") or "")
    return str(payload)


class DraftController:
    """State machine for the one composition the session may hold.

    ``Empty -> Editing -> {Saved, Sent, Discarded, Cancelled}``. ``persist``
    checkpoints the buffer without changing state; only ``finalize`` and
    ``abandon`` reach a terminal state.
    """

    def __init__(
        self,
        bridge: CommandBridge,
        session: SessionState,
        drafts_mailbox: str = "drafts",
    ):
        self.bridge = bridge
        self.session = session
        self.drafts_mailbox = drafts_mailbox
        self.state = DraftState.EMPTY

    @property
    def draft(self) -> Optional[Draft]:
        return self.session.draft

    @property
    def editing(self) -> bool:
        return self.state is DraftState.EDITING

    def _require_editing(self, action: str) -> Draft:
        if not self.editing or self.draft is None:
            raise DraftError(f"Cannot {action}: no draft is being edited")
        return self.draft

    def _end(self, state: DraftState) -> None:
        logger.info(f"Draft {self.state.value} -> {state.value}")
        self.state = state
        self.session.draft = None

    @log_call
    def compose(
        self,
        kind: str,
        source_id: Optional[str] = None,
        mailbox: Optional[str] = None,
    ) -> Outcome:
        """Fetch a template for ``kind`` and start editing it.

        On anything but success the controller stays where it was.
        """
        if self.editing:
            raise DraftError("A draft is already being edited")

        command = COMPOSE_COMMANDS.get(kind)
        if command is None:
            raise DraftError(f"Unknown compose kind '{kind}'")
        if kind != "write" and not source_id:
            raise DraftError(f"A source message is required to {kind}")

        outcome = self.bridge.invoke(
            CLIInvocation(
                command,
                f"Fetching {kind} template",
                args={
                    "id": source_id,
                    "mailbox": mailbox or self.session.mailbox,
                },
                account=self.session.account,
            )
        )

        if isinstance(outcome, Success):
            self.session.draft = Draft(
                raw_text=template_text(outcome.payload),
                kind=kind,
                source_id=source_id,
            )
            self.state = DraftState.EDITING
            logger.info(f"Draft started ({kind})")

        return outcome

    def persist(self, text: Optional[str] = None) -> Draft:
        """Checkpoint the editing surface into the draft; state is unchanged."""
        draft = self._require_editing("save the draft")
        if text is not None:
            draft.update(text)
        draft.dirty = False
        return draft

    @log_call
    def finalize(self, choice: DraftChoice) -> Outcome:
        """Resolve a close request.

        Returns:
            Success for send/save/discard (terminal), Diagnostic when the
            backend refused send/save, Aborted for cancel. In the last two
            cases the draft stays in ``Editing`` and the close is vetoed.
        """
        draft = self._require_editing("close the draft")

        if choice is DraftChoice.CANCEL:
            logger.info("Draft close cancelled")
            return Aborted()

        if choice is DraftChoice.DISCARD:
            self._end(DraftState.DISCARDED)
            return Success.empty()

        if choice is DraftChoice.SEND:
            invocation = CLIInvocation(
                "send",
                "Sending message",
                args={"message": draft.raw_text},
                propagate=True,
                account=self.session.account,
            )
            terminal = DraftState.SENT
        else:
            invocation = CLIInvocation(
                "save",
                f"Saving draft to {self.drafts_mailbox}",
                args={"message": draft.raw_text, "mailbox": self.drafts_mailbox},
                propagate=True,
                account=self.session.account,
            )
            terminal = DraftState.SAVED

        try:
            outcome = self.bridge.invoke(invocation)
        except BackendError as e:
            logger.warning(f"Draft kept after failed {choice.value}")
            return Diagnostic(lines=tuple(e.diagnostic_lines))

        self._end(terminal)
        return outcome

    def abandon(self) -> bool:
        """Drop a draft still being edited when the session ends."""
        if not self.editing:
            return False
        self._end(DraftState.CANCELLED)
        return True
