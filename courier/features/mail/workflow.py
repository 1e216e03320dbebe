"""Mail session workflow orchestration."""

from typing import Callable, List, Optional

from rich.console import Console

from courier.core.bridge import (
    Aborted,
    CLIInvocation,
    CommandBridge,
    Outcome,
    OutputMode,
    Success,
)
from courier.core.models import Account, Envelope, Mailbox, records_from_payload
from courier.core.rows import RowIndex, join_ids, parse_range
from courier.core.session import SessionState
from courier.features.compose import DraftController, DraftEditor
from courier.ui.components import (
    DraftChoicePrompt,
    Picker,
    RenderedTable,
    TableRenderer,
    create_picker,
)
from courier.utils.config_manager import ConfigManager
from courier.utils.console import get_console
from courier.utils.errors import (
    BackendError,
    DraftError,
    InvocationError,
    RowNotFoundError,
)
from courier.utils.logging import get_logger, log_call

from .display import MailDisplay

logger = get_logger(__name__)

PickerFactory = Callable[..., Picker]

FLAG_ACTIONS = ("add", "remove")


class SessionController:
    """Orchestrates listing, reading, composing and batch operations.

    Holds the session state, the last successfully rendered table and the
    draft controller. A table is only replaced after the fetch that produced
    it succeeded; view changes that fail are rolled back.
    """

    def __init__(
        self,
        config: ConfigManager,
        console: Optional[Console] = None,
        bridge: Optional[CommandBridge] = None,
        editor: Optional[DraftEditor] = None,
        picker_factory: PickerFactory = create_picker,
        choice_prompt: Optional[DraftChoicePrompt] = None,
    ):
        self.config = config
        self.display = MailDisplay(console or get_console())
        self.console = self.display.console
        self.bridge = bridge or CommandBridge(config.backend, status=self.display.message)
        self.state = SessionState(mailbox=config.session.default_mailbox)
        self.renderer = TableRenderer(delimiter=config.ui.delimiter)
        self.drafts = DraftController(
            self.bridge, self.state, drafts_mailbox=config.session.drafts_mailbox
        )
        self.editor = editor or DraftEditor(config.ui.editor)
        self.picker_factory = picker_factory
        self.choice_prompt = choice_prompt or DraftChoicePrompt(self.console)
        self.table: Optional[RenderedTable] = None
        self._started = False

    # Backend helpers

    def _invocation(
        self,
        command: str,
        description: str,
        output: OutputMode = OutputMode.STRUCTURED,
        propagate: bool = False,
        **args,
    ) -> CLIInvocation:
        values = {
            "mailbox": self.state.mailbox,
            "page": self.state.page,
            "page_size": self.config.session.page_size,
        }
        values.update(args)
        return CLIInvocation(
            command,
            description,
            args=values,
            output=output,
            propagate=propagate,
            account=self.state.account,
        )

    def _invoke(self, command: str, description: str, **kwargs) -> Outcome:
        return self.bridge.invoke(self._invocation(command, description, **kwargs))

    def _picker(self, preview=None) -> Picker:
        preview = preview if self.config.ui.picker_preview else None
        return self.picker_factory(
            preference=self.config.ui.picker, preview=preview, console=self.console
        )

    # Row lookups

    def _row_index(self) -> RowIndex:
        if self.table is None or self.table.kind != "envelopes":
            raise RowNotFoundError("No message listing is displayed; run 'list' first")
        return RowIndex(self.table.lines, self.table.delimiter)

    def row_id(self, row: int) -> str:
        return self._row_index().extract_id(int(row))

    def range_ids(self, spec: str) -> List[str]:
        first, last = parse_range(spec)
        return self._row_index().extract_ids(first, last)

    # Session start

    @log_call
    def start(self) -> Optional[str]:
        """Resolve the backend's default account once per session."""
        if self._started:
            return self.state.account
        self._started = True
        if self.state.account:
            return self.state.account

        outcome = self._invoke("accounts", "Resolving default account")
        if isinstance(outcome, Success):
            accounts = [Account.from_dict(r) for r in records_from_payload(outcome.payload)]
            default = next((a for a in accounts if a.is_default), None)
            if default is not None:
                self.state.account = default.name
                logger.info(f"Default account: {default.name}")

        return self.state.account

    # Listings

    def _render_envelopes(self, payload) -> RenderedTable:
        records = [Envelope.from_dict(r).to_row() for r in records_from_payload(payload)]
        return self.renderer.render("envelopes", records)

    def _title(self) -> str:
        account = f"{self.state.account} / " if self.state.account else ""
        return f"{account}{self.state.mailbox} (page {self.state.page})"

    @log_call
    def list_envelopes(self, propagate: bool = True) -> Optional[RenderedTable]:
        """Fetch and show the current page of the current mailbox."""
        outcome = self._invoke(
            "list",
            f"Listing {self.state.mailbox} page {self.state.page}",
            propagate=propagate,
        )
        if not isinstance(outcome, Success):
            return None

        self.table = self._render_envelopes(outcome.payload)
        self.display.show_table(self.table, self._title())
        return self.table

    def _change_view(self, mutate: Callable[[], object]) -> Optional[RenderedTable]:
        """Apply a state change, then list; restore the state if the list fails."""
        saved = (self.state.account, self.state.mailbox, self.state.page)
        mutate()
        try:
            return self.list_envelopes(propagate=True)
        except BackendError:
            self.state.account, self.state.mailbox, self.state.page = saved
            raise

    def go_to_page(self, page: int) -> Optional[RenderedTable]:
        return self._change_view(lambda: self.state.go_to_page(page))

    def next_page(self) -> Optional[RenderedTable]:
        return self._change_view(self.state.next_page)

    def prev_page(self) -> Optional[RenderedTable]:
        return self._change_view(self.state.prev_page)

    def search(self, query: str) -> Optional[RenderedTable]:
        if not query.strip():
            raise RowNotFoundError("Search needs a query")

        outcome = self._invoke(
            "search", f"Searching {self.state.mailbox}", propagate=True, query=query
        )
        self.table = self._render_envelopes(outcome.payload)
        self.display.show_table(self.table, f"{self._title()} matching '{query}'")
        return self.table

    def fetch_mailboxes(self) -> List[Mailbox]:
        outcome = self._invoke("mailboxes", "Listing mailboxes", propagate=True)
        return [Mailbox.from_dict(r) for r in records_from_payload(outcome.payload)]

    def list_mailboxes(self) -> RenderedTable:
        mailboxes = self.fetch_mailboxes()
        self.table = self.renderer.render("mailboxes", [m.to_row() for m in mailboxes])
        self.display.show_table(self.table, "Mailboxes")
        return self.table

    def show_table(self) -> Optional[RenderedTable]:
        if self.table is None:
            self.display.show_error("Nothing listed yet")
            return None
        self.display.show_table(self.table)
        return self.table

    def preview_mailbox(self, name: str) -> str:
        """First page of a mailbox as plain table text, or its errors."""
        quiet = CommandBridge(self.bridge.config, status=None, runner=self.bridge.runner)
        invocation = self._invocation(
            "list", f"Previewing {name}", propagate=True, mailbox=name, page=0
        )
        try:
            outcome = quiet.invoke(invocation)
        except BackendError as e:
            return "Errors: " + "\n".join(e.diagnostic_lines)

        return str(self._render_envelopes(outcome.payload))

    # Selection

    def select_mailbox(self, name: Optional[str] = None) -> Optional[RenderedTable]:
        if name:
            return self._change_view(lambda: self.state.set_mailbox(name))

        names = [m.name for m in self.fetch_mailboxes()]
        picked: List[Optional[RenderedTable]] = []
        self._picker(self.preview_mailbox).select(
            names,
            lambda choice: picked.append(self.select_mailbox(choice) if choice else None),
            title="Mailbox",
        )
        return picked[0] if picked else None

    def select_account(self, name: Optional[str] = None) -> Optional[RenderedTable]:
        if name:
            return self._change_view(
                lambda: self.state.set_account(name, self.config.session.default_mailbox)
            )

        outcome = self._invoke("accounts", "Listing accounts", propagate=True)
        names = [Account.from_dict(r).name for r in records_from_payload(outcome.payload)]
        picked: List[Optional[RenderedTable]] = []
        self._picker().select(
            names,
            lambda choice: picked.append(self.select_account(choice) if choice else None),
            title="Account",
        )
        return picked[0] if picked else None

    # Messages

    @log_call
    def read(self, row: int) -> str:
        message_id = self.row_id(row)
        outcome = self._invoke(
            "read",
            f"Reading message {message_id}",
            output=OutputMode.PLAIN,
            propagate=True,
            id=message_id,
        )
        text = outcome.payload or ""
        self.display.show_message(text, message_id)
        return text

    def attachments(self, row: int) -> Outcome:
        message_id = self.row_id(row)
        outcome = self._invoke(
            "attachments",
            f"Downloading attachments of message {message_id}",
            propagate=True,
            id=message_id,
        )
        if outcome.has_payload:
            self.display.show_info(str(outcome.payload))
        return outcome

    # Composition

    @log_call
    def compose(self, kind: str, row: Optional[int] = None) -> Outcome:
        """Start a write/reply/reply-all/forward draft and run the edit loop."""
        if self.drafts.editing:
            raise DraftError("A draft is already being edited; run 'edit' to resume it")

        source_id = self.row_id(row) if row is not None else None
        outcome = self.drafts.compose(kind, source_id=source_id)
        if not isinstance(outcome, Success):
            return outcome

        return self.edit_draft()

    def edit_draft(self) -> Outcome:
        """Open the draft until a close is accepted.

        Cancel and refused send/save both reopen the editor on the current
        draft text.
        """
        if not self.drafts.editing:
            raise DraftError("No draft is being edited")

        while True:
            text = self.editor.edit(self.drafts.draft.raw_text, on_save=self.drafts.persist)
            self.drafts.persist(text)

            choice = self.choice_prompt.ask()
            outcome = self.drafts.finalize(choice)

            if isinstance(outcome, Success):
                self.display.show_draft_result(self.drafts.state.value)
                if self.table is not None:
                    self.display.show_table(self.table)
                return outcome

            if isinstance(outcome, Aborted):
                logger.debug("Draft close vetoed, reopening editor")

    def abandon_draft(self) -> bool:
        return self.drafts.abandon()

    # Batch operations

    def _refresh(self) -> None:
        """Informational re-list after a change; failures only report."""
        try:
            self.list_envelopes(propagate=False)
        except InvocationError as e:
            logger.warning(f"Listing not refreshed: {e}")
            for line in e.lines:
                self.display.show_error(line)

    def _transfer(self, action: str, ids: List[str], target: str) -> Outcome:
        batch = join_ids(ids)
        outcome = self._invoke(
            action,
            f"{action.capitalize()} message(s) {batch} to {target}",
            propagate=True,
            ids=batch,
            target=target,
        )
        self.display.show_transferred(batch, action, target)
        if action == "move":
            self._refresh()
        return outcome

    @log_call
    def transfer(self, action: str, spec: str, target: Optional[str] = None) -> Outcome:
        """Copy or move a range of rows to ``target`` (picked when omitted)."""
        if action not in ("copy", "move"):
            raise ValueError(f"Unknown transfer action: {action}")

        ids = self.range_ids(spec)
        if target:
            return self._transfer(action, ids, target)

        names = [m.name for m in self.fetch_mailboxes() if m.name != self.state.mailbox]
        outcomes: List[Outcome] = []
        self._picker(self.preview_mailbox).select(
            names,
            lambda choice: outcomes.append(
                self._transfer(action, ids, choice) if choice else Aborted()
            ),
            title=f"{action.capitalize()} to",
        )
        return outcomes[0] if outcomes else Aborted()

    def copy(self, spec: str, target: Optional[str] = None) -> Outcome:
        return self.transfer("copy", spec, target)

    def move(self, spec: str, target: Optional[str] = None) -> Outcome:
        return self.transfer("move", spec, target)

    @log_call
    def delete(self, spec: str, assume_yes: bool = False) -> Outcome:
        batch = join_ids(self.range_ids(spec))
        if not assume_yes and not self.display.confirm_delete(batch):
            self.display.show_cancelled("Deletion")
            return Aborted()

        outcome = self._invoke(
            "delete", f"Deleting message(s) {batch}", propagate=True, ids=batch
        )
        self.display.show_deleted(batch)
        self._refresh()
        return outcome

    def flag(self, action: str, flag: str, spec: str) -> Outcome:
        if action not in FLAG_ACTIONS:
            raise ValueError(f"Flag action must be one of {', '.join(FLAG_ACTIONS)}")

        batch = join_ids(self.range_ids(spec))
        outcome = self._invoke(
            f"flag_{action}",
            f"Updating flag {flag} on message(s) {batch}",
            propagate=True,
            ids=batch,
            flag=flag,
        )
        self.display.show_flagged(batch, action, flag)
        self._refresh()
        return outcome

    def reload_config(self) -> None:
        self.config.reload()
        self.bridge.config = self.config.backend
        self.renderer = TableRenderer(delimiter=self.config.ui.delimiter)
        self.drafts.drafts_mailbox = self.config.session.drafts_mailbox

    def shutdown(self) -> None:
        if self.abandon_draft():
            self.display.show_cancelled("Draft")
