"""
Tests for session state and domain records
"""
from courier.core.models import Account, Draft, Envelope, Mailbox, records_from_payload
from courier.core.session import SessionState


class TestSessionState:
    """Tests for the page cursor and selection"""

    def test_prev_page_never_negative(self):
        state = SessionState()

        for _ in range(5):
            state.prev_page()

        assert state.current_page() == 0

    def test_next_then_prev(self):
        state = SessionState()

        state.next_page()
        state.next_page()
        state.prev_page()

        assert state.current_page() == 1

    def test_set_mailbox_resets_page(self):
        state = SessionState()
        state.next_page()
        state.next_page()

        state.set_mailbox("Archive")

        assert state.current_mailbox() == "Archive"
        assert state.current_page() == 0

    def test_set_account_resets_mailbox_and_page(self):
        state = SessionState(mailbox="Archive", page=3)

        state.set_account("work")

        assert state.account == "work"
        assert state.mailbox == "INBOX"
        assert state.page == 0

    def test_go_to_page_clamps(self):
        state = SessionState()

        assert state.go_to_page(-4) == 0
        assert state.go_to_page(2) == 2


class TestRecords:
    """Tests for backend record parsing"""

    def test_envelope_from_dict(self):
        envelope = Envelope.from_dict(
            {"id": 12, "flags": ["Seen", "Flagged"], "subject": None, "sender": "a@b", "date": "today"}
        )

        assert envelope.id == "12"
        assert envelope.flags == frozenset({"Seen", "Flagged"})
        assert envelope.subject == ""
        assert envelope.to_row()["flags"] == "  ⚑"

    def test_account_default_flag(self):
        assert Account.from_dict({"name": "me", "default": True}).is_default is True
        assert Account.from_dict({"name": "me"}).is_default is False

    def test_mailbox_row(self):
        mailbox = Mailbox.from_dict({"delim": "/", "name": "INBOX", "attrs": ["NoSelect", "Marked"]})

        assert mailbox.to_row() == {"delim": "/", "name": "INBOX", "attrs": "NoSelect, Marked"}

    def test_records_from_payload(self):
        assert records_from_payload(None) == []
        assert records_from_payload({"id": "1"}) == [{"id": "1"}]
        assert records_from_payload([{"id": "1"}, "noise"]) == [{"id": "1"}]
        assert records_from_payload("text") == []

    def test_draft_update_marks_dirty(self):
        draft = Draft(raw_text="a")

        assert draft.update("a") is False
        assert draft.dirty is False
        assert draft.update("b") is True
        assert draft.dirty is True
