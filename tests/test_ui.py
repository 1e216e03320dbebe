"""
Tests for user interface components and display functions

Tests cover:
- Status messages
- Draft close prompt
- Mail display coordinator
"""
from unittest.mock import patch

from courier.features.mail import MailDisplay
from courier.ui.components import DraftChoice, DraftChoicePrompt, StatusMessage, TableRenderer


class TestStatusMessage:
    """Tests for status lines"""

    def test_markup_in_messages_is_escaped(self, buffer_console):
        console, buffer = buffer_console

        StatusMessage(console).error("bad [bold]input[/bold]")

        assert "[bold]input[/bold]" in buffer.getvalue()

    def test_info_hidden_when_quiet(self, buffer_console):
        console, buffer = buffer_console

        StatusMessage(console, verbose=False).info("Listing...")

        assert buffer.getvalue() == ""


class TestDraftChoicePrompt:
    """Tests for the close prompt"""

    @patch("courier.ui.components.prompts.Prompt.ask", return_value="d")
    def test_key_maps_to_choice(self, mock_ask, buffer_console):
        console, _ = buffer_console

        assert DraftChoicePrompt(console).ask() is DraftChoice.SAVE
        assert mock_ask.call_args.args[0] == "(s)end, (d)raft, (q)uit or (c)ancel?"

    @patch("courier.ui.components.prompts.Prompt.ask", side_effect=EOFError)
    def test_interrupt_cancels(self, mock_ask, buffer_console):
        console, _ = buffer_console

        assert DraftChoicePrompt(console).ask() is DraftChoice.CANCEL


class TestMailDisplay:
    """Tests for the display coordinator"""

    def test_show_table_with_title(self, buffer_console):
        console, buffer = buffer_console
        table = TableRenderer().render("envelopes", [])

        MailDisplay(console).show_table(table, "personal / INBOX (page 0)")

        output = buffer.getvalue()
        assert "personal / INBOX (page 0)" in output
        assert "No entries" in output

    def test_show_message(self, buffer_console):
        console, buffer = buffer_console

        MailDisplay(console).show_message("Hello [world]", "42")

        output = buffer.getvalue()
        assert "Message 42" in output
        assert "Hello [world]" in output

    def test_transfer_messages(self, buffer_console):
        console, buffer = buffer_console
        display = MailDisplay(console)

        display.show_transferred("1,2", "move", "Archive")
        display.show_flagged("3", "remove", "seen")

        output = buffer.getvalue()
        assert "Message(s) 1,2 moved to Archive" in output
        assert "Flag seen removed from message(s) 3" in output
