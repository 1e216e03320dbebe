"""
Tests for item pickers

Tests cover:
- Picker kind selection from an availability snapshot
- Plain prompt answers
- fzf delegation
- Preview finder filtering, movement and preview caching
"""
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from courier.ui.components import PICKER_PRIORITY, PickerKind, choose_picker_kind, create_picker
from courier.ui.components.pickers import (
    FuzzyFinderPicker,
    PlainPicker,
    PreviewFinderPicker,
    fuzzy_filter,
)
from courier.utils.errors import PickerError

ALL = {PickerKind.FUZZY_PREVIEW: True, PickerKind.FUZZY: True, PickerKind.PLAIN: True}


class TestChoosePickerKind:
    """Tests for the probe order"""

    def test_priority_order(self):
        assert PICKER_PRIORITY == (PickerKind.FUZZY_PREVIEW, PickerKind.FUZZY, PickerKind.PLAIN)

    def test_first_available_wins(self):
        assert choose_picker_kind(ALL) is PickerKind.FUZZY_PREVIEW

    def test_fuzzy_preferred_over_plain(self):
        available = {PickerKind.FUZZY_PREVIEW: False, PickerKind.FUZZY: True, PickerKind.PLAIN: True}

        assert choose_picker_kind(available) is PickerKind.FUZZY

    def test_plain_when_alone(self):
        assert choose_picker_kind({PickerKind.PLAIN: True}) is PickerKind.PLAIN

    def test_available_preference_wins(self):
        assert choose_picker_kind(ALL, "plain") is PickerKind.PLAIN

    def test_unavailable_preference_probes(self):
        available = {PickerKind.FUZZY: False, PickerKind.PLAIN: True}

        assert choose_picker_kind(available, "fuzzy") is PickerKind.PLAIN

    def test_nothing_available_raises(self):
        with pytest.raises(PickerError):
            choose_picker_kind({})


class TestCreatePicker:
    """Tests for picker construction"""

    def test_preview_requires_hook(self):
        picker = create_picker(available=ALL)

        assert isinstance(picker, FuzzyFinderPicker)

    def test_preview_picker_with_hook(self):
        picker = create_picker(preview=lambda name: name, available=ALL)

        assert isinstance(picker, PreviewFinderPicker)

    def test_plain_picker(self):
        picker = create_picker("plain", available=ALL)

        assert isinstance(picker, PlainPicker)


class TestPlainPicker:
    """Tests for the indexed prompt"""

    def test_resolve_number_and_literal(self):
        items = ["INBOX", "Archive"]

        assert PlainPicker.resolve(items, "2") == "Archive"
        assert PlainPicker.resolve(items, "INBOX") == "INBOX"
        assert PlainPicker.resolve(items, "") is None
        assert PlainPicker.resolve(items, "9") is None

    @patch("courier.ui.components.pickers.Prompt.ask", return_value="1")
    def test_select_calls_continuation(self, mock_ask, buffer_console):
        console, buffer = buffer_console
        on_select = MagicMock()

        PlainPicker(console).select(["INBOX", "Archive"], on_select, title="Mailbox")

        on_select.assert_called_once_with("INBOX")
        assert "Archive" in buffer.getvalue()

    @patch("courier.ui.components.pickers.Prompt.ask", side_effect=["7", "Trash", "2"])
    def test_invalid_answer_asks_again(self, mock_ask, buffer_console):
        console, buffer = buffer_console
        on_select = MagicMock()

        PlainPicker(console).select(["INBOX", "Archive", "Sent"], on_select)

        on_select.assert_called_once_with("Archive")
        assert mock_ask.call_count == 3
        assert "Enter a number from 1 to 3" in buffer.getvalue()

    @patch("courier.ui.components.pickers.Prompt.ask", return_value="")
    def test_blank_answer_selects_nothing(self, mock_ask, buffer_console):
        console, _ = buffer_console
        on_select = MagicMock()

        PlainPicker(console).select(["INBOX"], on_select)

        on_select.assert_called_once_with(None)

    @patch("courier.ui.components.pickers.Prompt.ask", side_effect=KeyboardInterrupt)
    def test_interrupt_selects_nothing(self, mock_ask, buffer_console):
        console, _ = buffer_console
        on_select = MagicMock()

        PlainPicker(console).select(["INBOX"], on_select)

        on_select.assert_called_once_with(None)


class TestFuzzyFinderPicker:
    """Tests for fzf delegation"""

    @patch("courier.ui.components.pickers.subprocess.run")
    def test_choice_from_stdout(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess([], 0, stdout="Archive\n")
        on_select = MagicMock()

        FuzzyFinderPicker().select(["INBOX", "Archive"], on_select)

        on_select.assert_called_once_with("Archive")
        assert mock_run.call_args.kwargs["input"] == "INBOX\nArchive"

    @patch("courier.ui.components.pickers.subprocess.run")
    def test_abort_selects_nothing(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess([], 130, stdout="")
        on_select = MagicMock()

        FuzzyFinderPicker().select(["INBOX"], on_select)

        on_select.assert_called_once_with(None)

    @patch("courier.ui.components.pickers.shutil.which", return_value=None)
    def test_unavailable_without_fzf(self, mock_which):
        assert FuzzyFinderPicker.is_available() is False


class TestPreviewFinderPicker:
    """Tests for the preview finder state"""

    def test_fuzzy_filter_ranks_tight_matches_first(self):
        items = ["Archive/2020", "Sent", "Spam", "Starred"]

        assert fuzzy_filter(items, "sp") == ["Spam"]
        assert fuzzy_filter(items, "s")[0] in ("Sent", "Spam", "Starred")
        assert fuzzy_filter(items, "") == items
        assert fuzzy_filter(items, "  ") == items

    def test_fuzzy_filter_prefers_earlier_matches(self):
        assert fuzzy_filter(["Archive/Sent", "Sent"], "sent") == ["Sent", "Archive/Sent"]

    def test_move_wraps(self):
        picker = PreviewFinderPicker(preview=lambda name: name)
        picker.refilter(["a", "b", "c"], "")

        picker.move(-1)

        assert picker.highlighted == "c"

    def test_preview_is_cached_per_candidate(self):
        hook = MagicMock(side_effect=lambda name: f"preview of {name}")
        picker = PreviewFinderPicker(preview=hook)
        picker.refilter(["INBOX", "Archive"], "")

        assert picker.preview_text() == "preview of INBOX"
        assert picker.preview_text() == "preview of INBOX"
        picker.move(1)
        assert picker.preview_text() == "preview of Archive"

        assert hook.call_count == 2

    def test_no_match_has_empty_preview(self):
        picker = PreviewFinderPicker(preview=lambda name: name)
        picker.refilter(["INBOX"], "zzz")

        assert picker.highlighted is None
        assert picker.preview_text() == ""
