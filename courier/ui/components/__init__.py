"""Reusable UI components for the mail session."""

from .messages import StatusMessage
from .pickers import PICKER_PRIORITY, Picker, PickerKind, choose_picker_kind, create_picker
from .prompts import ConfirmPrompt, DraftChoice, DraftChoicePrompt
from .tables import RenderedTable, TableRenderer

__all__ = [
    "StatusMessage",
    "PICKER_PRIORITY",
    "Picker",
    "PickerKind",
    "choose_picker_kind",
    "create_picker",
    "ConfirmPrompt",
    "DraftChoice",
    "DraftChoicePrompt",
    "RenderedTable",
    "TableRenderer",
]
