"""Draft composition feature module.

Public API:
    DraftController - Draft lifecycle state machine
    DraftEditor - Editing surface backed by the user's editor
"""

from .drafts import COMPOSE_COMMANDS, DraftController, DraftState
from .editor import DraftEditor

__all__ = [
    "COMPOSE_COMMANDS",
    "DraftController",
    "DraftEditor",
    "DraftState",
]
