"""Mail session feature module.

Public API:
    SessionController - Orchestrates listings, reading, composing and batch operations
    MailDisplay - Display coordinator for the session
"""

from .display import MailDisplay
from .workflow import SessionController

__all__ = [
    "MailDisplay",
    "SessionController",
]
