"""Exception hierarchy and error handling helpers for Courier."""

from enum import Enum
from typing import Any, Dict, Optional, Sequence


## Error Categories


class ErrorCategory(Enum):
    """Categories of errors for better handling."""

    BACKEND = "backend"
    SELECTION = "selection"
    DRAFT = "draft"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


## Custom Exceptions


class CourierError(Exception):
    """Base exception for all Courier errors."""

    category = ErrorCategory.UNKNOWN
    user_message = "An error occurred"

    def __init__(
        self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None
    ):
        """Initialise CourierError with optional message and details."""
        self.message = message or self.user_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def lines(self) -> list[str]:
        """Message split into status lines."""
        return self.message.splitlines() or [self.user_message]


## Backend Errors


class BackendError(CourierError):
    """Diagnostic output re-raised by a propagating backend call."""

    category = ErrorCategory.BACKEND
    user_message = "The mail backend reported an error"

    def __init__(self, diagnostic_lines: Sequence[str], description: str = ""):
        self.diagnostic_lines = list(diagnostic_lines)
        self.description = description
        # Set once the lines have been shown through a status sink.
        self.reported = False
        super().__init__(
            "\n".join(self.diagnostic_lines) or None,
            details={"description": description},
        )


class InvocationError(BackendError):
    """A backend command line could not be built from its template."""

    user_message = "Invalid backend command template"

    def __init__(self, message: str, description: str = ""):
        super().__init__([message], description=description)


## Selection Errors


class RowNotFoundError(CourierError):
    """No message identifier could be extracted from a rendered line."""

    category = ErrorCategory.SELECTION
    user_message = "Message not found"


class PickerError(CourierError):
    """No usable picker for the requested selection."""

    category = ErrorCategory.SELECTION
    user_message = "No picker available"


## Draft Errors


class DraftError(CourierError):
    """Illegal draft lifecycle transition."""

    category = ErrorCategory.DRAFT
    user_message = "Invalid draft operation"


class EditorError(DraftError):
    """The editing surface could not be opened."""

    user_message = "Failed to open the editor"


## Configuration Errors


class ConfigurationError(CourierError):
    """Base exception for configuration-related errors."""

    category = ErrorCategory.CONFIGURATION
    user_message = "A configuration error occurred"


class InvalidConfigError(ConfigurationError):
    """Exception for invalid configuration settings."""

    user_message = "Invalid configuration settings"


class FileSystemError(ConfigurationError):
    """Exception for file system failures around config and logs."""

    user_message = "A file system error occurred"
