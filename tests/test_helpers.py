"""
Test helper functions and utilities for reducing duplicate code across test modules
"""
import json
from unittest.mock import MagicMock

from courier.utils.config_manager import ConfigManager
from courier.utils.console import get_buffer_console


def response(payload):
    """Wrap a payload in the backend's structured response envelope"""
    return json.dumps({"response": payload})


class FakeRunner:
    """Stand-in for the subprocess runner.

    ``outputs`` maps a word that identifies a backend command (for example
    ``"list"`` or ``"move"``) to the stdout it should produce. A list value is
    consumed one entry per call, the last entry repeating.
    """

    def __init__(self, outputs=None, default=""):
        self.outputs = dict(outputs or {})
        self.default = default
        self.calls = []

    def __call__(self, argv):
        self.calls.append(list(argv))
        for key, output in self.outputs.items():
            if key in argv:
                if isinstance(output, list):
                    return output.pop(0) if len(output) > 1 else output[0]
                if isinstance(output, Exception):
                    raise output
                return output
        return self.default

    def calls_with(self, word):
        return [argv for argv in self.calls if word in argv]


class BackendTestHelper:
    """Helper methods for backend payloads"""

    @staticmethod
    def create_envelope(id="101", **kwargs):
        """Create an envelope record as the backend lists it"""
        defaults = {
            "id": id,
            "flags": ["Seen"],
            "subject": f"Subject {id}",
            "sender": "sender@example.com",
            "date": "2025-10-02 10:30",
        }
        defaults.update(kwargs)
        return defaults

    @staticmethod
    def create_envelopes(ids=("101", "102", "103")):
        return [BackendTestHelper.create_envelope(id) for id in ids]

    @staticmethod
    def create_mailboxes(names=("INBOX", "Archive", "drafts")):
        return [{"delim": "/", "name": name, "attrs": []} for name in names]

    @staticmethod
    def create_accounts():
        return [
            {"name": "work", "backend": "imap", "default": False},
            {"name": "personal", "backend": "maildir", "default": True},
        ]


class ConfigTestHelper:
    """Helper methods for configuration testing"""

    @staticmethod
    def create_config_manager(tmp_path, **sections):
        """ConfigManager on a temporary file, optionally pre-seeded"""
        path = tmp_path / "config.json"
        if sections:
            path.write_text(json.dumps(sections), encoding="utf-8")
        return ConfigManager(path, use_env=False)


class ConsoleTestHelper:
    """Helper methods for console/UI testing"""

    @staticmethod
    def create_console(width=120):
        """Console writing into a buffer; returns (console, buffer)"""
        return get_buffer_console(width=width)

    @staticmethod
    def create_status_sink():
        status = MagicMock()
        status.info = MagicMock()
        status.error = MagicMock()
        return status
