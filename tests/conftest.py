"""
Shared test fixtures and configuration for pytest
"""
import os
from unittest.mock import MagicMock

import pytest

from courier.core.bridge import CommandBridge
from courier.features.mail import SessionController
from courier.ui.components import DraftChoice

from .test_helpers import (
    BackendTestHelper,
    ConfigTestHelper,
    ConsoleTestHelper,
    FakeRunner,
    response,
)


@pytest.fixture
def config_manager(tmp_path):
    """ConfigManager backed by a temporary config file"""
    return ConfigTestHelper.create_config_manager(tmp_path)


@pytest.fixture
def buffer_console():
    """(console, buffer) pair capturing rendered output"""
    return ConsoleTestHelper.create_console()


@pytest.fixture
def runner():
    """Runner answering list and mailbox listings with sample data"""
    return FakeRunner(
        {
            "accounts": response(BackendTestHelper.create_accounts()),
            "mailboxes": response(BackendTestHelper.create_mailboxes()),
            "list": response(BackendTestHelper.create_envelopes()),
        }
    )


@pytest.fixture
def status():
    return ConsoleTestHelper.create_status_sink()


@pytest.fixture
def bridge(config_manager, runner, status):
    return CommandBridge(config_manager.backend, status=status, runner=runner)


@pytest.fixture
def editor():
    """Editor that hands back the text it was given"""
    fake = MagicMock()
    fake.edit.side_effect = lambda text, on_save=None: text
    return fake


@pytest.fixture
def choice_prompt():
    prompt = MagicMock()
    prompt.ask.return_value = DraftChoice.SEND
    return prompt


@pytest.fixture
def controller(config_manager, buffer_console, bridge, editor, choice_prompt):
    console, _ = buffer_console
    return SessionController(
        config_manager,
        console=console,
        bridge=bridge,
        editor=editor,
        choice_prompt=choice_prompt,
    )


@pytest.fixture(autouse=True)
def clear_env_vars():
    """Clear Courier environment overrides before each test"""
    env_vars = ["COURIER_BACKEND", "COURIER_PICKER", "COURIER_LOG_LEVEL", "VISUAL", "EDITOR"]
    original = {}
    for var in env_vars:
        original[var] = os.environ.get(var)
        if var in os.environ:
            del os.environ[var]

    yield

    for var, value in original.items():
        if value is not None:
            os.environ[var] = value
        elif var in os.environ:
            del os.environ[var]
