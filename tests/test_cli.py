"""
Tests for the command line entry point, router and interactive shell
"""
from unittest.mock import MagicMock, patch

import pytest

from courier.cli.cli import create_controller, main
from courier.cli.cli_parser import setup_argument_parser
from courier.cli.router import CommandRouter
from courier.cli.shell import CourierShell, report_error
from courier.features.compose import DraftState
from courier.features.mail import SessionController
from courier.utils.errors import BackendError, InvalidConfigError

from .test_helpers import response


class TestArgumentParser:
    """Tests for argument parsing"""

    def test_row_and_range_commands(self):
        parser = setup_argument_parser()

        assert parser.parse_args(["read", "3"]).row == 3
        assert parser.parse_args(["delete", "2-4", "--yes"]).yes is True
        assert parser.parse_args(["reply", "1", "--all"]).all is True
        assert parser.parse_args(["copy", "1-2", "Archive"]).target == "Archive"

    def test_no_command_means_shell(self):
        assert setup_argument_parser().parse_args([]).command is None

    def test_global_options(self):
        args = setup_argument_parser().parse_args(["--picker", "plain", "--account", "work", "list"])

        assert args.picker == "plain"
        assert args.account == "work"


class TestCommandRouter:
    """Tests for routing commands to the controller"""

    def test_routes_list_page(self, controller, runner):
        router = CommandRouter(controller)

        assert router.route("list", {"page": 2}) is True
        assert controller.state.page == 2

    def test_routes_reply_all(self):
        controller = MagicMock()
        router = CommandRouter(controller)

        router.route("reply", {"row": 4, "all": True})

        controller.compose.assert_called_once_with("reply-all", 4)

    def test_aborted_is_not_success(self, controller):
        controller.list_envelopes()
        controller.display.confirm.ask = MagicMock(return_value=False)

        assert CommandRouter(controller).route("delete", {"range": "1"}) is False

    def test_unknown_command(self, controller):
        with pytest.raises(ValueError):
            CommandRouter(controller).route("launch", {})


class TestCourierShell:
    """Tests for the interactive shell"""

    def make_shell(self, controller, lines=()):
        session = MagicMock()
        session.prompt.side_effect = list(lines) + [EOFError()]
        return CourierShell(controller, session=session)

    def test_dispatch_builtins(self, controller):
        shell = self.make_shell(controller)

        assert shell.dispatch("") is True
        assert shell.dispatch("help") is True
        assert shell.dispatch("quit") is False

    def test_errors_become_status_lines(self, controller, buffer_console):
        _, buffer = buffer_console
        shell = self.make_shell(controller)

        assert shell.dispatch("read 9") is True

        assert "No message listing is displayed" in buffer.getvalue()

    def make_wired_controller(self, config_manager, runner, editor, buffer_console):
        """Controller whose bridge reports through its own status lines"""
        console, _ = buffer_console
        controller = SessionController(config_manager, console=console, editor=editor)
        controller.bridge.runner = runner
        return controller

    def test_backend_error_lines_printed_once(
        self, config_manager, runner, editor, buffer_console
    ):
        _, buffer = buffer_console
        controller = self.make_wired_controller(config_manager, runner, editor, buffer_console)
        runner.outputs["list"] = "first problem\nsecond problem"
        shell = self.make_shell(controller)

        shell.dispatch("next")

        output = buffer.getvalue()
        assert output.count("first problem") == 1
        assert output.count("second problem") == 1
        assert controller.state.page == 0

    def test_failed_copy_reported_once(self, config_manager, runner, editor, buffer_console):
        _, buffer = buffer_console
        controller = self.make_wired_controller(config_manager, runner, editor, buffer_console)
        controller.list_envelopes()
        runner.outputs["copy"] = "mailbox does not exist"
        shell = self.make_shell(controller)

        assert shell.dispatch("copy 1 Nope") is True

        assert buffer.getvalue().count("mailbox does not exist") == 1

    def test_unreported_backend_error_is_printed(self, buffer_console):
        console, buffer = buffer_console

        report_error(console, BackendError(["quota exceeded"]))

        assert "quota exceeded" in buffer.getvalue()

    def test_startup_options_rejected(self, controller, runner):
        shell = self.make_shell(controller)

        assert shell.dispatch("--account work list") is True

        assert controller.state.account != "work"
        assert runner.calls_with("list") == []

    def test_bad_syntax_keeps_running(self, controller):
        shell = self.make_shell(controller)

        assert shell.dispatch("read notanumber") is True
        assert shell.dispatch('search "unclosed') is True

    def test_run_lists_and_exits(self, controller, runner):
        shell = self.make_shell(controller, ["mailboxes"])

        assert shell.run() == 0

        assert runner.calls_with("accounts")
        assert runner.calls_with("mailboxes")
        assert controller.table.kind == "mailboxes"

    def test_exit_abandons_draft(self, controller, runner, editor):
        runner.outputs["new"] = response("draft")
        editor.edit.side_effect = KeyboardInterrupt
        shell = self.make_shell(controller, ["write", "exit"])

        shell.run()

        assert controller.drafts.state is DraftState.CANCELLED


class TestMain:
    """Tests for one-shot mode"""

    def test_one_shot_read(self, controller, runner):
        runner.outputs["read"] = "Hello"

        with patch("courier.cli.cli.create_controller", return_value=controller):
            assert main(["read", "1"]) == 0

        assert runner.calls_with("read")[0][-1] == "101"

    def test_one_shot_failure_exit_code(self, controller):
        with patch("courier.cli.cli.create_controller", return_value=controller):
            assert main(["read", "9"]) == 1

    def test_configuration_error(self):
        with patch("courier.cli.cli.create_controller", side_effect=InvalidConfigError("bad")):
            assert main(["list"]) == 1

    @patch("courier.cli.cli.init_logging")
    def test_create_controller_applies_options(self, mock_logging, tmp_path, buffer_console):
        console, _ = buffer_console
        args = setup_argument_parser().parse_args(
            ["--config", str(tmp_path / "config.json"), "--picker", "plain",
             "--account", "work", "--mailbox", "Archive", "list"]
        )

        controller = create_controller(args, console)

        assert controller.config.ui.picker == "plain"
        assert controller.state.account == "work"
        assert controller.state.mailbox == "Archive"
        mock_logging.assert_called_once_with("INFO", True)
