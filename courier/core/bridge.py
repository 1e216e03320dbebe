"""Bridge to the external mail command.

Every backend call goes through :class:`CommandBridge`: a command template
and its arguments are turned into an argv list, the command runs to
completion, and its standard output is classified as one of the outcome
types below.
"""

import json
import shlex
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Callable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
)

from courier.utils.config_manager import BackendConfig
from courier.utils.errors import BackendError, InvocationError
from courier.utils.logging import get_logger, log_call


class OutputMode(str, Enum):
    """Output format requested from the backend."""

    STRUCTURED = "json"
    PLAIN = "plain"


## Outcomes


@dataclass(frozen=True)
class Success:
    """Backend call completed; ``has_payload`` is False for empty output."""

    payload: Any = None
    has_payload: bool = False

    @classmethod
    def empty(cls) -> "Success":
        return cls()

    @classmethod
    def with_payload(cls, payload: Any) -> "Success":
        return cls(payload=payload, has_payload=True)


@dataclass(frozen=True)
class Diagnostic:
    """Non-structured output, reported line by line as error text."""

    lines: Tuple[str, ...]

    @classmethod
    def from_output(cls, output: str) -> "Diagnostic":
        lines = tuple(line for line in output.splitlines() if line.strip())
        return cls(lines=lines or (output.strip(),))


@dataclass(frozen=True)
class Aborted:
    """The user cancelled an operation that was waiting on a choice."""

    reason: str = "cancelled"


Outcome = Union[Success, Diagnostic, Aborted]


## Invocations


@dataclass(frozen=True)
class CLIInvocation:
    """One backend call: a named command template plus its arguments."""

    command: str
    description: str
    args: Mapping[str, Any] = field(default_factory=dict)
    output: OutputMode = OutputMode.STRUCTURED
    propagate: bool = False
    account: Optional[str] = None


def build_argv(
    template: str,
    args: Mapping[str, Any],
    *,
    executable: str,
    output: OutputMode,
    output_flag: str = "--output",
    account: Optional[str] = None,
    account_flag: str = "--account",
) -> List[str]:
    """Build an argv list from a command template.

    The template is split into tokens first and each ``{placeholder}`` is
    substituted inside its own token, so every argument value stays a single
    argv entry whatever characters it contains.
    """
    argv = [executable, output_flag, output.value]
    if account:
        argv += [account_flag, account]

    values = {key: "" if value is None else str(value) for key, value in args.items()}
    try:
        tokens = shlex.split(template)
    except ValueError as e:
        raise InvocationError(f"Malformed command template '{template}': {e}") from e

    for token in tokens:
        try:
            argv.append(token.format_map(values))
        except KeyError as e:
            raise InvocationError(
                f"Missing argument {e} for command template '{template}'"
            ) from e
        except (IndexError, ValueError) as e:
            raise InvocationError(f"Malformed command template '{template}': {e}") from e

    return argv


def command_line(argv: Sequence[str]) -> str:
    """Shell-escaped rendering of an argv list, one quoted word per argument."""
    return " ".join(shlex.quote(arg) for arg in argv)


def classify_output(output: str, mode: OutputMode) -> Outcome:
    """Classify raw backend stdout into an outcome."""
    text = output.strip()
    if not text:
        return Success.empty()

    if mode is OutputMode.PLAIN:
        return Success.with_payload(text)

    # json maps the null/true/false literals to None/True/False on parse.
    try:
        envelope = json.loads(text)
    except ValueError:
        return Diagnostic.from_output(output)

    if not isinstance(envelope, dict) or "response" not in envelope:
        return Diagnostic.from_output(output)

    return Success.with_payload(envelope["response"])


## Bridge


class StatusSink(Protocol):
    """Status channel the bridge reports progress and diagnostics to."""

    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


Runner = Callable[[List[str]], str]


def run_command(argv: List[str]) -> str:
    """Run argv synchronously and return combined stdout and stderr."""
    result = subprocess.run(
        argv,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        stdin=subprocess.DEVNULL,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=False,
    )
    return result.stdout or ""


class CommandBridge:
    """Builds, runs and classifies backend invocations.

    There are no retries and no timeouts: a call either completes or is
    reported as a diagnostic.
    """

    def __init__(
        self,
        config: BackendConfig,
        status: Optional[StatusSink] = None,
        runner: Runner = run_command,
    ):
        self.config = config
        self.status = status
        self.runner = runner

    def build(self, invocation: CLIInvocation) -> List[str]:
        """Resolve an invocation's template into an argv list."""
        template = self.config.commands.get(invocation.command)
        if template is None:
            raise InvocationError(
                f"Unknown backend command '{invocation.command}'",
                description=invocation.description,
            )

        return build_argv(
            template,
            invocation.args,
            executable=self.config.executable,
            output=invocation.output,
            output_flag=self.config.output_flag,
            account=invocation.account,
            account_flag=self.config.account_flag,
        )

    @log_call
    def invoke(self, invocation: CLIInvocation) -> Outcome:
        """Execute an invocation and classify its output.

        Raises:
            BackendError: when the call is marked ``propagate`` and the
                backend answered with diagnostic text.
        """
        argv = self.build(invocation)
        cmd_logger = get_logger(__name__, command=invocation.command)
        cmd_logger.debug(f"Running {command_line(argv)}")
        cmd_logger.info(f"{invocation.description}...")
        self._report("info", f"{invocation.description}...")

        try:
            output = self.runner(argv)
        except OSError as e:
            output = f"Cannot run {argv[0]}: {e.strerror or e}"

        outcome = classify_output(output, invocation.output)

        if isinstance(outcome, Diagnostic):
            reported = self.status is not None
            for line in outcome.lines:
                cmd_logger.error(line, extra={"reported": reported})
                self._report("error", line)
            if invocation.propagate:
                error = BackendError(outcome.lines, description=invocation.description)
                error.reported = reported
                raise error
            return outcome

        self._report("info", f"{invocation.description}...done")
        return outcome

    def _report(self, level: str, message: str) -> None:
        if self.status is not None:
            getattr(self.status, level)(message)
