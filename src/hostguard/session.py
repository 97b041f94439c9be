"""
Terminal session glue.

TerminalSession owns the "current terminal" handle that the suites read
through an accessor. It also provides the terminal event handlers, which
must tolerate any payload the host throws at them.
"""

import sys
import time
from collections import deque
from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger

from hostguard.capabilities.base import Notifier, Terminal, TerminalCapability
from hostguard.capabilities.shell import EVENT_COMMAND_COMPLETED, EVENT_TERMINAL_OUTPUT
from hostguard.errors import CapabilityUnavailableError
from hostguard.policy.engine import PolicyEngine
from hostguard.policy.guard import guarded_execute
from hostguard.schema import NotificationLevel

TRANSCRIPT_LIMIT = 1000

PROBE_COMMANDS_POSIX = (
    "echo PPTB_SECURITY_PROBE",
    "pwd",
    "uname -a",
    "echo CHAIN_TEST && echo SECOND_COMMAND",
)

PROBE_COMMANDS_WINDOWS = (
    "echo PPTB_SECURITY_PROBE",
    "Get-Location",
    "$PSVersionTable.PSVersion.ToString()",
    'Write-Output "CHAIN_TEST"; Write-Output "SECOND_COMMAND"',
)


class TerminalSession:
    """
    Holds at most one open terminal and its transcript.

    Attributes:
        terminals: The terminal capability
        notifier: Optional notifier for user-facing status
        transcript: Output and completion lines received for the current terminal;
            only the newest ``transcript_limit`` lines are kept
    """

    def __init__(
        self,
        terminals: TerminalCapability,
        notifier: Notifier | None = None,
        engine: PolicyEngine | None = None,
        name: str = "HostGuard Terminal",
        pacing_seconds: float = 0.3,
        sleep: Callable[[float], None] = time.sleep,
        transcript_limit: int = TRANSCRIPT_LIMIT,
    ) -> None:
        self.terminals = terminals
        self.notifier = notifier
        self.engine = engine
        self.name = name
        self.pacing_seconds = pacing_seconds
        self._sleep = sleep
        self._current: Terminal | None = None
        self.transcript: deque[str] = deque(maxlen=transcript_limit)

    @property
    def current(self) -> Terminal | None:
        return self._current

    def create(self) -> Terminal:
        """Create a terminal and make it current."""
        terminal = self.terminals.create(self.name)
        self._current = terminal
        self.transcript.clear()
        logger.info("terminal_created name={} id={}", terminal.name, terminal.id)
        if self.notifier is not None:
            self.notifier.notify(
                "Terminal Created",
                f"Terminal {terminal.name} is ready",
                NotificationLevel.SUCCESS,
            )
        return terminal

    def close(self) -> None:
        """Close the current terminal, if any."""
        if self._current is None:
            return
        self.terminals.close(self._current)
        logger.info("terminal_closed id={}", self._current.id)
        self._current = None
        self.transcript.clear()

    def execute(self, command: str) -> Any:
        """Run ``command`` through the policy guard in the current terminal."""
        if self._current is None:
            raise CapabilityUnavailableError(
                capability="terminal",
                operation="execute",
                suggestion="Create a terminal first",
            )
        self.transcript.append(f"> {command}")
        return guarded_execute(self.terminals, self._current, command, self.engine)

    def run_probe(self, platform: str | None = None) -> list[str]:
        """
        Run the safe probe commands for ``platform`` (defaults to this OS).

        The probe only shows whether terminal access is available; none of
        its commands changes anything.

        Returns:
            The commands that were executed, in order
        """
        if self._current is None:
            self.create()

        platform = platform or sys.platform
        commands = PROBE_COMMANDS_WINDOWS if platform.startswith("win") else PROBE_COMMANDS_POSIX

        logger.warning("terminal_probe_start platform={} commands={}", platform, len(commands))
        executed = []
        for index, command in enumerate(commands):
            if index:
                self._sleep(self.pacing_seconds)
            self.execute(command)
            executed.append(command)

        if self.notifier is not None:
            self.notifier.notify(
                "Security Probe Complete",
                "Review terminal output for risk indicators",
                NotificationLevel.WARNING,
            )
        return executed

    def handle_event(self, payload: Any) -> None:
        """Route a platform event to the matching terminal handler."""
        if not isinstance(payload, Mapping):
            return
        event_type = payload.get("type")
        if event_type == EVENT_TERMINAL_OUTPUT:
            self.handle_output(payload)
        elif event_type == EVENT_COMMAND_COMPLETED:
            self.handle_command_completed(payload)

    def handle_output(self, payload: Any) -> None:
        """Append terminal output for the current terminal; ignore anything else."""
        data = self._payload_for_current(payload)
        if data is None:
            return
        text = data.get("data")
        if isinstance(text, str):
            self.transcript.append(text)

    def handle_command_completed(self, payload: Any) -> None:
        """Record a completion line for the current terminal; ignore anything else."""
        data = self._payload_for_current(payload)
        if data is None:
            return
        self.transcript.append(f"[Command completed with exit code: {data.get('exitCode')}]")

    def _payload_for_current(self, payload: Any) -> Mapping[str, Any] | None:
        if not isinstance(payload, Mapping):
            return None
        if self._current is None or payload.get("terminalId") != self._current.id:
            return None
        return payload
