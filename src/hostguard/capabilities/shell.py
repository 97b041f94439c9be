"""
Local terminal adapter for HostGuard.

LocalTerminal runs commands as subprocesses so the suites and the CLI have a
terminal capability outside a desktop host.

Security Note:
    Policy enforcement happens BEFORE execute() is called (see
    hostguard.policy.guard). This adapter adds its own safety net:
    - Commands are split with shlex and run with shell=False, so
      "echo a && echo b" prints the literal "&&" instead of chaining
    - Timeout enforcement to prevent runaway processes
    - Output size limits to prevent memory exhaustion
"""

import os
import shlex
import subprocess
import uuid
from pathlib import Path
from typing import Any

from loguru import logger

from hostguard.capabilities.base import Terminal, TerminalCapability
from hostguard.capabilities.events import LocalEventBus
from hostguard.errors import CapabilityFailure

EVENT_TERMINAL_OUTPUT = "terminal:output"
EVENT_COMMAND_COMPLETED = "terminal:command-completed"


class LocalTerminal(TerminalCapability):
    """
    Subprocess-backed terminals.

    Each execute() call is a fresh process; a Terminal handle only carries the
    working directory and an id used to tag emitted events.

    Example:
        terminals = LocalTerminal(working_dir="/tmp")
        term = terminals.create("probe")
        result = terminals.execute(term, "echo hello")
        print(result["stdout"])  # "hello\\n"
    """

    def __init__(
        self,
        working_dir: str | Path = ".",
        timeout_seconds: int = 60,
        max_output_bytes: int = 1024 * 1024,
        events: LocalEventBus | None = None,
    ) -> None:
        self.working_dir = Path(working_dir).resolve()
        self.timeout_seconds = timeout_seconds
        self.max_output_bytes = max_output_bytes
        self.events = events
        self._open: dict[str, Terminal] = {}

    def create(self, name: str) -> Terminal:
        if not self.working_dir.is_dir():
            raise CapabilityFailure(
                capability="terminal",
                operation="create",
                underlying_error=f"Working directory is not a directory: {self.working_dir}",
            )

        terminal = Terminal(
            id=uuid.uuid4().hex[:12],
            name=name,
            metadata={"cwd": str(self.working_dir)},
        )
        self._open[terminal.id] = terminal
        logger.debug("terminal_created id={} name={}", terminal.id, name)
        return terminal

    def close(self, terminal: Terminal) -> None:
        self._open.pop(terminal.id, None)
        logger.debug("terminal_closed id={}", terminal.id)

    def execute(self, terminal: Terminal, command: str) -> dict[str, Any]:
        """
        Execute a command and wait for it to finish.

        Returns:
            Dict with return_code, stdout and stderr

        Raises:
            CapabilityFailure: Unknown terminal, unparsable command, missing
                executable, timeout or OS error
        """
        if terminal.id not in self._open:
            raise self._failure(f"Terminal is not open: {terminal.id}")

        try:
            argv = shlex.split(command)
        except ValueError as e:
            raise self._failure(f"Cannot parse command: {e}") from e
        if not argv:
            raise self._failure("Command is empty")

        # CRITICAL: shell=False - this is what keeps chaining operators inert
        try:
            result = subprocess.run(
                argv,
                cwd=terminal.metadata.get("cwd", str(self.working_dir)),
                env=os.environ.copy(),
                capture_output=True,
                timeout=self.timeout_seconds,
                shell=False,
            )
        except subprocess.TimeoutExpired as e:
            raise self._failure(f"Command timed out after {self.timeout_seconds} seconds") from e
        except FileNotFoundError as e:
            raise self._failure(f"Executable not found: {argv[0]}") from e
        except PermissionError as e:
            raise self._failure(f"Permission denied executing: {argv[0]}") from e
        except OSError as e:
            raise self._failure(f"OS error executing command: {e}") from e

        stdout = self._decode(result.stdout)
        stderr = self._decode(result.stderr)

        if self.events is not None:
            self.events.publish({
                "type": EVENT_TERMINAL_OUTPUT,
                "terminalId": terminal.id,
                "data": stdout + stderr,
            })
            self.events.publish({
                "type": EVENT_COMMAND_COMPLETED,
                "terminalId": terminal.id,
                "command": command,
                "exitCode": result.returncode,
            })

        return {
            "return_code": result.returncode,
            "stdout": stdout,
            "stderr": stderr,
        }

    def _decode(self, raw: bytes) -> str:
        """Decode output, truncating past the size limit."""
        if len(raw) > self.max_output_bytes:
            truncate_msg = f"\n... [truncated, exceeded {self.max_output_bytes} bytes]".encode()
            raw = raw[: self.max_output_bytes] + truncate_msg
        return raw.decode("utf-8", errors="replace")

    @staticmethod
    def _failure(message: str) -> CapabilityFailure:
        return CapabilityFailure(
            capability="terminal",
            operation="execute",
            underlying_error=message,
        )
