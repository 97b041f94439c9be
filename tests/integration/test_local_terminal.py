"""
Integration tests for the subprocess-backed terminal.

These run real processes, so they stick to the allow-listed probe commands
that exist on any POSIX system.
"""

import sys
from pathlib import Path

import pytest

from hostguard.capabilities import LocalEventBus, LocalTerminal
from hostguard.capabilities.base import Terminal
from hostguard.capabilities.shell import EVENT_COMMAND_COMPLETED, EVENT_TERMINAL_OUTPUT
from hostguard.errors import CapabilityFailure, CommandBlockedError
from hostguard.host import local_host
from hostguard.policy import guarded_execute
from hostguard.policy.engine import PolicyEngine

pytestmark = pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX commands")


class TestLocalTerminal:
    """LocalTerminal against real processes."""

    def test_echo(self, temp_dir: Path) -> None:
        terminals = LocalTerminal(working_dir=temp_dir)
        terminal = terminals.create("probe")

        result = terminals.execute(terminal, "echo PPTB_SECURITY_PROBE")

        assert result["return_code"] == 0
        assert result["stdout"].strip() == "PPTB_SECURITY_PROBE"

    def test_chaining_operator_is_literal(self, temp_dir: Path) -> None:
        terminals = LocalTerminal(working_dir=temp_dir)
        terminal = terminals.create("probe")

        result = terminals.execute(terminal, "echo CHAIN_TEST && echo SECOND_COMMAND")

        assert result["stdout"].strip() == "CHAIN_TEST && echo SECOND_COMMAND"

    def test_runs_in_working_dir(self, temp_dir: Path) -> None:
        terminals = LocalTerminal(working_dir=temp_dir)
        terminal = terminals.create("probe")

        result = terminals.execute(terminal, "pwd")

        assert Path(result["stdout"].strip()).resolve() == temp_dir.resolve()

    def test_events_published(self, temp_dir: Path) -> None:
        bus = LocalEventBus()
        received: list[dict] = []
        bus.subscribe(received.append)
        terminals = LocalTerminal(working_dir=temp_dir, events=bus)
        terminal = terminals.create("probe")

        terminals.execute(terminal, "echo PPTB_SECURITY_PROBE")

        assert [e["type"] for e in received] == [EVENT_TERMINAL_OUTPUT, EVENT_COMMAND_COMPLETED]
        assert all(e["terminalId"] == terminal.id for e in received)
        assert received[1]["exitCode"] == 0

    def test_unknown_terminal(self, temp_dir: Path) -> None:
        terminals = LocalTerminal(working_dir=temp_dir)

        with pytest.raises(CapabilityFailure):
            terminals.execute(Terminal(id="missing", name="x"), "pwd")

    def test_closed_terminal(self, temp_dir: Path) -> None:
        terminals = LocalTerminal(working_dir=temp_dir)
        terminal = terminals.create("probe")
        terminals.close(terminal)

        with pytest.raises(CapabilityFailure):
            terminals.execute(terminal, "pwd")

    def test_missing_executable(self, temp_dir: Path) -> None:
        terminals = LocalTerminal(working_dir=temp_dir)
        terminal = terminals.create("probe")

        with pytest.raises(CapabilityFailure) as exc_info:
            terminals.execute(terminal, "hostguard-no-such-binary")
        assert exc_info.value.underlying_error.startswith("Executable not found")

    def test_output_truncated(self, temp_dir: Path) -> None:
        terminals = LocalTerminal(working_dir=temp_dir, max_output_bytes=4)
        terminal = terminals.create("probe")

        result = terminals.execute(terminal, "echo PPTB_SECURITY_PROBE")

        assert result["stdout"].startswith("PPTB")
        assert "truncated" in result["stdout"]

    def test_missing_working_dir(self, temp_dir: Path) -> None:
        terminals = LocalTerminal(working_dir=temp_dir / "gone")

        with pytest.raises(CapabilityFailure):
            terminals.create("probe")


class TestGuardedLocalTerminal:
    """Policy guard in front of real processes."""

    def test_blocked_command_never_runs(self, temp_dir: Path) -> None:
        bus = LocalEventBus()
        received: list[dict] = []
        bus.subscribe(received.append)
        terminals = LocalTerminal(working_dir=temp_dir, events=bus)
        terminal = terminals.create("probe")

        with pytest.raises(CommandBlockedError):
            guarded_execute(terminals, terminal, "echo hi && touch pwned", PolicyEngine())

        assert received == []
        assert not (temp_dir / "pwned").exists()


class TestLocalHostSession:
    """local_host wiring with a real terminal."""

    def test_output_reaches_transcript(self, temp_dir: Path) -> None:
        host, session = local_host(working_dir=temp_dir)
        host.create_terminal()
        try:
            session.execute("echo PPTB_SECURITY_PROBE")
            transcript = list(session.transcript)
        finally:
            session.close()

        assert transcript[0] == "> echo PPTB_SECURITY_PROBE"
        assert any("PPTB_SECURITY_PROBE" in line for line in transcript[1:])
        assert transcript[-1] == "[Command completed with exit code: 0]"
        assert host.get_current_terminal() is None
