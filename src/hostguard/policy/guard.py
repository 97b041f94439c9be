"""
Guarded capability wrappers.

Each wrapper evaluates its input first and only then calls the capability.
A denied input never reaches the capability: the PolicyViolation is raised
before the call. Inputs are immutable strings, so the decision cannot go
stale between the check and the call.
"""

from typing import Any

from hostguard.capabilities.base import FileSystemCapability, Terminal, TerminalCapability
from hostguard.errors import CommandBlockedError, PathBlockedError
from hostguard.policy.engine import PolicyEngine, default_engine


def guarded_execute(
    capability: TerminalCapability,
    terminal: Terminal,
    command: str,
    engine: PolicyEngine | None = None,
) -> Any:
    """
    Run ``command`` in ``terminal`` if the command policy allows it.

    Raises:
        CommandBlockedError: If the policy denies the command
        CapabilityFailure: If the terminal capability fails
    """
    decision = (engine or default_engine()).decide_command(command)
    if not decision.allowed:
        raise CommandBlockedError(
            reason=decision.reason,
            rule=decision.rule_matched,
            command=command,
        )

    return capability.execute(terminal, command)


def guarded_read(
    capability: FileSystemCapability,
    path: str,
    engine: PolicyEngine | None = None,
) -> str:
    """
    Read ``path`` as text if the path policy allows it.

    Raises:
        PathBlockedError: If the policy denies the path
        CapabilityFailure: If the filesystem capability fails
    """
    decision = (engine or default_engine()).decide_path(path)
    if not decision.allowed:
        raise PathBlockedError(
            reason=decision.reason,
            rule=decision.rule_matched,
            path=path,
        )

    return capability.read_text(path)
