"""
Policy Engine for HostGuard.

The Policy Engine decides whether a terminal command or a filesystem path
may reach the host. Every guarded capability call goes through it first.

Design Principles:
    - Deny-by-default: a command runs only when it is an exact allow-list match
    - Structural checks first: malformed input is refused before any rule lookup
    - Exfiltration beats the allow-list: local-data + network-egress signals in
      one command deny even allow-listed text
    - Predictable: same input and catalog always produce the same decision

Command decision order (first match wins):
    1. empty after trimming
    2. longer than MAX_COMMAND_LENGTH after trimming
    3. a line break (CR, LF, NEL, U+2028, U+2029) anywhere in the raw text
    4. any other ASCII control character in the raw text
    5. local-data token AND network-egress token in the normalized text
    6. exact allow-list match on the trimmed text  -> allow
    7. first blocked token (catalog order) in the normalized text
    8. not on the allow-list

Path decision order:
    1. not syntactically absolute
    2. traversal segment after normalization
    3. first blocked path pattern in the normalized text
    4. allow

Security Note:
    This module is security-critical. The engine holds no mutable state,
    so a single instance may be shared freely.
"""

from functools import lru_cache

from loguru import logger

from hostguard.policy.normalize import fold, has_traversal_segment, is_absolute_path, normalize
from hostguard.schema import (
    CONTROL_CHAR_PATTERN,
    LINE_BREAK_PATTERN,
    MAX_COMMAND_LENGTH,
    PolicyDecision,
    RuleCatalog,
)

REASON_EMPTY = "Command is empty"
REASON_TOO_LONG = "Command exceeds maximum allowed length"
REASON_MULTILINE = "Multiline commands are not allowed"
REASON_CONTROL_CHARS = "Control characters are not allowed"
REASON_EXFILTRATION = "Potential local-data exfiltration pattern detected"
REASON_NOT_ALLOWED = "Command is not on allow-list"
REASON_RELATIVE_PATH = "Only absolute paths are allowed"
REASON_TRAVERSAL = "Path traversal segments are not allowed"


class PolicyEngine:
    """
    Evaluates commands and paths against a RuleCatalog.

    Usage:
        engine = PolicyEngine(catalog)
        reason = engine.evaluate_command("ls -la")
        if reason is None:
            # allowed
        else:
            # denied, reason says why

    Attributes:
        catalog: The rule catalog being enforced
    """

    def __init__(self, catalog: RuleCatalog | None = None) -> None:
        self.catalog = catalog or RuleCatalog()
        # Folded views are computed once; the catalog never changes afterwards
        self._allowed = frozenset(self.catalog.allowed_commands)
        self._blocked_tokens = tuple(
            (token, fold(token)) for token in self.catalog.blocked_command_tokens
        )
        self._blocked_paths = tuple(
            (pattern, fold(pattern)) for pattern in self.catalog.blocked_path_patterns
        )
        self._local_data = tuple(fold(t) for t in self.catalog.local_data_tokens)
        self._egress = tuple(fold(t) for t in self.catalog.network_egress_tokens)

    # =========================================================================
    # Command Policy
    # =========================================================================

    def decide_command(self, command: str) -> PolicyDecision:
        """
        Evaluate a terminal command string.

        Args:
            command: The raw command text as the caller would send it

        Returns:
            PolicyDecision with the denial reason and the rule that matched
        """
        trimmed = command.strip()

        if not trimmed:
            return self._deny_command(command, REASON_EMPTY, "empty")

        if len(trimmed) > MAX_COMMAND_LENGTH:
            return self._deny_command(command, REASON_TOO_LONG, "max_length")

        if LINE_BREAK_PATTERN.search(command):
            return self._deny_command(command, REASON_MULTILINE, "multiline")

        if CONTROL_CHAR_PATTERN.search(command):
            return self._deny_command(command, REASON_CONTROL_CHARS, "control_chars")

        low = normalize(trimmed)
        has_local_data = any(token in low for token in self._local_data)
        has_egress = any(token in low for token in self._egress)
        if has_local_data and has_egress:
            return self._deny_command(command, REASON_EXFILTRATION, "exfiltration")

        if trimmed in self._allowed:
            return PolicyDecision.allow(
                "Command is on allow-list",
                rule=f"allowed_commands[{trimmed}]",
            )

        for token, folded in self._blocked_tokens:
            if folded in low:
                return self._deny_command(
                    command,
                    f"Blocked token detected: {token}",
                    f"blocked_command_tokens[{token}]",
                )

        return self._deny_command(command, REASON_NOT_ALLOWED, "deny_by_default")

    def evaluate_command(self, command: str) -> str | None:
        """Return the denial reason for a command, or None when allowed."""
        decision = self.decide_command(command)
        return None if decision.allowed else decision.reason

    def _deny_command(self, command: str, reason: str, rule: str) -> PolicyDecision:
        logger.info(
            "policy_decision kind=command action=deny rule={} reason={} input={!r}",
            rule,
            reason,
            command[:80],
        )
        return PolicyDecision.deny(reason, rule=rule)

    # =========================================================================
    # Path Policy
    # =========================================================================

    def decide_path(self, path: str) -> PolicyDecision:
        """
        Evaluate a filesystem path string.

        The path is never resolved against the real filesystem; the decision
        is made on the text alone.
        """
        if not is_absolute_path(path):
            return self._deny_path(path, REASON_RELATIVE_PATH, "absolute_only")

        low = normalize(path)

        if has_traversal_segment(low):
            return self._deny_path(path, REASON_TRAVERSAL, "traversal")

        for pattern, folded in self._blocked_paths:
            if folded in low:
                return self._deny_path(
                    path,
                    f"Sensitive path pattern detected: {pattern}",
                    f"blocked_path_patterns[{pattern}]",
                )

        return PolicyDecision.allow("Path allowed", rule="absolute_path")

    def evaluate_path(self, path: str) -> str | None:
        """Return the denial reason for a path, or None when allowed."""
        decision = self.decide_path(path)
        return None if decision.allowed else decision.reason

    def _deny_path(self, path: str, reason: str, rule: str) -> PolicyDecision:
        logger.info(
            "policy_decision kind=path action=deny rule={} reason={} input={!r}",
            rule,
            reason,
            path[:120],
        )
        return PolicyDecision.deny(reason, rule=rule)


@lru_cache(maxsize=1)
def default_engine() -> PolicyEngine:
    """Engine over the built-in catalog, built on first use."""
    return PolicyEngine(RuleCatalog())


def evaluate_command(command: str, engine: PolicyEngine | None = None) -> str | None:
    """Denial reason for ``command`` (None when allowed)."""
    return (engine or default_engine()).evaluate_command(command)


def evaluate_path(path: str, engine: PolicyEngine | None = None) -> str | None:
    """Denial reason for ``path`` (None when allowed)."""
    return (engine or default_engine()).evaluate_path(path)
