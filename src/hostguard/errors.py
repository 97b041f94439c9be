"""
Exception hierarchy for HostGuard.

All HostGuard exceptions inherit from HostGuardError, allowing callers to catch
every HostGuard-specific exception with a single except clause.

Exception Categories:
    - PolicyViolation: A guarded wrapper refused an input
    - CapabilityFailure: A host capability failed after the policy allowed the call
    - ConfigError: Configuration could not be loaded or validated
    - ReportError: A report could not be written to its sink

Malformed event payloads are deliberately absent: handlers absorb them
instead of raising.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Policy errors: 1xxx
ERROR_POLICY_VIOLATION = 1001
ERROR_POLICY_COMMAND_BLOCKED = 1002
ERROR_POLICY_PATH_BLOCKED = 1003

# Capability errors: 2xxx
ERROR_CAPABILITY_FAILED = 2001
ERROR_CAPABILITY_UNAVAILABLE = 2002

# Configuration errors: 3xxx
ERROR_CONFIG_INVALID = 3001

# Report errors: 4xxx
ERROR_REPORT_WRITE = 4001


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class HostGuardError(Exception):
    """
    Base exception for all HostGuard errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Policy Errors
# =============================================================================


@dataclass
class PolicyViolation(HostGuardError):
    """
    Raised by a guarded wrapper when the policy denies its input.

    The denial reason is carried verbatim so callers can show it or
    match on it. A PolicyViolation is never retried.

    Attributes:
        reason: The evaluator's denial reason
        rule: Which policy rule caused the denial
    """

    reason: str = ""
    rule: str | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Blocked by policy. {self.reason}"
        if self.code == 0:
            self.code = ERROR_POLICY_VIOLATION
        self.context.update({
            "reason": self.reason,
            "rule": self.rule,
        })


@dataclass
class CommandBlockedError(PolicyViolation):
    """Raised when a terminal command is blocked by policy."""

    command: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Terminal command blocked by policy. {self.reason}"
        if self.code == 0:
            self.code = ERROR_POLICY_COMMAND_BLOCKED
        super().__post_init__()
        self.context["command"] = self.command


@dataclass
class PathBlockedError(PolicyViolation):
    """Raised when a filesystem path is blocked by policy."""

    path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"File path blocked by policy. {self.reason}"
        if self.code == 0:
            self.code = ERROR_POLICY_PATH_BLOCKED
        if not self.suggestion:
            self.suggestion = "Use an absolute path outside the sensitive locations"
        super().__post_init__()
        self.context["path"] = self.path


# =============================================================================
# Capability Errors
# =============================================================================


@dataclass
class CapabilityFailure(HostGuardError):
    """
    Raised when a host capability fails after the policy allowed the call.

    Attributes:
        capability: Capability area (e.g., "terminal", "filesystem")
        operation: The operation that failed (e.g., "execute", "read_text")
        underlying_error: Text of the original error
    """

    capability: str = ""
    operation: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"{self.capability}.{self.operation} failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_CAPABILITY_FAILED
        self.context.update({
            "capability": self.capability,
            "operation": self.operation,
            "underlying_error": self.underlying_error,
        })


@dataclass
class CapabilityUnavailableError(CapabilityFailure):
    """Raised when the host has no usable instance of a capability."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"{self.capability} capability is not available"
        if self.code == 0:
            self.code = ERROR_CAPABILITY_UNAVAILABLE
        super().__post_init__()


# =============================================================================
# Configuration / Report Errors
# =============================================================================


@dataclass
class ConfigError(HostGuardError):
    """Raised when a configuration file cannot be loaded or validated."""

    source: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID
        if not self.suggestion:
            self.suggestion = "Check the YAML syntax and field names against the documented schema"
        self.context["source"] = self.source


@dataclass
class ReportError(HostGuardError):
    """Raised when a report cannot be written to its sink."""

    suite: str = ""
    destination: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Could not write {self.suite} report to {self.destination}"
        if self.code == 0:
            self.code = ERROR_REPORT_WRITE
        self.context.update({
            "suite": self.suite,
            "destination": self.destination,
        })
