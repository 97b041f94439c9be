"""
Schema definitions for HostGuard.

This module defines the Pydantic models used throughout HostGuard:
- RuleCatalog: The immutable allow/deny string sets the evaluators consume
- SuiteSettings / GuardConfig: Tunables loaded once at startup
- PolicyDecision: The result of evaluating a command or path
- SecuritySuiteResult: One check's outcome inside a suite run
- SuiteReport / AllSuitesReport: The serializable report shapes

Design Decisions:
    - Every model is frozen; the catalog is never mutated after startup
    - Catalog entries are tuples so declaration order is preserved
      (the first matching block token is the one reported)
    - Report models serialize with camelCase keys (generatedAt,
      highestSeverity) since external tooling reads that shape
"""

import re
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from hostguard.errors import ConfigError


# =============================================================================
# Enums
# =============================================================================


class Severity(str, Enum):
    """
    Severity attached to every suite result.

    The order is fixed and total: LOW < MEDIUM < HIGH < CRITICAL.
    Ordering operators compare by ``rank``, not by the string values, so
    ``max()`` and ``sorted()`` follow the severity order.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Position in the total order (LOW is 0)."""
        return _SEVERITY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class CheckStatus(str, Enum):
    """Outcome of a single suite check."""

    PASS = "pass"
    FAIL = "fail"


class NotificationLevel(str, Enum):
    """Level of a user-facing notification."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


# =============================================================================
# Rule Catalog
# =============================================================================

# Structural command limits, shared by the evaluator and catalog validation
MAX_COMMAND_LENGTH = 200
LINE_BREAK_PATTERN = re.compile(r"[\r\n\x85\u2028\u2029]")
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x1f\x7f]")

DEFAULT_ALLOWED_COMMANDS = (
    "dir",
    "ls -la",
    "echo PPTB_SECURITY_PROBE",
    "pwd",
    "uname -a",
    "echo CHAIN_TEST && echo SECOND_COMMAND",
    "Get-Location",
    "$PSVersionTable.PSVersion.ToString()",
    'Write-Output "CHAIN_TEST"; Write-Output "SECOND_COMMAND"',
)

# Compound tokens ("| curl", ".ssh") come before the tokens they contain so
# that the first match names the more specific rule.
DEFAULT_BLOCKED_COMMAND_TOKENS = (
    "rm ",
    "del ",
    "format",
    "sudo",
    "chmod",
    "chown",
    "powershell -enc",
    "invoke-expression",
    "downloadstring",
    "| curl",
    "| wget",
    "curl ",
    "wget ",
    "invoke-webrequest",
    "http://",
    "https://",
    "base64",
    "scp ",
    ".ssh",
    "ssh ",
    "id_rsa",
    "system_profiler",
    "wmic",
    "procdump",
    "memory",
    "dump",
)

DEFAULT_BLOCKED_PATH_PATTERNS = (
    "/etc/passwd",
    "/etc/shadow",
    "/etc/hosts",
    "/var/log/system.log",
    "/.ssh/",
    "\\.ssh\\",
    "id_rsa",
    "known_hosts",
    "c:\\windows\\system32",
)

DEFAULT_LOCAL_DATA_TOKENS = (
    "uname",
    "system_profiler",
    "wmic",
    "ipconfig",
    "ifconfig",
    "cat ",
    "type ",
    "get-content",
    "env",
    "$env:",
    "whoami",
    ".ssh",
    "id_rsa",
)

DEFAULT_NETWORK_EGRESS_TOKENS = (
    "curl ",
    "wget ",
    "invoke-webrequest",
    "http://",
    "https://",
    "ftp://",
    "scp ",
    "nc ",
    "netcat",
)


class RuleCatalog(BaseModel):
    """
    Immutable rule sets consumed by the command and path evaluators.

    Attributes:
        allowed_commands: Exact-match command strings that may run
        blocked_command_tokens: Substrings that deny a command (catalog order matters)
        blocked_path_patterns: Substrings that deny a path
        local_data_tokens: Signals of local data gathering
        network_egress_tokens: Signals of outbound network transfer
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed_commands: tuple[str, ...] = Field(
        default=DEFAULT_ALLOWED_COMMANDS,
        description="Exact-match command strings that may run",
    )
    blocked_command_tokens: tuple[str, ...] = Field(
        default=DEFAULT_BLOCKED_COMMAND_TOKENS,
        description="Substrings that deny a command; first match is reported",
    )
    blocked_path_patterns: tuple[str, ...] = Field(
        default=DEFAULT_BLOCKED_PATH_PATTERNS,
        description="Substrings that deny a path",
    )
    local_data_tokens: tuple[str, ...] = Field(
        default=DEFAULT_LOCAL_DATA_TOKENS,
        description="Signals of local data gathering",
    )
    network_egress_tokens: tuple[str, ...] = Field(
        default=DEFAULT_NETWORK_EGRESS_TOKENS,
        description="Signals of outbound network transfer",
    )

    @field_validator(
        "allowed_commands",
        "blocked_command_tokens",
        "blocked_path_patterns",
        "local_data_tokens",
        "network_egress_tokens",
    )
    @classmethod
    def validate_entries(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject blank entries; a blank substring would match every input."""
        for entry in v:
            if not entry.strip():
                msg = "Catalog entries must not be blank"
                raise ValueError(msg)
        return v

    @field_validator("allowed_commands")
    @classmethod
    def validate_allowed_commands(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject entries the command evaluator could never allow."""
        for entry in v:
            if entry != entry.strip():
                msg = f"Allowed command has leading or trailing whitespace: {entry!r}"
                raise ValueError(msg)
            if len(entry) > MAX_COMMAND_LENGTH:
                msg = f"Allowed command exceeds {MAX_COMMAND_LENGTH} characters: {entry[:40]!r}..."
                raise ValueError(msg)
            if LINE_BREAK_PATTERN.search(entry):
                msg = f"Allowed command contains a line break: {entry!r}"
                raise ValueError(msg)
            if CONTROL_CHAR_PATTERN.search(entry):
                msg = f"Allowed command contains a control character: {entry!r}"
                raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def check_allowed_not_exfiltration(self) -> "RuleCatalog":
        """Allowed commands must not trip the local-data/network-egress heuristic."""
        # Deferred: hostguard.policy imports this module
        from hostguard.policy.normalize import fold, normalize

        local_data = [fold(t) for t in self.local_data_tokens]
        egress = [fold(t) for t in self.network_egress_tokens]
        for entry in self.allowed_commands:
            low = normalize(entry)
            if any(t in low for t in local_data) and any(t in low for t in egress):
                msg = f"Allowed command matches the exfiltration heuristic: {entry!r}"
                raise ValueError(msg)
        return self


# =============================================================================
# Configuration
# =============================================================================


class SuiteSettings(BaseModel):
    """
    Tunables for the security suites.

    Attributes:
        terminal_name: Name given to a terminal the suites create
        burst_command: Allow-listed command replayed by the burst probe
        burst_size: Number of commands in the burst
        burst_pacing_seconds: Fixed delay between burst commands
        settings_key_prefix: Prefix of the scratch key used by the settings suite
        identity_operation: Record-store function used as the identity query
        listing_query: Read-only record-store listing query
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    terminal_name: str = Field(default="HostGuard Probe Terminal", min_length=1)
    burst_command: str = Field(default="echo PPTB_SECURITY_PROBE", min_length=1)
    burst_size: int = Field(default=5, ge=1, le=50)
    burst_pacing_seconds: float = Field(default=0.3, ge=0, le=5)
    settings_key_prefix: str = Field(default="security.suite.temp", min_length=1)
    identity_operation: str = Field(default="WhoAmI", min_length=1)
    listing_query: str = Field(
        default="accounts?$select=name,accountid&$top=1",
        min_length=1,
    )


class GuardConfig(BaseModel):
    """Complete HostGuard configuration (catalog plus suite tunables)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    catalog: RuleCatalog = Field(default_factory=RuleCatalog)
    suites: SuiteSettings = Field(default_factory=SuiteSettings)


# =============================================================================
# Runtime Models
# =============================================================================


class PolicyDecision(BaseModel):
    """
    Result of evaluating a command or path.

    Attributes:
        allowed: Whether the operation may proceed
        reason: Denial reason, or a short note for allows
        rule_matched: Which rule decided
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed: bool
    reason: str
    rule_matched: str | None = None

    @classmethod
    def allow(cls, reason: str, rule: str | None = None) -> "PolicyDecision":
        """Create an ALLOW decision."""
        return cls(allowed=True, reason=reason, rule_matched=rule)

    @classmethod
    def deny(cls, reason: str, rule: str | None = None) -> "PolicyDecision":
        """Create a DENY decision."""
        return cls(allowed=False, reason=reason, rule_matched=rule)


class _ReportModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class SecuritySuiteResult(_ReportModel):
    """One check's outcome. Names are unique within a suite run."""

    name: str = Field(..., min_length=1)
    status: CheckStatus
    severity: Severity
    details: str = ""

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS


class SuiteSummary(_ReportModel):
    """Counts and worst severity for a set of results."""

    total: int = Field(..., ge=0)
    passed: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    highest_severity: Severity = Severity.LOW


class SuiteSubtotal(_ReportModel):
    """Per-suite rollup line inside the all-suites report."""

    suite: str
    total: int = Field(..., ge=0)
    passed: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    highest_severity: Severity = Severity.LOW


class SuiteReport(_ReportModel):
    """Rendered report for one suite run; results are in triage order."""

    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    suite: str
    summary: SuiteSummary
    results: tuple[SecuritySuiteResult, ...] = ()


class AllSuitesReport(_ReportModel):
    """Rendered rollup across every suite."""

    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    suite: str = "all"
    summary: SuiteSummary
    suites: tuple[SuiteSubtotal, ...] = ()


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def load_config(path: Path | str) -> GuardConfig:
    """
    Load a configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated GuardConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the YAML is malformed or doesn't match the schema
    """
    path = Path(path)
    with path.open() as f:
        content = f.read()

    return _parse_config(content, source=str(path))


def load_config_from_string(content: str) -> GuardConfig:
    """Load a configuration from a YAML string."""
    return _parse_config(content, source="<string>")


def _parse_config(content: str, source: str) -> GuardConfig:
    try:
        data: Any = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(message=f"Invalid YAML: {e}", source=source) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            message=f"Configuration must be a mapping, got {type(data).__name__}",
            source=source,
        )

    try:
        return GuardConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(message=f"Invalid configuration: {e}", source=source) from e
