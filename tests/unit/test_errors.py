"""
Unit tests for error hierarchy.

Tests cover:
- Base HostGuardError behavior
- Policy errors carrying the denial reason
- Capability errors
- Config and report errors
- Error serialization
"""

import pytest

from hostguard.errors import (
    ERROR_CAPABILITY_FAILED,
    ERROR_CAPABILITY_UNAVAILABLE,
    ERROR_CONFIG_INVALID,
    ERROR_POLICY_COMMAND_BLOCKED,
    ERROR_POLICY_PATH_BLOCKED,
    ERROR_POLICY_VIOLATION,
    ERROR_REPORT_WRITE,
    CapabilityFailure,
    CapabilityUnavailableError,
    CommandBlockedError,
    ConfigError,
    HostGuardError,
    PathBlockedError,
    PolicyViolation,
    ReportError,
)


class TestHostGuardError:
    """Tests for base HostGuardError."""

    def test_basic_error(self) -> None:
        """Create a basic error with message."""
        err = HostGuardError(message="Something went wrong", code=9999)
        assert err.message == "Something went wrong"
        assert err.code == 9999
        assert err.suggestion is None
        assert err.context == {}

    def test_str_format(self) -> None:
        err = HostGuardError(message="Failed", code=1)
        assert str(err) == "[E1] Failed"

    def test_str_with_suggestion(self) -> None:
        err = HostGuardError(message="Failed", code=1, suggestion="Try again")
        assert str(err) == "[E1] Failed\nSuggestion: Try again"

    def test_is_exception(self) -> None:
        with pytest.raises(HostGuardError):
            raise HostGuardError(message="boom")

    def test_repr(self) -> None:
        err = HostGuardError(message="m", code=2, context={"k": 1})
        assert repr(err) == "HostGuardError(message='m', code=2, context={'k': 1})"

    def test_to_dict(self) -> None:
        err = HostGuardError(message="m", code=3, suggestion="s", context={"a": "b"})
        assert err.to_dict() == {
            "error_type": "HostGuardError",
            "message": "m",
            "code": 3,
            "suggestion": "s",
            "context": {"a": "b"},
        }


class TestPolicyErrors:
    """Errors raised by the guarded wrappers."""

    def test_policy_violation_defaults(self) -> None:
        err = PolicyViolation(reason="Command is not on allow-list", rule="deny_by_default")
        assert err.code == ERROR_POLICY_VIOLATION
        assert err.message == "Blocked by policy. Command is not on allow-list"
        assert err.context == {"reason": "Command is not on allow-list", "rule": "deny_by_default"}

    def test_command_blocked(self) -> None:
        err = CommandBlockedError(reason="Blocked token detected: sudo", command="sudo ls")
        assert isinstance(err, PolicyViolation)
        assert err.code == ERROR_POLICY_COMMAND_BLOCKED
        assert err.reason == "Blocked token detected: sudo"
        assert "Blocked token detected: sudo" in err.message
        assert err.context["command"] == "sudo ls"

    def test_path_blocked(self) -> None:
        err = PathBlockedError(reason="Path traversal segments are not allowed", path="/a/../b")
        assert isinstance(err, PolicyViolation)
        assert err.code == ERROR_POLICY_PATH_BLOCKED
        assert err.suggestion is not None
        assert err.context["path"] == "/a/../b"
        assert err.to_dict()["error_type"] == "PathBlockedError"

    def test_explicit_message_kept(self) -> None:
        err = PolicyViolation(message="custom", reason="r")
        assert err.message == "custom"


class TestCapabilityErrors:
    """Errors from host capabilities."""

    def test_capability_failure(self) -> None:
        err = CapabilityFailure(capability="terminal", operation="execute", underlying_error="boom")
        assert err.code == ERROR_CAPABILITY_FAILED
        assert err.message == "terminal.execute failed: boom"
        assert err.context["capability"] == "terminal"

    def test_unavailable_is_failure(self) -> None:
        err = CapabilityUnavailableError(capability="records", operation="execute")
        assert isinstance(err, CapabilityFailure)
        assert err.code == ERROR_CAPABILITY_UNAVAILABLE
        assert err.message == "records capability is not available"

    def test_policy_and_capability_errors_disjoint(self) -> None:
        err = CapabilityFailure(capability="filesystem", operation="read_text")
        assert not isinstance(err, PolicyViolation)


class TestConfigAndReportErrors:
    """Configuration and sink errors."""

    def test_config_error(self) -> None:
        err = ConfigError(message="Invalid YAML", source="x.yaml")
        assert err.code == ERROR_CONFIG_INVALID
        assert err.context == {"source": "x.yaml"}
        assert err.suggestion

    def test_report_error(self) -> None:
        err = ReportError(suite="events", destination="/tmp/out")
        assert err.code == ERROR_REPORT_WRITE
        assert err.message == "Could not write events report to /tmp/out"
