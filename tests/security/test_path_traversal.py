"""
Security tests for path policy enforcement.

These tests verify that the path policy blocks traversal and sensitive
locations, and that guarded_read refuses before the filesystem capability
is reached.

Attack vectors tested:
- ../ traversal in POSIX and Windows spellings
- Relative paths of every shape
- Sensitive locations with case and separator variations
- The fixed sensitive-read probe against a call-counting filesystem
"""

import pytest

from hostguard.errors import PathBlockedError, PolicyViolation
from hostguard.policy import guarded_read
from hostguard.policy.engine import REASON_RELATIVE_PATH, REASON_TRAVERSAL, PolicyEngine


class TestTraversal:
    """Traversal segments."""

    @pytest.mark.parametrize(
        "path",
        [
            "/tmp/../etc/passwd",
            "/var/www/../../root",
            "/srv/app/..",
            "C:\\Users\\demo\\..\\..\\Windows",
            "C:/Users/demo/../admin",
            "/a/b\\..\\c",
        ],
    )
    def test_traversal_denied(self, engine: PolicyEngine, path: str) -> None:
        assert engine.evaluate_path(path) == REASON_TRAVERSAL


class TestRelative:
    """Non-absolute paths."""

    @pytest.mark.parametrize(
        "path",
        ["relative/config.json", "../etc/passwd", "~/.ssh/id_rsa", "C:foo", "", "   "],
    )
    def test_relative_denied(self, engine: PolicyEngine, path: str) -> None:
        assert engine.evaluate_path(path) == REASON_RELATIVE_PATH


class TestSensitiveLocations:
    """Blocked path patterns."""

    @pytest.mark.parametrize(
        "path",
        [
            "/ETC/PASSWD",
            "/etc/shadow",
            "/var/log/system.log",
            "/Users/test/.ssh/id_rsa",
            "/home/me/.SSH/config",
            "C:\\Users\\demo\\.ssh\\known_hosts",
            "c:/windows/system32/config/SAM",
            "C:\\WINDOWS\\System32",
        ],
    )
    def test_sensitive_denied(self, engine: PolicyEngine, path: str) -> None:
        reason = engine.evaluate_path(path)
        assert reason is not None
        assert reason.startswith("Sensitive path pattern detected: ")


class TestGuardedRead:
    """Denied paths never reach the filesystem."""

    def test_sensitive_probe_raises_before_read(self, engine: PolicyEngine, spy_fs) -> None:
        fs = spy_fs
        with pytest.raises(PolicyViolation):
            guarded_read(fs, "/Users/test/.ssh/id_rsa", engine)
        assert fs.read_calls == []

    @pytest.mark.parametrize("path", ["relative.txt", "/tmp/../etc/passwd", "/etc/shadow"])
    def test_every_denial_raises_path_blocked(self, engine: PolicyEngine, spy_fs, path: str) -> None:
        fs = spy_fs
        with pytest.raises(PathBlockedError) as exc_info:
            guarded_read(fs, path, engine)
        assert exc_info.value.reason == engine.evaluate_path(path)
        assert exc_info.value.context["path"] == path
        assert fs.read_calls == []

    def test_allowed_path_reads_once(self, engine: PolicyEngine, spy_fs) -> None:
        fs = spy_fs
        fs.content = "data"
        assert guarded_read(fs, "/tmp/notes.txt", engine) == "data"
        assert fs.read_calls == ["/tmp/notes.txt"]
