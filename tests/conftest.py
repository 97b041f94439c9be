"""
Pytest configuration and fixtures for HostGuard tests.

This module provides shared fixtures used across unit, integration,
and security tests: in-memory fakes for every host capability (with call
counters, so tests can assert a capability was never reached) and a Host
wired from them.
"""

import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Generator

import pytest

from hostguard.capabilities.base import (
    Connection,
    EventHandler,
    EventsCapability,
    FileSystemCapability,
    Notifier,
    RecordStoreCapability,
    SettingsCapability,
    Terminal,
    TerminalCapability,
)
from hostguard.host import Host
from hostguard.policy.engine import PolicyEngine
from hostguard.schema import GuardConfig, NotificationLevel, SuiteSettings
from hostguard.session import TerminalSession


# =============================================================================
# Fake capabilities
# =============================================================================


class FakeTerminals(TerminalCapability):
    def __init__(self) -> None:
        self.created: list[Terminal] = []
        self.executed: list[tuple[str, str]] = []
        self.closed: list[str] = []

    def create(self, name: str) -> Terminal:
        terminal = Terminal(id=f"t{len(self.created) + 1}", name=name)
        self.created.append(terminal)
        return terminal

    def execute(self, terminal: Terminal, command: str) -> dict[str, Any]:
        self.executed.append((terminal.id, command))
        return {"return_code": 0, "stdout": "", "stderr": ""}

    def close(self, terminal: Terminal) -> None:
        self.closed.append(terminal.id)


class SpyFileSystem(FileSystemCapability):
    """Counts calls; read_text returns fixed content."""

    def __init__(self, content: str = "file content") -> None:
        self.content = content
        self.read_calls: list[str] = []

    def read_text(self, path: str) -> str:
        self.read_calls.append(path)
        return self.content

    def list_directory(self, path: str) -> list[dict[str, Any]]:
        return []

    def create_directory(self, path: str) -> None:
        return None

    def save_file(self, name: str, content: str | bytes) -> str | None:
        return f"/saved/{name}"

    def select_path(self, *, kind: str = "file", title: str | None = None) -> str | None:
        return None


class FakeEvents(EventsCapability):
    def __init__(self) -> None:
        self.handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        self.handlers.append(handler)


class MemorySettings(SettingsCapability):
    """Settings with the batch operations and delete."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self.deleted: list[str] = []

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def get_all(self) -> dict[str, Any]:
        return dict(self.data)

    def set_all(self, values: Mapping[str, Any]) -> None:
        self.data.update(values)

    def delete(self, key: str) -> None:
        self.deleted.append(key)
        self.data.pop(key, None)


class BasicSettings(SettingsCapability):
    """Settings with only get/set; the optional operations stay unimplemented."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value


class FakeRecords(RecordStoreCapability):
    def __init__(self, identity: Any = None, listing: Any = None) -> None:
        self.identity = identity if identity is not None else {"UserId": "u-1"}
        self.listing = listing if listing is not None else {"value": [{"name": "Contoso"}]}
        self.calls: list[tuple[str, ...]] = []

    def execute(self, operation_name: str, operation_type: str = "function") -> Any:
        self.calls.append(("execute", operation_name, operation_type))
        return self.identity

    def query_records(self, query: str) -> dict[str, Any]:
        self.calls.append(("query_records", query))
        return self.listing

    def get_entity_metadata(self, entity: str) -> dict[str, Any]:
        self.calls.append(("get_entity_metadata", entity))
        return {}


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.notifications: list[tuple[str, str, NotificationLevel]] = []

    def notify(self, title: str, body: str, level: NotificationLevel) -> None:
        self.notifications.append((title, body, level))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def engine() -> PolicyEngine:
    """Policy engine over the built-in catalog."""
    return PolicyEngine()


@pytest.fixture
def fast_config() -> GuardConfig:
    """Default catalog with zero burst pacing."""
    return GuardConfig(suites=SuiteSettings(burst_pacing_seconds=0))


@pytest.fixture
def terminals() -> FakeTerminals:
    return FakeTerminals()


@pytest.fixture
def spy_fs() -> SpyFileSystem:
    """Filesystem that records every read_text call."""
    return SpyFileSystem()


@pytest.fixture
def basic_settings() -> BasicSettings:
    """Settings capability with only get and set."""
    return BasicSettings()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def session(terminals: FakeTerminals, notifier: RecordingNotifier) -> TerminalSession:
    """Terminal session over the fake terminals, no pacing."""
    return TerminalSession(terminals, notifier=notifier, pacing_seconds=0, sleep=lambda _: None)


@pytest.fixture
def make_host(
    terminals: FakeTerminals,
    notifier: RecordingNotifier,
    session: TerminalSession,
):
    """Factory for a Host over the fakes; pass keyword overrides for any field."""

    def _make(**overrides: Any) -> Host:
        records = overrides.pop("records", FakeRecords())
        connection = overrides.pop("connection", None)
        fields: dict[str, Any] = {
            "terminals": terminals,
            "filesystem": SpyFileSystem(),
            "events": FakeEvents(),
            "settings": MemorySettings(),
            "records": records,
            "notifier": notifier,
            "get_current_terminal": lambda: session.current,
            "create_terminal": session.create,
            "get_current_connection": lambda: connection,
            "on_terminal_output": session.handle_output,
            "on_command_completed": session.handle_command_completed,
        }
        fields.update(overrides)
        return Host(**fields)

    return _make


@pytest.fixture
def host(make_host) -> Host:
    """Host over the fakes with no record-store connection."""
    return make_host()


@pytest.fixture
def connected_host(make_host) -> Host:
    """Host over the fakes with a live record-store connection."""
    return make_host(connection=Connection(name="test", url="https://org.example.com/api/data/v9.2/"))
