"""
Capability interfaces for HostGuard.

A host (desktop shell, test double, the bundled local adapters) exposes its
capabilities through these abstract base classes. HostGuard never implements
the underlying engines; it only gates and tests calls through them.

Capabilities:
    - TerminalCapability: create / execute / close terminals
    - FileSystemCapability: read, list, create directories, save, select
    - EventsCapability: subscribe to platform events
    - SettingsCapability: get / set, optionally batch and delete
    - RecordStoreCapability: identity operation, queries, metadata
    - Notifier: user-facing status messages

Why ABC over Protocol?
    A host that forgets an operation fails at instantiation instead of in
    the middle of a suite run. Operations whose presence legitimately varies
    between host builds (batch settings, delete) have default bodies that
    raise NotImplementedError.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from hostguard.schema import NotificationLevel

EventHandler = Callable[[Any], None]


@dataclass(frozen=True)
class Terminal:
    """
    Handle to a terminal created by a TerminalCapability.

    Attributes:
        id: Host-assigned identifier
        name: Human-readable name
        metadata: Host-specific extras (shell, cwd, ...)
    """

    id: str
    name: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Connection:
    """Handle to a live record-store connection."""

    name: str
    url: str


class TerminalCapability(ABC):
    """Terminal/process spawning provided by the host."""

    @abstractmethod
    def create(self, name: str) -> Terminal:
        """Create a terminal and return its handle."""
        ...

    @abstractmethod
    def execute(self, terminal: Terminal, command: str) -> Any:
        """
        Run a command in a terminal and block until it completes.

        Raises:
            CapabilityFailure: If the host cannot run the command
        """
        ...

    @abstractmethod
    def close(self, terminal: Terminal) -> None:
        """Close a terminal."""
        ...


class FileSystemCapability(ABC):
    """File I/O provided by the host."""

    @abstractmethod
    def read_text(self, path: str) -> str:
        """Read a text file."""
        ...

    @abstractmethod
    def list_directory(self, path: str) -> list[dict[str, Any]]:
        """List entries of a directory as ``{"name", "path", "type"}`` dicts."""
        ...

    @abstractmethod
    def create_directory(self, path: str) -> None:
        """Create a directory (and missing parents)."""
        ...

    @abstractmethod
    def save_file(self, name: str, content: str | bytes) -> str | None:
        """Save content under ``name``; return the saved path or None if cancelled."""
        ...

    @abstractmethod
    def select_path(self, *, kind: str = "file", title: str | None = None) -> str | None:
        """Ask for a path; return None if nothing was selected."""
        ...


class EventsCapability(ABC):
    """Platform event subscription provided by the host."""

    @abstractmethod
    def subscribe(self, handler: EventHandler) -> None:
        """Register a handler called with every event payload."""
        ...

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove a previously subscribed handler. Optional."""
        raise NotImplementedError("unsubscribe is not supported by this host")


class SettingsCapability(ABC):
    """Per-tool settings storage provided by the host."""

    @abstractmethod
    def get(self, key: str) -> Any:
        """Return the value stored under ``key`` (None when absent)."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``."""
        ...

    def get_all(self) -> dict[str, Any]:
        """Return every stored setting. Optional."""
        raise NotImplementedError("get_all is not supported by this host")

    def set_all(self, values: Mapping[str, Any]) -> None:
        """Store several settings at once. Optional."""
        raise NotImplementedError("set_all is not supported by this host")

    def delete(self, key: str) -> None:
        """Remove ``key``. Optional."""
        raise NotImplementedError("delete is not supported by this host")


class RecordStoreCapability(ABC):
    """External record store (entity CRUD over a Web API)."""

    @abstractmethod
    def execute(self, operation_name: str, operation_type: str = "function") -> Any:
        """Invoke a named unbound operation such as ``WhoAmI``."""
        ...

    @abstractmethod
    def query_records(self, query: str) -> dict[str, Any]:
        """Run a read-only query; the payload carries rows under ``value``."""
        ...

    @abstractmethod
    def get_entity_metadata(self, entity: str) -> dict[str, Any]:
        """Return metadata for one entity."""
        ...


class Notifier(ABC):
    """User-facing status messages."""

    @abstractmethod
    def notify(self, title: str, body: str, level: NotificationLevel) -> None:
        """Show a notification."""
        ...


def missing_operations(capability: Any, required: tuple[str, ...]) -> list[str]:
    """
    List the required operations a capability object does not expose.

    Typed hosts always pass; this stays as a smoke test for hosts that hand
    in duck-typed objects or whose capability set varies by version.
    """
    return [name for name in required if not callable(getattr(capability, name, None))]
