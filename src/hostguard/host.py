"""
Host bundle consumed by the security suites.

A Host groups the capabilities plus the read-only accessors for the state
the surrounding glue owns (current terminal, current connection). The suites
never mutate that state; they only call the accessors.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from hostguard.capabilities import (
    ConsoleNotifier,
    EventHandler,
    EventsCapability,
    FileSystemCapability,
    HttpRecordStore,
    LocalEventBus,
    LocalFileSystem,
    LocalTerminal,
    Notifier,
    OfflineRecordStore,
    RecordStoreCapability,
    SettingsCapability,
    TerminalCapability,
    YamlSettingsStore,
)
from hostguard.capabilities.base import Connection, Terminal
from hostguard.policy.engine import PolicyEngine
from hostguard.schema import GuardConfig
from hostguard.session import TerminalSession


@dataclass
class Host:
    """
    Everything a suite run may touch.

    Attributes:
        terminals: Terminal capability
        filesystem: Filesystem capability
        events: Event subscription capability
        settings: Settings capability
        records: Record-store capability
        notifier: User-facing notifications
        get_current_terminal: Accessor for the glue's current terminal
        create_terminal: Creates a terminal and makes it current
        get_current_connection: Accessor for the live record-store connection
        on_terminal_output: Handler for terminal output events
        on_command_completed: Handler for command-completed events
    """

    terminals: TerminalCapability
    filesystem: FileSystemCapability
    events: EventsCapability
    settings: SettingsCapability
    records: RecordStoreCapability
    notifier: Notifier
    get_current_terminal: Callable[[], Terminal | None]
    create_terminal: Callable[[], Terminal | None]
    get_current_connection: Callable[[], Connection | None]
    on_terminal_output: EventHandler
    on_command_completed: EventHandler


def local_host(
    config: GuardConfig | None = None,
    working_dir: str | Path = ".",
    settings_path: str | Path | None = None,
    records_url: str | None = None,
    records_token: str | None = None,
    console: Console | None = None,
    engine: PolicyEngine | None = None,
) -> tuple[Host, TerminalSession]:
    """
    Build a Host from the local adapters.

    Args:
        config: Configuration (defaults apply when omitted)
        working_dir: Directory terminals run in and save_file() writes to
        settings_path: YAML settings file (memory only when omitted)
        records_url: Record-store Web API root; offline when omitted
        records_token: Bearer token for the record store
        console: Console for notifications
        engine: Policy engine the terminal session guards with

    Returns:
        The Host and the TerminalSession that owns its current terminal
    """
    config = config or GuardConfig()
    engine = engine or PolicyEngine(config.catalog)

    bus = LocalEventBus()
    notifier = ConsoleNotifier(console)
    terminals = LocalTerminal(working_dir=working_dir, events=bus)
    session = TerminalSession(
        terminals,
        notifier=notifier,
        engine=engine,
        name=config.suites.terminal_name,
        pacing_seconds=config.suites.burst_pacing_seconds,
    )
    bus.subscribe(session.handle_event)

    records: RecordStoreCapability
    if records_url:
        records = HttpRecordStore(records_url, token=records_token)
    else:
        records = OfflineRecordStore()

    host = Host(
        terminals=terminals,
        filesystem=LocalFileSystem(save_dir=working_dir),
        events=bus,
        settings=YamlSettingsStore(settings_path),
        records=records,
        notifier=notifier,
        get_current_terminal=lambda: session.current,
        create_terminal=session.create,
        get_current_connection=lambda: getattr(records, "connection", None),
        on_terminal_output=session.handle_output,
        on_command_completed=session.handle_command_completed,
    )
    return host, session
