"""
Capabilities module for HostGuard.

Defines the interfaces through which HostGuard reaches host capabilities, and
the local adapters the CLI uses when no desktop host is present.

Interfaces:
    - TerminalCapability, FileSystemCapability, EventsCapability,
      SettingsCapability, RecordStoreCapability, Notifier

Local adapters:
    - LocalTerminal: subprocess, shell=False
    - LocalFileSystem: pathlib
    - LocalEventBus: in-process fan-out
    - YamlSettingsStore: YAML file or memory
    - HttpRecordStore: httpx against an OData Web API
    - OfflineRecordStore: stands in when no environment is configured
    - ConsoleNotifier: Rich console line
"""

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
    missing_operations,
)
from hostguard.capabilities.events import LocalEventBus
from hostguard.capabilities.fs import LocalFileSystem
from hostguard.capabilities.http import HttpRecordStore, OfflineRecordStore
from hostguard.capabilities.notify import ConsoleNotifier
from hostguard.capabilities.settings import YamlSettingsStore
from hostguard.capabilities.shell import LocalTerminal

__all__ = [
    "Connection",
    "ConsoleNotifier",
    "EventHandler",
    "EventsCapability",
    "FileSystemCapability",
    "HttpRecordStore",
    "LocalEventBus",
    "LocalFileSystem",
    "LocalTerminal",
    "Notifier",
    "OfflineRecordStore",
    "RecordStoreCapability",
    "SettingsCapability",
    "Terminal",
    "TerminalCapability",
    "YamlSettingsStore",
    "missing_operations",
]
