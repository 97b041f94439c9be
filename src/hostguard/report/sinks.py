"""
Report sinks.

A sink receives the serialized JSON of each rendered report. Each suite
writes to its own destination key, so reports from consecutive suites never
interleave.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from rich.console import Console

from hostguard.errors import ReportError


class ReportSink(ABC):
    """Destination for serialized reports."""

    @abstractmethod
    def write(self, suite: str, payload: str) -> None:
        """Store ``payload`` (a JSON document) as the report for ``suite``."""
        ...


class MemorySink(ReportSink):
    """Keeps the latest report per suite in a dict."""

    def __init__(self) -> None:
        self.reports: dict[str, str] = {}

    def write(self, suite: str, payload: str) -> None:
        self.reports[suite] = payload


class DirectorySink(ReportSink):
    """Writes ``<suite>-report.json`` files into a directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, suite: str) -> Path:
        return self.directory / f"{suite}-report.json"

    def write(self, suite: str, payload: str) -> None:
        target = self.path_for(suite)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target.write_text(payload + "\n", encoding="utf-8")
        except OSError as e:
            raise ReportError(
                message=f"Could not write {target}: {e}",
                suite=suite,
                destination=str(target),
            ) from e


class ConsoleSink(ReportSink):
    """Pretty-prints the JSON to a Rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def write(self, suite: str, payload: str) -> None:
        self.console.print_json(payload)
