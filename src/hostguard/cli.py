"""
CLI entry point for HostGuard.

This module provides the Typer-based command-line interface for HostGuard.

Commands:
    check-command   Evaluate a terminal command against the policy
    check-path      Evaluate a file path against the policy
    suite           Run one security suite against the local host
    run-all         Run every security suite, then print the rollup
    probe           Run the safe terminal probe commands
    catalog         Print the effective rule catalog

Architecture Note:
    The CLI only parses arguments, wires the local host and prints. Policy
    evaluation and suite logic live in hostguard.policy and hostguard.suites.
"""

import json
import sys
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hostguard import __version__
from hostguard.capabilities import HttpRecordStore
from hostguard.errors import HostGuardError
from hostguard.host import local_host
from hostguard.policy.engine import PolicyEngine
from hostguard.report import (
    DirectorySink,
    MemorySink,
    ReportSink,
    print_all_suites_report,
    print_suite_report,
    report_to_json,
)
from hostguard.schema import GuardConfig, PolicyDecision, load_config
from hostguard.suites import SecuritySuites

app = typer.Typer(
    name="hostguard",
    help="Security policy checks and conformance suites for host capabilities.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


class SuiteName(str, Enum):
    COMMAND = "command"
    FILESYSTEM = "filesystem"
    EVENTS = "events"
    SETTINGS = "settings"
    RECORDS = "records"


@dataclass
class CliState:
    config: GuardConfig = field(default_factory=GuardConfig)
    debug: bool = False

    @property
    def engine(self) -> PolicyEngine:
        return PolicyEngine(self.config.catalog)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]hostguard[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to a HostGuard YAML configuration file.",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Enable debug logging and full error tracebacks.",
        ),
    ] = False,
) -> None:
    """
    HostGuard - deny-by-default policy for terminal and filesystem access.

    Evaluate commands and paths, or run the conformance suites against the
    local host adapters.
    """
    if debug:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")
        logger.enable("hostguard")

    config = GuardConfig()
    if config_path is not None:
        try:
            config = load_config(config_path)
        except HostGuardError as e:
            _print_error(e, debug)
            raise typer.Exit(code=1)

    ctx.obj = CliState(config=config, debug=debug)


# =============================================================================
# Policy checks
# =============================================================================


@app.command("check-command")
def check_command(
    ctx: typer.Context,
    command: Annotated[str, typer.Argument(help="Command text to evaluate.")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the decision in JSON format."),
    ] = False,
) -> None:
    """
    Evaluate a terminal command. Exits 1 when the command would be blocked.

    Example:
        $ hostguard check-command "git status"
    """
    state: CliState = ctx.obj
    decision = state.engine.decide_command(command)
    _display_decision("command", command, decision, json_output)
    if not decision.allowed:
        raise typer.Exit(code=1)


@app.command("check-path")
def check_path(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="File path to evaluate.")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the decision in JSON format."),
    ] = False,
) -> None:
    """
    Evaluate a file path. Exits 1 when the path would be blocked.

    Example:
        $ hostguard check-path /home/me/notes.txt
    """
    state: CliState = ctx.obj
    decision = state.engine.decide_path(path)
    _display_decision("path", path, decision, json_output)
    if not decision.allowed:
        raise typer.Exit(code=1)


def _display_decision(kind: str, subject: str, decision: PolicyDecision, json_output: bool) -> None:
    if json_output:
        output = {"kind": kind, "input": subject, **decision.model_dump()}
        print(json.dumps(output, indent=2))
        return

    if decision.allowed:
        console.print(f"[green]✓[/green] {kind} [bold]allowed[/bold]")
    else:
        console.print(f"[red]✗[/red] {kind} [bold]blocked[/bold]: {escape(decision.reason)}")
    if decision.rule_matched:
        console.print(f"[dim]Rule: {escape(decision.rule_matched)}[/dim]")


# =============================================================================
# Suites
# =============================================================================

OutOption = Annotated[
    Optional[Path],
    typer.Option(
        "--out",
        "-o",
        help="Directory for JSON reports (<suite>-report.json).",
        resolve_path=True,
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Print the report as JSON instead of tables."),
]
SettingsOption = Annotated[
    Optional[Path],
    typer.Option(
        "--settings",
        help="YAML file backing the settings store. In-memory when omitted.",
        resolve_path=True,
    ),
]
RecordsUrlOption = Annotated[
    Optional[str],
    typer.Option(
        "--records-url",
        help="Record-store Web API root, e.g. https://org.example.com/api/data/v9.2/",
    ),
]
TokenOption = Annotated[
    Optional[str],
    typer.Option(
        "--token",
        envvar="HOSTGUARD_RECORDS_TOKEN",
        help="Bearer token for the record store.",
    ),
]


@app.command()
def suite(
    ctx: typer.Context,
    name: Annotated[SuiteName, typer.Argument(help="Suite to run.")],
    out: OutOption = None,
    json_output: JsonOption = False,
    settings_path: SettingsOption = None,
    records_url: RecordsUrlOption = None,
    token: TokenOption = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show full details for passing checks."),
    ] = False,
) -> None:
    """
    Run one security suite against the local host.

    Exits 1 when any check failed.

    Example:
        $ hostguard suite filesystem --out reports/
    """
    state: CliState = ctx.obj
    sink = _sink_for(out)

    try:
        with _local_suites(state, sink, settings_path, records_url, token) as suites:
            report = suites.run_suite(name.value)
    except HostGuardError as e:
        _print_error(e, state.debug)
        raise typer.Exit(code=1)

    if json_output:
        print(report_to_json(report))
    else:
        print_suite_report(report, console, verbose=verbose)
        if out is not None:
            console.print(f"[dim]Report written to {out / f'{report.suite}-report.json'}[/dim]")

    if report.summary.failed:
        raise typer.Exit(code=1)


@app.command("run-all")
def run_all(
    ctx: typer.Context,
    out: OutOption = None,
    json_output: JsonOption = False,
    settings_path: SettingsOption = None,
    records_url: RecordsUrlOption = None,
    token: TokenOption = None,
) -> None:
    """
    Run every security suite in order and print the rollup.

    Exits 1 when any check failed.

    Example:
        $ hostguard run-all --out reports/
    """
    state: CliState = ctx.obj
    sink = _sink_for(out)

    try:
        with _local_suites(state, sink, settings_path, records_url, token) as suites:
            rollup = suites.run_all_suites()
    except HostGuardError as e:
        _print_error(e, state.debug)
        raise typer.Exit(code=1)

    if json_output:
        print(report_to_json(rollup))
    else:
        print_all_suites_report(rollup, console)
        if out is not None:
            console.print(f"[dim]Reports written to {out}[/dim]")

    if rollup.summary.failed:
        raise typer.Exit(code=1)


@app.command()
def probe(
    ctx: typer.Context,
    platform: Annotated[
        Optional[str],
        typer.Option("--platform", help="Probe set to use: 'windows' or 'posix'. Defaults to this OS."),
    ] = None,
) -> None:
    """
    Run the safe terminal probe commands through the policy guard.

    Example:
        $ hostguard probe
    """
    state: CliState = ctx.obj
    _, session = local_host(config=state.config, working_dir=Path.cwd(), console=err_console)
    try:
        executed = session.run_probe(platform)
    except HostGuardError as e:
        _print_error(e, state.debug)
        raise typer.Exit(code=1)
    finally:
        session.close()

    for command in executed:
        console.print(f"[green]✓[/green] {escape(command)}")
    for line in session.transcript:
        console.print(f"[dim]{escape(line)}[/dim]")


@contextmanager
def _local_suites(
    state: CliState,
    sink: ReportSink,
    settings_path: Path | None,
    records_url: str | None,
    token: str | None,
) -> Iterator[SecuritySuites]:
    """SecuritySuites wired to the local host; closes the terminal and HTTP client afterwards."""
    host, session = local_host(
        config=state.config,
        working_dir=Path.cwd(),
        settings_path=settings_path,
        records_url=records_url,
        records_token=token,
        console=err_console,
    )
    try:
        yield SecuritySuites(host, config=state.config, sink=sink)
    finally:
        session.close()
        if isinstance(host.records, HttpRecordStore):
            host.records.close()


def _sink_for(out: Path | None) -> ReportSink:
    if out is None:
        return MemorySink()
    return DirectorySink(out)


# =============================================================================
# Catalog
# =============================================================================


@app.command()
def catalog(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the catalog in JSON format."),
    ] = False,
) -> None:
    """Print the effective rule catalog (built-in defaults merged with --config)."""
    state: CliState = ctx.obj
    rules = state.config.catalog

    if json_output:
        print(json.dumps(rules.model_dump(mode="json"), indent=2))
        return

    sections = (
        ("Allowed commands", rules.allowed_commands),
        ("Blocked command tokens", rules.blocked_command_tokens),
        ("Blocked path patterns", rules.blocked_path_patterns),
        ("Local-data tokens", rules.local_data_tokens),
        ("Network-egress tokens", rules.network_egress_tokens),
    )
    for title, entries in sections:
        table = Table(title=f"{title} ({len(entries)})", show_header=False, title_justify="left")
        table.add_column("Entry", style="cyan")
        for entry in entries:
            table.add_row(escape(repr(entry)))
        console.print(table)


def _print_error(error: HostGuardError, debug: bool) -> None:
    err_console.print(f"[red]{escape(str(error))}[/red]")
    if debug:
        err_console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")


if __name__ == "__main__":
    app()
