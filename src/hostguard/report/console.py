"""
Console report view for HostGuard.

Renders suite reports with Rich: a header panel, the triage-ordered result
table and a summary block.

Design Principles:
    - Status at a glance: icons for pass/fail, colour per severity
    - Failures first: the table follows the report's triage order
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hostguard.schema import AllSuitesReport, CheckStatus, Severity, SuiteReport, SuiteSummary

ICON_PASS = "[green]✓[/green]"
ICON_FAIL = "[red]✗[/red]"

SEVERITY_STYLE = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}


def print_suite_report(
    report: SuiteReport,
    console: Console | None = None,
    verbose: bool = False,
) -> None:
    """
    Print one suite report.

    Args:
        report: The rendered report
        console: Rich Console instance (creates one if not provided)
        verbose: Also list passing checks' details in full
    """
    if console is None:
        console = Console()

    _print_header(console, report.suite, report.summary)
    console.print()

    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("#", style="dim", width=3, justify="right")
    table.add_column("Status", width=6, justify="center")
    table.add_column("Severity", width=9)
    table.add_column("Check", style="cyan", overflow="fold")
    table.add_column("Details", overflow="fold")

    for index, result in enumerate(report.results, start=1):
        icon = ICON_PASS if result.status == CheckStatus.PASS else ICON_FAIL
        style = SEVERITY_STYLE[result.severity]
        details = result.details
        if result.status == CheckStatus.PASS and not verbose:
            details = _truncate(details, 60)
        table.add_row(
            str(index),
            icon,
            f"[{style}]{result.severity.value}[/{style}]",
            escape(result.name),
            escape(details),
        )

    console.print(table)
    console.print()
    _print_summary(console, report.summary)


def print_all_suites_report(report: AllSuitesReport, console: Console | None = None) -> None:
    """Print the all-suites rollup."""
    if console is None:
        console = Console()

    _print_header(console, report.suite, report.summary)
    console.print()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Suite", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Passed", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Highest", width=9)

    for subtotal in report.suites:
        style = SEVERITY_STYLE[subtotal.highest_severity]
        table.add_row(
            subtotal.suite,
            str(subtotal.total),
            f"[green]{subtotal.passed}[/green]",
            f"[red]{subtotal.failed}[/red]" if subtotal.failed else "0",
            f"[{style}]{subtotal.highest_severity.value}[/{style}]",
        )

    console.print(table)
    console.print()
    _print_summary(console, report.summary)


def _print_header(console: Console, suite: str, summary: SuiteSummary) -> None:
    ok = summary.failed == 0
    header = Text()
    header.append(" Suite ", style="bold")
    header.append(suite, style="bold cyan")
    header.append(" │ ", style="dim")
    header.append("PASSED" if ok else "FAILED", style="bold green" if ok else "bold red")
    console.print(Panel(header, expand=False))


def _print_summary(console: Console, summary: SuiteSummary) -> None:
    console.print("[bold]Summary[/bold]")
    console.print()

    stats = Table(show_header=False, box=None, padding=(0, 2))
    stats.add_column("Metric", style="dim")
    stats.add_column("Value")

    style = SEVERITY_STYLE[summary.highest_severity]
    stats.add_row("Total", str(summary.total))
    stats.add_row("Passed", f"[green]{summary.passed}[/green]" if summary.passed else "0")
    stats.add_row("Failed", f"[red]{summary.failed}[/red]" if summary.failed else "0")
    stats.add_row("Highest severity", f"[{style}]{summary.highest_severity.value}[/{style}]")

    console.print(stats)


def _truncate(s: str, max_len: int) -> str:
    """Truncate string with ellipsis."""
    if len(s) <= max_len:
        return s
    return s[: max_len - 3] + "..."
