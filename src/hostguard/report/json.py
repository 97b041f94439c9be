"""
JSON report rendering for HostGuard.

Design Principles:
    - Stable shape: {generatedAt, suite, summary, results|suites}
    - Deterministic: results are triage-sorted; generatedAt is the only
      field that differs between two runs over identical inputs
    - camelCase keys, lowercase enum values
"""

import json
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from hostguard.report.sinks import ReportSink
from hostguard.report.triage import sort_for_triage, summarize
from hostguard.schema import (
    AllSuitesReport,
    SecuritySuiteResult,
    SuiteReport,
    SuiteSubtotal,
)


def build_suite_report(
    suite: str,
    results: Sequence[SecuritySuiteResult],
    generated_at: datetime | None = None,
) -> SuiteReport:
    """Project a suite's results into its report."""
    return SuiteReport(
        generated_at=generated_at or datetime.now(UTC),
        suite=suite,
        summary=summarize(results),
        results=tuple(sort_for_triage(results)),
    )


def build_all_suites_report(
    suite_results: Sequence[tuple[str, Sequence[SecuritySuiteResult]]],
    generated_at: datetime | None = None,
) -> AllSuitesReport:
    """
    Roll several suite runs up into one report.

    The summary covers every result combined; ``suites`` carries one
    subtotal line per suite, in run order.
    """
    combined: list[SecuritySuiteResult] = []
    subtotals = []
    for suite, results in suite_results:
        combined.extend(results)
        summary = summarize(results)
        subtotals.append(
            SuiteSubtotal(
                suite=suite,
                total=summary.total,
                passed=summary.passed,
                failed=summary.failed,
                highest_severity=summary.highest_severity,
            )
        )

    return AllSuitesReport(
        generated_at=generated_at or datetime.now(UTC),
        summary=summarize(combined),
        suites=tuple(subtotals),
    )


def report_to_dict(report: SuiteReport | AllSuitesReport) -> dict[str, Any]:
    """Serializable dict with camelCase keys."""
    return report.model_dump(mode="json", by_alias=True)


def report_to_json(report: SuiteReport | AllSuitesReport, indent: int = 2) -> str:
    """JSON text for a report."""
    return json.dumps(report_to_dict(report), indent=indent)


def render_report(
    suite: str,
    results: Sequence[SecuritySuiteResult],
    sink: ReportSink | None = None,
) -> SuiteReport:
    """
    Build a suite report and write it to ``sink``.

    Returns:
        The rendered SuiteReport
    """
    report = build_suite_report(suite, results)
    if sink is not None:
        sink.write(suite, report_to_json(report))
    return report


def render_all_suites_report(
    suite_results: Sequence[tuple[str, Sequence[SecuritySuiteResult]]],
    sink: ReportSink | None = None,
) -> AllSuitesReport:
    """Build the all-suites rollup and write it to ``sink`` under "all"."""
    report = build_all_suites_report(suite_results)
    if sink is not None:
        sink.write(report.suite, report_to_json(report))
    return report
