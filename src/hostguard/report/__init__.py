"""
Reporting module for HostGuard.

Turns suite results into triage-ordered, serializable reports.

Output formats:
    - JSON: {generatedAt, suite, summary, results} written to a ReportSink
    - Console: Rich tables for people

Example:
    from hostguard.report import render_report, MemorySink

    sink = MemorySink()
    report = render_report("filesystem", results, sink)
    print(sink.reports["filesystem"])
"""

from hostguard.report.console import print_all_suites_report, print_suite_report
from hostguard.report.json import (
    build_all_suites_report,
    build_suite_report,
    render_all_suites_report,
    render_report,
    report_to_dict,
    report_to_json,
)
from hostguard.report.sinks import ConsoleSink, DirectorySink, MemorySink, ReportSink
from hostguard.report.triage import highest_severity, sort_for_triage, summarize

__all__ = [
    "ConsoleSink",
    "DirectorySink",
    "MemorySink",
    "ReportSink",
    "build_all_suites_report",
    "build_suite_report",
    "highest_severity",
    "print_all_suites_report",
    "print_suite_report",
    "render_all_suites_report",
    "render_report",
    "report_to_dict",
    "report_to_json",
    "sort_for_triage",
    "summarize",
]
