"""
Unit tests for triage ordering, report rendering and sinks.

Tests cover:
- highest_severity / sort_for_triage / summarize
- SuiteReport and AllSuitesReport JSON shape
- Memory, directory and console sinks
- Rich console views
"""

import json
from datetime import UTC, datetime
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from hostguard.errors import ReportError
from hostguard.report import (
    ConsoleSink,
    DirectorySink,
    MemorySink,
    build_all_suites_report,
    build_suite_report,
    highest_severity,
    print_all_suites_report,
    print_suite_report,
    render_all_suites_report,
    render_report,
    report_to_dict,
    report_to_json,
    sort_for_triage,
    summarize,
)
from hostguard.schema import CheckStatus, SecuritySuiteResult, Severity


def _result(name: str, status: CheckStatus, severity: Severity, details: str = "") -> SecuritySuiteResult:
    return SecuritySuiteResult(name=name, status=status, severity=severity, details=details)


PASS, FAIL = CheckStatus.PASS, CheckStatus.FAIL


@pytest.fixture
def mixed_results() -> list[SecuritySuiteResult]:
    return [
        _result("b_low_pass", PASS, Severity.LOW),
        _result("a_high_pass", PASS, Severity.HIGH),
        _result("c_high_fail", FAIL, Severity.HIGH, "broken"),
        _result("a_high_fail", FAIL, Severity.HIGH, "broken"),
        _result("z_critical_pass", PASS, Severity.CRITICAL),
        _result("m_medium_fail", FAIL, Severity.MEDIUM),
    ]


class TestTriage:
    """Severity ranking and ordering."""

    def test_highest_severity_empty_is_low(self) -> None:
        assert highest_severity([]) is Severity.LOW

    def test_highest_severity(self, mixed_results: list[SecuritySuiteResult]) -> None:
        assert highest_severity(mixed_results) is Severity.CRITICAL

    def test_highest_severity_counts_passes(self) -> None:
        """Worst severity is taken over every result, not only failures."""
        results = [_result("x", PASS, Severity.HIGH), _result("y", FAIL, Severity.LOW)]
        assert highest_severity(results) is Severity.HIGH

    def test_sort_order(self, mixed_results: list[SecuritySuiteResult]) -> None:
        names = [r.name for r in sort_for_triage(mixed_results)]
        assert names == [
            "z_critical_pass",
            "a_high_fail",
            "c_high_fail",
            "a_high_pass",
            "m_medium_fail",
            "b_low_pass",
        ]

    def test_sort_idempotent(self, mixed_results: list[SecuritySuiteResult]) -> None:
        once = sort_for_triage(mixed_results)
        assert sort_for_triage(once) == once

    def test_sort_does_not_mutate_input(self, mixed_results: list[SecuritySuiteResult]) -> None:
        before = list(mixed_results)
        sort_for_triage(mixed_results)
        assert mixed_results == before

    def test_summarize(self, mixed_results: list[SecuritySuiteResult]) -> None:
        summary = summarize(mixed_results)
        assert (summary.total, summary.passed, summary.failed) == (6, 3, 3)
        assert summary.highest_severity is Severity.CRITICAL

    def test_summarize_empty(self) -> None:
        summary = summarize([])
        assert (summary.total, summary.passed, summary.failed) == (0, 0, 0)
        assert summary.highest_severity is Severity.LOW


class TestJsonReport:
    """Serialized report shape."""

    def test_suite_report_shape(self, mixed_results: list[SecuritySuiteResult]) -> None:
        when = datetime(2025, 5, 1, 12, 0, tzinfo=UTC)
        data = report_to_dict(build_suite_report("command", mixed_results, generated_at=when))

        assert list(data) == ["generatedAt", "suite", "summary", "results"]
        assert data["suite"] == "command"
        assert data["summary"] == {
            "total": 6,
            "passed": 3,
            "failed": 3,
            "highestSeverity": "critical",
        }
        assert data["results"][0] == {
            "name": "z_critical_pass",
            "status": "pass",
            "severity": "critical",
            "details": "",
        }

    def test_json_text_is_indented(self, mixed_results: list[SecuritySuiteResult]) -> None:
        text = report_to_json(build_suite_report("events", mixed_results))
        assert text.startswith("{\n  ")
        assert json.loads(text)["suite"] == "events"

    def test_generated_at_is_utc(self) -> None:
        report = build_suite_report("events", [])
        assert report.generated_at.tzinfo is not None
        assert report.generated_at.utcoffset().total_seconds() == 0

    def test_all_suites_report(self) -> None:
        rollup = build_all_suites_report(
            [
                ("command", [_result("a", PASS, Severity.HIGH)]),
                ("events", [_result("b", FAIL, Severity.MEDIUM), _result("c", PASS, Severity.LOW)]),
            ]
        )
        data = report_to_dict(rollup)

        assert data["suite"] == "all"
        assert data["summary"] == {
            "total": 3,
            "passed": 2,
            "failed": 1,
            "highestSeverity": "high",
        }
        assert [s["suite"] for s in data["suites"]] == ["command", "events"]
        assert data["suites"][1] == {
            "suite": "events",
            "total": 2,
            "passed": 1,
            "failed": 1,
            "highestSeverity": "medium",
        }

    def test_render_report_writes_sink(self, mixed_results: list[SecuritySuiteResult]) -> None:
        sink = MemorySink()
        report = render_report("filesystem", mixed_results, sink)
        assert json.loads(sink.reports["filesystem"]) == report_to_dict(report)

    def test_render_all_writes_under_all(self) -> None:
        sink = MemorySink()
        render_all_suites_report([("events", [])], sink)
        assert json.loads(sink.reports["all"])["suite"] == "all"


class TestSinks:
    """Report sinks."""

    def test_memory_sink_keeps_latest(self) -> None:
        sink = MemorySink()
        sink.write("events", "{}")
        sink.write("events", '{"x": 1}')
        assert sink.reports == {"events": '{"x": 1}'}

    def test_directory_sink(self, temp_dir: Path) -> None:
        sink = DirectorySink(temp_dir / "reports")
        sink.write("settings", '{"suite": "settings"}')
        path = temp_dir / "reports" / "settings-report.json"
        assert sink.path_for("settings") == path
        assert json.loads(path.read_text()) == {"suite": "settings"}

    def test_directory_sink_error(self, temp_dir: Path) -> None:
        blocker = temp_dir / "file"
        blocker.write_text("not a directory")
        sink = DirectorySink(blocker)
        with pytest.raises(ReportError) as exc_info:
            sink.write("events", "{}")
        assert exc_info.value.suite == "events"

    def test_console_sink(self) -> None:
        buffer = StringIO()
        sink = ConsoleSink(Console(file=buffer, width=120))
        sink.write("events", '{"suite": "events"}')
        assert '"suite"' in buffer.getvalue()


class TestConsoleView:
    """Rich table output."""

    def test_suite_table(self, mixed_results: list[SecuritySuiteResult]) -> None:
        buffer = StringIO()
        console = Console(file=buffer, width=160)
        print_suite_report(build_suite_report("command", mixed_results), console)
        output = buffer.getvalue()
        assert "command" in output
        assert "FAILED" in output
        assert "a_high_fail" in output
        assert "Highest severity" in output

    def test_all_suites_table(self) -> None:
        buffer = StringIO()
        console = Console(file=buffer, width=160)
        rollup = build_all_suites_report([("events", [_result("a", PASS, Severity.LOW)])])
        print_all_suites_report(rollup, console)
        output = buffer.getvalue()
        assert "events" in output
        assert "PASSED" in output
