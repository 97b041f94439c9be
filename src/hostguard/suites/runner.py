"""
Suite runner for HostGuard.

SecuritySuites is the entry point for the five conformance batteries and the
all-suites rollup. Each suite invocation:

    1. runs its checks in order, one result per check
    2. converts an escaped orchestration error into ``<suite>_suite_runtime``
    3. renders the SuiteReport and writes it to the report sink
    4. sends a pass/fail notification (unless suppressed)

Example:
    host, session = local_host()
    suites = SecuritySuites(host, sink=MemorySink())
    report = suites.run_filesystem_suite()
    print(report.summary.failed)
"""

import time
from collections.abc import Callable

from loguru import logger

from hostguard.host import Host
from hostguard.policy.engine import PolicyEngine
from hostguard.report.json import render_all_suites_report, render_report
from hostguard.report.sinks import MemorySink, ReportSink
from hostguard.schema import (
    AllSuitesReport,
    GuardConfig,
    NotificationLevel,
    SecuritySuiteResult,
    Severity,
    SuiteReport,
)
from hostguard.suites.base import SuiteBattery, SuiteContext, describe_error
from hostguard.suites.command import run_command_checks
from hostguard.suites.events import run_events_checks
from hostguard.suites.filesystem import run_filesystem_checks
from hostguard.suites.records import run_records_checks
from hostguard.suites.settings import run_settings_checks

CheckRunner = Callable[[SuiteBattery, SuiteContext], None]

# Run order for run_all_suites
SUITES: dict[str, tuple[str, CheckRunner]] = {
    "command": ("Command", run_command_checks),
    "filesystem": ("Filesystem", run_filesystem_checks),
    "events": ("Events", run_events_checks),
    "settings": ("Settings", run_settings_checks),
    "records": ("Records", run_records_checks),
}


class SecuritySuites:
    """
    Runs the conformance suites against a Host.

    Arguments:
        host: Capabilities and glue accessors under test
        config: Configuration (catalog and suite tuning)
        sink: Where rendered reports are written; in-memory when omitted
        engine: Policy engine; built from ``config.catalog`` when omitted
        sleep: Pacing function for the burst probe
    """

    def __init__(
        self,
        host: Host,
        config: GuardConfig | None = None,
        sink: ReportSink | None = None,
        engine: PolicyEngine | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.host = host
        self.config = config or GuardConfig()
        self.sink = sink if sink is not None else MemorySink()
        self.engine = engine or PolicyEngine(self.config.catalog)
        self._ctx = SuiteContext(
            host=host,
            engine=self.engine,
            settings=self.config.suites,
            sleep=sleep,
        )

    def run_command_suite(self, notify: bool = True) -> SuiteReport:
        return self.run_suite("command", notify)

    def run_filesystem_suite(self, notify: bool = True) -> SuiteReport:
        return self.run_suite("filesystem", notify)

    def run_events_suite(self, notify: bool = True) -> SuiteReport:
        return self.run_suite("events", notify)

    def run_settings_suite(self, notify: bool = True) -> SuiteReport:
        return self.run_suite("settings", notify)

    def run_records_suite(self, notify: bool = True) -> SuiteReport:
        return self.run_suite("records", notify)

    def run_suite(self, suite: str, notify: bool = True) -> SuiteReport:
        """
        Run one suite by name.

        Raises:
            KeyError: Unknown suite name
        """
        title, run_checks = SUITES[suite]
        results = self._collect(suite, run_checks)
        report = render_report(suite, results, self.sink)

        failed = report.summary.failed
        logger.info(
            "suite_completed suite={} total={} failed={} highest={}",
            suite,
            report.summary.total,
            failed,
            report.summary.highest_severity.value,
        )
        if notify:
            self._notify(
                f"{title} Suite Completed",
                f"{failed} {suite} test(s) failed" if failed else f"All {suite} tests passed",
                failed,
            )
        return report

    def run_all_suites(self) -> AllSuitesReport:
        """
        Run every suite in order, then render the rollup.

        Per-suite notifications are suppressed; one notification covers the
        whole run. Each per-suite report is still written to the sink.
        """
        suite_results: list[tuple[str, tuple[SecuritySuiteResult, ...]]] = []
        for suite in SUITES:
            report = self.run_suite(suite, notify=False)
            suite_results.append((suite, report.results))

        rollup = render_all_suites_report(suite_results, self.sink)
        failed = rollup.summary.failed
        self._notify(
            "All Security Suites Completed",
            f"{failed} test(s) failed across suites" if failed else "All suite tests passed",
            failed,
        )
        return rollup

    def _collect(self, suite: str, run_checks: CheckRunner) -> list[SecuritySuiteResult]:
        battery = SuiteBattery(suite)
        logger.debug("suite_started suite={}", suite)
        try:
            run_checks(battery, self._ctx)
        except Exception as e:
            logger.error("suite_runtime_error suite={} error={}", suite, describe_error(e))
            battery.add(
                battery.unique_name(f"{suite}_suite_runtime"),
                False,
                Severity.MEDIUM,
                f"Suite runtime error: {describe_error(e)}",
            )
        return battery.results

    def _notify(self, title: str, body: str, failed: int) -> None:
        level = NotificationLevel.WARNING if failed else NotificationLevel.SUCCESS
        try:
            self.host.notifier.notify(title, body, level)
        except Exception:
            logger.exception("notification_failed title={}", title)
