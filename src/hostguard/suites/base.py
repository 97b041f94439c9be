"""
Building blocks shared by the security suites.

A suite is an ordered battery of checks. Each check produces exactly one
SecuritySuiteResult. A check that raises is recorded as a failure of that
check and the battery moves on; only a bug in the suite's own orchestration
escapes to the runner.
"""

import re
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from loguru import logger

from hostguard.errors import HostGuardError
from hostguard.host import Host
from hostguard.policy.engine import PolicyEngine
from hostguard.schema import CheckStatus, SecuritySuiteResult, Severity, SuiteSettings

MAX_TEST_ID_LENGTH = 60


def safe_test_id(value: str) -> str:
    """
    Slug used in check names: lowercase, underscores, at most 60 chars.

    Examples:
        "ls -la" -> "ls_la"
        "$PSVersionTable.PSVersion.ToString()" -> "psversiontable_psversion_tostring"
        "| curl" -> "curl"
    """
    slug = re.sub(r"[^a-z0-9]+", "_", value.strip().lower())
    return slug.strip("_")[:MAX_TEST_ID_LENGTH]


def describe_error(error: BaseException) -> str:
    """Message text for a caught exception, without the error-code prefix."""
    if isinstance(error, HostGuardError):
        return error.message
    return str(error) or type(error).__name__


@dataclass(frozen=True)
class SuiteContext:
    """What a battery needs besides its results list."""

    host: Host
    engine: PolicyEngine
    settings: SuiteSettings
    sleep: Callable[[float], None]


class SuiteBattery:
    """
    Collects the results of one suite run.

    Attributes:
        suite: Suite name
        results: Results in the order the checks ran
    """

    def __init__(self, suite: str) -> None:
        self.suite = suite
        self.results: list[SecuritySuiteResult] = []
        self._names: set[str] = set()

    def unique_name(self, base: str) -> str:
        """``base``, or ``base_2``, ``base_3``... if already taken in this run."""
        if base not in self._names:
            return base
        n = 2
        while f"{base}_{n}" in self._names:
            n += 1
        return f"{base}_{n}"

    def add(self, name: str, passed: bool, severity: Severity, details: str) -> SecuritySuiteResult:
        """Record one result. Names must be unique within the run."""
        if name in self._names:
            raise ValueError(f"Duplicate check name in {self.suite} suite: {name}")
        self._names.add(name)

        result = SecuritySuiteResult(
            name=name,
            status=CheckStatus.PASS if passed else CheckStatus.FAIL,
            severity=severity,
            details=details,
        )
        self.results.append(result)

        if not passed:
            logger.warning(
                "check_failed suite={} check={} severity={} details={}",
                self.suite,
                name,
                severity.value,
                details,
            )
        return result

    def check(
        self,
        name: str,
        passed: bool,
        severity: Severity,
        pass_details: str,
        fail_details: str,
    ) -> SecuritySuiteResult:
        """Record a result whose details depend on the outcome."""
        return self.add(name, passed, severity, pass_details if passed else fail_details)

    @contextmanager
    def isolate(self, name: str, severity: Severity, error_label: str) -> Iterator[None]:
        """
        Run a check body; an exception becomes a failed result named ``name``.

        The body records its own result on success. It must not record one
        and then raise.
        """
        try:
            yield
        except Exception as e:
            self.add(name, False, severity, f"{error_label}: {describe_error(e)}")
