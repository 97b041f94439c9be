"""Severity ranking and triage ordering for suite results."""

from collections.abc import Iterable

from hostguard.schema import CheckStatus, SecuritySuiteResult, Severity, SuiteSummary

_STATUS_ORDER = {
    CheckStatus.FAIL: 0,
    CheckStatus.PASS: 1,
}


def highest_severity(results: Iterable[SecuritySuiteResult]) -> Severity:
    """Worst severity present; LOW for an empty sequence."""
    highest = Severity.LOW
    for result in results:
        if result.severity.rank > highest.rank:
            highest = result.severity
    return highest


def sort_for_triage(results: Iterable[SecuritySuiteResult]) -> list[SecuritySuiteResult]:
    """
    Order results for human review.

    Severity descending, then failures before passes, then name ascending.
    The name tie-break makes the order total, so identical inputs always
    serialize identically and sorting twice changes nothing.
    """
    return sorted(
        results,
        key=lambda r: (-r.severity.rank, _STATUS_ORDER[r.status], r.name),
    )


def summarize(results: Iterable[SecuritySuiteResult]) -> SuiteSummary:
    """Counts and worst severity for ``results``."""
    items = list(results)
    failed = sum(1 for r in items if r.status == CheckStatus.FAIL)
    return SuiteSummary(
        total=len(items),
        passed=len(items) - failed,
        failed=failed,
        highest_severity=highest_severity(items),
    )
