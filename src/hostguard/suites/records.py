"""
Record-store suite.

Every call issued here is read-only: the identity function and a one-row
listing query. Without a live connection only the API surface is checked.
"""

from hostguard.capabilities.base import missing_operations
from hostguard.schema import Severity
from hostguard.suites.base import SuiteBattery, SuiteContext

SUITE_NAME = "records"

REQUIRED_OPERATIONS = ("execute", "query_records", "get_entity_metadata")


def run_records_checks(battery: SuiteBattery, ctx: SuiteContext) -> None:
    records = ctx.host.records

    missing = missing_operations(records, REQUIRED_OPERATIONS)
    battery.check(
        "records_api_surface",
        not missing,
        Severity.MEDIUM,
        "Required record-store operations available",
        f"Missing operations: {', '.join(missing)}",
    )

    if ctx.host.get_current_connection() is None:
        battery.add(
            "records_connection_required",
            True,
            Severity.LOW,
            "No active connection; runtime query checks skipped",
        )
        return

    operation = ctx.settings.identity_operation
    with battery.isolate("records_identity_query", Severity.MEDIUM, f"{operation} failed"):
        identity = records.execute(operation, "function")
        battery.check(
            "records_identity_query",
            bool(identity),
            Severity.MEDIUM,
            f"{operation} returned a response",
            f"{operation} returned empty response",
        )

    with battery.isolate("records_query_readonly", Severity.MEDIUM, "Read-only query failed"):
        response = records.query_records(ctx.settings.listing_query)
        rows = response.get("value") if isinstance(response, dict) else None
        if isinstance(rows, list):
            battery.add(
                "records_query_readonly",
                True,
                Severity.MEDIUM,
                f"Read-only query succeeded ({len(rows)} rows)",
            )
        else:
            battery.add(
                "records_query_readonly",
                False,
                Severity.MEDIUM,
                "Read-only query response malformed",
            )
