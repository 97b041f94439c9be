"""
Settings suite.

Writes a scratch key, reads it back, optionally exercises the batch
operations, and always tries to remove what it wrote.
"""

import time

from loguru import logger

from hostguard.capabilities.base import missing_operations
from hostguard.schema import Severity
from hostguard.suites.base import SuiteBattery, SuiteContext, describe_error

SUITE_NAME = "settings"

REQUIRED_OPERATIONS = ("get", "set")

BATCH_VALUES = {
    "security.suite.batch.one": 1,
    "security.suite.batch.two": 2,
}


def run_settings_checks(battery: SuiteBattery, ctx: SuiteContext) -> None:
    settings = ctx.host.settings

    missing = missing_operations(settings, REQUIRED_OPERATIONS)
    battery.check(
        "settings_api_surface",
        not missing,
        Severity.MEDIUM,
        "Required settings operations available",
        f"Missing operations: {', '.join(missing)}",
    )

    stamp = time.time_ns() // 1_000_000
    scratch_key = f"{ctx.settings.settings_key_prefix}.{stamp}"
    try:
        with battery.isolate("settings_roundtrip", Severity.MEDIUM, "Settings operation failed"):
            settings.set(scratch_key, {"value": "ok", "ts": stamp})
            saved = settings.get(scratch_key)
            valid = isinstance(saved, dict) and saved.get("value") == "ok"
            battery.check(
                "settings_roundtrip",
                valid,
                Severity.MEDIUM,
                "set/get roundtrip succeeded",
                "set/get roundtrip returned unexpected value",
            )

        with battery.isolate("settings_batch_operations", Severity.LOW, "Batch operation failed"):
            _batch_operations(battery, ctx)
    finally:
        _cleanup(ctx, [scratch_key, *BATCH_VALUES])


def _batch_operations(battery: SuiteBattery, ctx: SuiteContext) -> None:
    settings = ctx.host.settings
    try:
        settings.set_all(dict(BATCH_VALUES))
        stored = settings.get_all()
    except NotImplementedError:
        battery.add(
            "settings_batch_operations",
            True,
            Severity.LOW,
            "set_all/get_all not available in this host build; skipped",
        )
        return

    stored = stored or {}
    persisted = all(stored.get(key) == value for key, value in BATCH_VALUES.items())
    battery.check(
        "settings_batch_operations",
        persisted,
        Severity.LOW,
        "set_all/get_all batch operations succeeded",
        "Batch operations did not persist expected values",
    )


def _cleanup(ctx: SuiteContext, keys: list[str]) -> None:
    """Best-effort removal of keys written by the suite. Never affects results."""
    for key in keys:
        try:
            ctx.host.settings.delete(key)
        except NotImplementedError:
            return
        except Exception as e:
            logger.debug("settings_cleanup_failed key={} error={}", key, describe_error(e))
