"""
Events suite.

Checks that the host exposes an event subscription entry point and that the
glue's terminal event handlers tolerate payloads that are not mappings. The
test subscription is removed again when the host supports unsubscribe.
"""

from loguru import logger

from hostguard.schema import Severity
from hostguard.suites.base import SuiteBattery, SuiteContext, describe_error

SUITE_NAME = "events"


def _noop(payload: object) -> None:
    return None


def run_events_checks(battery: SuiteBattery, ctx: SuiteContext) -> None:
    events = ctx.host.events
    subscribe = getattr(events, "subscribe", None)

    battery.check(
        "events_api_exists",
        callable(subscribe),
        Severity.MEDIUM,
        "events.subscribe is available",
        "events.subscribe is not available",
    )

    try:
        events.subscribe(_noop)
    except Exception as e:
        battery.add(
            "events_subscription_call",
            False,
            Severity.MEDIUM,
            f"Subscription failed: {describe_error(e)}",
        )
    else:
        battery.add(
            "events_subscription_call",
            True,
            Severity.LOW,
            "Event subscription call succeeded",
        )
        _unsubscribe(events)

    _malformed_payload(
        battery,
        "events_malformed_terminal_output",
        ctx.host.on_terminal_output,
        "output",
    )
    _malformed_payload(
        battery,
        "events_malformed_terminal_completed",
        ctx.host.on_command_completed,
        "completion",
    )


def _malformed_payload(battery: SuiteBattery, name: str, handler, label: str) -> None:
    try:
        handler(None)
    except Exception as e:
        battery.add(
            name,
            False,
            Severity.HIGH,
            f"Malformed {label} payload crashed handler: {describe_error(e)}",
        )
    else:
        battery.add(name, True, Severity.HIGH, f"Malformed {label} payload handled safely")


def _unsubscribe(events) -> None:
    """Drop the test handler so repeated runs do not pile up subscriptions."""
    try:
        events.unsubscribe(_noop)
    except NotImplementedError:
        return
    except Exception as e:
        logger.debug("events_unsubscribe_failed error={}", describe_error(e))
