"""Filesystem suite: path policy probes plus a guarded read that must never reach the host."""

from hostguard.capabilities.base import missing_operations
from hostguard.errors import PolicyViolation
from hostguard.policy.guard import guarded_read
from hostguard.schema import Severity
from hostguard.suites.base import SuiteBattery, SuiteContext, describe_error

SUITE_NAME = "filesystem"

RELATIVE_PATH = "relative/config.json"
TRAVERSAL_PATH = "/tmp/../etc/passwd"
WINDOWS_SENSITIVE_PATH = "C:\\Users\\demo\\.ssh\\known_hosts"
SENSITIVE_READ_PATH = "/Users/test/.ssh/id_rsa"

REQUIRED_OPERATIONS = (
    "read_text",
    "list_directory",
    "create_directory",
    "save_file",
    "select_path",
)


def run_filesystem_checks(battery: SuiteBattery, ctx: SuiteContext) -> None:
    engine = ctx.engine

    battery.check(
        "filesystem_requires_absolute_path",
        engine.evaluate_path(RELATIVE_PATH) is not None,
        Severity.HIGH,
        "Relative path rejected",
        "Relative path unexpectedly allowed",
    )
    battery.check(
        "filesystem_traversal_block",
        engine.evaluate_path(TRAVERSAL_PATH) is not None,
        Severity.CRITICAL,
        "Path traversal rejected",
        "Path traversal was not blocked",
    )
    battery.check(
        "filesystem_windows_sensitive_block",
        engine.evaluate_path(WINDOWS_SENSITIVE_PATH) is not None,
        Severity.CRITICAL,
        "Windows sensitive path blocked",
        "Windows sensitive path was not blocked",
    )

    # Only a policy refusal counts; a host-side read error means the read was attempted.
    try:
        guarded_read(ctx.host.filesystem, SENSITIVE_READ_PATH, ctx.engine)
    except PolicyViolation:
        battery.add(
            "filesystem_guarded_read_block",
            True,
            Severity.CRITICAL,
            "Sensitive read blocked by policy guard",
        )
    except Exception as e:
        battery.add(
            "filesystem_guarded_read_block",
            False,
            Severity.CRITICAL,
            f"Sensitive read reached the filesystem: {describe_error(e)}",
        )
    else:
        battery.add(
            "filesystem_guarded_read_block",
            False,
            Severity.CRITICAL,
            "Sensitive read unexpectedly allowed",
        )

    missing = missing_operations(ctx.host.filesystem, REQUIRED_OPERATIONS)
    battery.check(
        "filesystem_api_surface",
        not missing,
        Severity.MEDIUM,
        "All required filesystem operations present",
        f"Missing operations: {', '.join(missing)}",
    )
