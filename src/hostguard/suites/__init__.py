"""
Security conformance suites for HostGuard.

Suites:
    - command: allow-list, block tokens, exfiltration heuristic, burst probe
    - filesystem: path policy and guarded read
    - events: subscription and malformed payload handling
    - settings: scratch-key round trip and batch operations
    - records: read-only identity and listing queries
"""

from hostguard.suites.base import SuiteBattery, SuiteContext, safe_test_id
from hostguard.suites.runner import SUITES, SecuritySuites

__all__ = [
    "SUITES",
    "SecuritySuites",
    "SuiteBattery",
    "SuiteContext",
    "safe_test_id",
]
