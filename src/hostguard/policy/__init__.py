"""
Policy module for HostGuard.

This module implements the security boundary: deny-by-default evaluation of
terminal commands and filesystem paths, plus the guarded wrappers that put
that evaluation in front of every capability call.

Key concepts:
    - Deny-by-default: a command runs only if it is an exact allow-list match
    - Exfiltration heuristic: local-data + network-egress signals deny even
      allow-listed commands
    - Guarded wrapper: the capability is invoked only after the policy allows

The evaluators are pure; the only state is the immutable RuleCatalog.
"""

from hostguard.policy.engine import (
    PolicyEngine,
    default_engine,
    evaluate_command,
    evaluate_path,
)
from hostguard.policy.guard import guarded_execute, guarded_read
from hostguard.policy.normalize import normalize

__all__ = [
    "PolicyEngine",
    "default_engine",
    "evaluate_command",
    "evaluate_path",
    "guarded_execute",
    "guarded_read",
    "normalize",
]
