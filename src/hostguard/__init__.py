"""
HostGuard - Policy gate and conformance harness for host-provided tool capabilities.

HostGuard sits between a tool and the capabilities its host exposes
(terminal, filesystem, events, settings, record store). It provides:
- Deny-by-default command and path policy
- Guarded wrappers that refuse to reach a capability when the policy denies
- Five security suites that replay benign and adversarial inputs
- Severity-ranked, deterministic JSON reports

Example usage:
    $ hostguard check-command "ls -la"
    $ hostguard check-path /etc/passwd
    $ hostguard run-all --out reports/
"""

from loguru import logger

__version__ = "0.1.0"
__author__ = "HostGuard Contributors"

# Library code stays quiet unless the application opts in
logger.disable("hostguard")

__all__ = [
    "__version__",
    "__author__",
]
