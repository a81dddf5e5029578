"""
Cluster Access Module

Thin synchronous wrappers over the kubectl CLI, plus a poll-with-deadline
helper for waiting on resource state.
"""

__version__ = "1.0.0"

from .client import ExecResult, KubectlClient, KubectlError
from .wait import WaitTimeoutError, poll_until, wait_for_pod_phase

__all__ = [
    "ExecResult",
    "KubectlClient",
    "KubectlError",
    "WaitTimeoutError",
    "poll_until",
    "wait_for_pod_phase",
]
