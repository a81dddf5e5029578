"""
Readiness Waiting

Blocking poll-with-deadline helpers. The predicate is evaluated against
freshly fetched state at a fixed interval until it holds or the deadline
passes. Errors raised while fetching are not retried.
"""

import logging
import time
from typing import Any, Callable, TypeVar

from .client import KubectlClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

POD_RUNNING = "Running"


class WaitTimeoutError(Exception):
    """Raised when a polled condition does not hold before the deadline."""

    def __init__(self, description: str, timeout: float, last_value: Any = None):
        self.description = description
        self.timeout = timeout
        self.last_value = last_value
        super().__init__(
            f"Timed out after {timeout}s waiting for {description} "
            f"(last observed: {last_value!r})"
        )


def poll_until(
    fetch: Callable[[], T],
    predicate: Callable[[T], bool],
    interval: float = 1.0,
    timeout: float = 120.0,
    description: str = "condition"
) -> T:
    """
    Poll `fetch` until `predicate` holds for the fetched value.

    Args:
        fetch: Zero-argument callable returning the current state
        predicate: Condition over the fetched state
        interval: Seconds to sleep between checks
        timeout: Seconds after which to give up
        description: Human-readable name used in logs and errors

    Returns:
        The first fetched value satisfying the predicate

    Raises:
        WaitTimeoutError: If the deadline passes first
        Exception: Anything raised by `fetch`, unchanged
    """
    if interval <= 0:
        raise ValueError("interval must be positive")
    if timeout <= 0:
        raise ValueError("timeout must be positive")

    deadline = time.monotonic() + timeout
    while True:
        value = fetch()
        if predicate(value):
            return value

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise WaitTimeoutError(description, timeout, value)

        logger.debug(f"Waiting for {description}: current={value!r}")
        # last sleep is cut short so the final check lands on the deadline
        time.sleep(min(interval, remaining))


def wait_for_pod_phase(
    client: KubectlClient,
    namespace: str,
    name: str,
    phase: str = POD_RUNNING,
    interval: float = 1.0,
    timeout: float = 120.0
) -> str:
    """
    Block until a pod reports the given phase.

    Terminal phases are not special-cased: a pod that goes to Failed keeps
    being polled until the timeout.

    Returns:
        The observed phase
    """
    logger.info(f"Waiting for pod {namespace}/{name} to reach phase {phase}")

    def _phase() -> str | None:
        pod = client.get_pod(namespace, name)
        return pod.get("status", {}).get("phase")

    return poll_until(
        _phase,
        lambda current: current == phase,
        interval=interval,
        timeout=timeout,
        description=f"pod {namespace}/{name} phase {phase}"
    )
