"""
SR-IOV DPDK Functional Tests

Deploys testpmd onto SR-IOV capable worker nodes and asserts that packets
were received and transmitted.
"""

__version__ = "1.0.0"

from .config import DEFAULT_IMAGE, IMAGE_ENV_VAR, DpdkTestConfig
from .scenario import (
    DpdkForwardingTest,
    NodeResult,
    NoNodesError,
    ScriptExecutionError,
    run_forwarding_test,
    select_nodes,
    setup_suite,
)
from .testpmd import (
    MalformedStatsError,
    MissingStatsError,
    NoTrafficError,
    TrafficStats,
    VerificationError,
    check_rx_tx,
)

__all__ = [
    "DpdkTestConfig",
    "DEFAULT_IMAGE",
    "IMAGE_ENV_VAR",
    "DpdkForwardingTest",
    "NodeResult",
    "NoNodesError",
    "ScriptExecutionError",
    "run_forwarding_test",
    "select_nodes",
    "setup_suite",
    "check_rx_tx",
    "TrafficStats",
    "VerificationError",
    "MalformedStatsError",
    "NoTrafficError",
    "MissingStatsError",
]
