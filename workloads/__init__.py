"""
DPDK Workload Module

Generates the K8s resources that host testpmd on SR-IOV capable nodes.
"""

__version__ = "1.0.0"

from .generator import TESTPMD_SCRIPT, WorkloadGenerator
from .profiles import DEFAULT_IMAGE, DpdkWorkloadProfile, load_profile

__all__ = [
    "WorkloadGenerator",
    "DpdkWorkloadProfile",
    "DEFAULT_IMAGE",
    "TESTPMD_SCRIPT",
    "load_profile",
]
