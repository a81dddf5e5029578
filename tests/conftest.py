"""Pytest fixtures for SR-IOV DPDK functional testing."""
import logging
import sys
from pathlib import Path
from typing import Any

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from cluster import ExecResult, KubectlError
from functests import DpdkTestConfig

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# Pytest Marker Registration
# =============================================================================

def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "dpdk: DPDK output parsing and scenario tests")
    config.addinivalue_line("markers", "kubernetes: Tests that talk to a live cluster")
    config.addinivalue_line("markers", "integration: Integration tests (create cluster resources)")


# =============================================================================
# testpmd Output Samples
# =============================================================================

STATS_HEADER = "  +++++++++++++++ Accumulated forward statistics for all ports+++++++++++++++"


def stats_output(rx: str, tx: str) -> str:
    """testpmd exit output with the given RX-total / TX-total values."""
    return "\n".join([
        "0-3",
        "0000:3b:02.1",
        "EAL: Detected 4 lcore(s)",
        "Telling cores to stop...",
        "Waiting for lcores to finish...",
        "",
        "  ---------------------- Forward statistics for port 0  ----------------------",
        f"  RX-packets: {rx}            RX-dropped: 0             RX-total: {rx}",
        f"  TX-packets: {tx}             TX-dropped: 0             TX-total: {tx}",
        "  ----------------------------------------------------------------------------",
        "",
        STATS_HEADER,
        f"  RX-packets: {rx}            RX-dropped: 0             RX-total: {rx}",
        f"  TX-packets: {tx}             TX-dropped: 0             TX-total: {tx}",
        "  ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++",
        "",
        "Done.",
    ])


@pytest.fixture
def passing_output() -> str:
    return stats_output("120", "98")


@pytest.fixture
def no_rx_output() -> str:
    return stats_output("0", "98")


# =============================================================================
# In-memory Cluster
# =============================================================================

class FakeCluster:
    """
    Stand-in for KubectlClient that keeps objects in memory.

    Pods report the phases in `pod_phases` one poll at a time, staying on the
    last one. Every mutating call is appended to `events`.
    """

    def __init__(
        self,
        nodes: list[str] | None = None,
        pod_phases: list[str] | None = None,
        exec_output: str = "",
        exec_returncode: int = 0
    ):
        self.nodes = nodes if nodes is not None else ["worker-0"]
        self.pod_phases = pod_phases or ["Pending", "Running"]
        self.exec_output = exec_output
        self.exec_returncode = exec_returncode
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.events: list[tuple[str, ...]] = []
        self.namespaces: set[str] = set()
        self._polls: dict[str, int] = {}
        self._counter = 0

    def list_nodes(self, label_selector: str) -> list[dict[str, Any]]:
        self.events.append(("list_nodes", label_selector))
        return [
            {"metadata": {"name": n, "labels": {"kubernetes.io/hostname": n}}}
            for n in self.nodes
        ]

    def create(self, manifest: dict[str, Any]) -> dict[str, Any]:
        metadata = dict(manifest["metadata"])
        if "name" not in metadata:
            self._counter += 1
            metadata["name"] = f"{metadata['generateName']}{self._counter:05d}"
        obj = {**manifest, "metadata": metadata}
        kind = manifest["kind"].lower()
        key = (kind, metadata["namespace"], metadata["name"])
        if key in self.objects:
            raise KubectlError(["kubectl", "create"], 1, "AlreadyExists")
        self.objects[key] = obj
        self.events.append(("create", kind, metadata["name"]))
        return obj

    def get_pod(self, namespace: str, name: str) -> dict[str, Any]:
        key = ("pod", namespace, name)
        if key not in self.objects:
            raise KubectlError(["kubectl", "get", "pod", name], 1, "NotFound")
        polls = self._polls.get(name, 0)
        self._polls[name] = polls + 1
        phase = self.pod_phases[min(polls, len(self.pod_phases) - 1)]
        return {**self.objects[key], "status": {"phase": phase}}

    def delete(self, kind: str, namespace: str, name: str) -> None:
        key = (kind, namespace, name)
        if key not in self.objects:
            raise KubectlError(["kubectl", "delete", kind, name], 1, "NotFound")
        del self.objects[key]
        self.events.append(("delete", kind, name))

    def ensure_namespace(self, name: str) -> bool:
        created = name not in self.namespaces
        self.namespaces.add(name)
        return created

    def exec(self, namespace: str, pod: str, command: list[str]) -> ExecResult:
        self.events.append(("exec", pod, " ".join(command)))
        return ExecResult(output=self.exec_output, returncode=self.exec_returncode)

    def live(self, kind: str) -> list[str]:
        return [name for (k, _, name) in self.objects if k == kind]


@pytest.fixture
def fake_cluster(passing_output) -> FakeCluster:
    return FakeCluster(nodes=["worker-0"], exec_output=passing_output)


@pytest.fixture
def test_config() -> DpdkTestConfig:
    """Config with a fast poll so timeouts happen quickly."""
    return DpdkTestConfig(
        poll_interval_seconds=0.01,
        ready_timeout_seconds=0.2,
    )
