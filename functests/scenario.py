"""
DPDK Forwarding Scenario

Runs testpmd on every SR-IOV capable node, one node at a time:
create pod -> wait Running -> exec wrapper script -> verify rx/tx -> delete pod.
The ConfigMap holding the script is created before the node loop and
deleted after it.

There is no cleanup on failure: the first error aborts the run and may
leave the current pod and the ConfigMap behind.
"""

import logging
from dataclasses import dataclass

from cluster import KubectlClient, wait_for_pod_phase
from workloads import WorkloadGenerator

from .config import DpdkTestConfig
from .testpmd import TrafficStats, check_rx_tx

logger = logging.getLogger(__name__)


class NoNodesError(Exception):
    """Raised when no node carries the capability label."""
    pass


class ScriptExecutionError(Exception):
    """Raised when the in-pod test script exits with a non-zero status."""

    def __init__(self, pod: str, command: str, returncode: int, output: str):
        self.pod = pod
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"cannot execute {command} inside the pod {pod} "
            f"(exit code {returncode})\n{output}"
        )


@dataclass
class NodeResult:
    """Outcome of the forwarding test on one node."""
    node: str
    pod: str
    stats: TrafficStats | None

    def to_dict(self) -> dict:
        return {
            "node": self.node,
            "pod": self.pod,
            "rx_packets": self.stats.rx_packets if self.stats else None,
            "tx_packets": self.stats.tx_packets if self.stats else None,
        }


def select_nodes(client: KubectlClient, label: str) -> list[str]:
    """
    Find the names of the nodes carrying `label`.

    Raises:
        NoNodesError: If no node matches
    """
    logger.info(f"Getting list of nodes labeled {label}")
    nodes = client.list_nodes(label)
    if not nodes:
        raise NoNodesError(f"cannot find nodes labeled as {label}")

    names = [n["metadata"]["name"] for n in nodes]
    logger.info(f"Found {len(names)} node(s): {', '.join(names)}")
    return names


def setup_suite(client: KubectlClient, config: DpdkTestConfig) -> None:
    """Suite-level setup, run once before any test case."""
    client.ensure_namespace(config.namespace)


class DpdkForwardingTest:
    """
    Forwarding test driver.

    Usage:
        test = DpdkForwardingTest(KubectlClient(), DpdkTestConfig.from_env())
        results = test.run()
    """

    def __init__(self, client: KubectlClient, config: DpdkTestConfig):
        self.client = client
        self.config = config
        self.generator = WorkloadGenerator(config.workload_profile())

    def create_configmap(self) -> str:
        """Create the testpmd wrapper script ConfigMap and return its name."""
        logger.info("Create testpmd wrapper script")
        manifest = self.generator.generate_configmap(
            self.config.namespace,
            name=self.config.configmap_name
        )
        created = self.client.create(manifest)
        return created["metadata"]["name"]

    def delete_configmap(self, name: str) -> None:
        self.client.delete("configmap", self.config.namespace, name)

    def create_pod(self, node_name: str, configmap_name: str) -> str:
        """Create the test pod on `node_name` and return its generated name."""
        logger.info(f"Create a test pod on node {node_name}")
        manifest = self.generator.generate_pod(
            node_name,
            self.config.namespace,
            configmap_name
        )
        created = self.client.create(manifest)
        return created["metadata"]["name"]

    def delete_pod(self, name: str) -> None:
        self.client.delete("pod", self.config.namespace, name)

    def execute_script(self, pod_name: str) -> str:
        """Run the wrapper script inside the pod and return its combined output."""
        command = self.config.test_cmd_path
        logger.info(f"Execute {command} inside the pod {pod_name}")

        result = self.client.exec(
            self.config.namespace,
            pod_name,
            ["bash", "-c", command]
        )
        if not result.ok:
            raise ScriptExecutionError(pod_name, command, result.returncode, result.output)
        return result.output

    def run_on_node(self, node_name: str, configmap_name: str) -> NodeResult:
        """Full create/wait/exec/verify/delete cycle for one node."""
        pod_name = self.create_pod(node_name, configmap_name)

        wait_for_pod_phase(
            self.client,
            self.config.namespace,
            pod_name,
            interval=self.config.poll_interval_seconds,
            timeout=self.config.ready_timeout_seconds
        )

        output = self.execute_script(pod_name)
        stats = check_rx_tx(output, require_marker=self.config.require_marker)
        if stats is None:
            logger.warning(f"No testpmd statistics found in output of pod {pod_name}")
        else:
            logger.info(
                f"Node {node_name}: rx={stats.rx_packets} tx={stats.tx_packets}"
            )

        self.delete_pod(pod_name)
        return NodeResult(node=node_name, pod=pod_name, stats=stats)

    def run(self) -> list[NodeResult]:
        """Run the forwarding test on every selected node, strictly in order."""
        nodes = select_nodes(self.client, self.config.node_label)
        configmap_name = self.create_configmap()

        results = []
        for node_name in nodes:
            results.append(self.run_on_node(node_name, configmap_name))

        self.delete_configmap(configmap_name)
        return results


def run_forwarding_test(
    client: KubectlClient,
    config: DpdkTestConfig
) -> list[NodeResult]:
    """Run the forwarding test with the given client and settings."""
    return DpdkForwardingTest(client, config).run()
