"""
Workload Generator

Builds the K8s manifests for the DPDK functional test: the ConfigMap
carrying the testpmd wrapper script and the per-node test pod.
"""

import logging
from typing import Any

from .profiles import DEFAULT_IMAGE, DpdkWorkloadProfile

logger = logging.getLogger(__name__)

HOSTNAME_LABEL = "kubernetes.io/hostname"
NETWORKS_ANNOTATION = "k8s.v1.cni.cncf.io/networks"
SCRIPT_KEY = "test.sh"

HUGEPAGE_VOLUME = "hugepage"
SCRIPT_VOLUME = "testcmd"

# The device id variable is injected by the SR-IOV device plugin for the
# openshift.io/dpdknic resource.
TESTPMD_SCRIPT = """#!/usr/bin/env bash
export CPU=$(cat /sys/fs/cgroup/cpuset/cpuset.cpus)
echo ${CPU}
echo ${PCIDEVICE_OPENSHIFT_IO_DPDKNIC}
testpmd -l ${CPU} -w ${PCIDEVICE_OPENSHIFT_IO_DPDKNIC} -- -a --portmask=0x1 --nb-cores=2 --forward-mode=mac
"""


class WorkloadGenerator:
    """
    Generates K8s manifests for DPDK test workloads.

    Usage:
        generator = WorkloadGenerator(profile)
        configmap = generator.generate_configmap("dpdk-testing")
        pod = generator.generate_pod("worker-0", "dpdk-testing", "testpmd")
    """

    def __init__(self, profile: DpdkWorkloadProfile | None = None):
        self.profile = profile or DpdkWorkloadProfile()

    def generate_configmap(
        self,
        namespace: str,
        name: str = "testpmd",
        script: str = TESTPMD_SCRIPT
    ) -> dict[str, Any]:
        """
        Generate the ConfigMap holding the testpmd wrapper script.

        Args:
            namespace: Namespace
            name: ConfigMap name

        Returns:
            K8s ConfigMap manifest dict
        """
        return {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {
                "name": name,
                "namespace": namespace
            },
            "data": {
                SCRIPT_KEY: script
            }
        }

    def _container_spec(self) -> dict[str, Any]:
        """Generate container spec."""
        profile = self.profile
        return {
            "name": profile.name,
            "image": profile.image or DEFAULT_IMAGE,
            "imagePullPolicy": profile.image_pull_policy,
            "command": profile.command,
            "args": profile.args,
            "securityContext": {
                "capabilities": {"add": list(profile.capabilities)}
            },
            "resources": {
                "requests": profile.resources.requests.as_resource_list(),
                "limits": profile.resources.limits.as_resource_list()
            },
            "volumeMounts": [
                {
                    "name": HUGEPAGE_VOLUME,
                    "mountPath": profile.hugepage_mount_path,
                    "readOnly": False
                },
                {
                    "name": SCRIPT_VOLUME,
                    "mountPath": profile.script_mount_path,
                    "subPath": SCRIPT_KEY
                }
            ]
        }

    def _volumes(self, configmap_name: str) -> list[dict[str, Any]]:
        return [
            {
                "name": HUGEPAGE_VOLUME,
                "emptyDir": {"medium": "HugePages"}
            },
            {
                "name": SCRIPT_VOLUME,
                "configMap": {
                    "name": configmap_name,
                    "defaultMode": self.profile.script_mode
                }
            }
        ]

    def generate_pod(
        self,
        node_name: str,
        namespace: str,
        configmap_name: str
    ) -> dict[str, Any]:
        """
        Generate a test Pod pinned to a single node.

        Args:
            node_name: Node hostname to pin the pod to
            namespace: Namespace
            configmap_name: ConfigMap carrying the test script

        Returns:
            K8s Pod manifest dict
        """
        profile = self.profile
        logger.debug(f"Generating pod for node {node_name} with network {profile.network}")

        return {
            "apiVersion": "v1",
            "kind": "Pod",
            "metadata": {
                "generateName": profile.name,
                "namespace": namespace,
                "labels": dict(profile.labels),
                "annotations": {
                    NETWORKS_ANNOTATION: profile.network
                }
            },
            "spec": {
                "restartPolicy": "Never",
                "containers": [self._container_spec()],
                "volumes": self._volumes(configmap_name),
                "nodeSelector": {
                    HOSTNAME_LABEL: node_name
                }
            }
        }
