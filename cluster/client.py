"""
Kubernetes Client Wrapper

Cluster operations used by the functional tests, implemented with kubectl
subprocess calls. Every call is a single shot: a non-zero exit status is
raised as KubectlError and never retried.
"""

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


class KubectlError(Exception):
    """Raised when a kubectl invocation exits with a non-zero status."""

    def __init__(self, cmd: list[str], returncode: int, stderr: str):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(
            f"{' '.join(cmd)} failed with exit code {returncode}: {self.stderr}"
        )


@dataclass
class ExecResult:
    """Combined output of a command executed inside a pod."""
    output: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class KubectlClient:
    """
    Wrapper for Kubernetes operations using kubectl.

    Usage:
        client = KubectlClient(kubeconfig="~/.kube/config")
        nodes = client.list_nodes("feature.node.kubernetes.io/network-sriov.capable=true")
        pod = client.create(manifest)
        client.delete("pod", pod["metadata"]["namespace"], pod["metadata"]["name"])
    """

    def __init__(
        self,
        kubeconfig: str | None = None,
        cli: str = "kubectl",
        timeout: int = 60
    ):
        self.kubeconfig = kubeconfig
        self.cli = cli
        self.timeout = timeout

    def _command(self, args: list[str]) -> list[str]:
        cmd = [self.cli]
        if self.kubeconfig:
            cmd.extend(["--kubeconfig", self.kubeconfig])
        cmd.extend(args)
        return cmd

    def _run_kubectl(
        self,
        args: list[str],
        input_data: str | None = None
    ) -> str:
        """Run kubectl and return stdout, raising KubectlError on failure."""
        cmd = self._command(args)
        logger.debug(f"Running: {' '.join(cmd)}")

        result = subprocess.run(
            cmd,
            input=input_data,
            capture_output=True,
            text=True,
            timeout=self.timeout
        )
        if result.returncode != 0:
            raise KubectlError(cmd, result.returncode, result.stderr)
        return result.stdout

    def _run_json(
        self,
        args: list[str],
        input_data: str | None = None
    ) -> dict[str, Any]:
        stdout = self._run_kubectl(args + ["-o", "json"], input_data=input_data)
        return json.loads(stdout)

    def list_nodes(self, label_selector: str) -> list[dict[str, Any]]:
        """List nodes matching a label selector."""
        data = self._run_json(["get", "nodes", "-l", label_selector])
        return data.get("items", [])

    def get_pod(self, namespace: str, name: str) -> dict[str, Any]:
        """Get a single pod."""
        return self._run_json(["get", "pod", name, "-n", namespace])

    def create(self, manifest: dict[str, Any]) -> dict[str, Any]:
        """
        Create a resource from a manifest.

        Uses `create` rather than `apply` so that `generateName` works.

        Args:
            manifest: K8s manifest dict

        Returns:
            The created object as reported by the API server
        """
        metadata = manifest.get("metadata", {})
        name = metadata.get("name") or f"{metadata.get('generateName', '')}*"
        logger.info(f"Creating {manifest['kind']} {name}")

        return self._run_json(["create", "-f", "-"], input_data=json.dumps(manifest))

    def delete(self, kind: str, namespace: str, name: str) -> None:
        """Delete a namespaced resource without waiting for finalization."""
        logger.info(f"Deleting {kind} {namespace}/{name}")
        self._run_kubectl(["delete", kind, name, "-n", namespace, "--wait=false"])

    def namespace_exists(self, name: str) -> bool:
        stdout = self._run_kubectl([
            "get", "namespace", name,
            "--ignore-not-found", "-o", "name"
        ])
        return bool(stdout.strip())

    def ensure_namespace(self, name: str) -> bool:
        """
        Create a namespace if it does not exist yet.

        Returns:
            True if the namespace was created, False if it already existed
        """
        if self.namespace_exists(name):
            logger.debug(f"Namespace {name} already exists")
            return False

        logger.info(f"Creating namespace {name}")
        self._run_kubectl(["create", "namespace", name])
        return True

    def exec(
        self,
        namespace: str,
        pod: str,
        command: list[str]
    ) -> ExecResult:
        """
        Execute a command inside the pod's primary container.

        Stdout and stderr are merged into a single text blob. No timeout is
        applied; the call returns once the command exits.
        """
        cmd = self._command(["exec", "-n", namespace, pod, "--"] + command)
        logger.debug(f"Running: {' '.join(cmd)}")

        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True
        )
        return ExecResult(output=result.stdout or "", returncode=result.returncode)

    def is_reachable(self) -> bool:
        """Check if the API server answers its health endpoint."""
        try:
            stdout = self._run_kubectl(["get", "--raw", "/healthz"])
        except (KubectlError, subprocess.TimeoutExpired) as e:
            logger.warning(f"Cluster not reachable: {e}")
            return False
        return "ok" in stdout.lower()
