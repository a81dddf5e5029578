"""
DPDK Workload Profile Definitions

Defines the shape of the pod that hosts testpmd: resources (including
hugepages), mounts, capabilities and the network attachment it asks for.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

HUGEPAGES_1GI = "hugepages-1Gi"
DEFAULT_IMAGE = "docker.io/dorzheh/dpdk-centos7:latest"


class ResourceSpec(BaseModel):
    """Resource requests/limits for the testpmd container."""
    model_config = ConfigDict(populate_by_name=True)

    cpu: str = "4"
    memory: str = "1000Mi"
    hugepages: str | None = Field("4Gi", alias=HUGEPAGES_1GI)

    def as_resource_list(self) -> dict[str, str]:
        resources = {"cpu": self.cpu, "memory": self.memory}
        if self.hugepages:
            resources[HUGEPAGES_1GI] = self.hugepages
        return resources


class Resources(BaseModel):
    """Container resources."""
    requests: ResourceSpec = Field(default_factory=ResourceSpec)
    limits: ResourceSpec = Field(default_factory=ResourceSpec)


class DpdkWorkloadProfile(BaseModel):
    """
    Pod profile for a DPDK test application.

    The container idles forever; the test script is run in it with exec.
    """
    name: str = "test-dpdk"
    # unset means the run configuration decides (DPDK_APP_IMAGE or DEFAULT_IMAGE)
    image: str | None = None
    image_pull_policy: str = "Always"
    command: list[str] = Field(default_factory=lambda: ["/bin/bash", "-c", "--"])
    args: list[str] = Field(default_factory=lambda: ["while true; do sleep inf; done;"])
    resources: Resources = Field(default_factory=Resources)
    capabilities: list[str] = Field(default_factory=lambda: ["IPC_LOCK"])
    network: str = "dpdk-network"
    hugepage_mount_path: str = "/mnt/huge"
    script_mount_path: str = "/opt/test.sh"
    script_mode: int = 0o755
    labels: dict[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("labels", mode="before")
    @classmethod
    def ensure_app_label(cls, v, info):
        """Ensure the app label is present."""
        v = dict(v or {})
        v.setdefault("app", info.data.get("name", "test-dpdk"))
        return v

    @field_validator("script_mount_path", "hugepage_mount_path")
    @classmethod
    def validate_absolute(cls, v):
        if not v.startswith("/"):
            raise ValueError(f"Mount path must be absolute: {v}")
        return v


def load_profile(path: str | Path) -> DpdkWorkloadProfile:
    """
    Load a workload profile from YAML file.

    Args:
        path: Path to YAML profile file

    Returns:
        DpdkWorkloadProfile instance

    Raises:
        yaml.YAMLError: If YAML is malformed
        ValidationError: If profile is invalid
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return DpdkWorkloadProfile(**data)

