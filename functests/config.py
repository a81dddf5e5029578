"""
DPDK Functional Test Configuration

Pydantic models for the test run settings. Values come from defaults, an
optional YAML file and the DPDK_APP_IMAGE environment variable.
"""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from workloads import DEFAULT_IMAGE, DpdkWorkloadProfile, load_profile

IMAGE_ENV_VAR = "DPDK_APP_IMAGE"


def default_image() -> str:
    """Image for the test pod: $DPDK_APP_IMAGE, or the public default when unset."""
    return os.environ.get(IMAGE_ENV_VAR) or DEFAULT_IMAGE


class DpdkTestConfig(BaseModel):
    """
    Settings for one functional test run.

    Usage:
        config = DpdkTestConfig.from_yaml("dpdk-test.yaml")
        config = DpdkTestConfig.from_env()
    """
    namespace: str = "dpdk-testing"
    node_label: str = "feature.node.kubernetes.io/network-sriov.capable=true"
    configmap_name: str = "testpmd"
    image: str = Field(default_factory=default_image)
    poll_interval_seconds: float = 1.0
    ready_timeout_seconds: float = 120.0
    require_marker: bool = False
    kubeconfig: str | None = None
    cli: str = "kubectl"
    profile: DpdkWorkloadProfile = Field(default_factory=DpdkWorkloadProfile)

    @field_validator("poll_interval_seconds", "ready_timeout_seconds")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("Polling interval and timeout must be positive")
        return v

    @field_validator("profile", mode="before")
    @classmethod
    def load_profile_file(cls, v):
        """A string is taken as the path of a profile YAML file."""
        if isinstance(v, (str, Path)):
            return load_profile(v)
        return v

    @field_validator("node_label")
    @classmethod
    def validate_label(cls, v):
        if not v or not v.strip():
            raise ValueError("Node label selector cannot be empty")
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "DpdkTestConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        profile = data.get("profile")
        if isinstance(profile, str) and not Path(profile).is_absolute():
            data["profile"] = str(Path(path).parent / profile)
        return cls(**data)

    @classmethod
    def from_env(cls) -> "DpdkTestConfig":
        """Defaults, with the image taken from the environment."""
        return cls()

    @property
    def network(self) -> str:
        return self.profile.network

    @property
    def test_cmd_path(self) -> str:
        return self.profile.script_mount_path

    @property
    def pod_image(self) -> str:
        """Image set in the profile, else the run default ($DPDK_APP_IMAGE or public image)."""
        return self.profile.image or self.image

    def workload_profile(self) -> DpdkWorkloadProfile:
        """The pod profile with its image resolved."""
        return self.profile.model_copy(update={"image": self.pod_image})
