#!/usr/bin/env python3
"""
SR-IOV DPDK Functional Test

Runs testpmd on every SR-IOV capable worker node and checks rx/tx counters:
1. Select nodes by capability label
2. Create the testpmd wrapper ConfigMap
3. Per node: create pod, wait Running, run testpmd, verify, delete pod
4. Delete the ConfigMap

Usage:
    python scripts/run_dpdk_functest.py
    python scripts/run_dpdk_functest.py --config dpdk-test.yaml --require-marker
    DPDK_APP_IMAGE=quay.io/example/dpdk:latest python scripts/run_dpdk_functest.py
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cluster import KubectlClient, KubectlError, WaitTimeoutError
from functests import (
    DpdkForwardingTest,
    DpdkTestConfig,
    NoNodesError,
    ScriptExecutionError,
    VerificationError,
    setup_suite,
)

logger = logging.getLogger(__name__)


def load_config(args: argparse.Namespace) -> DpdkTestConfig:
    """Build the run configuration from an optional file plus CLI overrides."""
    config = DpdkTestConfig.from_yaml(args.config) if args.config else DpdkTestConfig.from_env()

    overrides = {}
    if args.namespace:
        overrides["namespace"] = args.namespace
    if args.kubeconfig:
        overrides["kubeconfig"] = args.kubeconfig
    if args.cli:
        overrides["cli"] = args.cli
    if args.require_marker:
        overrides["require_marker"] = True

    if overrides:
        config = DpdkTestConfig(**{**config.model_dump(), **overrides})
    return config


def run(config: DpdkTestConfig) -> bool:
    """Run the suite. Returns True when every node passed."""
    client = KubectlClient(kubeconfig=config.kubeconfig, cli=config.cli)

    print("=" * 60)
    print("SR-IOV DPDK FUNCTIONAL TEST")
    print("=" * 60)
    print(f"Namespace:  {config.namespace}")
    print(f"Node label: {config.node_label}")
    print(f"Image:      {config.pod_image}")
    print()

    try:
        setup_suite(client, config)
        results = DpdkForwardingTest(client, config).run()
    except (KubectlError, WaitTimeoutError, NoNodesError,
            ScriptExecutionError, VerificationError) as e:
        logger.error(f"Test failed: {e}")
        print("=" * 60)
        print("❌ TEST FAILED")
        print("=" * 60)
        return False

    for result in results:
        summary = result.to_dict()
        print(f"  {summary['node']}: pod={summary['pod']} "
              f"rx={summary['rx_packets']} tx={summary['tx_packets']}")

    print("=" * 60)
    print(f"✅ ALL NODES PASSED ({len(results)})")
    print("=" * 60)
    return True


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run the SR-IOV DPDK forwarding functional test"
    )
    parser.add_argument("--config", type=str, help="YAML configuration file")
    parser.add_argument("--namespace", type=str, help="Namespace for test resources")
    parser.add_argument("--kubeconfig", type=str, help="Path to kubeconfig")
    parser.add_argument("--cli", type=str, help="Cluster CLI binary (kubectl or oc)")
    parser.add_argument(
        "--require-marker",
        action="store_true",
        help="Fail when testpmd prints no accumulated statistics"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    success = run(load_config(args))
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
