# Copyright 2026 The Kubernetes Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import argparse
import logging
import os
import sys
from typing import Any

import yaml
from kubernetes import config
from kubernetes.client import ApiException

from .constants import (
    DEFAULT_NAMESPACE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_WAIT_TIMEOUT,
    TRACE_SERVICE_NAME,
)
from .pods import StaticPodLookup
from .readiness import ReadinessEvaluator
from .snapshot import PodSummary, WorkloadSnapshot
from .trace_manager import get_tracer, initialize_tracer
from .waiter import StatefulSetWaiter


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="statefulset-ready",
        description="Check whether a StatefulSet rolling update has converged",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    wait_parser = subparsers.add_parser(
        "wait", help="Poll a live StatefulSet until it is ready"
    )
    wait_parser.add_argument("name", type=str, help="StatefulSet name")
    wait_parser.add_argument(
        "--namespace",
        "-n",
        type=str,
        default=os.environ.get("STATEFULSET_NAMESPACE", DEFAULT_NAMESPACE),
        help="Kubernetes namespace (default: default)",
    )
    wait_parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_WAIT_TIMEOUT,
        help=f"Seconds to wait before giving up (default: {DEFAULT_WAIT_TIMEOUT})",
    )
    wait_parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help=f"Seconds between checks (default: {DEFAULT_POLL_INTERVAL})",
    )
    wait_parser.add_argument(
        "--kubeconfig",
        type=str,
        default=None,
        help="Path to a kubeconfig file (default: $KUBECONFIG or in-cluster)",
    )
    wait_parser.add_argument(
        "--enable-tracing",
        action="store_true",
        help="Export OpenTelemetry spans over OTLP",
    )

    check_parser = subparsers.add_parser(
        "check", help="Evaluate a StatefulSet manifest offline"
    )
    check_parser.add_argument(
        "--file",
        "-f",
        type=str,
        required=True,
        help="StatefulSet manifest (YAML or JSON) including its status",
    )
    check_parser.add_argument(
        "--pods",
        type=str,
        default=None,
        help="Pods of the StatefulSet (YAML or JSON list, v1 List or multi-document)",
    )
    return parser.parse_args(argv)


def load_manifests(path: str) -> list[dict[str, Any]]:
    """Loads every object in a YAML/JSON file, flattening lists and v1 Lists."""
    with open(path, "r") as f:
        documents = list(yaml.safe_load_all(f))

    manifests = []
    for document in documents:
        if not document:
            continue
        if isinstance(document, list):
            manifests.extend(document)
        elif not isinstance(document, dict):
            raise ValueError(f"{path} contains a document that is not an object: {document!r}")
        elif (document.get("kind") or "").endswith("List") and "items" in document:
            manifests.extend(document["items"] or [])
        else:
            manifests.append(document)

    for manifest in manifests:
        if not isinstance(manifest, dict):
            raise ValueError(f"{path} contains an item that is not an object: {manifest!r}")
    return manifests


def run_check(args) -> int:
    try:
        manifests = load_manifests(args.file)
        if len(manifests) != 1:
            raise ValueError(
                f"expected one StatefulSet in {args.file}, found {len(manifests)}"
            )
        snapshot = WorkloadSnapshot.from_manifest(manifests[0])

        pods = []
        if args.pods:
            pods = [PodSummary.from_manifest(m) for m in load_manifests(args.pods)]
    except (ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        return 2

    result = ReadinessEvaluator(StaticPodLookup(pods)).is_ready(snapshot)
    print("ready" if result.ready else result.reason)
    return 0 if result.ready else 1


def run_wait(args) -> int:
    tracer = None
    if args.enable_tracing:
        initialize_tracer(service_name=TRACE_SERVICE_NAME)
        tracer = get_tracer(TRACE_SERVICE_NAME)

    try:
        waiter = StatefulSetWaiter.from_config(
            kubeconfig_path=args.kubeconfig,
            poll_interval=args.interval,
            tracer=tracer,
        )
        waiter.wait_until_ready(args.name, namespace=args.namespace, timeout=args.timeout)
    except TimeoutError as e:
        logging.error(str(e))
        return 1
    except config.ConfigException as e:
        logging.error(f"Could not load Kubernetes config: {e}")
        return 2
    except ApiException as e:
        logging.error(
            f"Failed to read StatefulSet {args.namespace}/{args.name}: {e.status} {e.reason}"
        )
        return 2
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    args = parse_args(argv)
    if args.command == "check":
        return run_check(args)
    return run_wait(args)
