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

import logging
import time
from typing import Optional

import urllib3
from kubernetes import client
from kubernetes.client import ApiException

from .constants import DEFAULT_NAMESPACE, DEFAULT_POLL_INTERVAL, DEFAULT_WAIT_TIMEOUT
from .kube_config import load_api_client
from .pods import KubernetesPodLookup
from .readiness import ReadinessEvaluator, ReadinessResult
from .snapshot import WorkloadSnapshot
from .trace_manager import trace_span

logger = logging.getLogger(__name__)


class StatefulSetWaiter:
    """
    Polls a StatefulSet until its rolling update has converged.

    Each tick re-reads the StatefulSet and evaluates a fresh snapshot.
    """

    def __init__(
        self,
        apps_v1_api: client.AppsV1Api,
        evaluator: ReadinessEvaluator,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        tracer=None,
    ):
        self.apps_v1_api = apps_v1_api
        self.evaluator = evaluator
        self.poll_interval = poll_interval
        self.tracer = tracer

    @classmethod
    def from_config(
        cls,
        kubeconfig_path: Optional[str] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        tracer=None,
    ) -> "StatefulSetWaiter":
        """Builds a waiter wired to the cluster in the loaded kube config."""
        api_client = load_api_client(kubeconfig_path)
        pod_lookup = KubernetesPodLookup(client.CoreV1Api(api_client), tracer=tracer)
        return cls(
            client.AppsV1Api(api_client),
            ReadinessEvaluator(pod_lookup),
            poll_interval=poll_interval,
            tracer=tracer,
        )

    def snapshot(self, name: str, namespace: str = DEFAULT_NAMESPACE) -> WorkloadSnapshot:
        sts = self.apps_v1_api.read_namespaced_stateful_set(name=name, namespace=namespace)
        return WorkloadSnapshot.from_statefulset(sts)

    @trace_span("statefulset-readiness.wait_until_ready")
    def wait_until_ready(
        self,
        name: str,
        namespace: str = DEFAULT_NAMESPACE,
        timeout: float = DEFAULT_WAIT_TIMEOUT,
    ) -> ReadinessResult:
        """
        Blocks until the StatefulSet is ready and returns the final verdict.

        Raises TimeoutError once `timeout` seconds pass without a ready verdict,
        and re-raises ApiException when the StatefulSet does not exist.
        """
        logger.info(f"Waiting for StatefulSet {namespace}/{name} to become ready...")
        start_time = time.monotonic()
        while True:
            try:
                snapshot = self.snapshot(name, namespace)
            except ApiException as e:
                if e.status == 404:
                    logger.error(f"StatefulSet {namespace}/{name} not found.")
                    raise
                logger.warning(
                    f"Failed to read StatefulSet {namespace}/{name} (will retry): {e.status} {e.reason}"
                )
                result = ReadinessResult(
                    ready=False, reason=f"failed to read StatefulSet: {e.status} {e.reason}"
                )
            except urllib3.exceptions.HTTPError as e:
                logger.warning(
                    f"Failed to reach the API server for StatefulSet {namespace}/{name} (will retry): {e}"
                )
                result = ReadinessResult(
                    ready=False, reason=f"failed to read StatefulSet: {e}"
                )
            else:
                result = self.evaluator.is_ready(snapshot)
                if result.ready:
                    logger.info(f"StatefulSet {namespace}/{name} is ready.")
                    return result

            if time.monotonic() - start_time >= timeout:
                raise TimeoutError(
                    f"StatefulSet {namespace}/{name} did not become ready within "
                    f"{timeout} seconds: {result.reason}"
                )
            time.sleep(self.poll_interval)
