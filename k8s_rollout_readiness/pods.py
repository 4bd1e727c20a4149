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
"""
Pod lookups used to recount updated replicas from pod labels.
"""

import logging
from typing import Iterable, Protocol

import kubernetes
import urllib3
from kubernetes.client import ApiException

from .snapshot import PodSummary, WorkloadSnapshot
from .trace_manager import trace_span

logger = logging.getLogger(__name__)


class PodLookupError(RuntimeError):
    """Raised when the pods of a workload could not be listed."""

    def __init__(self, namespace: str, name: str, reason: str):
        super().__init__(f"Failed to list pods for {namespace}/{name}: {reason}")
        self.namespace = namespace
        self.name = name
        self.reason = reason


class PodLookup(Protocol):
    def list_pods(self, namespace: str, owner: WorkloadSnapshot) -> list[PodSummary]:
        ...


class KubernetesPodLookup:
    """
    Lists the pods selected by a StatefulSet through the CoreV1 API.

    Pods are listed with the owner's label selector. When the owner carries a
    uid, pods not owned by it are dropped.
    """

    def __init__(self, core_v1_api: kubernetes.client.CoreV1Api, tracer=None):
        self.core_v1_api = core_v1_api
        self.tracer = tracer

    @trace_span("statefulset-readiness.list_pods")
    def list_pods(self, namespace: str, owner: WorkloadSnapshot) -> list[PodSummary]:
        kwargs = {}
        if owner.selector:
            kwargs["label_selector"] = owner.selector

        try:
            pod_list = self.core_v1_api.list_namespaced_pod(namespace, **kwargs)
        except ApiException as e:
            raise PodLookupError(namespace, owner.name, f"{e.status} {e.reason}") from e
        except urllib3.exceptions.HTTPError as e:
            raise PodLookupError(namespace, owner.name, str(e)) from e

        pods = [
            PodSummary.from_pod(pod)
            for pod in pod_list.items or []
            if self._is_owned(pod, owner)
        ]
        logger.debug(f"Found {len(pods)} pods for StatefulSet {owner.key}")
        return pods

    @staticmethod
    def _is_owned(pod: kubernetes.client.V1Pod, owner: WorkloadSnapshot) -> bool:
        if not owner.uid:
            return True
        for owner_ref in pod.metadata.owner_references or []:
            if owner_ref.uid == owner.uid:
                return True
        return False


class StaticPodLookup:
    """Returns a fixed set of pods; used for offline checks."""

    def __init__(self, pods: Iterable[PodSummary]):
        self.pods = list(pods)

    def list_pods(self, namespace: str, owner: WorkloadSnapshot) -> list[PodSummary]:
        return list(self.pods)
