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
Readiness check for StatefulSets under a (possibly partitioned) rolling update.

Kubernetes releases before 1.11 reset status.updatedReplicas to 0 once a
rollout completes, even though the pods stay on the update revision. A
reported count of 0 is therefore recounted from the pods'
controller-revision-hash labels instead of being trusted.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from .constants import DEFAULT_PARTITION, DEFAULT_REPLICAS
from .pods import PodLookup
from .snapshot import PodSummary, UpdateStrategyKind, WorkloadSnapshot

logger = logging.getLogger(__name__)

DiagnosticsSink = Callable[[str], None]

POD_LOOKUP_FAILED_REASON = "pod lookup failed, will retry"


def null_sink(message: str) -> None:
    """A diagnostics sink that drops every message."""


@dataclass(frozen=True)
class ReadinessResult:
    """Verdict of one readiness check. The reason is informational only."""

    ready: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.ready


READY = ReadinessResult(ready=True)


def count_updated_pods(pods: list[PodSummary], update_revision: str) -> int:
    """Counts pods created from the given update revision."""
    return sum(
        1
        for pod in pods
        if pod.revision_label is not None and pod.revision_label == update_revision
    )


class ReadinessEvaluator:
    """
    Decides whether a StatefulSet has converged to its update revision.

    The evaluator keeps no state between calls; every call inspects only the
    snapshot it is given plus, at most, one pod lookup.
    """

    def __init__(
        self,
        pod_lookup: PodLookup,
        log: DiagnosticsSink | None = None,
        warn: DiagnosticsSink | None = None,
    ):
        self.pod_lookup = pod_lookup
        self.log = log if log is not None else logger.info
        # An injected log sink receives warnings too unless a warn sink is given
        if warn is None:
            warn = log if log is not None else logger.warning
        self.warn = warn

    def is_ready(self, snapshot: WorkloadSnapshot) -> ReadinessResult:
        # Nothing converges on its own under OnDelete or unknown strategies
        if snapshot.update_strategy != UpdateStrategyKind.ROLLING_UPDATE:
            return READY

        partition = (
            snapshot.partition
            if snapshot.partition is not None
            else DEFAULT_PARTITION
        )
        replicas = (
            snapshot.desired_replicas
            if snapshot.desired_replicas is not None
            else DEFAULT_REPLICAS
        )

        # Only ordinals at or above the partition get the update revision.
        # With 3 replicas and partition 2, exactly one pod is expected to update.
        expected_updated = replicas - partition
        if expected_updated < 0:
            self.warn(
                f"StatefulSet {snapshot.key} has partition {partition} greater than "
                f"{replicas} replicas; expecting 0 updated pods"
            )
            expected_updated = 0

        updated = snapshot.updated_replicas
        if updated == 0:
            try:
                pods = self.pod_lookup.list_pods(snapshot.namespace, snapshot)
            except Exception as e:
                # Any lookup failure is transient
                self.log(
                    f"Failed to fetch pods for StatefulSet {snapshot.key} (will retry): {e}"
                )
                return ReadinessResult(ready=False, reason=POD_LOOKUP_FAILED_REASON)
            updated = count_updated_pods(pods, snapshot.update_revision)

        if updated != expected_updated:
            reason = (
                f"StatefulSet is not ready: {snapshot.key}. {updated} out of "
                f"{expected_updated} expected pods have been scheduled"
            )
            self.log(reason)
            return ReadinessResult(ready=False, reason=reason)

        if snapshot.ready_replicas != replicas:
            reason = (
                f"StatefulSet is not ready: {snapshot.key}. {snapshot.ready_replicas} "
                f"out of {replicas} expected pods are ready"
            )
            self.log(reason)
            return ReadinessResult(ready=False, reason=reason)

        return READY

    def __call__(self, snapshot: WorkloadSnapshot) -> bool:
        return self.is_ready(snapshot).ready
