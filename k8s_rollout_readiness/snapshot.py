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
Point-in-time views of a StatefulSet and its pods.

Snapshots can be built from `kubernetes.client` models or from plain manifest
dicts in API (camelCase) form.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

import kubernetes

from .constants import (
    CONTROLLER_REVISION_HASH_LABEL,
    DEFAULT_NAMESPACE,
    ON_DELETE_STRATEGY,
    ROLLING_UPDATE_STRATEGY,
    STATEFULSET_KIND,
)

StrDict = dict[str, Any]


class UpdateStrategyKind(Enum):
    ROLLING_UPDATE = ROLLING_UPDATE_STRATEGY
    ON_DELETE = ON_DELETE_STRATEGY
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str | None) -> "UpdateStrategyKind":
        """Maps a spec.updateStrategy.type value onto a strategy kind.

        An unset type is RollingUpdate, which is what the API server defaults
        it to for apps/v1 StatefulSets.
        """
        if value is None or value == ROLLING_UPDATE_STRATEGY:
            return cls.ROLLING_UPDATE
        if value == ON_DELETE_STRATEGY:
            return cls.ON_DELETE
        return cls.OTHER


@dataclass(frozen=True)
class WorkloadSnapshot:
    """Desired and observed state of a StatefulSet at one poll tick."""

    namespace: str
    name: str
    update_strategy: UpdateStrategyKind = UpdateStrategyKind.ROLLING_UPDATE
    partition: int | None = None
    desired_replicas: int | None = None
    update_revision: str = ""
    updated_replicas: int = 0
    ready_replicas: int = 0
    uid: str | None = None
    selector: str | None = None

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def from_statefulset(
        cls, sts: kubernetes.client.V1StatefulSet
    ) -> "WorkloadSnapshot":
        """Builds a snapshot from a V1StatefulSet as returned by AppsV1Api."""
        metadata = sts.metadata
        spec = sts.spec
        status = sts.status

        strategy = spec.update_strategy if spec else None
        partition = None
        # rollingUpdate may be nil even when the strategy type is RollingUpdate
        if strategy and strategy.rolling_update:
            partition = strategy.rolling_update.partition

        selector = None
        if spec and spec.selector:
            expressions = [
                {"key": e.key, "operator": e.operator, "values": e.values}
                for e in spec.selector.match_expressions or []
            ]
            selector = render_label_selector(
                spec.selector.match_labels, expressions
            )

        return cls(
            namespace=metadata.namespace,
            name=metadata.name,
            uid=metadata.uid,
            update_strategy=UpdateStrategyKind.parse(
                strategy.type if strategy else None
            ),
            partition=partition,
            desired_replicas=spec.replicas if spec else None,
            update_revision=(status.update_revision if status else None) or "",
            updated_replicas=(status.updated_replicas if status else None) or 0,
            ready_replicas=(status.ready_replicas if status else None) or 0,
            selector=selector,
        )

    @classmethod
    def from_manifest(cls, manifest: StrDict) -> "WorkloadSnapshot":
        """Builds a snapshot from a StatefulSet manifest dict."""
        kind = manifest.get("kind", STATEFULSET_KIND)
        if kind != STATEFULSET_KIND:
            raise ValueError(f"Expected a {STATEFULSET_KIND} manifest, got '{kind}'.")

        metadata = manifest.get("metadata", {})
        spec = manifest.get("spec") or {}
        status = manifest.get("status") or {}
        strategy = spec.get("updateStrategy") or {}
        rolling_update = strategy.get("rollingUpdate") or {}

        selector = None
        if spec.get("selector"):
            selector = render_label_selector(
                spec["selector"].get("matchLabels"),
                spec["selector"].get("matchExpressions"),
            )

        return cls(
            namespace=metadata.get("namespace", DEFAULT_NAMESPACE),
            name=metadata.get("name", ""),
            uid=metadata.get("uid"),
            update_strategy=UpdateStrategyKind.parse(strategy.get("type")),
            partition=rolling_update.get("partition"),
            desired_replicas=spec.get("replicas"),
            update_revision=status.get("updateRevision") or "",
            updated_replicas=status.get("updatedReplicas") or 0,
            ready_replicas=status.get("readyReplicas") or 0,
            selector=selector,
        )


@dataclass(frozen=True)
class PodSummary:
    """The parts of a pod the readiness check looks at."""

    name: str
    revision_label: str | None = None

    @classmethod
    def from_pod(cls, pod: kubernetes.client.V1Pod) -> "PodSummary":
        labels = pod.metadata.labels or {}
        return cls(
            name=pod.metadata.name,
            revision_label=labels.get(CONTROLLER_REVISION_HASH_LABEL),
        )

    @classmethod
    def from_manifest(cls, manifest: StrDict) -> "PodSummary":
        metadata = manifest.get("metadata", {})
        labels = metadata.get("labels") or {}
        return cls(
            name=metadata.get("name", ""),
            revision_label=labels.get(CONTROLLER_REVISION_HASH_LABEL),
        )


def render_label_selector(
    match_labels: dict[str, str] | None,
    match_expressions: Iterable[StrDict] | None = None,
) -> str:
    """Renders a LabelSelector into the string form list calls accept."""
    requirements = [f"{k}={v}" for k, v in sorted((match_labels or {}).items())]

    for expression in match_expressions or []:
        key = expression["key"]
        operator = expression["operator"]
        values = ",".join(sorted(expression.get("values") or []))
        if operator == "In":
            requirements.append(f"{key} in ({values})")
        elif operator == "NotIn":
            requirements.append(f"{key} notin ({values})")
        elif operator == "Exists":
            requirements.append(key)
        elif operator == "DoesNotExist":
            requirements.append(f"!{key}")
        else:
            raise ValueError(
                f"Unsupported label selector operator '{operator}' for key '{key}'."
            )

    return ",".join(requirements)
