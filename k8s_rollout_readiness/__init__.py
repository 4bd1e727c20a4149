from .pods import KubernetesPodLookup, PodLookup, PodLookupError, StaticPodLookup
from .readiness import ReadinessEvaluator, ReadinessResult, null_sink
from .snapshot import PodSummary, UpdateStrategyKind, WorkloadSnapshot
from .waiter import StatefulSetWaiter

__all__ = [
    "KubernetesPodLookup",
    "PodLookup",
    "PodLookupError",
    "PodSummary",
    "ReadinessEvaluator",
    "ReadinessResult",
    "StatefulSetWaiter",
    "StaticPodLookup",
    "UpdateStrategyKind",
    "WorkloadSnapshot",
    "null_sink",
]
