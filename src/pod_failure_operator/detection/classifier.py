"""Failure classification for a single pod observation."""

from __future__ import annotations

from pod_failure_operator.detection.taxonomy import (
    TERMINATED_FAILURE_REASONS,
    WAITING_FAILURE_REASONS,
    failure_type_for_reason,
)
from pod_failure_operator.models import (
    ContainerStatusObservation,
    FailureType,
    PodFailure,
    PodObservation,
)

POD_PHASE_FAILED = "Failed"
POD_REASON_EVICTED = "Evicted"


def classify_pod(pod: PodObservation) -> PodFailure | None:
    """Return the first failure condition found on the pod, or None if it is healthy.

    Checks run in a fixed order and the first match wins:

    1. Container statuses, in the order the platform reports them. A container
       waiting with a known failure reason, or terminated with OOMKilled/Error,
       yields a container-scoped failure.
    2. Pod reason ``Evicted`` yields a pod-scoped Evicted failure.
    3. Pod phase ``Failed`` yields a pod-scoped Unknown failure.

    When several containers fail at once only the first one is reported.
    Pending pods that are still starting, running pods, and succeeded pods all
    return None.
    """
    for status in pod.container_statuses:
        if _is_container_failure(status):
            return PodFailure(
                pod_name=pod.name,
                namespace=pod.namespace,
                failure_type=failure_type_for_reason(status.reason),
                container_name=status.name,
                message=status.message or "",
                restart_count=status.restart_count,
            )

    if pod.reason == POD_REASON_EVICTED:
        return PodFailure(
            pod_name=pod.name,
            namespace=pod.namespace,
            failure_type=FailureType.EVICTED,
            message=pod.message or "",
        )

    if pod.phase == POD_PHASE_FAILED:
        return PodFailure(
            pod_name=pod.name,
            namespace=pod.namespace,
            failure_type=FailureType.UNKNOWN,
            message=pod.message or "",
        )

    return None


def _is_container_failure(status: ContainerStatusObservation) -> bool:
    if status.state == "waiting":
        return status.reason in WAITING_FAILURE_REASONS
    if status.state == "terminated":
        return status.reason in TERMINATED_FAILURE_REASONS
    return False
