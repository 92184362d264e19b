"""Mapping from Kubernetes reason strings to the closed FailureType taxonomy."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pod_failure_operator.models import FailureType

# Waiting reasons that mean the container cannot make progress on its own.
# ContainerCreating, PodInitializing and other transient waiting reasons are
# not failures.
WAITING_FAILURE_REASONS = frozenset(
    {
        "CrashLoopBackOff",
        "ImagePullBackOff",
        "ErrImagePull",
        "CreateContainerConfigError",
        "InvalidImageName",
        "RunContainerError",
    }
)

# Terminated reasons that count as a failure. "Completed" is a normal exit.
TERMINATED_FAILURE_REASONS = frozenset({"OOMKilled", "Error"})

# Several platform reasons collapse into one category; the raw message is kept
# on the PodFailure for diagnostics.
REASON_TO_FAILURE_TYPE: Mapping[str, FailureType] = MappingProxyType(
    {
        "CrashLoopBackOff": FailureType.CRASH_LOOP_BACK_OFF,
        "ImagePullBackOff": FailureType.IMAGE_PULL_BACK_OFF,
        "ErrImagePull": FailureType.IMAGE_PULL_BACK_OFF,
        "InvalidImageName": FailureType.IMAGE_PULL_BACK_OFF,
        "OOMKilled": FailureType.OOM_KILLED,
        "CreateContainerConfigError": FailureType.CREATE_CONTAINER_CONFIG_ERROR,
        "RunContainerError": FailureType.RUN_CONTAINER_ERROR,
        "Evicted": FailureType.EVICTED,
        "Error": FailureType.ERROR,
    }
)


def failure_type_for_reason(reason: str | None) -> FailureType:
    """Map a container or pod reason string to its FailureType.

    Total over all inputs: anything not in the table, including None, is
    FailureType.UNKNOWN.
    """
    if reason is None:
        return FailureType.UNKNOWN
    return REASON_TO_FAILURE_TYPE.get(reason, FailureType.UNKNOWN)
