"""Pydantic v2 models for pod observations, detected failures, and reconcile requests."""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FailureType(StrEnum):
    """Closed set of failure categories a pod can be classified into."""

    CRASH_LOOP_BACK_OFF = "CrashLoopBackOff"
    IMAGE_PULL_BACK_OFF = "ImagePullBackOff"
    OOM_KILLED = "OOMKilled"
    CREATE_CONTAINER_CONFIG_ERROR = "CreateContainerConfigError"
    RUN_CONTAINER_ERROR = "RunContainerError"
    EVICTED = "Evicted"
    ERROR = "Error"
    UNKNOWN = "Unknown"


# --- Observations ---


class ContainerStatusObservation(BaseModel):
    """Snapshot of a single container's lifecycle state.

    A container is in exactly one of the three states. ``reason`` and ``message``
    describe the waiting or terminated state and are always None while running.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    restart_count: int = 0
    state: Literal["waiting", "running", "terminated"] = "waiting"
    reason: str | None = None
    message: str | None = None


class PodObservation(BaseModel):
    """Current state of a pod as reported by the API server."""

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str
    phase: str | None = None
    reason: str | None = None
    message: str | None = None
    # Ordered as reported by the platform.
    container_statuses: tuple[ContainerStatusObservation, ...] = Field(default_factory=tuple)


# --- Detection output ---


class PodFailure(BaseModel):
    """A single detected failure, handed to the output sinks."""

    model_config = ConfigDict(frozen=True)

    pod_name: str
    namespace: str
    failure_type: FailureType
    # None for pod-scoped failures (eviction, failed phase).
    container_name: str | None = None
    message: str = ""
    restart_count: int = 0


# --- Reconciliation ---


class ReconcileRequest(BaseModel):
    """Identity of the object to reconcile."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class ReconcileResult(BaseModel):
    """Outcome of a successful reconcile pass."""

    model_config = ConfigDict(frozen=True)

    requeue: bool = False
