"""Client-specific test fixtures: SDK pod objects and API errors."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from kubernetes import client as k8s_client
from kubernetes.client.exceptions import ApiException


def _make_container_status(
    name: str = "app",
    restart_count: int = 0,
    waiting: tuple[str | None, str | None] | None = None,
    terminated: tuple[str | None, str | None] | None = None,
    running: bool = False,
) -> k8s_client.V1ContainerStatus:
    state = None
    if waiting is not None:
        state = k8s_client.V1ContainerState(
            waiting=k8s_client.V1ContainerStateWaiting(reason=waiting[0], message=waiting[1])
        )
    elif terminated is not None:
        state = k8s_client.V1ContainerState(
            terminated=k8s_client.V1ContainerStateTerminated(
                exit_code=1, reason=terminated[0], message=terminated[1]
            )
        )
    elif running:
        state = k8s_client.V1ContainerState(running=k8s_client.V1ContainerStateRunning())
    return k8s_client.V1ContainerStatus(
        name=name,
        image="registry.example.com/app:1.0",
        image_id="",
        ready=running,
        restart_count=restart_count,
        state=state,
    )


def _make_pod(
    name: str = "web-7d9f8",
    namespace: str = "default",
    phase: str | None = "Running",
    reason: str | None = None,
    message: str | None = None,
    container_statuses: list[k8s_client.V1ContainerStatus] | None = None,
) -> k8s_client.V1Pod:
    return k8s_client.V1Pod(
        metadata=k8s_client.V1ObjectMeta(name=name, namespace=namespace),
        status=k8s_client.V1PodStatus(
            phase=phase,
            reason=reason,
            message=message,
            container_statuses=container_statuses,
        ),
    )


@pytest.fixture
def make_container_status() -> Callable[..., k8s_client.V1ContainerStatus]:
    """Factory for V1ContainerStatus objects in a single lifecycle state."""
    return _make_container_status


@pytest.fixture
def make_v1_pod() -> Callable[..., k8s_client.V1Pod]:
    """Factory for V1Pod objects."""
    return _make_pod


@pytest.fixture
def not_found_error() -> ApiException:
    return ApiException(status=404, reason="Not Found")


@pytest.fixture
def unavailable_error() -> ApiException:
    # 503 is the usual transient error while the control plane is unreachable.
    return ApiException(status=503, reason="Service Unavailable")
