"""Kubernetes Core API wrapper for pods: read, list, watch, and state conversion."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from typing import Any

import structlog
from kubernetes import client as k8s_client
from kubernetes import watch
from kubernetes.client.exceptions import ApiException

from pod_failure_operator.clients import load_k8s_api_client
from pod_failure_operator.models import ContainerStatusObservation, PodObservation, ReconcileRequest

log = structlog.get_logger()

HTTP_NOT_FOUND = 404
# Watch events that change a pod's observable state. BOOKMARK only advances the resource version.
_CHANGE_EVENTS = {"ADDED", "MODIFIED", "DELETED"}


class K8sPodClient:
    """Wrapper around the Kubernetes Core V1 API, scoped to pods."""

    def __init__(self, kubeconfig_context: str | None = None) -> None:
        self._kubeconfig_context = kubeconfig_context
        self._api: k8s_client.CoreV1Api | None = None
        self._lock = threading.Lock()

    def _get_api(self) -> k8s_client.CoreV1Api:
        with self._lock:
            if self._api is None:
                api_client = load_k8s_api_client(self._kubeconfig_context)
                self._api = k8s_client.CoreV1Api(api_client)
            return self._api

    async def get_pod(self, namespace: str, name: str) -> PodObservation | None:
        """Read the current state of a single pod.

        Returns None when the pod does not exist. Any other API error is logged and
        re-raised so the caller can retry.
        """
        api = self._get_api()
        try:
            pod = await asyncio.to_thread(api.read_namespaced_pod, name, namespace)
        except ApiException as e:
            if e.status == HTTP_NOT_FOUND:
                log.debug("pod_not_found", namespace=namespace, pod=name)
                return None
            log.error("failed_to_read_pod", namespace=namespace, pod=name, status=e.status, reason=e.reason)
            raise
        except Exception:
            log.error("failed_to_read_pod", namespace=namespace, pod=name)
            raise
        return observation_from_pod(pod)

    def list_pods(self, namespace: str | None = None) -> tuple[list[ReconcileRequest], str | None]:
        """List pod identities for a full resync.

        Blocking; meant to run on the watch thread.

        Returns the identities and the list's resource version, from which a watch
        can resume without missing changes.
        """
        api = self._get_api()
        try:
            if namespace:
                pod_list = api.list_namespaced_pod(namespace)
            else:
                pod_list = api.list_pod_for_all_namespaces()
        except Exception:
            log.error("failed_to_list_pods", namespace=namespace)
            raise

        requests = [
            ReconcileRequest(namespace=pod.metadata.namespace, name=pod.metadata.name) for pod in pod_list.items
        ]
        resource_version = pod_list.metadata.resource_version if pod_list.metadata else None
        return requests, resource_version

    def watch_pods(
        self,
        on_change: Callable[[ReconcileRequest], None],
        stop: threading.Event,
        namespace: str | None = None,
        resource_version: str | None = None,
        timeout_seconds: int = 300,
    ) -> str | None:
        """Stream pod changes until the server-side timeout expires or ``stop`` is set.

        Blocking; meant to run on the watch thread. ``on_change`` receives the
        identity of every added, modified, or deleted pod.

        Returns the last resource version seen, for resuming the next watch.

        Raises:
            ApiException: status 410 when ``resource_version`` is too old and the
                caller must list again.
        """
        api = self._get_api()
        kwargs: dict[str, Any] = {"timeout_seconds": timeout_seconds, "allow_watch_bookmarks": True}
        if resource_version:
            kwargs["resource_version"] = resource_version

        w = watch.Watch()
        if namespace:
            stream = w.stream(api.list_namespaced_pod, namespace, **kwargs)
        else:
            stream = w.stream(api.list_pod_for_all_namespaces, **kwargs)

        for event in stream:
            if event["type"] in _CHANGE_EVENTS:
                pod = event["object"]
                on_change(ReconcileRequest(namespace=pod.metadata.namespace, name=pod.metadata.name))
            if stop.is_set():
                w.stop()
                break
        return w.resource_version or resource_version


def observation_from_pod(pod: Any) -> PodObservation:
    """Convert a V1Pod from the SDK into a PodObservation."""
    status = pod.status
    container_statuses = status.container_statuses if status is not None else None
    return PodObservation(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace,
        phase=status.phase if status is not None else None,
        reason=status.reason if status is not None else None,
        message=status.message if status is not None else None,
        container_statuses=tuple(_container_observation(cs) for cs in container_statuses or []),
    )


def _container_observation(cs: Any) -> ContainerStatusObservation:
    state = cs.state
    restart_count = cs.restart_count or 0
    # Only one of waiting, running, or terminated is set at a time.
    if state is not None and state.waiting is not None:
        return ContainerStatusObservation(
            name=cs.name,
            restart_count=restart_count,
            state="waiting",
            reason=state.waiting.reason,
            message=state.waiting.message,
        )
    if state is not None and state.terminated is not None:
        return ContainerStatusObservation(
            name=cs.name,
            restart_count=restart_count,
            state="terminated",
            reason=state.terminated.reason,
            message=state.terminated.message,
        )
    if state is not None and state.running is not None:
        return ContainerStatusObservation(name=cs.name, restart_count=restart_count, state="running")
    # The API treats a container with no state as waiting.
    return ContainerStatusObservation(name=cs.name, restart_count=restart_count, state="waiting")
