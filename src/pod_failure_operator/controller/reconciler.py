"""Level-triggered reconciliation of a single pod."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import structlog

from pod_failure_operator.controller.sink import FailureSink, LogFailureSink
from pod_failure_operator.detection.classifier import classify_pod
from pod_failure_operator.detection.namespace_filter import is_system_namespace
from pod_failure_operator.models import PodObservation, ReconcileRequest, ReconcileResult

log = structlog.get_logger()


class PodFetcher(Protocol):
    """Read access to current pod state. Returns None when the pod does not exist."""

    async def get_pod(self, namespace: str, name: str) -> PodObservation | None: ...


class PodReconciler:
    """Fetch a pod, skip system namespaces, classify, and emit any failure found."""

    def __init__(self, pod_client: PodFetcher, sinks: Sequence[FailureSink] | None = None) -> None:
        self._pod_client = pod_client
        self._sinks: tuple[FailureSink, ...] = tuple(sinks) if sinks is not None else (LogFailureSink(),)

    async def reconcile(self, request: ReconcileRequest) -> ReconcileResult:
        """Reconcile one pod from its current state.

        A deleted pod, a pod in a system namespace, and a healthy pod are all
        successful no-ops. Fetch errors other than not-found propagate so the
        caller can retry. A successful pass never asks to be requeued; the next
        pass is driven by the next change to the pod.
        """
        pod = await self._pod_client.get_pod(request.namespace, request.name)
        if pod is None:
            return ReconcileResult()

        if is_system_namespace(pod.namespace):
            log.debug("skipped_system_namespace", namespace=pod.namespace, pod=pod.name)
            return ReconcileResult()

        failure = classify_pod(pod)
        if failure is None:
            return ReconcileResult()

        for sink in self._sinks:
            sink.emit(failure)

        return ReconcileResult()
