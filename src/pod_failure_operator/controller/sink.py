"""Output sinks that receive detected pod failures."""

from __future__ import annotations

from typing import Protocol

import structlog

from pod_failure_operator.models import PodFailure

log = structlog.get_logger()


class FailureSink(Protocol):
    """Consumer of detected failures.

    Downstream pipeline stages (context aggregation, diagnosis, remediation)
    attach here. A PodFailure carries the pod identity, so it is the only input.
    """

    def emit(self, failure: PodFailure) -> None: ...


class LogFailureSink:
    """Write each failure as one structured log record."""

    def emit(self, failure: PodFailure) -> None:
        log.warning(
            "pod_failure_detected",
            pod=failure.pod_name,
            namespace=failure.namespace,
            failure_type=failure.failure_type.value,
            container=failure.container_name,
            message=failure.message,
            restart_count=failure.restart_count,
        )
