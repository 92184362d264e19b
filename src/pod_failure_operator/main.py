"""Operator entry point: logging setup, configuration, and the reconcile loop."""

from __future__ import annotations

import asyncio
import signal
import sys

import structlog

from pod_failure_operator.clients.k8s_pods import K8sPodClient
from pod_failure_operator.config import OperatorConfig, load_operator_config
from pod_failure_operator.controller.manager import PodManager
from pod_failure_operator.controller.reconciler import PodReconciler

log = structlog.get_logger()


def configure_logging(log_format: str = "auto") -> None:
    """Configure structlog for JSON or console output to stderr.

    ``auto`` renders for humans when stderr is a terminal and JSON otherwise.
    """
    console = sys.stderr.isatty() if log_format == "auto" else log_format == "console"
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if console else structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def build_manager(config: OperatorConfig) -> PodManager:
    """Wire the pod client, reconciler, and manager together."""
    pod_client = K8sPodClient(config.kubeconfig_context)
    reconciler = PodReconciler(pod_client)
    return PodManager(config, pod_client, reconciler)


async def run(config: OperatorConfig) -> None:
    """Run the operator until SIGINT or SIGTERM."""
    manager = build_manager(config)
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, manager.stop)
    await manager.run()


def main() -> None:
    config = load_operator_config()
    configure_logging(config.log_format)
    log.info(
        "operator_starting",
        kubeconfig_context=config.kubeconfig_context or "default",
        namespace=config.watch_namespace or "*",
    )
    asyncio.run(run(config))


if __name__ == "__main__":
    main()
