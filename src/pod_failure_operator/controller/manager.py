"""Watch-driven reconcile loop: pod watch thread, work queue, and asyncio workers."""

from __future__ import annotations

import asyncio
import threading
from functools import partial

import structlog
from kubernetes.client.exceptions import ApiException

from pod_failure_operator.clients.k8s_pods import K8sPodClient
from pod_failure_operator.config import OperatorConfig
from pod_failure_operator.controller.reconciler import PodReconciler
from pod_failure_operator.controller.workqueue import WorkQueue
from pod_failure_operator.models import ReconcileRequest

log = structlog.get_logger()

HTTP_GONE = 410

# Upper bound on waiting for the watch thread at shutdown. A watch blocked in a
# quiet stream only notices the stop event when the server sends something.
WATCH_JOIN_TIMEOUT_SECONDS = 5.0


class PodManager:
    """Deliver pod change notifications to the reconciler.

    A background thread lists all pods once, then watches for changes and
    enqueues the identity of every pod that changed. ``config.workers`` asyncio
    tasks drain the queue. The queue guarantees a pod is never reconciled by two
    workers at once. A reconcile that raises is retried with exponential backoff.
    """

    def __init__(
        self,
        config: OperatorConfig,
        pod_client: K8sPodClient,
        reconciler: PodReconciler,
        queue: WorkQueue[ReconcileRequest] | None = None,
    ) -> None:
        self._config = config
        self._pod_client = pod_client
        self._reconciler = reconciler
        if queue is None:
            queue = WorkQueue(base_delay=config.requeue_base_delay, max_delay=config.requeue_max_delay)
        self._queue = queue
        self._stop_watch = threading.Event()
        self._stopped = asyncio.Event()
        self._workers: list[asyncio.Task[None]] = []
        self._watch_thread: threading.Thread | None = None

    @property
    def queue(self) -> WorkQueue[ReconcileRequest]:
        return self._queue

    async def run(self) -> None:
        """Start the watch and the workers, and block until ``stop`` is called."""
        loop = asyncio.get_running_loop()
        self._workers = [
            asyncio.create_task(self._worker(), name=f"pod-worker-{i}") for i in range(self._config.workers)
        ]
        # Daemon thread: a quiet watch blocks for up to watch_timeout_seconds.
        self._watch_thread = threading.Thread(target=self._watch_loop, args=(loop,), name="pod-watch", daemon=True)
        self._watch_thread.start()
        log.info(
            "manager_started",
            workers=self._config.workers,
            namespace=self._config.watch_namespace or "*",
        )
        try:
            await self._stopped.wait()
        finally:
            await self._shutdown()
            log.info("manager_stopped")

    def stop(self) -> None:
        """Ask ``run`` to return. Safe to call more than once."""
        self._stop_watch.set()
        self._stopped.set()

    async def _shutdown(self) -> None:
        self._stop_watch.set()
        self._queue.shutdown()
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        if self._watch_thread is not None:
            await asyncio.to_thread(self._watch_thread.join, WATCH_JOIN_TIMEOUT_SECONDS)
            if self._watch_thread.is_alive():
                log.warning("watch_thread_still_running", timeout_seconds=WATCH_JOIN_TIMEOUT_SECONDS)

    async def _worker(self) -> None:
        while True:
            request = await self._queue.get()
            await self._process(request)

    async def _process(self, request: ReconcileRequest) -> None:
        try:
            with structlog.contextvars.bound_contextvars(namespace=request.namespace, pod=request.name):
                result = await self._reconciler.reconcile(request)
        except Exception as e:
            delay = self._queue.add_rate_limited(request)
            log.error(
                "reconcile_failed",
                namespace=request.namespace,
                pod=request.name,
                error=str(e),
                requeues=self._queue.num_requeues(request),
                retry_in_seconds=delay,
            )
        else:
            if result.requeue:
                self._queue.add_rate_limited(request)
            else:
                self._queue.forget(request)
        finally:
            self._queue.done(request)

    def _enqueue_threadsafe(self, loop: asyncio.AbstractEventLoop, request: ReconcileRequest) -> None:
        if loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(self._queue.add, request)
        except RuntimeError:
            # Loop closed after the check above; nothing left to deliver to.
            return

    def _watch_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        namespace = self._config.watch_namespace
        on_change = partial(self._enqueue_threadsafe, loop)
        resource_version: str | None = None

        while not self._stop_watch.is_set():
            try:
                if resource_version is None:
                    requests, resource_version = self._pod_client.list_pods(namespace)
                    for request in requests:
                        on_change(request)
                    log.info("pods_listed", count=len(requests), resource_version=resource_version)
                resource_version = self._pod_client.watch_pods(
                    on_change,
                    self._stop_watch,
                    namespace=namespace,
                    resource_version=resource_version,
                    timeout_seconds=self._config.watch_timeout_seconds,
                )
            except ApiException as e:
                if e.status == HTTP_GONE:
                    log.info("watch_expired", resource_version=resource_version)
                    resource_version = None
                    continue
                log.error("watch_failed", status=e.status, error=str(e))
                self._stop_watch.wait(self._config.watch_retry_seconds)
            except Exception as e:
                log.error("watch_failed", error=str(e))
                self._stop_watch.wait(self._config.watch_retry_seconds)
