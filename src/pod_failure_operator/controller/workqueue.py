"""De-duplicating, rate-limited work queue for reconcile requests.

Follows the client-go workqueue contract: an item is queued at most once, and
an item that changes while a worker holds it is re-queued only after that
worker calls ``done``. That gives at most one in-flight reconcile per object.

All methods except ``get`` are synchronous and must be called on the event
loop thread. Other threads hand items over with ``loop.call_soon_threadsafe``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Hashable
from typing import Generic, TypeVar

T = TypeVar("T", bound=Hashable)

# Keeps 2**n within float range.
_MAX_EXPONENT = 32


class WorkQueue(Generic[T]):
    def __init__(self, base_delay: float = 0.005, max_delay: float = 300.0) -> None:
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._ready: asyncio.Queue[T] = asyncio.Queue()
        # Queued but not yet handed to a worker.
        self._dirty: set[T] = set()
        self._processing: set[T] = set()
        self._failures: dict[T, int] = {}
        self._delayed: set[asyncio.TimerHandle] = set()
        self._shutting_down = False

    def __len__(self) -> int:
        return self._ready.qsize()

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down

    def add(self, item: T) -> None:
        """Queue an item unless it is already waiting."""
        if self._shutting_down or item in self._dirty:
            return
        self._dirty.add(item)
        if item in self._processing:
            return
        self._ready.put_nowait(item)

    async def get(self) -> T:
        """Wait for the next item and mark it as being processed."""
        item = await self._ready.get()
        self._dirty.discard(item)
        self._processing.add(item)
        return item

    def done(self, item: T) -> None:
        """Release an item; re-queue it if it was added while being processed."""
        self._processing.discard(item)
        if item in self._dirty and not self._shutting_down:
            self._ready.put_nowait(item)

    def add_after(self, item: T, delay: float) -> None:
        """Queue an item once ``delay`` seconds have passed."""
        if self._shutting_down:
            return
        if delay <= 0:
            self.add(item)
            return
        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle

        def _fire() -> None:
            self._delayed.discard(handle)
            self.add(item)

        handle = loop.call_later(delay, _fire)
        self._delayed.add(handle)

    def add_rate_limited(self, item: T) -> float:
        """Re-queue an item with per-item exponential backoff.

        Returns the delay applied.
        """
        failures = self._failures.get(item, 0)
        self._failures[item] = failures + 1
        delay = min(self._base_delay * (2 ** min(failures, _MAX_EXPONENT)), self._max_delay)
        self.add_after(item, delay)
        return delay

    def forget(self, item: T) -> None:
        """Reset the backoff for an item after it was processed successfully."""
        self._failures.pop(item, None)

    def num_requeues(self, item: T) -> int:
        return self._failures.get(item, 0)

    def shutdown(self) -> None:
        """Stop accepting items and drop pending delayed adds."""
        self._shutting_down = True
        for handle in self._delayed:
            handle.cancel()
        self._delayed.clear()
