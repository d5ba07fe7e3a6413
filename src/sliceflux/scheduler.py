"""Refresh scheduling: single-flight, deferred onto the host's task queue.

Any number of dispatches before the pending refresh runs share that one
refresh. The guard is cleared as the refresh starts, not when it finishes,
so a dispatch made by a subscriber or callback during the refresh schedules
the next one instead of being folded into the one already running.

A "post" is any callable that accepts a zero-argument function and runs it
later on the host's cooperative scheduler:

    create_store(scheduler=call_soon)          # asyncio (default)
    create_store(scheduler=app.call_later)     # Textual
    create_store(scheduler=ManualScheduler())  # drained by hand
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Callable

from sliceflux.errors import SchedulerError

Post = Callable[[Callable[[], None]], object]


def call_soon(fn: Callable[[], None]) -> asyncio.Handle:
    """Post fn to the running asyncio loop with zero delay."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        raise SchedulerError(
            "No running event loop to schedule a refresh on; "
            "pass scheduler= to create_store() outside asyncio"
        ) from None
    return loop.call_soon(fn)


class ManualScheduler:
    """FIFO of posted work, run when the host calls run_pending().

    Work posted while run_pending() is draining waits for the next call,
    mirroring how an event loop runs callbacks posted during a tick on the
    following tick.

    Usage:
        scheduler = ManualScheduler()
        store = create_store(scheduler=scheduler)
        store.dispatch(action, "counter")
        scheduler.run_pending()  # the batched refresh runs here
    """

    __slots__ = ("_queue",)

    def __init__(self) -> None:
        self._queue: deque[Callable[[], None]] = deque()

    def __call__(self, fn: Callable[[], None]) -> None:
        self._queue.append(fn)

    def __len__(self) -> int:
        return len(self._queue)

    def run_pending(self) -> int:
        """Run everything posted so far. Returns how many items ran."""
        batch = list(self._queue)
        self._queue.clear()
        for fn in batch:
            fn()
        return len(batch)

    def run_until_idle(self, limit: int = 100) -> int:
        """Keep draining until nothing new is posted. Returns total items run."""
        total = 0
        for _ in range(limit):
            ran = self.run_pending()
            if not ran:
                break
            total += ran
        return total


class RefreshScheduler:
    """Single-flight guard around a post function."""

    __slots__ = ("_post", "_scheduled")

    def __init__(self, post: Post | None = None) -> None:
        self._post: Post = post if post is not None else call_soon
        self._scheduled = False

    @property
    def scheduled(self) -> bool:
        return self._scheduled

    def request(self, fn: Callable[[], None]) -> bool:
        """Schedule fn unless a run is already pending. Returns True if posted."""
        if self._scheduled:
            return False
        self._scheduled = True

        def _run() -> None:
            self._scheduled = False
            fn()

        try:
            self._post(_run)
        except BaseException:
            self._scheduled = False
            raise
        return True
