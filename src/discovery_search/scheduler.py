"""Clock collaborators for debounce and artificial-delay timers.

Components never call ``asyncio.sleep`` directly: they take a ``Scheduler``
so tests can substitute ``VirtualScheduler`` and move time by hand.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Protocol, runtime_checkable

# Loop iterations to run after each virtual tick so woken tasks can reach
# their next suspension point.
_DRAIN_ITERATIONS = 20


@runtime_checkable
class Scheduler(Protocol):
    """Interface for the clock used by the search pipeline."""

    def now(self) -> float:
        """Return the current time in seconds."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task for ``seconds``."""
        ...


class AsyncioScheduler:
    """Default scheduler backed by the running event loop's clock."""

    def now(self) -> float:
        return asyncio.get_running_loop().time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))


async def drain_event_loop(iterations: int = _DRAIN_ITERATIONS) -> None:
    """Yield to the event loop repeatedly so ready tasks can run."""
    for _ in range(iterations):
        await asyncio.sleep(0)


class VirtualScheduler:
    """Deterministic scheduler whose time only moves when ``advance`` is awaited.

    Sleepers are woken in deadline order (ties in registration order); after
    each wake-up the event loop is drained so follow-up work (network fakes,
    signal publication) completes before the next deadline fires.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._counter = itertools.count()
        self._sleepers: list[tuple[float, int, asyncio.Future[None]]] = []

    def now(self) -> float:
        return self._now

    async def sleep(self, seconds: float) -> None:
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        heapq.heappush(self._sleepers, (self._now + seconds, next(self._counter), future))
        await future

    @property
    def pending(self) -> int:
        """Number of sleepers that are still waiting."""
        return sum(1 for _, _, future in self._sleepers if not future.done())

    async def advance(self, seconds: float = 0.0) -> None:
        """Move virtual time forward by ``seconds``, waking due sleepers."""
        target = self._now + max(0.0, seconds)
        await drain_event_loop()
        while self._sleepers and self._sleepers[0][0] <= target:
            deadline, _, future = heapq.heappop(self._sleepers)
            self._now = deadline
            if not future.done():
                future.set_result(None)
            await drain_event_loop()
        self._now = target
        await drain_event_loop()


__all__ = [
    "AsyncioScheduler",
    "Scheduler",
    "VirtualScheduler",
    "drain_event_loop",
]
