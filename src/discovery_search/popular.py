"""Fetch the popular/trending list shown while no search is active."""

from __future__ import annotations

import asyncio
import logging

from discovery_search.models import DEFAULT_DISCOVERY_PARAMS, DiscoverySort, Project
from discovery_search.scheduler import AsyncioScheduler, Scheduler
from discovery_search.services.interfaces import DiscoveryApiService
from discovery_search.signals import Signal

logger = logging.getLogger(__name__)

POPULAR_PARAMS = DEFAULT_DISCOVERY_PARAMS.with_sort(DiscoverySort.POPULAR)


class PopularFetcher:
    """Latest-wins fetcher for the popular project list.

    Failures are demoted to an empty list; ``projects`` never sees an error.
    """

    def __init__(
        self,
        api: DiscoveryApiService,
        *,
        delay_interval: float = 0.0,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._api = api
        self._delay_interval = max(0.0, delay_interval)
        self._scheduler = scheduler or AsyncioScheduler()
        self._task: asyncio.Task[None] | None = None
        self.projects: Signal[tuple[Project, ...]] = Signal("popular_projects")

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self) -> None:
        """Start a fetch, cancelling one that is still running."""
        self.cancel()
        self._task = asyncio.create_task(self._fetch())
        self._task.add_done_callback(self._on_task_done)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _fetch(self) -> None:
        try:
            envelope = await self._api.fetch_discovery(POPULAR_PARAMS)
            projects = envelope.projects
        except Exception:
            logger.warning("Popular projects fetch failed, showing none", exc_info=True)
            projects = ()
        if self._delay_interval > 0:
            await self._scheduler.sleep(self._delay_interval)
        self.projects.send(tuple(projects))

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from the fetch task."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in popular fetch: %s", exc, exc_info=exc)


__all__ = ["POPULAR_PARAMS", "PopularFetcher"]
