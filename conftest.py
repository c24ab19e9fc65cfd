"""Shared test fixtures for discovery search tests."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

import pytest

from discovery_search.config import SearchConfig
from discovery_search.models import (
    DiscoveryEnvelope,
    DiscoveryParams,
    DiscoverySort,
    Project,
)
from discovery_search.scheduler import VirtualScheduler
from discovery_search.services.interfaces import AppServices

# ── Fakes ────────────────────────────────────────────────────────────────────


class FakeDiscoveryService:
    """In-memory discovery endpoint.

    Popular requests (``sort=POPULAR`` without a query) answer with
    ``popular``; searches answer from ``searches`` keyed by query text;
    continuation requests answer from ``pages`` keyed by URL. Unknown keys
    answer with an empty, exhausted envelope. Exception values are raised.

    With ``hold=True`` every call parks until ``release()`` is called, so tests
    can control the order in which responses arrive.
    """

    def __init__(
        self,
        *,
        popular: DiscoveryEnvelope | BaseException | None = None,
        searches: dict[str, DiscoveryEnvelope | BaseException] | None = None,
        pages: dict[str, DiscoveryEnvelope | BaseException] | None = None,
        hold: bool = False,
    ) -> None:
        self.popular = popular if popular is not None else DiscoveryEnvelope()
        self.searches = dict(searches or {})
        self.pages = dict(pages or {})
        self.hold = hold
        self.discovery_calls: list[DiscoveryParams] = []
        self.page_calls: list[str] = []
        self.held: list[asyncio.Future[None]] = []

    @property
    def search_calls(self) -> list[DiscoveryParams]:
        return [p for p in self.discovery_calls if p.query]

    @property
    def popular_calls(self) -> list[DiscoveryParams]:
        return [p for p in self.discovery_calls if not p.query]

    async def fetch_discovery(self, params: DiscoveryParams) -> DiscoveryEnvelope:
        self.discovery_calls.append(params)
        if not params.query and params.sort is DiscoverySort.POPULAR:
            result = self.popular
        else:
            result = self.searches.get(params.query or "", DiscoveryEnvelope())
        return await self._respond(result)

    async def fetch_discovery_page(self, url: str) -> DiscoveryEnvelope:
        self.page_calls.append(url)
        return await self._respond(self.pages.get(url, DiscoveryEnvelope()))

    def release(self, index: int = 0) -> None:
        future = self.held[index]
        if not future.done():
            future.set_result(None)

    async def _respond(self, result: DiscoveryEnvelope | BaseException) -> DiscoveryEnvelope:
        if self.hold:
            future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
            self.held.append(future)
            await future
        if isinstance(result, BaseException):
            raise result
        return result


class RecordingAnalytics:
    """Analytics sink that records every call."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def track_search_view(self) -> None:
        self.events.append(("search_view", {}))

    def track_search_results(self, *, query: str, page: int, has_results: bool) -> None:
        self.events.append(
            ("search_results", {"query": query, "page": page, "has_results": has_results})
        )

    def track_cleared_search_term(self) -> None:
        self.events.append(("cleared_search_term", {}))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


def envelope(projects: Iterable[Project], more: str | None = None) -> DiscoveryEnvelope:
    return DiscoveryEnvelope(projects=tuple(projects), more_projects_url=more)


def collect(signal) -> list[Any]:
    """Subscribe to a signal and return the list it appends to."""
    values: list[Any] = []
    signal.observe(values.append)
    return values


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_project():
    """Factory fixture for creating Project instances with sensible defaults."""

    def _make(
        project_id: int = 1,
        name: str | None = None,
        blurb: str = "A test project.",
        creator_name: str = "Test Creator",
        category_name: str = "Technology",
        state: str = "live",
        url: str | None = None,
    ) -> Project:
        if name is None:
            name = f"Project {project_id}"
        if url is None:
            url = f"https://example.com/projects/{project_id}"
        return Project(
            id=project_id,
            name=name,
            blurb=blurb,
            creator_name=creator_name,
            category_name=category_name,
            state=state,
            url=url,
        )

    return _make


@pytest.fixture
def sample_config():
    """Factory fixture for creating SearchConfig with optional overrides."""

    def _make(**kwargs: Any) -> SearchConfig:
        return SearchConfig(**kwargs)

    return _make


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture
def analytics() -> RecordingAnalytics:
    return RecordingAnalytics()


@pytest.fixture
def make_services(analytics):
    """Build AppServices around a FakeDiscoveryService."""

    def _make(api: FakeDiscoveryService) -> AppServices:
        return AppServices(discovery_api=api, analytics=analytics)

    return _make
