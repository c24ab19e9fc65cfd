"""Service interfaces + default adapters for view-model dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from discovery_search.config import SearchConfig
from discovery_search.models import DiscoveryEnvelope, DiscoveryParams
from discovery_search.services import analytics_service as _analytics
from discovery_search.services import discovery_api_service as _discovery_api


@runtime_checkable
class DiscoveryApiService(Protocol):
    """Interface for the remote paginated discovery endpoint."""

    async def fetch_discovery(self, params: DiscoveryParams) -> DiscoveryEnvelope:
        """Fetch the first page of results for ``params``."""
        ...

    async def fetch_discovery_page(self, url: str) -> DiscoveryEnvelope:
        """Fetch the continuation page behind a ``more_projects`` URL."""
        ...


@runtime_checkable
class AnalyticsSink(Protocol):
    """Fire-and-forget search screen analytics."""

    def track_search_view(self) -> None:
        """Record that the search screen appeared."""
        ...

    def track_search_results(self, *, query: str, page: int, has_results: bool) -> None:
        """Record a settled page of results for ``query``."""
        ...

    def track_cleared_search_term(self) -> None:
        """Record that the user cleared a search term."""
        ...


class HttpDiscoveryService:
    """Default adapter that delegates to the httpx discovery functions."""

    def __init__(
        self,
        *,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float,
        user_agent: str,
    ) -> None:
        self.base_url = base_url
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

    async def fetch_discovery(self, params: DiscoveryParams) -> DiscoveryEnvelope:
        return await _discovery_api.fetch_discovery(
            client=self.client,
            base_url=self.base_url,
            params=params,
            timeout_seconds=self.timeout_seconds,
            user_agent=self.user_agent,
        )

    async def fetch_discovery_page(self, url: str) -> DiscoveryEnvelope:
        return await _discovery_api.fetch_discovery_page(
            client=self.client,
            url=url,
            timeout_seconds=self.timeout_seconds,
            user_agent=self.user_agent,
        )


class LoggingAnalytics:
    """Default adapter that delegates to the logging analytics functions."""

    def track_search_view(self) -> None:
        _analytics.track_search_view()

    def track_search_results(self, *, query: str, page: int, has_results: bool) -> None:
        _analytics.track_search_results(query=query, page=page, has_results=has_results)

    def track_cleared_search_term(self) -> None:
        _analytics.track_cleared_search_term()


@dataclass(slots=True)
class AppServices:
    """Aggregated service interfaces consumed by the view model."""

    discovery_api: DiscoveryApiService
    analytics: AnalyticsSink


def build_default_app_services(
    config: SearchConfig,
    *,
    client: httpx.AsyncClient | None = None,
) -> AppServices:
    """Build default services from ``config``, optionally sharing ``client``."""
    return AppServices(
        discovery_api=HttpDiscoveryService(
            base_url=config.base_url,
            client=client,
            timeout_seconds=config.request_timeout,
            user_agent=config.user_agent,
        ),
        analytics=LoggingAnalytics(),
    )


__all__ = [
    "AnalyticsSink",
    "AppServices",
    "DiscoveryApiService",
    "HttpDiscoveryService",
    "LoggingAnalytics",
    "build_default_app_services",
]
