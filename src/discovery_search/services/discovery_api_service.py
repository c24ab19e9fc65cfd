"""Internal discovery API helpers for first-page and continuation fetches."""

from __future__ import annotations

import httpx

from discovery_search.models import DiscoveryEnvelope, DiscoveryParams
from discovery_search.parsing import parse_discovery_envelope

DISCOVER_PATH = "/discover"


def build_discover_url(base_url: str) -> str:
    """Join the configured base URL and the discover endpoint path."""
    return base_url.rstrip("/") + DISCOVER_PATH


async def _get_json(
    *,
    client: httpx.AsyncClient | None,
    url: str,
    params: dict[str, str | int] | None,
    timeout_seconds: float,
    user_agent: str,
) -> object:
    headers = {"User-Agent": user_agent, "Accept": "application/json"}
    if client is not None:
        response = await client.get(url, params=params, headers=headers, timeout=timeout_seconds)
    else:
        async with httpx.AsyncClient() as tmp_client:
            response = await tmp_client.get(
                url,
                params=params,
                headers=headers,
                timeout=timeout_seconds,
            )

    response.raise_for_status()
    return response.json()


async def fetch_discovery(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    params: DiscoveryParams,
    timeout_seconds: float,
    user_agent: str,
) -> DiscoveryEnvelope:
    """Fetch the first page of discovery results for ``params``."""
    data = await _get_json(
        client=client,
        url=build_discover_url(base_url),
        params=params.to_query_params(),
        timeout_seconds=timeout_seconds,
        user_agent=user_agent,
    )
    return parse_discovery_envelope(data)


async def fetch_discovery_page(
    *,
    client: httpx.AsyncClient | None,
    url: str,
    timeout_seconds: float,
    user_agent: str,
) -> DiscoveryEnvelope:
    """Fetch a continuation page from a ``more_projects`` URL."""
    data = await _get_json(
        client=client,
        url=url,
        params=None,
        timeout_seconds=timeout_seconds,
        user_agent=user_agent,
    )
    return parse_discovery_envelope(data)


__all__ = [
    "build_discover_url",
    "fetch_discovery",
    "fetch_discovery_page",
]
