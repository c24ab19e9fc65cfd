"""Internal service layer for the remote endpoint and analytics collaborators."""

from discovery_search.services.analytics_service import (
    track_cleared_search_term,
    track_search_results,
    track_search_view,
)
from discovery_search.services.discovery_api_service import (
    build_discover_url,
    fetch_discovery,
    fetch_discovery_page,
)

__all__ = [
    "build_discover_url",
    "fetch_discovery",
    "fetch_discovery_page",
    "track_cleared_search_term",
    "track_search_results",
    "track_search_view",
]
