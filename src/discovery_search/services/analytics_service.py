"""Logging-backed analytics sink for search screen events."""

from __future__ import annotations

import logging

logger = logging.getLogger("discovery_search.analytics")


def track_search_view() -> None:
    logger.info("search_view_appeared")


def track_search_results(*, query: str, page: int, has_results: bool) -> None:
    logger.info("search_results query=%r page=%d has_results=%s", query, page, has_results)


def track_cleared_search_term() -> None:
    logger.info("search_cleared")


__all__ = [
    "track_cleared_search_term",
    "track_search_results",
    "track_search_view",
]
