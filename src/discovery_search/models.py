"""Data models and constants for the discovery search screen."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

# Application identity, used for platformdirs config paths
CONFIG_APP_NAME = "discovery-search"

# Discovery API constants
DISCOVERY_DEFAULT_PER_PAGE = 20
DISCOVERY_PER_PAGE_LIMIT = 100

# Rows from the end of the list that count as "near the bottom"
NEAR_BOTTOM_OFFSET = 3


class DiscoverySort(Enum):
    """Sort orders accepted by the discovery endpoint."""

    POPULAR = "popularity"
    RELEVANCE = "magic"
    NEWEST = "newest"
    END_DATE = "end_date"
    MOST_FUNDED = "most_funded"


class RefTag(Enum):
    """Provenance tag attached to navigation out of a list."""

    SEARCH = "search"


@dataclass(frozen=True, slots=True)
class Project:
    """A single project entry returned by the discovery endpoint."""

    id: int
    name: str
    blurb: str = ""
    creator_name: str = ""
    category_name: str = ""
    state: str = "live"  # "live" | "successful" | "failed" | "canceled" | ...
    url: str = ""


@dataclass(frozen=True, slots=True)
class DiscoveryParams:
    """Query parameters for one discovery request.

    Always build a fresh value from ``DEFAULT_DISCOVERY_PARAMS`` rather than
    mutating a shared one.
    """

    query: str | None = None
    sort: DiscoverySort | None = None
    category_id: int | None = None
    per_page: int | None = None

    def with_query(self, query: str | None) -> DiscoveryParams:
        return replace(self, query=query)

    def with_sort(self, sort: DiscoverySort | None) -> DiscoveryParams:
        return replace(self, sort=sort)

    def to_query_params(self) -> dict[str, str | int]:
        """Render as HTTP query parameters, omitting unset fields."""
        params: dict[str, str | int] = {}
        if self.query:
            params["term"] = self.query
        if self.sort is not None:
            params["sort"] = self.sort.value
        if self.category_id is not None:
            params["category_id"] = self.category_id
        if self.per_page is not None:
            params["per_page"] = self.per_page
        return params


DEFAULT_DISCOVERY_PARAMS = DiscoveryParams(per_page=DISCOVERY_DEFAULT_PER_PAGE)


@dataclass(frozen=True, slots=True)
class DiscoveryEnvelope:
    """One page of discovery results.

    ``more_projects_url`` is the continuation cursor; ``None`` means the
    result set is exhausted.
    """

    projects: tuple[Project, ...] = ()
    more_projects_url: str | None = None


@dataclass(frozen=True, slots=True)
class FocusChange:
    """Whether the search field should be focused, and whether to animate it."""

    focused: bool
    animate: bool


@dataclass(frozen=True, slots=True)
class ProjectNavigation:
    """A tapped project, the list it was tapped in, and where it came from."""

    project: Project
    playlist: tuple[Project, ...]
    ref_tag: RefTag = RefTag.SEARCH


__all__ = [
    "CONFIG_APP_NAME",
    "DEFAULT_DISCOVERY_PARAMS",
    "DISCOVERY_DEFAULT_PER_PAGE",
    "DISCOVERY_PER_PAGE_LIMIT",
    "NEAR_BOTTOM_OFFSET",
    "DiscoveryEnvelope",
    "DiscoveryParams",
    "DiscoverySort",
    "FocusChange",
    "Project",
    "ProjectNavigation",
    "RefTag",
]
