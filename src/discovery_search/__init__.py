"""Reactive search-and-pagination engine for a project discovery screen."""

from discovery_search.coalescer import QueryCoalescer
from discovery_search.config import SearchConfig, load_config, save_config
from discovery_search.models import (
    DEFAULT_DISCOVERY_PARAMS,
    DiscoveryEnvelope,
    DiscoveryParams,
    DiscoverySort,
    FocusChange,
    Project,
    ProjectNavigation,
    RefTag,
)
from discovery_search.navigation import SelectionComposer
from discovery_search.pagination import PaginationState, Paginator
from discovery_search.popular import PopularFetcher
from discovery_search.scheduler import AsyncioScheduler, Scheduler, VirtualScheduler
from discovery_search.scroll import NearBottomDetector, is_close_to_bottom
from discovery_search.signals import Signal
from discovery_search.view_model import SearchViewModel
from discovery_search.view_state import ViewStateComposer

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_DISCOVERY_PARAMS",
    "AsyncioScheduler",
    "DiscoveryEnvelope",
    "DiscoveryParams",
    "DiscoverySort",
    "FocusChange",
    "NearBottomDetector",
    "PaginationState",
    "Paginator",
    "PopularFetcher",
    "Project",
    "ProjectNavigation",
    "QueryCoalescer",
    "RefTag",
    "Scheduler",
    "SearchConfig",
    "SearchViewModel",
    "SelectionComposer",
    "Signal",
    "ViewStateComposer",
    "VirtualScheduler",
    "is_close_to_bottom",
    "load_config",
    "save_config",
]
