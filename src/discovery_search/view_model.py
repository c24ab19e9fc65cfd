"""Search screen view model: raw UI intents in, display-ready signals out.

Inputs are plain synchronous methods and must be called from the running
event loop. Outputs are ``Signal`` attributes:

    change_search_field_focus  FocusChange
    go_to_project              ProjectNavigation
    is_loading                 bool
    is_popular_title_visible   bool (de-duplicated)
    projects                   tuple[Project, ...] (de-duplicated)
    resign_first_responder     None
    search_field_text          str
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace

from discovery_search.coalescer import (
    CancelPressed,
    ClearPressed,
    EditingBegan,
    EditingEnded,
    QueryCoalescer,
    TextChanged,
    ViewAppeared,
)
from discovery_search.config import SearchConfig
from discovery_search.models import (
    DEFAULT_DISCOVERY_PARAMS,
    DiscoveryEnvelope,
    DiscoveryParams,
    FocusChange,
    Project,
    ProjectNavigation,
)
from discovery_search.navigation import SelectionComposer
from discovery_search.pagination import Paginator
from discovery_search.popular import PopularFetcher
from discovery_search.scheduler import AsyncioScheduler, Scheduler
from discovery_search.scroll import NearBottomDetector
from discovery_search.services.interfaces import AppServices
from discovery_search.signals import Signal
from discovery_search.view_state import ViewStateComposer

logger = logging.getLogger(__name__)


def _projects_from_envelope(envelope: DiscoveryEnvelope) -> tuple[Project, ...]:
    return envelope.projects


def _cursor_from_envelope(envelope: DiscoveryEnvelope) -> str | None:
    return envelope.more_projects_url


class SearchViewModel:
    """Wires the coalescer, fetchers, paginator and composers together."""

    def __init__(
        self,
        services: AppServices,
        *,
        config: SearchConfig | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        config = config or SearchConfig()
        scheduler = scheduler or AsyncioScheduler()
        self._analytics = services.analytics
        self._params_template: DiscoveryParams = replace(
            DEFAULT_DISCOVERY_PARAMS, per_page=config.per_page
        )

        self._coalescer = QueryCoalescer()
        self._popular = PopularFetcher(
            services.discovery_api,
            delay_interval=config.api_delay_interval,
            scheduler=scheduler,
        )
        self._paginator: Paginator[DiscoveryParams, DiscoveryEnvelope, Project, str] = Paginator(
            values_from_envelope=_projects_from_envelope,
            cursor_from_envelope=_cursor_from_envelope,
            request_from_params=services.discovery_api.fetch_discovery,
            request_from_cursor=services.discovery_api.fetch_discovery_page,
            clear_on_new_request=True,
            debounce_interval=config.debounce_interval,
            scheduler=scheduler,
        )
        self._near_bottom = NearBottomDetector(config.near_bottom_offset)
        self._composer = ViewStateComposer()
        self._selection = SelectionComposer()

        self.change_search_field_focus: Signal[FocusChange] = Signal("change_search_field_focus")
        self.resign_first_responder: Signal[None] = Signal("resign_first_responder")
        self.search_field_text: Signal[str] = Signal("search_field_text")
        self.go_to_project: Signal[ProjectNavigation] = self._selection.go_to_project
        self.is_popular_title_visible: Signal[bool] = self._composer.is_popular_visible
        self.projects: Signal[tuple[Project, ...]] = self._composer.projects
        self.is_loading: Signal[bool] = self._paginator.is_loading

        self._coalescer.queries.observe(self._query_changed)
        self._popular.projects.observe(self._composer.popular_loaded)
        self._paginator.values.observe(self._composer.search_results_changed)
        self._near_bottom.near_bottom.observe(self._near_bottom_reached)
        self._composer.projects.observe(self._selection.display_changed)

        # Latest paginator outputs, for the search-results analytics tap.
        self._results: tuple[Project, ...] | None = None
        self._results_loading: bool | None = None
        self._results_page: int | None = None
        self._paginator.values.observe(self._results_changed)
        self._paginator.page_count.observe(self._page_changed)
        self._paginator.is_loading.observe(self._loading_changed)

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def cancel_button_pressed(self) -> None:
        previous_query = self._coalescer.current_query
        self._coalescer.handle(CancelPressed())
        self.change_search_field_focus.send(FocusChange(focused=False, animate=True))
        self.search_field_text.send("")
        self.resign_first_responder.send(None)
        if previous_query:
            self._track("cleared_search_term", self._analytics.track_cleared_search_term)

    def clear_search_text(self) -> None:
        self._coalescer.handle(ClearPressed())
        self._track("cleared_search_term", self._analytics.track_cleared_search_term)

    def search_field_did_begin_editing(self) -> None:
        self._coalescer.handle(EditingBegan())
        self.change_search_field_focus.send(FocusChange(focused=True, animate=True))

    def search_text_changed(self, search_text: str) -> None:
        self._coalescer.handle(TextChanged(search_text))

    def search_text_editing_did_end(self) -> None:
        self._coalescer.handle(EditingEnded())
        self.resign_first_responder.send(None)

    def view_will_appear(self, animated: bool) -> None:
        self._coalescer.handle(ViewAppeared(animated))
        if animated:
            return
        self._popular.trigger()
        self.change_search_field_focus.send(FocusChange(focused=False, animate=False))
        self._track("search_view", self._analytics.track_search_view)

    def tapped(self, project: Project) -> None:
        self._selection.tapped(project)

    def will_display_row(self, row: int, total_rows: int) -> None:
        """Call as row ``row`` (0-based) of ``total_rows`` becomes visible."""
        self._near_bottom.row_displayed(row, total_rows)

    def close(self) -> None:
        """Cancel outstanding fetches."""
        self._popular.cancel()
        self._paginator.close()

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------

    @property
    def current_query(self) -> str | None:
        return self._coalescer.current_query

    @property
    def displayed_projects(self) -> tuple[Project, ...] | None:
        return self._composer.displayed

    def _query_changed(self, query: str) -> None:
        self._composer.query_changed(query)
        if query:
            self._paginator.request_first_page(self._params_template.with_query(query))
        else:
            self._paginator.reset()

    def _near_bottom_reached(self, _: None) -> None:
        # The popular list is not paginated.
        if not self._coalescer.current_query:
            return
        self._paginator.request_next_page()

    def _results_changed(self, projects: tuple[Project, ...]) -> None:
        self._results = projects
        self._maybe_track_results()

    def _page_changed(self, page: int) -> None:
        self._results_page = page

    def _loading_changed(self, loading: bool) -> None:
        self._results_loading = loading
        self._maybe_track_results()

    def _maybe_track_results(self) -> None:
        if self._results is None or self._results_loading is not False:
            return
        query = self._coalescer.current_query
        page = self._results_page
        if not query or page is None:
            return
        has_results = bool(self._results)
        self._track(
            "search_results",
            lambda: self._analytics.track_search_results(
                query=query, page=page, has_results=has_results
            ),
        )

    def _track(self, event: str, track: Callable[[], None]) -> None:
        try:
            track()
        except Exception:
            logger.warning("Analytics event %s failed", event, exc_info=True)


__all__ = ["SearchViewModel"]
