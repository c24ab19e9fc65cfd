"""Decide whether popular content or search results are on screen."""

from __future__ import annotations

from dataclasses import dataclass, replace

from discovery_search.models import Project
from discovery_search.signals import Signal, SkipRepeats


@dataclass(frozen=True, slots=True)
class ViewState:
    """Latest inputs of the composer; ``None`` means "not received yet"."""

    query: str | None = None
    popular: tuple[Project, ...] | None = None
    search_results: tuple[Project, ...] | None = None


def popular_visible(state: ViewState) -> bool | None:
    """Popular content is shown while the query is empty.

    Undecided until both a query and the popular list have arrived.
    """
    if state.query is None or state.popular is None:
        return None
    return state.query == ""


def compose_display(state: ViewState) -> tuple[Project, ...] | None:
    """The list that should be on screen, or None while inputs are missing."""
    visible = popular_visible(state)
    if visible is None or state.search_results is None:
        return None
    if visible:
        return state.popular
    return state.search_results


def with_query(state: ViewState, query: str) -> ViewState:
    # A query change also clears search results so stale rows never flash.
    return replace(state, query=query, search_results=())


class ViewStateComposer:
    """Publishes de-duplicated ``is_popular_visible`` and ``projects``."""

    def __init__(self) -> None:
        self.is_popular_visible: Signal[bool] = Signal("is_popular_visible")
        self.projects: Signal[tuple[Project, ...]] = Signal("projects")
        self._visible_out = SkipRepeats(self.is_popular_visible)
        self._projects_out = SkipRepeats(self.projects)
        self._state = ViewState()

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def displayed(self) -> tuple[Project, ...] | None:
        return compose_display(self._state)

    def query_changed(self, query: str) -> None:
        self._update(with_query(self._state, query))

    def popular_loaded(self, projects: tuple[Project, ...]) -> None:
        self._update(replace(self._state, popular=tuple(projects)))

    def search_results_changed(self, projects: tuple[Project, ...]) -> None:
        self._update(replace(self._state, search_results=tuple(projects)))

    def _update(self, state: ViewState) -> None:
        self._state = state
        visible = popular_visible(state)
        if visible is not None:
            self._visible_out.send(visible)
        display = compose_display(state)
        if display is not None:
            self._projects_out.send(display)


__all__ = [
    "ViewState",
    "ViewStateComposer",
    "compose_display",
    "popular_visible",
    "with_query",
]
