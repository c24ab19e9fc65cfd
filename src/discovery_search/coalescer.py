"""Collapse raw search-screen events into one canonical query stream.

Precedence per event:

    ViewAppeared(animated=False)  first one only  -> ""
    ViewAppeared(animated=True)                   -> (nothing)
    CancelPressed / ClearPressed  every time      -> ""
    TextChanged(text)                             -> text, verbatim
    EditingBegan / EditingEnded                   -> (nothing; focus only)

Text changes are not debounced here; throttling belongs to the network path.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from discovery_search.signals import Signal


@dataclass(frozen=True, slots=True)
class TextChanged:
    text: str


@dataclass(frozen=True, slots=True)
class CancelPressed:
    pass


@dataclass(frozen=True, slots=True)
class ClearPressed:
    pass


@dataclass(frozen=True, slots=True)
class ViewAppeared:
    animated: bool


@dataclass(frozen=True, slots=True)
class EditingBegan:
    pass


@dataclass(frozen=True, slots=True)
class EditingEnded:
    pass


SearchEvent = TextChanged | CancelPressed | ClearPressed | ViewAppeared | EditingBegan | EditingEnded


@dataclass(frozen=True, slots=True)
class CoalescerState:
    """Everything the coalescer remembers between events."""

    appeared: bool = False
    query: str | None = None


def coalesce(state: CoalescerState, event: SearchEvent) -> tuple[CoalescerState, str | None]:
    """Apply one event and return ``(new_state, emitted_query_or_None)``."""
    if isinstance(event, TextChanged):
        return replace(state, query=event.text), event.text
    if isinstance(event, (CancelPressed, ClearPressed)):
        return replace(state, query=""), ""
    if isinstance(event, ViewAppeared):
        if event.animated or state.appeared:
            return state, None
        return replace(state, appeared=True, query=""), ""
    return state, None


class QueryCoalescer:
    """Stateful wrapper around ``coalesce`` that publishes on ``queries``."""

    def __init__(self) -> None:
        self.queries: Signal[str] = Signal("queries")
        self._state = CoalescerState()

    @property
    def state(self) -> CoalescerState:
        return self._state

    @property
    def current_query(self) -> str | None:
        """The last emitted query, or ``None`` before the first emission."""
        return self._state.query

    def handle(self, event: SearchEvent) -> str | None:
        self._state, query = coalesce(self._state, event)
        if query is not None:
            self.queries.send(query)
        return query


__all__ = [
    "CancelPressed",
    "ClearPressed",
    "CoalescerState",
    "EditingBegan",
    "EditingEnded",
    "QueryCoalescer",
    "SearchEvent",
    "TextChanged",
    "ViewAppeared",
    "coalesce",
]
