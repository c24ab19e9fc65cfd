"""Generic cursor-based pagination driven by "new search" and "need more" triggers.

``Paginator`` owns a single ``PaginationState`` snapshot. Every trigger and
every response replaces that snapshot through one of the pure transition
functions below, so the state is only ever written from the event loop that
delivers the triggers.

Request chains are tagged with the state's ``generation``. Starting a new
search bumps the generation and cancels the outstanding task; a response that
still arrives for an older generation is dropped without touching the state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from discovery_search.scheduler import AsyncioScheduler, Scheduler
from discovery_search.signals import Signal

logger = logging.getLogger(__name__)

ParamsT = TypeVar("ParamsT")
EnvelopeT = TypeVar("EnvelopeT")
ValueT = TypeVar("ValueT")
CursorT = TypeVar("CursorT")


@dataclass(frozen=True, slots=True)
class PaginationState:
    """Snapshot of one paginator.

    ``page`` is 0 before the first search and 1-based afterwards.
    """

    values: tuple[Any, ...] = ()
    cursor: Any = None
    page: int = 0
    is_loading: bool = False
    generation: int = 0


# ============================================================================
# Transitions
# ============================================================================


def start_first_page(state: PaginationState, *, clear: bool) -> PaginationState:
    """Begin a brand-new request chain."""
    return replace(
        state,
        values=() if clear else state.values,
        cursor=None,
        page=1,
        is_loading=True,
        generation=state.generation + 1,
    )


def can_request_next_page(state: PaginationState) -> bool:
    return not state.is_loading and state.cursor is not None


def start_next_page(state: PaginationState) -> PaginationState:
    return replace(state, is_loading=True)


def receive_first_page(
    state: PaginationState, values: tuple[Any, ...], cursor: Any
) -> PaginationState:
    return replace(state, values=values, cursor=cursor, is_loading=False)


def receive_next_page(
    state: PaginationState, values: tuple[Any, ...], cursor: Any
) -> PaginationState:
    return replace(
        state,
        values=state.values + values,
        cursor=cursor,
        page=state.page + 1,
        is_loading=False,
    )


def fail_request(state: PaginationState) -> PaginationState:
    """A fetch failed: stop loading, keep everything else."""
    return replace(state, is_loading=False)


def reset_pagination(state: PaginationState) -> PaginationState:
    """End the active search: no values, no cursor, nothing in flight."""
    return replace(
        state,
        values=(),
        cursor=None,
        page=0,
        is_loading=False,
        generation=state.generation + 1,
    )


# ============================================================================
# Paginator
# ============================================================================


class Paginator(Generic[ParamsT, EnvelopeT, ValueT, CursorT]):
    """Drive first-page and next-page fetches and accumulate their values.

    Args:
        values_from_envelope: Extract the items of one page.
        cursor_from_envelope: Extract the continuation cursor, ``None`` when
            the result set is exhausted.
        request_from_params: Fetch the first page for a new search.
        request_from_cursor: Fetch the page identified by a cursor.
        clear_on_new_request: Reset accumulated values as soon as a new
            search starts, before its response arrives.
        debounce_interval: Quiet period, in seconds, before a first-page
            fetch is issued. A newer search inside the window replaces it.
        scheduler: Clock used for the debounce window.

    Outputs are published on ``values``, ``is_loading`` and ``page_count``.
    When a response is applied they are published in that order.
    """

    def __init__(
        self,
        *,
        values_from_envelope: Callable[[EnvelopeT], tuple[ValueT, ...]],
        cursor_from_envelope: Callable[[EnvelopeT], CursorT | None],
        request_from_params: Callable[[ParamsT], Awaitable[EnvelopeT]],
        request_from_cursor: Callable[[CursorT], Awaitable[EnvelopeT]],
        clear_on_new_request: bool = True,
        debounce_interval: float = 0.0,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._values_from_envelope = values_from_envelope
        self._cursor_from_envelope = cursor_from_envelope
        self._request_from_params = request_from_params
        self._request_from_cursor = request_from_cursor
        self._clear_on_new_request = clear_on_new_request
        self._debounce_interval = max(0.0, debounce_interval)
        self._scheduler = scheduler or AsyncioScheduler()

        self.values: Signal[tuple[ValueT, ...]] = Signal("values")
        self.is_loading: Signal[bool] = Signal("is_loading")
        self.page_count: Signal[int] = Signal("page_count")

        self._state = PaginationState()
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> PaginationState:
        return self._state

    def request_first_page(self, params: ParamsT) -> None:
        """Start a new search, superseding any outstanding request chain."""
        self._cancel_task()
        self._state = start_first_page(self._state, clear=self._clear_on_new_request)
        generation = self._state.generation
        logger.debug("First page requested (generation %d): %r", generation, params)

        self.is_loading.send(True)
        self.page_count.send(self._state.page)
        if self._clear_on_new_request:
            self.values.send(self._state.values)

        self._start(self._load_first_page(params, generation))

    def request_next_page(self) -> bool:
        """Request one more page of the current search.

        Returns False (and does nothing) while a page is loading or when the
        current search is exhausted.
        """
        if not can_request_next_page(self._state):
            logger.debug(
                "Next page ignored (loading=%s, cursor=%r)",
                self._state.is_loading,
                self._state.cursor,
            )
            return False
        cursor = self._state.cursor
        self._state = start_next_page(self._state)
        generation = self._state.generation
        self.is_loading.send(True)
        self._start(self._load_next_page(cursor, generation))
        return True

    def reset(self) -> None:
        """Abandon the current search.

        Cancels outstanding work, drops accumulated values and the cursor, and
        bumps the generation so a response that still arrives is discarded.
        """
        self._cancel_task()
        was_loading = self._state.is_loading
        self._state = reset_pagination(self._state)
        logger.debug("Pagination reset (generation %d)", self._state.generation)
        self.values.send(self._state.values)
        self.page_count.send(self._state.page)
        if was_loading:
            self.is_loading.send(False)

    def close(self) -> None:
        """Cancel any outstanding fetch."""
        self._cancel_task()

    def _start(self, coro) -> None:
        self._task = asyncio.create_task(coro)
        self._task.add_done_callback(_on_task_done)

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _load_first_page(self, params: ParamsT, generation: int) -> None:
        if self._debounce_interval > 0:
            await self._scheduler.sleep(self._debounce_interval)
        try:
            envelope = await self._request_from_params(params)
            values = tuple(self._values_from_envelope(envelope))
            cursor = self._cursor_from_envelope(envelope)
        except Exception:
            logger.warning("First page fetch failed for %r", params, exc_info=True)
            self._fail(generation)
            return
        self._apply(generation, lambda state: receive_first_page(state, values, cursor))

    async def _load_next_page(self, cursor: CursorT, generation: int) -> None:
        try:
            envelope = await self._request_from_cursor(cursor)
            values = tuple(self._values_from_envelope(envelope))
            next_cursor = self._cursor_from_envelope(envelope)
        except Exception:
            logger.warning("Next page fetch failed for cursor %r", cursor, exc_info=True)
            self._fail(generation)
            return
        self._apply(generation, lambda state: receive_next_page(state, values, next_cursor))

    def _apply(
        self, generation: int, transition: Callable[[PaginationState], PaginationState]
    ) -> None:
        if generation != self._state.generation:
            logger.debug(
                "Discarding stale response (generation %d, current %d)",
                generation,
                self._state.generation,
            )
            return
        self._state = transition(self._state)
        self.values.send(self._state.values)
        self.page_count.send(self._state.page)
        self.is_loading.send(self._state.is_loading)

    def _fail(self, generation: int) -> None:
        if generation != self._state.generation:
            return
        self._state = fail_request(self._state)
        self.is_loading.send(False)


def _on_task_done(task: asyncio.Task[None]) -> None:
    """Log unhandled exceptions from fetch tasks."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Unhandled exception in pagination task: %s", exc, exc_info=exc)


__all__ = [
    "PaginationState",
    "Paginator",
    "can_request_next_page",
    "fail_request",
    "receive_first_page",
    "receive_next_page",
    "reset_pagination",
    "start_first_page",
    "start_next_page",
]
