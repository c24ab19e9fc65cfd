"""Tests for the popular-projects fetcher."""

from __future__ import annotations

import logging

import httpx
from conftest import FakeDiscoveryService, collect, envelope

from discovery_search.models import DiscoverySort
from discovery_search.popular import POPULAR_PARAMS, PopularFetcher


def test_popular_params_sort_by_popularity_without_query():
    assert POPULAR_PARAMS.sort is DiscoverySort.POPULAR
    assert POPULAR_PARAMS.query is None


async def test_delivers_after_delay(make_project, scheduler):
    project = make_project(1)
    api = FakeDiscoveryService(popular=envelope([project]))
    fetcher = PopularFetcher(api, delay_interval=1.0, scheduler=scheduler)
    received = collect(fetcher.projects)

    fetcher.trigger()
    await scheduler.advance(0.5)
    assert received == []
    assert fetcher.in_flight

    await scheduler.advance(0.5)
    assert received == [(project,)]
    assert api.popular_calls == [POPULAR_PARAMS]
    assert not fetcher.in_flight


async def test_without_delay_delivers_immediately(make_project, scheduler):
    project = make_project(1)
    fetcher = PopularFetcher(FakeDiscoveryService(popular=envelope([project])), scheduler=scheduler)
    received = collect(fetcher.projects)
    fetcher.trigger()
    await scheduler.advance()
    assert received == [(project,)]


async def test_failure_is_demoted_to_empty_list(scheduler):
    api = FakeDiscoveryService(popular=httpx.ConnectError("offline"))
    fetcher = PopularFetcher(api, delay_interval=0.2, scheduler=scheduler)
    received = collect(fetcher.projects)

    fetcher.trigger()
    await scheduler.advance()
    # The delay still applies to the empty result.
    assert received == []
    await scheduler.advance(0.2)
    assert received == [()]


async def test_retrigger_cancels_previous_fetch(make_project, scheduler):
    project = make_project(1)
    api = FakeDiscoveryService(popular=envelope([project]), hold=True)
    fetcher = PopularFetcher(api, scheduler=scheduler)
    received = collect(fetcher.projects)

    fetcher.trigger()
    await scheduler.advance()
    fetcher.trigger()
    await scheduler.advance()
    assert len(api.held) == 2

    api.release(0)
    api.release(1)
    await scheduler.advance()
    assert received == [(project,)]


async def test_cancel_stops_delivery(make_project, scheduler):
    fetcher = PopularFetcher(
        FakeDiscoveryService(popular=envelope([make_project(1)])),
        delay_interval=1.0,
        scheduler=scheduler,
    )
    received = collect(fetcher.projects)
    fetcher.trigger()
    await scheduler.advance(0.5)
    fetcher.cancel()
    await scheduler.advance(1.0)
    assert received == []
    assert not fetcher.in_flight


async def test_observer_error_is_logged(make_project, scheduler, caplog):
    fetcher = PopularFetcher(
        FakeDiscoveryService(popular=envelope([make_project(1)])), scheduler=scheduler
    )

    def _explode(projects):
        raise RuntimeError("renderer crashed")

    fetcher.projects.observe(_explode)
    with caplog.at_level(logging.ERROR, logger="discovery_search.popular"):
        fetcher.trigger()
        await scheduler.advance()

    assert not fetcher.in_flight
    assert any("renderer crashed" in r.getMessage() for r in caplog.records)
