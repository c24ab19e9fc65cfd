"""End-to-end tests for the Textual search screen using run_test() + pilot."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest
from conftest import FakeDiscoveryService, envelope
from textual.widgets import Input, Label, OptionList

from discovery_search.app import (
    ProjectDetailModal,
    SearchBrowser,
    format_project_option,
)
from discovery_search.config import SearchConfig
from discovery_search.models import Project
from discovery_search.services.interfaces import AppServices

pytestmark = pytest.mark.integration()


async def _wait_until(pilot, predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    end = loop.time() + timeout
    while not predicate() and loop.time() < end:
        await pilot.pause(0.02)
    assert predicate()


@pytest.fixture
def popular(make_project):
    return (make_project(1, "Solar Lamp"), make_project(2, "Kite Kit"))


@pytest.fixture
def make_app(make_services):
    def _make(api: FakeDiscoveryService) -> SearchBrowser:
        return SearchBrowser(
            SearchConfig(debounce_interval=0.0),
            services=make_services(api),
        )

    return _make


def _options(app: SearchBrowser) -> OptionList:
    return app.query_one("#project-list", OptionList)


def _popular_title_visible(app: SearchBrowser) -> bool:
    return app.query_one("#popular-title", Label).has_class("visible")


def test_format_project_option_escapes_markup() -> None:
    project = Project(id=1, name="[red]Lamp", creator_name="Ada", category_name="Design")
    rendered = format_project_option(project)
    assert "\\[red]Lamp" in rendered
    assert "Ada · Design" in rendered


async def test_mount_shows_popular_projects(popular, make_app, analytics) -> None:
    api = FakeDiscoveryService(popular=envelope(popular))
    app = make_app(api)

    async with app.run_test() as pilot:
        await _wait_until(pilot, lambda: _options(app).option_count == 2)
        assert _popular_title_visible(app)
        assert len(api.popular_calls) == 1
        assert analytics.names() == ["search_view"]
        assert app.focused is _options(app)


async def test_typing_shows_search_results(popular, make_project, make_app) -> None:
    kite = make_project(7, "Stunt Kite")
    api = FakeDiscoveryService(popular=envelope(popular), searches={"kite": envelope([kite])})
    app = make_app(api)

    async with app.run_test() as pilot:
        await _wait_until(pilot, lambda: _options(app).option_count == 2)
        await pilot.press("slash")
        for ch in "kite":
            await pilot.press(ch)

        await _wait_until(pilot, lambda: app._displayed == (kite,))
        assert _options(app).option_count == 1
        assert not _popular_title_visible(app)
        assert api.search_calls[-1].query == "kite"


async def test_cancel_restores_popular(popular, make_project, make_app, analytics) -> None:
    api = FakeDiscoveryService(
        popular=envelope(popular), searches={"kite": envelope([make_project(7)])}
    )
    app = make_app(api)

    async with app.run_test() as pilot:
        await _wait_until(pilot, lambda: _options(app).option_count == 2)
        await pilot.press("slash")
        for ch in "kite":
            await pilot.press(ch)
        await _wait_until(pilot, lambda: _options(app).option_count == 1)

        await app.run_action("cancel_search")
        await _wait_until(pilot, lambda: _options(app).option_count == 2)

        assert app.query_one("#search-field", Input).value == ""
        assert _popular_title_visible(app)
        assert app.focused is _options(app)
        assert "cleared_search_term" in analytics.names()


async def test_clear_search_empties_field(popular, make_app, analytics) -> None:
    app = make_app(FakeDiscoveryService(popular=envelope(popular)))

    async with app.run_test() as pilot:
        await pilot.press("slash")
        for ch in "ab":
            await pilot.press(ch)
        await app.run_action("clear_search")
        await pilot.pause()

        assert app.query_one("#search-field", Input).value == ""
        assert app.view_model is not None
        assert app.view_model.current_query == ""
        assert "cleared_search_term" in analytics.names()


async def test_highlight_near_bottom_loads_next_page(make_project, make_app) -> None:
    first = tuple(make_project(i) for i in range(1, 6))
    second = (make_project(6), make_project(7))
    api = FakeDiscoveryService(
        searches={"lamp": envelope(first, "page-2")},
        pages={"page-2": envelope(second)},
    )
    app = make_app(api)

    async with app.run_test() as pilot:
        await pilot.press("slash")
        for ch in "lamp":
            await pilot.press(ch)
        await _wait_until(pilot, lambda: _options(app).option_count == 5)

        _options(app).highlighted = 3
        await _wait_until(pilot, lambda: _options(app).option_count == 7)

        assert api.page_calls == ["page-2"]
        assert _options(app).highlighted == 3


async def test_selecting_project_opens_detail(popular, make_app) -> None:
    app = make_app(FakeDiscoveryService(popular=envelope(popular)))

    async with app.run_test() as pilot:
        await _wait_until(pilot, lambda: _options(app).option_count == 2)
        option_list = _options(app)
        option_list.focus()
        option_list.highlighted = 1
        await pilot.press("enter")
        await _wait_until(pilot, lambda: isinstance(app.screen, ProjectDetailModal))

        modal = app.screen
        assert modal.navigation.project == popular[1]
        assert modal.navigation.playlist == popular

        await pilot.press("escape")
        await _wait_until(pilot, lambda: not isinstance(app.screen, ProjectDetailModal))


async def test_http_client_closed_after_unmount(popular) -> None:
    """Without injected services the app owns an httpx client and closes it."""
    api = FakeDiscoveryService(popular=envelope(popular))

    def _fake_services(config, *, client=None):
        assert client is not None
        return AppServices(discovery_api=api, analytics=_NullAnalytics())

    app = SearchBrowser(SearchConfig(debounce_interval=0.0))
    with patch("discovery_search.app.build_default_app_services", side_effect=_fake_services):
        async with app.run_test():
            assert app._http_client is not None
        assert app._http_client is None
        assert app.view_model is None


class _NullAnalytics:
    def track_search_view(self) -> None:
        pass

    def track_search_results(self, *, query: str, page: int, has_results: bool) -> None:
        pass

    def track_cleared_search_term(self) -> None:
        pass
