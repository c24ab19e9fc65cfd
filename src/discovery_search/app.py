"""Textual front end for the discovery search screen.

The app only translates between widgets and ``SearchViewModel``: widget
events become view model inputs, view model outputs update widgets. All
search, pagination and selection logic lives in the view model.
"""

from __future__ import annotations

import logging

import httpx
from rich.markup import escape as escape_markup
from textual import events, on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, Label, OptionList, Static
from textual.widgets.option_list import Option

from discovery_search.config import SearchConfig
from discovery_search.models import FocusChange, Project, ProjectNavigation
from discovery_search.scheduler import Scheduler
from discovery_search.services.interfaces import AppServices, build_default_app_services
from discovery_search.view_model import SearchViewModel

logger = logging.getLogger(__name__)

POPULAR_TITLE = "Popular projects"


def format_project_option(project: Project) -> str:
    """Render a project as Rich markup for the OptionList."""
    title = f"[bold]{escape_markup(project.name)}[/]"
    meta = " · ".join(
        escape_markup(part) for part in (project.creator_name, project.category_name) if part
    )
    if meta:
        title += f"  [dim]{meta}[/]"
    if project.blurb:
        title += f"\n  {escape_markup(project.blurb)}"
    return title


class SearchField(Input):
    """Search input that reports when the user starts editing."""

    class EditingBegan(Message):
        """Posted when the search field gains focus."""

    def on_focus(self, event: events.Focus) -> None:
        self.post_message(self.EditingBegan())


class ProjectDetailModal(ModalScreen[None]):
    """Shows a tapped project with its position in the originating list."""

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("q", "close", "Close"),
    ]

    CSS = """
    ProjectDetailModal {
        align: center middle;
    }

    #project-detail-dialog {
        width: 70%;
        height: auto;
        min-width: 50;
        border: tall $accent;
        padding: 0 2;
        background: $panel;
    }

    #project-detail-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #project-detail-position {
        color: $text-muted;
    }
    """

    def __init__(self, navigation: ProjectNavigation) -> None:
        super().__init__()
        self.navigation = navigation

    def compose(self) -> ComposeResult:
        project = self.navigation.project
        playlist = self.navigation.playlist
        position = playlist.index(project) + 1 if project in playlist else 0
        with Vertical(id="project-detail-dialog"):
            yield Label(escape_markup(project.name), id="project-detail-title")
            yield Static(escape_markup(project.blurb or "No description."), id="project-detail-blurb")
            yield Label(
                escape_markup(f"by {project.creator_name}" if project.creator_name else ""),
                id="project-detail-creator",
            )
            yield Label(escape_markup(project.url), id="project-detail-url")
            yield Label(
                f"{position} of {len(playlist)} · from {self.navigation.ref_tag.value}",
                id="project-detail-position",
            )

    def action_close(self) -> None:
        self.dismiss(None)


class SearchBrowser(App[None]):
    """Search projects with live, paginated results."""

    TITLE = "Discovery Search"
    AUTO_FOCUS = "#project-list"

    BINDINGS = [
        Binding("escape", "cancel_search", "Cancel"),
        Binding("ctrl+l", "clear_search", "Clear"),
        Binding("slash", "focus_search", "Search"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    CSS = """
    #search-field {
        margin: 0 1;
    }

    #popular-title {
        text-style: bold;
        margin: 0 1;
        display: none;
    }

    #popular-title.visible {
        display: block;
    }

    #project-list {
        height: 1fr;
    }

    #status-bar {
        color: $text-muted;
        margin: 0 1;
    }
    """

    def __init__(
        self,
        config: SearchConfig | None = None,
        *,
        services: AppServices | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        super().__init__()
        self._config = config or SearchConfig()
        self._services = services
        self._scheduler = scheduler
        self._http_client: httpx.AsyncClient | None = None
        self._displayed: tuple[Project, ...] = ()
        self._loading = False
        self.view_model: SearchViewModel | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield SearchField(placeholder="Search projects", id="search-field")
        yield Label(POPULAR_TITLE, id="popular-title")
        yield OptionList(id="project-list")
        yield Label("", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Build the view model, bind its outputs and announce the screen."""
        services = self._services
        if services is None:
            self._http_client = httpx.AsyncClient()
            services = build_default_app_services(self._config, client=self._http_client)

        view_model = SearchViewModel(services, config=self._config, scheduler=self._scheduler)
        view_model.projects.observe(self._show_projects)
        view_model.is_popular_title_visible.observe(self._show_popular_title)
        view_model.is_loading.observe(self._show_loading)
        view_model.change_search_field_focus.observe(self._change_focus)
        view_model.resign_first_responder.observe(self._resign_search_field)
        view_model.search_field_text.observe(self._set_search_text)
        view_model.go_to_project.observe(self._open_project)
        self.view_model = view_model

        view_model.view_will_appear(animated=False)
        logger.debug("Search screen mounted, base_url=%s", self._config.base_url)

    async def on_unmount(self) -> None:
        view_model = self.view_model
        self.view_model = None
        if view_model is not None:
            view_model.close()

        client = self._http_client
        self._http_client = None
        if client is not None:
            try:
                await client.aclose()
            except Exception as e:
                logger.debug(
                    "Failed to close shared HTTP client during shutdown: %s", e, exc_info=True
                )

    # ------------------------------------------------------------------
    # Widget events -> view model inputs
    # ------------------------------------------------------------------

    @on(Input.Changed, "#search-field")
    def on_search_changed(self, event: Input.Changed) -> None:
        if self.view_model is not None:
            self.view_model.search_text_changed(event.value)

    @on(Input.Submitted, "#search-field")
    def on_search_submitted(self, event: Input.Submitted) -> None:
        if self.view_model is not None:
            self.view_model.search_text_editing_did_end()

    @on(SearchField.EditingBegan)
    def on_search_editing_began(self, event: SearchField.EditingBegan) -> None:
        if self.view_model is not None:
            self.view_model.search_field_did_begin_editing()

    @on(OptionList.OptionHighlighted, "#project-list")
    def on_project_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        if self.view_model is None:
            return
        idx = event.option_index
        if idx is not None and 0 <= idx < len(self._displayed):
            self.view_model.will_display_row(idx, len(self._displayed))

    @on(OptionList.OptionSelected, "#project-list")
    def on_project_selected(self, event: OptionList.OptionSelected) -> None:
        if self.view_model is None:
            return
        idx = event.option_index
        if idx is not None and 0 <= idx < len(self._displayed):
            self.view_model.tapped(self._displayed[idx])

    def action_cancel_search(self) -> None:
        if self.view_model is not None:
            self.view_model.cancel_button_pressed()

    def action_clear_search(self) -> None:
        if self.view_model is None:
            return
        field = self.query_one("#search-field", SearchField)
        with field.prevent(Input.Changed):
            field.value = ""
        self.view_model.clear_search_text()

    def action_focus_search(self) -> None:
        self.query_one("#search-field", SearchField).focus()

    # ------------------------------------------------------------------
    # View model outputs -> widgets
    # ------------------------------------------------------------------

    def _show_projects(self, projects: tuple[Project, ...]) -> None:
        self._displayed = projects
        option_list = self.query_one("#project-list", OptionList)
        highlighted = option_list.highlighted
        option_list.clear_options()
        option_list.add_options([Option(format_project_option(p)) for p in projects])
        # Appended pages keep the cursor where the user left it.
        if highlighted is not None and 0 <= highlighted < len(projects):
            option_list.highlighted = highlighted
        self._update_status_bar()

    def _show_popular_title(self, visible: bool) -> None:
        self.query_one("#popular-title", Label).set_class(visible, "visible")

    def _show_loading(self, loading: bool) -> None:
        self._loading = loading
        self._update_status_bar()

    def _change_focus(self, change: FocusChange) -> None:
        if change.focused:
            self.query_one("#search-field", SearchField).focus()
        else:
            self.query_one("#project-list", OptionList).focus()

    def _resign_search_field(self, _: None) -> None:
        self.query_one("#project-list", OptionList).focus()

    def _set_search_text(self, text: str) -> None:
        field = self.query_one("#search-field", SearchField)
        with field.prevent(Input.Changed):
            field.value = text

    def _open_project(self, navigation: ProjectNavigation) -> None:
        self.push_screen(ProjectDetailModal(navigation))

    def _update_status_bar(self) -> None:
        count = len(self._displayed)
        text = f"{count} project{'s' if count != 1 else ''}"
        if self._loading:
            text += " · loading…"
        self.query_one("#status-bar", Label).update(text)


__all__ = [
    "ProjectDetailModal",
    "SearchBrowser",
    "SearchField",
    "format_project_option",
]
