"""CLI/bootstrap helpers for the discovery search application."""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import os
import sys
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import Any

import httpx
from platformdirs import user_config_dir

from discovery_search.action_messages import build_actionable_error
from discovery_search.config import (
    CONFIG_APP_NAME,
    SearchConfig,
    _coerce_interval,
    _coerce_per_page,
    load_config,
)
from discovery_search.models import (
    DEFAULT_DISCOVERY_PARAMS,
    DISCOVERY_PER_PAGE_LIMIT,
    DiscoveryEnvelope,
    DiscoveryParams,
    Project,
)
from discovery_search.pagination import Paginator
from discovery_search.services.interfaces import build_default_app_services

logger = logging.getLogger(__name__)

HEADLESS_MAX_PAGES = 20


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _configure_color_mode(color_mode: str) -> None:
    """Configure environment hints for terminal color behavior."""
    if color_mode == "never":
        os.environ["NO_COLOR"] = "1"
        os.environ.pop("FORCE_COLOR", None)
        return
    if color_mode == "always":
        os.environ["FORCE_COLOR"] = "1"
        os.environ.pop("NO_COLOR", None)
        return
    # auto
    os.environ.pop("FORCE_COLOR", None)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _apply_overrides(config: SearchConfig, args: argparse.Namespace) -> SearchConfig:
    """Return ``config`` with command-line overrides applied and clamped."""
    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.debounce is not None:
        overrides["debounce_interval"] = _coerce_interval(args.debounce, config.debounce_interval)
    if args.delay is not None:
        overrides["api_delay_interval"] = _coerce_interval(args.delay, config.api_delay_interval)
    if args.per_page is not None:
        overrides["per_page"] = _coerce_per_page(args.per_page)
    return replace(config, **overrides)


async def _run_headless_search(
    config: SearchConfig,
    query: str,
    pages: int,
    *,
    client: httpx.AsyncClient | None = None,
) -> list[Project]:
    """Run one search through the paginator and return the accumulated projects.

    Fetches up to ``pages`` pages, stopping early when the results are
    exhausted or a next-page fetch fails. A failed first page re-raises
    the fetch error.
    """
    if client is None:
        async with httpx.AsyncClient() as tmp_client:
            return await _run_headless_search(config, query, pages, client=tmp_client)

    api = build_default_app_services(config, client=client).discovery_api
    first_page_errors: list[Exception] = []

    async def fetch_first_page(params: DiscoveryParams) -> DiscoveryEnvelope:
        try:
            return await api.fetch_discovery(params)
        except Exception as exc:
            first_page_errors.append(exc)
            raise

    paginator: Paginator = Paginator(
        values_from_envelope=lambda envelope: envelope.projects,
        cursor_from_envelope=lambda envelope: envelope.more_projects_url,
        request_from_params=fetch_first_page,
        request_from_cursor=api.fetch_discovery_page,
    )
    settled: asyncio.Queue[None] = asyncio.Queue()
    paginator.is_loading.observe(lambda loading: None if loading else settled.put_nowait(None))

    params = replace(DEFAULT_DISCOVERY_PARAMS, per_page=config.per_page).with_query(query)
    try:
        paginator.request_first_page(params)
        await settled.get()
        if first_page_errors:
            raise first_page_errors[0]
        for _ in range(pages - 1):
            page = paginator.state.page
            if not paginator.request_next_page():
                break
            await settled.get()
            if paginator.state.page == page:
                logger.info("Stopping after page %d: next page fetch failed", page)
                break
    finally:
        paginator.close()
    return list(paginator.state.values)


def _print_projects(projects: list[Project]) -> None:
    for project in projects:
        line = project.name
        if project.creator_name:
            line += f" — {project.creator_name}"
        print(line)


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], SearchConfig] = load_config,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    configure_color_mode_fn: Callable[[str], None] = _configure_color_mode,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    headless_search_fn: Callable[..., Any] = _run_headless_search,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    parser = argparse.ArgumentParser(description="Search projects with live, paginated results")
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Discovery API base URL (default: config value)",
    )
    parser.add_argument(
        "--debounce",
        type=float,
        default=None,
        help="Seconds of typing quiet time before a search request (default: config value)",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Artificial delay in seconds before popular projects are shown",
    )
    parser.add_argument(
        "--per-page",
        type=int,
        default=None,
        help=f"Results per page (1-{DISCOVERY_PER_PAGE_LIMIT}; default: config value)",
    )
    parser.add_argument(
        "--query",
        type=str,
        default=None,
        help="Run one search without the UI and print project names",
    )
    parser.add_argument(
        "--pages",
        type=int,
        default=1,
        help=f"Pages to fetch with --query (1-{HEADLESS_MAX_PAGES}, default: 1)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/discovery-search/debug.log)",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output mode for terminal UI (default: auto)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable terminal colors (equivalent to --color never)",
    )
    args = parser.parse_args(argv)

    if args.query is not None and not args.query.strip():
        print(
            build_actionable_error(
                "run a search",
                why="the --query text is empty",
                next_step="pass a search term, for example --query robots",
            ),
            file=sys.stderr,
        )
        return 1
    if not 1 <= args.pages <= HEADLESS_MAX_PAGES:
        print(f"Error: --pages must be between 1 and {HEADLESS_MAX_PAGES}", file=sys.stderr)
        return 1

    color_mode = "never" if args.no_color else args.color
    configure_color_mode_fn(color_mode)
    configure_logging_fn(args.debug)
    logger.debug("discovery-search starting, cwd=%s", Path.cwd())

    config = _apply_overrides(load_config_fn(), args)

    if args.query is not None:
        try:
            projects = asyncio.run(headless_search_fn(config, args.query.strip(), args.pages))
        except (httpx.HTTPError, OSError, ValueError) as exc:
            logger.warning("Headless search failed: %s", exc, exc_info=True)
            print(
                build_actionable_error(
                    "run a search",
                    why="the discovery request failed",
                    next_step="check connectivity and the --base-url value",
                ),
                file=sys.stderr,
            )
            return 1
        if not projects:
            print("No results found", file=sys.stderr)
            return 0
        _print_projects(projects)
        return 0

    if not validate_interactive_tty_fn():
        print(
            "Error: discovery-search requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run discovery-search directly in a terminal session", file=sys.stderr)
        print("  - Use --query TEXT for non-interactive output", file=sys.stderr)
        print("  - Use --help for command documentation", file=sys.stderr)
        return 2

    if app_factory is None:
        from discovery_search.app import SearchBrowser as _SearchBrowser

        app_factory = _SearchBrowser

    app = app_factory(config)
    app.run()
    return 0


__all__ = [
    "_apply_overrides",
    "_configure_color_mode",
    "_configure_logging",
    "_run_headless_search",
    "_validate_interactive_tty",
    "main",
]
