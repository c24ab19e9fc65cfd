"""Parse discovery endpoint JSON into project models.

Parsers are lenient: malformed project entries are skipped rather than
failing the whole page, and a missing or blank continuation URL means the
result set is exhausted.
"""

from __future__ import annotations

import logging
from typing import Any

from discovery_search.models import DiscoveryEnvelope, Project

logger = logging.getLogger(__name__)


def _str_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key) or ""
    return value if isinstance(value, str) else ""


def _nested_name(data: dict[str, Any], key: str) -> str:
    nested = data.get(key) or {}
    if not isinstance(nested, dict):
        return ""
    return _str_field(nested, "name")


def parse_project(item: Any) -> Project | None:
    """Parse one project object. Returns None if ``id`` or ``name`` is missing."""
    if not isinstance(item, dict):
        return None
    project_id = item.get("id")
    # bool is an int subclass; reject it explicitly
    if not isinstance(project_id, int) or isinstance(project_id, bool):
        return None
    name = _str_field(item, "name")
    if not name:
        return None

    urls = item.get("urls") or {}
    web = urls.get("web") if isinstance(urls, dict) else None
    url = _str_field(web, "project") if isinstance(web, dict) else ""

    return Project(
        id=project_id,
        name=name,
        blurb=_str_field(item, "blurb"),
        creator_name=_nested_name(item, "creator"),
        category_name=_nested_name(item, "category"),
        state=_str_field(item, "state") or "live",
        url=url,
    )


def parse_more_projects_url(data: dict[str, Any]) -> str | None:
    """Extract ``urls.api.more_projects``; blank or absent means exhausted."""
    urls = data.get("urls")
    if not isinstance(urls, dict):
        return None
    api = urls.get("api")
    if not isinstance(api, dict):
        return None
    more = api.get("more_projects")
    if not isinstance(more, str) or not more.strip():
        return None
    return more.strip()


def parse_discovery_envelope(data: Any) -> DiscoveryEnvelope:
    """Parse a full discovery response body.

    Raises:
        ValueError: If the body is not a JSON object.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Discovery response must be an object, got {type(data).__name__}")
    raw_projects = data.get("projects") or []
    if not isinstance(raw_projects, list):
        logger.warning("Discovery response has non-list projects field")
        raw_projects = []

    projects: list[Project] = []
    skipped = 0
    for item in raw_projects:
        project = parse_project(item)
        if project is None:
            skipped += 1
            continue
        projects.append(project)
    if skipped:
        logger.debug("Skipped %d malformed project entries", skipped)

    return DiscoveryEnvelope(
        projects=tuple(projects),
        more_projects_url=parse_more_projects_url(data),
    )


__all__ = [
    "parse_discovery_envelope",
    "parse_more_projects_url",
    "parse_project",
]
