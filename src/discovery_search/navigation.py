"""Pair a tapped project with the list it was tapped in."""

from __future__ import annotations

import logging

from discovery_search.models import Project, ProjectNavigation, RefTag
from discovery_search.signals import Signal

logger = logging.getLogger(__name__)


class SelectionComposer:
    def __init__(self, ref_tag: RefTag = RefTag.SEARCH) -> None:
        self.ref_tag = ref_tag
        self.go_to_project: Signal[ProjectNavigation] = Signal("go_to_project")
        self._displayed: tuple[Project, ...] | None = None

    def display_changed(self, projects: tuple[Project, ...]) -> None:
        self._displayed = tuple(projects)

    def tapped(self, project: Project) -> None:
        if self._displayed is None:
            logger.debug("Tap on %r before any list was displayed, ignoring", project.id)
            return
        self.go_to_project.send(ProjectNavigation(project, self._displayed, self.ref_tag))


__all__ = ["SelectionComposer"]
