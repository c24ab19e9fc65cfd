"""Edge-triggered "near the bottom of the list" detection."""

from __future__ import annotations

from discovery_search.models import NEAR_BOTTOM_OFFSET
from discovery_search.signals import Signal


def is_close_to_bottom(row: int, total: int, offset: int = NEAR_BOTTOM_OFFSET) -> bool:
    """Return True when 0-based ``row`` is within ``offset`` rows of ``total``."""
    return row >= total - offset


class NearBottomDetector:
    """Fires ``near_bottom`` once per false-to-true crossing of the threshold."""

    def __init__(self, offset: int = NEAR_BOTTOM_OFFSET) -> None:
        self.offset = offset
        self.near_bottom: Signal[None] = Signal("near_bottom")
        self._last: bool | None = None

    def row_displayed(self, row: int, total: int) -> bool:
        """Record a row becoming visible. Returns True if the event fired."""
        close = is_close_to_bottom(row, total, self.offset)
        fired = close and self._last is not True
        self._last = close
        if fired:
            self.near_bottom.send(None)
        return fired


__all__ = ["NearBottomDetector", "is_close_to_bottom"]
