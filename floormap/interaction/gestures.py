"""Pan gesture recognition layered over the interaction modes.

A pan starts when the pointer goes down in PAN mode, with the middle
button, or with the modifier key held, whatever the current mode.  The
click that closes a pan gesture is swallowed so a drag never also counts
as a mode-specific click.
"""

from __future__ import annotations

import logging

from floormap.config import MIDDLE_BUTTON
from floormap.interaction.modes import Mode, PointerEvent
from floormap.viewport import ViewportEngine

logger = logging.getLogger(__name__)


class PanGestureLayer:
    """Tracks one pan drag at a time on a :class:`ViewportEngine`."""

    def __init__(self, viewport: ViewportEngine) -> None:
        self.viewport = viewport
        self._suppress_click = False

    @property
    def dragging(self) -> bool:
        return self.viewport.is_panning

    @staticmethod
    def starts_pan(mode: Mode, event: PointerEvent) -> bool:
        return mode is Mode.PAN or event.button == MIDDLE_BUTTON or event.modifier

    def pointer_down(self, mode: Mode, event: PointerEvent) -> bool:
        """Begin a drag if *event* starts a pan.  Returns True if it did."""
        self._suppress_click = False
        if not self.starts_pan(mode, event):
            return False
        self.viewport.begin_pan(event.position)
        logger.debug("Pan started at (%s, %s)", event.x, event.y)
        return True

    def pointer_move(self, event: PointerEvent) -> bool:
        if not self.dragging:
            return False
        self.viewport.pan_to(event.position)
        return True

    def pointer_up(self) -> None:
        if self.dragging:
            self.viewport.end_pan()
            self._suppress_click = True

    def pointer_leave(self) -> None:
        if self.dragging:
            self.viewport.end_pan()
        self._suppress_click = False

    def consume_click(self) -> bool:
        """Return True if the pending click belongs to a pan gesture."""
        if self.dragging:
            return True
        suppressed = self._suppress_click
        self._suppress_click = False
        return suppressed
