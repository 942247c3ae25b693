"""Interaction modes and pointer events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Mode(str, Enum):
    """Active toolbar mode; exactly one at a time."""

    SELECT = "select"
    ADD_NODE = "add_node"
    CONNECT = "connect"
    PAN = "pan"

    @property
    def label(self) -> str:
        return self.value.upper()


def parse_mode(value: Mode | str) -> Mode:
    if isinstance(value, Mode):
        return value
    key = str(value).strip().lower()
    # Toolbar shorthand used by the editor UI
    if key == "node":
        return Mode.ADD_NODE
    return Mode(key)


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event in canvas-relative screen pixels.

    ``button`` follows DOM numbering (0 primary, 1 middle); ``modifier`` is
    true while the pan modifier key (Shift) is held.
    """

    x: float
    y: float
    button: int = 0
    modifier: bool = False

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)
