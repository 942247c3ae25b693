"""Interaction layer — modes, pan gestures and the event state machine."""

from floormap.interaction.gestures import PanGestureLayer
from floormap.interaction.machine import InteractionStateMachine, StatusReadout
from floormap.interaction.modes import Mode, PointerEvent, parse_mode

__all__ = [
    "InteractionStateMachine",
    "Mode",
    "PanGestureLayer",
    "PointerEvent",
    "StatusReadout",
    "parse_mode",
]
