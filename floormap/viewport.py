"""Viewport transform engine — pan/zoom state and screen <-> floor projection.

Screen positions are pixels relative to the canvas' top-left corner.  Floor
positions are pixels of the rendered floor-plan image, so the forward
projection is simply::

    screen = floor_px * scale + offset

and the unprojection is its inverse.  Stored node coordinates are then
expressed either as a percentage of the image size or as whole pixels.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable

from floormap.config import PERCENT_DECIMALS, ZOOM_SENSITIVITY, ZOOM_STEP
from floormap.models.floorplan import Node, UnitMode, ViewportTransform, clamp_scale

logger = logging.getLogger(__name__)

Point = tuple[float, float]


class OutOfBoundsError(ValueError):
    """The unprojected pointer lies outside the floor-plan image."""

    def __init__(self, raw: Point, image_width: float, image_height: float) -> None:
        self.raw = raw
        self.image_width = image_width
        self.image_height = image_height
        super().__init__(
            f"Point ({raw[0]:.2f}, {raw[1]:.2f}) is outside the "
            f"{image_width}x{image_height} image"
        )


@dataclass(frozen=True)
class ScreenStyle:
    """Placement of a marker or line endpoint inside the zoomed image layer."""

    left: float
    top: float
    unit: str

    @property
    def css_left(self) -> str:
        return f"{_fmt(self.left)}{self.unit}"

    @property
    def css_top(self) -> str:
        return f"{_fmt(self.top)}{self.unit}"

    def to_dict(self) -> dict[str, str]:
        return {"left": self.css_left, "top": self.css_top, "position": "absolute"}


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round to *decimals* places with halves going up (2.5 -> 3, 0.125 -> 0.13)."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def to_unit(raw: float, dimension: float, unit_mode: UnitMode) -> float:
    """Express an image-pixel value in *unit_mode*."""
    if unit_mode is UnitMode.PERCENTAGE:
        return round_half_up((raw / dimension) * 100, PERCENT_DECIMALS)
    return round_half_up(raw)


def from_unit(value: float, dimension: float, unit_mode: UnitMode) -> float:
    """Inverse of :func:`to_unit` (without the rounding)."""
    if unit_mode is UnitMode.PERCENTAGE:
        return value / 100 * dimension
    return value


def floor_to_screen_style(node: Node, unit_mode: UnitMode) -> ScreenStyle:
    """Rendering placement for a node's stored coordinates.

    Used for node markers and for both ends of an edge line.
    """
    unit = "%" if unit_mode is UnitMode.PERCENTAGE else "px"
    return ScreenStyle(
        left=node.coordinates.x,
        top=node.coordinates.y,
        unit=unit,
    )


class ViewportEngine:
    """Owns the pan offset and zoom scale of one FloorPlan view.

    Parameters
    ----------
    transform:
        Initial transform, typically loaded from storage.
    sensitivity:
        Wheel zoom sensitivity.
    on_change:
        Called with the new :class:`ViewportTransform` after every mutation.
    """

    def __init__(
        self,
        transform: ViewportTransform | None = None,
        *,
        sensitivity: float = ZOOM_SENSITIVITY,
        on_change: Callable[[ViewportTransform], None] | None = None,
    ) -> None:
        self._transform = transform or ViewportTransform()
        self.sensitivity = sensitivity
        self.on_change = on_change
        self._drag_origin: Point | None = None

    @property
    def transform(self) -> ViewportTransform:
        return self._transform

    @property
    def scale(self) -> float:
        return self._transform.scale

    @property
    def offset(self) -> Point:
        return (self._transform.x, self._transform.y)

    @property
    def zoom_percent(self) -> int:
        return int(round_half_up(self._transform.scale * 100))

    @property
    def is_panning(self) -> bool:
        return self._drag_origin is not None

    def _replace(self, x: float, y: float, scale: float) -> ViewportTransform:
        self._transform = ViewportTransform(x=x, y=y, scale=clamp_scale(scale))
        if self.on_change is not None:
            self.on_change(self._transform)
        return self._transform

    # -- Zoom ----------------------------------------------------------------

    def zoom_at(self, cursor: Point, wheel_delta: float) -> ViewportTransform:
        """Zoom by a wheel step, keeping the floor point under *cursor* fixed."""
        current = self._transform
        new_scale = clamp_scale(
            current.scale + (-wheel_delta * self.sensitivity * current.scale)
        )
        ratio = new_scale / current.scale
        cx, cy = cursor
        return self._replace(
            cx - (cx - current.x) * ratio,
            cy - (cy - current.y) * ratio,
            new_scale,
        )

    def zoom_in(self, step: float = ZOOM_STEP) -> ViewportTransform:
        current = self._transform
        return self._replace(current.x, current.y, current.scale + step)

    def zoom_out(self, step: float = ZOOM_STEP) -> ViewportTransform:
        current = self._transform
        return self._replace(current.x, current.y, current.scale - step)

    def reset(self) -> ViewportTransform:
        """Back to the identity view (no pan, 100% zoom)."""
        self._drag_origin = None
        return self._replace(0.0, 0.0, 1.0)

    # -- Pan -----------------------------------------------------------------

    def begin_pan(self, cursor: Point) -> None:
        self._drag_origin = (cursor[0] - self._transform.x, cursor[1] - self._transform.y)

    def pan_to(self, cursor: Point) -> ViewportTransform | None:
        """Move the view so the drag origin follows *cursor*.

        Returns ``None`` when no pan is in progress.
        """
        if self._drag_origin is None:
            return None
        ox, oy = self._drag_origin
        return self._replace(cursor[0] - ox, cursor[1] - oy, self._transform.scale)

    def end_pan(self) -> None:
        self._drag_origin = None

    # -- Projection ----------------------------------------------------------

    def unproject(self, screen: Point) -> Point:
        """Screen position -> image pixels, without bounds checking."""
        t = self._transform
        return ((screen[0] - t.x) / t.scale, (screen[1] - t.y) / t.scale)

    def project(self, raw: Point) -> Point:
        """Image pixels -> screen position."""
        t = self._transform
        return (raw[0] * t.scale + t.x, raw[1] * t.scale + t.y)

    def describe_position(
        self,
        screen: Point,
        image_width: float,
        image_height: float,
        unit_mode: UnitMode = UnitMode.PERCENTAGE,
    ) -> Point:
        """Unprojected position in *unit_mode*, for the cursor readout.

        Unlike :meth:`screen_to_floor` this does not reject positions
        outside the image.
        """
        raw_x, raw_y = self.unproject(screen)
        if image_width <= 0 or image_height <= 0:
            return (raw_x, raw_y)
        return (
            to_unit(raw_x, image_width, unit_mode),
            to_unit(raw_y, image_height, unit_mode),
        )

    def screen_to_floor(
        self,
        screen: Point,
        image_width: float,
        image_height: float,
        unit_mode: UnitMode = UnitMode.PERCENTAGE,
    ) -> Point:
        """Unproject *screen* into stored floor coordinates.

        Raises
        ------
        OutOfBoundsError
            If the point falls outside ``[0, width] x [0, height]``.
        """
        raw = self.unproject(screen)
        raw_x, raw_y = raw
        if (
            image_width <= 0
            or image_height <= 0
            or raw_x < 0
            or raw_x > image_width
            or raw_y < 0
            or raw_y > image_height
        ):
            raise OutOfBoundsError(raw, image_width, image_height)
        return (
            to_unit(raw_x, image_width, unit_mode),
            to_unit(raw_y, image_height, unit_mode),
        )

    def floor_to_screen(
        self,
        floor: Point,
        image_width: float,
        image_height: float,
        unit_mode: UnitMode = UnitMode.PERCENTAGE,
    ) -> Point:
        """Stored floor coordinates -> screen position."""
        raw = (
            from_unit(floor[0], image_width, unit_mode),
            from_unit(floor[1], image_height, unit_mode),
        )
        return self.project(raw)
