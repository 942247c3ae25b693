"""InteractionStateMachine — routes pointer, wheel and toolbar events.

Pointer events go through the :class:`PanGestureLayer` first; whatever it
does not claim is interpreted according to the current :class:`Mode` and
turned into viewport or graph operations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from floormap.graph.model import FloorGraph, MutationResult
from floormap.interaction.gestures import PanGestureLayer
from floormap.interaction.modes import Mode, PointerEvent, parse_mode
from floormap.models.floorplan import Node, UnitMode
from floormap.viewport import OutOfBoundsError, Point, ViewportEngine, round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusReadout:
    """Values shown in the editor status bar."""

    cursor: Point | None
    zoom_percent: int
    mode: Mode
    unit_mode: UnitMode

    def format(self) -> str:
        if self.cursor is None:
            x = y = "-"
        elif self.unit_mode is UnitMode.PERCENTAGE:
            x, y = f"{self.cursor[0]:.2f}", f"{self.cursor[1]:.2f}"
        else:
            x, y = (str(int(round_half_up(v))) for v in self.cursor)
        return f"Cursor: X: {x} | Y: {y} | Zoom: {self.zoom_percent}% | Mode: {self.mode.label}"


class InteractionStateMachine:
    """Mode state machine driving a viewport and a floor graph.

    Parameters
    ----------
    viewport:
        Pan/zoom engine of the view.
    graph:
        Graph receiving node and edge mutations.
    image_size:
        Rendered ``(width, height)`` of the floor-plan image, or *None*
        while no image is loaded (node placement is then ignored).
    """

    def __init__(
        self,
        viewport: ViewportEngine,
        graph: FloorGraph,
        *,
        image_size: tuple[float, float] | None = None,
    ) -> None:
        self.viewport = viewport
        self.graph = graph
        self.image_size = image_size
        self.gestures = PanGestureLayer(viewport)
        self._mode = Mode.SELECT
        self.selected_node_id: str | None = None
        self.connection_source_id: str | None = None
        self.cursor_position: Point | None = None
        graph.add_delete_listener(self._on_node_deleted)

    @property
    def mode(self) -> Mode:
        return self._mode

    def set_mode(self, mode: Mode | str) -> Mode:
        """Switch modes.  Selection and a pending connection source survive."""
        self._mode = parse_mode(mode)
        logger.debug("Mode set to %s", self._mode.label)
        return self._mode

    @property
    def selected_node(self) -> Node | None:
        return self.graph.get_node(self.selected_node_id)

    def clear(self) -> None:
        """Drop selection, pending source and any drag in progress."""
        self.selected_node_id = None
        self.connection_source_id = None
        self.viewport.end_pan()

    def _on_node_deleted(self, node_id: str) -> None:
        if self.selected_node_id == node_id:
            self.selected_node_id = None
        if self.connection_source_id == node_id:
            self.connection_source_id = None

    # -- Pointer & wheel -------------------------------------------------------

    def pointer_down(self, event: PointerEvent) -> bool:
        """Returns True if the event started a pan drag."""
        return self.gestures.pointer_down(self._mode, event)

    def pointer_move(self, event: PointerEvent) -> Point | None:
        """Continue a drag and refresh the cursor readout.

        Returns the unprojected cursor position (no graph side effects).
        """
        self.gestures.pointer_move(event)
        if self.image_size is None:
            self.cursor_position = None
        else:
            width, height = self.image_size
            self.cursor_position = self.viewport.describe_position(
                event.position, width, height, self.graph.unit_mode
            )
        return self.cursor_position

    def pointer_up(self, event: PointerEvent | None = None) -> None:
        self.gestures.pointer_up()

    def pointer_leave(self) -> None:
        self.gestures.pointer_leave()

    def wheel(self, event: PointerEvent, delta_y: float) -> None:
        self.viewport.zoom_at(event.position, delta_y)

    # -- Clicks ----------------------------------------------------------------

    def canvas_click(self, event: PointerEvent) -> Node | None:
        """Click on the canvas background.

        In ADD_NODE mode places a node at the unprojected position and
        selects it; returns the new node.  Other modes ignore it.
        """
        if self.gestures.consume_click():
            logger.debug("Click suppressed: end of pan gesture")
            return None
        if self._mode is not Mode.ADD_NODE:
            return None
        if self.image_size is None:
            logger.debug("Ignoring node placement: no image loaded")
            return None

        width, height = self.image_size
        try:
            x, y = self.viewport.screen_to_floor(
                event.position, width, height, self.graph.unit_mode
            )
        except OutOfBoundsError as exc:
            logger.debug("Ignoring node placement: %s", exc)
            return None

        node = self.graph.add_node(x, y)
        self.selected_node_id = node.node_id
        return node

    def node_click(
        self,
        node_id: str,
        event: PointerEvent | None = None,
    ) -> MutationResult | None:
        """Click on a node marker.

        Returns the result of the connection attempt in CONNECT mode, or
        *None* when no graph mutation was attempted.
        """
        if self.gestures.consume_click():
            logger.debug("Node click suppressed: end of pan gesture")
            return None
        if node_id not in self.graph:
            logger.debug("Ignoring click on stale node %s", node_id)
            return MutationResult.NOT_FOUND

        if self._mode is not Mode.CONNECT:
            self.selected_node_id = node_id
            self.connection_source_id = None
            return None

        source = self.connection_source_id
        if source is None:
            self.connection_source_id = node_id
            return None
        if source == node_id:
            self.connection_source_id = None
            return None
        try:
            return self.graph.connect(source, node_id)
        finally:
            self.connection_source_id = None

    # -- Status ----------------------------------------------------------------

    def status(self) -> StatusReadout:
        return StatusReadout(
            cursor=self.cursor_position,
            zoom_percent=self.viewport.zoom_percent,
            mode=self._mode,
            unit_mode=self.graph.unit_mode,
        )
