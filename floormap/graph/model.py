"""FloorGraph — node and edge mutations over a :class:`FloorPlan`.

Invariants maintained by every mutation:

* connections are symmetric: ``B in A.connections`` iff ``A in B.connections``
* at most one connection per unordered pair, never a self-connection
* deleting a node removes every connection that references it

Operations that reference unknown node ids are no-ops reporting
:attr:`MutationResult.NOT_FOUND`; they never raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator

from floormap.graph.distance import DistancePolicy, EuclideanDistance
from floormap.models.floorplan import (
    Connection,
    Coordinates,
    CoordinateSpaceMismatchError,
    FloorPlan,
    Node,
    NodeType,
    UnitMode,
    parse_node_type,
    parse_unit_mode,
)
from floormap.viewport import from_unit, to_unit

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "type", "coordinates", "x", "y")


class MutationResult(str, Enum):
    """Outcome of a graph mutation."""

    APPLIED = "applied"
    NOOP = "noop"
    NOT_FOUND = "not_found"
    INVALID_EDGE = "invalid_edge"

    @property
    def changed(self) -> bool:
        return self is MutationResult.APPLIED


@dataclass(frozen=True)
class Edge:
    """One undirected edge, endpoints ordered by node id."""

    source: Node
    target: Node
    distance: float

    @property
    def key(self) -> tuple[str, str]:
        return (self.source.node_id, self.target.node_id)


class EdgeView:
    """Lazy, restartable sequence of the unique undirected edges of a graph.

    Each pass walks the live node list, canonicalises every connection to
    its sorted id pair and emits a pair only the first time it is seen.
    """

    def __init__(self, graph: FloorGraph) -> None:
        self._graph = graph

    def __iter__(self) -> Iterator[Edge]:
        seen: set[tuple[str, str]] = set()
        for node in self._graph.nodes:
            for conn in node.connections:
                pair = tuple(sorted((node.node_id, conn.node_id)))
                if pair in seen or pair[0] == pair[1]:
                    continue
                seen.add(pair)
                target = self._graph.get_node(conn.node_id)
                if target is None:
                    continue
                first, second = (node, target) if node.node_id == pair[0] else (target, node)
                yield Edge(source=first, target=second, distance=conn.distance)

    def __len__(self) -> int:
        return sum(1 for _ in self)


class FloorGraph:
    """Mutable node/edge graph of one FloorPlan.

    Parameters
    ----------
    floor_plan:
        The plan to edit in place.
    distance_policy:
        How connection distances are computed (default: Euclidean).
    on_change:
        Called with the FloorPlan after every applied mutation, once the
        in-memory state has been updated.
    """

    def __init__(
        self,
        floor_plan: FloorPlan,
        *,
        distance_policy: DistancePolicy | None = None,
        on_change: Callable[[FloorPlan], None] | None = None,
    ) -> None:
        self._plan = floor_plan
        self.distance_policy = distance_policy or EuclideanDistance()
        self.on_change = on_change
        self._delete_listeners: list[Callable[[str], None]] = []

    # -- Accessors -------------------------------------------------------------

    @property
    def floor_plan(self) -> FloorPlan:
        return self._plan

    @property
    def nodes(self) -> list[Node]:
        return self._plan.nodes

    @property
    def unit_mode(self) -> UnitMode:
        return self._plan.unit_mode

    def get_node(self, node_id: str | None) -> Node | None:
        if node_id is None:
            return None
        for node in self._plan.nodes:
            if node.node_id == node_id:
                return node
        return None

    def __contains__(self, node_id: object) -> bool:
        return isinstance(node_id, str) and self.get_node(node_id) is not None

    def __len__(self) -> int:
        return len(self._plan.nodes)

    def add_delete_listener(self, callback: Callable[[str], None]) -> None:
        """Register *callback* to receive the id of every deleted node."""
        self._delete_listeners.append(callback)

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self._plan)

    # -- Nodes -----------------------------------------------------------------

    def add_node(
        self,
        x: float,
        y: float,
        node_type: NodeType | str = NodeType.ROOM,
    ) -> Node:
        """Append a new node at stored coordinates ``(x, y)``.

        The node is named ``"Node N"`` where N is the node count after
        insertion.
        """
        node = Node(
            name=f"Node {len(self._plan.nodes) + 1}",
            type=parse_node_type(node_type),
            coordinates=Coordinates(x=x, y=y, floor=self._plan.id),
        )
        self._plan.nodes.append(node)
        logger.info("Added node %s at (%s, %s)", node.node_id, x, y)
        self._changed()
        return node

    def update_node(self, node_id: str, field: str, value: Any) -> MutationResult:
        """Partially update one field of a node.

        Supported fields: ``name``, ``type``, ``coordinates`` (a mapping or
        :class:`Coordinates`), and the ``x`` / ``y`` shorthands.

        Raises
        ------
        UnknownNodeTypeError
            If *field* is ``type`` and *value* is outside :class:`NodeType`.
        ValueError
            If *field* is not editable.
        """
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field {field!r} is not editable; expected one of {EDITABLE_FIELDS}")
        node = self.get_node(node_id)
        if node is None:
            logger.debug("update_node: node %s not found", node_id)
            return MutationResult.NOT_FOUND
        if field == "type":
            value = parse_node_type(value)

        if field == "name":
            node.name = str(value)
        elif field == "type":
            node.type = value
        else:
            if field == "coordinates":
                coords = (
                    value if isinstance(value, Coordinates) else Coordinates.model_validate(value)
                )
            else:
                coords = node.coordinates.model_copy(update={field: float(value)})
            if not coords.floor:
                coords = coords.model_copy(update={"floor": self._plan.id})
            node.coordinates = coords
            self._refresh_distances(node)

        self._changed()
        return MutationResult.APPLIED

    def delete_node(self, node_id: str) -> MutationResult:
        """Remove a node and every connection referencing it."""
        if self.get_node(node_id) is None:
            return MutationResult.NOOP

        remaining = [n for n in self._plan.nodes if n.node_id != node_id]
        for node in remaining:
            if node.is_connected_to(node_id):
                node.connections = [c for c in node.connections if c.node_id != node_id]
        self._plan.nodes = remaining

        logger.info("Deleted node %s", node_id)
        for callback in self._delete_listeners:
            callback(node_id)
        self._changed()
        return MutationResult.APPLIED

    # -- Edges -----------------------------------------------------------------

    def connect(
        self,
        id_a: str,
        id_b: str,
        *,
        unit_mode: UnitMode | str | None = None,
    ) -> MutationResult:
        """Create the symmetric connection ``a <-> b``.

        Idempotent: an existing pair is left alone.  If only one side of the
        pair is present (e.g. hand-edited data) the missing side is added.

        Raises
        ------
        CoordinateSpaceMismatchError
            If *unit_mode* is given and differs from the plan's stored mode.
        """
        node_a = self.get_node(id_a)
        node_b = self.get_node(id_b)
        if node_a is None or node_b is None:
            logger.debug("connect: unknown node in (%s, %s)", id_a, id_b)
            return MutationResult.NOT_FOUND
        if id_a == id_b:
            logger.debug("connect: refusing self-connection on %s", id_a)
            return MutationResult.INVALID_EDGE
        if unit_mode is not None and parse_unit_mode(unit_mode) is not self._plan.unit_mode:
            raise CoordinateSpaceMismatchError(
                f"Cannot connect in {parse_unit_mode(unit_mode).value} mode: "
                f"floor plan coordinates are stored as {self._plan.unit_mode.value}"
            )

        a_has = node_a.is_connected_to(id_b)
        b_has = node_b.is_connected_to(id_a)
        if a_has and b_has:
            return MutationResult.NOOP

        distance = self.distance_policy.distance(node_a, node_b)
        if not a_has:
            node_a.connections = [*node_a.connections, Connection(node_id=id_b, distance=distance)]
        if not b_has:
            node_b.connections = [*node_b.connections, Connection(node_id=id_a, distance=distance)]

        logger.info("Connected %s <-> %s (distance %s)", id_a, id_b, distance)
        self._changed()
        return MutationResult.APPLIED

    def edges(self) -> EdgeView:
        """Unique undirected edges, one per connected pair."""
        return EdgeView(self)

    def iter_edges(self) -> Iterator[Edge]:
        return iter(self.edges())

    def _refresh_distances(self, node: Node) -> None:
        for conn in node.connections:
            other = self.get_node(conn.node_id)
            if other is None:
                continue
            distance = self.distance_policy.distance(node, other)
            conn.distance = distance
            for back in other.connections:
                if back.node_id == node.node_id:
                    back.distance = distance

    # -- Floor-level edits -----------------------------------------------------

    def rename_floor(self, name: str) -> None:
        self._plan.name = name
        self._changed()

    def set_level(self, level: int | str) -> None:
        try:
            self._plan.level = int(level)
        except (TypeError, ValueError):
            self._plan.level = 0
        self._changed()

    def reset(self, floor_plan: FloorPlan) -> None:
        """Replace the whole plan (e.g. after clearing project data)."""
        previous = [n.node_id for n in self._plan.nodes]
        self._plan = floor_plan
        for node_id in previous:
            for callback in self._delete_listeners:
                callback(node_id)
        self._changed()

    def convert_units(
        self,
        target: UnitMode | str,
        image_width: float,
        image_height: float,
    ) -> MutationResult:
        """Rewrite every stored coordinate into the *target* unit mode.

        Distances are recomputed under the active policy.
        """
        target = parse_unit_mode(target)
        source = self._plan.unit_mode
        if target is source:
            return MutationResult.NOOP
        if image_width <= 0 or image_height <= 0:
            raise ValueError("Image size is required to convert coordinates")

        for node in self._plan.nodes:
            raw_x = from_unit(node.coordinates.x, image_width, source)
            raw_y = from_unit(node.coordinates.y, image_height, source)
            node.coordinates = node.coordinates.model_copy(
                update={
                    "x": to_unit(raw_x, image_width, target),
                    "y": to_unit(raw_y, image_height, target),
                }
            )
        self._plan.unit_mode = target
        for node in self._plan.nodes:
            self._refresh_distances(node)

        logger.info(
            "Converted %d nodes from %s to %s", len(self._plan.nodes), source.value, target.value
        )
        self._changed()
        return MutationResult.APPLIED

    def repair(self) -> int:
        """Restore the connection invariants on loaded data.

        Drops self-connections, duplicates and references to missing nodes,
        and mirrors one-sided connections.  Returns the number of fixes.
        """
        ids = {n.node_id for n in self._plan.nodes}
        fixes = 0
        for node in self._plan.nodes:
            kept: list[Connection] = []
            seen: set[str] = set()
            for conn in node.connections:
                if conn.node_id == node.node_id or conn.node_id not in ids or conn.node_id in seen:
                    fixes += 1
                    continue
                seen.add(conn.node_id)
                kept.append(conn)
            if len(kept) != len(node.connections):
                node.connections = kept

        for node in self._plan.nodes:
            for conn in node.connections:
                other = self.get_node(conn.node_id)
                if other is not None and not other.is_connected_to(node.node_id):
                    other.connections = [
                        *other.connections,
                        Connection(node_id=node.node_id, distance=conn.distance),
                    ]
                    fixes += 1

        if fixes:
            logger.warning("Repaired %d connection inconsistencies in %s", fixes, self._plan.id)
            self._changed()
        return fixes
