"""Tests for the floor graph: node mutations, symmetric connections, edges."""

from __future__ import annotations

import itertools

import pytest

from floormap.graph.distance import (
    EuclideanDistance,
    ZeroDistance,
    get_distance_policy,
)
from floormap.graph.model import FloorGraph, MutationResult
from floormap.models.floorplan import (
    Connection,
    Coordinates,
    CoordinateSpaceMismatchError,
    FloorPlan,
    Node,
    NodeType,
    UnitMode,
    UnknownNodeTypeError,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plan() -> FloorPlan:
    return FloorPlan.default("project-1")


@pytest.fixture
def graph(plan: FloorPlan) -> FloorGraph:
    return FloorGraph(plan)


def _assert_symmetric(graph: FloorGraph) -> None:
    for node in graph.nodes:
        for conn in node.connections:
            other = graph.get_node(conn.node_id)
            assert other is not None
            assert other.is_connected_to(node.node_id)
            assert conn.node_id != node.node_id


# ---------------------------------------------------------------------------
# Distance policies
# ---------------------------------------------------------------------------


class TestDistancePolicies:
    def test_euclidean(self) -> None:
        a = Node(coordinates=Coordinates(x=10, y=10))
        b = Node(coordinates=Coordinates(x=40, y=50))
        assert EuclideanDistance().distance(a, b) == 50.0

    def test_euclidean_rounds(self) -> None:
        a = Node(coordinates=Coordinates(x=0, y=0))
        b = Node(coordinates=Coordinates(x=1, y=1))
        assert EuclideanDistance().distance(a, b) == 1.41

    def test_euclidean_half_rounds_up(self) -> None:
        a = Node(coordinates=Coordinates(x=0, y=0))
        b = Node(coordinates=Coordinates(x=0.125, y=0))
        assert EuclideanDistance().distance(a, b) == 0.13

    def test_zero(self) -> None:
        a = Node(coordinates=Coordinates(x=0, y=0))
        b = Node(coordinates=Coordinates(x=3, y=4))
        assert ZeroDistance().distance(a, b) == 0.0

    def test_lookup(self) -> None:
        assert get_distance_policy().name == "euclidean"
        assert get_distance_policy("ZERO").name == "zero"
        with pytest.raises(ValueError):
            get_distance_policy("manhattan")


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class TestAddNode:
    def test_sequential_names(self, graph: FloorGraph) -> None:
        first = graph.add_node(10, 20)
        second = graph.add_node(30, 40)
        assert first.name == "Node 1"
        assert second.name == "Node 2"
        assert [n.node_id for n in graph.nodes] == [first.node_id, second.node_id]

    def test_defaults(self, graph: FloorGraph, plan: FloorPlan) -> None:
        node = graph.add_node(12.5, 80)
        assert node.type is NodeType.ROOM
        assert node.connections == []
        assert node.coordinates.floor == plan.id
        assert (node.coordinates.x, node.coordinates.y) == (12.5, 80)

    def test_unique_ids(self, graph: FloorGraph) -> None:
        ids = {graph.add_node(i, i).node_id for i in range(20)}
        assert len(ids) == 20

    def test_explicit_type(self, graph: FloorGraph) -> None:
        assert graph.add_node(1, 1, "stairs").type is NodeType.STAIRS


class TestUpdateNode:
    def test_name(self, graph: FloorGraph) -> None:
        node = graph.add_node(1, 1)
        assert graph.update_node(node.node_id, "name", "Lobby") is MutationResult.APPLIED
        assert graph.get_node(node.node_id).name == "Lobby"

    def test_type(self, graph: FloorGraph) -> None:
        node = graph.add_node(1, 1)
        graph.update_node(node.node_id, "type", "elevator")
        assert node.type is NodeType.ELEVATOR

    def test_unknown_type_rejected(self, graph: FloorGraph) -> None:
        node = graph.add_node(1, 1)
        with pytest.raises(UnknownNodeTypeError):
            graph.update_node(node.node_id, "type", "garage")
        assert node.type is NodeType.ROOM

    def test_coordinates(self, graph: FloorGraph, plan: FloorPlan) -> None:
        node = graph.add_node(1, 1)
        graph.update_node(node.node_id, "coordinates", {"x": 5, "y": 6})
        assert (node.coordinates.x, node.coordinates.y) == (5, 6)
        assert node.coordinates.floor == plan.id

    def test_axis_shorthand(self, graph: FloorGraph) -> None:
        node = graph.add_node(1, 1)
        graph.update_node(node.node_id, "y", "9.5")
        assert node.coordinates.y == 9.5
        assert node.coordinates.x == 1

    def test_missing_node(self, graph: FloorGraph) -> None:
        assert graph.update_node("nope", "name", "X") is MutationResult.NOT_FOUND

    def test_missing_node_with_unknown_type(self, graph: FloorGraph) -> None:
        assert graph.update_node("nope", "type", "office") is MutationResult.NOT_FOUND

    def test_unsupported_field(self, graph: FloorGraph) -> None:
        node = graph.add_node(1, 1)
        with pytest.raises(ValueError):
            graph.update_node(node.node_id, "connections", [])

    def test_moving_node_refreshes_distances(self, graph: FloorGraph) -> None:
        a = graph.add_node(0, 0)
        b = graph.add_node(30, 40)
        graph.connect(a.node_id, b.node_id)
        graph.update_node(b.node_id, "coordinates", {"x": 0, "y": 40})
        assert a.connections[0].distance == 40.0
        assert b.connections[0].distance == 40.0


class TestDeleteNode:
    def test_cascade(self, graph: FloorGraph) -> None:
        hub = graph.add_node(50, 50)
        left = graph.add_node(10, 50)
        right = graph.add_node(90, 50)
        graph.connect(hub.node_id, left.node_id)
        graph.connect(right.node_id, hub.node_id)

        assert graph.delete_node(hub.node_id) is MutationResult.APPLIED
        assert hub.node_id not in graph
        assert len(graph) == 2
        assert left.connections == []
        assert right.connections == []

    def test_leaves_other_edges(self, graph: FloorGraph) -> None:
        a, b, c = (graph.add_node(i, i) for i in range(3))
        graph.connect(a.node_id, b.node_id)
        graph.connect(b.node_id, c.node_id)
        graph.delete_node(a.node_id)
        assert [conn.node_id for conn in graph.get_node(b.node_id).connections] == [c.node_id]

    def test_idempotent(self, graph: FloorGraph) -> None:
        node = graph.add_node(1, 1)
        graph.delete_node(node.node_id)
        assert graph.delete_node(node.node_id) is MutationResult.NOOP
        assert graph.delete_node("never-existed") is MutationResult.NOOP

    def test_listener(self, graph: FloorGraph) -> None:
        deleted: list[str] = []
        graph.add_delete_listener(deleted.append)
        node = graph.add_node(1, 1)
        graph.delete_node(node.node_id)
        graph.delete_node(node.node_id)
        assert deleted == [node.node_id]


# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------


class TestConnect:
    def test_euclidean_distance_both_ends(self, graph: FloorGraph) -> None:
        a = graph.add_node(10, 10)
        b = graph.add_node(40, 50)
        assert graph.connect(a.node_id, b.node_id) is MutationResult.APPLIED
        assert a.connections == [Connection(node_id=b.node_id, distance=50.0)]
        assert b.connections == [Connection(node_id=a.node_id, distance=50.0)]

    def test_zero_policy(self, plan: FloorPlan) -> None:
        graph = FloorGraph(plan, distance_policy=ZeroDistance())
        a = graph.add_node(10, 10)
        b = graph.add_node(40, 50)
        graph.connect(a.node_id, b.node_id)
        assert a.connections[0].distance == 0.0
        assert b.connections[0].distance == 0.0

    def test_self_edge(self, graph: FloorGraph) -> None:
        a = graph.add_node(1, 1)
        assert graph.connect(a.node_id, a.node_id) is MutationResult.INVALID_EDGE
        assert a.connections == []

    def test_unknown_endpoint(self, graph: FloorGraph) -> None:
        a = graph.add_node(1, 1)
        assert graph.connect(a.node_id, "ghost") is MutationResult.NOT_FOUND
        assert graph.connect("ghost", a.node_id) is MutationResult.NOT_FOUND
        assert a.connections == []

    def test_idempotent(self, graph: FloorGraph) -> None:
        a = graph.add_node(1, 1)
        b = graph.add_node(2, 2)
        assert graph.connect(a.node_id, b.node_id) is MutationResult.APPLIED
        assert graph.connect(a.node_id, b.node_id) is MutationResult.NOOP
        assert graph.connect(b.node_id, a.node_id) is MutationResult.NOOP
        assert len(a.connections) == 1
        assert len(b.connections) == 1

    def test_completes_one_sided_pair(self) -> None:
        plan = FloorPlan.default("p")
        plan.nodes = [
            Node(node_id="a", connections=[Connection(node_id="b", distance=7)]),
            Node(node_id="b"),
        ]
        graph = FloorGraph(plan)
        assert graph.connect("a", "b") is MutationResult.APPLIED
        assert len(graph.get_node("a").connections) == 1
        assert graph.get_node("b").is_connected_to("a")

    def test_symmetry_over_many_calls(self, graph: FloorGraph) -> None:
        nodes = [graph.add_node(i * 3, i * 7) for i in range(6)]
        ids = [n.node_id for n in nodes]
        for a, b in itertools.product(ids, repeat=2):
            graph.connect(a, b)
        _assert_symmetric(graph)
        for node in graph.nodes:
            assert len(node.connections) == 5

    def test_unit_mode_mismatch(self, graph: FloorGraph) -> None:
        a = graph.add_node(1, 1)
        b = graph.add_node(2, 2)
        with pytest.raises(CoordinateSpaceMismatchError):
            graph.connect(a.node_id, b.node_id, unit_mode=UnitMode.PIXEL)
        assert graph.connect(a.node_id, b.node_id, unit_mode="percentage") is MutationResult.APPLIED


class TestEdges:
    def test_mutual_connection_yields_one_edge(self) -> None:
        plan = FloorPlan.default("p")
        plan.nodes = [
            Node(node_id="a", connections=[Connection(node_id="b", distance=1)]),
            Node(node_id="b", connections=[Connection(node_id="a", distance=1)]),
        ]
        edges = list(FloorGraph(plan).edges())
        assert len(edges) == 1
        assert edges[0].key == ("a", "b")

    def test_order_independent_key(self) -> None:
        plan = FloorPlan.default("p")
        plan.nodes = [
            Node(node_id="z", connections=[Connection(node_id="m")]),
            Node(node_id="m", connections=[Connection(node_id="z")]),
        ]
        edge = next(iter(FloorGraph(plan).edges()))
        assert edge.source.node_id == "m"
        assert edge.target.node_id == "z"

    def test_restartable(self, graph: FloorGraph) -> None:
        a, b, c = (graph.add_node(i, i) for i in range(3))
        graph.connect(a.node_id, b.node_id)
        graph.connect(b.node_id, c.node_id)
        view = graph.edges()
        assert [e.key for e in view] == [e.key for e in view]
        assert len(view) == 2

    def test_lazy_view_sees_later_changes(self, graph: FloorGraph) -> None:
        a = graph.add_node(0, 0)
        b = graph.add_node(1, 1)
        view = graph.edges()
        assert len(view) == 0
        graph.connect(a.node_id, b.node_id)
        assert len(view) == 1

    def test_skips_dangling_and_self(self) -> None:
        plan = FloorPlan.default("p")
        plan.nodes = [
            Node(
                node_id="a",
                connections=[Connection(node_id="ghost"), Connection(node_id="a")],
            ),
        ]
        assert list(FloorGraph(plan).iter_edges()) == []


# ---------------------------------------------------------------------------
# Floor-level operations
# ---------------------------------------------------------------------------


class TestFloorEdits:
    def test_on_change_after_each_mutation(self, plan: FloorPlan) -> None:
        snapshots: list[int] = []
        graph = FloorGraph(plan, on_change=lambda p: snapshots.append(len(p.nodes)))
        a = graph.add_node(1, 1)
        b = graph.add_node(2, 2)
        graph.connect(a.node_id, b.node_id)
        graph.connect(a.node_id, b.node_id)
        graph.update_node("missing", "name", "x")
        graph.delete_node(a.node_id)
        assert snapshots == [1, 2, 2, 1]

    def test_rename_and_level(self, graph: FloorGraph) -> None:
        graph.rename_floor("First floor")
        graph.set_level("2")
        assert graph.floor_plan.name == "First floor"
        assert graph.floor_plan.level == 2
        graph.set_level("abc")
        assert graph.floor_plan.level == 0

    def test_convert_units(self, graph: FloorGraph) -> None:
        a = graph.add_node(50, 25)
        b = graph.add_node(80, 25)
        graph.connect(a.node_id, b.node_id)
        assert graph.convert_units("pixel", 1000, 400) is MutationResult.APPLIED
        assert graph.unit_mode is UnitMode.PIXEL
        assert (a.coordinates.x, a.coordinates.y) == (500.0, 100.0)
        assert b.coordinates.x == 800.0
        assert a.connections[0].distance == 300.0
        assert b.connections[0].distance == 300.0

    def test_convert_same_mode_is_noop(self, graph: FloorGraph) -> None:
        assert graph.convert_units("percentage", 100, 100) is MutationResult.NOOP

    def test_convert_requires_size(self, graph: FloorGraph) -> None:
        with pytest.raises(ValueError):
            graph.convert_units(UnitMode.PIXEL, 0, 0)

    def test_repair(self) -> None:
        plan = FloorPlan.default("p")
        plan.nodes = [
            Node(
                node_id="a",
                connections=[
                    Connection(node_id="b", distance=2),
                    Connection(node_id="a"),
                    Connection(node_id="zz"),
                    Connection(node_id="b", distance=2),
                ],
            ),
            Node(node_id="b"),
        ]
        graph = FloorGraph(plan)
        assert graph.repair() == 4
        _assert_symmetric(graph)
        assert graph.get_node("b").connections[0].distance == 2
        assert graph.repair() == 0
