"""Tests for the pydantic models: FloorPlan, Node, Connection, transform, Project."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from floormap.models.floorplan import (
    Connection,
    Coordinates,
    FloorPlan,
    Node,
    NodeType,
    Project,
    UnitMode,
    UnknownNodeTypeError,
    ViewportTransform,
    parse_node_type,
)


class TestNodeType:
    def test_parse_known_values(self) -> None:
        assert parse_node_type("room") is NodeType.ROOM
        assert parse_node_type("Elevator") is NodeType.ELEVATOR
        assert parse_node_type(NodeType.STAIRS) is NodeType.STAIRS

    def test_parse_unknown_value(self) -> None:
        with pytest.raises(UnknownNodeTypeError):
            parse_node_type("lobby")

    def test_node_rejects_unknown_type(self) -> None:
        with pytest.raises(ValidationError):
            Node(name="X", type="balcony")

    def test_node_type_serialises_as_string(self) -> None:
        node = Node(name="Lift", type="elevator")
        assert node.model_dump(mode="json")["type"] == "elevator"


class TestNode:
    def test_defaults(self) -> None:
        node = Node()
        assert node.node_id != ""
        assert node.type is NodeType.ROOM
        assert node.connections == []

    def test_ids_are_unique(self) -> None:
        assert Node().node_id != Node().node_id

    def test_alias_population(self) -> None:
        node = Node.model_validate(
            {
                "nodeId": "n1",
                "name": "Hall",
                "type": "corridor",
                "coordinates": {"x": 1, "y": 2, "floor": "f1"},
                "connections": [{"nodeId": "n2", "distance": 3.5}],
            }
        )
        assert node.node_id == "n1"
        assert node.coordinates == Coordinates(x=1, y=2, floor="f1")
        assert node.is_connected_to("n2")
        assert not node.is_connected_to("n3")

    def test_negative_distance_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Connection(node_id="n2", distance=-1)


class TestFloorPlan:
    def test_default(self) -> None:
        plan = FloorPlan.default("p1")
        assert plan.project_id == "p1"
        assert plan.name == "Ground floor"
        assert plan.level == 0
        assert plan.nodes == []
        assert plan.unit_mode is UnitMode.PERCENTAGE

    def test_default_ids_differ(self) -> None:
        assert FloorPlan.default("p1").id != FloorPlan.default("p1").id

    def test_export_shape(self) -> None:
        plan = FloorPlan.default("p1")
        plan.nodes.append(
            Node(
                node_id="a",
                name="Node 1",
                coordinates=Coordinates(x=10, y=20, floor=plan.id),
                connections=[Connection(node_id="b", distance=5)],
            )
        )
        exported = plan.to_export()
        assert set(exported) == {"id", "projectId", "name", "level", "nodes"}
        node = exported["nodes"][0]
        assert set(node) == {"nodeId", "name", "type", "coordinates", "connections"}
        assert node["coordinates"] == {"x": 10.0, "y": 20.0, "floor": plan.id}
        assert node["connections"] == [{"nodeId": "b", "distance": 5.0}]

    def test_storage_keeps_unit_mode(self) -> None:
        plan = FloorPlan.default("p1", UnitMode.PIXEL)
        assert plan.to_storage()["unitMode"] == "pixel"

    def test_legacy_data_without_unit_mode(self) -> None:
        plan = FloorPlan.model_validate(
            {"id": "f", "projectId": "p", "name": "L1", "level": 1, "nodes": []}
        )
        assert plan.unit_mode is UnitMode.PERCENTAGE

    def test_to_json(self) -> None:
        plan = FloorPlan.default("p1")
        data = json.loads(plan.to_json())
        assert data["projectId"] == "p1"


class TestViewportTransform:
    def test_defaults(self) -> None:
        t = ViewportTransform()
        assert (t.x, t.y, t.scale) == (0.0, 0.0, 1.0)

    def test_scale_is_clamped(self) -> None:
        assert ViewportTransform(scale=50).scale == 10.0
        assert ViewportTransform(scale=0.01).scale == 0.1


class TestProject:
    def test_defaults(self) -> None:
        p = Project(name="Office")
        assert p.id != ""
        assert p.node_count == 0
        assert p.created_at is not None

    def test_round_trip_aliases(self) -> None:
        p = Project(name="Office", node_count=3)
        data = p.model_dump(mode="json", by_alias=True)
        assert data["nodeCount"] == 3
        assert "createdAt" in data and "updatedAt" in data
        restored = Project.model_validate(data)
        assert restored.id == p.id
        assert restored.created_at == p.created_at
        assert restored.node_count == 3
