"""Pydantic models for projects, floor plans, nodes and the viewport."""

from floormap.models.floorplan import (
    Connection,
    Coordinates,
    CoordinateSpaceMismatchError,
    FloorPlan,
    Node,
    NodeType,
    Project,
    UnitMode,
    UnknownNodeTypeError,
    ViewportTransform,
    clamp_scale,
    parse_node_type,
    parse_unit_mode,
)

__all__ = [
    "Connection",
    "Coordinates",
    "CoordinateSpaceMismatchError",
    "FloorPlan",
    "Node",
    "NodeType",
    "Project",
    "UnitMode",
    "UnknownNodeTypeError",
    "ViewportTransform",
    "clamp_scale",
    "parse_node_type",
    "parse_unit_mode",
]
