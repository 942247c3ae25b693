"""FloorPlan — the per-project graph of location nodes over one floor-plan image.

Serialised field names follow the export shape consumed by wayfinding
clients (``nodeId``, ``projectId`` ...); Python code uses the snake_case
attribute names.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from floormap.config import (
    DEFAULT_FLOOR_LEVEL,
    DEFAULT_FLOOR_NAME,
    MAX_SCALE,
    MIN_SCALE,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class UnknownNodeTypeError(ValueError):
    """Raised when a node type outside :class:`NodeType` is supplied."""


class CoordinateSpaceMismatchError(ValueError):
    """Raised when percentage and pixel coordinates would be mixed."""


class NodeType(str, Enum):
    """Closed set of location kinds a node can represent."""

    ROOM = "room"
    CORRIDOR = "corridor"
    DOOR = "door"
    STAIRS = "stairs"
    ELEVATOR = "elevator"


class UnitMode(str, Enum):
    """How stored node coordinates are interpreted."""

    PERCENTAGE = "percentage"
    PIXEL = "pixel"


def parse_node_type(value: NodeType | str) -> NodeType:
    """Return the :class:`NodeType` for *value* or raise :class:`UnknownNodeTypeError`."""
    if isinstance(value, NodeType):
        return value
    try:
        return NodeType(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in NodeType)
        raise UnknownNodeTypeError(
            f"Unknown node type {value!r}; expected one of: {allowed}"
        ) from None


def parse_unit_mode(value: UnitMode | str) -> UnitMode:
    if isinstance(value, UnitMode):
        return value
    return UnitMode(str(value).strip().lower())


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)


class Coordinates(_CamelModel):
    """Position of a node, in the unit mode of its FloorPlan."""

    x: float = 0.0
    y: float = 0.0
    floor: str = ""


class Connection(_CamelModel):
    """One endpoint's view of an undirected edge."""

    node_id: str = Field(alias="nodeId")
    distance: float = Field(default=0.0, ge=0.0)


class Node(_CamelModel):
    """A placed location marker."""

    node_id: str = Field(default_factory=_new_id, alias="nodeId")
    name: str = ""
    type: NodeType = NodeType.ROOM
    coordinates: Coordinates = Field(default_factory=Coordinates)
    connections: list[Connection] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _check_type(cls, value: Any) -> NodeType:
        return parse_node_type(value)

    def is_connected_to(self, node_id: str) -> bool:
        return any(c.node_id == node_id for c in self.connections)


class FloorPlan(_CamelModel):
    """Nodes and edges overlaid on one uploaded image.

    ``unit_mode`` tags the coordinate space every stored ``x``/``y`` is
    expressed in; switching spaces goes through an explicit conversion.
    """

    id: str = Field(default_factory=_new_id)
    project_id: str = Field(alias="projectId")
    name: str = DEFAULT_FLOOR_NAME
    level: int = DEFAULT_FLOOR_LEVEL
    unit_mode: UnitMode = Field(default=UnitMode.PERCENTAGE, alias="unitMode")
    nodes: list[Node] = Field(default_factory=list)

    @classmethod
    def default(
        cls,
        project_id: str,
        unit_mode: UnitMode = UnitMode.PERCENTAGE,
    ) -> FloorPlan:
        """Fresh FloorPlan used when nothing usable is persisted."""
        return cls(project_id=project_id, unit_mode=unit_mode)

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_export(self) -> dict[str, Any]:
        """Canonical export shape (the coordinate-space tag is internal)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"unit_mode"})

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_export(), indent=indent)


class ViewportTransform(_CamelModel):
    """Pan offset and zoom scale mapping floor pixels to screen pixels."""

    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0

    @field_validator("scale")
    @classmethod
    def _clamp_scale(cls, value: float) -> float:
        return clamp_scale(value)


def clamp_scale(value: float) -> float:
    return min(max(value, MIN_SCALE), MAX_SCALE)


class Project(_CamelModel):
    """Project index entry shown on the dashboard."""

    id: str = Field(default_factory=_new_id)
    name: str
    created_at: datetime = Field(default_factory=_utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utc_now, alias="updatedAt")
    node_count: int = Field(default=0, ge=0, alias="nodeCount")
