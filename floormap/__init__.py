"""floormap — floor-plan node editor for indoor wayfinding graphs."""

__version__ = "1.0.0"

from floormap.editor import EditorSession, open_repository
from floormap.graph.distance import DistancePolicy, EuclideanDistance, ZeroDistance
from floormap.graph.model import Edge, FloorGraph, MutationResult
from floormap.interaction.machine import InteractionStateMachine, StatusReadout
from floormap.interaction.modes import Mode, PointerEvent
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
)
from floormap.settings import ConfigManager, EditorConfig, configure_logging
from floormap.storage.blobs import BlobStore
from floormap.storage.repository import ProjectRepository
from floormap.storage.structured import StructuredStore
from floormap.viewport import OutOfBoundsError, ScreenStyle, ViewportEngine, floor_to_screen_style

__all__ = [
    "__version__",
    # Session
    "EditorSession",
    "open_repository",
    # Models
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
    # Viewport
    "OutOfBoundsError",
    "ScreenStyle",
    "ViewportEngine",
    "floor_to_screen_style",
    # Graph
    "DistancePolicy",
    "Edge",
    "EuclideanDistance",
    "FloorGraph",
    "MutationResult",
    "ZeroDistance",
    # Interaction
    "InteractionStateMachine",
    "Mode",
    "PointerEvent",
    "StatusReadout",
    # Storage
    "BlobStore",
    "ProjectRepository",
    "StructuredStore",
    # Configuration
    "ConfigManager",
    "EditorConfig",
    "configure_logging",
]
