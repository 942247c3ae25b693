"""Floor graph — nodes, symmetric connections and distance policies."""

from floormap.graph.distance import (
    DistancePolicy,
    EuclideanDistance,
    ZeroDistance,
    get_distance_policy,
)
from floormap.graph.model import Edge, EdgeView, FloorGraph, MutationResult

__all__ = [
    "DistancePolicy",
    "Edge",
    "EdgeView",
    "EuclideanDistance",
    "FloorGraph",
    "MutationResult",
    "ZeroDistance",
    "get_distance_policy",
]
