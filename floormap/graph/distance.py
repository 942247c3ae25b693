"""Connection distance policies.

Chosen once when a :class:`~floormap.graph.model.FloorGraph` is built.
"""

from __future__ import annotations

import abc
import math

from floormap.config import DISTANCE_DECIMALS
from floormap.models.floorplan import Node
from floormap.viewport import round_half_up


class DistancePolicy(abc.ABC):
    """Computes the ``distance`` stored on both ends of a new connection."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Short policy identifier used in configuration."""

    @abc.abstractmethod
    def distance(self, a: Node, b: Node) -> float:
        """Return the non-negative distance between *a* and *b*."""


class EuclideanDistance(DistancePolicy):
    """Straight-line distance between stored coordinates, 2 decimals.

    Only meaningful when both nodes use the same coordinate unit mode.
    """

    @property
    def name(self) -> str:
        return "euclidean"

    def distance(self, a: Node, b: Node) -> float:
        dx = b.coordinates.x - a.coordinates.x
        dy = b.coordinates.y - a.coordinates.y
        return round_half_up(math.hypot(dx, dy), DISTANCE_DECIMALS)


class ZeroDistance(DistancePolicy):
    """Every connection gets ``distance = 0``."""

    @property
    def name(self) -> str:
        return "zero"

    def distance(self, a: Node, b: Node) -> float:
        return 0.0


_POLICIES: dict[str, type[DistancePolicy]] = {
    "euclidean": EuclideanDistance,
    "zero": ZeroDistance,
}

DEFAULT_DISTANCE_POLICY = "euclidean"


def get_distance_policy(name: str | None = None) -> DistancePolicy:
    """Instantiate a policy by name (default: ``euclidean``)."""
    key = (name or DEFAULT_DISTANCE_POLICY).strip().lower()
    try:
        return _POLICIES[key]()
    except KeyError:
        raise ValueError(
            f"Unknown distance policy {name!r}; expected one of: {', '.join(sorted(_POLICIES))}"
        ) from None
