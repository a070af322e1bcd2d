from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .geometry import Point, point_segment_distance
from .models import ModelError


def resolve_path(waypoints: Iterable[Point], width: float, height: float) -> List[Point]:
    """Map logical 0..1 waypoints onto a ``width`` x ``height`` arena."""
    return [Point(point[0] * width, point[1] * height) for point in waypoints]


@dataclass(slots=True, frozen=True)
class Path:
    """Resolved waypoint polyline plus the corridor enemies walk along.

    ``placement_padding`` is the tower footprint radius; it widens the
    forbidden zone so a tower cannot sit tangent to the corridor edge.
    """

    points: tuple[Point, ...]
    corridor_width: float
    placement_padding: float = 14.0

    @classmethod
    def from_points(
        cls,
        points: Sequence[Point],
        corridor_width: float,
        placement_padding: float = 14.0,
    ) -> "Path":
        if len(points) < 2:
            raise ModelError(f"A path needs at least 2 waypoints, got {len(points)}.")
        return cls(
            points=tuple(Point(float(p[0]), float(p[1])) for p in points),
            corridor_width=float(corridor_width),
            placement_padding=float(placement_padding),
        )

    def waypoint_count(self) -> int:
        return len(self.points)

    @property
    def last_index(self) -> int:
        return len(self.points) - 1

    def point_at(self, index: int) -> Point:
        # Clamped so an enemy on the final segment never indexes past the goal.
        return self.points[max(0, min(index, self.last_index))]

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def goal(self) -> Point:
        return self.points[-1]

    def distance_to(self, point: Point) -> float:
        """Shortest distance from ``point`` to any segment of the path."""
        return min(point_segment_distance(point, a, b) for a, b in zip(self.points, self.points[1:]))

    def corridor_contains(self, point: Point) -> bool:
        limit = self.corridor_width / 2.0 + self.placement_padding
        return self.distance_to(point) <= limit
