from __future__ import annotations

import math
from typing import NamedTuple


class Point(NamedTuple):
    x: float
    y: float


def distance(p: Point, q: Point) -> float:
    return math.hypot(p[0] - q[0], p[1] - q[1])


def point_segment_distance(p: Point, a: Point, b: Point) -> float:
    """Distance from ``p`` to the closed segment ``ab``.

    The projection parameter is clamped to [0, 1]; a degenerate segment
    (``a == b``) falls back to the point distance.
    """
    abx = b[0] - a[0]
    aby = b[1] - a[1]
    length_sq = abx * abx + aby * aby
    if length_sq == 0.0:
        return distance(p, a)

    t = ((p[0] - a[0]) * abx + (p[1] - a[1]) * aby) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(p[0] - (a[0] + abx * t), p[1] - (a[1] + aby * t))


def step_towards(origin: Point, target: Point, max_distance: float) -> Point:
    """Move from ``origin`` straight at ``target`` by at most ``max_distance``.

    The step never overshoots: a step that would pass the target lands on it.
    """
    dx = target[0] - origin[0]
    dy = target[1] - origin[1]
    d = math.hypot(dx, dy)
    if d <= max_distance:
        return Point(target[0], target[1])
    return Point(origin[0] + dx / d * max_distance, origin[1] + dy / d * max_distance)
