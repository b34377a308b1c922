"""
2D point and segment helpers shared by every stage of the snap engine.

Points are plain (x, y) tuples. A point carries no coordinate space of its
own; callers keep track of whether it is in screen, page or raster space.
"""

import math
from typing import NamedTuple, Sequence, Tuple


class Point(NamedTuple):
    x: float
    y: float


class Rect(NamedTuple):
    """Axis-aligned rectangle given by its min and max corners."""

    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    @property
    def center(self) -> Point:
        return Point((self.x0 + self.x1) * 0.5, (self.y0 + self.y1) * 0.5)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def intersect(self, other: "Rect") -> "Rect":
        """Return the overlap of two rectangles (may be empty)."""
        return Rect(
            max(self.x0, other.x0),
            max(self.y0, other.y0),
            min(self.x1, other.x1),
            min(self.y1, other.y1),
        )

    def contains(self, point: Sequence[float]) -> bool:
        return self.x0 <= point[0] <= self.x1 and self.y0 <= point[1] <= self.y1

    @classmethod
    def square(cls, center: Sequence[float], half_side: float) -> "Rect":
        cx, cy = float(center[0]), float(center[1])
        return cls(cx - half_side, cy - half_side, cx + half_side, cy + half_side)


def as_point(value: Sequence[float]) -> Point:
    return Point(float(value[0]), float(value[1]))


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def dot(u: Sequence[float], v: Sequence[float]) -> float:
    return u[0] * v[0] + u[1] * v[1]


def unit_direction(a: Sequence[float], b: Sequence[float]) -> Point:
    """Unit vector from a to b, or (0, 0) when the segment has no length."""
    length = distance(a, b)
    if length == 0:
        return Point(0.0, 0.0)
    return Point((b[0] - a[0]) / length, (b[1] - a[1]) / length)


def perpendicular_distance(
    point: Sequence[float], line_start: Sequence[float], line_end: Sequence[float]
) -> float:
    """Distance from point to the infinite line through line_start and line_end."""
    dx = line_end[0] - line_start[0]
    dy = line_end[1] - line_start[1]
    length = math.hypot(dx, dy)
    if length == 0:
        return distance(point, line_start)
    cross = dy * point[0] - dx * point[1] + line_end[0] * line_start[1] - line_end[1] * line_start[0]
    return abs(cross) / length


def project_onto_segment(
    point: Sequence[float], seg_start: Sequence[float], seg_end: Sequence[float]
) -> Point:
    """Nearest point on the segment, with the projection clamped to [0, length]."""
    length = distance(seg_start, seg_end)
    if length == 0:
        return as_point(seg_start)
    ux, uy = unit_direction(seg_start, seg_end)
    t = (point[0] - seg_start[0]) * ux + (point[1] - seg_start[1]) * uy
    t = min(max(t, 0.0), length)
    return Point(seg_start[0] + ux * t, seg_start[1] + uy * t)


def point_segment_distance(
    point: Sequence[float], seg_start: Sequence[float], seg_end: Sequence[float]
) -> float:
    return distance(point, project_onto_segment(point, seg_start, seg_end))


def closest_endpoint(
    seg_start: Sequence[float], seg_end: Sequence[float], point: Sequence[float]
) -> Point:
    # ties resolve to the end point
    if distance(point, seg_start) < distance(point, seg_end):
        return as_point(seg_start)
    return as_point(seg_end)


def farthest_endpoint(
    seg_start: Sequence[float], seg_end: Sequence[float], point: Sequence[float]
) -> Point:
    # ties resolve to the start point
    if distance(point, seg_start) >= distance(point, seg_end):
        return as_point(seg_start)
    return as_point(seg_end)


def farthest_pair(points: Sequence[Sequence[float]]) -> Tuple[int, int]:
    """Indices of the two points with maximum pairwise distance (O(n^2), small n)."""
    best = (0, 0)
    best_d = -1.0
    for i in range(len(points)):
        for j in range(i + 1, len(points)):
            d = distance(points[i], points[j])
            if d > best_d:
                best = (i, j)
                best_d = d
    return best


def mean_point(points: Sequence[Sequence[float]]) -> Point:
    n = len(points)
    if n == 0:
        return Point(0.0, 0.0)
    return Point(sum(p[0] for p in points) / n, sum(p[1] for p in points) / n)
