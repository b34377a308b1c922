"""
Value types produced by line detection: lines, corners and result snapshots.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from .exceptions import ValidationError
from .geometry import (
    Point,
    as_point,
    closest_endpoint,
    distance,
    farthest_endpoint,
    point_segment_distance,
)


def _new_id() -> str:
    return uuid.uuid4().hex


def _point_dict(p: Point) -> Dict[str, float]:
    return {"x": round(p.x, 3), "y": round(p.y, 3)}


@dataclass(frozen=True, eq=False)
class Line:
    """A detected straight segment in both screen and page space.

    Screen endpoints are only valid for the view transform active at
    detection time; a line is not re-mapped when the view changes.
    """

    start: Point
    end: Point
    page_start: Point
    page_end: Point
    page_index: int
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        object.__setattr__(self, "start", as_point(self.start))
        object.__setattr__(self, "end", as_point(self.end))
        object.__setattr__(self, "page_start", as_point(self.page_start))
        object.__setattr__(self, "page_end", as_point(self.page_end))
        if self.start == self.end:
            raise ValidationError("line endpoints coincide", "start")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Line):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def length(self) -> float:
        return distance(self.start, self.end)

    @property
    def page_length(self) -> float:
        return distance(self.page_start, self.page_end)

    def real_world_length(self, scale: float) -> float:
        """Length in drawing units, given page units per drawing unit."""
        return self.page_length / scale

    def distance_from(self, point: Sequence[float]) -> float:
        return point_segment_distance(point, self.start, self.end)

    def near_endpoint(self, point: Sequence[float], threshold: float = 30) -> Optional[Point]:
        """Return the endpoint within threshold of point, preferring the closer one."""
        dist_start = distance(point, self.start)
        dist_end = distance(point, self.end)
        if dist_start < threshold and dist_start < dist_end:
            return self.start
        if dist_end < threshold:
            return self.end
        return None

    def closest_endpoint(self, point: Sequence[float]) -> Point:
        return closest_endpoint(self.start, self.end, point)

    def farthest_endpoint(self, point: Sequence[float]) -> Point:
        return farthest_endpoint(self.start, self.end, point)

    def page_point_for(self, screen_endpoint: Sequence[float]) -> Point:
        """Page-space twin of whichever screen endpoint is nearer the given point."""
        if distance(screen_endpoint, self.start) > distance(screen_endpoint, self.end):
            return self.page_end
        return self.page_start

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "page_index": self.page_index,
            "start": _point_dict(self.start),
            "end": _point_dict(self.end),
            "page_start": _point_dict(self.page_start),
            "page_end": _point_dict(self.page_end),
            "length": round(self.length, 3),
            "page_length": round(self.page_length, 3),
        }


@dataclass(frozen=True, eq=False)
class Intersection:
    """A corner: one to four line endpoints clustered around a point.

    A single member line is a valid dangling-endpoint snap target.
    """

    point: Point
    page_point: Point
    page_index: int
    lines: Tuple[Line, ...]
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        object.__setattr__(self, "point", as_point(self.point))
        object.__setattr__(self, "page_point", as_point(self.page_point))
        object.__setattr__(self, "lines", tuple(self.lines))
        if not self.lines:
            raise ValidationError("intersection needs at least one line", "lines")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Intersection):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def distance_from(self, other_point: Sequence[float]) -> float:
        return distance(self.point, other_point)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "page_index": self.page_index,
            "point": _point_dict(self.point),
            "page_point": _point_dict(self.page_point),
            "line_ids": [line.id for line in self.lines],
        }


@dataclass(frozen=True)
class DetectionQuery:
    point: Point
    search_radius: float
    page_index: Optional[int] = None


@dataclass(frozen=True)
class DetectionResult:
    """Immutable snapshot of one detection or extension outcome."""

    lines: Tuple[Line, ...] = ()
    intersections: Tuple[Intersection, ...] = ()
    highlighted_line: Optional[Line] = None
    highlighted_intersection: Optional[Intersection] = None
    query: Optional[DetectionQuery] = None

    @classmethod
    def empty(cls, query: Optional[DetectionQuery] = None) -> "DetectionResult":
        return cls(query=query)

    @property
    def is_empty(self) -> bool:
        return not self.lines and not self.intersections

    @property
    def has_highlight(self) -> bool:
        return self.highlighted_line is not None or self.highlighted_intersection is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "lines": [line.to_dict() for line in self.lines],
            "intersections": [ix.to_dict() for ix in self.intersections],
            "highlighted_line": self.highlighted_line.id if self.highlighted_line else None,
            "highlighted_intersection": (
                self.highlighted_intersection.id if self.highlighted_intersection else None
            ),
        }
        if self.query is not None:
            data["query"] = {
                "point": _point_dict(self.query.point),
                "search_radius": self.query.search_radius,
                "page_index": self.query.page_index,
            }
        return data
