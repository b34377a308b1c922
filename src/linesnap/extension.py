"""
Helpers for extending a detected line past one of its endpoints.
"""

from typing import NamedTuple, Optional, Sequence, Tuple

from .geometry import Point, Rect, distance, dot, unit_direction
from .models import Line


class EndpointSplit(NamedTuple):
    """Which end of a line is being dragged and which end stays fixed."""

    extending_start: bool
    anchor: Point
    page_anchor: Point
    dragged: Point
    page_dragged: Point


def split_endpoints(line: Line, endpoint: Sequence[float]) -> EndpointSplit:
    """The end nearer the given screen point is dragged; the other is the anchor."""
    extending_start = distance(endpoint, line.start) < distance(endpoint, line.end)
    if extending_start:
        return EndpointSplit(True, line.end, line.page_end, line.start, line.page_start)
    return EndpointSplit(False, line.start, line.page_start, line.end, line.page_end)


def extension_window(
    page_anchor: Sequence[float], page_dragged: Sequence[float], search_distance: float
) -> Optional[Rect]:
    """Square page-space window of side search_distance just ahead of the dragged end."""
    direction = unit_direction(page_anchor, page_dragged)
    if direction == (0.0, 0.0):
        return None
    half = search_distance / 2
    center = Point(page_dragged[0] + direction.x * half, page_dragged[1] + direction.y * half)
    return Rect.square(center, half)


def select_extension(
    line: Line,
    endpoint: Sequence[float],
    candidates: Sequence[Line],
    collinearity: float = 0.9,
    max_endpoint_gap: float = 50.0,
) -> Optional[Tuple[Line, Point]]:
    """Best collinear continuation among candidates.

    A candidate qualifies when it runs parallel to the line in page space
    and one of its endpoints starts near the dragged end. The winner reaches
    farthest from the anchor; it must lengthen the line.

    Returns:
        (candidate, its far screen endpoint) or None
    """
    split = split_endpoints(line, endpoint)
    direction = unit_direction(split.page_anchor, split.page_dragged)
    if direction == (0.0, 0.0):
        return None

    best: Optional[Tuple[Line, Point]] = None
    max_extension = 0.0
    for candidate in candidates:
        cand_dir = unit_direction(candidate.page_start, candidate.page_end)
        if cand_dir == (0.0, 0.0):
            continue
        if abs(dot(direction, cand_dir)) <= collinearity:
            continue
        if distance(candidate.closest_endpoint(split.dragged), split.dragged) >= max_endpoint_gap:
            continue
        far = candidate.farthest_endpoint(split.dragged)
        extension = distance(far, split.anchor) - line.length
        if extension > max_extension:
            max_extension = extension
            best = (candidate, far)
    return best


def build_extended_line(
    line: Line, endpoint: Sequence[float], new_point: Sequence[float], new_page_point: Sequence[float]
) -> Line:
    """New line from the fixed anchor to new_point, keeping start/end orientation."""
    split = split_endpoints(line, endpoint)
    if split.extending_start:
        return Line(
            start=new_point,
            end=split.anchor,
            page_start=new_page_point,
            page_end=split.page_anchor,
            page_index=line.page_index,
        )
    return Line(
        start=split.anchor,
        end=new_point,
        page_start=split.page_anchor,
        page_end=new_page_point,
        page_index=line.page_index,
    )
