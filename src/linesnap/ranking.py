"""
Distance ranking of candidate lines and the snap policy.
"""

from typing import List, Optional, Sequence, Tuple

from .models import Intersection, Line


def rank_lines(lines: Sequence[Line], point: Sequence[float]) -> List[Line]:
    """Lines sorted by point-to-segment distance, nearest first (stable)."""
    return sorted(lines, key=lambda line: line.distance_from(point))


def choose_snap(
    lines: Sequence[Line],
    intersections: Sequence[Intersection],
    point: Sequence[float],
    corner_snap_distance: float = 40.0,
    line_snap_distance: float = 50.0,
) -> Tuple[Optional[Line], Optional[Intersection]]:
    """Pick the highlight for a query point.

    Both inputs must already be sorted nearest first. A corner within reach
    wins over any line, even a closer one.

    Returns:
        (line, intersection); at most one is set
    """
    if intersections and intersections[0].distance_from(point) < corner_snap_distance:
        return None, intersections[0]
    if lines and lines[0].distance_from(point) < line_snap_distance:
        return lines[0], None
    return None, None
