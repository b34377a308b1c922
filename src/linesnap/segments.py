"""
Segment extraction from simplified contours and greedy collinear merging.
"""

import logging
from typing import Callable, List, Sequence

from .geometry import Point, distance, dot, farthest_pair, unit_direction
from .models import Line

logger = logging.getLogger(__name__)

PointMapper = Callable[[Point], Point]


def extract_segments(
    polyline: Sequence[Point],
    to_page: PointMapper,
    to_screen: PointMapper,
    page_index: int,
    min_length: float = 15.0,
) -> List[Line]:
    """Turn consecutive polyline vertices into lines.

    Args:
        polyline: Simplified chain in raster-crop pixel space
        to_page: Maps a pixel-space point to page space
        to_screen: Maps a page-space point to screen space
        page_index: Page the crop was rendered from
        min_length: Minimum screen length; shorter pairs are dropped as noise

    Returns:
        Lines in polyline order
    """
    if len(polyline) < 2:
        return []

    page_points = [to_page(p) for p in polyline]
    screen_points = [to_screen(p) for p in page_points]

    lines: List[Line] = []
    for i in range(len(polyline) - 1):
        start, end = screen_points[i], screen_points[i + 1]
        length = distance(start, end)
        if length == 0 or length < min_length:
            continue
        lines.append(Line(
            start=start,
            end=end,
            page_start=page_points[i],
            page_end=page_points[i + 1],
            page_index=page_index,
        ))
    return lines


def _can_merge(current: Line, nxt: Line, collinearity: float, max_gap: float) -> bool:
    dir_current = unit_direction(current.start, current.end)
    dir_next = unit_direction(nxt.start, nxt.end)
    if dir_current == (0.0, 0.0) or dir_next == (0.0, 0.0):
        return False
    # direction sign does not matter; contour traces run both ways
    if abs(dot(dir_current, dir_next)) <= collinearity:
        return False
    return distance(current.end, nxt.start) < max_gap


def _merge_pair(current: Line, nxt: Line) -> Line:
    """Span the two endpoints farthest apart among both lines."""
    screen = [current.start, current.end, nxt.start, nxt.end]
    page = [current.page_start, current.page_end, nxt.page_start, nxt.page_end]
    i, j = farthest_pair(screen)
    return Line(
        start=screen[i],
        end=screen[j],
        page_start=page[i],
        page_end=page[j],
        page_index=current.page_index,
    )


def merge_collinear_segments(
    lines: Sequence[Line], collinearity: float = 0.95, max_gap: float = 15.0
) -> List[Line]:
    """Greedy left-to-right merge of nearly parallel, nearly touching neighbours.

    Only consecutive lines are compared, so merges across out-of-order chains
    or wider gaps are missed. A merge can move the start of the running line,
    so it is checked again against the line emitted before it; no two
    neighbours in the output can merge.
    """
    if len(lines) < 2:
        return list(lines)

    merged: List[Line] = []
    current = lines[0]
    for nxt in lines[1:]:
        if not _can_merge(current, nxt, collinearity, max_gap):
            merged.append(current)
            current = nxt
            continue
        current = _merge_pair(current, nxt)
        while merged and _can_merge(merged[-1], current, collinearity, max_gap):
            current = _merge_pair(merged.pop(), current)
    merged.append(current)

    if len(merged) != len(lines):
        logger.debug(f"Merged {len(lines)} segments into {len(merged)}")
    return merged
