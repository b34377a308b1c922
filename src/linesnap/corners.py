"""
Corner detection by clustering nearby line endpoints.
"""

import logging
from typing import List, NamedTuple, Sequence

from .geometry import Point, distance, mean_point
from .models import Intersection, Line

logger = logging.getLogger(__name__)


class _Endpoint(NamedTuple):
    screen: Point
    page: Point
    line: Line


def find_intersections(
    lines: Sequence[Line],
    point: Sequence[float],
    page_index: int,
    tap_proximity: float = 50.0,
    corner_proximity: float = 30.0,
    max_lines: int = 4,
) -> List[Intersection]:
    """Group endpoints near the query point into corners.

    Single pass over the endpoints in line order: an unassigned endpoint
    within tap_proximity of the query seeds a cluster and absorbs every later
    unassigned endpoint closer than corner_proximity to the seed. Clusters
    are not re-centred, so the grouping depends on input order.

    Args:
        lines: Candidate lines, nearest first
        point: Query point in screen space
        page_index: Page the lines belong to
        tap_proximity: Max seed distance from the query point
        corner_proximity: Max endpoint distance from the seed
        max_lines: Cap on member lines per corner

    Returns:
        Corners sorted by distance to the query point
    """
    endpoints: List[_Endpoint] = []
    for line in lines:
        endpoints.append(_Endpoint(line.start, line.page_start, line))
        endpoints.append(_Endpoint(line.end, line.page_end, line))

    assigned = set()
    intersections: List[Intersection] = []
    for i, seed in enumerate(endpoints):
        if i in assigned:
            continue
        if distance(seed.screen, point) > tap_proximity:
            continue

        assigned.add(i)
        members = [seed]
        corner_lines = [seed.line]
        for j in range(i + 1, len(endpoints)):
            if j in assigned:
                continue
            other = endpoints[j]
            if distance(seed.screen, other.screen) < corner_proximity:
                assigned.add(j)
                members.append(other)
                if not any(existing.id == other.line.id for existing in corner_lines):
                    corner_lines.append(other.line)

        intersections.append(Intersection(
            point=mean_point([m.screen for m in members]),
            page_point=mean_point([m.page for m in members]),
            page_index=page_index,
            lines=tuple(corner_lines[:max_lines]),
        ))

    intersections.sort(key=lambda ix: ix.distance_from(point))
    logger.debug(f"Clustered {len(endpoints)} endpoints into {len(intersections)} corners")
    return intersections
