"""
Douglas-Peucker polyline simplification for raster contour chains.
"""

from typing import List, Sequence, Union

import numpy as np

from .geometry import Point, perpendicular_distance


def douglas_peucker(
    points: Union[Sequence[Sequence[float]], np.ndarray], epsilon: float
) -> List[Point]:
    """Reduce a dense point chain to a sparse polyline.

    The point of maximum perpendicular distance from the chord between the
    current chain ends is kept when it exceeds ``epsilon``; otherwise the
    chain collapses to its two ends. Works on an explicit stack of index
    ranges so long contours cannot exhaust the recursion limit.

    Args:
        points: Ordered chain, a sequence of (x, y) or an (N, 2) array
        epsilon: Tolerance in the chain's own units (pixels for raster crops)

    Returns:
        Simplified ordered list of points, always including both chain ends
    """
    chain = [Point(float(p[0]), float(p[1])) for p in points]
    n = len(chain)
    if n <= 2:
        return chain

    keep = [False] * n
    keep[0] = keep[n - 1] = True
    stack = [(0, n - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        start, end = chain[first], chain[last]
        max_distance = 0.0
        max_index = first
        for i in range(first + 1, last):
            d = perpendicular_distance(chain[i], start, end)
            if d > max_distance:
                max_distance = d
                max_index = i
        if max_distance > epsilon:
            keep[max_index] = True
            stack.append((max_index, last))
            stack.append((first, max_index))

    return [p for p, kept in zip(chain, keep) if kept]
