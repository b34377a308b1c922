"""
Interactive detection session: queries, extensions and the published result.
"""

import asyncio
import functools
import logging
from concurrent.futures import Executor
from dataclasses import replace
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .config import DetectionConfig
from .corners import find_intersections
from .exceptions import SnapEngineError
from .extension import build_extended_line, extension_window, select_extension, split_endpoints
from .geometry import as_point
from .models import DetectionQuery, DetectionResult, Line
from .pipeline import LinePipeline
from .ranking import choose_snap, rank_lines
from .view import CoordinateMapper

logger = logging.getLogger(__name__)

Subscriber = Callable[[DetectionResult], None]


class SessionState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    DETECTED = "detected"
    HIGHLIGHTED = "highlighted"


class LineDetectionService:
    """Owns the current DetectionResult for one interaction.

    All methods are meant to be called from one event loop. Raster work runs
    in an executor; each query, extension or clear takes a new generation
    number, and a result is only published if its generation is still the
    latest when it completes.
    """

    def __init__(
        self,
        pipeline: LinePipeline,
        config: Optional[DetectionConfig] = None,
        executor: Optional[Executor] = None,
    ):
        self.pipeline = pipeline
        self.config = config or pipeline.config
        self._executor = executor
        self._result = DetectionResult.empty()
        self._active = False
        self._generation = 0
        self._in_flight = 0
        self._subscribers: List[Subscriber] = []

    @property
    def result(self) -> DetectionResult:
        return self._result

    @property
    def highlighted_line(self) -> Optional[Line]:
        return self._result.highlighted_line

    @property
    def is_detecting(self) -> bool:
        return self._in_flight > 0

    @property
    def state(self) -> SessionState:
        if self._in_flight > 0:
            return SessionState.SEARCHING
        if not self._active:
            return SessionState.IDLE
        if self._result.has_highlight:
            return SessionState.HIGHLIGHTED
        return SessionState.DETECTED

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an observer of published snapshots; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, result: DetectionResult, active: bool = True) -> None:
        self._result = result
        self._active = active
        for callback in list(self._subscribers):
            try:
                callback(result)
            except Exception as e:
                logger.warning(f"Detection subscriber failed: {e}")

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int, what: str) -> bool:
        if generation != self._generation:
            logger.debug(f"Discarding stale {what} result (generation {generation} < {self._generation})")
            return False
        return True

    async def _run(self, fn, *args):
        loop = asyncio.get_running_loop()
        self._in_flight += 1
        try:
            return await loop.run_in_executor(self._executor, functools.partial(fn, *args))
        finally:
            self._in_flight -= 1

    async def detect_lines_near(
        self,
        point: Sequence[float],
        view: CoordinateMapper,
        search_radius: Optional[float] = None,
    ) -> DetectionResult:
        """Detect lines and corners around a screen point and publish the outcome.

        Args:
            point: Query point in screen space
            view: Current view transform
            search_radius: Half side of the search square in page units

        Returns:
            The computed result, also published unless a newer request superseded it
        """
        point = as_point(point)
        radius = self.config.search_radius if search_radius is None else search_radius
        generation = self._next_generation()

        page_index, lines = await self._run(self.pipeline.detect_near, point, view, radius)

        query = DetectionQuery(point=point, search_radius=radius, page_index=page_index)
        ranked = rank_lines(lines, point)
        intersections = []
        if page_index is not None:
            intersections = find_intersections(
                ranked,
                point,
                page_index,
                tap_proximity=self.config.tap_proximity,
                corner_proximity=self.config.corner_proximity,
                max_lines=self.config.max_corner_lines,
            )
        line, corner = choose_snap(
            ranked,
            intersections,
            point,
            corner_snap_distance=self.config.corner_snap_distance,
            line_snap_distance=self.config.line_snap_distance,
        )
        result = DetectionResult(
            lines=tuple(ranked),
            intersections=tuple(intersections),
            highlighted_line=line,
            highlighted_intersection=corner,
            query=query,
        )
        logger.info(
            f"Detected {len(ranked)} lines, {len(intersections)} corners near "
            f"({point.x:.1f}, {point.y:.1f})"
        )
        if self._is_current(generation, "detection"):
            self._publish(result)
        return result

    async def extend_line(
        self,
        line: Line,
        endpoint: Sequence[float],
        view: CoordinateMapper,
        search_distance: Optional[float] = None,
    ) -> Optional[Line]:
        """Search ahead of the dragged endpoint for a collinear continuation.

        Returns:
            The merged line, or None when no continuation qualifies
        """
        distance = self.config.extension_search_distance if search_distance is None else search_distance
        split = split_endpoints(line, endpoint)
        rect = extension_window(split.page_anchor, split.page_dragged, distance)
        if rect is None:
            return None
        generation = self._next_generation()

        candidates = await self._run(self.pipeline.detect_in_region, line.page_index, rect, view)

        chosen = select_extension(
            line,
            endpoint,
            candidates,
            collinearity=self.config.extension_collinearity,
            max_endpoint_gap=self.config.extension_max_gap,
        )
        if chosen is None:
            logger.debug(f"No extension found among {len(candidates)} candidates")
            return None
        candidate, far = chosen
        merged = build_extended_line(line, endpoint, far, candidate.page_point_for(far))
        logger.info(f"Extended line {line.id} from {line.length:.1f} to {merged.length:.1f}")

        if self._is_current(generation, "extension"):
            query = DetectionQuery(point=split.dragged, search_radius=distance / 2, page_index=line.page_index)
            others = tuple(rank_lines(candidates, split.dragged))
            self._publish(DetectionResult(lines=(merged,) + others, highlighted_line=merged, query=query))
        return merged

    async def extend_line_to_point(
        self,
        line: Line,
        endpoint: Sequence[float],
        target: Sequence[float],
        view: CoordinateMapper,
    ) -> Optional[Line]:
        """Stretch the line from its fixed end to a target point without raster checks.

        Returns:
            The new line, or None if the target falls on the fixed end
        """
        generation = self._next_generation()
        split = split_endpoints(line, endpoint)
        try:
            page_target = view.to_page(target, line.page_index)
            screen_target = view.to_screen(page_target, line.page_index)
        except SnapEngineError as e:
            logger.warning(f"Cannot map target {target}: {e}")
            return None
        if screen_target == split.anchor or page_target == split.page_anchor:
            return None

        extended = build_extended_line(line, endpoint, screen_target, page_target)
        if self._is_current(generation, "manual extension"):
            query = DetectionQuery(point=screen_target, search_radius=0.0, page_index=line.page_index)
            self._publish(DetectionResult(lines=(extended,), highlighted_line=extended, query=query))
        return extended

    def select_line(self, line: Line) -> None:
        """Highlight a line without re-querying."""
        self._publish(replace(self._result, highlighted_line=line, highlighted_intersection=None))

    def clear_detection(self) -> None:
        """Drop all results and supersede any request still in flight."""
        self._next_generation()
        self._publish(DetectionResult.empty(), active=False)
