"""
Contour-to-segment pipeline: crop, rasterize, trace, simplify, extract, merge.
"""

import logging
import time
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import DetectionConfig
from .geometry import Point, Rect
from .image_utils import ContourDetector
from .models import Line
from .pdf_processor import RasterCrop, RegionRenderer
from .segments import extract_segments, merge_collinear_segments
from .simplify import douglas_peucker
from .view import CoordinateMapper

logger = logging.getLogger(__name__)


class LinePipeline:
    """Finds straight lines in a bounded page region.

    Detection is best effort: a page that cannot be resolved, a failed
    render or a failing contour primitive all produce an empty list.
    """

    def __init__(
        self,
        renderer: RegionRenderer,
        detector: ContourDetector,
        config: Optional[DetectionConfig] = None,
    ):
        self.renderer = renderer
        self.detector = detector
        self.config = config or DetectionConfig.from_settings()

    def search_rect(self, page_point: Sequence[float], radius: float) -> Rect:
        return Rect.square(page_point, radius)

    def detect_near(
        self, point: Sequence[float], view: CoordinateMapper, radius: Optional[float] = None
    ) -> Tuple[Optional[int], List[Line]]:
        """Lines around a screen point.

        Returns:
            (page_index, lines); page_index is None when no page was resolved
        """
        radius = self.config.search_radius if radius is None else radius
        try:
            page_index = view.page_at(point, nearest=True)
            if page_index is None:
                logger.debug(f"No page under point {point}")
                return None, []
            page_point = view.to_page(point, page_index)
        except Exception as e:
            logger.warning(f"Point {point} could not be resolved: {e}")
            return None, []
        rect = self.search_rect(page_point, radius)
        return page_index, self.detect_in_region(page_index, rect, view)

    def detect_in_region(self, page_index: int, rect: Rect, view: CoordinateMapper) -> List[Line]:
        start = time.perf_counter()
        try:
            crop = self.renderer.render_region(page_index, rect, self.config.render_scale)
        except Exception as e:
            logger.warning(f"Render failed for page {page_index}: {e}")
            return []
        if crop is None:
            logger.debug(f"Nothing rendered for page {page_index} region {rect}")
            return []

        try:
            chains = self.detector.detect_contours(crop.image)
        except Exception as e:
            logger.warning(f"Contour detection failed on page {page_index}: {e}")
            return []

        try:
            lines = self.lines_from_chains(chains, crop, view)
        except Exception as e:
            logger.warning(f"Segment extraction failed on page {page_index}: {e}")
            return []

        elapsed = (time.perf_counter() - start) * 1000
        logger.debug(f"Page {page_index}: {len(chains)} contours -> {len(lines)} lines in {elapsed:.1f}ms")
        return lines

    def lines_from_chains(
        self, chains: Sequence[np.ndarray], crop: RasterCrop, view: CoordinateMapper
    ) -> List[Line]:
        cfg = self.config
        page_index = crop.page_index

        def to_screen(page_point: Point) -> Point:
            return view.to_screen(page_point, page_index)

        lines: List[Line] = []
        for chain in chains:
            if len(chain) < 2:
                continue
            simplified = douglas_peucker(chain, cfg.simplify_epsilon)
            segments = extract_segments(
                simplified,
                to_page=crop.to_page,
                to_screen=to_screen,
                page_index=page_index,
                min_length=cfg.min_segment_length,
            )
            segments = merge_collinear_segments(
                segments, collinearity=cfg.collinearity_threshold, max_gap=cfg.merge_gap
            )
            lines.extend(s for s in segments if s.length >= cfg.min_line_length)
        return lines
