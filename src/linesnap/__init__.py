"""
Interactive line snapping for rasterized technical drawings.
"""

from .config import DetectionConfig
from .corners import find_intersections
from .exceptions import (
    ConfigurationError,
    ImageProcessingError,
    PageResolutionError,
    PDFProcessingError,
    SnapEngineError,
    ValidationError,
)
from .geometry import Point, Rect
from .image_utils import ContourDetector, OpenCVContourDetector
from .models import DetectionQuery, DetectionResult, Intersection, Line
from .pdf_processor import PDFProcessor, RasterCrop, RegionRenderer
from .pipeline import LinePipeline
from .ranking import choose_snap, rank_lines
from .segments import extract_segments, merge_collinear_segments
from .session import LineDetectionService, SessionState
from .simplify import douglas_peucker
from .view import CoordinateMapper, PageFrame, Space, View, map_point

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ContourDetector",
    "CoordinateMapper",
    "DetectionConfig",
    "DetectionQuery",
    "DetectionResult",
    "ImageProcessingError",
    "Intersection",
    "Line",
    "LineDetectionService",
    "LinePipeline",
    "OpenCVContourDetector",
    "PDFProcessingError",
    "PDFProcessor",
    "PageFrame",
    "PageResolutionError",
    "Point",
    "RasterCrop",
    "Rect",
    "RegionRenderer",
    "SessionState",
    "SnapEngineError",
    "Space",
    "ValidationError",
    "View",
    "choose_snap",
    "douglas_peucker",
    "extract_segments",
    "find_intersections",
    "map_point",
    "merge_collinear_segments",
    "rank_lines",
]
