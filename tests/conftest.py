"""Shared test fixtures: synthetic renderers, scripted detectors, static pipelines."""

import threading
from typing import Dict, List, Optional, Sequence, Tuple

import cv2
import fitz
import numpy as np
import pytest

from linesnap.config import DetectionConfig
from linesnap.exceptions import ImageProcessingError, PDFProcessingError
from linesnap.geometry import Point, Rect
from linesnap.models import Line
from linesnap.pdf_processor import RasterCrop
from linesnap.view import View

PAGE_WIDTH = 600.0
PAGE_HEIGHT = 800.0


def make_line(x0: float, y0: float, x1: float, y1: float, page_index: int = 0) -> Line:
    """Line whose screen and page coordinates coincide (zoom 1, origin 0)."""
    return Line(
        start=Point(x0, y0),
        end=Point(x1, y1),
        page_start=Point(x0, y0),
        page_end=Point(x1, y1),
        page_index=page_index,
    )


class SyntheticRenderer:
    """Draws page-space strokes onto a white crop, like a scanned drawing."""

    def __init__(self, strokes: Sequence[Tuple[Tuple[float, float], Tuple[float, float]]] = (),
                 width: float = PAGE_WIDTH, height: float = PAGE_HEIGHT, thickness: int = 1):
        self.strokes = list(strokes)
        self.bounds = Rect(0.0, 0.0, width, height)
        self.thickness = thickness
        self.calls: List[Tuple[int, Rect, float]] = []

    def page_bounds(self, page_index: int) -> Optional[Rect]:
        return self.bounds if page_index == 0 else None

    def render_region(self, page_index: int, rect: Rect, scale: float) -> Optional[RasterCrop]:
        self.calls.append((page_index, rect, scale))
        if page_index != 0:
            return None
        clamped = rect.intersect(self.bounds)
        if clamped.is_empty:
            return None
        w = int(round(clamped.width * scale))
        h = int(round(clamped.height * scale))
        img = np.full((h, w, 3), 255, dtype=np.uint8)
        crop = RasterCrop(image=img, rect=clamped, scale=scale, page_index=page_index)
        for p0, p1 in self.strokes:
            a = crop.to_pixel(p0)
            b = crop.to_pixel(p1)
            cv2.line(img, (int(round(a.x)), int(round(a.y))), (int(round(b.x)), int(round(b.y))),
                     (0, 0, 0), self.thickness)
        return crop


class FailingRenderer:
    def page_bounds(self, page_index: int) -> Optional[Rect]:
        return Rect(0.0, 0.0, PAGE_WIDTH, PAGE_HEIGHT)

    def render_region(self, page_index: int, rect: Rect, scale: float) -> Optional[RasterCrop]:
        raise PDFProcessingError("out of memory")


class ScriptedDetector:
    """Returns fixed pixel-space chains regardless of the image."""

    def __init__(self, chains: Sequence[np.ndarray] = (), error: Optional[Exception] = None):
        self.chains = [np.asarray(c, dtype=np.float64) for c in chains]
        self.error = error
        self.images: List[np.ndarray] = []

    def detect_contours(self, image: np.ndarray) -> List[np.ndarray]:
        self.images.append(image)
        if self.error is not None:
            raise self.error
        return list(self.chains)


class StaticPipeline:
    """Pipeline stand-in returning canned lines, optionally gated per call."""

    def __init__(self, near_lines: Sequence[Line] = (), region_lines: Sequence[Line] = (),
                 page_index: Optional[int] = 0, gated: bool = False):
        self.config = DetectionConfig()
        self.near_lines = list(near_lines)
        self.region_lines = list(region_lines)
        self.page_index = page_index
        self.gated = gated
        self.started: List[Point] = []
        self.regions: List[Tuple[int, Rect]] = []
        self.responses: Dict[int, List[Line]] = {}
        self._events: Dict[int, threading.Event] = {}
        self._lock = threading.Lock()

    def release(self, call_index: int) -> None:
        with self._lock:
            self._events.setdefault(call_index, threading.Event()).set()

    def detect_near(self, point, view, radius=None):
        with self._lock:
            idx = len(self.started)
            self.started.append(Point(*point))
            event = self._events.setdefault(idx, threading.Event())
        if self.gated:
            event.wait(timeout=5)
        return self.page_index, list(self.responses.get(idx, self.near_lines))

    def detect_in_region(self, page_index, rect, view):
        self.regions.append((page_index, rect))
        return list(self.region_lines)


@pytest.fixture
def view() -> View:
    return View.single_page(PAGE_WIDTH, PAGE_HEIGHT)


@pytest.fixture
def scan_error() -> ImageProcessingError:
    return ImageProcessingError("contour primitive crashed", "findContours")


@pytest.fixture
def pdf_bytes() -> bytes:
    """One 600x800 page with a single horizontal line from (100, 300) to (300, 300)."""
    doc = fitz.open()
    page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    page.draw_line(fitz.Point(100, 300), fitz.Point(300, 300), color=(0, 0, 0), width=1)
    data = doc.tobytes()
    doc.close()
    return data
