"""
Page region rendering for line detection.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence, Union

import cv2
import fitz  # PyMuPDF
import numpy as np

from .config import PERFORMANCE_CONFIG
from .exceptions import PDFProcessingError
from .geometry import Point, Rect
from .memory_manager import MemoryManager, cap_render_scale

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RasterCrop:
    """A rendered page region.

    ``rect`` is the clamped page rectangle actually rendered; pixel (0, 0)
    is its top-left corner and one page unit spans ``scale`` pixels.
    """

    image: np.ndarray
    rect: Rect
    scale: float
    page_index: int

    @property
    def size(self):
        h, w = self.image.shape[:2]
        return w, h

    def to_page(self, pixel: Sequence[float]) -> Point:
        return Point(self.rect.x0 + pixel[0] / self.scale, self.rect.y0 + pixel[1] / self.scale)

    def to_pixel(self, page_point: Sequence[float]) -> Point:
        return Point((page_point[0] - self.rect.x0) * self.scale, (page_point[1] - self.rect.y0) * self.scale)


class RegionRenderer(Protocol):
    """Source of rasterized page regions."""

    def page_bounds(self, page_index: int) -> Optional[Rect]:
        ...

    def render_region(self, page_index: int, rect: Rect, scale: float) -> Optional[RasterCrop]:
        ...


class PDFProcessor:
    """Renders rectangular regions of PDF pages with PyMuPDF."""

    def __init__(self, source: Union[Path, str, bytes], max_image_dimension: Optional[int] = None):
        self.source = source
        self.max_image_dimension = max_image_dimension or PERFORMANCE_CONFIG["max_image_dimension"]
        self.memory_manager = MemoryManager(PERFORMANCE_CONFIG.get("memory_limit_mb"))
        self._doc = None
        # fitz documents must not be used from several threads at once
        self._lock = threading.Lock()

    @property
    def _label(self) -> Optional[str]:
        if isinstance(self.source, (bytes, bytearray)):
            return "<memory>"
        return str(self.source)

    def open(self) -> "PDFProcessor":
        if self._doc is not None:
            return self
        try:
            if isinstance(self.source, (bytes, bytearray)):
                self._doc = fitz.open(stream=bytes(self.source), filetype="pdf")
            else:
                path = Path(self.source)
                if not path.exists():
                    raise FileNotFoundError(path)
                self._doc = fitz.open(path.as_posix())
        except FileNotFoundError:
            raise PDFProcessingError("PDF file not found", self._label)
        except PermissionError:
            raise PDFProcessingError("PDF file is not readable", self._label)
        except Exception as e:
            raise PDFProcessingError(f"cannot open PDF: {e}", self._label) from e
        logger.info(f"Opened PDF {self._label} ({len(self._doc)} pages)")
        return self

    def close(self) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None

    def __enter__(self) -> "PDFProcessor":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def page_count(self) -> int:
        self.open()
        return len(self._doc)

    def page_bounds(self, page_index: int) -> Optional[Rect]:
        self.open()
        if not 0 <= page_index < len(self._doc):
            return None
        r = self._doc.load_page(page_index).rect
        return Rect(r.x0, r.y0, r.x1, r.y1)

    def render_region(self, page_index: int, rect: Rect, scale: float) -> Optional[RasterCrop]:
        """Render the part of rect that lies on the page.

        Args:
            page_index: Zero-based page number
            rect: Region in page coordinates
            scale: Pixels per page unit

        Returns:
            BGR crop, or None when the region misses the page entirely
        """
        bounds = self.page_bounds(page_index)
        if bounds is None:
            logger.debug(f"Page {page_index} does not exist")
            return None
        clamped = rect.intersect(bounds)
        if clamped.is_empty:
            logger.debug(f"Region {rect} lies outside page {page_index}")
            return None

        effective_scale = cap_render_scale(clamped.width, clamped.height, scale, self.max_image_dimension)
        try:
            with self._lock, self.memory_manager.memory_guard(f"page {page_index} region render"):
                page = self._doc.load_page(page_index)
                pix = page.get_pixmap(
                    matrix=fitz.Matrix(effective_scale, effective_scale),
                    clip=fitz.Rect(clamped.x0, clamped.y0, clamped.x1, clamped.y1),
                    alpha=False,
                )
                img = np.frombuffer(pix.samples, dtype=np.uint8).reshape(pix.height, pix.width, pix.n)
                if pix.n == 4:
                    img = cv2.cvtColor(img, cv2.COLOR_RGBA2BGR)
                elif pix.n == 3:
                    # PyMuPDF gives RGB
                    img = cv2.cvtColor(img, cv2.COLOR_RGB2BGR)
                else:
                    img = img.reshape(pix.height, pix.width).copy()
        except Exception as e:
            raise PDFProcessingError(f"page {page_index} region: {e}", self._label) from e

        if img.size == 0:
            return None
        # pixmap size is rounded to whole pixels
        actual_scale = img.shape[1] / clamped.width
        logger.debug(f"Rendered page {page_index} region {clamped} at {actual_scale:.2f}x: {img.shape}")
        return RasterCrop(image=img, rect=clamped, scale=actual_scale, page_index=page_index)

    @staticmethod
    def validate_pdf(pdf_path: Path) -> bool:
        """Validate PDF file integrity.

        Args:
            pdf_path: Path to PDF file

        Returns:
            True if PDF is valid, False otherwise
        """
        try:
            doc = fitz.open(Path(pdf_path).as_posix())
            page_count = len(doc)
            doc.close()
            return page_count > 0
        except Exception:
            return False

    def get_pdf_info(self) -> dict:
        """Get PDF document information."""
        self.open()
        info = {
            "page_count": len(self._doc),
            "metadata": self._doc.metadata,
            "pages": [],
        }
        for i in range(len(self._doc)):
            r = self._doc.load_page(i).rect
            info["pages"].append({"index": i, "width": r.width, "height": r.height})
        if not isinstance(self.source, (bytes, bytearray)):
            info["file_size"] = Path(self.source).stat().st_size
        return info
