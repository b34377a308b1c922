"""
Coordinate mapping between screen, page and raster-crop space.

Page space follows PyMuPDF: origin at the top-left of the page, y down, in
PDF points. Screen space places each page with an origin and a zoom factor.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, Tuple

from .exceptions import PageResolutionError
from .geometry import Point, Rect, distance

if TYPE_CHECKING:
    from .pdf_processor import RasterCrop


class Space(str, Enum):
    SCREEN = "screen"
    PAGE = "page"
    RASTER = "raster"


class CoordinateMapper(Protocol):
    """What the engine needs from the host's view transform."""

    def page_at(self, point: Sequence[float], nearest: bool = True) -> Optional[int]:
        ...

    def to_page(self, point: Sequence[float], page_index: int) -> Point:
        ...

    def to_screen(self, point: Sequence[float], page_index: int) -> Point:
        ...


@dataclass(frozen=True)
class PageFrame:
    """Placement of one page on screen: screen = origin + page * zoom."""

    page_index: int
    origin: Point
    zoom: float
    width: float
    height: float

    @property
    def screen_rect(self) -> Rect:
        return Rect(
            self.origin[0],
            self.origin[1],
            self.origin[0] + self.width * self.zoom,
            self.origin[1] + self.height * self.zoom,
        )

    def to_page(self, point: Sequence[float]) -> Point:
        return Point((point[0] - self.origin[0]) / self.zoom, (point[1] - self.origin[1]) / self.zoom)

    def to_screen(self, point: Sequence[float]) -> Point:
        return Point(self.origin[0] + point[0] * self.zoom, self.origin[1] + point[1] * self.zoom)


@dataclass(frozen=True)
class View:
    """A laid-out set of pages under the current view transform."""

    frames: Tuple[PageFrame, ...]

    @classmethod
    def single_page(
        cls,
        width: float,
        height: float,
        zoom: float = 1.0,
        origin: Sequence[float] = (0.0, 0.0),
        page_index: int = 0,
    ) -> "View":
        return cls((PageFrame(page_index, Point(float(origin[0]), float(origin[1])), zoom, width, height),))

    def frame(self, page_index: int) -> PageFrame:
        for f in self.frames:
            if f.page_index == page_index:
                return f
        raise PageResolutionError(f"page {page_index} is not part of the view")

    def page_at(self, point: Sequence[float], nearest: bool = True) -> Optional[int]:
        """Page under a screen point, or the nearest page when nearest is set."""
        if not self.frames:
            return None
        for f in self.frames:
            if f.screen_rect.contains(point):
                return f.page_index
        if not nearest:
            return None
        return min(self.frames, key=lambda f: distance(point, f.screen_rect.center)).page_index

    def to_page(self, point: Sequence[float], page_index: int) -> Point:
        return self.frame(page_index).to_page(point)

    def to_screen(self, point: Sequence[float], page_index: int) -> Point:
        return self.frame(page_index).to_screen(point)


def map_point(
    point: Sequence[float],
    source: Space,
    target: Space,
    mapper: CoordinateMapper,
    page_index: int,
    crop: Optional["RasterCrop"] = None,
) -> Point:
    """Convert a point between any two coordinate spaces.

    Raster space needs the crop the point belongs to.
    """
    if (Space.RASTER in (source, target)) and crop is None:
        raise PageResolutionError("raster-space mapping requires a crop")

    if source == Space.SCREEN:
        page = mapper.to_page(point, page_index)
    elif source == Space.RASTER:
        page = crop.to_page(point)
    else:
        page = Point(float(point[0]), float(point[1]))

    if target == Space.SCREEN:
        return mapper.to_screen(page, page_index)
    if target == Space.RASTER:
        return crop.to_pixel(page)
    return page
