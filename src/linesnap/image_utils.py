"""
Image processing utilities: contrast, binarization and contour tracing.
"""

import logging
from typing import List, Protocol

import cv2
import numpy as np

from .exceptions import ImageProcessingError

logger = logging.getLogger(__name__)


class ContourDetector(Protocol):
    """Returns edge-following point chains, each an (N, 2) array of pixel (x, y)."""

    def detect_contours(self, image: np.ndarray) -> List[np.ndarray]:
        ...


def to_gray(image_bgr: np.ndarray) -> np.ndarray:
    """Convert BGR image to grayscale.

    Args:
        image_bgr: BGR image array

    Returns:
        Grayscale image array
    """
    if image_bgr.ndim == 2:
        return image_bgr
    if image_bgr.shape[2] == 4:
        return cv2.cvtColor(image_bgr, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image_bgr, cv2.COLOR_BGR2GRAY)


def enhance_contrast(gray: np.ndarray, contrast: float = 2.0) -> np.ndarray:
    """Stretch intensities about mid-grey by the contrast factor."""
    if contrast == 1.0:
        return gray
    out = (gray.astype(np.float32) - 128.0) * contrast + 128.0
    return np.clip(out, 0, 255).astype(np.uint8)


def binarize(
    gray: np.ndarray,
    dark_on_light: bool = True,
    method: str = "otsu",
    block_size: int = 41,
    c: int = 10,
) -> np.ndarray:
    """Foreground mask (255) of the strokes.

    Args:
        gray: Grayscale image
        dark_on_light: Strokes are darker than the paper
        method: "otsu" for a global threshold, "adaptive" for local mean
        block_size: Adaptive window size (odd)
        c: Adaptive offset

    Returns:
        Binary image with strokes set to 255
    """
    mode = cv2.THRESH_BINARY_INV if dark_on_light else cv2.THRESH_BINARY
    if method == "adaptive":
        return cv2.adaptiveThreshold(gray, 255, cv2.ADAPTIVE_THRESH_MEAN_C, mode, block_size, c)
    if method != "otsu":
        raise ImageProcessingError(f"unknown binarization method {method!r}", "binarize")
    if int(gray.max()) == int(gray.min()):
        # blank crop; Otsu would split noise-free input arbitrarily
        return np.zeros_like(gray)
    return cv2.threshold(gray, 0, 255, mode + cv2.THRESH_OTSU)[1]


def skeletonize(bin_img: np.ndarray, max_iterations: int = 256) -> np.ndarray:
    """Morphological skeleton so each stroke traces along its centre line."""
    element = cv2.getStructuringElement(cv2.MORPH_CROSS, (3, 3))
    img = bin_img.copy()
    skel = np.zeros_like(bin_img)
    for _ in range(max_iterations):
        eroded = cv2.erode(img, element)
        opened = cv2.dilate(eroded, element)
        skel = cv2.bitwise_or(skel, cv2.subtract(img, opened))
        img = eroded
        if cv2.countNonZero(img) == 0:
            break
    return skel


class OpenCVContourDetector:
    """Contour tracing tuned for dark line work on light paper."""

    def __init__(
        self,
        contrast: float = 2.0,
        dark_on_light: bool = True,
        binarize: str = "otsu",
        adaptive_block_size: int = 41,
        adaptive_c: int = 10,
        thin_strokes: bool = True,
        close_chains: bool = True,
    ):
        self.contrast = contrast
        self.dark_on_light = dark_on_light
        self.binarize_method = binarize
        self.adaptive_block_size = adaptive_block_size
        self.adaptive_c = adaptive_c
        self.thin_strokes = thin_strokes
        self.close_chains = close_chains

    @classmethod
    def from_config(cls, contour_config: dict) -> "OpenCVContourDetector":
        return cls(
            contrast=contour_config.get("contrast", 2.0),
            dark_on_light=contour_config.get("dark_on_light", True),
            binarize=contour_config.get("binarize", "otsu"),
            adaptive_block_size=contour_config.get("adaptive_block_size", 41),
            adaptive_c=contour_config.get("adaptive_c", 10),
            thin_strokes=contour_config.get("thin_strokes", True),
        )

    def prepare(self, image: np.ndarray) -> np.ndarray:
        """Binary stroke mask that contours are traced on."""
        gray = enhance_contrast(to_gray(image), self.contrast)
        mask = binarize(
            gray,
            dark_on_light=self.dark_on_light,
            method=self.binarize_method,
            block_size=self.adaptive_block_size,
            c=self.adaptive_c,
        )
        if self.thin_strokes:
            mask = skeletonize(mask)
        return mask

    def detect_contours(self, image: np.ndarray) -> List[np.ndarray]:
        if image is None or image.size == 0:
            raise ImageProcessingError("empty image", "detect_contours")
        try:
            mask = self.prepare(image)
            # OpenCV 3 returns (image, contours, hierarchy); 4 returns (contours, hierarchy)
            found = cv2.findContours(mask, cv2.RETR_LIST, cv2.CHAIN_APPROX_NONE)
        except cv2.error as e:
            raise ImageProcessingError(str(e), "findContours") from e
        contours = found[-2]

        chains: List[np.ndarray] = []
        for c in contours:
            pts = c.reshape(-1, 2).astype(np.float64)
            if len(pts) < 2:
                continue
            if self.close_chains:
                # findContours chains are closed loops; make the closure explicit
                pts = np.vstack([pts, pts[:1]])
            chains.append(pts)
        logger.debug(f"Traced {len(chains)} contours")
        return chains
