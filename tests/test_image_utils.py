import cv2
import numpy as np
import pytest

from linesnap.exceptions import ImageProcessingError
from linesnap.image_utils import OpenCVContourDetector, binarize, enhance_contrast, skeletonize, to_gray


def _paper(h=200, w=300):
    return np.full((h, w, 3), 255, dtype=np.uint8)


def test_contrast_stretch_clips():
    gray = np.array([[0, 100, 128, 200, 255]], dtype=np.uint8)
    out = enhance_contrast(gray, 2.0)
    assert out.tolist() == [[0, 72, 128, 255, 255]]
    assert enhance_contrast(gray, 1.0) is gray


def test_binarize_marks_dark_strokes():
    img = _paper()
    cv2.line(img, (20, 100), (280, 100), (0, 0, 0), 1)
    mask = binarize(to_gray(img))
    assert mask[100, 150] == 255
    assert mask[50, 150] == 0


def test_binarize_blank_and_unknown_method():
    gray = to_gray(_paper())
    assert not binarize(gray).any()
    with pytest.raises(ImageProcessingError):
        binarize(gray, method="magic")


def test_adaptive_binarization():
    img = _paper()
    cv2.line(img, (20, 100), (280, 100), (0, 0, 0), 2)
    mask = binarize(to_gray(img), method="adaptive")
    assert mask[100, 150] == 255
    assert mask[20, 20] == 0


def test_skeleton_thins_thick_stroke():
    mask = np.zeros((60, 200), np.uint8)
    mask[25:34, 20:180] = 255
    skel = skeletonize(mask)
    column = skel[:, 100]
    assert 1 <= int(np.count_nonzero(column)) <= 2
    assert np.count_nonzero(skel) < np.count_nonzero(mask)


def test_detect_contours_returns_closed_chains():
    img = _paper()
    cv2.line(img, (20, 100), (280, 100), (0, 0, 0), 1)
    chains = OpenCVContourDetector().detect_contours(img)
    assert len(chains) == 1
    chain = chains[0]
    assert chain.shape[1] == 2
    assert tuple(chain[0]) == tuple(chain[-1])
    assert chain[:, 0].min() == 20 and chain[:, 0].max() == 280
    assert set(chain[:, 1].tolist()) == {100.0}


def test_detect_contours_accepts_grayscale():
    gray = np.full((100, 100), 255, np.uint8)
    cv2.rectangle(gray, (20, 20), (80, 80), 0, 1)
    chains = OpenCVContourDetector().detect_contours(gray)
    assert len(chains) >= 1


def test_empty_image_is_an_error():
    with pytest.raises(ImageProcessingError):
        OpenCVContourDetector().detect_contours(np.zeros((0, 0, 3), np.uint8))


def test_from_config_reads_contour_section():
    detector = OpenCVContourDetector.from_config({"contrast": 1.5, "binarize": "adaptive", "thin_strokes": False})
    assert detector.contrast == 1.5
    assert detector.binarize_method == "adaptive"
    assert detector.thin_strokes is False
