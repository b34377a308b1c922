import pytest

from conftest import make_line
from linesnap.geometry import Point
from linesnap.segments import extract_segments, merge_collinear_segments


def _identity(p):
    return Point(float(p[0]), float(p[1]))


def _half(p):
    return Point(p[0] / 2.0, p[1] / 2.0)


def test_extract_maps_pixel_to_page_to_screen():
    lines = extract_segments(
        [Point(0, 0), Point(100, 0)], to_page=_half, to_screen=lambda p: Point(p.x * 3, p.y * 3), page_index=2
    )
    assert len(lines) == 1
    line = lines[0]
    assert line.page_start == Point(0.0, 0.0) and line.page_end == Point(50.0, 0.0)
    assert line.start == Point(0.0, 0.0) and line.end == Point(150.0, 0.0)
    assert line.page_index == 2


def test_extract_drops_short_and_zero_length_pairs():
    poly = [Point(0, 0), Point(0, 0), Point(10, 0), Point(50, 0)]
    lines = extract_segments(poly, _identity, _identity, 0, min_length=15.0)
    assert [(l.start, l.end) for l in lines] == [(Point(10, 0), Point(50, 0))]


def test_extract_needs_two_points():
    assert extract_segments([Point(1, 1)], _identity, _identity, 0) == []


def test_touching_collinear_segments_merge():
    a = make_line(0, 0, 50, 0)
    b = make_line(50, 0, 120, 1)
    merged = merge_collinear_segments([a, b])
    assert len(merged) == 1
    assert merged[0].start == Point(0, 0)
    assert merged[0].end == Point(120, 1)


def test_back_tracking_trace_keeps_full_extent():
    out_and_back = [make_line(0, 0, 200, 0), make_line(200, 0, 0, 0)]
    merged = merge_collinear_segments(out_and_back)
    assert len(merged) == 1
    assert merged[0].length == pytest.approx(200.0)


def test_perpendicular_or_distant_segments_stay_apart():
    corner = [make_line(0, 0, 100, 0), make_line(100, 0, 100, 100)]
    assert len(merge_collinear_segments(corner)) == 2
    gap = [make_line(0, 0, 100, 0), make_line(130, 0, 200, 0)]
    assert len(merge_collinear_segments(gap)) == 2


def test_merge_is_idempotent():
    lines = [
        make_line(0, 0, 40, 0),
        make_line(40, 0, 90, 1),
        make_line(90, 1, 90, 80),
        make_line(90, 80, 91, 150),
        make_line(300, 300, 350, 340),
    ]
    once = merge_collinear_segments(lines)
    twice = merge_collinear_segments(once)
    assert [(l.start, l.end) for l in once] == [(l.start, l.end) for l in twice]
    assert len(once) == 3


def test_merge_passes_short_inputs_through():
    line = make_line(0, 0, 10, 0)
    assert merge_collinear_segments([]) == []
    assert merge_collinear_segments([line]) == [line]


def test_merge_rechecks_the_previous_line_after_growing_backwards():
    # the second merge moves the running start next to the first line
    lines = [make_line(0, 0, 100, 0), make_line(150, 0, 108, 0), make_line(112, 0, 190, 0)]
    once = merge_collinear_segments(lines)
    assert len(once) == 1
    assert once[0].length == pytest.approx(190.0)
    twice = merge_collinear_segments(once)
    assert [(l.start, l.end) for l in twice] == [(l.start, l.end) for l in once]


def test_merge_output_has_no_mergeable_neighbours():
    lines = [
        make_line(0, 0, 60, 0),
        make_line(200, 0, 70, 0),
        make_line(72, 0, 300, 0),
        make_line(300, 0, 300, 120),
        make_line(300, 200, 300, 125),
        make_line(300, 128, 300, 260),
    ]
    once = merge_collinear_segments(lines)
    assert [(l.start, l.end) for l in merge_collinear_segments(once)] == [(l.start, l.end) for l in once]
    assert len(once) == 2
