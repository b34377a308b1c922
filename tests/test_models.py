import pytest

from conftest import make_line
from linesnap.exceptions import ValidationError
from linesnap.geometry import Point
from linesnap.models import DetectionQuery, DetectionResult, Intersection, Line


def test_line_rejects_coincident_endpoints():
    with pytest.raises(ValidationError):
        make_line(5, 5, 5, 5)


def test_line_identity_is_by_id():
    a = make_line(0, 0, 10, 0)
    b = make_line(0, 0, 10, 0)
    assert a != b
    assert a == a
    assert len({a, b, a}) == 2


def test_line_lengths_and_scale():
    line = Line(start=(0, 0), end=(60, 80), page_start=(0, 0), page_end=(30, 40), page_index=0)
    assert line.length == pytest.approx(100.0)
    assert line.page_length == pytest.approx(50.0)
    assert line.real_world_length(0.5) == pytest.approx(100.0)
    assert isinstance(line.start, Point)


def test_near_endpoint_prefers_closer_end():
    line = make_line(0, 0, 20, 0)
    assert line.near_endpoint((2, 0)) == Point(0, 0)
    assert line.near_endpoint((19, 0)) == Point(20, 0)
    assert make_line(0, 0, 200, 0).near_endpoint((100, 0)) is None


def test_page_point_for_returns_matching_page_endpoint():
    line = Line(start=(0, 0), end=(100, 0), page_start=(10, 10), page_end=(60, 10), page_index=1)
    assert line.page_point_for((99, 0)) == Point(60, 10)
    assert line.page_point_for((1, 0)) == Point(10, 10)


def test_intersection_needs_a_line():
    with pytest.raises(ValidationError):
        Intersection(point=(0, 0), page_point=(0, 0), page_index=0, lines=())


def test_result_serializes_ids():
    line = make_line(0, 0, 100, 0)
    corner = Intersection(point=(0, 0), page_point=(0, 0), page_index=0, lines=[line])
    result = DetectionResult(
        lines=(line,),
        intersections=(corner,),
        highlighted_intersection=corner,
        query=DetectionQuery(point=Point(1, 1), search_radius=250.0, page_index=0),
    )
    data = result.to_dict()
    assert data["highlighted_intersection"] == corner.id
    assert data["highlighted_line"] is None
    assert data["intersections"][0]["line_ids"] == [line.id]
    assert data["lines"][0]["page_length"] == 100.0
    assert data["query"]["search_radius"] == 250.0
    assert result.has_highlight and not result.is_empty


def test_empty_result():
    result = DetectionResult.empty()
    assert result.is_empty
    assert not result.has_highlight
    assert "query" not in result.to_dict()
