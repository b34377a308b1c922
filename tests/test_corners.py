from conftest import make_line
from linesnap.corners import find_intersections
from linesnap.geometry import Point


def test_two_lines_meeting_form_one_corner():
    a = make_line(100, 100, 300, 100)
    b = make_line(102, 101, 100, 300)
    corners = find_intersections([a, b], (105, 105), 0)
    assert len(corners) == 1
    corner = corners[0]
    assert set(l.id for l in corner.lines) == {a.id, b.id}
    assert corner.point == Point(101.0, 100.5)
    assert corner.page_index == 0


def test_dangling_endpoint_is_a_single_line_corner():
    a = make_line(100, 100, 300, 100)
    corners = find_intersections([a], (110, 100), 0)
    assert len(corners) == 1
    assert corners[0].lines == (a,)


def test_endpoints_out_of_tap_range_do_not_seed():
    a = make_line(0, 100, 300, 100)
    assert find_intersections([a], (150, 100), 0) == []


def test_member_lines_are_capped_at_four():
    spokes = [
        make_line(100, 100, 300, 100),
        make_line(100, 100, 100, 300),
        make_line(100, 100, -100, 100),
        make_line(100, 100, 100, -100),
        make_line(100, 100, 250, 250),
        make_line(100, 100, -50, 250),
    ]
    corners = find_intersections(spokes, (100, 100), 0)
    assert len(corners) == 1
    assert [l.id for l in corners[0].lines] == [l.id for l in spokes[:4]]


def test_each_endpoint_belongs_to_one_corner():
    a = make_line(100, 100, 300, 100)
    b = make_line(100, 100, 100, 300)
    c = make_line(130, 130, 400, 130)
    corners = find_intersections([a, b, c], (110, 110), 0)
    members = [l.id for corner in corners for l in corner.lines]
    assert len(corners) == 2
    assert sorted(members) == sorted([a.id, b.id, c.id])


def test_corners_are_sorted_by_distance():
    near = make_line(100, 100, 300, 100)
    far = make_line(140, 70, 140, -200)
    corners = find_intersections([far, near], (110, 100), 0)
    assert [c.lines[0].id for c in corners] == [near.id, far.id]
    distances = [c.distance_from((110, 100)) for c in corners]
    assert distances == sorted(distances)


def test_corner_page_point_is_mean_of_page_endpoints():
    a = make_line(100, 100, 300, 100)
    b = make_line(104, 96, 104, -100)
    corner = find_intersections([a, b], (100, 100), 0)[0]
    assert corner.page_point == Point(102.0, 98.0)
