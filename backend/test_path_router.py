"""
Edge curve routing.
Run with: pytest test_path_router.py
"""

from prompt_canvas.graph.types import Point, Rect
from prompt_canvas.routing.path_router import (
    CurveKind,
    Facing,
    RouterConfig,
    handle_point,
    is_backward,
    route,
)


def test_forward_edge_is_vertical_cubic():
    curve = route(Point(0, 0), Point(0, 200))
    assert curve.kind == CurveKind.FORWARD
    assert curve.to_svg_path() == "M 0 0 C 0 50, 0 150, 0 200"


def test_forward_curvature_is_capped():
    curve = route(Point(0, 0), Point(0, 400))
    assert curve.segments[0].controls == [Point(0, 60), Point(0, 340)]


def test_close_endpoints_bow_sideways():
    curve = route(Point(0, 0), Point(50, 0))
    assert curve.kind == CurveKind.CLOSE
    assert curve.segments[0].command == "Q"
    assert curve.segments[0].controls == [Point(-5, 0)]


def test_close_wins_over_backward():
    curve = route(Point(0, 50), Point(0, 0))
    assert curve.kind == CurveKind.CLOSE


def test_same_level_arcs_below():
    curve = route(Point(0, 0), Point(300, 20))
    assert curve.kind == CurveKind.SAME_LEVEL
    assert curve.segments[0].controls == [Point(150, 110)]


def test_backward_steps_around_right_side():
    curve = route(Point(0, 300), Point(100, 0))
    assert curve.kind == CurveKind.STEP_AROUND
    first, second = curve.segments
    assert first.controls == [Point(0, 360), Point(250, 360)]
    assert first.end == Point(250, 150)
    assert second.controls == [Point(250, -60), Point(100, -60)]
    assert second.end == Point(100, 0)
    assert curve.to_svg_path().count("C") == 2


def test_backward_steps_around_left_side():
    curve = route(Point(100, 300), Point(0, 0))
    assert curve.segments[0].end.x == -150


def test_curves_start_and_end_at_anchors():
    cases = [
        (Point(0, 0), Point(50, 0)),
        (Point(0, 300), Point(100, 0)),
        (Point(0, 0), Point(300, 20)),
        (Point(10, 10), Point(400, 500)),
    ]
    for source, target in cases:
        curve = route(source, target)
        assert curve.start == source
        assert curve.end == target


def test_side_facings_are_never_backward():
    assert is_backward(Point(0, 300), Point(0, 0), Facing.BOTTOM, Facing.TOP)
    assert not is_backward(Point(0, 300), Point(0, 0), Facing.RIGHT, Facing.LEFT)
    curve = route(Point(0, 20), Point(300, 0), Facing.RIGHT, Facing.LEFT)
    assert curve.kind == CurveKind.SAME_LEVEL


def test_label_point_is_midpoint():
    curve = route(Point(0, 0), Point(100, 400))
    assert curve.label_point == Point(50, 200)


def test_custom_thresholds():
    config = RouterConfig(close_distance=500)
    assert route(Point(0, 0), Point(0, 200), config=config).kind == CurveKind.CLOSE


def test_handle_points():
    box = Rect(0, 0, 200, 100)
    assert handle_point(box, Facing.TOP) == Point(100, 0)
    assert handle_point(box, Facing.BOTTOM) == Point(100, 100)
    assert handle_point(box, Facing.LEFT) == Point(0, 50)
    assert handle_point(box, Facing.RIGHT) == Point(200, 50)
