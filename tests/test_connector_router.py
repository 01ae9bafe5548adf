import pytest

from gui.diagram.connector_router import RouteKind, anchor_y, route, route_all
from gui.diagram.geometry import CardGeometry, Point
from factories import make_schema, make_table, rel


def _route(src, dst, relationship):
    return route(relationship, {src.id: src, dst.id: dst})


def test_right_flow_between_side_by_side_cards():
    a = make_table("a", 0, 0, ["user_id"])
    b = make_table("b", 400, 0, ["id"])
    path = _route(a, b, rel("r1", "a", "user_id", "b"))
    assert path.kind is RouteKind.RIGHT_FLOW
    assert path.start == Point(240, 59.5)
    assert path.control1 == Point(320, 59.5)
    assert path.control2 == Point(320, 59.5)
    assert path.end == Point(400, 59.5)
    assert path.to_svg() == "M 240 59.5 C 320 59.5, 320 59.5, 400 59.5"


def test_left_flow_mirrors_right_flow():
    a = make_table("a", 400, 0, ["user_id"])
    b = make_table("b", 0, 0, ["id"])
    path = _route(a, b, rel("r1", "a", "user_id", "b"))
    assert path.kind is RouteKind.LEFT_FLOW
    assert path.start.x == 400
    assert path.control1.x == 320
    assert path.control2.x == 320
    assert path.end.x == 240


def test_stacked_cards_loop_out_to_the_left():
    a = make_table("a", 0, 0, ["user_id"])
    b = make_table("b", 0, 300, ["id"])
    path = _route(a, b, rel("r1", "a", "user_id", "b"))
    assert path.kind is RouteKind.LOOP_LEFT
    assert path.start == Point(0, 59.5)
    assert path.control1 == Point(-80, 59.5)
    assert path.control2 == Point(-80, 359.5)
    assert path.end == Point(0, 359.5)


def test_overlapping_cards_with_target_to_the_right_loop_right():
    a = make_table("a", 0, 0, ["user_id"])
    b = make_table("b", 100, 200, ["id"])
    path = _route(a, b, rel("r1", "a", "user_id", "b"))
    assert path.kind is RouteKind.LOOP_RIGHT
    assert path.start.x == 240
    assert path.control1.x == 320
    assert path.control2.x == 420
    assert path.end.x == 340


def test_gap_threshold_is_strict():
    a = make_table("a", 0, 0, ["user_id"])
    at_threshold = make_table("b", 300, 0, ["id"])
    past_threshold = make_table("b", 300.5, 0, ["id"])
    r = rel("r1", "a", "user_id", "b")
    assert _route(a, at_threshold, r).kind is RouteKind.LOOP_RIGHT
    assert _route(a, past_threshold, r).kind is RouteKind.RIGHT_FLOW


def test_anchor_uses_column_row_index():
    t = make_table("t", 10, 100, ["id", "a", "b"])
    assert anchor_y(t, "t.id") == 100 + 45 + 14.5
    assert anchor_y(t, "t.b") == 100 + 45 + 2 * 29 + 14.5


def test_missing_column_falls_back_to_default_offset():
    t = make_table("t", 0, 0, ["id"])
    assert anchor_y(t, "t.gone") == 65


def test_missing_table_yields_no_route():
    a = make_table("a", 0, 0, ["user_id"])
    assert route(rel("r1", "a", "user_id", "ghost"), {"a": a}) is None


def test_route_all_skips_unresolvable_and_keeps_order():
    a = make_table("a", 0, 0, ["id", "b_id"])
    b = make_table("b", 400, 0, ["id"])
    schema = make_schema(
        [a, b],
        [rel("r1", "a", "b_id", "b"), rel("r2", "a", "b_id", "ghost"), rel("r3", "b", "id", "a")],
    )
    paths = route_all(schema)
    assert [p.relationship_id for p in paths] == ["r1", "r3"]


def test_routing_is_deterministic():
    a = make_table("a", 13.25, 7, ["id", "b_id"])
    b = make_table("b", 512.5, 90, ["id"])
    schema = make_schema([a, b], [rel("r1", "a", "b_id", "b")])
    assert route_all(schema) == route_all(schema)
    assert route_all(schema)[0].to_svg() == route_all(schema)[0].to_svg()


def test_curve_endpoints_and_arrow_direction():
    a = make_table("a", 0, 0, ["user_id"])
    b = make_table("b", 400, 0, ["id"])
    path = _route(a, b, rel("r1", "a", "user_id", "b"))
    assert path.point_at(0) == path.start
    assert path.point_at(1) == path.end
    arrow = path.arrow()
    assert arrow.tip == path.end
    assert arrow.direction == Point(1.0, 0.0)
    left, tip, right = arrow.points()
    assert tip == path.end
    assert left.x == pytest.approx(390) and right.x == pytest.approx(390)


def test_custom_geometry_changes_threshold():
    geo = CardGeometry(width=100, gap_threshold=10)
    a = make_table("a", 0, 0, ["user_id"])
    b = make_table("b", 150, 0, ["id"])
    path = route(rel("r1", "a", "user_id", "b"), {"a": a, "b": b}, geo)
    assert path.kind is RouteKind.RIGHT_FLOW
    assert path.start.x == 100
