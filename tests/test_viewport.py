import math
import random

import pytest

from gui.diagram.geometry import Point
from gui.diagram.viewport import MouseButton, ViewportController, ViewportState, clamp_scale


def test_defaults():
    vp = ViewportController()
    assert vp.state == ViewportState(1.0, Point(0, 0))
    assert vp.state.zoom_percent == 100
    assert not vp.is_panning


def test_wheel_with_modifier_zooms_exponentially():
    vp = ViewportController()
    vp.wheel(0, -100, zoom_modifier=True)
    assert vp.state.scale == pytest.approx(math.exp(0.1))
    vp.wheel(0, 100, zoom_modifier=True)
    assert vp.state.scale == pytest.approx(1.0)


def test_scale_stays_clamped_under_any_wheel_sequence():
    vp = ViewportController()
    rng = random.Random(7)
    for _ in range(500):
        vp.wheel(0, rng.uniform(-5000, 5000), zoom_modifier=True)
        assert 0.2 <= vp.state.scale <= 3.0
    vp.wheel(0, -1e12, zoom_modifier=True)
    assert vp.state.scale == 3.0
    vp.wheel(0, 1e12, zoom_modifier=True)
    assert vp.state.scale == 0.2


def test_clamp_scale_edges():
    assert clamp_scale(0.0) == 0.2
    assert clamp_scale(-4) == 0.2
    assert clamp_scale(10) == 3.0
    assert clamp_scale(float("nan")) == 0.2
    assert clamp_scale(1.5) == 1.5


def test_wheel_without_modifier_pans():
    vp = ViewportController()
    vp.wheel(10, 20, zoom_modifier=False)
    assert vp.state.offset == Point(-10, -20)
    assert vp.state.scale == 1.0


def test_zoom_about_origin_keeps_offset():
    vp = ViewportController(ViewportState(1.0, Point(30, 40)))
    vp.set_scale(2.0, anchor=Point(100, 100))
    assert vp.state.offset == Point(30, 40)


def test_pointer_anchored_zoom_keeps_world_point_fixed():
    vp = ViewportController(anchor_zoom_to_pointer=True)
    anchor = Point(100, 100)
    before = vp.state.screen_to_world(anchor)
    vp.set_scale(2.0, anchor=anchor)
    assert vp.state.offset == Point(-100, -100)
    after = vp.state.screen_to_world(anchor)
    assert after.x == pytest.approx(before.x)
    assert after.y == pytest.approx(before.y)


def test_zoom_buttons_step_and_clamp():
    vp = ViewportController(ViewportState(2.95))
    vp.zoom_in()
    assert vp.state.scale == 3.0
    vp.zoom_in()
    assert vp.state.scale == 3.0
    vp.set_scale(0.25)
    vp.zoom_out()
    assert vp.state.scale == 0.2


def test_middle_button_pans_by_pointer_delta():
    vp = ViewportController()
    assert vp.press(MouseButton.MIDDLE, 100, 100)
    assert vp.is_panning
    vp.move(130, 90)
    assert vp.state.offset == Point(30, -10)
    vp.move(140, 90)
    assert vp.state.offset == Point(40, -10)
    vp.release()
    vp.move(500, 500)
    assert vp.state.offset == Point(40, -10)


def test_left_button_pans_only_with_shift():
    vp = ViewportController()
    assert not vp.press(MouseButton.LEFT, 0, 0)
    assert not vp.is_panning
    assert not vp.press(MouseButton.RIGHT, 0, 0, shift=True)
    assert vp.press(MouseButton.LEFT, 0, 0, shift=True)
    assert vp.is_panning


def test_leave_ends_panning():
    vp = ViewportController()
    vp.press(MouseButton.MIDDLE, 0, 0)
    vp.leave()
    assert not vp.is_panning


def test_pan_is_independent_of_scale():
    vp = ViewportController(ViewportState(2.5))
    vp.press(MouseButton.MIDDLE, 0, 0)
    vp.move(10, 10)
    assert vp.state.offset == Point(10, 10)


def test_on_change_fires_only_for_real_changes():
    seen = []
    vp = ViewportController(on_change=seen.append)
    vp.reset()
    assert seen == []
    vp.wheel(5, 0, zoom_modifier=False)
    vp.zoom_in()
    assert len(seen) == 2
    assert seen[-1] is vp.state


def test_world_screen_round_trip():
    state = ViewportState(1.5, Point(-20, 35))
    p = Point(120, -80)
    screen = state.world_to_screen(p)
    assert screen == Point(160, -85)
    back = state.screen_to_world(screen)
    assert back.x == pytest.approx(p.x) and back.y == pytest.approx(p.y)
