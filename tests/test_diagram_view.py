import math

import pytest
from PyQt6.QtCore import QEvent, QPoint, QPointF, Qt
from PyQt6.QtGui import QMouseEvent, QWheelEvent

from domain.models import Position
from gui.diagram.geometry import Point
from gui.services.event_bus import EventBus, GUIEvent
from gui.services.schema_store import SchemaStore
from gui.views.diagram_view import DiagramView
from services.sample_schema import sample_schema

NO_MOD = Qt.KeyboardModifier.NoModifier


def _mouse(kind, x, y, button=Qt.MouseButton.LeftButton, mods=NO_MOD):
    buttons = Qt.MouseButton.NoButton if kind == QEvent.Type.MouseButtonRelease else button
    pos = QPointF(x, y)
    return QMouseEvent(kind, pos, pos, button, buttons, mods)


def _wheel(angle_y, mods=NO_MOD, x=200, y=200):
    pos = QPointF(x, y)
    return QWheelEvent(
        pos,
        pos,
        QPoint(0, 0),
        QPoint(0, angle_y),
        Qt.MouseButton.NoButton,
        mods,
        Qt.ScrollPhase.NoScrollPhase,
        False,
    )


@pytest.fixture
def view(qtbot):
    bus = EventBus()
    store = SchemaStore(sample_schema(), event_bus=bus)
    w = DiagramView(store, event_bus=bus)
    w.resize(800, 600)
    qtbot.addWidget(w)
    return w, store, bus


def test_scene_reflects_store(view):
    w, store, _ = view
    assert len(w.scene().cards) == 4
    store.delete_table("notes_table")
    assert len(w.scene().cards) == 3
    assert len(w.scene().connectors) == 1


def test_header_drag_moves_card(view):
    w, store, _ = view
    w.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, 100, 60))
    assert w.drag.target == "users_table"
    assert w.scene().card("users_table").dragging
    w.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, 130, 80))
    w.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, 140, 80))
    w.mouseReleaseEvent(_mouse(QEvent.Type.MouseButtonRelease, 140, 80))
    assert not w.drag.is_dragging
    assert store.schema.find_table("users_table").position == Position(90, 70)


def test_drag_delta_is_scaled(view):
    w, store, _ = view
    w.viewport.set_scale(2.0)
    # USERS header at world (50..290, 50..95) -> screen (100..580, 100..190)
    w.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, 120, 120))
    w.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, 160, 140))
    assert store.schema.find_table("users_table").position == Position(70, 60)


def test_shift_on_header_still_drags(view):
    w, _, _ = view
    w.mousePressEvent(
        _mouse(QEvent.Type.MouseButtonPress, 100, 60, mods=Qt.KeyboardModifier.ShiftModifier)
    )
    assert w.drag.is_dragging
    assert not w.viewport.is_panning


def test_middle_drag_on_background_pans(view):
    w, store, bus = view
    changes = []
    bus.subscribe(GUIEvent.VIEWPORT_CHANGED, lambda evt: changes.append(evt.payload))
    before = store.schema
    w.mousePressEvent(
        _mouse(QEvent.Type.MouseButtonPress, 600, 400, button=Qt.MouseButton.MiddleButton)
    )
    assert w.viewport.is_panning
    w.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, 610, 420, button=Qt.MouseButton.MiddleButton))
    assert w.viewport.state.offset == Point(10, 20)
    assert store.schema is before
    w.leaveEvent(QEvent(QEvent.Type.Leave))
    assert not w.viewport.is_panning
    assert changes and changes[-1].offset == Point(10, 20)


def test_plain_left_press_on_background_does_nothing(view):
    w, _, _ = view
    w.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, 600, 400))
    assert not w.viewport.is_panning
    assert not w.drag.is_dragging


def test_ctrl_wheel_zooms_and_updates_zoom_bar(view):
    w, _, _ = view
    w.wheelEvent(_wheel(120, mods=Qt.KeyboardModifier.ControlModifier))
    assert w.viewport.state.scale == pytest.approx(math.exp(0.1))
    assert w.zoom_bar.label.text() == "111%"


def test_plain_wheel_pans(view):
    w, _, _ = view
    w.wheelEvent(_wheel(-120))
    offset = w.viewport.state.offset
    assert offset.x == 0
    assert offset.y == pytest.approx(-100)
    assert w.viewport.state.scale == 1.0


def test_zoom_bar_buttons(view):
    w, _, _ = view
    w.zoom_bar.plus.click()
    assert w.viewport.state.scale == pytest.approx(1.1)
    w.zoom_bar.reset.click()
    assert w.viewport.state.scale == 1.0
    w.zoom_bar.minus.click()
    assert w.zoom_bar.label.text() == "90%"


def test_paint_does_not_raise(view, qtbot):
    w, _, _ = view
    w.show()
    w.repaint()
    img = w.grab()
    assert not img.isNull()
