"""Interactive ER diagram canvas.

Translates Qt mouse / wheel events into ViewportController and
DragController calls and paints the DiagramScene built from the current
schema snapshot. All geometry (anchors, routing, row layout) comes from
``gui.diagram``; this widget only handles input plumbing and QPainter calls.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import (
    QBrush,
    QColor,
    QFont,
    QMouseEvent,
    QPainter,
    QPainterPath,
    QPen,
    QPolygonF,
    QWheelEvent,
)
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QToolButton, QWidget

from domain.models import Schema
from gui.diagram.drag import DragController, hit_header
from gui.diagram.geometry import CardGeometry, Point
from gui.diagram.scene import CardLayout, DiagramScene, build_scene
from gui.diagram.viewport import MouseButton, ViewportController, ViewportState
from gui.services.event_bus import EventBus, GUIEvent
from gui.services.schema_store import SchemaStore

__all__ = ["DiagramView", "qt_button"]

logger = logging.getLogger(__name__)

BACKGROUND = QColor("#09090b")
CONNECTOR = QColor(82, 82, 91, 128)
CARD_FILL = QColor("#18181b")
HEADER_FILL = QColor("#27272a")
HEADER_DRAG_FILL = QColor("#323238")
BORDER = QColor("#3f3f46")
ROW_DIVIDER = QColor(39, 39, 42, 128)
TEXT = QColor("#e4e4e7")
MUTED = QColor("#a1a1aa")
TYPE_TEXT = QColor("#71717a")
PK_COLOR = QColor("#f59e0b")

HINT_TEXT = "Shift + Drag to Pan • Ctrl + Wheel to Zoom"

# Qt reports wheel rotation in 1/8 degree steps (120 per notch); browsers
# report roughly 100px per notch, which is what the zoom sensitivity assumes.
_ANGLE_TO_PIXELS = 100.0 / 120.0


def qt_button(button: Qt.MouseButton) -> Optional[int]:
    if button == Qt.MouseButton.LeftButton:
        return MouseButton.LEFT
    if button == Qt.MouseButton.MiddleButton:
        return MouseButton.MIDDLE
    if button == Qt.MouseButton.RightButton:
        return MouseButton.RIGHT
    return None


class _ZoomBar(QWidget):
    def __init__(self, viewport: ViewportController, parent: QWidget):
        super().__init__(parent)
        self.setObjectName("DiagramZoomBar")
        layout = QHBoxLayout(self)
        layout.setContentsMargins(6, 4, 6, 4)
        layout.setSpacing(4)
        self.minus = QToolButton(self)
        self.minus.setText("-")
        self.minus.clicked.connect(viewport.zoom_out)
        self.label = QLabel("100%", self)
        self.label.setMinimumWidth(48)
        self.label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.plus = QToolButton(self)
        self.plus.setText("+")
        self.plus.clicked.connect(viewport.zoom_in)
        self.reset = QToolButton(self)
        self.reset.setText("Reset")
        self.reset.clicked.connect(viewport.reset)
        for w in (self.minus, self.label, self.plus, self.reset):
            layout.addWidget(w)
        self.setStyleSheet(
            "#DiagramZoomBar { background: rgba(24,24,27,210); border: 1px solid #27272a;"
            " border-radius: 8px; } QLabel { color: #a1a1aa; font-family: monospace; }"
        )

    def show_scale(self, state: ViewportState) -> None:
        self.label.setText(f"{state.zoom_percent}%")


class DiagramView(QWidget):
    def __init__(
        self,
        store: SchemaStore,
        *,
        viewport: ViewportController | None = None,
        geometry: CardGeometry | None = None,
        event_bus: EventBus | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self.setObjectName("DiagramView")
        self.setMinimumSize(320, 240)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self._store = store
        self._geometry = geometry or CardGeometry()
        self._event_bus = event_bus
        self.viewport = viewport or ViewportController()
        self.viewport.on_change = self._on_viewport_changed
        self.drag = DragController(store.move_table)
        self._last_pos: Optional[QPointF] = None
        self._unsubscribe = store.subscribe(self._on_schema_changed)
        self.zoom_bar = _ZoomBar(self.viewport, self)
        self.zoom_bar.show_scale(self.viewport.state)
        self._set_cursor()

    # State hooks ----------------------------------------------------------------
    def _on_schema_changed(self, _schema: Schema) -> None:
        self.update()

    def _on_viewport_changed(self, state: ViewportState) -> None:
        self.zoom_bar.show_scale(state)
        if self._event_bus is not None:
            self._event_bus.publish(GUIEvent.VIEWPORT_CHANGED, state)
        self.update()

    def scene(self) -> DiagramScene:
        return build_scene(
            self._store.schema,
            self.viewport.state,
            self._geometry,
            dragged_table_id=self.drag.target,
        )

    def closeEvent(self, event):  # type: ignore[override]
        self._unsubscribe()
        super().closeEvent(event)

    def resizeEvent(self, event):  # type: ignore[override]
        super().resizeEvent(event)
        self.zoom_bar.adjustSize()
        self.zoom_bar.move(self.width() - self.zoom_bar.width() - 16, 16)

    def _set_cursor(self) -> None:
        busy = self.viewport.is_panning or self.drag.is_dragging
        self.setCursor(
            Qt.CursorShape.ClosedHandCursor if busy else Qt.CursorShape.OpenHandCursor
        )

    # Input ------------------------------------------------------------------------
    def wheelEvent(self, event: QWheelEvent):  # type: ignore[override]
        pixels = event.pixelDelta()
        if not pixels.isNull():
            dx, dy = float(pixels.x()), float(pixels.y())
        else:
            angle = event.angleDelta()
            dx, dy = angle.x() * _ANGLE_TO_PIXELS, angle.y() * _ANGLE_TO_PIXELS
        mods = event.modifiers()
        zoom = bool(
            mods & Qt.KeyboardModifier.ControlModifier or mods & Qt.KeyboardModifier.MetaModifier
        )
        pos = event.position()
        # Qt's positive y means "scroll up"; the viewport expects positive = down.
        self.viewport.wheel(-dx, -dy, zoom_modifier=zoom, anchor=Point(pos.x(), pos.y()))
        event.accept()

    def mousePressEvent(self, event: QMouseEvent):  # type: ignore[override]
        button = qt_button(event.button())
        pos = event.position()
        self._last_pos = pos
        shift = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        # A header press always drags the card, even with Shift held; it never pans.
        if button in (MouseButton.LEFT, MouseButton.MIDDLE):
            world = self.viewport.state.screen_to_world(Point(pos.x(), pos.y()))
            table_id = hit_header(self._store.schema, world, self._geometry)
            if table_id is not None:
                self.drag.press(table_id)
                self._set_cursor()
                self.update()
                event.accept()
                return
        if button is not None and self.viewport.press(button, pos.x(), pos.y(), shift=shift):
            self._set_cursor()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):  # type: ignore[override]
        pos = event.position()
        last = self._last_pos or pos
        self._last_pos = pos
        if self.viewport.is_panning:
            self.viewport.move(pos.x(), pos.y())
        elif self.drag.is_dragging:
            self.drag.move(pos.x() - last.x(), pos.y() - last.y(), self.viewport.state.scale)
        else:
            super().mouseMoveEvent(event)

    def _end_interaction(self) -> None:
        was_dragging = self.drag.is_dragging
        self.viewport.release()
        self.drag.release()
        self._last_pos = None
        self._set_cursor()
        if was_dragging:
            self.update()

    def mouseReleaseEvent(self, event: QMouseEvent):  # type: ignore[override]
        self._end_interaction()
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event):  # type: ignore[override]
        self._end_interaction()
        super().leaveEvent(event)

    # Painting -----------------------------------------------------------------------
    def paintEvent(self, event):  # type: ignore[override]  # pragma: no cover - painting
        scene = self.scene()
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.fillRect(self.rect(), BACKGROUND)
        painter.save()
        painter.translate(scene.offset_x, scene.offset_y)
        painter.scale(scene.scale, scene.scale)
        self._paint_connectors(painter, scene)
        for card in scene.cards:
            self._paint_card(painter, card)
        painter.restore()
        painter.setPen(TYPE_TEXT)
        painter.drawText(
            QRectF(24, self.height() - 36, self.width() - 48, 24),
            Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
            HINT_TEXT,
        )
        painter.end()

    def _paint_connectors(self, painter: QPainter, scene: DiagramScene) -> None:  # pragma: no cover
        pen = QPen(CONNECTOR)
        pen.setWidthF(2.0)
        for c in scene.connectors:
            path = QPainterPath(QPointF(*c.start))
            path.cubicTo(QPointF(*c.control1), QPointF(*c.control2), QPointF(*c.end))
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawPath(path)
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(CONNECTOR))
            painter.drawPolygon(QPolygonF([QPointF(*p) for p in c.arrow().points()]))

    def _paint_card(self, painter: QPainter, card: CardLayout) -> None:  # pragma: no cover
        r, h = card.rect, card.header
        body = QRectF(r.x, r.y, r.width, r.height)
        painter.setPen(QPen(BORDER))
        painter.setBrush(QBrush(CARD_FILL))
        painter.drawRoundedRect(body, 8, 8)
        clip = QPainterPath()
        clip.addRoundedRect(body, 8, 8)
        painter.save()
        painter.setClipPath(clip)
        painter.fillRect(
            QRectF(h.x, h.y, h.width, h.height),
            HEADER_DRAG_FILL if card.dragging else HEADER_FILL,
        )
        painter.restore()
        title_font = QFont(painter.font())
        title_font.setBold(True)
        title_font.setPointSizeF(10.5)
        painter.setFont(title_font)
        painter.setPen(TEXT)
        painter.drawText(
            QRectF(h.x + 12, h.y, h.width - 24, h.height),
            Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
            card.title,
        )
        row_font = QFont(painter.font())
        row_font.setBold(False)
        row_font.setPointSizeF(9)
        type_font = QFont("monospace")
        type_font.setPointSizeF(7.5)
        for row in card.rows:
            rr = row.rect
            painter.setPen(QPen(ROW_DIVIDER))
            painter.drawLine(QPointF(rr.x, rr.y), QPointF(rr.right, rr.y))
            name_x = rr.x + 12
            if row.is_pk:
                painter.setPen(Qt.PenStyle.NoPen)
                painter.setBrush(QBrush(PK_COLOR))
                painter.drawEllipse(QPointF(rr.x + 16, row.center_y), 4, 4)
                name_x = rr.x + 28
            row_font.setBold(row.is_pk)
            painter.setFont(row_font)
            painter.setPen(TEXT if row.is_pk else MUTED)
            painter.drawText(
                QRectF(name_x, rr.y, rr.width * 0.6, rr.height),
                Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
                row.name,
            )
            painter.setFont(type_font)
            painter.setPen(TYPE_TEXT)
            painter.drawText(
                QRectF(rr.x, rr.y, rr.width - 12, rr.height),
                Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter,
                row.type,
            )
