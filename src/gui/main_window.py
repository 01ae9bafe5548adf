"""Main window: header navigation over the upload, editor and visualizer views."""

from __future__ import annotations

import logging
from typing import Dict

from PyQt6.QtCore import QRect
from PyQt6.QtWidgets import (
    QButtonGroup,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from domain.models import DBType, Schema, ViewMode
from gui.app.bootstrap import AppContext
from gui.diagram.viewport import ViewportController
from gui.services.event_bus import Event, GUIEvent
from gui.viewmodels.editor_viewmodel import EditorViewModel
from gui.views.diagram_view import DiagramView
from gui.views.editor_view import EditorView
from gui.views.upload_view import UploadView

logger = logging.getLogger(__name__)

_NAV_LABELS = {
    ViewMode.UPLOAD: "Upload",
    ViewMode.EDITOR: "Editor",
    ViewMode.VISUALIZER: "Visualizer",
}


class MainWindow(QMainWindow):
    def __init__(self, ctx: AppContext):
        super().__init__()
        self.setWindowTitle("Sketch to Schema")
        self.ctx = ctx
        self.store = ctx.store
        self.editor_vm = EditorViewModel(self.store, ctx.config.sql_dialect)
        self.viewport = ViewportController(
            sensitivity=ctx.config.zoom_sensitivity,
            anchor_zoom_to_pointer=ctx.config.zoom_follows_pointer,
        )
        self.nav_buttons: Dict[ViewMode, QPushButton] = {}
        self._view = ViewMode.UPLOAD
        self._dropped_relationships = 0

        self._build_ui()
        self._restore_geometry()
        self._unsubscribe = self.store.subscribe(self._on_schema_changed)
        bus = ctx.event_bus
        self._bus_subs = [
            bus.subscribe(GUIEvent.EXTRACTION_STARTED, self._on_extraction_event),
            bus.subscribe(GUIEvent.EXTRACTION_FAILED, self._on_extraction_event),
            bus.subscribe(GUIEvent.EXTRACTION_FINISHED, self._on_extraction_event),
        ]
        self._update_nav()
        initial = ViewMode(ctx.config.last_view)
        self.set_view(initial if not self.store.schema.is_empty else ViewMode.UPLOAD)

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)

        top_bar = QHBoxLayout()
        top_bar.setContentsMargins(12, 8, 12, 8)
        title = QLabel("Sketch to Schema")
        title.setObjectName("AppTitle")
        top_bar.addWidget(title)
        top_bar.addStretch(1)
        group = QButtonGroup(self)
        group.setExclusive(True)
        for mode, label in _NAV_LABELS.items():
            btn = QPushButton(label)
            btn.setCheckable(True)
            btn.clicked.connect(lambda _=False, m=mode: self.set_view(m))
            group.addButton(btn)
            top_bar.addWidget(btn)
            self.nav_buttons[mode] = btn
        layout.addLayout(top_bar)

        self.stack = QStackedWidget()
        self.upload_view = UploadView(self.ctx.config, event_bus=self.ctx.event_bus)
        self.upload_view.schema_generated.connect(self._on_schema_generated)
        self.editor_view = EditorView(self.editor_vm)
        self.editor_view.dialect_combo.currentTextChanged.connect(self._on_dialect_changed)
        self.diagram_view = DiagramView(
            self.store, viewport=self.viewport, event_bus=self.ctx.event_bus
        )
        self._pages: Dict[ViewMode, QWidget] = {
            ViewMode.UPLOAD: self.upload_view,
            ViewMode.EDITOR: self.editor_view,
            ViewMode.VISUALIZER: self.diagram_view,
        }
        for page in self._pages.values():
            self.stack.addWidget(page)
        layout.addWidget(self.stack)

        self.status_label = QLabel("Ready")
        self.statusBar().addWidget(self.status_label)

    def _set_status(self, text: str) -> None:
        self.status_label.setText(text)

    def _on_extraction_event(self, evt: Event) -> None:
        payload = evt.payload or {}
        if evt.name == GUIEvent.EXTRACTION_STARTED.value:
            self._set_status("Analyzing sketch...")
        elif evt.name == GUIEvent.EXTRACTION_FAILED.value:
            self._set_status(f"Extraction failed: {payload.get('error', 'unknown error')}")
        else:
            self._dropped_relationships = int(payload.get("dropped", 0))

    # Navigation
    @property
    def current_view(self) -> ViewMode:
        return self._view

    def set_view(self, mode: ViewMode | str) -> bool:
        """Switch pages; editor and visualizer need a non-empty schema."""
        mode = ViewMode(mode)
        if mode != ViewMode.UPLOAD and self.store.schema.is_empty:
            return False
        self._view = mode
        self.stack.setCurrentWidget(self._pages[mode])
        self.nav_buttons[mode].setChecked(True)
        self.ctx.config.last_view = mode.value
        self.ctx.event_bus.publish(GUIEvent.VIEW_MODE_CHANGED, mode)
        return True

    def _update_nav(self) -> None:
        empty = self.store.schema.is_empty
        self.nav_buttons[ViewMode.EDITOR].setEnabled(not empty)
        self.nav_buttons[ViewMode.VISUALIZER].setEnabled(not empty)

    def _on_schema_changed(self, schema: Schema) -> None:
        self._update_nav()
        if schema.is_empty and self._view != ViewMode.UPLOAD:
            self.set_view(ViewMode.UPLOAD)

    def _on_schema_generated(self, schema: Schema) -> None:
        self.store.replace(schema)
        self.viewport.reset()
        first = schema.tables[0].id if schema.tables else None
        self.editor_vm.select(first)
        self.editor_view.refresh()
        status = f"Loaded {len(schema.tables)} tables, {len(schema.relationships)} relationships"
        if self._dropped_relationships:
            status += f" ({self._dropped_relationships} unresolved dropped)"
            self._dropped_relationships = 0
        self._set_status(status)
        self.set_view(ViewMode.EDITOR)

    def _on_dialect_changed(self, text: str) -> None:
        if text in {d.value for d in DBType}:
            self.ctx.config.sql_dialect = text

    # Persistence
    def _restore_geometry(self) -> None:
        cfg = self.ctx.config
        if cfg.is_geometry_complete():
            self.setGeometry(QRect(cfg.window_x, cfg.window_y, cfg.window_w, cfg.window_h))
        else:
            self.resize(1280, 800)
        if cfg.maximized:
            self.showMaximized()

    def capture_geometry(self) -> None:
        cfg = self.ctx.config
        geo = self.normalGeometry() if self.isMaximized() else self.geometry()
        cfg.window_x, cfg.window_y = geo.x(), geo.y()
        cfg.window_w, cfg.window_h = geo.width(), geo.height()
        cfg.maximized = self.isMaximized()

    def closeEvent(self, event):  # type: ignore[override]
        self.capture_geometry()
        try:
            self.ctx.save_config()
        except OSError as e:
            logger.warning("could not save config: %s", e)
        self._unsubscribe()
        for sub in self._bus_subs:
            self.ctx.event_bus.unsubscribe(sub)
        self._bus_subs = []
        super().closeEvent(event)
