"""Upload view: API key entry, sketch selection and extraction progress.

A chosen image is sent to the extraction service on an ExtractionWorker
thread. When the worker finishes, the raw bundle is imported (layout plus
name resolution) on the GUI thread and ``schema_generated`` is emitted.
Responses for a superseded upload are ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from gui.app.config_store import AppConfig
from gui.services.event_bus import EventBus, GUIEvent
from gui.workers import ExtractionWorker
from services.extraction import is_image_file
from services.sample_schema import sample_schema
from services.schema_import import import_extraction

__all__ = ["UploadView", "NOT_AN_IMAGE_MESSAGE", "MISSING_KEY_MESSAGE"]

logger = logging.getLogger(__name__)

NOT_AN_IMAGE_MESSAGE = "Please upload an image file (PNG, JPG)."
MISSING_KEY_MESSAGE = "Please enter your Gemini API key first."


class _DropZone(QFrame):
    file_dropped = pyqtSignal(str)

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setObjectName("UploadDropZone")
        self.setAcceptDrops(True)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setMinimumHeight(180)
        layout = QVBoxLayout(self)
        label = QLabel("Drop a database sketch here", self)
        label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(label)

    def dragEnterEvent(self, event):  # type: ignore[override]  # pragma: no cover - DnD
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dropEvent(self, event):  # type: ignore[override]  # pragma: no cover - DnD
        urls = event.mimeData().urls()
        if urls:
            self.file_dropped.emit(urls[0].toLocalFile())


class UploadView(QWidget):
    schema_generated = pyqtSignal(object)  # Schema

    def __init__(
        self,
        config: AppConfig,
        *,
        event_bus: EventBus | None = None,
        worker_factory: Optional[Callable[..., ExtractionWorker]] = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self.setObjectName("UploadView")
        self._config = config
        self._event_bus = event_bus
        self._worker_factory = worker_factory or ExtractionWorker
        self._worker: Optional[ExtractionWorker] = None
        self._token = 0
        self._build_ui()
        self.set_busy(False)

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(48, 32, 48, 32)
        title = QLabel("Turn a database sketch into a schema", self)
        title.setObjectName("UploadTitle")
        layout.addWidget(title)

        key_row = QHBoxLayout()
        key_row.addWidget(QLabel("Gemini API key", self))
        self.api_key_edit = QLineEdit(self)
        self.api_key_edit.setEchoMode(QLineEdit.EchoMode.Password)
        self.api_key_edit.setPlaceholderText("Paste your API key")
        self.api_key_edit.setText(self._config.api_key)
        self.api_key_edit.textChanged.connect(self._on_api_key_changed)
        key_row.addWidget(self.api_key_edit)
        layout.addLayout(key_row)

        self.drop_zone = _DropZone(self)
        self.drop_zone.file_dropped.connect(self.process_file)
        layout.addWidget(self.drop_zone)

        buttons = QHBoxLayout()
        self.choose_btn = QPushButton("Choose image...", self)
        self.choose_btn.clicked.connect(self._choose_file)
        buttons.addWidget(self.choose_btn)
        self.sample_btn = QPushButton("Load sample", self)
        self.sample_btn.clicked.connect(self.load_sample)
        buttons.addWidget(self.sample_btn)
        buttons.addStretch(1)
        layout.addLayout(buttons)

        self.status_label = QLabel("", self)
        layout.addWidget(self.status_label)
        self.error_label = QLabel("", self)
        self.error_label.setObjectName("UploadError")
        self.error_label.setStyleSheet("color: #f87171;")
        self.error_label.setWordWrap(True)
        layout.addWidget(self.error_label)
        layout.addStretch(1)

    # State -------------------------------------------------------------------------
    @property
    def api_key(self) -> str:
        return self.api_key_edit.text().strip()

    @property
    def is_busy(self) -> bool:
        return self._worker is not None

    def _on_api_key_changed(self, text: str) -> None:
        self._config.api_key = text.strip()

    def set_error(self, message: str) -> None:
        self.error_label.setText(message)
        self.error_label.setVisible(bool(message))

    def set_busy(self, busy: bool) -> None:
        self.status_label.setText("Analyzing sketch..." if busy else "")
        self.choose_btn.setEnabled(not busy)
        self.drop_zone.setEnabled(not busy)
        self.sample_btn.setEnabled(not busy)

    # Actions -------------------------------------------------------------------------
    def _choose_file(self) -> None:  # pragma: no cover - modal dialog
        path, _ = QFileDialog.getOpenFileName(
            self, "Choose sketch", "", "Images (*.png *.jpg *.jpeg *.webp *.gif)"
        )
        if path:
            self.process_file(path)

    def load_sample(self) -> None:
        # Any extraction still in flight is superseded by the sample.
        self._token += 1
        if self._worker is not None:
            self._worker = None
            self.set_busy(False)
        self.set_error("")
        self.schema_generated.emit(sample_schema())

    def process_file(self, path: str) -> bool:
        """Validate ``path`` and start extraction; returns whether it started."""
        mime = is_image_file(path)
        if mime is None:
            self.set_error(NOT_AN_IMAGE_MESSAGE)
            return False
        if not self.api_key:
            self.set_error(MISSING_KEY_MESSAGE)
            return False
        try:
            image = Path(path).read_bytes()
        except OSError as e:
            self.set_error(f"Could not read {path}: {e}")
            return False
        self.set_error("")
        self._token += 1
        worker = self._worker_factory(image, self.api_key, mime_type=mime, token=self._token)
        worker.finished.connect(self._on_worker_finished)
        self._worker = worker
        self.set_busy(True)
        if self._event_bus is not None:
            self._event_bus.publish(GUIEvent.EXTRACTION_STARTED, {"path": path})
        logger.info("analyzing %s (%d bytes)", path, len(image))
        worker.start()
        return True

    def _on_worker_finished(self, raw: Any, error: str, token: int) -> None:
        if token != self._token:
            logger.debug("ignoring stale extraction result %d (current %d)", token, self._token)
            return
        self._worker = None
        self.set_busy(False)
        if error:
            self.set_error(error)
            if self._event_bus is not None:
                self._event_bus.publish(GUIEvent.EXTRACTION_FAILED, {"error": error})
            return
        result = import_extraction(raw or {})
        if self._event_bus is not None:
            self._event_bus.publish(
                GUIEvent.EXTRACTION_FINISHED,
                {
                    "tables": len(result.schema.tables),
                    "relationships": len(result.schema.relationships),
                    "dropped": len(result.dropped),
                },
            )
        self.schema_generated.emit(result.schema)
