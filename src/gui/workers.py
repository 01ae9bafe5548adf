"""Background worker threads used by the GUI."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from PyQt6.QtCore import QThread, pyqtSignal

from services import extraction

logger = logging.getLogger(__name__)

AnalyzeFn = Callable[..., Dict[str, Any]]


class ExtractionWorker(QThread):
    """Runs one sketch extraction off the GUI thread.

    ``finished`` carries (raw bundle or None, error message, request token).
    The token lets the receiver ignore a response that belongs to an upload
    the user has since replaced.
    """

    finished = pyqtSignal(object, str, int)

    def __init__(
        self,
        image: bytes,
        api_key: str,
        *,
        mime_type: str = "image/png",
        token: int = 0,
        analyze: AnalyzeFn | None = None,
    ):
        super().__init__()
        self.image = image
        self.api_key = api_key
        self.mime_type = mime_type
        self.token = token
        self._analyze = analyze or extraction.analyze_sketch

    def run(self) -> None:  # type: ignore[override]
        try:
            raw = self._analyze(self.image, self.api_key, mime_type=self.mime_type)
        except extraction.ExtractionError as e:
            logger.warning("extraction failed: %s", e)
            self.finished.emit(None, str(e), self.token)
            return
        except Exception as e:  # noqa: BLE001 - surface anything else to the user
            logger.exception("unexpected extraction failure")
            self.finished.emit(None, f"Failed to analyze sketch: {e}", self.token)
            return
        self.finished.emit(raw, "", self.token)
