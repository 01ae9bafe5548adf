"""In-process log capture for the GUI.

A ring-buffer handler attached to the root logger keeps the most recent
records so the status line (and tests) can inspect what happened without a
log file. Each captured record is also published as
``GUIEvent.LOG_RECORD_ADDED`` when an event bus is attached.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from threading import RLock
from typing import Deque, List, Optional

from .event_bus import EventBus, GUIEvent

__all__ = ["LogEntry", "LoggingService", "configure_logging"]

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Console logging for the CLI and the desktop launcher."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float


class _RingBufferHandler(logging.Handler):
    def __init__(self, svc: "LoggingService") -> None:
        super().__init__()
        self._svc = svc

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._svc._ingest(record)
        except Exception:  # noqa: BLE001 - logging must never raise
            self.handleError(record)


class LoggingService:
    def __init__(
        self,
        capacity: int = 500,
        *,
        level: int = logging.DEBUG,
        event_bus: EventBus | None = None,
    ) -> None:
        self._lock = RLock()
        self._entries: Deque[LogEntry] = deque(maxlen=max(1, capacity))
        self._handler = _RingBufferHandler(self)
        self._handler.setLevel(level)
        self._event_bus = event_bus
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    def attach_root(self) -> None:
        if self._attached:
            return
        root = logging.getLogger()
        root.addHandler(self._handler)
        if root.level > self._handler.level:
            root.setLevel(self._handler.level)
        self._attached = True

    def detach_root(self) -> None:
        if not self._attached:
            return
        logging.getLogger().removeHandler(self._handler)
        self._attached = False

    def _ingest(self, record: logging.LogRecord) -> None:
        entry = LogEntry(
            level=record.levelname,
            name=record.name,
            message=record.getMessage(),
            created=record.created,
        )
        with self._lock:
            self._entries.append(entry)
        # The bus logs handler failures itself; skip our own records to avoid recursion.
        if self._event_bus is not None and not record.name.startswith("gui.services.event_bus"):
            self._event_bus.publish(GUIEvent.LOG_RECORD_ADDED, entry)

    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        with self._lock:
            data = list(self._entries)
        return data[-limit:] if limit is not None else data

    def filter(
        self, *, level: str | None = None, name_contains: str | None = None
    ) -> List[LogEntry]:
        return [
            e
            for e in self.recent()
            if (not level or e.level == level)
            and (not name_contains or name_contains in e.name)
        ]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def export_jsonl(self, path: str | Path, *, level: str | None = None) -> int:
        """Write entries as JSON Lines; returns the number of lines written."""
        entries = self.filter(level=level)
        with open(path, "w", encoding="utf-8") as f:
            for e in entries:
                f.write(json.dumps(asdict(e), sort_keys=True) + "\n")
        return len(entries)
