"""Synchronous publish/subscribe for GUI-level notifications.

Producers (the schema store, the viewport, the extraction worker slot) publish
typed events; views subscribe and schedule a repaint. Dispatch happens on the
caller's thread, in subscription order. A failing handler is logged and
recorded but never interrupts delivery to the remaining handlers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from threading import RLock
from time import perf_counter
from typing import Any, Dict, List, Protocol

__all__ = [
    "GUIEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "Subscription",
]

logger = logging.getLogger(__name__)


class GUIEvent(str, Enum):
    SCHEMA_CHANGED = "schema_changed"
    VIEWPORT_CHANGED = "viewport_changed"
    VIEW_MODE_CHANGED = "view_mode_changed"
    EXTRACTION_STARTED = "extraction_started"
    EXTRACTION_FINISHED = "extraction_finished"
    EXTRACTION_FAILED = "extraction_failed"
    LOG_RECORD_ADDED = "log_record_added"


@dataclass
class Event:
    name: str
    payload: Any
    timestamp: float


class EventHandler(Protocol):
    def __call__(self, event: Event) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    event: str
    handler: EventHandler
    once: bool
    active: bool = True

    def cancel(self) -> None:
        self.active = False


def _key(name: str | GUIEvent) -> str:
    return name.value if isinstance(name, GUIEvent) else name


class EventBus:
    """Synchronous event dispatcher.

    Handlers run without the lock held (subscribers are snapshotted first),
    so a handler may subscribe or unsubscribe while being dispatched.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._subs: Dict[str, List[Subscription]] = {}
        self._errors: List[tuple[Event, BaseException]] = []

    def subscribe(
        self, name: str | GUIEvent, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        sub = Subscription(event=_key(name), handler=handler, once=once)
        with self._lock:
            self._subs.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            bucket = self._subs.get(sub.event)
            if bucket and sub in bucket:
                bucket.remove(sub)
                if not bucket:
                    self._subs.pop(sub.event, None)
        sub.active = False

    def clear(self) -> None:
        with self._lock:
            self._subs.clear()
            self._errors.clear()

    def publish(self, name: str | GUIEvent, payload: Any = None) -> Event:
        key = _key(name)
        evt = Event(name=key, payload=payload, timestamp=perf_counter())
        with self._lock:
            subs = list(self._subs.get(key, ()))
        for sub in subs:
            if not sub.active:
                continue
            if sub.once:
                self.unsubscribe(sub)
            try:
                sub.handler(evt)
            except Exception as exc:  # noqa: BLE001 - isolate handler failures
                logger.exception("handler for %s failed", key)
                with self._lock:
                    self._errors.append((evt, exc))
        return evt

    def subscriber_count(self, name: str | GUIEvent) -> int:
        with self._lock:
            return len(self._subs.get(_key(name), ()))

    @property
    def errors(self) -> list[tuple[Event, BaseException]]:
        with self._lock:
            return list(self._errors)
