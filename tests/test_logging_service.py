import json
import logging

import pytest

from gui.services.event_bus import EventBus, GUIEvent
from gui.services.logging_service import LoggingService


@pytest.fixture()
def setup_logging():
    bus = EventBus()
    svc = LoggingService(capacity=5, event_bus=bus)
    svc.attach_root()
    yield svc, bus
    svc.detach_root()


def test_logging_capture_and_retrieve(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("alpha").info("Hello World")
    assert any(e.message == "Hello World" and e.name == "alpha" for e in svc.recent())


def test_logging_capacity_eviction(setup_logging):
    svc, _ = setup_logging
    for i in range(10):
        logging.getLogger("cap").info("M%d", i)
    recents = svc.recent()
    assert len(recents) == 5  # capacity
    assert recents[0].message == "M5"  # first retained after evictions
    assert [e.message for e in svc.recent(2)] == ["M8", "M9"]


def test_logging_filtering(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("services.extraction").debug("calling model")
    logging.getLogger("gui.views.upload_view").info("analyzing sketch.png")
    info_only = svc.filter(level="INFO")
    assert info_only and all(e.level == "INFO" for e in info_only)
    upload = svc.filter(name_contains="upload")
    assert upload and all("upload" in e.name for e in upload)


def test_logging_event_emission(setup_logging):
    svc, bus = setup_logging
    seen = []
    bus.subscribe(GUIEvent.LOG_RECORD_ADDED, lambda evt: seen.append(evt.payload.message))
    logging.getLogger("beta").warning("careful")
    assert seen == ["careful"]


def test_detach_stops_capture(setup_logging):
    svc, _ = setup_logging
    svc.detach_root()
    assert not svc.attached
    logging.getLogger("gamma").info("dropped")
    assert not any(e.message == "dropped" for e in svc.recent())


def test_export_jsonl(setup_logging, tmp_path):
    svc, _ = setup_logging
    logging.getLogger("a").info("one")
    logging.getLogger("a").warning("two")
    path = tmp_path / "logs.jsonl"
    written = svc.export_jsonl(path, level="WARNING")
    assert written == 1
    lines = path.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[0])["message"] == "two"
