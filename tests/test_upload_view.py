import pytest

from gui.app.config_store import AppConfig
from gui.services.event_bus import EventBus, GUIEvent
from gui.views.upload_view import MISSING_KEY_MESSAGE, NOT_AN_IMAGE_MESSAGE, UploadView
from gui.workers import ExtractionWorker
from services.extraction import ExtractionError


RAW = {
    "tables": [
        {"name": "users", "columns": [{"name": "id", "isPk": True}]},
        {"name": "posts", "columns": [{"name": "id", "isPk": True}, {"name": "user_id", "isFk": True}]},
    ],
    "relationships": [
        {"fromTable": "posts", "fromColumn": "user_id", "toTable": "users", "toColumn": "id"},
        {"fromTable": "posts", "fromColumn": "ghost", "toTable": "users", "toColumn": "id"},
    ],
}


class _Signal:
    def __init__(self):
        self.slots = []

    def connect(self, slot):
        self.slots.append(slot)

    def emit(self, *args):
        for slot in self.slots:
            slot(*args)


class FakeWorker:
    created = []

    def __init__(self, image, api_key, *, mime_type, token):
        self.image = image
        self.api_key = api_key
        self.mime_type = mime_type
        self.token = token
        self.started = False
        self.finished = _Signal()
        FakeWorker.created.append(self)

    def start(self):
        self.started = True


@pytest.fixture
def sketch(tmp_path):
    path = tmp_path / "sketch.png"
    path.write_bytes(b"\x89PNG fake")
    return str(path)


@pytest.fixture
def view(qtbot):
    FakeWorker.created.clear()
    bus = EventBus()
    w = UploadView(AppConfig(api_key="key"), event_bus=bus, worker_factory=FakeWorker)
    qtbot.addWidget(w)
    return w, bus


def test_non_image_rejected(view, tmp_path):
    w, _ = view
    txt = tmp_path / "notes.txt"
    txt.write_text("x")
    assert not w.process_file(str(txt))
    assert w.error_label.text() == NOT_AN_IMAGE_MESSAGE
    assert FakeWorker.created == []


def test_missing_key_rejected(view, sketch):
    w, _ = view
    w.api_key_edit.setText("")
    assert not w.process_file(sketch)
    assert w.error_label.text() == MISSING_KEY_MESSAGE


def test_api_key_is_written_to_config(qtbot):
    cfg = AppConfig()
    w = UploadView(cfg, worker_factory=FakeWorker)
    qtbot.addWidget(w)
    w.api_key_edit.setText("  secret ")
    assert cfg.api_key == "secret"


def test_successful_extraction_emits_schema(view, sketch):
    w, bus = view
    events = []
    for name in (GUIEvent.EXTRACTION_STARTED, GUIEvent.EXTRACTION_FINISHED):
        bus.subscribe(name, lambda evt: events.append((evt.name, evt.payload)))
    schemas = []
    w.schema_generated.connect(schemas.append)

    assert w.process_file(sketch)
    worker = FakeWorker.created[-1]
    assert worker.started and worker.mime_type == "image/png" and worker.api_key == "key"
    assert w.is_busy and not w.choose_btn.isEnabled()

    worker.finished.emit(RAW, "", worker.token)
    assert not w.is_busy and w.choose_btn.isEnabled()
    (schema,) = schemas
    assert [t.name for t in schema.tables] == ["users", "posts"]
    assert len(schema.relationships) == 1
    assert events[-1] == (
        GUIEvent.EXTRACTION_FINISHED.value,
        {"tables": 2, "relationships": 1, "dropped": 1},
    )


def test_stale_response_is_ignored(view, sketch):
    w, _ = view
    schemas = []
    w.schema_generated.connect(schemas.append)
    w.process_file(sketch)
    w.process_file(sketch)
    old, new = FakeWorker.created
    old.finished.emit(RAW, "", old.token)
    assert schemas == [] and w.is_busy
    new.finished.emit(RAW, "", new.token)
    assert len(schemas) == 1


def test_error_is_shown(view, sketch):
    w, bus = view
    failures = []
    bus.subscribe(GUIEvent.EXTRACTION_FAILED, lambda evt: failures.append(evt.payload))
    w.process_file(sketch)
    worker = FakeWorker.created[-1]
    worker.finished.emit(None, "No response text generated", worker.token)
    assert w.error_label.text() == "No response text generated"
    assert failures == [{"error": "No response text generated"}]


def test_load_sample_emits_sample(view):
    w, _ = view
    schemas = []
    w.schema_generated.connect(schemas.append)
    w.load_sample()
    assert [t.name for t in schemas[0].tables] == ["USERS", "NOTES", "NOTE_TAGS", "TAGS"]


def test_sample_supersedes_running_extraction(view, sketch):
    w, _ = view
    schemas = []
    w.schema_generated.connect(schemas.append)
    w.process_file(sketch)
    assert not w.sample_btn.isEnabled()
    worker = FakeWorker.created[-1]
    w.load_sample()
    assert not w.is_busy and w.sample_btn.isEnabled()
    worker.finished.emit(RAW, "", worker.token)
    assert [[t.name for t in s.tables] for s in schemas] == [["USERS", "NOTES", "NOTE_TAGS", "TAGS"]]


def test_worker_run_reports_result_and_errors(qtbot):
    results = []
    ok = ExtractionWorker(b"img", "k", token=3, analyze=lambda image, key, mime_type: RAW)
    ok.finished.connect(lambda raw, err, token: results.append((raw, err, token)))
    ok.run()

    def fail(image, key, mime_type):
        raise ExtractionError("quota exceeded")

    bad = ExtractionWorker(b"img", "k", token=4, analyze=fail)
    bad.finished.connect(lambda raw, err, token: results.append((raw, err, token)))
    bad.run()

    def crash(image, key, mime_type):
        raise KeyError("boom")

    worse = ExtractionWorker(b"img", "k", token=5, analyze=crash)
    worse.finished.connect(lambda raw, err, token: results.append((raw, err, token)))
    worse.run()

    assert results[0] == (RAW, "", 3)
    assert results[1] == (None, "quota exceeded", 4)
    assert results[2][0] is None and results[2][1].startswith("Failed to analyze sketch")
