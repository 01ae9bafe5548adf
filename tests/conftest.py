# Minimal conftest providing a fallback 'qtbot' fixture if pytest-qt is not installed.
# This prevents tests that expect a qtbot from erroring; they will still perform
# basic widget lifecycle operations. If pytest-qt is installed, its fixture wins.

import sys
import os
import contextlib
import itertools
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:  # If pytest-qt present, do nothing (its fixture will be used)
    import pytestqt  # type: ignore  # noqa: F401
except ImportError:  # pragma: no cover
    try:
        from PyQt6.QtWidgets import QApplication
    except ImportError:  # pragma: no cover
        QApplication = None  # type: ignore

    @pytest.fixture
    def qtbot():  # type: ignore
        if QApplication is None:
            pytest.skip("PyQt6 not available")
        app = QApplication.instance() or QApplication(sys.argv)  # type: ignore
        widgets = []

        class Bot:
            def addWidget(self, w):  # mimic pytest-qt API subset
                widgets.append(w)

            @contextlib.contextmanager
            def waitSignal(self, *args, **kwargs):  # no-op stub
                yield

            def wait(self, ms):
                app.processEvents()

        yield Bot()
        for w in widgets:
            w.close()


@pytest.fixture
def id_factory():
    """Deterministic ids: id1, id2, ..."""
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    return str(tmp_path)
