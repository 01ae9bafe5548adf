"""Dedicated launcher module for `python -m gui`, the CLI `gui` command or external callers.

Delegates to the bootstrap (`create_app`) so service registration and
config loading happen the same way for every entry point.
"""

from __future__ import annotations

import logging

from config import settings
from domain.models import Schema
from gui.app.bootstrap import create_app
from gui.services.logging_service import configure_logging


def main(schema: Schema | None = None, data_dir: str | None = None) -> int:  # pragma: no cover - runtime
    configure_logging(logging.INFO)
    ctx = create_app(headless=False, data_dir=data_dir or settings.DATA_DIR, schema=schema)
    from gui.main_window import MainWindow

    win = MainWindow(ctx)
    win.show()
    return ctx.qt_app.exec()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
