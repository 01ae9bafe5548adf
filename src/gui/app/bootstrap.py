"""Application bootstrap for the Sketch to Schema GUI.

Responsibilities:
 - Create the QApplication (skipped when headless, e.g. in tests)
 - Load the persisted AppConfig
 - Register core services: event bus, schema store, logging service, config
 - Return a single AppContext with references and startup metadata

PyQt6 is imported lazily so unit tests of the bootstrap run without a display.
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Optional

import psutil

from config import settings
from domain.models import Schema
from gui.services.event_bus import EventBus
from gui.services.logging_service import LoggingService
from gui.services.schema_store import SchemaStore
from gui.services.service_locator import ServiceLocator, services

from .config_store import AppConfig, load_config, save_config
from .timing import TimingLogger

__all__ = ["AppContext", "create_app", "qt_available"]

logger = logging.getLogger(__name__)


def qt_available() -> bool:
    try:
        from PyQt6.QtWidgets import QApplication  # noqa: F401
    except ImportError:
        return False
    return True


@dataclass
class AppContext:
    """References created during bootstrap.

    Attributes
    ----------
    qt_app: The QApplication instance (None when headless).
    headless: Whether headless bootstrap was used.
    config: Loaded AppConfig (saved again at interpreter exit).
    data_dir: Directory holding the config file.
    store: The SchemaStore owning the current schema.
    event_bus: Shared EventBus.
    logging_service: Ring-buffer log capture attached to the root logger.
    services: Global service locator.
    timing: Startup phase timings.
    metadata: Free-form diagnostics (process memory, Qt availability).
    """

    qt_app: Optional[Any]
    headless: bool
    config: AppConfig
    data_dir: str
    store: SchemaStore
    event_bus: EventBus
    logging_service: LoggingService
    services: ServiceLocator
    timing: TimingLogger
    metadata: dict[str, Any]

    def save_config(self) -> None:
        save_config(self.config, self.data_dir)


def create_app(
    *,
    headless: bool | None = None,
    data_dir: str | None = None,
    schema: Schema | None = None,
    persist_on_exit: bool = True,
) -> AppContext:
    """Create and register the application context.

    Parameters
    ----------
    headless: Skip QApplication creation. Defaults to "Qt not importable".
    data_dir: Directory for ``app_state.json`` (defaults to settings.DATA_DIR).
    schema: Optional initial schema for the store.
    persist_on_exit: Register an atexit hook that saves the config.
    """
    has_qt = qt_available()
    if headless is None:
        headless = not has_qt
    data_dir = data_dir or settings.DATA_DIR
    timing = TimingLogger()

    qt_app = None
    if not headless:
        from PyQt6.QtWidgets import QApplication

        with timing.measure("create_qapplication"):
            qt_app = QApplication.instance() or QApplication(sys.argv[:1])
            qt_app.setApplicationName("Sketch to Schema")

    with timing.measure("load_app_config"):
        config = load_config(data_dir)
        env_key = os.environ.get(settings.GEMINI_API_KEY_ENV, "")
        if env_key and not config.api_key:
            config.api_key = env_key

    with timing.measure("register_services"):
        previous = services.try_get("logging_service")
        if isinstance(previous, LoggingService):
            previous.detach_root()
        bus = EventBus()
        log_svc = LoggingService(event_bus=bus)
        log_svc.attach_root()
        store = SchemaStore(schema, event_bus=bus)
        # each bootstrap gets fresh instances (test isolation)
        for key, value in (
            ("event_bus", bus),
            ("logging_service", log_svc),
            ("schema_store", store),
            ("app_config", config),
        ):
            services.register(key, value, allow_override=True)

    timing.stop()
    rss = psutil.Process().memory_info().rss
    logger.info("bootstrap finished in %.3fs (rss=%.1f MiB)", timing.total_duration, rss / 2**20)

    ctx = AppContext(
        qt_app=qt_app,
        headless=headless,
        config=config,
        data_dir=data_dir,
        store=store,
        event_bus=bus,
        logging_service=log_svc,
        services=services,
        timing=timing,
        metadata={
            "qt_available": has_qt,
            "startup_timing": timing.as_dict(),
            "rss_bytes": rss,
        },
    )

    if persist_on_exit:

        def _persist_config() -> None:  # pragma: no cover - atexit
            try:
                ctx.save_config()
            except OSError as e:
                logger.warning("could not save config: %s", e)

        atexit.register(_persist_config)
    return ctx
