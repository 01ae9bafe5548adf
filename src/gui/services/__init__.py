"""Service layer exports.

Responsibilities:
 - Dependency/service locator (`services`)
 - EventBus publish/subscribe core
 - SchemaStore, the single owner of the current Schema snapshot
 - LoggingService ring buffer
"""

from .service_locator import services, ServiceLocator  # noqa: F401
from .event_bus import EventBus, GUIEvent  # noqa: F401
from .schema_store import SchemaStore  # noqa: F401
from .logging_service import LoggingService  # noqa: F401

__all__ = [
    "services",
    "ServiceLocator",
    "EventBus",
    "GUIEvent",
    "SchemaStore",
    "LoggingService",
]
