"""Sketch to Schema GUI public API.

Small, Qt-free surface for the CLI and tests. Widgets are imported from
``gui.views`` explicitly so that importing ``gui`` never requires a display.
"""

from __future__ import annotations

from .services.service_locator import (  # noqa: F401
    services,
    ServiceLocator,
    ServiceAlreadyRegisteredError,
    ServiceNotFoundError,
)
from .services.event_bus import (  # noqa: F401
    EventBus,
    GUIEvent,
    Event,
)
from .services.schema_store import SchemaStore  # noqa: F401
