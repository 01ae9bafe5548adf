"""Diagram layer: viewport, card dragging, connector routing and scene composition.

Everything here is Qt-free so it can be unit tested headless; the widget
that paints a scene lives in ``gui.views.diagram_view``.
"""

from .geometry import CardGeometry, Point, Rect  # noqa: F401
from .viewport import ViewportController, ViewportState, clamp_scale  # noqa: F401
from .drag import DragController, hit_header  # noqa: F401
from .connector_router import ConnectorPath, RouteKind, route, route_all  # noqa: F401
from .scene import CardLayout, DiagramScene, RowLayout, build_scene  # noqa: F401

__all__ = [
    "CardGeometry",
    "Point",
    "Rect",
    "ViewportController",
    "ViewportState",
    "clamp_scale",
    "DragController",
    "hit_header",
    "ConnectorPath",
    "RouteKind",
    "route",
    "route_all",
    "CardLayout",
    "DiagramScene",
    "RowLayout",
    "build_scene",
]
