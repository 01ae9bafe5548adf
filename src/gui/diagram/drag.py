"""Card drag tracking.

Pointer deltas arrive in screen pixels; stored positions are world units, so
each delta is divided by the current zoom scale before being applied. The
actual mutation goes through ``move_table`` so the schema owner stays the
only writer.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from domain.models import Schema
from gui.diagram.geometry import CardGeometry, Point, Rect

__all__ = ["DragController", "header_rect", "hit_header"]

logger = logging.getLogger(__name__)


def header_rect(x: float, y: float, geometry: CardGeometry) -> Rect:
    return Rect(x, y, geometry.width, geometry.header_height)


def hit_header(
    schema: Schema, world: Point, geometry: CardGeometry = CardGeometry()
) -> Optional[str]:
    """Id of the topmost table whose header contains ``world``.

    Later tables paint over earlier ones, so the search runs back to front.
    """
    for table in reversed(schema.tables):
        if header_rect(table.position.x, table.position.y, geometry).contains(world):
            return table.id
    return None


class DragController:
    def __init__(self, move_table: Callable[[str, float, float], object]) -> None:
        self._move_table = move_table
        self._target: Optional[str] = None

    @property
    def target(self) -> Optional[str]:
        return self._target

    @property
    def is_dragging(self) -> bool:
        return self._target is not None

    def press(self, table_id: str) -> bool:
        """Begin dragging ``table_id``; returns True so callers stop propagation."""
        self._target = table_id
        logger.debug("drag start %s", table_id)
        return True

    def move(self, dx: float, dy: float, scale: float, *, panning: bool = False) -> bool:
        if self._target is None or panning:
            return False
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        self._move_table(self._target, dx / scale, dy / scale)
        return True

    def release(self) -> None:
        if self._target is not None:
            logger.debug("drag end %s", self._target)
        self._target = None

    leave = release
