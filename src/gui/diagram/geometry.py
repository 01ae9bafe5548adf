"""Card geometry shared by the connector router and the card painter.

Both sides must agree on header/row sizes, otherwise connectors point at the
wrong column row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from config import settings

__all__ = ["Point", "Rect", "CardGeometry"]


class Point(NamedTuple):
    x: float
    y: float


class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, p: Point) -> bool:
        return self.x <= p.x <= self.right and self.y <= p.y <= self.bottom

    def intersects(self, other: "Rect") -> bool:
        return not (
            other.x >= self.right
            or other.right <= self.x
            or other.y >= self.bottom
            or other.bottom <= self.y
        )


@dataclass(frozen=True, slots=True)
class CardGeometry:
    width: float = settings.CARD_WIDTH
    header_height: float = settings.CARD_HEADER_HEIGHT
    row_height: float = settings.CARD_ROW_HEIGHT
    missing_column_offset: float = settings.MISSING_COLUMN_OFFSET
    gap_threshold: float = settings.CONNECTOR_GAP_THRESHOLD
    control_offset: float = settings.CONNECTOR_CONTROL_OFFSET

    def card_height(self, column_count: int) -> float:
        return self.header_height + max(0, column_count) * self.row_height

    def row_center_y(self, table_y: float, column_index: int) -> float:
        """Anchor Y for a column row; negative index means "not found"."""
        if column_index < 0:
            return table_y + self.header_height + self.missing_column_offset
        return table_y + self.header_height + column_index * self.row_height + self.row_height / 2
