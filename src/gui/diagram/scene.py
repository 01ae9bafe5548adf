"""Diagram scene composition.

``build_scene`` turns a Schema snapshot and a viewport snapshot into a flat,
paint-ready description: the transform, a connector layer and a card layer
drawn on top of it. The Qt view and the SVG exporter both consume this, so
neither needs to know about routing or row geometry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from domain.models import Schema, Table
from gui.diagram.connector_router import ConnectorPath, route_all
from gui.diagram.geometry import CardGeometry, Rect
from gui.diagram.viewport import ViewportState

__all__ = ["RowLayout", "CardLayout", "DiagramScene", "build_card", "build_scene"]


@dataclass(frozen=True, slots=True)
class RowLayout:
    column_id: str
    index: int
    name: str
    type: str
    is_pk: bool
    is_fk: bool
    rect: Rect

    @property
    def center_y(self) -> float:
        return self.rect.y + self.rect.height / 2


@dataclass(frozen=True, slots=True)
class CardLayout:
    table_id: str
    title: str
    rect: Rect
    header: Rect
    rows: Tuple[RowLayout, ...]
    dragging: bool = False


@dataclass(frozen=True)
class DiagramScene:
    scale: float
    offset_x: float
    offset_y: float
    connectors: Tuple[ConnectorPath, ...] = ()
    cards: Tuple[CardLayout, ...] = ()
    meta: dict = field(default_factory=dict)

    def bounds(self, margin: float = 0.0) -> Rect:
        """World-space bounding box of every card and connector."""
        xs: List[float] = []
        ys: List[float] = []
        for card in self.cards:
            xs += [card.rect.x, card.rect.right]
            ys += [card.rect.y, card.rect.bottom]
        for c in self.connectors:
            for p in (c.start, c.control1, c.control2, c.end):
                xs.append(p.x)
                ys.append(p.y)
        if not xs:
            return Rect(0.0, 0.0, 0.0, 0.0)
        left, top = min(xs) - margin, min(ys) - margin
        return Rect(left, top, max(xs) + margin - left, max(ys) + margin - top)

    def card(self, table_id: str) -> Optional[CardLayout]:
        for c in self.cards:
            if c.table_id == table_id:
                return c
        return None


def build_card(table: Table, geometry: CardGeometry, *, dragging: bool = False) -> CardLayout:
    x, y = table.position.x, table.position.y
    rows = []
    for idx, col in enumerate(table.columns):
        top = y + geometry.header_height + idx * geometry.row_height
        rows.append(
            RowLayout(
                column_id=col.id,
                index=idx,
                name=col.name,
                type=col.type,
                is_pk=col.is_pk,
                is_fk=col.is_fk,
                rect=Rect(x, top, geometry.width, geometry.row_height),
            )
        )
    return CardLayout(
        table_id=table.id,
        title=table.name,
        rect=Rect(x, y, geometry.width, geometry.card_height(len(table.columns))),
        header=Rect(x, y, geometry.width, geometry.header_height),
        rows=tuple(rows),
        dragging=dragging,
    )


def build_scene(
    schema: Schema,
    viewport: ViewportState | None = None,
    geometry: CardGeometry = CardGeometry(),
    *,
    dragged_table_id: Optional[str] = None,
) -> DiagramScene:
    viewport = viewport or ViewportState()
    cards = tuple(
        build_card(t, geometry, dragging=t.id == dragged_table_id) for t in schema.tables
    )
    return DiagramScene(
        scale=viewport.scale,
        offset_x=viewport.offset.x,
        offset_y=viewport.offset.y,
        connectors=tuple(route_all(schema, geometry)),
        cards=cards,
        meta={"table_count": len(cards), "relationship_count": len(schema.relationships)},
    )
