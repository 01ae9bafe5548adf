"""Relationship connector routing.

``route`` maps a relationship plus the current table positions to a single
cubic Bezier from the FK column row of the source card to the PK column
row of the target card. Four cases, checked in order:

 - right-flow: target clearly right of the source (gap above threshold);
   leave the source's right edge, enter the target's left edge
 - left-flow: mirror of right-flow
 - loop-right: cards overlap horizontally or are stacked and the target's
   center is right of the source's; both ends on right edges, bowed outward
 - loop-left: everything else (equal centers included); both ends on left
   edges, bowed outward to the left

This keeps curves out of card bodies for side-by-side, stacked and
overlapping layouts. It is not an obstacle-avoiding router: a third card
sitting between the two endpoints can still be crossed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from domain.models import Relationship, Schema, Table
from gui.diagram.geometry import CardGeometry, Point

__all__ = [
    "RouteKind",
    "ArrowMarker",
    "ConnectorPath",
    "anchor_y",
    "route",
    "route_all",
]

_DEFAULT_GEOMETRY = CardGeometry()


class RouteKind(str, Enum):
    RIGHT_FLOW = "right_flow"
    LEFT_FLOW = "left_flow"
    LOOP_RIGHT = "loop_right"
    LOOP_LEFT = "loop_left"


def _fmt(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(round(value, 3))


@dataclass(frozen=True, slots=True)
class ArrowMarker:
    """Filled triangle with its tip on the connector end."""

    tip: Point
    direction: Point  # unit vector along the final tangent
    length: float = 10.0
    width: float = 7.0

    def points(self) -> Tuple[Point, Point, Point]:
        dx, dy = self.direction
        base_x = self.tip.x - dx * self.length
        base_y = self.tip.y - dy * self.length
        half = self.width / 2
        # perpendicular (-dy, dx)
        return (
            Point(base_x - dy * half, base_y + dx * half),
            self.tip,
            Point(base_x + dy * half, base_y - dx * half),
        )


@dataclass(frozen=True, slots=True)
class ConnectorPath:
    relationship_id: str
    kind: RouteKind
    start: Point
    control1: Point
    control2: Point
    end: Point

    def to_svg(self) -> str:
        s, c1, c2, e = self.start, self.control1, self.control2, self.end
        return (
            f"M {_fmt(s.x)} {_fmt(s.y)} "
            f"C {_fmt(c1.x)} {_fmt(c1.y)}, {_fmt(c2.x)} {_fmt(c2.y)}, {_fmt(e.x)} {_fmt(e.y)}"
        )

    def point_at(self, t: float) -> Point:
        """Point on the curve for ``t`` in [0, 1]."""
        u = 1.0 - t
        a, b, c, d = u * u * u, 3 * u * u * t, 3 * u * t * t, t * t * t
        return Point(
            a * self.start.x + b * self.control1.x + c * self.control2.x + d * self.end.x,
            a * self.start.y + b * self.control1.y + c * self.control2.y + d * self.end.y,
        )

    def arrow(self) -> ArrowMarker:
        dx = self.end.x - self.control2.x
        dy = self.end.y - self.control2.y
        norm = math.hypot(dx, dy)
        if norm == 0:
            # degenerate tangent; fall back to the chord, then to +x
            dx = self.end.x - self.start.x
            dy = self.end.y - self.start.y
            norm = math.hypot(dx, dy)
        direction = Point(dx / norm, dy / norm) if norm else Point(1.0, 0.0)
        return ArrowMarker(tip=self.end, direction=direction)


def anchor_y(table: Table, column_id: str, geometry: CardGeometry = _DEFAULT_GEOMETRY) -> float:
    return geometry.row_center_y(table.position.y, table.column_index(column_id))


def route(
    relationship: Relationship,
    tables_by_id: Mapping[str, Table],
    geometry: CardGeometry = _DEFAULT_GEOMETRY,
) -> Optional[ConnectorPath]:
    """Route one relationship; None when either table is missing."""
    src = tables_by_id.get(relationship.from_table_id)
    dst = tables_by_id.get(relationship.to_table_id)
    if src is None or dst is None:
        return None

    from_y = anchor_y(src, relationship.from_column_id, geometry)
    to_y = anchor_y(dst, relationship.to_column_id, geometry)
    from_x = src.position.x
    to_x = dst.position.x
    from_right = from_x + geometry.width
    to_right = to_x + geometry.width

    def _path(kind: RouteKind, sx: float, c1x: float, c2x: float, ex: float) -> ConnectorPath:
        return ConnectorPath(
            relationship_id=relationship.id,
            kind=kind,
            start=Point(sx, from_y),
            control1=Point(c1x, from_y),
            control2=Point(c2x, to_y),
            end=Point(ex, to_y),
        )

    if to_x > from_right + geometry.gap_threshold:
        dist = (to_x - from_right) * 0.5
        return _path(RouteKind.RIGHT_FLOW, from_right, from_right + dist, to_x - dist, to_x)

    if from_x > to_right + geometry.gap_threshold:
        dist = (from_x - to_right) * 0.5
        return _path(RouteKind.LEFT_FLOW, from_x, from_x - dist, to_right + dist, to_right)

    from_center = from_x + geometry.width / 2
    to_center = to_x + geometry.width / 2
    bow = geometry.control_offset
    if to_center > from_center:
        return _path(RouteKind.LOOP_RIGHT, from_right, from_right + bow, to_right + bow, to_right)
    return _path(RouteKind.LOOP_LEFT, from_x, from_x - bow, to_x - bow, to_x)


def route_all(
    schema: Schema, geometry: CardGeometry = _DEFAULT_GEOMETRY
) -> List[ConnectorPath]:
    by_id: Dict[str, Table] = schema.table_by_id()
    paths = []
    for rel in schema.relationships:
        path = route(rel, by_id, geometry)
        if path is not None:
            paths.append(path)
    return paths
