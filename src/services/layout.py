"""Initial placement of freshly extracted tables.

Tables are laid out left-to-right in extraction order on a common baseline.
Horizontal spacing is wider than a card, so cards never overlap. When
``per_row`` is given, layout wraps and each new row starts below the
tallest card of the previous one.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from config import settings
from domain.models import Column, ColumnType, Position, Table, generate_id
from gui.diagram.geometry import CardGeometry

__all__ = ["column_from_raw", "layout_tables"]

logger = logging.getLogger(__name__)

_GEOMETRY = CardGeometry()


def column_from_raw(raw: Mapping[str, Any], id_factory: Callable[[], str] = generate_id) -> Column:
    """Build a Column from the extraction payload (camelCase flag keys)."""
    return Column(
        id=id_factory(),
        name=str(raw.get("name") or "column"),
        type=str(raw.get("type") or ColumnType.VARCHAR.value),
        is_pk=bool(raw.get("isPk", False)),
        is_fk=bool(raw.get("isFk", False)),
        is_unique=bool(raw.get("isUnique", False)),
        is_nullable=bool(raw.get("isNullable", True)),
    )


def layout_tables(
    raw_tables: Iterable[Mapping[str, Any]],
    *,
    per_row: Optional[int] = None,
    id_factory: Callable[[], str] = generate_id,
) -> Tuple[Table, ...]:
    if per_row is not None and per_row < 1:
        raise ValueError("per_row must be >= 1")
    tables: List[Table] = []
    x = settings.LAYOUT_ORIGIN_X
    y = settings.LAYOUT_ORIGIN_Y
    row_height = 0.0
    usable = [raw for raw in raw_tables if isinstance(raw, Mapping)]
    for idx, raw in enumerate(usable):
        if per_row is not None and idx and idx % per_row == 0:
            x = settings.LAYOUT_ORIGIN_X
            y += row_height + settings.LAYOUT_ROW_GAP
            row_height = 0.0
        raw_columns = raw.get("columns") or []
        if not isinstance(raw_columns, list):
            raw_columns = []
        columns = tuple(
            column_from_raw(c, id_factory) for c in raw_columns if isinstance(c, Mapping)
        )
        tables.append(
            Table(
                id=id_factory(),
                name=str(raw.get("name") or f"table_{idx + 1}"),
                columns=columns,
                position=Position(x, y),
            )
        )
        row_height = max(row_height, _GEOMETRY.card_height(len(columns)))
        x += settings.LAYOUT_SPACING_X
    logger.debug("laid out %d tables (per_row=%s)", len(tables), per_row)
    return tuple(tables)
