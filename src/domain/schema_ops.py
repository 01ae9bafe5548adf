"""Pure replace-in-place operations over the Schema aggregate.

Every function takes a Schema and returns a new one; unknown ids leave the
input untouched (the same object is returned so callers can detect no-ops
with an identity check).
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from domain.models import Column, Position, Relationship, Schema, Table

__all__ = [
    "add_table",
    "update_table",
    "rename_table",
    "delete_table",
    "add_column",
    "update_column",
    "delete_column",
    "set_relationships",
    "move_table",
    "set_table_position",
]


def _map_table(schema: Schema, table_id: str, fn) -> Schema:
    changed = False
    tables = []
    for t in schema.tables:
        if t.id == table_id:
            new_t = fn(t)
            changed = changed or new_t != t
            tables.append(new_t)
        else:
            tables.append(t)
    if not changed:
        return schema
    return replace(schema, tables=tuple(tables))


def add_table(schema: Schema, table: Table) -> Schema:
    return replace(schema, tables=schema.tables + (table,))


def update_table(schema: Schema, table_id: str, **changes) -> Schema:
    return _map_table(schema, table_id, lambda t: replace(t, **changes))


def rename_table(schema: Schema, table_id: str, name: str) -> Schema:
    return update_table(schema, table_id, name=name)


def delete_table(schema: Schema, table_id: str) -> Schema:
    """Remove a table and, atomically, every relationship touching it."""
    if schema.find_table(table_id) is None:
        return schema
    return Schema(
        tables=tuple(t for t in schema.tables if t.id != table_id),
        relationships=tuple(r for r in schema.relationships if not r.touches(table_id)),
    )


def add_column(schema: Schema, table_id: str, column: Column) -> Schema:
    return _map_table(schema, table_id, lambda t: replace(t, columns=t.columns + (column,)))


def update_column(schema: Schema, table_id: str, column_id: str, **changes) -> Schema:
    def _apply(t: Table) -> Table:
        cols = tuple(replace(c, **changes) if c.id == column_id else c for c in t.columns)
        return replace(t, columns=cols)

    return _map_table(schema, table_id, _apply)


def delete_column(schema: Schema, table_id: str, column_id: str) -> Schema:
    # Relationships pointing at the column are kept; the router anchors them
    # at the default offset until the user fixes or removes them.
    return _map_table(
        schema,
        table_id,
        lambda t: replace(t, columns=tuple(c for c in t.columns if c.id != column_id)),
    )


def set_relationships(schema: Schema, relationships: Iterable[Relationship]) -> Schema:
    """Replace the relationship set, dropping entries whose tables do not exist."""
    table_ids = {t.id for t in schema.tables}
    kept = tuple(
        r
        for r in relationships
        if r.from_table_id in table_ids and r.to_table_id in table_ids
    )
    return replace(schema, relationships=kept)


def set_table_position(schema: Schema, table_id: str, position: Position) -> Schema:
    return update_table(schema, table_id, position=position)


def move_table(schema: Schema, table_id: str, dx: float, dy: float) -> Schema:
    return _map_table(schema, table_id, lambda t: t.moved_by(dx, dy))
