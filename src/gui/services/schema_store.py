"""Owner of the current Schema snapshot.

Views never hold a private copy of the schema: they read ``store.schema`` and
ask the store to mutate it. Each mutation swaps in a new immutable snapshot
and, if anything changed, delivers it to listeners and publishes
``GUIEvent.SCHEMA_CHANGED`` on the event bus (when one is attached).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional

from config import settings
from domain import schema_ops
from domain.models import Column, ColumnType, Position, Relationship, Schema, Table, generate_id

from .event_bus import EventBus, GUIEvent

__all__ = ["SchemaStore", "SchemaListener"]

logger = logging.getLogger(__name__)

SchemaListener = Callable[[Schema], None]


class SchemaStore:
    def __init__(self, schema: Schema | None = None, *, event_bus: EventBus | None = None):
        self._schema = schema or Schema()
        self._event_bus = event_bus
        self._listeners: List[SchemaListener] = []

    @property
    def schema(self) -> Schema:
        return self._schema

    # Listeners ----------------------------------------------------------
    def subscribe(self, listener: SchemaListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _commit(self, new: Schema, reason: str) -> Schema:
        if new is self._schema or new == self._schema:
            return self._schema
        self._schema = new
        logger.debug(
            "schema %s: %d tables, %d relationships",
            reason,
            len(new.tables),
            len(new.relationships),
        )
        for listener in list(self._listeners):
            listener(new)
        if self._event_bus is not None:
            self._event_bus.publish(GUIEvent.SCHEMA_CHANGED, {"reason": reason, "schema": new})
        return new

    # Whole-schema ---------------------------------------------------------
    def replace(self, schema: Schema) -> Schema:
        return self._commit(schema, "replace")

    def clear(self) -> Schema:
        return self._commit(Schema(), "clear")

    # Tables ---------------------------------------------------------------
    def add_table(self, table: Table | None = None) -> Table:
        """Append ``table`` (or a default ``new_table`` with an ``id`` PK)."""
        if table is None:
            table = Table(
                id=generate_id(),
                name="new_table",
                columns=(
                    Column(
                        id=generate_id(),
                        name="id",
                        type=ColumnType.INTEGER.value,
                        is_pk=True,
                        is_unique=True,
                        is_nullable=False,
                    ),
                ),
                position=Position(settings.NEW_TABLE_X, settings.NEW_TABLE_Y),
            )
        self._commit(schema_ops.add_table(self._schema, table), "add_table")
        return table

    def rename_table(self, table_id: str, name: str) -> Schema:
        return self._commit(schema_ops.rename_table(self._schema, table_id, name), "rename_table")

    def delete_table(self, table_id: str) -> Schema:
        return self._commit(schema_ops.delete_table(self._schema, table_id), "delete_table")

    def move_table(self, table_id: str, dx: float, dy: float) -> Schema:
        return self._commit(schema_ops.move_table(self._schema, table_id, dx, dy), "move_table")

    def set_position(self, table_id: str, x: float, y: float) -> Schema:
        return self._commit(
            schema_ops.set_table_position(self._schema, table_id, Position(x, y)), "set_position"
        )

    # Columns --------------------------------------------------------------
    def add_column(self, table_id: str, column: Column | None = None) -> Optional[Column]:
        if self._schema.find_table(table_id) is None:
            return None
        column = column or Column(
            id=generate_id(),
            name="new_column",
            type=ColumnType.VARCHAR.value,
            is_nullable=True,
        )
        self._commit(schema_ops.add_column(self._schema, table_id, column), "add_column")
        return column

    def update_column(self, table_id: str, column_id: str, **changes: Any) -> Schema:
        return self._commit(
            schema_ops.update_column(self._schema, table_id, column_id, **changes),
            "update_column",
        )

    def delete_column(self, table_id: str, column_id: str) -> Schema:
        return self._commit(
            schema_ops.delete_column(self._schema, table_id, column_id), "delete_column"
        )

    # Relationships ----------------------------------------------------------
    def set_relationships(self, relationships: Iterable[Relationship]) -> Schema:
        return self._commit(
            schema_ops.set_relationships(self._schema, relationships), "set_relationships"
        )
