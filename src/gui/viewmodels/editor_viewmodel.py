"""ViewModel for the schema editor.

Keeps the selected table and SQL dialect and forwards every edit to the
SchemaStore. The editor widget only renders what this exposes.
"""

from __future__ import annotations

from typing import List, Optional

from domain.models import Column, ColumnType, DBType, Table
from gui.services.schema_store import SchemaStore
from services.sql_generator import generate_sql

__all__ = ["EditorViewModel", "COLUMN_TYPES", "FLAG_FIELDS"]

COLUMN_TYPES: List[str] = [t.value for t in ColumnType]

# grid header label -> Column field
FLAG_FIELDS = {
    "PK": "is_pk",
    "FK": "is_fk",
    "UQ": "is_unique",
    "NN": "is_nullable",
}


class EditorViewModel:
    def __init__(self, store: SchemaStore, dialect: DBType | str = DBType.POSTGRES):
        self._store = store
        self.dialect = DBType(dialect)
        tables = store.schema.tables
        self._selected_id: Optional[str] = tables[0].id if tables else None

    @property
    def store(self) -> SchemaStore:
        return self._store

    # Selection ------------------------------------------------------------
    @property
    def selected_table_id(self) -> Optional[str]:
        if self._selected_id and self._store.schema.find_table(self._selected_id) is None:
            self._selected_id = None
        return self._selected_id

    def select(self, table_id: Optional[str]) -> None:
        self._selected_id = table_id

    def selected_table(self) -> Optional[Table]:
        tid = self.selected_table_id
        return self._store.schema.find_table(tid) if tid else None

    def tables(self) -> List[Table]:
        return list(self._store.schema.tables)

    # Table operations -------------------------------------------------------
    def add_table(self) -> Table:
        table = self._store.add_table()
        self._selected_id = table.id
        return table

    def delete_table(self, table_id: str) -> None:
        self._store.delete_table(table_id)
        if self._selected_id == table_id:
            self._selected_id = None

    def rename_selected(self, name: str) -> None:
        tid = self.selected_table_id
        if tid:
            self._store.rename_table(tid, name)

    # Column operations ------------------------------------------------------
    def add_column(self) -> Optional[Column]:
        tid = self.selected_table_id
        return self._store.add_column(tid) if tid else None

    def delete_column(self, column_id: str) -> None:
        tid = self.selected_table_id
        if tid:
            self._store.delete_column(tid, column_id)

    def rename_column(self, column_id: str, name: str) -> None:
        tid = self.selected_table_id
        if tid:
            self._store.update_column(tid, column_id, name=name)

    def set_column_type(self, column_id: str, type_name: str) -> None:
        tid = self.selected_table_id
        if tid:
            self._store.update_column(tid, column_id, type=type_name)

    def toggle_flag(self, column_id: str, flag: str) -> None:
        """Flip one of ``is_pk`` / ``is_fk`` / ``is_unique`` / ``is_nullable``."""
        if flag not in FLAG_FIELDS.values():
            raise ValueError(f"unknown column flag: {flag}")
        table = self.selected_table()
        if table is None:
            return
        col = table.find_column(column_id)
        if col is None:
            return
        self._store.update_column(table.id, column_id, **{flag: not getattr(col, flag)})

    # SQL preview --------------------------------------------------------------
    def set_dialect(self, dialect: DBType | str) -> None:
        self.dialect = DBType(dialect)

    def sql(self) -> str:
        return generate_sql(self._store.schema, self.dialect)
