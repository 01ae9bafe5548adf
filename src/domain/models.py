"""Domain models for schemas extracted from database sketches.

All types are frozen value objects. Mutation happens by building a new
instance (see ``domain.schema_ops``), so a Schema handed to the renderer can
never change underneath it.
"""

from __future__ import annotations

import random
import string
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple

__all__ = [
    "DBType",
    "ColumnType",
    "ViewMode",
    "Position",
    "Column",
    "Table",
    "Relationship",
    "Schema",
    "generate_id",
]

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_id(length: int = 9) -> str:
    return "".join(random.choice(_ID_ALPHABET) for _ in range(length))


class DBType(str, Enum):
    POSTGRES = "PostgreSQL"
    MYSQL = "MySQL"
    SQLITE = "SQLite"


class ColumnType(str, Enum):
    INTEGER = "INTEGER"
    SERIAL = "SERIAL"
    VARCHAR = "VARCHAR"
    TEXT = "TEXT"
    BOOLEAN = "BOOLEAN"
    TIMESTAMP = "TIMESTAMP"
    DATE = "DATE"
    FLOAT = "FLOAT"
    DECIMAL = "DECIMAL"
    JSON = "JSON"
    UUID = "UUID"


class ViewMode(str, Enum):
    UPLOAD = "upload"
    EDITOR = "editor"
    VISUALIZER = "visualizer"


@dataclass(frozen=True, slots=True)
class Position:
    x: float = 0.0
    y: float = 0.0

    def translated(self, dx: float, dy: float) -> "Position":
        return Position(self.x + dx, self.y + dy)


@dataclass(frozen=True, slots=True)
class Column:
    id: str
    name: str
    type: str = ColumnType.VARCHAR.value
    is_pk: bool = False
    is_fk: bool = False
    is_unique: bool = False
    is_nullable: bool = True


@dataclass(frozen=True, slots=True)
class Table:
    id: str
    name: str
    columns: Tuple[Column, ...] = ()
    position: Position = field(default_factory=Position)

    def column_index(self, column_id: str) -> int:
        """Row index of ``column_id`` on the card, or -1 when absent."""
        for idx, col in enumerate(self.columns):
            if col.id == column_id:
                return idx
        return -1

    def find_column(self, column_id: str) -> Optional[Column]:
        idx = self.column_index(column_id)
        return self.columns[idx] if idx >= 0 else None

    def moved_by(self, dx: float, dy: float) -> "Table":
        return replace(self, position=self.position.translated(dx, dy))


@dataclass(frozen=True, slots=True)
class Relationship:
    id: str
    from_table_id: str
    from_column_id: str  # FK side
    to_table_id: str
    to_column_id: str  # PK side

    def touches(self, table_id: str) -> bool:
        return self.from_table_id == table_id or self.to_table_id == table_id


@dataclass(frozen=True, slots=True)
class Schema:
    tables: Tuple[Table, ...] = ()
    relationships: Tuple[Relationship, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.tables

    def table_by_id(self) -> Dict[str, Table]:
        return {t.id: t for t in self.tables}

    def find_table(self, table_id: str) -> Optional[Table]:
        for t in self.tables:
            if t.id == table_id:
                return t
        return None

    def dangling_relationships(self) -> Tuple[Relationship, ...]:
        """Relationships whose table or column endpoints no longer resolve."""
        by_id = self.table_by_id()
        out = []
        for rel in self.relationships:
            src = by_id.get(rel.from_table_id)
            dst = by_id.get(rel.to_table_id)
            if (
                src is None
                or dst is None
                or src.find_column(rel.from_column_id) is None
                or dst.find_column(rel.to_column_id) is None
            ):
                out.append(rel)
        return tuple(out)
