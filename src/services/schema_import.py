"""Turn a raw extraction bundle into a Schema.

Two passes: first the tables are laid out and indexed by lower-cased name,
then each name-based relationship is resolved against that index.
Relationships naming an unknown table or column are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from domain.models import Relationship, Schema, Table, generate_id
from services.layout import layout_tables

__all__ = [
    "NameIndex",
    "ImportResult",
    "import_extraction",
    "export_relationship_names",
    "export_raw",
]

logger = logging.getLogger(__name__)


def _key(name: Any) -> str:
    return str(name or "").strip().lower()


@dataclass
class NameIndex:
    """Case-insensitive lookup from table/column names to ids.

    The first table (or column) carrying a given name wins.
    """

    tables: Dict[str, Table] = field(default_factory=dict)
    columns: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @classmethod
    def build(cls, tables: Tuple[Table, ...]) -> "NameIndex":
        idx = cls()
        for t in tables:
            idx.tables.setdefault(_key(t.name), t)
            cols = idx.columns.setdefault(t.id, {})
            for c in t.columns:
                cols.setdefault(_key(c.name), c.id)
        return idx

    def resolve(self, table_name: Any, column_name: Any) -> Optional[Tuple[str, str]]:
        table = self.tables.get(_key(table_name))
        if table is None:
            return None
        col_id = self.columns.get(table.id, {}).get(_key(column_name))
        if col_id is None:
            return None
        return table.id, col_id


@dataclass
class ImportResult:
    schema: Schema
    dropped: List[Mapping[str, Any]] = field(default_factory=list)


def import_extraction(
    raw: Mapping[str, Any],
    *,
    per_row: Optional[int] = None,
    id_factory: Callable[[], str] = generate_id,
) -> ImportResult:
    tables = layout_tables(raw.get("tables") or [], per_row=per_row, id_factory=id_factory)
    index = NameIndex.build(tables)
    relationships: List[Relationship] = []
    dropped: List[Mapping[str, Any]] = []
    for rel in raw.get("relationships") or []:
        if not isinstance(rel, Mapping):
            logger.debug("skipping malformed relationship %r", rel)
            continue
        src = index.resolve(rel.get("fromTable"), rel.get("fromColumn"))
        dst = index.resolve(rel.get("toTable"), rel.get("toColumn"))
        if src is None or dst is None:
            logger.debug("dropping unresolved relationship %r", rel)
            dropped.append(rel)
            continue
        relationships.append(
            Relationship(
                id=id_factory(),
                from_table_id=src[0],
                from_column_id=src[1],
                to_table_id=dst[0],
                to_column_id=dst[1],
            )
        )
    if dropped:
        logger.info("import dropped %d unresolved relationship(s)", len(dropped))
    return ImportResult(
        schema=Schema(tables=tables, relationships=tuple(relationships)), dropped=dropped
    )


def export_relationship_names(schema: Schema) -> List[Dict[str, str]]:
    """Inverse of the import step: relationships expressed by table/column names.

    Relationships that no longer resolve are skipped.
    """
    by_id = schema.table_by_id()
    out: List[Dict[str, str]] = []
    for rel in schema.relationships:
        src = by_id.get(rel.from_table_id)
        dst = by_id.get(rel.to_table_id)
        if src is None or dst is None:
            continue
        src_col = src.find_column(rel.from_column_id)
        dst_col = dst.find_column(rel.to_column_id)
        if src_col is None or dst_col is None:
            continue
        out.append(
            {
                "fromTable": src.name,
                "fromColumn": src_col.name,
                "toTable": dst.name,
                "toColumn": dst_col.name,
            }
        )
    return out


def export_raw(schema: Schema) -> Dict[str, Any]:
    """Schema in the extraction payload shape (names only, no ids or positions)."""
    return {
        "tables": [
            {
                "name": t.name,
                "columns": [
                    {
                        "name": c.name,
                        "type": c.type,
                        "isPk": c.is_pk,
                        "isFk": c.is_fk,
                        "isUnique": c.is_unique,
                        "isNullable": c.is_nullable,
                    }
                    for c in t.columns
                ],
            }
            for t in schema.tables
        ],
        "relationships": export_relationship_names(schema),
    }
