"""CREATE TABLE text for the SQL preview panel.

Output is readable DDL, close to each dialect but not validated against a
real server. Foreign keys come from the relationship set, not from the
column ``is_fk`` flag alone.
"""

from __future__ import annotations

from typing import Dict, List

from domain.models import Column, DBType, Schema, Table

__all__ = ["map_type", "quote_ident", "generate_sql"]

_TYPE_MAP: Dict[DBType, Dict[str, str]] = {
    DBType.POSTGRES: {
        "FLOAT": "DOUBLE PRECISION",
        "JSON": "JSONB",
    },
    DBType.MYSQL: {
        "SERIAL": "INT AUTO_INCREMENT",
        "INTEGER": "INT",
        "VARCHAR": "VARCHAR(255)",
        "TIMESTAMP": "DATETIME",
        "UUID": "CHAR(36)",
        "BOOLEAN": "TINYINT(1)",
    },
    DBType.SQLITE: {
        "SERIAL": "INTEGER",
        "VARCHAR": "TEXT",
        "BOOLEAN": "INTEGER",
        "TIMESTAMP": "TEXT",
        "DATE": "TEXT",
        "FLOAT": "REAL",
        "DECIMAL": "NUMERIC",
        "JSON": "TEXT",
        "UUID": "TEXT",
    },
}


def map_type(type_name: str, dialect: DBType) -> str:
    base = (type_name or "TEXT").strip().upper()
    if dialect == DBType.POSTGRES and base == "VARCHAR":
        return "VARCHAR(255)"
    return _TYPE_MAP.get(dialect, {}).get(base, base)


def quote_ident(name: str, dialect: DBType) -> str:
    if dialect == DBType.MYSQL:
        return "`" + name.replace("`", "``") + "`"
    return '"' + name.replace('"', '""') + '"'


def _column_line(col: Column, dialect: DBType, single_pk: bool) -> str:
    parts = [quote_ident(col.name, dialect), map_type(col.type, dialect)]
    if col.is_pk and single_pk:
        parts.append("PRIMARY KEY")
    elif not col.is_nullable:
        parts.append("NOT NULL")
    if col.is_unique and not col.is_pk:
        parts.append("UNIQUE")
    return " ".join(parts)


def _create_table(table: Table, schema: Schema, dialect: DBType) -> str:
    pks = [c for c in table.columns if c.is_pk]
    single_pk = len(pks) == 1
    lines: List[str] = [_column_line(c, dialect, single_pk) for c in table.columns]
    if len(pks) > 1:
        cols = ", ".join(quote_ident(c.name, dialect) for c in pks)
        lines.append(f"PRIMARY KEY ({cols})")
    by_id = schema.table_by_id()
    for rel in schema.relationships:
        if rel.from_table_id != table.id:
            continue
        src_col = table.find_column(rel.from_column_id)
        target = by_id.get(rel.to_table_id)
        dst_col = target.find_column(rel.to_column_id) if target is not None else None
        if src_col is None or target is None or dst_col is None:
            continue
        lines.append(
            f"FOREIGN KEY ({quote_ident(src_col.name, dialect)}) "
            f"REFERENCES {quote_ident(target.name, dialect)} "
            f"({quote_ident(dst_col.name, dialect)})"
        )
    body = ",\n".join(f"  {line}" for line in lines)
    return f"CREATE TABLE {quote_ident(table.name, dialect)} (\n{body}\n);"


def generate_sql(schema: Schema, dialect: DBType | str = DBType.POSTGRES) -> str:
    dialect = DBType(dialect)
    if schema.is_empty:
        return f"-- {dialect.value}: no tables defined\n"
    header = f"-- Generated for {dialect.value}\n"
    statements = [_create_table(t, schema, dialect) for t in schema.tables]
    return header + "\n\n".join(statements) + "\n"
