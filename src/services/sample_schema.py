"""Built-in demo schema (users / notes / tags) for trying the app without an API key."""

from __future__ import annotations

from domain.models import Column, Position, Relationship, Schema, Table

__all__ = ["sample_schema"]


def _col(id_: str, name: str, type_: str, *, pk=False, fk=False, unique=False) -> Column:
    return Column(
        id=id_, name=name, type=type_, is_pk=pk, is_fk=fk, is_unique=unique, is_nullable=False
    )


def sample_schema() -> Schema:
    users = Table(
        id="users_table",
        name="USERS",
        position=Position(50, 50),
        columns=(
            _col("users_id", "id", "INTEGER", pk=True, unique=True),
            _col("users_username", "username", "VARCHAR", unique=True),
        ),
    )
    notes = Table(
        id="notes_table",
        name="NOTES",
        position=Position(400, 50),
        columns=(
            _col("notes_id", "id", "INTEGER", pk=True, unique=True),
            _col("notes_user_id", "user_id", "INTEGER", fk=True),
            _col("notes_title", "title", "VARCHAR"),
            _col("notes_content", "content", "TEXT"),
            _col("notes_created_at", "created_at", "TIMESTAMP"),
        ),
    )
    note_tags = Table(
        id="note_tags_table",
        name="NOTE_TAGS",
        position=Position(750, 50),
        columns=(
            _col("note_tags_note_id", "note_id", "INTEGER", pk=True, fk=True),
            _col("note_tags_tag_id", "tag_id", "INTEGER", pk=True, fk=True),
        ),
    )
    tags = Table(
        id="tags_table",
        name="TAGS",
        position=Position(1100, 50),
        columns=(
            _col("tags_id", "id", "INTEGER", pk=True, unique=True),
            _col("tags_name", "name", "VARCHAR", unique=True),
        ),
    )
    return Schema(
        tables=(users, notes, note_tags, tags),
        relationships=(
            Relationship("rel_notes_users", "notes_table", "notes_user_id", "users_table", "users_id"),
            Relationship(
                "rel_note_tags_notes", "note_tags_table", "note_tags_note_id", "notes_table", "notes_id"
            ),
            Relationship(
                "rel_note_tags_tags", "note_tags_table", "note_tags_tag_id", "tags_table", "tags_id"
            ),
        ),
    )
