from services.sample_schema import sample_schema
from services.schema_import import (
    NameIndex,
    export_raw,
    export_relationship_names,
    import_extraction,
)


RAW = {
    "tables": [
        {
            "name": "Users",
            "columns": [
                {"name": "id", "type": "SERIAL", "isPk": True, "isFk": False, "isUnique": True, "isNullable": False},
                {"name": "email", "type": "VARCHAR", "isPk": False, "isFk": False, "isUnique": True, "isNullable": False},
            ],
        },
        {
            "name": "posts",
            "columns": [
                {"name": "id", "type": "SERIAL", "isPk": True, "isFk": False, "isUnique": True, "isNullable": False},
                {"name": "User_ID", "type": "INTEGER", "isPk": False, "isFk": True, "isUnique": False, "isNullable": False},
            ],
        },
    ],
    "relationships": [
        {"fromTable": "POSTS", "fromColumn": "user_id", "toTable": " users ", "toColumn": "ID"},
        {"fromTable": "posts", "fromColumn": "author_id", "toTable": "users", "toColumn": "id"},
        {"fromTable": "comments", "fromColumn": "post_id", "toTable": "posts", "toColumn": "id"},
    ],
}


def test_names_resolve_case_insensitively(id_factory):
    result = import_extraction(RAW, id_factory=id_factory)
    schema = result.schema
    users, posts = schema.tables
    assert len(schema.relationships) == 1
    r = schema.relationships[0]
    assert r.from_table_id == posts.id
    assert r.from_column_id == posts.columns[1].id
    assert r.to_table_id == users.id
    assert r.to_column_id == users.columns[0].id


def test_unresolved_relationships_are_dropped_and_reported(id_factory):
    result = import_extraction(RAW, id_factory=id_factory)
    assert [d["fromColumn"] for d in result.dropped] == ["author_id", "post_id"]
    assert result.schema.dangling_relationships() == ()


def test_every_imported_relationship_resolves():
    result = import_extraction(RAW)
    by_id = result.schema.table_by_id()
    for r in result.schema.relationships:
        assert by_id[r.from_table_id].find_column(r.from_column_id) is not None
        assert by_id[r.to_table_id].find_column(r.to_column_id) is not None


def test_columns_keep_flags_and_ids_are_unique():
    result = import_extraction(RAW)
    users = result.schema.tables[0]
    email = users.columns[1]
    assert (email.type, email.is_unique, email.is_nullable) == ("VARCHAR", True, False)
    ids = [t.id for t in result.schema.tables] + [
        c.id for t in result.schema.tables for c in t.columns
    ]
    assert len(ids) == len(set(ids))


def test_duplicate_table_names_first_wins(id_factory):
    raw = {
        "tables": [
            {"name": "items", "columns": [{"name": "id"}]},
            {"name": "ITEMS", "columns": [{"name": "id"}]},
            {"name": "orders", "columns": [{"name": "item_id"}]},
        ],
        "relationships": [
            {"fromTable": "orders", "fromColumn": "item_id", "toTable": "items", "toColumn": "id"}
        ],
    }
    schema = import_extraction(raw, id_factory=id_factory).schema
    assert schema.relationships[0].to_table_id == schema.tables[0].id


def test_missing_lists_produce_empty_schema():
    result = import_extraction({})
    assert result.schema.is_empty
    assert result.dropped == []


def test_name_index_resolve():
    schema = sample_schema()
    index = NameIndex.build(schema.tables)
    assert index.resolve("notes", "USER_ID") == ("notes_table", "notes_user_id")
    assert index.resolve("notes", "missing") is None
    assert index.resolve(None, "id") is None


def test_export_then_import_preserves_names():
    original = sample_schema()
    raw = export_raw(original)
    reimported = import_extraction(raw).schema
    assert [t.name for t in reimported.tables] == [t.name for t in original.tables]
    assert export_relationship_names(reimported) == export_relationship_names(original)


def test_malformed_entries_are_skipped(id_factory):
    raw = {
        "tables": [None, "users", {"name": "users", "columns": [None, {"name": "id"}]}],
        "relationships": ["x", None, {"fromTable": "users", "fromColumn": "id", "toTable": "users", "toColumn": "id"}],
    }
    result = import_extraction(raw, id_factory=id_factory)
    (users,) = result.schema.tables
    assert [c.name for c in users.columns] == ["id"]
    assert len(result.schema.relationships) == 1
    assert result.dropped == []
