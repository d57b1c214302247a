# ============================================================================
# CATALOG READER TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Tests - Live table introspection with a mocked repository
# PURPOSE: Verify catalog rows become TableDefinitions
# CREATED: 16 OCT 2026
# ============================================================================
"""
Catalog Reader Tests

The repository is a MagicMock answering each catalog query with canned
rows, keyed on the query constant.

Run with:
    pytest tests/test_catalog_reader.py -v
"""

import pytest
from unittest.mock import MagicMock

from core.contracts import ColumnKind, InvalidTypeError
from infrastructure.base_repository import TableNotFoundError
from infrastructure.catalog_reader import (
    COLUMNS_SQL,
    INDEXES_SQL,
    PRIMARY_KEY_SQL,
    TABLE_COMMENT_SQL,
    TABLE_EXISTS_SQL,
    CatalogReader,
)


USERS_COLUMNS = [
    {"name": "id", "not_null": True, "type_name": "bigint", "default_expr": "", "comment": None},
    {"name": "name", "not_null": False, "type_name": "character varying(50)",
     "default_expr": "''::character varying", "comment": '{"label":"Name"}'},
    {"name": "tags", "not_null": False, "type_name": "text[]", "default_expr": None, "comment": "free text"},
]

USERS_INDEXES = [
    {"name": "idx_users_name", "is_unique": True,
     "define": "CREATE UNIQUE INDEX idx_users_name ON public.users USING btree (name)",
     "columns": ["name"], "comment": None},
]


def make_repo(exists=True, columns=None, primary_key=None, indexes=None, table_comment=None, persistence="p"):
    """Mock repository answering the catalog queries."""
    repo = MagicMock(name="repo")
    repo.schema_name = None

    def fetch_one(query, params=None):
        if query == TABLE_EXISTS_SQL:
            return {"relpersistence": persistence} if exists else None
        if query == TABLE_COMMENT_SQL:
            return {"comment": table_comment} if exists else None
        raise AssertionError(f"unexpected fetch_one: {query}")

    def fetch_all(query, params=None):
        if query == COLUMNS_SQL:
            return columns if columns is not None else USERS_COLUMNS
        if query == PRIMARY_KEY_SQL:
            return primary_key if primary_key is not None else [
                {"constraint_name": "users_pkey", "column_name": "id"},
            ]
        if query == INDEXES_SQL:
            return indexes if indexes is not None else USERS_INDEXES
        raise AssertionError(f"unexpected fetch_all: {query}")

    repo.fetch_one.side_effect = fetch_one
    repo.fetch_all.side_effect = fetch_all
    repo.exists.side_effect = lambda query, params=None: fetch_one(query, params) is not None
    return repo


# ============================================================================
# TESTS
# ============================================================================


class TestReadTable:
    def test_columns(self):
        table = CatalogReader(make_repo()).read_table("users")
        assert table.column_names() == ["id", "name", "tags"]

        id_col = table.column("id")
        assert id_col.type.kind == ColumnKind.INT64
        assert id_col.type.nullable is False
        assert id_col.default_expr == ""

        name_col = table.column("name")
        assert name_col.type.kind == ColumnKind.STRING
        assert name_col.type.max_size == 50
        assert name_col.default_expr == "''::character varying"
        assert name_col.comment == {"label": "Name"}

        tags_col = table.column("tags")
        assert tags_col.type.kind == ColumnKind.STRING_SLICE
        assert tags_col.default_expr == ""
        assert tags_col.comment == {"text": "free text"}

    def test_primary_key(self):
        table = CatalogReader(make_repo()).read_table("users")
        assert table.primary_key == ["id"]
        assert table.primary_key_constraint_name == "users_pkey"
        assert table.has_primary_key()

    def test_composite_key_order(self):
        repo = make_repo(
            columns=[
                {"name": "a", "not_null": True, "type_name": "bigint", "default_expr": "", "comment": None},
                {"name": "b", "not_null": True, "type_name": "text", "default_expr": "", "comment": None},
            ],
            primary_key=[
                {"constraint_name": "t_pk", "column_name": "b"},
                {"constraint_name": "t_pk", "column_name": "a"},
            ],
            indexes=[],
        )
        table = CatalogReader(repo).read_table("t")
        assert table.primary_key == ["b", "a"]
        assert table.primary_key_constraint_name == "t_pk"

    def test_no_primary_key(self):
        repo = make_repo(primary_key=[])
        table = CatalogReader(repo).read_table("users")
        assert table.primary_key == []
        assert table.primary_key_constraint_name is None
        assert not table.has_primary_key()

    def test_indexes(self):
        table = CatalogReader(make_repo()).read_table("users")
        index = table.indexes["idx_users_name"]
        assert index.unique is True
        assert index.columns == ["name"]
        assert index.define.startswith("CREATE UNIQUE INDEX idx_users_name")
        assert index.comment == {}

    def test_table_comment(self):
        table = CatalogReader(make_repo(table_comment='{"owner":"ops"}')).read_table("users")
        assert table.comment == {"owner": "ops"}
        assert CatalogReader(make_repo()).read_table("users").comment == {}

    def test_temporary(self):
        assert CatalogReader(make_repo(persistence="t")).read_table("users").is_temporary
        assert not CatalogReader(make_repo()).read_table("users").is_temporary

    def test_missing_table(self):
        repo = make_repo(exists=False)
        with pytest.raises(TableNotFoundError) as exc_info:
            CatalogReader(repo, schema_name="app").read_table("ghost")
        assert exc_info.value.table == "ghost"
        assert exc_info.value.schema == "app"
        repo.fetch_all.assert_not_called()

    def test_unknown_column_type(self):
        repo = make_repo(columns=[
            {"name": "n", "not_null": False, "type_name": "integer", "default_expr": "", "comment": None},
        ], primary_key=[], indexes=[])
        with pytest.raises(InvalidTypeError):
            CatalogReader(repo).read_table("users")


class TestSchemaScope:
    def test_params_use_repository_schema(self):
        repo = make_repo()
        repo.schema_name = "app"
        reader = CatalogReader(repo)
        reader.read_columns("users")
        repo.fetch_all.assert_called_once_with(COLUMNS_SQL, ("users", "app", "app"))

    def test_explicit_schema_wins(self):
        repo = make_repo()
        repo.schema_name = "app"
        reader = CatalogReader(repo, schema_name="other")
        assert reader.schema_name == "other"

    def test_current_schema_when_unset(self):
        repo = make_repo()
        CatalogReader(repo).read_primary_key("users")
        repo.fetch_all.assert_called_once_with(PRIMARY_KEY_SQL, ("users", None, None))

    def test_table_exists(self):
        assert CatalogReader(make_repo()).table_exists("users")
        assert not CatalogReader(make_repo(exists=False)).table_exists("users")

    @pytest.mark.parametrize(
        "query",
        [TABLE_EXISTS_SQL, TABLE_COMMENT_SQL, COLUMNS_SQL, PRIMARY_KEY_SQL, INDEXES_SQL],
        ids=["exists", "comment", "columns", "primary_key", "indexes"],
    )
    def test_schema_params_are_typed(self, query):
        # A None schema is bound server-side with no type; the casts let
        # PostgreSQL resolve it for both the COALESCE and the IS NULL test.
        assert "COALESCE(%s::text, current_schema())" in query
        assert "%s::text IS NULL" in query
        assert "%s IS NULL" not in query
