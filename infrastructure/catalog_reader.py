# ============================================================================
# CATALOG READER
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Infrastructure - Live schema introspection
# PURPOSE: Build a TableDefinition from the PostgreSQL system catalogs
# CREATED: 11 OCT 2026
# EXPORTS: CatalogReader
# ============================================================================
"""
Catalog Reader.

Reads a live table's shape from pg_catalog: columns in attnum order,
primary key in key order, secondary indexes and all comments. Native
column types are decoded through the type mapper; an unrecognized type
aborts the read with InvalidTypeError.

All lookups are parameterized by table name and an optional schema
(current_schema() when unset).
"""

from typing import Any, Dict, List, Optional, Tuple

from core.logging import ComponentType, get_logger
from core.models.table import (
    ColumnDefinition,
    IndexDefinition,
    TableDefinition,
    parse_comment,
)
from core.schema.type_mapper import from_native_type_name
from infrastructure.base_repository import BaseRepository, TableNotFoundError
from infrastructure.postgresql import PostgreSQLRepository

logger = get_logger(__name__, ComponentType.CATALOG)


# ============================================================================
# CATALOG QUERIES
# ============================================================================

TABLE_EXISTS_SQL = """
    SELECT c.relpersistence
    FROM pg_catalog.pg_class c
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    WHERE c.relname = %s
      AND c.relkind IN ('r', 'p')
      AND (n.nspname = COALESCE(%s::text, current_schema()) OR (%s::text IS NULL AND n.oid = pg_my_temp_schema()))
    ORDER BY (n.oid = pg_my_temp_schema()) DESC
    LIMIT 1
"""

TABLE_COMMENT_SQL = """
    SELECT obj_description(c.oid, 'pg_class') AS comment
    FROM pg_catalog.pg_class c
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    WHERE c.relname = %s
      AND (n.nspname = COALESCE(%s::text, current_schema()) OR (%s::text IS NULL AND n.oid = pg_my_temp_schema()))
    ORDER BY (n.oid = pg_my_temp_schema()) DESC
    LIMIT 1
"""

COLUMNS_SQL = """
    SELECT a.attname AS name,
           a.attnotnull AS not_null,
           pg_catalog.format_type(a.atttypid, a.atttypmod) AS type_name,
           COALESCE(pg_catalog.pg_get_expr(d.adbin, d.adrelid), '') AS default_expr,
           pg_catalog.col_description(a.attrelid, a.attnum) AS comment
    FROM pg_catalog.pg_attribute a
    JOIN pg_catalog.pg_class c ON c.oid = a.attrelid
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    LEFT JOIN pg_catalog.pg_attrdef d ON d.adrelid = a.attrelid AND d.adnum = a.attnum
    WHERE c.relname = %s
      AND (n.nspname = COALESCE(%s::text, current_schema()) OR (%s::text IS NULL AND n.oid = pg_my_temp_schema()))
      AND a.attnum > 0
      AND NOT a.attisdropped
    ORDER BY a.attnum
"""

PRIMARY_KEY_SQL = """
    SELECT con.conname AS constraint_name,
           a.attname AS column_name
    FROM pg_catalog.pg_constraint con
    JOIN pg_catalog.pg_class c ON c.oid = con.conrelid
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    JOIN pg_catalog.pg_attribute a ON a.attrelid = con.conrelid AND a.attnum = ANY(con.conkey)
    WHERE c.relname = %s
      AND (n.nspname = COALESCE(%s::text, current_schema()) OR (%s::text IS NULL AND n.oid = pg_my_temp_schema()))
      AND con.contype = 'p'
    ORDER BY array_position(con.conkey, a.attnum)
"""

INDEXES_SQL = """
    SELECT ic.relname AS name,
           i.indisunique AS is_unique,
           pg_catalog.pg_get_indexdef(i.indexrelid) AS define,
           ARRAY(
               SELECT a.attname
               FROM unnest(i.indkey) WITH ORDINALITY AS k(attnum, ord)
               JOIN pg_catalog.pg_attribute a ON a.attrelid = i.indrelid AND a.attnum = k.attnum
               ORDER BY k.ord
           ) AS columns,
           obj_description(i.indexrelid, 'pg_class') AS comment
    FROM pg_catalog.pg_index i
    JOIN pg_catalog.pg_class c ON c.oid = i.indrelid
    JOIN pg_catalog.pg_class ic ON ic.oid = i.indexrelid
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    WHERE c.relname = %s
      AND (n.nspname = COALESCE(%s::text, current_schema()) OR (%s::text IS NULL AND n.oid = pg_my_temp_schema()))
      AND NOT i.indisprimary
    ORDER BY ic.relname
"""


class CatalogReader(BaseRepository):
    """
    Reads live TableDefinitions through a PostgreSQLRepository.

    Usage:
        reader = CatalogReader(repo)
        if reader.table_exists("users"):
            live = reader.read_table("users")
    """

    def __init__(self, repo: PostgreSQLRepository, schema_name: Optional[str] = None):
        super().__init__()
        self.repo = repo
        self.schema_name = schema_name if schema_name is not None else repo.schema_name

    def _params(self, table: str) -> Tuple[Any, ...]:
        return (table, self.schema_name, self.schema_name)

    # =========================================================================
    # EXISTENCE
    # =========================================================================

    def table_exists(self, table: str) -> bool:
        return self.repo.exists(TABLE_EXISTS_SQL, self._params(table))

    # =========================================================================
    # READ
    # =========================================================================

    def read_columns(self, table: str) -> List[ColumnDefinition]:
        rows = self.repo.fetch_all(COLUMNS_SQL, self._params(table))
        columns = []
        for row in rows:
            columns.append(
                ColumnDefinition(
                    name=row["name"],
                    type=from_native_type_name(row["type_name"], nullable=not row["not_null"]),
                    default_expr=row["default_expr"] or "",
                    comment=parse_comment(row["comment"]),
                )
            )
        return columns

    def read_primary_key(self, table: str) -> Tuple[List[str], Optional[str]]:
        """Key columns in key order, and the constraint name (None without a key)."""
        rows = self.repo.fetch_all(PRIMARY_KEY_SQL, self._params(table))
        if not rows:
            return [], None
        return [row["column_name"] for row in rows], rows[0]["constraint_name"]

    def read_indexes(self, table: str) -> Dict[str, IndexDefinition]:
        rows = self.repo.fetch_all(INDEXES_SQL, self._params(table))
        return {
            row["name"]: IndexDefinition(
                define=row["define"],
                comment=parse_comment(row["comment"]),
                unique=bool(row["is_unique"]),
                columns=list(row["columns"] or []),
            )
            for row in rows
        }

    def read_table_comment(self, table: str) -> Dict[str, Any]:
        row = self.repo.fetch_one(TABLE_COMMENT_SQL, self._params(table))
        return parse_comment(row["comment"] if row else None)

    def read_table(self, table: str) -> TableDefinition:
        """
        Read the live definition of a table.

        Raises:
            TableNotFoundError: No such table
            InvalidTypeError: A column has a type with no column kind
            EngineError: A catalog query failed
        """
        row = self.repo.fetch_one(TABLE_EXISTS_SQL, self._params(table))
        if row is None:
            raise TableNotFoundError(table, self.schema_name)

        columns = self.read_columns(table)
        primary_key, constraint_name = self.read_primary_key(table)

        definition = TableDefinition(
            name=table,
            columns=columns,
            primary_key=primary_key,
            primary_key_constraint_name=constraint_name,
            indexes=self.read_indexes(table),
            comment=self.read_table_comment(table),
            is_temporary=row["relpersistence"] == "t",
        )
        logger.debug(
            f"Read table {table}: {len(columns)} columns, "
            f"{len(definition.indexes)} indexes, pk={primary_key}"
        )
        return definition


__all__ = [
    "CatalogReader",
    "TABLE_EXISTS_SQL",
    "COLUMNS_SQL",
    "PRIMARY_KEY_SQL",
    "INDEXES_SQL",
    "TABLE_COMMENT_SQL",
]
