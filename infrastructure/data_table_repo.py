# ============================================================================
# DATA TABLE REPOSITORY
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Infrastructure - Typed row loading
# PURPOSE: Fill DataTables from live tables through the text codec
# CREATED: 12 OCT 2026
# EXPORTS: DataTableRepository
# ============================================================================
"""
Data Table Repository.

Selects a table's columns cast to text and decodes each row through the
codec, so values come back in the same canonical form the codec produces
(Nullable for nullable columns, NULL elements inside arrays, etc).
"""

import logging
from typing import Any, Optional, Sequence

from psycopg import sql

from core.models.data_table import DataTable
from core.schema.ddl_utils import qualified
from infrastructure.base_repository import BaseRepository
from infrastructure.catalog_reader import CatalogReader
from infrastructure.postgresql import PostgreSQLRepository

logger = logging.getLogger(__name__)


class DataTableRepository(BaseRepository):
    """
    Loads rows from PostgreSQL into DataTables.

    Usage:
        repo = DataTableRepository(PostgreSQLRepository())
        table = repo.load("users")
        repo.fill(table, where=sql.SQL("id > %s"), params=(10,))
    """

    def __init__(self, repo: PostgreSQLRepository, reader: Optional[CatalogReader] = None):
        super().__init__()
        self.repo = repo
        self.reader = reader or CatalogReader(repo)

    def load(self, table: str) -> DataTable:
        """
        Empty DataTable shaped like the live table.

        Raises:
            TableNotFoundError: No such table
        """
        return DataTable.from_definition(self.reader.read_table(table))

    def select_statement(self, table: DataTable, where: Optional[sql.Composable] = None) -> sql.Composed:
        """SELECT col::text AS col, ... FROM table [WHERE ...]"""
        columns = sql.SQL(", ").join(
            sql.SQL("{}::text AS {}").format(sql.Identifier(name), sql.Identifier(name))
            for name in table.column_names()
        )
        stmt = sql.SQL("SELECT {} FROM {}").format(
            columns, qualified(self.reader.schema_name, table.name)
        )
        if where is not None:
            stmt = sql.SQL("{} WHERE {}").format(stmt, where)
        return stmt

    def fill(
        self,
        table: DataTable,
        where: Optional[sql.Composable] = None,
        params: Optional[Sequence[Any]] = None,
    ) -> int:
        """
        Append the selected rows to table.

        Returns:
            Number of rows appended

        Raises:
            EngineError: The query failed
            DecodeError: A value could not be decoded; table is unchanged
        """
        if table.column_count() == 0:
            raise ValueError(f"DataTable {table.name} has no columns")

        with self._error_context("fill", table.name):
            rows = self.repo.fetch_all(self.select_statement(table, where), params)
        names = table.column_names()
        count = table.fill_text_rows([row[name] for name in names] for row in rows)
        self._log_operation(True, "fill", table.name, {"rows": count})
        return count


__all__ = ["DataTableRepository"]
