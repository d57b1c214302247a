# ============================================================================
# POSTGRESQL CONNECTION INFRASTRUCTURE
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Infrastructure - PostgreSQL connection handling
# PURPOSE: Database connectivity, statement execution and transactions
# CREATED: 10 OCT 2026
# ============================================================================
"""
PostgreSQL Connection Infrastructure

Provides database connectivity for the catalog reader, DDL emitter and
data table repository:
- Connection string from DatabaseDefaults (DATABASE_URL wins)
- Optional connection pooling (psycopg_pool)
- Context managers for safe resource management
- transaction() pins one connection so a sequence of statements commits
  or rolls back together

Every driver failure surfaces as EngineError carrying the statement text
and its parameters.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar, Union

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from core.config import DatabaseDefaults
from infrastructure.base_repository import EngineError, NoRecordError

logger = logging.getLogger(__name__)

Query = Union[str, sql.Composable]
Params = Optional[Sequence[Any]]
T = TypeVar("T")


def statement_text(query: Query) -> str:
    """Printable form of a query for logs and errors."""
    if isinstance(query, sql.Composable):
        return query.as_string()
    return query


# ============================================================================
# POSTGRESQL REPOSITORY BASE
# ============================================================================

class PostgreSQLRepository:
    """
    Base repository for PostgreSQL database operations.

    Provides connection management with:
    - Lazy connection string from configuration
    - Optional connection pool
    - Pinned-connection transactions

    Usage:
        repo = PostgreSQLRepository()
        with repo.transaction():
            repo.execute(sql.SQL("ALTER TABLE {} ADD COLUMN x bigint").format(...))
            repo.execute("COMMENT ON TABLE t IS 'x'")
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        schema_name: Optional[str] = None,
        config: Optional[DatabaseDefaults] = None,
    ):
        """
        Initialize PostgreSQL repository.

        Args:
            connection_string: Optional explicit connection string
            schema_name: Optional schema for table lookups (default: current_schema())
            config: Connection settings (default: from environment)
        """
        self.config = config or DatabaseDefaults.from_env()
        self.schema_name = schema_name or self.config.schema
        self._conn_string = connection_string
        self._conn_string_lock = threading.Lock()
        self._pool: Optional[ConnectionPool] = None
        self._pool_lock = threading.Lock()
        self._local = threading.local()

    @property
    def conn_string(self) -> str:
        """Get or build connection string (lazy, thread-safe)."""
        if self._conn_string is None:
            with self._conn_string_lock:
                if self._conn_string is None:
                    self._conn_string = self.get_connection_string()
        return self._conn_string

    def get_connection_string(self) -> str:
        """Build the connection string from configuration."""
        logger.debug(f"Connection string built for {self.config.safe_description()}")
        return self.config.connection_string()

    def _get_pool(self) -> ConnectionPool:
        if self._pool is None:
            with self._pool_lock:
                if self._pool is None:
                    logger.info(
                        f"Opening connection pool "
                        f"(min={self.config.pool_min_size}, max={self.config.pool_max_size})"
                    )
                    self._pool = ConnectionPool(
                        self.conn_string,
                        min_size=self.config.pool_min_size,
                        max_size=self.config.pool_max_size,
                        kwargs={"row_factory": dict_row},
                        open=True,
                    )
        return self._pool

    def close(self) -> None:
        """Close the connection pool, if one was opened."""
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    # =========================================================================
    # CONNECTIONS
    # =========================================================================

    @property
    def _pinned(self) -> Optional[psycopg.Connection]:
        return getattr(self._local, "conn", None)

    @property
    def in_transaction(self) -> bool:
        return self._pinned is not None

    @contextmanager
    def get_connection(self):
        """
        Context manager for PostgreSQL connections.

        Inside transaction() the pinned connection is yielded and left open.

        Yields:
            psycopg connection with dict_row factory
        """
        pinned = self._pinned
        if pinned is not None:
            yield pinned
            return

        if self.config.use_pool:
            with self._get_pool().connection() as conn:
                yield conn
            return

        conn = None
        try:
            logger.debug("Connecting to PostgreSQL...")
            conn = psycopg.connect(self.conn_string, row_factory=dict_row)
            logger.debug("PostgreSQL connection established")
            yield conn

        except psycopg.Error as e:
            logger.error(f"PostgreSQL connection error: {e}")
            if conn:
                conn.rollback()
            raise

        finally:
            if conn:
                conn.close()

    @contextmanager
    def get_cursor(self, conn=None):
        """
        Context manager for PostgreSQL cursors.

        Args:
            conn: Optional existing connection (caller controls the transaction)

        Yields:
            psycopg cursor; commits on success unless a transaction is pinned
        """
        if conn is not None or self.in_transaction:
            target = conn if conn is not None else self._pinned
            with target.cursor() as cursor:
                yield cursor
        else:
            with self.get_connection() as conn:
                with conn.cursor() as cursor:
                    yield cursor
                    conn.commit()

    @contextmanager
    def transaction(self):
        """
        Run the enclosed statements on one connection, atomically.

        Commits on success, rolls back on any exception. Nested calls join
        the outer transaction.
        """
        if self.in_transaction:
            yield self._pinned
            return

        with self.get_connection() as conn:
            self._local.conn = conn
            try:
                yield conn
                conn.commit()
                logger.debug("Transaction committed")
            except Exception:
                conn.rollback()
                logger.warning("Transaction rolled back")
                raise
            finally:
                self._local.conn = None

    # =========================================================================
    # STATEMENTS
    # =========================================================================

    def execute(self, query: Query, params: Params = None) -> int:
        """Execute a statement without returning results. Returns rowcount."""
        try:
            with self.get_cursor() as cur:
                cur.execute(query, params)
                return cur.rowcount
        except psycopg.Error as e:
            raise EngineError(statement_text(query), params, e) from e

    def fetch_one(self, query: Query, params: Params = None) -> Optional[Dict[str, Any]]:
        """Execute query and fetch one result."""
        try:
            with self.get_cursor() as cur:
                cur.execute(query, params)
                return cur.fetchone()
        except psycopg.Error as e:
            raise EngineError(statement_text(query), params, e) from e

    def fetch_all(self, query: Query, params: Params = None) -> List[Dict[str, Any]]:
        """Execute query and fetch all results."""
        try:
            with self.get_cursor() as cur:
                cur.execute(query, params)
                return cur.fetchall()
        except psycopg.Error as e:
            raise EngineError(statement_text(query), params, e) from e

    def query_one(self, query: Query, params: Params = None) -> Dict[str, Any]:
        """
        Fetch exactly one row.

        Raises:
            NoRecordError: The query returned no row
        """
        row = self.fetch_one(query, params)
        if row is None:
            raise NoRecordError(statement_text(query), params)
        return row

    def exists(self, query: Query, params: Params = None) -> bool:
        """True when the query returns at least one row."""
        return self.fetch_one(query, params) is not None


def run_in_transaction(repo: PostgreSQLRepository, fn: Callable[[PostgreSQLRepository], T]) -> T:
    """
    Call fn(repo) inside repo.transaction().

    Commits when fn returns, rolls back and re-raises when it raises.
    """
    with repo.transaction():
        return fn(repo)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "PostgreSQLRepository",
    "run_in_transaction",
    "statement_text",
]
