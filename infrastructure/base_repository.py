# ============================================================================
# BASE REPOSITORY - ERROR HANDLING PATTERNS
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Infrastructure - Base repository patterns
# PURPOSE: Repository errors and common error handling/logging
# CREATED: 10 OCT 2026
# ============================================================================
"""
Base Repository Patterns

Abstract base class that provides common infrastructure for repositories:
- Consistent error handling with context managers
- Standardized logging
- The repository error hierarchy

RepositoryError
    EngineError         driver failure, carries the statement and parameters
    NoRecordError       exactly-one-row query returned no row
    TableNotFoundError  catalog has no such table
"""

from abc import ABC
from contextlib import contextmanager
from typing import Any, Dict, Optional, Sequence

from core.logging import ComponentType, get_logger


class RepositoryError(Exception):
    """Base exception for repository operations."""

    def __init__(self, message: str, operation: Optional[str] = None, entity_id: Optional[str] = None):
        self.operation = operation
        self.entity_id = entity_id
        super().__init__(message)


class EngineError(RepositoryError):
    """
    A statement failed in the database driver.

    The original driver exception is chained as __cause__.
    """

    def __init__(self, statement: str, params: Optional[Sequence[Any]] = None, cause: Optional[BaseException] = None):
        self.statement = statement
        self.params = params
        self.cause = cause
        message = f"statement failed: {statement}"
        if params:
            message += f" params={list(params)!r}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message, operation="execute")


class NoRecordError(RepositoryError):
    """A query expected exactly one row and got none."""

    def __init__(self, statement: str, params: Optional[Sequence[Any]] = None):
        self.statement = statement
        self.params = params
        super().__init__(f"no record returned by: {statement}", operation="query_one")


class TableNotFoundError(RepositoryError):
    """The catalog has no table of that name."""

    def __init__(self, table: str, schema: Optional[str] = None):
        self.table = table
        self.schema = schema
        qualified = f"{schema}.{table}" if schema else table
        super().__init__(f"table not found: {qualified}", operation="read_table", entity_id=table)


class BaseRepository(ABC):
    """
    Abstract base repository with common patterns.

    Provides:
    - Error context manager for consistent error handling
    - Standardized logging
    """

    def __init__(self):
        """Initialize base repository."""
        self.logger = get_logger(self.__class__.__module__, ComponentType.REPOSITORY)
        self.logger.debug(f"{self.__class__.__name__} initialized")

    @contextmanager
    def _error_context(self, operation: str, entity_id: Optional[str] = None):
        """
        Context manager for consistent error handling.

        Repository errors pass through unchanged; anything else is logged
        with context and wrapped in RepositoryError.

        Example:
            with self._error_context("read table", table_name):
                rows = self.repo.fetch_all(query, params)
        """
        try:
            yield
        except RepositoryError:
            raise
        except Exception as e:
            error_msg = f"{operation} failed"
            if entity_id:
                error_msg += f" for {entity_id}"
            error_msg += f": {e}"
            self.logger.error(error_msg)
            raise RepositoryError(error_msg, operation=operation, entity_id=entity_id) from e

    def _log_operation(
        self,
        success: bool,
        operation: str,
        entity_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log operation result with consistent formatting.

        Format:
            Success: "operation: entity_id | details"
            Failure: "operation failed: entity_id | details"
        """
        if success:
            msg = f"{operation}: {entity_id}"
        else:
            msg = f"{operation} failed: {entity_id}"

        if details:
            msg += f" | {details}"

        if success:
            self.logger.info(msg)
        else:
            self.logger.warning(msg)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "EngineError",
    "NoRecordError",
    "TableNotFoundError",
]
