# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Infrastructure - Database operations
# PURPOSE: Catalog introspection, DDL execution and reconciliation
# CREATED: 10 OCT 2026
# ============================================================================
"""
Infrastructure module for schema reconciliation.

Provides:
- PostgreSQLRepository: connections, statements, transactions
- CatalogReader: live TableDefinitions from pg_catalog
- DDLEmitter: sequential statement execution
- SchemaReconciler: read, diff, apply
- DataTableRepository: typed row loading

Usage:
    from infrastructure import PostgreSQLRepository, SchemaReconciler
    from core.schema import PostgresMeta

    repo = PostgreSQLRepository(schema_name="app")
    reconciler = SchemaReconciler(repo, PostgresMeta(schema="app"))
    result = reconciler.reconcile(desired, dry_run=True)
"""

from infrastructure.base_repository import (
    RepositoryError,
    EngineError,
    NoRecordError,
    TableNotFoundError,
)
from infrastructure.postgresql import (
    PostgreSQLRepository,
    run_in_transaction,
)
from infrastructure.catalog_reader import CatalogReader
from infrastructure.ddl_emitter import DDLEmitter
from infrastructure.reconciler import (
    SchemaReconciler,
    ReconcileResult,
    ReconcileReport,
    StepResult,
)
from infrastructure.data_table_repo import DataTableRepository

__all__ = [
    # Errors
    'RepositoryError',
    'EngineError',
    'NoRecordError',
    'TableNotFoundError',
    # PostgreSQL
    'PostgreSQLRepository',
    'run_in_transaction',
    # Reconciliation
    'CatalogReader',
    'DDLEmitter',
    'SchemaReconciler',
    'ReconcileResult',
    'ReconcileReport',
    'StepResult',
    # Data tables
    'DataTableRepository',
]
