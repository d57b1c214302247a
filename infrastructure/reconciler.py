# ============================================================================
# SCHEMA RECONCILER
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Infrastructure - Reconciliation orchestrator
# PURPOSE: Read live tables, plan the diff and apply it
# CREATED: 12 OCT 2026
# EXPORTS: SchemaReconciler, ReconcileResult, ReconcileReport, StepResult
# ============================================================================
"""
SchemaReconciler - converge live tables to their desired definitions.

For each desired TableDefinition:
1. Read the live table through the CatalogReader (absent => None)
2. Plan operations with the SchemaDiffer
3. Render and execute them with the DDLEmitter (or only render, dry run)

The metadata strategy (PostgresMeta) is constructed by the caller and
injected; nothing is looked up from a global registry.

Statements run in the repository's current transaction when the caller
has opened one (repo.transaction() / run_in_transaction); otherwise each
statement commits on its own. reconcile_all(atomic=True) wraps the whole
run in one transaction.

Usage:
    repo = PostgreSQLRepository(schema_name="app")
    reconciler = SchemaReconciler(repo, PostgresMeta(schema="app"))

    ops = reconciler.plan(desired)                  # no side effects
    result = reconciler.reconcile(desired)          # apply
    report = reconciler.reconcile_all(definitions)  # many tables, fail-fast
"""

from contextlib import nullcontext
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.table import TableDefinition
from core.schema.ddl_utils import PostgresMeta
from core.schema.differ import SchemaDiffer
from core.schema.operations import CreateTable, Operation
from infrastructure.base_repository import RepositoryError, TableNotFoundError
from infrastructure.catalog_reader import CatalogReader
from infrastructure.ddl_emitter import DDLEmitter
from infrastructure.postgresql import PostgreSQLRepository

logger = get_logger(__name__, ComponentType.RECONCILER)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class ReconcileResult:
    """Outcome of reconciling one table."""
    table: str
    operations: List[Operation] = field(default_factory=list)
    statements: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.operations)

    @property
    def created(self) -> bool:
        return any(isinstance(o, CreateTable) for o in self.operations)


@dataclass
class StepResult:
    """Result of a single table within a multi-table run."""
    name: str
    status: str  # 'success', 'failed', 'skipped', 'rolled_back'
    message: str = ""
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ReconcileReport:
    """Complete result of a multi-table run."""
    database: str
    timestamp: str
    dry_run: bool
    success: bool = False
    steps: List[StepResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "database": self.database,
            "timestamp": self.timestamp,
            "dry_run": self.dry_run,
            "success": self.success,
            "steps": [
                {
                    "name": s.name,
                    "status": s.status,
                    "message": s.message,
                    "error": s.error,
                    "details": s.details,
                }
                for s in self.steps
            ],
            "errors": self.errors,
            "summary": {
                "total_steps": len(self.steps),
                "successful": len([s for s in self.steps if s.status == "success"]),
                "failed": len([s for s in self.steps if s.status == "failed"]),
                "skipped": len([s for s in self.steps if s.status == "skipped"]),
                "rolled_back": len([s for s in self.steps if s.status == "rolled_back"]),
            },
        }


# ============================================================================
# SCHEMA RECONCILER
# ============================================================================

class SchemaReconciler:
    """
    Reconciles live tables with desired TableDefinitions.

    Collaborators default to the standard implementations and can be
    replaced (tests inject mocks).
    """

    def __init__(
        self,
        repo: PostgreSQLRepository,
        meta: PostgresMeta,
        reader: Optional[CatalogReader] = None,
        differ: Optional[SchemaDiffer] = None,
        log_statements: bool = True,
    ):
        self.repo = repo
        self.meta = meta
        self.reader = reader or CatalogReader(repo, schema_name=meta.schema)
        self.differ = differ or SchemaDiffer()
        self.emitter = DDLEmitter(repo, meta, log_statements=log_statements)

    def read_live(self, table: str) -> Optional[TableDefinition]:
        """Live definition, or None when the table does not exist."""
        try:
            return self.reader.read_table(table)
        except TableNotFoundError:
            logger.info(f"Table {table} does not exist yet")
            return None

    def plan(self, desired: TableDefinition) -> List[Operation]:
        """Operations that would converge the live table. No side effects."""
        return self.differ.diff(self.read_live(desired.name), desired)

    def reconcile(self, desired: TableDefinition, dry_run: bool = False) -> ReconcileResult:
        """
        Converge one table.

        Raises:
            InvalidTypeError: The live table has a column type with no kind
            EngineError: A catalog query or DDL statement failed
        """
        with log_context(table=desired.name, schema=self.meta.schema, dry_run=dry_run):
            log_checkpoint("reconcile_started", {"dry_run": dry_run})

            operations = self.plan(desired)
            log_checkpoint("reconcile_planned", {"operations": len(operations)})
            if not operations:
                logger.info(f"Table {desired.name} is up to date")

            statements = self.emitter.apply(operations, dry_run=dry_run)
            log_checkpoint("reconcile_applied", {"statements": len(statements), "dry_run": dry_run})

        return ReconcileResult(
            table=desired.name,
            operations=operations,
            statements=statements,
            dry_run=dry_run,
        )

    def reconcile_all(
        self,
        definitions: Sequence[TableDefinition],
        dry_run: bool = False,
        atomic: bool = False,
    ) -> ReconcileReport:
        """
        Converge several tables in order, stopping at the first failure.

        Args:
            definitions: Desired tables
            dry_run: Render statements without executing
            atomic: Run everything in one transaction (rolled back on failure)

        Returns:
            ReconcileReport; tables after a failure are reported as skipped,
            and in an atomic run the tables before it as rolled_back
        """
        report = ReconcileReport(
            database=self.repo.config.safe_description(),
            timestamp=datetime.now(timezone.utc).isoformat(),
            dry_run=dry_run,
        )

        logger.info("=" * 70)
        logger.info("SCHEMA RECONCILIATION")
        logger.info(f"   Target: {report.database}")
        logger.info(f"   Schema: {self.meta.schema or 'current_schema()'}")
        logger.info(f"   Tables: {len(definitions)}")
        logger.info(f"   Mode: {'DRY RUN' if dry_run else 'EXECUTE'}")
        logger.info("=" * 70)

        tables = list(definitions)
        rollback = atomic and not dry_run
        scope = self.repo.transaction() if rollback else nullcontext()
        current: Optional[TableDefinition] = None
        index = 0
        try:
            with scope:
                for index, current in enumerate(tables):
                    report.steps.append(self._step_for(self.reconcile(current, dry_run=dry_run)))
                current = None
        except (RepositoryError, ValueError) as e:
            if rollback:
                for step in report.steps:
                    step.status = "rolled_back"
                    step.message = "Rolled back after failure"
            if current is None:
                logger.error(f"Commit of reconciliation failed: {e}")
                report.errors.append(f"commit: {e}")
            else:
                logger.error(f"Reconciliation of {current.name} failed: {e}")
                report.errors.append(f"{current.name}: {e}")
                report.steps.append(
                    StepResult(name=current.name, status="failed", message="Reconciliation failed", error=str(e))
                )
                for skipped in tables[index + 1:]:
                    report.steps.append(
                        StepResult(name=skipped.name, status="skipped", message="Skipped after earlier failure")
                    )
        else:
            report.success = True

        summary = report.to_dict()["summary"]
        logger.info("=" * 70)
        logger.info(f"RECONCILIATION {'COMPLETE' if report.success else 'FAILED'}")
        logger.info(f"   Tables: {summary['successful']} succeeded, {summary['failed']} failed, "
                    f"{summary['skipped']} skipped, {summary['rolled_back']} rolled back")
        logger.info("=" * 70)

        return report

    @staticmethod
    def _step_for(result: ReconcileResult) -> StepResult:
        if not result.changed:
            message = "Up to date"
        elif result.dry_run:
            message = f"[DRY RUN] Would execute {len(result.statements)} statements"
        else:
            message = f"Executed {len(result.statements)} statements"
        return StepResult(
            name=result.table,
            status="success",
            message=message,
            details={
                "created": result.created,
                "operations": [o.describe() for o in result.operations],
                "statements": result.statements,
            },
        )


__all__ = [
    "SchemaReconciler",
    "ReconcileResult",
    "ReconcileReport",
    "StepResult",
]
