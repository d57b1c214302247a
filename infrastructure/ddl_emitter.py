# ============================================================================
# DDL EMITTER
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Infrastructure - Statement execution
# PURPOSE: Render planned operations and execute them one by one
# CREATED: 11 OCT 2026
# EXPORTS: DDLEmitter
# ============================================================================
"""
DDL Emitter.

Turns a list of operations into statements via the injected PostgresMeta
and executes them sequentially, one statement per call, no parameters.
The first failure stops the run: the EngineError names the failing
statement and later operations are not attempted.
"""

from typing import List, Sequence

from core.logging import ComponentType, get_logger, log_context
from core.schema.ddl_utils import PostgresMeta
from core.schema.operations import Operation
from infrastructure.postgresql import PostgreSQLRepository, statement_text

logger = get_logger(__name__, ComponentType.EMITTER)


class DDLEmitter:
    """Executes schema operations against a repository."""

    def __init__(self, repo: PostgreSQLRepository, meta: PostgresMeta, log_statements: bool = True):
        self.repo = repo
        self.meta = meta
        self.log_statements = log_statements

    def render(self, operations: Sequence[Operation]) -> List[str]:
        """Statement text for each operation, in order."""
        return [statement_text(self.meta.render(o)) for o in operations]

    def apply(self, operations: Sequence[Operation], dry_run: bool = False) -> List[str]:
        """
        Execute operations in order.

        Args:
            operations: Planned operations
            dry_run: Render and log only

        Returns:
            Statement text of every executed (or, in dry run, rendered) operation

        Raises:
            EngineError: A statement failed; nothing after it was executed
        """
        executed: List[str] = []
        for operation in operations:
            statement = self.meta.render(operation)
            text = statement_text(statement)

            with log_context(table=operation.table, operation=operation.kind, statement=text):
                if self.log_statements:
                    prefix = "[dry run] " if dry_run else ""
                    logger.info(f"{prefix}{text}")
                if not dry_run:
                    self.repo.execute(statement)

            executed.append(text)

        return executed


__all__ = ["DDLEmitter"]
