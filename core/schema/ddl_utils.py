# ============================================================================
# DDL UTILITIES
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - SQL DDL composition for schema operations
# PURPOSE: Table, column, constraint, index and comment builders using psycopg.sql
# CREATED: 08 OCT 2026
# EXPORTS: TableBuilder, ColumnBuilder, ConstraintBuilder, IndexBuilder,
#          CommentBuilder, PostgresMeta
# DEPENDENCIES: psycopg
# ============================================================================
"""
DDL Utilities - PostgreSQL statement builders.

All builders return psycopg.sql.Composed objects. Identifiers go through
sql.Identifier and comment text through sql.Literal, so the server's
quoting and escaping rules apply. Two inputs are trusted SQL and are
inserted verbatim: column default expressions and index define text.

PostgresMeta is the engine strategy injected into the reconciler: it
renders each schema operation into exactly one statement.

Usage:
    from core.schema.ddl_utils import PostgresMeta

    meta = PostgresMeta(schema="app")
    stmt = meta.render(RenameColumn("users", "name", "full_name"))
    cursor.execute(stmt)
"""

from typing import Callable, Dict, Optional, Sequence, Type

from psycopg import sql

from core.schema import operations as op
from core.schema.type_mapper import base_type_name, to_native_type_name


def qualified(schema: Optional[str], name: str) -> sql.Identifier:
    """Optionally schema-qualified identifier."""
    if schema:
        return sql.Identifier(schema, name)
    return sql.Identifier(name)


def comment_value(comment: str) -> sql.Composable:
    """Literal comment text, or NULL to clear it."""
    if not comment:
        return sql.SQL("NULL")
    return sql.Literal(comment)


# ============================================================================
# TABLE BUILDER
# ============================================================================

class TableBuilder:
    """CREATE TABLE statements."""

    @staticmethod
    def create_empty(schema: Optional[str], table: str, temporary: bool = False) -> sql.Composed:
        """
        Create a table with no columns; columns are added afterwards.

        Temporary tables live in the session's temp schema and are never
        schema-qualified.
        """
        if temporary:
            return sql.SQL("CREATE TEMPORARY TABLE {} ()").format(sql.Identifier(table))
        return sql.SQL("CREATE TABLE {} ()").format(qualified(schema, table))


# ============================================================================
# COLUMN BUILDER
# ============================================================================

class ColumnBuilder:
    """ALTER TABLE ... COLUMN statements."""

    @staticmethod
    def add(schema: Optional[str], table: str, add: op.AddColumn) -> sql.Composed:
        stmt = sql.SQL("ALTER TABLE {table} ADD COLUMN {column} {type}").format(
            table=qualified(schema, table),
            column=sql.Identifier(add.column.name),
            type=sql.SQL(to_native_type_name(add.column.type)),
        )
        if add.default_expr:
            stmt = sql.SQL("{} DEFAULT {}").format(stmt, sql.SQL(add.default_expr))
        return stmt

    @staticmethod
    def drop(schema: Optional[str], table: str, column: str) -> sql.Composed:
        return sql.SQL("ALTER TABLE {} DROP COLUMN {}").format(
            qualified(schema, table), sql.Identifier(column)
        )

    @staticmethod
    def rename(schema: Optional[str], table: str, old_name: str, new_name: str) -> sql.Composed:
        return sql.SQL("ALTER TABLE {} RENAME COLUMN {} TO {}").format(
            qualified(schema, table), sql.Identifier(old_name), sql.Identifier(new_name)
        )

    @staticmethod
    def alter_type(schema: Optional[str], table: str, alter: op.AlterColumnType) -> sql.Composed:
        """Nullability is changed by separate statements; only the bare type goes here."""
        type_sql = sql.SQL(base_type_name(alter.type))
        column = sql.Identifier(alter.column)
        return sql.SQL("ALTER TABLE {table} ALTER COLUMN {column} TYPE {type} USING {column}::{type}").format(
            table=qualified(schema, table), column=column, type=type_sql
        )

    @staticmethod
    def _alter(schema: Optional[str], table: str, column: str, action: sql.Composable) -> sql.Composed:
        return sql.SQL("ALTER TABLE {} ALTER COLUMN {} {}").format(
            qualified(schema, table), sql.Identifier(column), action
        )

    @staticmethod
    def set_not_null(schema: Optional[str], table: str, column: str) -> sql.Composed:
        return ColumnBuilder._alter(schema, table, column, sql.SQL("SET NOT NULL"))

    @staticmethod
    def drop_not_null(schema: Optional[str], table: str, column: str) -> sql.Composed:
        return ColumnBuilder._alter(schema, table, column, sql.SQL("DROP NOT NULL"))

    @staticmethod
    def set_default(schema: Optional[str], table: str, column: str, expr: str) -> sql.Composed:
        return ColumnBuilder._alter(
            schema, table, column, sql.SQL("SET DEFAULT {}").format(sql.SQL(expr))
        )

    @staticmethod
    def drop_default(schema: Optional[str], table: str, column: str) -> sql.Composed:
        return ColumnBuilder._alter(schema, table, column, sql.SQL("DROP DEFAULT"))


# ============================================================================
# CONSTRAINT BUILDER
# ============================================================================

class ConstraintBuilder:
    """Primary key constraints."""

    @staticmethod
    def add_primary_key(schema: Optional[str], table: str, columns: Sequence[str]) -> sql.Composed:
        return sql.SQL("ALTER TABLE {} ADD PRIMARY KEY ({})").format(
            qualified(schema, table),
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
        )

    @staticmethod
    def drop(schema: Optional[str], table: str, constraint: str) -> sql.Composed:
        return sql.SQL("ALTER TABLE {} DROP CONSTRAINT {}").format(
            qualified(schema, table), sql.Identifier(constraint)
        )


# ============================================================================
# INDEX BUILDER
# ============================================================================

class IndexBuilder:
    """
    Index statements.

    Indexes are created from their stored define text, never composed.
    """

    @staticmethod
    def create(define: str) -> sql.SQL:
        return sql.SQL(define)

    @staticmethod
    def drop(schema: Optional[str], index: str) -> sql.Composed:
        # A dropped column takes its indexes with it
        return sql.SQL("DROP INDEX IF EXISTS {}").format(qualified(schema, index))


# ============================================================================
# COMMENT BUILDER
# ============================================================================

class CommentBuilder:
    """COMMENT ON statements. Empty text clears the comment."""

    @staticmethod
    def table(schema: Optional[str], table: str, comment: str) -> sql.Composed:
        return sql.SQL("COMMENT ON TABLE {} IS {}").format(
            qualified(schema, table), comment_value(comment)
        )

    @staticmethod
    def column(schema: Optional[str], table: str, column: str, comment: str) -> sql.Composed:
        if schema:
            target = sql.Identifier(schema, table, column)
        else:
            target = sql.Identifier(table, column)
        return sql.SQL("COMMENT ON COLUMN {} IS {}").format(target, comment_value(comment))

    @staticmethod
    def index(schema: Optional[str], index: str, comment: str) -> sql.Composed:
        return sql.SQL("COMMENT ON INDEX {} IS {}").format(
            qualified(schema, index), comment_value(comment)
        )


# ============================================================================
# ENGINE STRATEGY
# ============================================================================

class PostgresMeta:
    """
    PostgreSQL metadata strategy.

    Renders schema operations to statements for one (optional) schema.
    Constructed explicitly and passed to the reconciler.
    """

    def __init__(self, schema: Optional[str] = None):
        self.schema = schema
        self._renderers: Dict[Type[op.Operation], Callable[[op.Operation], sql.Composable]] = {
            op.CreateTable: lambda o: TableBuilder.create_empty(self.schema, o.table, o.temporary),
            op.DropPrimaryKey: lambda o: ConstraintBuilder.drop(self.schema, o.table, o.constraint_name),
            op.CreatePrimaryKey: lambda o: ConstraintBuilder.add_primary_key(self.schema, o.table, o.columns),
            op.DropColumn: lambda o: ColumnBuilder.drop(self.schema, o.table, o.column),
            op.RenameColumn: lambda o: ColumnBuilder.rename(self.schema, o.table, o.old_name, o.new_name),
            op.AlterColumnType: lambda o: ColumnBuilder.alter_type(self.schema, o.table, o),
            op.DropNotNull: lambda o: ColumnBuilder.drop_not_null(self.schema, o.table, o.column),
            op.SetNotNull: lambda o: ColumnBuilder.set_not_null(self.schema, o.table, o.column),
            op.SetDefault: lambda o: ColumnBuilder.set_default(self.schema, o.table, o.column, o.expr),
            op.DropDefault: lambda o: ColumnBuilder.drop_default(self.schema, o.table, o.column),
            op.SetColumnComment: lambda o: CommentBuilder.column(self.schema, o.table, o.column, o.comment),
            op.AddColumn: lambda o: ColumnBuilder.add(self.schema, o.table, o),
            op.DropIndex: lambda o: IndexBuilder.drop(self.schema, o.index),
            op.CreateIndex: lambda o: IndexBuilder.create(o.define),
            op.SetIndexComment: lambda o: CommentBuilder.index(self.schema, o.index, o.comment),
            op.SetTableComment: lambda o: CommentBuilder.table(self.schema, o.table, o.comment),
        }

    def render(self, operation: op.Operation) -> sql.Composable:
        """Render one operation to one statement."""
        renderer = self._renderers.get(type(operation))
        if renderer is None:
            raise TypeError(f"no renderer for operation {operation.kind}")
        return renderer(operation)

    def supports(self, operation_type: Type[op.Operation]) -> bool:
        return operation_type in self._renderers


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "qualified",
    "TableBuilder",
    "ColumnBuilder",
    "ConstraintBuilder",
    "IndexBuilder",
    "CommentBuilder",
    "PostgresMeta",
]
