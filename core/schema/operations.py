# ============================================================================
# SCHEMA OPERATIONS
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - Edit script vocabulary
# PURPOSE: One dataclass per DDL statement the differ can plan
# CREATED: 08 OCT 2026
# ============================================================================
"""
Schema operations.

Each operation maps to exactly one DDL statement (rendered by
core.schema.ddl_utils.PostgresMeta). Operations are plain values: the
differ produces them, the emitter executes them, tests compare them.
"""

from dataclasses import dataclass, fields
from typing import Tuple

from core.models.table import ColumnDefinition, ColumnTypeDescriptor
from core.schema.type_mapper import to_native_type_name


@dataclass(frozen=True)
class Operation:
    """Base class for all schema operations."""
    table: str

    @property
    def kind(self) -> str:
        return type(self).__name__

    def describe(self) -> str:
        """Short human-readable form for logs."""
        args = ", ".join(
            f"{f.name}={getattr(self, f.name)!r}" for f in fields(self) if f.name != "table"
        )
        return f"{self.kind}({args})"


@dataclass(frozen=True)
class CreateTable(Operation):
    temporary: bool = False


@dataclass(frozen=True)
class DropPrimaryKey(Operation):
    constraint_name: str


@dataclass(frozen=True)
class CreatePrimaryKey(Operation):
    columns: Tuple[str, ...]


@dataclass(frozen=True)
class DropColumn(Operation):
    column: str


@dataclass(frozen=True)
class RenameColumn(Operation):
    old_name: str
    new_name: str


@dataclass(frozen=True)
class AlterColumnType(Operation):
    column: str
    type: ColumnTypeDescriptor

    @property
    def type_name(self) -> str:
        return to_native_type_name(self.type)


@dataclass(frozen=True)
class DropNotNull(Operation):
    column: str


@dataclass(frozen=True)
class SetNotNull(Operation):
    column: str


@dataclass(frozen=True)
class SetDefault(Operation):
    column: str
    expr: str


@dataclass(frozen=True)
class DropDefault(Operation):
    column: str


@dataclass(frozen=True)
class SetColumnComment(Operation):
    column: str
    comment: str  # serialized; "" clears the comment


@dataclass(frozen=True)
class AddColumn(Operation):
    column: ColumnDefinition
    default_expr: str = ""

    @property
    def name(self) -> str:
        return self.column.name

    @property
    def type_name(self) -> str:
        return to_native_type_name(self.column.type)

    def describe(self) -> str:
        default = f", default={self.default_expr!r}" if self.default_expr else ""
        return f"AddColumn(column={self.name!r}, type={self.type_name!r}{default})"


@dataclass(frozen=True)
class DropIndex(Operation):
    index: str


@dataclass(frozen=True)
class CreateIndex(Operation):
    index: str
    define: str


@dataclass(frozen=True)
class SetIndexComment(Operation):
    index: str
    comment: str


@dataclass(frozen=True)
class SetTableComment(Operation):
    comment: str


ALL_OPERATIONS = (
    CreateTable,
    DropPrimaryKey,
    CreatePrimaryKey,
    DropColumn,
    RenameColumn,
    AlterColumnType,
    DropNotNull,
    SetNotNull,
    SetDefault,
    DropDefault,
    SetColumnComment,
    AddColumn,
    DropIndex,
    CreateIndex,
    SetIndexComment,
    SetTableComment,
)


__all__ = ["Operation", "ALL_OPERATIONS"] + [op.__name__ for op in ALL_OPERATIONS]
