# ============================================================================
# SCHEMA DIFFER
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - Live vs desired table comparison
# PURPOSE: Compute the ordered edit script converging a live table
# CREATED: 08 OCT 2026
# EXPORTS: SchemaDiffer, diff_tables
# DEPENDENCIES: core.models.table, core.schema.operations
# ============================================================================
"""
Schema Differ.

Compares a live TableDefinition (None when the table does not exist) with
a desired one and returns the operations that make the live table match.
Pure: no I/O, neither input is mutated.

Plan order:
    1. CreateTable               (live table absent)
    2. DropPrimaryKey            (key changed and a live constraint exists)
    3. match columns             (by name, then by origin_name)
    4. DropColumn                (live columns without a match)
    5. per matched pair          rename, type, drop not null,
                                 set not null, drop default, set default,
                                 comment
    6. AddColumn                 (desired columns without a match)
    7. CreatePrimaryKey          (key changed and desired key non-empty)
    8. indexes                   recreate changed, drop removed, create new
    9. SetTableComment

Step 5 runs sub-step by sub-step across all pairs (every rename, then every
type change, ...), so each pair still sees its sub-steps in order.

Usage:
    ops = SchemaDiffer().diff(live, desired)
"""

import logging
from typing import List, Optional, Tuple

from core.models.table import ColumnDefinition, TableDefinition, serialize_comment
from core.schema import operations as op
from core.schema.type_mapper import default_literal

logger = logging.getLogger(__name__)

ColumnPair = Tuple[ColumnDefinition, ColumnDefinition]


class SchemaDiffer:
    """Plans DDL operations between two table definitions."""

    # =========================================================================
    # PRIMARY KEY
    # =========================================================================

    @staticmethod
    def primary_key_changed(live: TableDefinition, desired: TableDefinition) -> bool:
        """
        True when the ordered key column names differ, or any key column's
        kind or max_size differs.
        """
        if list(live.primary_key) != list(desired.primary_key):
            return True
        for live_col, desired_col in zip(live.primary_key_columns(), desired.primary_key_columns()):
            if not live_col.type.same_type(desired_col.type):
                return True
        return False

    # =========================================================================
    # COLUMN MATCHING
    # =========================================================================

    @staticmethod
    def match_columns(live: TableDefinition, desired: TableDefinition) -> List[ColumnPair]:
        """
        Pair desired columns with live columns.

        A desired column matches the live column of the same name, else
        the live column named by its origin_name (when origin_name differs
        from its name). First match wins in desired-column order and each
        live column is consumed at most once.
        """
        consumed = set()
        pairs: List[ColumnPair] = []

        for new_col in desired.columns:
            candidates = [new_col.name]
            if new_col.origin_name and new_col.origin_name != new_col.name:
                candidates.append(new_col.origin_name)

            for candidate in candidates:
                old_col = live.column(candidate)
                if old_col is not None and old_col.name not in consumed:
                    consumed.add(old_col.name)
                    pairs.append((old_col, new_col))
                    break

        return pairs

    # =========================================================================
    # COLUMN ALTERATIONS
    # =========================================================================

    @staticmethod
    def _alter_pairs(table: str, pairs: List[ColumnPair]) -> List[op.Operation]:
        ops: List[op.Operation] = []

        # (a) rename
        for old, new in pairs:
            if old.name != new.name:
                ops.append(op.RenameColumn(table, old.name, new.name))

        # (b) type
        for old, new in pairs:
            if not old.type.same_type(new.type):
                ops.append(op.AlterColumnType(table, new.name, new.type))

        # (c) drop not null
        for old, new in pairs:
            if old.not_null and not new.not_null:
                ops.append(op.DropNotNull(table, new.name))

        # (d) set not null, existing NULLs are covered by the kind's default literal
        for old, new in pairs:
            if not old.not_null and new.not_null:
                ops.append(op.SetDefault(table, new.name, default_literal(new.type.kind)))
                ops.append(op.SetNotNull(table, new.name))

        # (e) drop default
        for old, new in pairs:
            if old.default_expr and not new.default_expr:
                ops.append(op.DropDefault(table, new.name))

        # (f) set default
        for old, new in pairs:
            if new.default_expr and old.default_expr != new.default_expr:
                ops.append(op.SetDefault(table, new.name, new.default_expr))

        # (g) comment
        for old, new in pairs:
            new_comment = serialize_comment(new.comment)
            if serialize_comment(old.comment) != new_comment:
                ops.append(op.SetColumnComment(table, new.name, new_comment))

        return ops

    @staticmethod
    def _add_column(table: str, column: ColumnDefinition) -> List[op.Operation]:
        default = column.default_expr
        if column.not_null and not default:
            default = default_literal(column.type.kind)

        ops: List[op.Operation] = [op.AddColumn(table, column, default)]
        comment = serialize_comment(column.comment)
        if comment:
            ops.append(op.SetColumnComment(table, column.name, comment))
        return ops

    # =========================================================================
    # INDEXES
    # =========================================================================

    @staticmethod
    def _index_ops(table: str, live: TableDefinition, desired: TableDefinition) -> List[op.Operation]:
        ops: List[op.Operation] = []

        for name, old_idx in live.indexes.items():
            new_idx = desired.indexes.get(name)
            if new_idx is None:
                continue
            recreated = old_idx.define != new_idx.define
            if recreated:
                # No generic ALTER INDEX: drop and run the new define verbatim
                ops.append(op.DropIndex(table, name))
                ops.append(op.CreateIndex(table, name, new_idx.define))

            new_comment = serialize_comment(new_idx.comment)
            # DROP INDEX discards the comment, so a recreated index needs it again
            if serialize_comment(old_idx.comment) != new_comment or (recreated and new_comment):
                ops.append(op.SetIndexComment(table, name, new_comment))

        for name in live.indexes:
            if name not in desired.indexes:
                ops.append(op.DropIndex(table, name))

        for name, new_idx in desired.indexes.items():
            if name not in live.indexes:
                ops.append(op.CreateIndex(table, name, new_idx.define))
                ops.append(op.SetIndexComment(table, name, serialize_comment(new_idx.comment)))

        return ops

    # =========================================================================
    # FULL DIFF
    # =========================================================================

    def diff(self, live: Optional[TableDefinition], desired: TableDefinition) -> List[op.Operation]:
        """
        Compute the edit script from live to desired.

        Args:
            live: Live definition, or None when the table does not exist
            desired: Desired definition

        Returns:
            Ordered list of operations (empty when nothing changes)
        """
        table = desired.name
        ops: List[op.Operation] = []

        if live is None:
            ops.append(op.CreateTable(table, desired.is_temporary))
            live = TableDefinition.empty(table)

        key_changed = self.primary_key_changed(live, desired)
        if key_changed and live.has_primary_key():
            # Server default naming when the snapshot does not carry one
            constraint = live.primary_key_constraint_name or f"{live.name}_pkey"
            ops.append(op.DropPrimaryKey(table, constraint))

        pairs = self.match_columns(live, desired)
        matched_live = {old.name for old, _ in pairs}
        matched_desired = {new.name for _, new in pairs}

        for old_col in live.columns:
            if old_col.name not in matched_live:
                ops.append(op.DropColumn(table, old_col.name))

        ops.extend(self._alter_pairs(table, pairs))

        for new_col in desired.columns:
            if new_col.name not in matched_desired:
                ops.extend(self._add_column(table, new_col))

        if key_changed and desired.has_primary_key():
            ops.append(op.CreatePrimaryKey(table, tuple(desired.primary_key)))

        ops.extend(self._index_ops(table, live, desired))

        table_comment = serialize_comment(desired.comment)
        if serialize_comment(live.comment) != table_comment:
            ops.append(op.SetTableComment(table, table_comment))

        logger.debug(f"Planned {len(ops)} operations for table {table}")
        return ops


def diff_tables(live: Optional[TableDefinition], desired: TableDefinition) -> List[op.Operation]:
    """Convenience wrapper around SchemaDiffer().diff()."""
    return SchemaDiffer().diff(live, desired)


__all__ = ["SchemaDiffer", "diff_tables"]
