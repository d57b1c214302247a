# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Model exports
# PURPOSE: Central export point for table definitions and typed values
# LAST_REVIEWED: 14 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Table shape models (live or desired), the Nullable value wrapper and the
DataTable row container.
"""

from core.models.values import NULL, Nullable, unwrap
from core.models.table import (
    ColumnDefinition,
    ColumnTypeDescriptor,
    IndexDefinition,
    TableDefinition,
    parse_comment,
    serialize_comment,
)
from core.models.data_table import DataColumn, DataTable

__all__ = [
    # Values
    "NULL",
    "Nullable",
    "unwrap",
    # Table shape
    "ColumnDefinition",
    "ColumnTypeDescriptor",
    "IndexDefinition",
    "TableDefinition",
    "parse_comment",
    "serialize_comment",
    # Rows
    "DataColumn",
    "DataTable",
]
