# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core module initialization
# PURPOSE: Export core contracts, models, and schema utilities
# LAST_REVIEWED: 14 OCT 2026
# ============================================================================

from core.contracts import ColumnKind, DecodeError, InvalidTypeError
from core.models import (
    ColumnDefinition,
    ColumnTypeDescriptor,
    DataTable,
    IndexDefinition,
    Nullable,
    TableDefinition,
)
from core.schema import PostgresMeta, PydanticToTable, SchemaDiffer, decode, encode

__all__ = [
    # Contracts
    "ColumnKind",
    "DecodeError",
    "InvalidTypeError",
    # Models
    "ColumnDefinition",
    "ColumnTypeDescriptor",
    "DataTable",
    "IndexDefinition",
    "Nullable",
    "TableDefinition",
    # Schema
    "PostgresMeta",
    "PydanticToTable",
    "SchemaDiffer",
    "decode",
    "encode",
]
