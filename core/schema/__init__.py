# ============================================================================
# SCHEMA MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - Codec, type mapping, diffing and DDL rendering
# PURPOSE: Everything between a desired table shape and its DDL statements
# LAST_REVIEWED: 14 OCT 2026
# ============================================================================

from core.schema.codec import decode, decode_scalar, encode, encode_scalar
from core.schema.type_mapper import (
    TYPE_MAP,
    default_literal,
    from_native_type_name,
    to_native_type_name,
)
from core.schema.differ import SchemaDiffer, diff_tables
from core.schema.ddl_utils import (
    ColumnBuilder,
    CommentBuilder,
    ConstraintBuilder,
    IndexBuilder,
    PostgresMeta,
    TableBuilder,
)
from core.schema.model_definition import PydanticToTable
from core.schema.definition_file import load_definitions, parse_definitions

__all__ = [
    # Codec
    "encode",
    "decode",
    "encode_scalar",
    "decode_scalar",
    # Type mapping
    "TYPE_MAP",
    "default_literal",
    "from_native_type_name",
    "to_native_type_name",
    # Diff
    "SchemaDiffer",
    "diff_tables",
    # DDL
    "ColumnBuilder",
    "CommentBuilder",
    "ConstraintBuilder",
    "IndexBuilder",
    "PostgresMeta",
    "TableBuilder",
    # Desired schema sources
    "PydanticToTable",
    "load_definitions",
    "parse_definitions",
]
