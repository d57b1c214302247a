# ============================================================================
# TYPE CATALOG MAPPER
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - Kind <-> PostgreSQL type name mapping
# PURPOSE: Translate column descriptors to/from native DDL type spellings
# CREATED: 07 OCT 2026
# EXPORTS: TYPE_MAP, to_native_type_name, from_native_type_name,
#          default_literal
# DEPENDENCIES: core.contracts
# ============================================================================
"""
Type Catalog Mapper.

Native names are spelled the way pg_catalog.format_type() prints them, so
a descriptor written with to_native_type_name() reads back unchanged from
the catalog (except timestamp with time zone and date, which normalize to
the timestamp kind and do not round-trip).

Usage:
    from core.schema.type_mapper import to_native_type_name

    to_native_type_name(ColumnTypeDescriptor(kind="string", max_size=50, nullable=False))
    # 'character varying(50) NOT NULL'
"""

import re
from typing import Dict

from core.contracts import ColumnKind, InvalidTypeError
from core.models.table import ColumnTypeDescriptor


# ============================================================================
# TYPE MAPPING
# ============================================================================

TYPE_MAP: Dict[ColumnKind, str] = {
    ColumnKind.STRING: "text",
    ColumnKind.BOOL: "boolean",
    ColumnKind.INT64: "bigint",
    ColumnKind.FLOAT64: "double precision",
    ColumnKind.TIMESTAMP: "timestamp without time zone",
    ColumnKind.BYTEA: "bytea",
    ColumnKind.JSON: "jsonb",
}

# Catalog spellings accepted on read (many-to-one)
NATIVE_NAMES: Dict[str, ColumnKind] = {
    "text": ColumnKind.STRING,
    "boolean": ColumnKind.BOOL,
    "bigint": ColumnKind.INT64,
    "double precision": ColumnKind.FLOAT64,
    "timestamp without time zone": ColumnKind.TIMESTAMP,
    "timestamp with time zone": ColumnKind.TIMESTAMP,
    "date": ColumnKind.TIMESTAMP,
    "bytea": ColumnKind.BYTEA,
    "jsonb": ColumnKind.JSON,
    "json": ColumnKind.JSON,
}

DEFAULT_LITERALS: Dict[ColumnKind, str] = {
    ColumnKind.STRING: "''",
    ColumnKind.BOOL: "false",
    ColumnKind.INT64: "0",
    ColumnKind.FLOAT64: "0",
    ColumnKind.TIMESTAMP: "'epoch'::timestamp without time zone",
}

_VARCHAR_RE = re.compile(r"^character varying\((\d+)\)$")
_VARCHAR_ARRAY_RE = re.compile(r"^character varying\((\d+)\)\[\]$")

NOT_NULL = " NOT NULL"


def base_type_name(descriptor: ColumnTypeDescriptor) -> str:
    """Native type name without the NOT NULL suffix."""
    kind = ColumnKind.parse(descriptor.kind)
    element = kind.element_kind()

    if element == ColumnKind.STRING and descriptor.max_size > 0:
        name = f"character varying({descriptor.max_size})"
    else:
        name = TYPE_MAP.get(element)
        if name is None:
            raise InvalidTypeError(kind)

    if kind.is_slice():
        name += "[]"
    return name


def to_native_type_name(descriptor: ColumnTypeDescriptor) -> str:
    """
    Map a descriptor to its native type name.

    Appends " NOT NULL" exactly when the descriptor is not nullable.

    Raises:
        InvalidTypeError: Unknown kind
    """
    name = base_type_name(descriptor)
    if not descriptor.nullable:
        name += NOT_NULL
    return name


def from_native_type_name(type_name: str, nullable: bool = True) -> ColumnTypeDescriptor:
    """
    Map a native type name (as printed by format_type) to a descriptor.

    Args:
        type_name: e.g. "character varying(50)[]"
        nullable: Nullability from the catalog's attnotnull

    Raises:
        InvalidTypeError: Type name not recognized
    """
    t = type_name.strip()

    match = _VARCHAR_RE.match(t)
    if match:
        return ColumnTypeDescriptor(kind=ColumnKind.STRING, max_size=int(match.group(1)), nullable=nullable)
    match = _VARCHAR_ARRAY_RE.match(t)
    if match:
        return ColumnTypeDescriptor(kind=ColumnKind.STRING_SLICE, max_size=int(match.group(1)), nullable=nullable)

    is_array = t.endswith("[]")
    scalar_name = t[:-2] if is_array else t
    kind = NATIVE_NAMES.get(scalar_name)
    if kind is None:
        raise InvalidTypeError(type_name)
    if is_array:
        kind = kind.slice_of()
    return ColumnTypeDescriptor(kind=kind, max_size=0, nullable=nullable)


def default_literal(kind) -> str:
    """SQL literal used as the default when a column is forced NOT NULL."""
    kind = ColumnKind.parse(kind)
    return DEFAULT_LITERALS.get(kind, "NULL")


__all__ = [
    "TYPE_MAP",
    "NATIVE_NAMES",
    "DEFAULT_LITERALS",
    "base_type_name",
    "to_native_type_name",
    "from_native_type_name",
    "default_literal",
]
