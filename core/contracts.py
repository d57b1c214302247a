# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Foundation - Column kinds and type errors
# PURPOSE: Define the closed set of column kinds shared by codec and mapper
# CREATED: 06 OCT 2026
# EXPORTS: ColumnKind, InvalidTypeError, DecodeError
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the schema reconciliation toolkit.

ColumnKind is the abstract type tag every column carries. It crosses three
boundaries:
- SQL (native PostgreSQL type names, see core.schema.type_mapper)
- Wire (text representation, see core.schema.codec)
- Python (canonical in-memory value)

The set is closed: seven scalar kinds and the slice (array) variant of each.
"""

from enum import Enum
from typing import Optional


# ============================================================================
# ERRORS
# ============================================================================

class InvalidTypeError(ValueError):
    """Raised for an unrecognized column kind or native type name."""

    def __init__(self, value, message: Optional[str] = None):
        self.value = value
        super().__init__(message or f"the type {value!r} is invalid")


class DecodeError(ValueError):
    """
    Raised when text cannot be decoded for a known kind.

    Attributes:
        position: Character offset of the failing token in the input text
        cause: Underlying exception or description
    """

    def __init__(self, position: int, cause, text: Optional[str] = None):
        self.position = position
        self.cause = cause
        self.text = text
        super().__init__(f"decode failed at position {position}: {cause}")


# ============================================================================
# COLUMN KINDS
# ============================================================================

class ColumnKind(str, Enum):
    """
    Abstract column type tag.

    Scalar kinds have a slice variant spelled with a trailing "[]".
    """
    STRING = "string"
    BOOL = "bool"
    INT64 = "int64"
    FLOAT64 = "float64"
    TIMESTAMP = "timestamp"
    BYTEA = "bytea"
    JSON = "json"

    STRING_SLICE = "string[]"
    BOOL_SLICE = "bool[]"
    INT64_SLICE = "int64[]"
    FLOAT64_SLICE = "float64[]"
    TIMESTAMP_SLICE = "timestamp[]"
    BYTEA_SLICE = "bytea[]"
    JSON_SLICE = "json[]"

    def is_slice(self) -> bool:
        """Check if this kind is an array of a scalar kind."""
        return self.value.endswith("[]")

    def element_kind(self) -> "ColumnKind":
        """Scalar kind of the elements (self for scalar kinds)."""
        if self.is_slice():
            return ColumnKind(self.value[:-2])
        return self

    def slice_of(self) -> "ColumnKind":
        """Slice variant of a scalar kind."""
        if self.is_slice():
            raise InvalidTypeError(self.value, f"{self.value} is already a slice kind")
        return ColumnKind(self.value + "[]")

    @classmethod
    def parse(cls, value) -> "ColumnKind":
        """Coerce a kind or its string tag, raising InvalidTypeError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidTypeError(value) from None


SCALAR_KINDS = tuple(k for k in ColumnKind if not k.is_slice())
SLICE_KINDS = tuple(k for k in ColumnKind if k.is_slice())


__all__ = [
    "ColumnKind",
    "SCALAR_KINDS",
    "SLICE_KINDS",
    "InvalidTypeError",
    "DecodeError",
]
