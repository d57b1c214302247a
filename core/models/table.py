# ============================================================================
# TABLE DEFINITION MODELS
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core model - Schema snapshot
# PURPOSE: Describe a table (columns, primary key, indexes, comments)
# CREATED: 06 OCT 2026
# EXPORTS: ColumnTypeDescriptor, ColumnDefinition, IndexDefinition,
#          TableDefinition, serialize_comment, parse_comment
# DEPENDENCIES: pydantic
# ============================================================================
"""
Schema Snapshot Models

A TableDefinition is built either by a caller (the desired shape) or by
the catalog reader (the live shape). Both are frozen: the differ compares
them and never mutates either side.

Comments are structured metadata (a JSON object). They are compared in
serialized form, see serialize_comment().
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from core.contracts import ColumnKind


# ============================================================================
# COMMENTS
# ============================================================================

def serialize_comment(comment: Optional[Dict[str, Any]]) -> str:
    """Canonical text of a comment; "" when there is none."""
    if not comment:
        return ""
    return json.dumps(comment, sort_keys=True, separators=(",", ":"), default=str)


def parse_comment(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse a comment read from the catalog.

    JSON objects are returned as-is; any other non-empty text is kept
    under the "text" key so it is not lost.
    """
    if not text:
        return {}
    try:
        value = json.loads(text)
    except ValueError:
        return {"text": text}
    if isinstance(value, dict):
        return value
    return {"text": text}


# ============================================================================
# COLUMN MODELS
# ============================================================================

class ColumnTypeDescriptor(BaseModel):
    """Abstract column type: kind, bounded size and nullability."""

    kind: ColumnKind
    max_size: int = Field(default=0, ge=0, description="Only meaningful for bounded strings")
    nullable: bool = True

    model_config = {"frozen": True}

    @property
    def not_null(self) -> bool:
        return not self.nullable

    def same_type(self, other: "ColumnTypeDescriptor") -> bool:
        """Kind and size equality (nullability is tracked separately)."""
        return self.kind == other.kind and self.max_size == other.max_size


class ColumnDefinition(BaseModel):
    """
    One column of a table.

    origin_name is the column's previous name; when set and different from
    name, the differ treats a live column of that name as this column
    (rename instead of drop + add).
    """

    name: str = Field(..., min_length=1)
    type: ColumnTypeDescriptor
    default_expr: str = Field(default="", description="SQL default expression, '' = none")
    comment: Dict[str, Any] = Field(default_factory=dict)
    origin_name: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def not_null(self) -> bool:
        return self.type.not_null


class IndexDefinition(BaseModel):
    """
    A secondary index.

    define is the literal DDL used to (re)create the index and is compared
    verbatim. unique/columns are informational (filled by the catalog
    reader) and take no part in comparisons.
    """

    define: str = Field(..., min_length=1)
    comment: Dict[str, Any] = Field(default_factory=dict)
    unique: bool = False
    columns: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}


# ============================================================================
# TABLE MODEL
# ============================================================================

class TableDefinition(BaseModel):
    """
    Shape of one table.

    Invariants:
        - column names are unique
        - primary_key is an ordered subset of the column names
    """

    name: str = Field(..., min_length=1)
    columns: List[ColumnDefinition] = Field(default_factory=list)
    primary_key: List[str] = Field(default_factory=list)
    primary_key_constraint_name: Optional[str] = None
    indexes: Dict[str, IndexDefinition] = Field(default_factory=dict)
    comment: Dict[str, Any] = Field(default_factory=dict)
    is_temporary: bool = False

    model_config = {"frozen": True}

    @field_validator("columns")
    @classmethod
    def _unique_column_names(cls, columns: List[ColumnDefinition]) -> List[ColumnDefinition]:
        seen = set()
        for column in columns:
            if column.name in seen:
                raise ValueError(f"duplicate column name: {column.name}")
            seen.add(column.name)
        return columns

    @model_validator(mode="after")
    def _primary_key_in_columns(self) -> "TableDefinition":
        names = {c.name for c in self.columns}
        missing = [pk for pk in self.primary_key if pk not in names]
        if missing:
            raise ValueError(f"primary key columns not in table {self.name}: {missing}")
        return self

    @classmethod
    def empty(cls, name: str) -> "TableDefinition":
        """A table with no columns, key, indexes or comment."""
        return cls(name=name)

    def has_primary_key(self) -> bool:
        return len(self.primary_key) > 0

    def column(self, name: str) -> Optional[ColumnDefinition]:
        """Column by name, or None."""
        for c in self.columns:
            if c.name == name:
                return c
        return None

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def primary_key_columns(self) -> List[ColumnDefinition]:
        return [self.column(name) for name in self.primary_key]


__all__ = [
    "ColumnTypeDescriptor",
    "ColumnDefinition",
    "IndexDefinition",
    "TableDefinition",
    "serialize_comment",
    "parse_comment",
]
