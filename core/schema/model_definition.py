# ============================================================================
# PYDANTIC TO TABLE DEFINITION
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - Desired schema from Pydantic models
# PURPOSE: Derive a TableDefinition from a Pydantic model's fields and metadata
# CREATED: 09 OCT 2026
# EXPORTS: PydanticToTable
# DEPENDENCIES: pydantic, annotated_types
# ============================================================================
"""
Pydantic to TableDefinition.

Lets a Pydantic model be the single source of truth for a table's desired
shape. The reconciler then converges the live table to it.

Model Metadata Convention:
    Models define SQL metadata via ClassVar attributes:
    - __sql_table__: Table name (required)
    - __sql_primary_key__: Primary key column(s) - string or list
    - __sql_indexes__: Dict of {index_name: define_sql} or
                       {index_name: {"define": ..., "comment": {...}}}
    - __sql_comment__: Table comment (dict)

Field mapping:
    str (max_length=n)      string, character varying(n)
    bool / int / float      bool / int64 / float64
    datetime / date         timestamp
    bytes                   bytea
    dict, Dict[...]         json
    List[x]                 slice of x's kind
    Optional[x]             nullable (otherwise NOT NULL)
    Field(description=...)  column comment {"description": ...}
    Field(default=...)      default expression for simple literals
    json_schema_extra={"origin_name": "old"}  rename hint

Usage:
    table = PydanticToTable().generate_table(Customer)
"""

import logging
import types
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Tuple, Type, Union, get_args, get_origin

from annotated_types import MaxLen
from pydantic import BaseModel
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

from core.contracts import ColumnKind, InvalidTypeError
from core.models.table import (
    ColumnDefinition,
    ColumnTypeDescriptor,
    IndexDefinition,
    TableDefinition,
)

logger = logging.getLogger(__name__)


class PydanticToTable:
    """
    Convert Pydantic models to TableDefinitions.

    Analyzes Pydantic models with __sql_* metadata and builds the desired
    table shape handed to the reconciler.
    """

    TYPE_MAP = {
        str: ColumnKind.STRING,
        bool: ColumnKind.BOOL,
        int: ColumnKind.INT64,
        float: ColumnKind.FLOAT64,
        datetime: ColumnKind.TIMESTAMP,
        date: ColumnKind.TIMESTAMP,
        bytes: ColumnKind.BYTEA,
        dict: ColumnKind.JSON,
        Dict: ColumnKind.JSON,
    }

    # =========================================================================
    # METADATA EXTRACTION
    # =========================================================================

    @staticmethod
    def get_model_metadata(model: Type[BaseModel]) -> Dict[str, Any]:
        """
        Extract SQL metadata from a Pydantic model.

        Looks for __sql_* attributes (which Python mangles to _ClassName__sql_*).
        """
        def get_attr(name: str, default=None):
            mangled = f"_{model.__name__}__{name}"
            return getattr(model, mangled, getattr(model, f"__{name}", default))

        metadata = {
            "table": get_attr("sql_table__"),
            "primary_key": get_attr("sql_primary_key__", []),
            "indexes": get_attr("sql_indexes__", {}),
            "comment": get_attr("sql_comment__", {}),
        }

        if isinstance(metadata["primary_key"], str):
            metadata["primary_key"] = [metadata["primary_key"]]

        return metadata

    # =========================================================================
    # TYPE CONVERSION
    # =========================================================================

    def unwrap_optional(self, field_type: Any) -> Tuple[Any, bool]:
        """Return (inner type, is_optional) for Optional[X] / X | None."""
        origin = get_origin(field_type)
        args = get_args(field_type)
        if origin in (Union, types.UnionType) and type(None) in args:
            inner = [a for a in args if a is not type(None)]
            if len(inner) != 1:
                raise InvalidTypeError(field_type, f"unsupported union {field_type}")
            return inner[0], True
        return field_type, False

    def python_type_to_kind(self, field_type: Any) -> ColumnKind:
        """
        Map a (non-optional) Python annotation to a column kind.

        Raises:
            InvalidTypeError: Annotation has no column kind
        """
        origin = get_origin(field_type)

        if origin in (dict, Dict):
            return ColumnKind.JSON
        if origin in (list, List):
            args = get_args(field_type)
            element = args[0] if args else str
            element_kind = self.python_type_to_kind(element)
            if element_kind.is_slice():
                raise InvalidTypeError(field_type, "nested lists are not supported")
            return element_kind.slice_of()

        if isinstance(field_type, type) and issubclass(field_type, Enum):
            return ColumnKind.STRING

        kind = self.TYPE_MAP.get(field_type)
        if kind is None:
            raise InvalidTypeError(field_type)
        return kind

    @staticmethod
    def max_length(field_info: FieldInfo) -> int:
        for constraint in field_info.metadata or []:
            if isinstance(constraint, MaxLen):
                return constraint.max_length
        return 0

    @staticmethod
    def default_expression(field_info: FieldInfo) -> str:
        """SQL default for simple literal defaults; "" otherwise."""
        default = field_info.default
        if default is PydanticUndefined or default is None:
            return ""
        if isinstance(default, Enum):
            default = default.value
        if isinstance(default, bool):
            return "true" if default else "false"
        if isinstance(default, (int, float)):
            return str(default)
        if isinstance(default, str):
            return "'" + default.replace("'", "''") + "'"
        return ""

    # =========================================================================
    # TABLE GENERATION
    # =========================================================================

    def generate_column(self, field_name: str, field_info: FieldInfo) -> ColumnDefinition:
        inner, optional = self.unwrap_optional(field_info.annotation)
        kind = self.python_type_to_kind(inner)

        max_size = 0
        if kind in (ColumnKind.STRING, ColumnKind.STRING_SLICE):
            max_size = self.max_length(field_info)

        extra = field_info.json_schema_extra if isinstance(field_info.json_schema_extra, dict) else {}
        comment = {"description": field_info.description} if field_info.description else {}

        return ColumnDefinition(
            name=field_name,
            type=ColumnTypeDescriptor(kind=kind, max_size=max_size, nullable=optional),
            default_expr=self.default_expression(field_info),
            comment=comment,
            origin_name=extra.get("origin_name"),
        )

    def generate_table(self, model: Type[BaseModel]) -> TableDefinition:
        """
        Build the desired TableDefinition for a model.

        Raises:
            ValueError: Model has no __sql_table__
            InvalidTypeError: A field type has no column kind
        """
        meta = self.get_model_metadata(model)
        table_name = meta["table"]
        if not table_name:
            raise ValueError(f"Model {model.__name__} missing __sql_table__ attribute")

        logger.debug(f"Generating table definition {table_name} from {model.__name__}")

        columns = [
            self.generate_column(field_name, field_info)
            for field_name, field_info in model.model_fields.items()
        ]

        indexes = {}
        for name, spec in (meta["indexes"] or {}).items():
            if isinstance(spec, str):
                indexes[name] = IndexDefinition(define=spec)
            else:
                indexes[name] = IndexDefinition(define=spec["define"], comment=spec.get("comment", {}))

        return TableDefinition(
            name=table_name,
            columns=columns,
            primary_key=list(meta["primary_key"]),
            indexes=indexes,
            comment=dict(meta["comment"] or {}),
        )

    def generate_all(self, models: List[Type[BaseModel]]) -> List[TableDefinition]:
        definitions = [self.generate_table(m) for m in models]
        logger.info(f"Generated {len(definitions)} table definitions")
        return definitions


__all__ = ["PydanticToTable"]
