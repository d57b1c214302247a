# ============================================================================
# TABLE DEFINITION FILES
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - Desired schema from YAML
# PURPOSE: Load desired TableDefinitions from a YAML document
# CREATED: 13 OCT 2026
# EXPORTS: load_definitions, parse_definitions
# DEPENDENCIES: PyYAML
# ============================================================================
"""
YAML table definitions.

Document shape:

    tables:
      - name: users
        primary_key: [id]
        comment: {owner: billing}
        columns:
          - name: id
            type: int64
            nullable: false
          - name: full_name
            type: string
            max_size: 50
            origin_name: name
          - name: tags
            type: string[]
            default: "'{}'"
        indexes:
          idx_users_name: CREATE INDEX idx_users_name ON users (full_name)
          idx_users_tags:
            define: CREATE INDEX idx_users_tags ON users USING gin (tags)
            comment: {purpose: search}

Column "type" is a column kind name. "nullable" defaults to true.
"""

from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from core.contracts import ColumnKind
from core.models.table import (
    ColumnDefinition,
    ColumnTypeDescriptor,
    IndexDefinition,
    TableDefinition,
)


def _column(data: Dict[str, Any]) -> ColumnDefinition:
    return ColumnDefinition(
        name=data["name"],
        type=ColumnTypeDescriptor(
            kind=ColumnKind.parse(data["type"]),
            max_size=int(data.get("max_size", 0)),
            nullable=bool(data.get("nullable", True)),
        ),
        default_expr=str(data.get("default") or ""),
        comment=data.get("comment") or {},
        origin_name=data.get("origin_name"),
    )


def _index(spec: Union[str, Dict[str, Any]]) -> IndexDefinition:
    if isinstance(spec, str):
        return IndexDefinition(define=spec)
    return IndexDefinition(define=spec["define"], comment=spec.get("comment") or {})


def parse_definitions(document: Dict[str, Any]) -> List[TableDefinition]:
    """
    Build TableDefinitions from a parsed YAML document.

    Raises:
        ValueError: Missing "tables" list, or an invalid table/column
        InvalidTypeError: Unknown column kind
    """
    tables = (document or {}).get("tables")
    if not isinstance(tables, list):
        raise ValueError("definition document needs a 'tables' list")

    definitions = []
    for table in tables:
        primary_key = table.get("primary_key") or []
        if isinstance(primary_key, str):
            primary_key = [primary_key]
        definitions.append(
            TableDefinition(
                name=table["name"],
                columns=[_column(c) for c in table.get("columns") or []],
                primary_key=primary_key,
                indexes={name: _index(spec) for name, spec in (table.get("indexes") or {}).items()},
                comment=table.get("comment") or {},
                is_temporary=bool(table.get("temporary", False)),
            )
        )
    return definitions


def load_definitions(path: Union[str, Path]) -> List[TableDefinition]:
    """Read and parse a YAML definition file."""
    with open(path, "r", encoding="utf-8") as f:
        return parse_definitions(yaml.safe_load(f))


__all__ = ["load_definitions", "parse_definitions"]
