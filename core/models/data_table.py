# ============================================================================
# DATA TABLE CONTAINER
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core model - Typed in-memory rows
# PURPOSE: Ordered typed columns plus row storage with codec-backed text I/O
# CREATED: 09 OCT 2026
# EXPORTS: DataColumn, DataTable
# ============================================================================
"""
Data Table

A small in-memory table whose columns carry ColumnTypeDescriptors. Values
are stored in canonical form: nullable columns hold Nullable, non-nullable
columns hold the raw value.

Text rows (as produced by the server's text output) are decoded through
the codec. A fill is all-or-nothing: if any cell fails to decode, no row
from that fill is kept.

Usage:
    table = DataTable("users")
    table.add_column("id", ColumnTypeDescriptor(kind="int64", nullable=False))
    table.add_column("name", ColumnTypeDescriptor(kind="string"))
    table.fill_text_rows([["1", "ada"], ["2", ""]])
    table.get_row(1)   # {"id": 2, "name": Nullable(valid=False)}
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from core.models.table import ColumnTypeDescriptor, TableDefinition
from core.models.values import Nullable, unwrap
from core.schema.codec import decode, encode


@dataclass(frozen=True)
class DataColumn:
    """A named, typed column of a DataTable."""
    name: str
    type: ColumnTypeDescriptor
    index: int

    def parse(self, text: str) -> Any:
        """Text -> canonical value."""
        return decode(self.type, text)

    def format(self, value: Any) -> str:
        """Canonical value -> text."""
        return encode(self.type, value)

    def coerce(self, value: Any) -> Any:
        """Wrap raw values for nullable columns; None becomes NULL."""
        if self.type.nullable:
            if isinstance(value, Nullable):
                return value
            return Nullable() if value is None else Nullable.of(value)
        value = unwrap(value)
        if value is None:
            raise ValueError(f"column {self.name} is NOT NULL")
        return value

    def zero_value(self) -> Any:
        return Nullable() if self.type.nullable else None


class DataTable:
    """Ordered typed columns and list-backed rows."""

    def __init__(self, name: str):
        self.name = name
        self.columns: List[DataColumn] = []
        self._by_name: Dict[str, DataColumn] = {}
        self._rows: List[List[Any]] = []

    @classmethod
    def from_definition(cls, definition: TableDefinition) -> "DataTable":
        """Empty DataTable with the definition's columns."""
        table = cls(definition.name)
        for column in definition.columns:
            table.add_column(column.name, column.type)
        return table

    # =========================================================================
    # COLUMNS
    # =========================================================================

    def add_column(self, name: str, descriptor: ColumnTypeDescriptor) -> DataColumn:
        """Register a typed column. Only allowed while the table has no rows."""
        if name in self._by_name:
            raise ValueError(f"duplicate column name: {name}")
        if self._rows:
            raise ValueError("columns cannot be added to a table with rows")
        column = DataColumn(name=name, type=descriptor, index=len(self.columns))
        self.columns.append(column)
        self._by_name[name] = column
        return column

    def column(self, key) -> DataColumn:
        """Column by name or position."""
        if isinstance(key, int):
            return self.columns[key]
        try:
            return self._by_name[key]
        except KeyError:
            raise KeyError(f"no column {key!r} in table {self.name}") from None

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def column_count(self) -> int:
        return len(self.columns)

    # =========================================================================
    # ROWS
    # =========================================================================

    def row_count(self) -> int:
        return len(self._rows)

    def new_row(self) -> Dict[str, Any]:
        return {c.name: c.zero_value() for c in self.columns}

    def add_values(self, values: Sequence[Any]) -> None:
        if len(values) != len(self.columns):
            raise ValueError(f"expected {len(self.columns)} values, got {len(values)}")
        self._rows.append([c.coerce(v) for c, v in zip(self.columns, values)])

    def add_row(self, row: Dict[str, Any]) -> None:
        missing = [c.name for c in self.columns if c.name not in row]
        if missing:
            raise KeyError(f"row is missing columns {missing}")
        self.add_values([row[c.name] for c in self.columns])

    def get_values(self, row_index: int) -> List[Any]:
        return list(self._rows[row_index])

    def get_row(self, row_index: int) -> Dict[str, Any]:
        return dict(zip(self.column_names(), self._rows[row_index]))

    def get_value(self, row_index: int, key) -> Any:
        return self._rows[row_index][self.column(key).index]

    def set_value(self, row_index: int, key, value: Any) -> None:
        column = self.column(key)
        self._rows[row_index][column.index] = column.coerce(value)

    def rows(self) -> List[Dict[str, Any]]:
        return [self.get_row(i) for i in range(len(self._rows))]

    def clear(self) -> None:
        self._rows = []

    # =========================================================================
    # TEXT I/O
    # =========================================================================

    def decode_row(self, texts: Sequence[Optional[str]]) -> List[Any]:
        if len(texts) != len(self.columns):
            raise ValueError(f"expected {len(self.columns)} values, got {len(texts)}")
        return [c.parse(t or "") for c, t in zip(self.columns, texts)]

    def fill_text_rows(self, rows: Iterable[Sequence[Optional[str]]]) -> int:
        """
        Decode and append text rows.

        Returns:
            Number of rows appended

        Raises:
            DecodeError / InvalidTypeError: The whole fill is discarded
        """
        decoded = [self.decode_row(texts) for texts in rows]
        self._rows.extend(decoded)
        return len(decoded)

    def encode_row(self, row_index: int) -> List[str]:
        return [c.format(v) for c, v in zip(self.columns, self._rows[row_index])]

    def as_tab_text(self, columns: Optional[Sequence[str]] = None) -> str:
        """Tab-separated header and rows in text form."""
        selected = [self.column(n) for n in columns] if columns else self.columns
        lines = ["\t".join(c.name for c in selected)]
        for row in self._rows:
            lines.append("\t".join(c.format(row[c.index]) for c in selected))
        return "\n".join(lines)


__all__ = ["DataColumn", "DataTable"]
