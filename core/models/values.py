# ============================================================================
# NULLABLE VALUE
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core model - Tri-state value for nullable columns
# PURPOSE: One optional-value wrapper shared by every column kind
# CREATED: 06 OCT 2026
# EXPORTS: Nullable, NULL
# ============================================================================
"""
Nullable column values.

Nullable columns never hold the raw value: they hold Nullable(valid, value).
valid=False is SQL NULL regardless of what value contains.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Nullable(Generic[T]):
    """Content plus validity flag for a nullable column value."""
    value: Optional[T] = None
    valid: bool = False

    @classmethod
    def of(cls, value: T) -> "Nullable[T]":
        return cls(value=value, valid=True)

    @classmethod
    def null(cls) -> "Nullable[Any]":
        return cls()

    def get(self) -> Optional[T]:
        """Return the content, or None when NULL."""
        return self.value if self.valid else None

    def __bool__(self) -> bool:
        return self.valid


NULL: Nullable[Any] = Nullable()


def unwrap(value: Any) -> Any:
    """Nullable -> content or None; anything else passes through."""
    if isinstance(value, Nullable):
        return value.get()
    return value


__all__ = ["Nullable", "NULL", "unwrap"]
