# ============================================================================
# TYPED VALUE CODEC
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - Text wire format for every column kind
# PURPOSE: Encode/decode Python values to/from PostgreSQL text format
# CREATED: 07 OCT 2026
# EXPORTS: encode, decode, encode_scalar, decode_scalar, ENCODERS, DECODERS
# DEPENDENCIES: core.contracts, core.schema.array_literal
# ============================================================================
"""
Typed Value Codec.

Converts canonical Python values to the engine's text representation and
back, per ColumnKind:

    string     str              passthrough
    bool       bool             t / f
    int64      int              decimal
    float64    float            17 significant digits, NaN, Infinity
    timestamp  datetime         ISO 8601 / RFC 3339 (microseconds)
    bytea      bytes            \\x + hex
    json       any JSON value   canonical JSON (sorted keys, compact)
    <kind>[]   list             {e1,e2,...} with array quoting

Empty text is NULL. Known limitation: an empty string, empty bytes and an
empty list also encode to empty text, so they decode back as NULL.

Usage:
    from core.schema.codec import encode, decode

    text = encode(descriptor, value)
    value = decode(descriptor, text)
"""

import binascii
import json
import math
import re
from datetime import datetime
from typing import Any, Callable, Dict, List

from core.contracts import ColumnKind, DecodeError, InvalidTypeError
from core.models.table import ColumnTypeDescriptor
from core.models.values import Nullable
from core.schema.array_literal import format_array, parse_array

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INT_RE = re.compile(r"^[+-]?\d+$")
_EXCESS_FRACTION_RE = re.compile(r"(\.\d{6})\d+")
# "12:00:00+05" -> "12:00:00+05:00"; date-only text is left alone
_SHORT_OFFSET_RE = re.compile(r"(:\d{2}(?:\.\d+)?[+-]\d{2})$")


# ============================================================================
# SCALAR ENCODERS
# ============================================================================

def _require(value: Any, *types) -> None:
    # bool is an int subclass; keep the kinds apart
    if isinstance(value, bool) and bool not in types:
        raise InvalidTypeError(value)
    if not isinstance(value, types):
        raise InvalidTypeError(value)


def _encode_string(value: Any) -> str:
    _require(value, str)
    return value


def _encode_bool(value: Any) -> str:
    _require(value, bool)
    return "t" if value else "f"


def _encode_int64(value: Any) -> str:
    _require(value, int)
    if not INT64_MIN <= value <= INT64_MAX:
        raise InvalidTypeError(value, f"{value} is out of int64 range")
    return str(value)


def _encode_float64(value: Any) -> str:
    _require(value, float, int)
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return format(value, ".17g")


def _encode_timestamp(value: Any) -> str:
    _require(value, datetime)
    return value.isoformat()


def _encode_bytea(value: Any) -> str:
    _require(value, bytes, bytearray, memoryview)
    raw = bytes(value)
    if not raw:
        return ""
    return "\\x" + raw.hex()


def _encode_json(value: Any) -> str:
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise InvalidTypeError(value, f"value is not JSON serializable: {e}") from e


# ============================================================================
# SCALAR DECODERS
# ============================================================================

def _decode_string(text: str) -> str:
    return text


def _decode_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered in ("t", "true"):
        return True
    if lowered in ("f", "false"):
        return False
    raise ValueError(f"invalid boolean {text!r}")


def _decode_int64(text: str) -> int:
    if not _INT_RE.match(text):
        raise ValueError(f"invalid integer {text!r}")
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"{text} is out of int64 range")
    return value


def _decode_float64(text: str) -> float:
    return float(text)


def _decode_timestamp(text: str) -> datetime:
    normalized = text.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    normalized = _EXCESS_FRACTION_RE.sub(r"\1", normalized)
    normalized = _SHORT_OFFSET_RE.sub(r"\1:00", normalized)
    return datetime.fromisoformat(normalized)


def _decode_bytea(text: str) -> bytes:
    if not text.startswith("\\x"):
        raise ValueError(f"{text!r} is not a \\x hex string")
    return binascii.unhexlify(text[2:])


def _decode_json(text: str) -> Any:
    return json.loads(text)


# ============================================================================
# DISPATCH TABLES
# ============================================================================

ENCODERS: Dict[ColumnKind, Callable[[Any], str]] = {
    ColumnKind.STRING: _encode_string,
    ColumnKind.BOOL: _encode_bool,
    ColumnKind.INT64: _encode_int64,
    ColumnKind.FLOAT64: _encode_float64,
    ColumnKind.TIMESTAMP: _encode_timestamp,
    ColumnKind.BYTEA: _encode_bytea,
    ColumnKind.JSON: _encode_json,
}

DECODERS: Dict[ColumnKind, Callable[[str], Any]] = {
    ColumnKind.STRING: _decode_string,
    ColumnKind.BOOL: _decode_bool,
    ColumnKind.INT64: _decode_int64,
    ColumnKind.FLOAT64: _decode_float64,
    ColumnKind.TIMESTAMP: _decode_timestamp,
    ColumnKind.BYTEA: _decode_bytea,
    ColumnKind.JSON: _decode_json,
}


def _kind_of(descriptor: ColumnTypeDescriptor) -> ColumnKind:
    kind = ColumnKind.parse(descriptor.kind)
    if kind.element_kind() not in ENCODERS:
        raise InvalidTypeError(kind)
    return kind


def encode_scalar(kind: ColumnKind, value: Any) -> str:
    """Encode one non-NULL scalar value."""
    encoder = ENCODERS.get(kind)
    if encoder is None:
        raise InvalidTypeError(kind)
    return encoder(value)


def decode_scalar(kind: ColumnKind, text: str, position: int = 0) -> Any:
    """Decode one scalar, wrapping parse failures in DecodeError."""
    decoder = DECODERS.get(kind)
    if decoder is None:
        raise InvalidTypeError(kind)
    try:
        return decoder(text)
    except (ValueError, binascii.Error) as e:
        raise DecodeError(position, e, text) from e


# ============================================================================
# PUBLIC API
# ============================================================================

def encode(descriptor: ColumnTypeDescriptor, value: Any) -> str:
    """
    Encode a value to its text representation.

    Args:
        descriptor: Column type of the value
        value: Canonical value, a Nullable, or None

    Returns:
        Text form; "" for NULL (and for empty strings, bytes and lists)

    Raises:
        InvalidTypeError: Unknown kind or a value of the wrong Python type
    """
    kind = _kind_of(descriptor)

    if isinstance(value, Nullable):
        if not value.valid:
            return ""
        value = value.value
    if value is None:
        return ""

    if not kind.is_slice():
        return encode_scalar(kind, value)

    _require(value, list, tuple)
    if len(value) == 0:
        return ""
    element_kind = kind.element_kind()
    items = [None if item is None else _encode_element(element_kind, item) for item in value]
    return format_array(items)


def _encode_element(kind: ColumnKind, item: Any) -> str:
    # An empty element stands for an empty string inside an array, so empty
    # bytea is spelled as a bare \x prefix there.
    text = encode_scalar(kind, item)
    if kind == ColumnKind.BYTEA and text == "":
        return "\\x"
    return text


def decode(descriptor: ColumnTypeDescriptor, text: str) -> Any:
    """
    Decode text produced by encode() or by the server's text output.

    Returns:
        The canonical value, None for "" (non-nullable), or a Nullable
        when the descriptor is nullable.

    Raises:
        InvalidTypeError: Unknown kind
        DecodeError: Malformed scalar, array literal or hex
    """
    kind = _kind_of(descriptor)

    if text is None or text == "":
        return Nullable() if descriptor.nullable else None

    if kind.is_slice():
        element_kind = kind.element_kind()
        result: List[Any] = []
        for element in parse_array(text):
            if element.text is None:
                result.append(None)
            else:
                result.append(decode_scalar(element_kind, element.text, element.position))
    else:
        result = decode_scalar(kind, text)

    if descriptor.nullable:
        return Nullable.of(result)
    return result


__all__ = [
    "encode",
    "decode",
    "encode_scalar",
    "decode_scalar",
    "ENCODERS",
    "DECODERS",
]
