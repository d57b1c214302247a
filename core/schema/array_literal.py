# ============================================================================
# ARRAY LITERAL PARSER
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - PostgreSQL one-dimensional array text format
# PURPOSE: Split and join {a,b,"c d"} array literals
# CREATED: 07 OCT 2026
# EXPORTS: parse_array, format_array, ArrayElement
# ============================================================================
"""
PostgreSQL array literal handling (one dimension, comma delimiter).

Element rules follow the server's array_out/array_in:
- elements are separated by the delimiter
- an element may be double-quoted; inside quotes backslash escapes the
  next character
- an unquoted NULL (any case) is SQL NULL
- elements that are empty, contain the delimiter, quotes, backslashes,
  braces or whitespace, or spell NULL, must be quoted on output
"""

from typing import List, NamedTuple, Optional, Sequence

from core.contracts import DecodeError

DELIMITER = ","
_NEEDS_QUOTING = set('{}",\\') | set(" \t\n\r\v\f")


class ArrayElement(NamedTuple):
    """One element of a parsed array literal."""
    position: int           # offset of the element's first character
    text: Optional[str]     # None for SQL NULL


def parse_array(text: str, delimiter: str = DELIMITER) -> List[ArrayElement]:
    """
    Split a one-dimensional array literal into elements.

    Raises:
        DecodeError: Missing braces, nested arrays, unterminated quotes
    """
    if len(text) < 2 or text[0] != "{" or text[-1] != "}":
        raise DecodeError(0, f"array literal must be enclosed in braces: {text!r}", text)

    body_end = len(text) - 1
    elements: List[ArrayElement] = []
    i = 1
    if i == body_end:
        return elements

    while True:
        # Skip leading whitespace
        while i < body_end and text[i].isspace():
            i += 1
        start = i

        if i < body_end and text[i] == '"':
            i += 1
            chars = []
            while True:
                if i >= body_end:
                    raise DecodeError(start, "unterminated quoted element", text)
                c = text[i]
                if c == "\\":
                    if i + 1 >= body_end:
                        raise DecodeError(i, "dangling escape", text)
                    chars.append(text[i + 1])
                    i += 2
                elif c == '"':
                    i += 1
                    break
                else:
                    chars.append(c)
                    i += 1
            while i < body_end and text[i].isspace():
                i += 1
            elements.append(ArrayElement(start, "".join(chars)))
        else:
            chars = []
            while i < body_end and text[i] != delimiter:
                c = text[i]
                if c in '{}':
                    raise DecodeError(i, "nested arrays are not supported", text)
                if c == '"':
                    raise DecodeError(i, "unexpected quote", text)
                if c == "\\":
                    if i + 1 >= body_end:
                        raise DecodeError(i, "dangling escape", text)
                    chars.append(text[i + 1])
                    i += 2
                    continue
                chars.append(c)
                i += 1
            raw = "".join(chars).rstrip()
            if raw == "":
                raise DecodeError(start, "empty unquoted element", text)
            if raw.upper() == "NULL":
                elements.append(ArrayElement(start, None))
            else:
                elements.append(ArrayElement(start, raw))

        if i >= body_end:
            break
        if text[i] != delimiter:
            raise DecodeError(i, f"expected {delimiter!r}", text)
        i += 1

    return elements


def _quote(item: str) -> str:
    if item == "" or item.upper() == "NULL" or any(c in _NEEDS_QUOTING for c in item):
        escaped = item.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return item


def format_array(items: Sequence[Optional[str]], delimiter: str = DELIMITER) -> str:
    """Join already-encoded element texts into an array literal."""
    parts = ["NULL" if item is None else _quote(item) for item in items]
    return "{" + delimiter.join(parts) + "}"


__all__ = ["ArrayElement", "parse_array", "format_array", "DELIMITER"]
