# ============================================================================
# TYPED VALUE CODEC TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Tests - Text encoding and decoding per column kind
# PURPOSE: Verify round-trips, NULL handling, array literals and errors
# CREATED: 14 OCT 2026
# ============================================================================
"""
Typed Value Codec Tests

Covers:
1. Round-trip of every scalar kind
2. Exact text spellings
3. NULL handling and the empty-value ambiguity
4. Array literal quoting and parsing
5. Decode errors and their positions
6. Every kind is dispatched

Run with:
    pytest tests/test_codec.py -v
"""

import math
import pytest
from datetime import datetime, timedelta, timezone

from core.contracts import SCALAR_KINDS, SLICE_KINDS, ColumnKind, DecodeError, InvalidTypeError
from core.models.table import ColumnTypeDescriptor
from core.models.values import Nullable
from core.schema.array_literal import format_array, parse_array
from core.schema.codec import (
    DECODERS,
    ENCODERS,
    decode,
    decode_scalar,
    encode,
    encode_scalar,
)


def desc(kind, nullable=False, max_size=0):
    return ColumnTypeDescriptor(kind=kind, nullable=nullable, max_size=max_size)


# ============================================================================
# ROUND TRIPS
# ============================================================================


class TestScalarRoundTrip:
    @pytest.mark.parametrize(
        "kind,value",
        [
            (ColumnKind.STRING, "hello world"),
            (ColumnKind.STRING, "quote ' and \\ backslash"),
            (ColumnKind.BOOL, True),
            (ColumnKind.BOOL, False),
            (ColumnKind.INT64, 0),
            (ColumnKind.INT64, 2 ** 63 - 1),
            (ColumnKind.INT64, -(2 ** 63)),
            (ColumnKind.FLOAT64, 1.5),
            (ColumnKind.FLOAT64, -0.1),
            (ColumnKind.FLOAT64, 1e300),
            (ColumnKind.TIMESTAMP, datetime(2024, 1, 2, 3, 4, 5, 123456)),
            (ColumnKind.TIMESTAMP, datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)),
            (ColumnKind.BYTEA, b"\x00\x01\xfe\xff"),
            (ColumnKind.JSON, {"a": [1, 2], "b": None}),
            (ColumnKind.JSON, [1, "x", True]),
        ],
    )
    def test_round_trip(self, kind, value):
        d = desc(kind)
        assert decode(d, encode(d, value)) == value

    @pytest.mark.parametrize("kind,value", [
        (ColumnKind.INT64, 42),
        (ColumnKind.STRING, "x"),
        (ColumnKind.JSON, {"k": "v"}),
    ])
    def test_nullable_round_trip(self, kind, value):
        d = desc(kind, nullable=True)
        assert decode(d, encode(d, Nullable.of(value))) == Nullable.of(value)

    def test_float_specials(self):
        d = desc(ColumnKind.FLOAT64)
        assert encode(d, float("inf")) == "Infinity"
        assert encode(d, float("-inf")) == "-Infinity"
        assert encode(d, float("nan")) == "NaN"
        assert math.isnan(decode(d, "NaN"))
        assert decode(d, "-Infinity") == float("-inf")


class TestScalarSpelling:
    def test_bool(self):
        assert encode(desc(ColumnKind.BOOL), True) == "t"
        assert encode(desc(ColumnKind.BOOL), False) == "f"

    def test_bool_accepts_long_form(self):
        assert decode(desc(ColumnKind.BOOL), "true") is True
        assert decode(desc(ColumnKind.BOOL), "FALSE") is False

    def test_int(self):
        assert encode(desc(ColumnKind.INT64), -42) == "-42"

    def test_float_seventeen_significant_digits(self):
        assert encode(desc(ColumnKind.FLOAT64), 0.1) == "0.10000000000000001"
        assert encode(desc(ColumnKind.FLOAT64), 1.5) == "1.5"
        assert decode(desc(ColumnKind.FLOAT64), "0.10000000000000001") == 0.1

    def test_int_accepted_for_float(self):
        assert encode(desc(ColumnKind.FLOAT64), 3) == "3"

    def test_bytea_hex(self):
        assert encode(desc(ColumnKind.BYTEA), b"\xde\xad") == "\\xdead"
        assert decode(desc(ColumnKind.BYTEA), "\\xDEAD") == b"\xde\xad"

    def test_json_canonical(self):
        assert encode(desc(ColumnKind.JSON), {"b": 1, "a": 2}) == '{"a":2,"b":1}'

    def test_json_empty_object_is_not_null(self):
        d = desc(ColumnKind.JSON, nullable=True)
        assert encode(d, {}) == "{}"
        assert decode(d, "{}") == Nullable.of({})

    def test_timestamp_iso(self):
        assert encode(desc(ColumnKind.TIMESTAMP), datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"


class TestTimestampDecoding:
    def test_server_text_output(self):
        value = decode(desc(ColumnKind.TIMESTAMP), "2024-01-02 03:04:05.5")
        assert value == datetime(2024, 1, 2, 3, 4, 5, 500000)

    def test_short_offset(self):
        value = decode(desc(ColumnKind.TIMESTAMP), "2024-01-02 03:04:05+05")
        assert value == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=5)))

    def test_zulu(self):
        value = decode(desc(ColumnKind.TIMESTAMP), "2024-01-02T03:04:05Z")
        assert value == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_excess_fraction_truncated(self):
        value = decode(desc(ColumnKind.TIMESTAMP), "2024-01-02T03:04:05.1234567")
        assert value == datetime(2024, 1, 2, 3, 4, 5, 123456)

    def test_date_only(self):
        assert decode(desc(ColumnKind.TIMESTAMP), "2024-01-01") == datetime(2024, 1, 1)


# ============================================================================
# NULL HANDLING
# ============================================================================


class TestNulls:
    def test_null_encodes_empty(self):
        d = desc(ColumnKind.INT64, nullable=True)
        assert encode(d, Nullable()) == ""
        assert encode(d, None) == ""

    def test_invalid_nullable_ignores_content(self):
        assert encode(desc(ColumnKind.INT64, nullable=True), Nullable(value=5, valid=False)) == ""

    def test_empty_decodes_null(self):
        assert decode(desc(ColumnKind.INT64, nullable=True), "") == Nullable()

    def test_empty_decodes_none_for_not_null(self):
        assert decode(desc(ColumnKind.INT64), "") is None

    def test_nullable_wraps_value(self):
        assert decode(desc(ColumnKind.INT64, nullable=True), "7") == Nullable.of(7)

    def test_empty_string_is_ambiguous(self):
        d = desc(ColumnKind.STRING, nullable=True)
        assert encode(d, "") == ""
        assert decode(d, encode(d, Nullable.of(""))) == Nullable()

    def test_empty_bytes_is_ambiguous(self):
        d = desc(ColumnKind.BYTEA, nullable=True)
        assert encode(d, b"") == ""
        assert decode(d, encode(d, b"")) == Nullable()

    def test_empty_array_is_ambiguous(self):
        d = desc(ColumnKind.INT64_SLICE, nullable=True)
        assert encode(d, []) == ""
        assert decode(d, encode(d, [])) == Nullable()

    def test_empty_array_literal_decodes_empty_list(self):
        assert decode(desc(ColumnKind.INT64_SLICE), "{}") == []
        assert decode(desc(ColumnKind.INT64_SLICE, nullable=True), "{}") == Nullable.of([])


# ============================================================================
# ARRAYS
# ============================================================================


class TestArrays:
    def test_int_array(self):
        d = desc(ColumnKind.INT64_SLICE)
        assert encode(d, [1, None, 3]) == "{1,NULL,3}"
        assert decode(d, "{1,NULL,3}") == [1, None, 3]

    def test_whitespace_around_elements(self):
        assert decode(desc(ColumnKind.INT64_SLICE), "{1, 2 ,3}") == [1, 2, 3]

    def test_string_quoting(self):
        d = desc(ColumnKind.STRING_SLICE)
        assert encode(d, ["a", "b c", "", "NULL"]) == '{a,"b c","","NULL"}'

    def test_string_round_trip_with_specials(self):
        d = desc(ColumnKind.STRING_SLICE)
        value = ["a", 'q"x', "back\\slash", "x,y", "{}", None, "null"]
        assert decode(d, encode(d, value)) == value

    def test_bytea_array_round_trip(self):
        d = desc(ColumnKind.BYTEA_SLICE)
        value = [b"", b"\x01\x02", b"\xff"]
        assert decode(d, encode(d, value)) == value

    def test_empty_bytea_element_keeps_hex_prefix(self):
        d = desc(ColumnKind.BYTEA_SLICE)
        text = encode(d, [b"", None])
        assert text == '{"\\\\x",NULL}'
        assert decode(d, text) == [b"", None]

    def test_bool_array(self):
        d = desc(ColumnKind.BOOL_SLICE)
        assert encode(d, [True, False]) == "{t,f}"
        assert decode(d, "{t,f}") == [True, False]

    def test_tuple_accepted(self):
        assert encode(desc(ColumnKind.INT64_SLICE), (1, 2)) == "{1,2}"

    def test_server_json_array(self):
        d = desc(ColumnKind.JSON_SLICE)
        assert decode(d, '{"{\\"a\\": 1}","[1, 2]"}') == [{"a": 1}, [1, 2]]

    def test_parse_positions(self):
        elements = parse_array('{ab,"c d",NULL}')
        assert [e.position for e in elements] == [1, 4, 10]
        assert [e.text for e in elements] == ["ab", "c d", None]

    def test_format_array_null(self):
        assert format_array([None, "x"]) == "{NULL,x}"


# ============================================================================
# ERRORS
# ============================================================================


class TestDecodeErrors:
    @pytest.mark.parametrize("kind,text", [
        (ColumnKind.INT64, "abc"),
        (ColumnKind.INT64, "1.5"),
        (ColumnKind.INT64, "9223372036854775808"),
        (ColumnKind.BOOL, "yes"),
        (ColumnKind.FLOAT64, "one"),
        (ColumnKind.TIMESTAMP, "not a date"),
        (ColumnKind.BYTEA, "dead"),
        (ColumnKind.BYTEA, "\\xzz"),
        (ColumnKind.JSON, "{not json"),
    ])
    def test_malformed_scalar(self, kind, text):
        with pytest.raises(DecodeError):
            decode(desc(kind), text)

    def test_element_position(self):
        with pytest.raises(DecodeError) as exc_info:
            decode(desc(ColumnKind.INT64_SLICE), "{1,x,3}")
        assert exc_info.value.position == 3

    @pytest.mark.parametrize("text", ["1,2", "{1,{2}}", '{"abc}', "{1,,2}", "{"])
    def test_malformed_array(self, text):
        with pytest.raises(DecodeError):
            decode(desc(ColumnKind.INT64_SLICE), text)

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            decode_scalar(ColumnKind.INT64, "x")


class TestEncodeErrors:
    @pytest.mark.parametrize("kind,value", [
        (ColumnKind.INT64, "1"),
        (ColumnKind.INT64, True),
        (ColumnKind.INT64, 2 ** 63),
        (ColumnKind.BOOL, 1),
        (ColumnKind.STRING, 5),
        (ColumnKind.TIMESTAMP, "2024-01-01"),
        (ColumnKind.BYTEA, "abc"),
        (ColumnKind.JSON, object()),
        (ColumnKind.INT64_SLICE, 5),
    ])
    def test_wrong_python_type(self, kind, value):
        with pytest.raises(InvalidTypeError):
            encode(desc(kind), value)

    def test_unknown_kind(self):
        with pytest.raises(InvalidTypeError):
            encode_scalar("uuid", "x")
        with pytest.raises(InvalidTypeError):
            decode_scalar("uuid", "x")


# ============================================================================
# DISPATCH COVERAGE
# ============================================================================


class TestKindCoverage:
    def test_scalar_and_slice_kinds(self):
        # Seven scalar kinds plus a slice variant of each
        assert len(SCALAR_KINDS) == 7
        assert [k.slice_of() for k in SCALAR_KINDS] == list(SLICE_KINDS)
        assert set(ENCODERS) == set(SCALAR_KINDS) == set(DECODERS)
        assert len(ColumnKind) == 14

    @pytest.mark.parametrize("kind", list(ColumnKind))
    def test_every_kind_dispatched(self, kind):
        assert kind.element_kind() in ENCODERS
        assert kind.element_kind() in DECODERS
        d = desc(kind, nullable=True)
        assert encode(d, None) == ""
        assert decode(d, "") == Nullable()
