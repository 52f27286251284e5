"""
Unit tests for value coercion.
"""

import math

import pytest

from iotdb_export import ColumnKind, UnsupportedTypeError, ValueParseError, coerce_value


class TestBool:
    @pytest.mark.parametrize("raw", ["true", "True", "TRUE", "t", "T", "1"])
    def test_true_literals(self, raw):
        assert coerce_value("Bool", raw) == (ColumnKind.BOOLEAN, True)

    @pytest.mark.parametrize("raw", ["false", "False", "FALSE", "f", "F", "0"])
    def test_false_literals(self, raw):
        assert coerce_value("Bool", raw) == (ColumnKind.BOOLEAN, False)

    def test_bad_literal(self):
        with pytest.raises(ValueParseError) as exc:
            coerce_value("Bool", "notabool")
        assert exc.value.raw == "notabool"
        assert exc.value.kind == "bool"

    def test_tag_is_exact(self):
        with pytest.raises(UnsupportedTypeError):
            coerce_value("bool", "true")


def test_text_passthrough():
    assert coerce_value("Text", " hello world ") == (ColumnKind.TEXT, " hello world ")


class TestIntegers:
    @pytest.mark.parametrize("tag", ["Int8", "Int16", "Int32", "Uint8", "Uint16", "Uint32"])
    def test_32_bit_tags(self, tag):
        kind, value = coerce_value(tag, "123")
        assert kind is ColumnKind.INT32
        assert value == 123

    @pytest.mark.parametrize("tag", ["Int64", "Uint64"])
    def test_64_bit_tags(self, tag):
        assert coerce_value(tag, "123") == (ColumnKind.INT64, 123)

    def test_signs(self):
        assert coerce_value("Int32", "-42") == (ColumnKind.INT32, -42)
        assert coerce_value("Int32", "+42") == (ColumnKind.INT32, 42)

    def test_int32_range(self):
        assert coerce_value("Int32", "2147483647")[1] == 2147483647
        assert coerce_value("Int32", "-2147483648")[1] == -2147483648
        with pytest.raises(ValueParseError):
            coerce_value("Int32", "2147483648")

    def test_uint32_parsed_as_signed(self):
        with pytest.raises(ValueParseError):
            coerce_value("Uint32", "4294967295")

    def test_int64_range(self):
        assert coerce_value("Int64", "9223372036854775807")[1] == 9223372036854775807
        with pytest.raises(ValueParseError):
            coerce_value("Int64", "9223372036854775808")

    @pytest.mark.parametrize("raw", ["", "1.5", "abc", " 1", "1_000", "0x10"])
    def test_malformed(self, raw):
        with pytest.raises(ValueParseError) as exc:
            coerce_value("Int16", raw)
        assert exc.value.kind == "int32"


class TestFloats:
    def test_float32_exact(self):
        assert coerce_value("Float32", "21.5") == (ColumnKind.FLOAT, 21.5)

    def test_float32_rounds_to_single_precision(self):
        kind, value = coerce_value("Float32", "3.14")
        assert kind is ColumnKind.FLOAT
        assert value != 3.14
        assert value == pytest.approx(3.14, rel=1e-6)

    @pytest.mark.parametrize("raw", ["1e39", "-1e39", "3.5e38"])
    def test_float32_overflow(self, raw):
        with pytest.raises(ValueParseError) as exc:
            coerce_value("Float32", raw)
        assert exc.value.kind == "float32"

    def test_float32_max_is_in_range(self):
        assert coerce_value("Float32", "3.4028234e38")[1] == pytest.approx(3.4028234e38)

    def test_float64_overflow(self):
        with pytest.raises(ValueParseError):
            coerce_value("Float64", "1e400")

    @pytest.mark.parametrize("raw,expected", [(".5", 0.5), ("5.", 5.0), ("-2.5E3", -2500.0), ("+1e-2", 0.01)])
    def test_float64_literal_forms(self, raw, expected):
        assert coerce_value("Float64", raw) == (ColumnKind.DOUBLE, expected)

    @pytest.mark.parametrize("tag", ["Float32", "Float64"])
    def test_special_values(self, tag):
        assert coerce_value(tag, "inf")[1] == math.inf
        assert coerce_value(tag, "-Infinity")[1] == -math.inf
        assert math.isnan(coerce_value(tag, "NaN")[1])

    def test_hex_literal(self):
        assert coerce_value("Float64", "0x1p-2") == (ColumnKind.DOUBLE, 0.25)
        with pytest.raises(ValueParseError):
            coerce_value("Float64", "0x1.8")

    def test_float64(self):
        assert coerce_value("Float64", "3.14") == (ColumnKind.DOUBLE, 3.14)

    def test_float64_large(self):
        assert coerce_value("Float64", "1e39") == (ColumnKind.DOUBLE, 1e39)

    @pytest.mark.parametrize("raw", ["warm", "", " 3.14", "3.14\n", "1_000.5", "1e", "."])
    def test_malformed(self, raw):
        with pytest.raises(ValueParseError) as exc:
            coerce_value("Float64", raw)
        assert exc.value.kind == "float64"

    def test_substring_match_reaches_array_tags(self):
        with pytest.raises(ValueParseError):
            coerce_value("Float32Array", "[1.0, 2.0]")


@pytest.mark.parametrize("tag", ["Binary", "Object", "", "Double"])
def test_unsupported(tag):
    with pytest.raises(UnsupportedTypeError) as exc:
        coerce_value(tag, "1")
    assert exc.value.value_type == tag
