"""
Value coercion: (value type tag, raw string) -> (ColumnKind, typed value).

The value type vocabulary is fixed upstream (Bool, Text, Int8..Int64,
Uint8..Uint64, Float32, Float64, ...). Dispatch is an ordered match table on
exact names and substrings; the first matching row wins.
"""

from __future__ import annotations

import math
import re
import struct
from typing import Any, Callable, Tuple

from .errors import UnsupportedTypeError, ValueParseError
from .models import ColumnKind

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_FLOAT_SPECIAL_RE = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)
_HEX_FLOAT_RE = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+")


def _parse_bool(raw: str) -> bool:
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueParseError(raw, "bool")


def _parse_int(raw: str, bits: int) -> int:
    if not _INT_RE.fullmatch(raw):
        raise ValueParseError(raw, f"int{bits}")
    v = int(raw, 10)
    bound = 1 << (bits - 1)
    if not -bound <= v < bound:
        raise ValueParseError(raw, f"int{bits}")
    return v


def _parse_float(raw: str, kind: str) -> float:
    if _FLOAT_SPECIAL_RE.fullmatch(raw):
        return float(raw)
    if _HEX_FLOAT_RE.fullmatch(raw):
        try:
            return float.fromhex(raw)
        except OverflowError:
            raise ValueParseError(raw, kind) from None
    if not _FLOAT_RE.fullmatch(raw):
        raise ValueParseError(raw, kind)
    v = float(raw)
    if math.isinf(v):
        raise ValueParseError(raw, kind)
    return v


def _parse_float32(raw: str) -> float:
    v = _parse_float(raw, "float32")
    if not math.isfinite(v):
        return v
    # round-trip through a C float for 32-bit precision; out-of-range values
    # may come back as inf rather than raise
    try:
        r = struct.unpack("f", struct.pack("f", v))[0]
    except OverflowError:
        raise ValueParseError(raw, "float32") from None
    if math.isinf(r):
        raise ValueParseError(raw, "float32")
    return r


def _parse_float64(raw: str) -> float:
    return _parse_float(raw, "float64")


def _is_int(tag: str) -> bool:
    return "Int" in tag or "Uint" in tag


Matcher = Callable[[str], bool]
Parser = Callable[[str], Any]

DISPATCH: Tuple[Tuple[Matcher, ColumnKind, Parser], ...] = (
    (lambda t: t == "Bool", ColumnKind.BOOLEAN, _parse_bool),
    (lambda t: t == "Text", ColumnKind.TEXT, str),
    (lambda t: _is_int(t) and "64" not in t, ColumnKind.INT32, lambda r: _parse_int(r, 32)),
    (lambda t: _is_int(t) and "64" in t, ColumnKind.INT64, lambda r: _parse_int(r, 64)),
    (lambda t: "Float" in t and "64" not in t, ColumnKind.FLOAT, _parse_float32),
    (lambda t: "Float" in t and "64" in t, ColumnKind.DOUBLE, _parse_float64),
)


def coerce_value(value_type: str, raw: str) -> Tuple[ColumnKind, Any]:
    """Coerce a reading's raw string value into its IoTDB column kind.

    Raises:
        UnsupportedTypeError: no row of the dispatch table matches value_type
        ValueParseError: the raw value is not a valid literal for the kind
    """
    for matches, kind, parse in DISPATCH:
        if matches(value_type):
            return kind, parse(raw)
    raise UnsupportedTypeError(value_type)
