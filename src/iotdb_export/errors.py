"""
Custom exceptions for the IoTDB export engine.

Every failure of an export cycle is one of these. None of them is retried
inside the engine; transient ones (connect/insert) are handed back to the
upstream pipeline as retry data instead.
"""

from __future__ import annotations

import re
from typing import Optional


class ExportError(Exception):
    """Base error for the IoTDB export engine."""

    pass


class TypeMismatchError(ExportError):
    """Pipeline input could not be decoded into an Event."""

    pass


class AssemblyError(ExportError):
    """An event could not be converted into an insertable batch."""

    pass


class CoercionError(AssemblyError):
    """A reading's raw value could not be coerced into a column kind."""

    pass


class UnsupportedTypeError(CoercionError):
    def __init__(self, value_type: str):
        super().__init__(f"unsupported data type {value_type!r}")
        self.value_type = value_type


class ValueParseError(CoercionError):
    def __init__(self, raw: str, kind: str):
        super().__init__(f"could not convert value {raw!r} to {kind}")
        self.raw = raw
        self.kind = kind


class EmptyBatchError(ExportError):
    """The event yielded zero insertable readings."""

    pass


class ConnectError(ExportError):
    """Opening the IoTDB session failed."""

    pass


class InsertFailure(ExportError):
    """insertRecords returned a non-OK status or the transport failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class SerializationError(ExportError):
    """The event could not be marshalled for size measurement or retry."""

    pass


class SessionStateError(ExportError):
    """A session operation was called in the wrong lifecycle state."""

    pass


# IoTDB clients raise "<code>: <message>" when a status is not successful
_STATUS_RE = re.compile(r"^\s*(-?\d+)\s*:\s*(.*)$", re.DOTALL)


def classify_insert_error(e: Exception) -> InsertFailure:
    if isinstance(e, InsertFailure):
        return e
    m = _STATUS_RE.match(str(e))
    if m:
        code = int(m.group(1))
        return InsertFailure(f"status code {code}: {m.group(2)}", status_code=code, detail=m.group(2))
    return InsertFailure(f"{type(e).__name__}: {e}", detail=str(e))
