"""
Event -> Batch conversion.

Builds the five parallel insertRecords lists from an event: device path and
measurement per reading, timestamp in the configured precision, and the
coerced column kind/value.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Tuple

from pydantic import ValidationError

from .coercion import coerce_value
from .context import ExportContext
from .errors import EmptyBatchError, ExportError, TypeMismatchError
from .models import Batch, Event, Precision

ROOT = "root."
SEP = "."


def resolve_path(
    prefix: str, device_name: str, profile_name: str, resource_name: str
) -> Tuple[str, str]:
    """Derive (device path, measurement) for one reading.

    The part of resource_name before its last dot joins the device path as-is,
    without a separator: ("", "s1", "p1", "zone1.temp") gives
    ("root.s1.p1zone1", "temp").
    """
    device_path = ROOT
    if prefix:
        device_path += prefix
        if not device_path.endswith(SEP):
            device_path += SEP
    device_path += device_name + SEP + profile_name

    measurement = resource_name
    idx = resource_name.rfind(SEP)
    if idx > -1:
        device_path += resource_name[:idx]
        measurement = resource_name[idx + 1 :]

    return device_path.removesuffix(SEP), measurement


def normalize_timestamp(nanos: int, precision: Precision) -> int:
    """Convert ns since epoch to the precision unit, truncating toward zero."""
    q = abs(nanos) // precision.divisor
    return q if nanos >= 0 else -q


def decode_event(data: Any) -> Event:
    """Turn pipeline input into an Event.

    Accepts an Event, a mapping, or JSON bytes/str describing one.
    """
    if isinstance(data, Event):
        return data
    try:
        if isinstance(data, Mapping):
            return Event.model_validate(data)
        if isinstance(data, (bytes, bytearray, str)):
            return Event.model_validate_json(data)
    except ValidationError as e:
        raise TypeMismatchError(
            f"input does not describe an Event ({e.error_count()} validation errors)"
        ) from e
    raise TypeMismatchError(f"expected Event, got {type(data).__name__}")


def assemble_batch(event: Event, prefix: str, precision: Precision) -> Batch:
    """Fold an event's readings into a Batch, preserving reading order.

    Raises:
        CoercionError: a reading's value could not be coerced; no partial
            batch is returned
        EmptyBatchError: the event has no readings
    """
    batch = Batch()
    for reading in event.readings:
        origin = reading.origin if reading.origin else event.origin
        ts = normalize_timestamp(origin, precision)
        device_id, measurement = resolve_path(
            prefix, reading.device_name, reading.profile_name, reading.resource_name
        )
        kind, value = coerce_value(reading.value_type, reading.value)
        batch.append(device_id, measurement, kind, value, ts)

    if not batch:
        raise EmptyBatchError("no data received: event yielded zero readings")
    return batch


def transform_to_batch(
    ctx: ExportContext, data: Any, prefix: str = "", precision: Precision = Precision.NS
) -> Tuple[bool, Any]:
    """Pipeline stage: convert input into a Batch without inserting it.

    Returns (True, batch) or (False, error), matching IoTDBSender.send.
    """
    ctx.logger.debug("Transforming to IoTDB format")
    if data is None:
        return False, TypeMismatchError("no data received")
    try:
        batch = assemble_batch(decode_event(data), prefix, precision)
    except ExportError as e:
        return False, e
    ctx.logger.debug(f"IoTDB payload: {json.dumps(batch.to_dict(), default=str)}")
    return True, batch
