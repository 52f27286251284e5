"""
Data models for the IoTDB export engine.

Events and readings arrive as EdgeX-style JSON (camelCase keys); the models
accept either the aliases or the snake_case attribute names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Precision(str, Enum):
    """Time resolution timestamps are normalized to before insertion."""

    S = "s"
    MS = "ms"
    US = "us"
    NS = "ns"

    @property
    def divisor(self) -> int:
        return _DIVISORS[self]


_DIVISORS = {
    Precision.S: 1_000_000_000,
    Precision.MS: 1_000_000,
    Precision.US: 1_000,
    Precision.NS: 1,
}


class ColumnKind(str, Enum):
    """IoTDB column data types (names follow TSDataType)."""

    BOOLEAN = "BOOLEAN"
    INT32 = "INT32"
    INT64 = "INT64"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    TEXT = "TEXT"


class Reading(BaseModel):
    """One scalar telemetry sample."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    device_name: str = Field(alias="deviceName")
    profile_name: str = Field(alias="profileName")
    resource_name: str = Field(alias="resourceName")
    value_type: str = Field(alias="valueType")
    value: str = ""
    id: Optional[str] = None
    origin: Optional[int] = None  # ns since epoch, overrides the event origin
    units: Optional[str] = None


class Event(BaseModel):
    """One delivery unit from the upstream pipeline."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    origin: int  # ns since epoch
    readings: List[Reading] = Field(default_factory=list)
    id: Optional[str] = None
    device_name: Optional[str] = Field(default=None, alias="deviceName")
    profile_name: Optional[str] = Field(default=None, alias="profileName")
    source_name: Optional[str] = Field(default=None, alias="sourceName")
    tags: Optional[Dict[str, Any]] = None


@dataclass
class Batch:
    """Columnar payload for one insertRecords call.

    The five lists are parallel: index i across all of them describes one
    reading, in event order.
    """

    device_ids: List[str] = field(default_factory=list)
    measurements: List[List[str]] = field(default_factory=list)
    data_types: List[List[ColumnKind]] = field(default_factory=list)
    values: List[List[Any]] = field(default_factory=list)
    timestamps: List[int] = field(default_factory=list)

    def append(
        self, device_id: str, measurement: str, kind: ColumnKind, value: Any, timestamp: int
    ) -> None:
        self.device_ids.append(device_id)
        self.measurements.append([measurement])
        self.data_types.append([kind])
        self.values.append([value])
        self.timestamps.append(timestamp)

    def __len__(self) -> int:
        return len(self.device_ids)

    def to_dict(self) -> dict:
        return {
            "device_ids": list(self.device_ids),
            "measurements": [list(m) for m in self.measurements],
            "data_types": [[k.value for k in kinds] for kinds in self.data_types],
            "values": [list(v) for v in self.values],
            "timestamps": list(self.timestamps),
        }
