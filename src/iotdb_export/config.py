"""
IoTDB connection and export configuration.

Instances are immutable snapshots: the sender swaps whole objects on config
change rather than mutating one in place.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from .models import Precision


class IoTDBConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str
    port: int = Field(6667, gt=0, le=65535)
    username: str = "root"
    password: SecretStr = SecretStr("root")
    fetch_size: int = Field(5000, gt=0)
    time_zone: str = "UTC+00:00"
    connect_retry_max: int = Field(3, gt=0)
    rpc_compression: bool = False
    connection_timeout: int = Field(30_000, gt=0)  # ms
    prefix: str = ""
    precision: Precision = Precision.MS

    @field_validator("host", "username", "time_zone")
    @classmethod
    def _not_blank(cls, v: str, info):
        if not v.strip():
            raise ValueError(f"configuration missing value for {info.field_name}")
        return v

    @field_validator("password")
    @classmethod
    def _password_not_blank(cls, v: SecretStr):
        if not v.get_secret_value().strip():
            raise ValueError("configuration missing value for password")
        return v

    @field_validator("precision", mode="before")
    @classmethod
    def _known_precision(cls, v):
        if isinstance(v, str) and v not in {p.value for p in Precision}:
            raise ValueError("configuration incorrect value for precision, supports s, ms, us and ns")
        return v
