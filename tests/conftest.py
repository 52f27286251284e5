"""
Pytest configuration and fixtures for iotdb-export.

Provides IoTDB config, event builders, and a fake session client so no test
needs a running IoTDB server.
"""

import uuid

import pytest

from iotdb_export import Event, IoTDBConfig, PipelineContext, Precision
from iotdb_export.session import SUCCESS_STATUS, InsertStatus


@pytest.fixture
def iotdb_config():
    """Valid IoTDB configuration for testing."""
    return IoTDBConfig(
        host="127.0.0.1",
        port=6667,
        username="root",
        password="root",
        fetch_size=1024,
        time_zone="UTC+00:00",
        connect_retry_max=3,
        rpc_compression=True,
        connection_timeout=2500,
        prefix="",
        precision=Precision.S,
    )


@pytest.fixture
def pipeline_ctx():
    """Context with a unique pipeline id so metric samples don't collide."""
    return PipelineContext(pipeline_id=f"test-{uuid.uuid4().hex[:8]}")


def _make_reading(resource="temp", value_type="Float32", value="21.5", device="s1", profile="p1", **extra):
    return {
        "deviceName": device,
        "profileName": profile,
        "resourceName": resource,
        "valueType": value_type,
        "value": value,
        **extra,
    }


@pytest.fixture
def make_reading():
    """Builder for EdgeX-style reading dicts (camelCase keys)."""
    return _make_reading


@pytest.fixture
def sample_event():
    """Single Float32 reading at 2023-11-14T22:13:20Z."""
    return Event.model_validate(
        {"origin": 1_700_000_000_000_000_000, "readings": [_make_reading()]}
    )


class FakeClient:
    """Records calls; behavior driven by the owning FakeClientFactory."""

    def __init__(self, factory, params):
        self.factory = factory
        self.params = params
        self.open_args = None
        self.inserted = []
        self.close_calls = 0

    def open(self, enable_rpc_compression, timeout_ms):
        self.open_args = (enable_rpc_compression, timeout_ms)
        if self.factory.open_error is not None:
            raise self.factory.open_error

    def insert_records(self, device_ids, measurements, data_types, values, timestamps):
        self.inserted.append(
            {
                "device_ids": device_ids,
                "measurements": measurements,
                "data_types": data_types,
                "values": values,
                "timestamps": timestamps,
            }
        )
        if self.factory.insert_error is not None:
            raise self.factory.insert_error
        return self.factory.insert_status

    def close(self):
        self.close_calls += 1
        if self.factory.close_error is not None:
            raise self.factory.close_error


class FakeClientFactory:
    def __init__(self):
        self.clients = []
        self.open_error = None
        self.insert_error = None
        self.insert_status = InsertStatus(SUCCESS_STATUS)
        self.close_error = None

    def __call__(self, params):
        client = FakeClient(self, params)
        self.clients.append(client)
        return client

    @property
    def client(self):
        return self.clients[-1]


@pytest.fixture
def client_factory():
    """Fake SessionClient factory; set *_error / insert_status to steer it."""
    return FakeClientFactory()
