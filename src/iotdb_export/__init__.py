"""
IoTDB Export

Converts sensor telemetry events into Apache IoTDB insertRecords batches and
submits them over a per-cycle session.

Usage:
    from iotdb_export import IoTDBSender, IoTDBConfig, PipelineContext

    sender = IoTDBSender(IoTDBConfig(host="127.0.0.1", prefix="bldg1"))
    ok, err = sender.send(PipelineContext(pipeline_id="telemetry"), event)
"""

from .config import IoTDBConfig
from .context import ExportContext, PipelineContext
from .errors import (
    AssemblyError,
    CoercionError,
    ConnectError,
    EmptyBatchError,
    ExportError,
    InsertFailure,
    SerializationError,
    SessionStateError,
    TypeMismatchError,
    UnsupportedTypeError,
    ValueParseError,
)
from .models import Batch, ColumnKind, Event, Precision, Reading
from .coercion import coerce_value
from .transform import (
    assemble_batch,
    decode_event,
    normalize_timestamp,
    resolve_path,
    transform_to_batch,
)
from .session import InsertSession, InsertStatus, IoTDBSessionClient, SessionObserver
from .sender import IoTDBSender

__version__ = "1.0.0"
__all__ = [
    "IoTDBSender",
    "IoTDBConfig",
    "ExportContext",
    "PipelineContext",
    "Event",
    "Reading",
    "Batch",
    "ColumnKind",
    "Precision",
    "coerce_value",
    "resolve_path",
    "normalize_timestamp",
    "assemble_batch",
    "decode_event",
    "transform_to_batch",
    "InsertSession",
    "InsertStatus",
    "IoTDBSessionClient",
    "SessionObserver",
    "ExportError",
    "TypeMismatchError",
    "AssemblyError",
    "CoercionError",
    "UnsupportedTypeError",
    "ValueParseError",
    "EmptyBatchError",
    "ConnectError",
    "InsertFailure",
    "SerializationError",
    "SessionStateError",
]
