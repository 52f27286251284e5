"""
IoTDB export sink.

IoTDBSender.send is the terminal pipeline function: one call per inbound
event. Each call decodes the event, assembles the batch, opens its own
InsertSession, inserts, records metrics and closes the session. Failures are
returned to the pipeline as (False, error); connect and insert failures also
hand the event back as retry data when persist_on_error is set.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Optional, Tuple

from .config import IoTDBConfig
from .context import ExportContext
from .errors import (
    AssemblyError,
    ConnectError,
    EmptyBatchError,
    ExportError,
    InsertFailure,
    SerializationError,
    TypeMismatchError,
)
from .metrics import MetricsRegistry, metrics_registry
from .models import Event
from .session import (
    ClientFactory,
    ConnectionParams,
    InsertSession,
    IoTDBSessionClient,
    LoggingSessionObserver,
    SessionObserver,
)
from .transform import assemble_batch, decode_event


class IoTDBSender:
    def __init__(
        self,
        config: IoTDBConfig,
        persist_on_error: bool = True,
        *,
        client_factory: ClientFactory = IoTDBSessionClient,
        observer: Optional[SessionObserver] = None,
        metrics: Optional[MetricsRegistry] = None,
    ):
        self._config = config
        self.persist_on_error = persist_on_error
        self._client_factory = client_factory
        self._observer = observer or LoggingSessionObserver()
        self.metrics = metrics or metrics_registry
        self._lock = threading.Lock()

    @property
    def config(self) -> IoTDBConfig:
        with self._lock:
            return self._config

    def update_config(self, config: IoTDBConfig) -> None:
        """Swap the config snapshot; cycles already running keep the old one."""
        with self._lock:
            self._config = config

    # ---------- pipeline function

    def send(self, ctx: ExportContext, data: Any) -> Tuple[bool, Any]:
        log = ctx.logger

        try:
            event = decode_event(data)
        except TypeMismatchError as e:
            return False, TypeMismatchError(f"IoTDBSend: {e}")

        config = self.config
        log.debug(f"IoTDB config: {config!r}")
        log.debug(f"Event payload: {event!r}")

        try:
            batch = assemble_batch(event, config.prefix, config.precision)
        except (AssemblyError, EmptyBatchError) as e:
            return False, e

        log.debug(f"IoTDB payload: {batch.to_dict()}")

        try:
            session = self._new_session(ctx, config)
        except ConnectError as e:
            return self._transient_failure(ctx, data, e)

        try:
            try:
                session.open()
                session.insert_batch(batch)
            except (ConnectError, InsertFailure) as e:
                return self._transient_failure(ctx, data, e)

            try:
                nbytes = len(self._serialize(data))
            except SerializationError as e:
                return False, e
            self.metrics.record_size(ctx.pipeline_id, nbytes)

            log.debug(f"Sent {nbytes} bytes of data to IoTDB in pipeline '{ctx.pipeline_id}'")
            log.trace(
                f"Data exported to IoTDB in pipeline '{ctx.pipeline_id}': "
                f"correlation-id={ctx.correlation_id}"
            )
            return True, None
        finally:
            session.close()

    __call__ = send

    # ---------- internals

    def _new_session(self, ctx: ExportContext, config: IoTDBConfig) -> InsertSession:
        with self._lock:
            session = InsertSession(
                ConnectionParams.from_config(config),
                client_factory=self._client_factory,
                observer=self._observer,
                log=ctx.logger,
                pipeline_id=ctx.pipeline_id,
            )
            session.create()
        return session

    def _transient_failure(
        self, ctx: ExportContext, data: Any, error: ExportError
    ) -> Tuple[bool, ExportError]:
        self.metrics.record_error(ctx.pipeline_id)
        if self.persist_on_error:
            try:
                ctx.set_retry_data(self._serialize(data))
            except SerializationError as e:
                return False, SerializationError(f"{e}; retry data not stored after: {error}")
        return False, error

    @staticmethod
    def _serialize(data: Any) -> bytes:
        """The inbound payload as JSON bytes; raw JSON input is kept verbatim."""
        try:
            if isinstance(data, (bytes, bytearray)):
                return bytes(data)
            if isinstance(data, str):
                return data.encode()
            if isinstance(data, Event):
                return data.model_dump_json(by_alias=True, exclude_none=True).encode()
            return json.dumps(dict(data)).encode()
        except Exception as e:
            raise SerializationError(f"could not serialize event: {e}") from e
