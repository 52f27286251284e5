"""
IoTDB insert session.

One InsertSession per export cycle: create -> open -> insert_batch -> close.
Sessions are never pooled or shared between cycles, so no locking happens
here; the sender serializes session creation against config swaps.

The network side sits behind the SessionClient protocol. IoTDBSessionClient
adapts the apache-iotdb Python client to it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol

from loguru import logger
from pydantic import SecretStr

from .config import IoTDBConfig
from .errors import ConnectError, InsertFailure, SessionStateError, classify_insert_error
from .models import Batch, ColumnKind

SUCCESS_STATUS = 200  # TSStatusCode.SUCCESS_STATUS


@dataclass(frozen=True)
class ConnectionParams:
    host: str
    port: int
    username: str
    password: SecretStr
    fetch_size: int
    time_zone: str
    rpc_compression: bool
    connection_timeout: int  # ms
    connect_retry_max: int

    @classmethod
    def from_config(cls, config: IoTDBConfig) -> "ConnectionParams":
        return cls(
            host=config.host,
            port=config.port,
            username=config.username,
            password=config.password,
            fetch_size=config.fetch_size,
            time_zone=config.time_zone,
            rpc_compression=config.rpc_compression,
            connection_timeout=config.connection_timeout,
            connect_retry_max=config.connect_retry_max,
        )


@dataclass(frozen=True)
class InsertStatus:
    code: int
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.code == SUCCESS_STATUS


class SessionClient(Protocol):
    """Time-series database client contract used by InsertSession."""

    def open(self, enable_rpc_compression: bool, timeout_ms: int) -> None: ...

    def insert_records(
        self,
        device_ids: List[str],
        measurements: List[List[str]],
        data_types: List[List[ColumnKind]],
        values: List[List[Any]],
        timestamps: List[int],
    ) -> InsertStatus: ...

    def close(self) -> None: ...


ClientFactory = Callable[[ConnectionParams], SessionClient]


class IoTDBSessionClient:
    """SessionClient backed by iotdb.Session.Session (apache-iotdb)."""

    def __init__(self, params: ConnectionParams):
        self._params = params
        self._session = None

    def open(self, enable_rpc_compression: bool, timeout_ms: int) -> None:
        from iotdb.Session import Session

        p = self._params
        self._session = Session(
            p.host,
            p.port,
            user=p.username,
            password=p.password.get_secret_value(),
            fetch_size=p.fetch_size,
            zone_id=p.time_zone,
            connection_timeout_in_ms=timeout_ms,
        )
        self._session.open(enable_rpc_compression)

    def insert_records(self, device_ids, measurements, data_types, values, timestamps):
        from iotdb.utils.IoTDBConstants import TSDataType

        types = [[TSDataType[k.value] for k in kinds] for kinds in data_types]
        try:
            result = self._session.insert_records(
                device_ids, timestamps, measurements, types, values
            )
        except Exception as e:
            # non-success statuses surface as "<code>: <message>"; anything
            # else is a transport problem and propagates
            failure = classify_insert_error(e)
            if failure.status_code is None:
                raise
            return InsertStatus(failure.status_code, failure.detail)
        # older clients return -1 instead of raising
        if result is not None and result < 0:
            return InsertStatus(result, "insert_records reported failure")
        return InsertStatus(SUCCESS_STATUS)

    def close(self) -> None:
        if self._session is not None:
            self._session.close()


class SessionObserver:
    """Connection lifecycle hooks. Defaults do nothing."""

    def on_connected(self, session: "InsertSession") -> None:
        pass

    def on_connection_lost(self, session: "InsertSession", error: Exception) -> None:
        pass

    def on_reconnecting(self, session: "InsertSession") -> None:
        pass


class LoggingSessionObserver(SessionObserver):
    def on_connected(self, session: "InsertSession") -> None:
        session.log.trace(f"IoTDB for export connected ({session.params.host}:{session.params.port})")

    def on_connection_lost(self, session: "InsertSession", error: Exception) -> None:
        session.log.trace(f"IoTDB for export lost connection: {error}")

    def on_reconnecting(self, session: "InsertSession") -> None:
        session.log.trace("IoTDB for export re-connecting")


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CREATED = "created"
    OPEN = "open"
    CLOSED = "closed"


class InsertSession:
    def __init__(
        self,
        params: ConnectionParams,
        *,
        client_factory: ClientFactory = IoTDBSessionClient,
        observer: Optional[SessionObserver] = None,
        log: Any = None,
        pipeline_id: str = "",
    ):
        self.params = params
        self._factory = client_factory
        self._observer = observer or SessionObserver()
        self._log = log or logger
        self._pipeline_id = pipeline_id
        self._client: Optional[SessionClient] = None
        self.state = SessionState.UNINITIALIZED

    @property
    def log(self) -> Any:
        """Logger of the owning cycle (bound with its pipeline ids)."""
        return self._log

    # ---------- lifecycle

    def create(self) -> None:
        if self.state is not SessionState.UNINITIALIZED:
            raise SessionStateError(f"cannot create session in state {self.state.value}")
        self._log.info("Initializing IoTDB session")
        try:
            self._client = self._factory(self.params)
        except Exception as e:
            raise ConnectError(
                f"in pipeline '{self._pipeline_id}', could not create IoTDB session: {e}"
            ) from e
        self.state = SessionState.CREATED

    def open(self) -> None:
        if self.state is not SessionState.CREATED:
            raise SessionStateError(f"cannot open session in state {self.state.value}")
        self._log.info("Connecting to IoTDB server for export")
        try:
            self._client.open(self.params.rpc_compression, self.params.connection_timeout)
        except Exception as e:
            raise ConnectError(
                f"in pipeline '{self._pipeline_id}', could not connect to IoTDB for export: {e}"
            ) from e
        self.state = SessionState.OPEN
        self._notify("on_connected", self)
        self._log.info(f"Connected to IoTDB server for export in pipeline '{self._pipeline_id}'")

    def insert_batch(self, batch: Batch) -> InsertStatus:
        if self.state is not SessionState.OPEN:
            raise SessionStateError(f"cannot insert in state {self.state.value}")
        try:
            status = self._client.insert_records(
                batch.device_ids,
                batch.measurements,
                batch.data_types,
                batch.values,
                batch.timestamps,
            )
        except Exception as e:
            self._notify("on_connection_lost", self, e)
            failure = classify_insert_error(e)
            raise InsertFailure(
                f"in pipeline '{self._pipeline_id}', insert failed: {failure}",
                status_code=failure.status_code,
                detail=failure.detail,
            ) from e
        if not status.ok:
            raise InsertFailure(
                f"in pipeline '{self._pipeline_id}', insert failed with status code "
                f"{status.code}: {status.message}",
                status_code=status.code,
                detail=status.message,
            )
        self._log.debug(f"IoTDB insert status code {status.code}")
        return status

    def close(self) -> None:
        """Release the client. Safe in any state and safe to repeat."""
        if self.state is SessionState.CLOSED:
            return
        client, self._client = self._client, None
        self.state = SessionState.CLOSED
        if client is None:
            return
        try:
            client.close()
        except Exception as exc:
            self._log.warning(f"IoTDB session close failed: {type(exc).__name__}: {exc}")

    def __enter__(self) -> "InsertSession":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ---------- internals

    def _notify(self, hook: str, *args) -> None:
        try:
            getattr(self._observer, hook)(*args)
        except Exception as exc:
            self._log.debug(f"Session observer error (ignored): {type(exc).__name__}: {exc}")

