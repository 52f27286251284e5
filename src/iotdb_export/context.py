"""
Pipeline context handed to every export cycle by the upstream pipeline.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from loguru import logger as _root_logger


class ExportContext(Protocol):
    """What an export cycle needs from its caller."""

    @property
    def logger(self) -> Any: ...

    @property
    def pipeline_id(self) -> str: ...

    @property
    def correlation_id(self) -> str: ...

    def set_retry_data(self, payload: bytes) -> None: ...


@dataclass
class PipelineContext:
    """Plain ExportContext for one inbound event.

    Retry data handed back by the sender is kept on `retry_data` for the
    caller to redeliver or park.
    """

    pipeline_id: str = "default-pipeline"
    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    logger: Any = None
    retry_data: Optional[bytes] = None

    def __post_init__(self) -> None:
        if self.logger is None:
            self.logger = _root_logger.bind(
                pipeline_id=self.pipeline_id, correlation_id=self.correlation_id
            )

    def set_retry_data(self, payload: bytes) -> None:
        self.retry_data = payload
