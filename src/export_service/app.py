from __future__ import annotations

import gzip
import sys
from dataclasses import dataclass
from typing import Any, BinaryIO, Iterable, Iterator, Optional

from loguru import logger

from iotdb_export import IoTDBConfig, IoTDBSender, PipelineContext
from iotdb_export.session import ClientFactory, IoTDBSessionClient

from .settings import ServiceSettings


@dataclass
class ExportSummary:
    sent: int = 0
    failed: int = 0
    retry_payloads: int = 0


def iter_ndjson(path: str) -> Iterator[str]:
    """Yield non-blank lines from a file, '-' for stdin; .gz is decompressed."""
    if path == "-":
        for line in sys.stdin:
            if line.strip():
                yield line.strip()
        return
    opener = gzip.open if path.endswith(".gz") else open
    with opener(path, "rt", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                yield line.strip()


class ExportApp:
    """Wires settings to one IoTDBSender and drives events through it."""

    def __init__(self, settings: ServiceSettings, *, client_factory: ClientFactory = IoTDBSessionClient):
        self.settings = settings
        self.sender = IoTDBSender(
            settings.iotdb,
            persist_on_error=settings.persist_on_error,
            client_factory=client_factory,
        )

    def process_config_updates(self, raw: Any) -> bool:
        """Apply a changed IoTDB config. Returns True if the sender was updated."""
        if not isinstance(raw, IoTDBConfig):
            logger.error(
                "unable to process config updates: can not cast raw config to type 'IoTDBConfig'"
            )
            return False

        if raw == self.sender.config:
            logger.info("No changes detected")
            return False

        self.sender.update_config(raw)
        logger.info(f"IoTDB config updated for pipeline '{self.settings.pipeline_id}'")
        return True

    def export(self, events: Iterable[Any], retry_out: Optional[BinaryIO] = None) -> ExportSummary:
        """Send each event; park retry payloads of failed ones in retry_out as NDJSON."""
        summary = ExportSummary()
        for data in events:
            ctx = PipelineContext(pipeline_id=self.settings.pipeline_id)
            ok, result = self.sender.send(ctx, data)
            if ok:
                summary.sent += 1
                continue

            summary.failed += 1
            ctx.logger.error(f"Export failed: {result}")
            if ctx.retry_data is not None and retry_out is not None:
                retry_out.write(ctx.retry_data + b"\n")
                summary.retry_payloads += 1
        return summary
