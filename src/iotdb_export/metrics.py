"""
Export metrics, registered in the Prometheus global REGISTRY on import.
"""

from prometheus_client import Counter, Histogram

EXPORT_ERRORS_TOTAL = Counter(
    "iotdb_export_errors_total",
    "Export cycles that failed to connect to or insert into IoTDB",
    ["pipeline"],
)

EXPORT_PAYLOAD_BYTES = Histogram(
    "iotdb_export_payload_bytes",
    "Serialized size of successfully exported events in bytes",
    ["pipeline"],
    buckets=[64, 256, 1024, 4096, 16384, 65536, 262144, 1048576],
)


class MetricsRegistry:
    """Centralized access to the export metrics."""

    errors_total = EXPORT_ERRORS_TOTAL
    payload_bytes = EXPORT_PAYLOAD_BYTES

    def record_error(self, pipeline_id: str) -> None:
        self.errors_total.labels(pipeline=pipeline_id).inc()

    def record_size(self, pipeline_id: str, nbytes: int) -> None:
        self.payload_bytes.labels(pipeline=pipeline_id).observe(nbytes)


# Singleton instance
metrics_registry = MetricsRegistry()
