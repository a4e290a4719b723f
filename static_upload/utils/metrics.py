"""
Prometheus metrics for upload runs.

A deploy is a short-lived process, so metrics are collected in a per-run
registry and written once at the end in the Prometheus text format (for a
node-exporter textfile collector or a CI artifact) instead of being served.

Metrics Provided:
    - static_upload_files_total{outcome}: files uploaded / skipped / planned
    - static_upload_bytes_total: bytes transferred
    - static_upload_errors_total{operation,error_type}: storage API errors
    - static_upload_duration_seconds: per-object upload latency

Usage:
    >>> metrics = UploadMetrics()
    >>> with metrics.track_upload():
    ...     storage.upload_object(...)
    >>> metrics.record_outcome("uploaded", bytes_uploaded=1024)
    >>> metrics.write("metrics/static_upload.prom")
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from prometheus_client import CollectorRegistry, Counter, Histogram, write_to_textfile

from static_upload.utils.logging import get_logger

logger = get_logger(__name__)


class UploadMetrics:
    """Counters and timings for one upload run."""

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        self.files = Counter(
            name="static_upload_files_total",
            documentation="Files processed by outcome",
            labelnames=["outcome"],  # uploaded, skipped, planned
            registry=self.registry,
        )

        self.bytes_uploaded = Counter(
            name="static_upload_bytes_total",
            documentation="Total bytes uploaded to the bucket",
            registry=self.registry,
        )

        self.errors = Counter(
            name="static_upload_errors_total",
            documentation="Storage API errors",
            labelnames=["operation", "error_type"],  # operation: exists/upload
            registry=self.registry,
        )

        self.upload_duration = Histogram(
            name="static_upload_duration_seconds",
            documentation="Time spent uploading one object",
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
            registry=self.registry,
        )

    @contextmanager
    def track_upload(self) -> Iterator[None]:
        """Time one object upload."""
        with self.upload_duration.time():
            yield

    def record_outcome(self, outcome: str, bytes_uploaded: int = 0) -> None:
        self.files.labels(outcome=outcome).inc()
        if bytes_uploaded:
            self.bytes_uploaded.inc(bytes_uploaded)

    def record_error(self, operation: str, error_type: str) -> None:
        self.errors.labels(operation=operation, error_type=error_type).inc()

    def write(self, path: Union[str, Path]) -> None:
        """Write all metrics of this run in the Prometheus text format."""
        write_to_textfile(str(path), self.registry)
        logger.info(f"Wrote metrics to {path}")
