"""
Versioned static asset upload.

Drives one upload run: every input file is opened, fingerprinted when its
extension is versionable, mapped to an object key and public URL, checked
against the bucket and uploaded only if the key is not there yet. Versioned
keys are content-addressed, so an existing key means this exact content is
already published and re-running the tool on unchanged files transfers
nothing.

The first failure aborts the run and no manifest is produced.

Example usage:
    >>> from static_upload.uploader import UploadConfig, version_and_upload_files
    >>> config = UploadConfig(bucket_name="static.buffer.com", directory="v1")
    >>> batch = version_and_upload_files(["app.js", "logo.png"], config, storage)
    >>> batch.manifest
    {'app.js': 'https://static.buffer.com/v1/app.<md5>.js',
     'logo.png': 'https://static.buffer.com/v1/logo.png'}
"""

import contextvars
import os
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Callable, Dict, List, Optional, Protocol, Sequence

from static_upload.uploader.urls import get_file_url, join_object_key
from static_upload.utils.config import DEFAULT_BUCKET
from static_upload.utils.errors import (
    ConfigurationError,
    ExistenceCheckError,
    InputError,
    TransferError,
)
from static_upload.utils.logging import get_logger, log_function_call
from static_upload.utils.metrics import UploadMetrics
from static_upload.versioning import compute_fingerprint, get_versioned_filename, is_versionable

# Module logger
logger = get_logger(__name__)


class ObjectStorage(Protocol):
    """The remote operations an upload run needs (see ``GCSStorage``)."""

    def object_exists(self, bucket: str, key: str) -> bool:
        ...

    def upload_object(self, file_obj: BinaryIO, bucket: str, key: str) -> None:
        ...


class FileOutcome(str, Enum):
    """What happened to one file."""

    UPLOADED = "uploaded"
    SKIPPED = "skipped"


@dataclass
class UploadConfig:
    """
    Settings for one upload run.

    Attributes:
        bucket_name: Target bucket
        directory: Remote directory prefix for every object key
        default_bucket: Bucket served from its own custom domain
        dry_run: Check and report only, never upload
        concurrency: Number of files processed at once (1 = sequential)
    """

    bucket_name: str = DEFAULT_BUCKET
    directory: str = ""
    default_bucket: str = DEFAULT_BUCKET
    dry_run: bool = False
    concurrency: int = 1

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: If the settings cannot produce a valid run
        """
        if not self.bucket_name:
            raise ConfigurationError("A bucket name is required (--bucket)")
        if not self.directory.strip("/") and self.bucket_name == self.default_bucket:
            raise ConfigurationError(
                "To use the default bucket you need to specify an upload directory (--dir)"
            )
        if self.concurrency < 1:
            raise ConfigurationError(f"concurrency must be at least 1 (got: {self.concurrency})")


@dataclass
class UploadResult:
    """
    Result for one input file.

    Attributes:
        filename: Local filename as given (the manifest key)
        object_key: Full object key in the bucket
        url: Public URL of the object
        outcome: UPLOADED, or SKIPPED when nothing was transferred
        already_exists: The key was already present in the bucket
        dry_run: The run was a dry run
        file_size_bytes: Size of the local file
        duration_seconds: Time spent on this file
    """

    filename: str
    object_key: str
    url: str
    outcome: FileOutcome
    already_exists: bool
    dry_run: bool = False
    file_size_bytes: int = 0
    duration_seconds: float = 0.0

    @property
    def label(self) -> str:
        """Progress label: Uploaded, Skipped, or Planned for a dry run."""
        if self.outcome == FileOutcome.UPLOADED:
            return "Uploaded"
        if self.dry_run and not self.already_exists:
            return "Planned"
        return "Skipped"


@dataclass
class BatchResult:
    """Results of a completed run, in input order."""

    results: List[UploadResult] = field(default_factory=list)

    @property
    def manifest(self) -> Dict[str, str]:
        return {result.filename: result.url for result in self.results}

    @property
    def uploaded(self) -> int:
        return sum(1 for r in self.results if r.outcome == FileOutcome.UPLOADED)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.outcome == FileOutcome.SKIPPED)

    @property
    def bytes_uploaded(self) -> int:
        return sum(r.file_size_bytes for r in self.results if r.outcome == FileOutcome.UPLOADED)


def upload_file(
    filename: str,
    config: UploadConfig,
    storage: ObjectStorage,
    metrics: Optional[UploadMetrics] = None,
) -> UploadResult:
    """
    Version and upload a single file.

    Raises:
        InputError: If the file cannot be opened or read
        ExistenceCheckError: If the bucket cannot be queried
        TransferError: If the upload fails
    """
    metrics = metrics or UploadMetrics()
    start_time = time.time()

    try:
        f = open(filename, "rb")
    except OSError as e:
        raise InputError(f"failed to open {filename}: {e}") from e

    with f:
        upload_name = filename
        if is_versionable(filename):
            try:
                fingerprint = compute_fingerprint(f)
            except OSError as e:
                raise InputError(f"failed to read {filename}: {e}") from e
            upload_name = get_versioned_filename(filename, fingerprint)

        try:
            object_key = join_object_key(config.directory, upload_name)
        except ValueError as e:
            raise InputError(f"cannot upload {filename}: {e}") from e
        url = get_file_url(config.bucket_name, object_key, config.default_bucket)
        file_size = os.fstat(f.fileno()).st_size

        try:
            already_exists = storage.object_exists(config.bucket_name, object_key)
        except ExistenceCheckError as e:
            metrics.record_error("exists", type(e.__cause__ or e).__name__)
            raise

        outcome = FileOutcome.SKIPPED
        if not already_exists and not config.dry_run:
            try:
                with metrics.track_upload():
                    storage.upload_object(f, config.bucket_name, object_key)
            except TransferError as e:
                metrics.record_error("upload", type(e.__cause__ or e).__name__)
                raise
            outcome = FileOutcome.UPLOADED

    result = UploadResult(
        filename=filename,
        object_key=object_key,
        url=url,
        outcome=outcome,
        already_exists=already_exists,
        dry_run=config.dry_run,
        file_size_bytes=file_size,
        duration_seconds=time.time() - start_time,
    )

    metrics.record_outcome(
        result.label.lower(),
        bytes_uploaded=file_size if outcome == FileOutcome.UPLOADED else 0,
    )
    logger.info(
        f"{result.label} {filename} -> gs://{config.bucket_name}/{object_key}",
        extra={"outcome": result.label.lower(), "object_key": object_key},
    )
    return result


@log_function_call
def version_and_upload_files(
    filenames: Sequence[str],
    config: UploadConfig,
    storage: ObjectStorage,
    on_result: Optional[Callable[[UploadResult], None]] = None,
    metrics: Optional[UploadMetrics] = None,
) -> BatchResult:
    """
    Version and upload ``filenames`` and collect the manifest.

    Files are processed in order. With ``config.concurrency > 1`` they are
    processed by a bounded thread pool, but results (and ``on_result``
    callbacks) still follow input order, and if several files fail the
    error of the earliest one is raised.

    Args:
        filenames: Local files to publish
        config: Run settings
        storage: Remote storage operations
        on_result: Called with each result as soon as it is final
        metrics: Collector for run metrics (a private one if None)

    Returns:
        BatchResult with one result per file

    Raises:
        ConfigurationError: If ``config`` is invalid
        InputError, ExistenceCheckError, TransferError: On the first failure
    """
    config.validate()
    metrics = metrics or UploadMetrics()
    batch = BatchResult()

    logger.info(
        f"Uploading {len(filenames)} files to {config.bucket_name}/{config.directory}"
        + (" (dry run)" if config.dry_run else "")
    )

    def record(result: UploadResult) -> None:
        batch.results.append(result)
        if on_result is not None:
            on_result(result)

    if config.concurrency <= 1 or len(filenames) <= 1:
        for filename in filenames:
            record(upload_file(filename, config, storage, metrics))
    else:
        _upload_concurrently(filenames, config, storage, metrics, record)

    logger.info(
        f"Batch complete: {batch.uploaded} uploaded, {batch.skipped} skipped, "
        f"{batch.bytes_uploaded} bytes transferred"
    )
    return batch


def _upload_concurrently(
    filenames: Sequence[str],
    config: UploadConfig,
    storage: ObjectStorage,
    metrics: UploadMetrics,
    record: Callable[[UploadResult], None],
) -> None:
    with ThreadPoolExecutor(
        max_workers=config.concurrency, thread_name_prefix="static-upload"
    ) as executor:
        # Each task runs in a copy of this context so log lines keep the
        # run's correlation ID.
        futures: List[Future] = [
            executor.submit(
                contextvars.copy_context().run, upload_file, filename, config, storage, metrics
            )
            for filename in filenames
        ]
        try:
            for future in futures:
                record(future.result())
        except BaseException:
            for future in futures:
                future.cancel()
            raise
