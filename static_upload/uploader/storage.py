"""
Google Cloud Storage access for static-upload.

``GCSStorage`` wraps one ``google.cloud.storage.Client`` and exposes the two
remote operations an upload run needs: a metadata-only existence check and
an upload with the long-lived caching policy. The instance is created once
per run and passed to the batch orchestrator explicitly.

Example usage:
    >>> storage = GCSStorage.from_config(UploaderConfig.from_env())
    >>> if not storage.object_exists("static.buffer.com", "v1/app.3f2a.js"):
    ...     with open("app.js", "rb") as f:
    ...         storage.upload_object(f, "static.buffer.com", "v1/app.3f2a.js")
"""

import mimetypes
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import BinaryIO, Dict, Optional

from google.api_core import exceptions as gcs_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import storage

from static_upload.utils.config import UploaderConfig
from static_upload.utils.errors import CredentialsError, ExistenceCheckError, TransferError
from static_upload.utils.logging import get_logger

logger = get_logger(__name__)

# About one year; objects are content-addressed so they never change
CACHE_CONTROL = "public, max-age=31520626"
EXPIRES_IN_YEARS = 10


def get_content_type(filename: str) -> Optional[str]:
    """MIME type for the extension of ``filename``, or None if unknown."""
    content_type, _ = mimetypes.guess_type(filename, strict=False)
    return content_type


def expires_at(now: Optional[datetime] = None, years: int = EXPIRES_IN_YEARS) -> datetime:
    """``now`` (UTC) moved ``years`` years ahead; Feb 29 falls back to Feb 28."""
    now = now or datetime.now(timezone.utc)
    try:
        return now.replace(year=now.year + years)
    except ValueError:
        return now.replace(year=now.year + years, day=28)


class GCSStorage:
    """Existence checks and uploads against Google Cloud Storage."""

    def __init__(self, client: storage.Client, timeout_seconds: int = 300) -> None:
        self.client = client
        self.timeout_seconds = timeout_seconds
        self._buckets: Dict[str, storage.Bucket] = {}

    @classmethod
    def from_config(cls, config: UploaderConfig) -> "GCSStorage":
        """
        Build a client from application default credentials.

        A service account key file named in the config is used directly;
        otherwise the usual ADC lookup applies (GOOGLE_APPLICATION_CREDENTIALS,
        gcloud user credentials, metadata server).

        Raises:
            CredentialsError: If no usable credentials are found
        """
        try:
            if config.google_credentials_path:
                client = storage.Client.from_service_account_json(
                    config.google_credentials_path, project=config.project
                )
            else:
                client = storage.Client(project=config.project)
        except (auth_exceptions.GoogleAuthError, OSError, ValueError) as e:
            raise CredentialsError(f"failed to load Google Cloud credentials: {e}") from e

        logger.debug(f"Storage client ready (project={client.project})")
        return cls(client, timeout_seconds=config.upload_timeout_seconds)

    def _bucket(self, name: str) -> storage.Bucket:
        bucket = self._buckets.get(name)
        if bucket is None:
            bucket = self.client.bucket(name)
            self._buckets[name] = bucket
        return bucket

    def object_exists(self, bucket: str, key: str) -> bool:
        """
        Whether an object is stored at ``key`` in ``bucket``.

        Only fetches metadata. "Not found" is a normal False result; any other
        failure is reported instead of being mistaken for absence.

        Raises:
            ExistenceCheckError: If the query fails (network, auth, permission)
        """
        blob = self._bucket(bucket).blob(key)
        try:
            return bool(blob.exists(timeout=self.timeout_seconds))
        except gcs_exceptions.NotFound:
            return False
        except Exception as e:
            raise ExistenceCheckError(
                f"failed to check gs://{bucket}/{key}: {type(e).__name__}: {e}"
            ) from e

    def upload_object(self, file_obj: BinaryIO, bucket: str, key: str) -> None:
        """
        Upload the whole content of ``file_obj`` to ``key``.

        The handle is rewound first. The content type is inferred from the
        key's extension and the object gets the long-lived cache policy. A
        failed upload is not cleaned up.

        GCS has no settable Expires header. The 10-year expiry date is kept as
        custom metadata and is served as ``x-goog-meta-expires``; browsers and
        CDNs cache by ``Cache-Control`` alone.

        Raises:
            TransferError: If the upload fails for any reason
        """
        blob = self._bucket(bucket).blob(key)
        blob.cache_control = CACHE_CONTROL
        blob.metadata = {"Expires": format_datetime(expires_at(), usegmt=True)}
        content_type = get_content_type(key)

        logger.debug(f"Uploading gs://{bucket}/{key} (content type: {content_type})")
        try:
            blob.upload_from_file(
                file_obj,
                rewind=True,
                content_type=content_type,
                timeout=self.timeout_seconds,
            )
        except Exception as e:
            raise TransferError(
                f"failed to upload gs://{bucket}/{key}: {type(e).__name__}: {e}"
            ) from e
