"""
Google Cloud Storage uploader module.

Publishes static assets under content-addressed keys, skips objects that are
already in the bucket and resolves the public URL of every file.
"""

from .storage import CACHE_CONTROL, GCSStorage, get_content_type
from .uploader import (
    BatchResult,
    FileOutcome,
    ObjectStorage,
    UploadConfig,
    UploadResult,
    upload_file,
    version_and_upload_files,
)
from .urls import GCS_PUBLIC_ENDPOINT, get_file_url, join_object_key

__all__ = [
    "BatchResult",
    "CACHE_CONTROL",
    "FileOutcome",
    "GCSStorage",
    "GCS_PUBLIC_ENDPOINT",
    "ObjectStorage",
    "UploadConfig",
    "UploadResult",
    "get_content_type",
    "get_file_url",
    "join_object_key",
    "upload_file",
    "version_and_upload_files",
]
