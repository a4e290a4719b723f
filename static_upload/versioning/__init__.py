"""
File versioning module.

Computes content fingerprints and derives the cache-busting filenames used as
object keys for versionable assets.
"""

from .fingerprint import (
    VERSIONABLE_EXTENSIONS,
    compute_fingerprint,
    fingerprint_file,
    get_versioned_filename,
    is_versionable,
)

__all__ = [
    "VERSIONABLE_EXTENSIONS",
    "compute_fingerprint",
    "fingerprint_file",
    "get_versioned_filename",
    "is_versionable",
]
