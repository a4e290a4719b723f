"""
Content fingerprints and cache-busting filenames.

A fingerprint is the MD5 hex digest of a file's bytes. Embedding it in the
object name makes the name content-addressed: ``app.js`` becomes
``app.<fingerprint>.js``, so the object can be cached for a year and a new
build simply publishes under a new name.
"""

import hashlib
import os
from typing import BinaryIO, Union

# Extensions whose names are rewritten with a fingerprint
VERSIONABLE_EXTENSIONS = (".js", ".css")

CHUNK_SIZE = 64 * 1024


def compute_fingerprint(stream: BinaryIO) -> str:
    """
    Hash everything left in ``stream`` in a single streaming pass.

    Reads from the current position to EOF in fixed-size chunks; the stream
    is left at EOF. I/O errors propagate to the caller.

    Returns:
        32 character lowercase hex digest
    """
    digest = hashlib.md5()
    for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
        digest.update(chunk)
    return digest.hexdigest()


def fingerprint_file(path: Union[str, os.PathLike]) -> str:
    """Fingerprint the file at ``path``."""
    with open(path, "rb") as f:
        return compute_fingerprint(f)


def is_versionable(filename: str) -> bool:
    """True if ``filename`` gets a fingerprint in its uploaded name."""
    return os.path.splitext(filename)[1] in VERSIONABLE_EXTENSIONS


def get_versioned_filename(filename: str, fingerprint: str) -> str:
    """
    Insert ``fingerprint`` as an extra segment before the final extension.

    Only the last path component is rewritten::

        public/app.min.js -> public/app.min.<fp>.js
        LICENSE           -> LICENSE.<fp>
        .htaccess         -> .htaccess.<fp>
        .js               -> .js.<fp>
    """
    root, ext = os.path.splitext(filename)
    return f"{root}.{fingerprint}{ext}"
