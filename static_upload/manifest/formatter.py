"""
Manifest serialization.

The manifest maps each local filename to the public URL it was published
under. Build tooling reads it to rewrite asset references.
"""

import csv
import io
import json
from pathlib import Path
from typing import Mapping, Union

from static_upload.utils.errors import ManifestError, UnsupportedFormatError
from static_upload.utils.logging import get_logger, log_function_call

logger = get_logger(__name__)

SUPPORTED_FORMATS = ("json", "csv")


def format_json(manifest: Mapping[str, str]) -> bytes:
    """Indented JSON object, keys in manifest order."""
    return json.dumps(dict(manifest), indent=2).encode("utf-8")


def format_csv(manifest: Mapping[str, str]) -> bytes:
    """One ``filename,url`` row per entry, no header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    for filename, url in manifest.items():
        writer.writerow([filename, url])
    return buffer.getvalue().encode("utf-8")


_FORMATTERS = {
    "json": format_json,
    "csv": format_csv,
}


@log_function_call
def format_manifest(manifest: Mapping[str, str], fmt: str) -> bytes:
    """
    Serialize ``manifest`` in the selected format.

    Raises:
        UnsupportedFormatError: If ``fmt`` is not json or csv
    """
    formatter = _FORMATTERS.get(fmt)
    if formatter is None:
        raise UnsupportedFormatError(fmt, SUPPORTED_FORMATS)
    return formatter(manifest)


def write_manifest(path: Union[str, Path], data: bytes) -> None:
    """
    Write serialized manifest bytes to ``path``.

    Raises:
        ManifestError: If the file cannot be written
    """
    try:
        Path(path).write_bytes(data)
    except OSError as e:
        raise ManifestError(f"failed to write manifest file {path}: {e}") from e
    logger.info(f"Wrote manifest {path} ({len(data)} bytes)")
