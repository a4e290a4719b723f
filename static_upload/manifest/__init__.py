"""
Manifest module.

Serializes the filename -> URL mapping produced by an upload run as JSON or
CSV and writes it to disk.
"""

from .formatter import SUPPORTED_FORMATS, format_manifest, write_manifest

__all__ = [
    "SUPPORTED_FORMATS",
    "format_manifest",
    "write_manifest",
]
