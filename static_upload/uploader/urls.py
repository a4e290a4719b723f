"""
Object keys and public URLs.
"""

import posixpath
from urllib.parse import quote

# Generic public endpoint for objects in any bucket
GCS_PUBLIC_ENDPOINT = "https://storage.googleapis.com"


def join_object_key(directory: str, filename: str) -> str:
    """
    Join the remote directory prefix and a local filename into an object key.

    The result is a normalized POSIX path without a leading slash; a leading
    slash or ``./`` on ``filename`` does not escape ``directory``.

    Example:
        >>> join_object_key("v1/", "./public/app.js")
        'v1/public/app.js'

    Raises:
        ValueError: If the key is empty or ``filename`` has a ``..`` segment
    """
    if ".." in filename.split("/"):
        raise ValueError(f"{filename!r} points outside the working directory")
    parts = [part.strip("/") for part in (directory, filename) if part and part.strip("/")]
    if not parts:
        raise ValueError("object key cannot be empty")
    key = posixpath.normpath("/".join(parts))
    return key.lstrip("/")


def get_file_url(bucket: str, object_key: str, default_bucket: str) -> str:
    """
    Return the https URL clients use to fetch ``object_key``.

    The default bucket has a custom domain named after it, so its objects are
    served from ``https://<bucket>/<key>``. Every other bucket goes through
    the generic storage endpoint.
    """
    path = quote(object_key, safe="/~")
    if bucket == default_bucket:
        return f"https://{bucket}/{path}"
    return f"{GCS_PUBLIC_ENDPOINT}/{bucket}/{path}"
