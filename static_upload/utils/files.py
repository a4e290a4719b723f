"""
Input file selection from comma-separated glob patterns.
"""

import glob
import os
from typing import Iterable, List, Union

from static_upload.utils.errors import InputError
from static_upload.utils.logging import get_logger

logger = get_logger(__name__)


def split_patterns(patterns: Union[str, Iterable[str]]) -> List[str]:
    """
    Normalize ``"a/*.js,b.css"`` or ``["a/*.js", "b.css"]`` to a pattern list.

    Blank entries are dropped.
    """
    if isinstance(patterns, str):
        patterns = patterns.split(",")
    return [p.strip() for p in patterns if p and p.strip()]


def get_files_from_globs(patterns: Union[str, Iterable[str]]) -> List[str]:
    """
    Expand glob patterns into a list of regular files.

    Patterns are expanded in the order given and ``**`` matches any number of
    directories. Directories matched by a pattern are ignored. A file matched
    by several patterns is listed once, at its first position.

    Raises:
        InputError: If a pattern cannot be expanded
    """
    files: List[str] = []
    seen = set()

    for pattern in split_patterns(patterns):
        try:
            matches = sorted(glob.glob(pattern, recursive=True))
        except (OSError, ValueError) as e:
            raise InputError(f"failed to expand pattern {pattern!r}: {e}") from e

        if not matches:
            logger.warning(f"Pattern matched no files: {pattern}")

        for match in matches:
            if match in seen:
                continue
            if not os.path.isfile(match):
                logger.debug(f"Skipping non-file match: {match}")
                continue
            seen.add(match)
            files.append(match)

    return files
