"""
Environment configuration loader for static-upload.

Loads settings from a .env file (if present) and the process environment.
Command-line flags and the optional YAML config file are layered on top of
these values by the CLI.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from static_upload.utils.errors import ConfigurationError

# The bucket with a custom domain bound to it (served as https://<bucket>/...)
DEFAULT_BUCKET = "static.buffer.com"
DEFAULT_OUTPUT_FILENAME = "staticAssets.json"
DEFAULT_FORMAT = "json"
DEFAULT_UPLOAD_TIMEOUT_SECONDS = 300
DEFAULT_CONCURRENCY = 1


@dataclass
class UploaderConfig:
    """Environment-level configuration for one upload run."""

    # Google Cloud Storage
    bucket: Optional[str] = None
    default_bucket: str = DEFAULT_BUCKET
    directory: str = ""

    # Google Cloud Authentication
    project: Optional[str] = None
    google_credentials_path: Optional[str] = None

    # Upload settings
    upload_timeout_seconds: int = DEFAULT_UPLOAD_TIMEOUT_SECONDS
    concurrency: int = DEFAULT_CONCURRENCY

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "UploaderConfig":
        """
        Load configuration from environment variables.

        Loads ``env_file`` (default: ``.env`` in the working directory) when it
        exists, without overriding variables already set in the environment.

        Returns:
            UploaderConfig instance with loaded values

        Raises:
            ConfigurationError: If a numeric variable is not a positive integer
        """
        env_path = env_file if env_file is not None else Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        default_bucket = os.getenv("STATIC_UPLOAD_DEFAULT_BUCKET", DEFAULT_BUCKET)

        return cls(
            bucket=os.getenv("STATIC_UPLOAD_BUCKET") or None,
            default_bucket=default_bucket,
            directory=os.getenv("STATIC_UPLOAD_DIR", ""),
            project=os.getenv("GOOGLE_CLOUD_PROJECT"),
            google_credentials_path=os.getenv("GOOGLE_APPLICATION_CREDENTIALS"),
            upload_timeout_seconds=_positive_int_env(
                "UPLOAD_TIMEOUT_SECONDS", DEFAULT_UPLOAD_TIMEOUT_SECONDS
            ),
            concurrency=_positive_int_env("STATIC_UPLOAD_CONCURRENCY", DEFAULT_CONCURRENCY),
        )


def _positive_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer (got: {raw!r})") from None
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1 (got: {value})")
    return value
