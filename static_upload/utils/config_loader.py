"""
YAML configuration loader and validator for upload runs.

Lets a project keep its upload settings next to its build output instead of
repeating flags in every CI job. Values given on the command line win over
the file.

Example config file (static-upload.yaml):
    ```yaml
    version: "1.0"
    bucket: static.buffer.com
    dir: publish/v42
    files:
      - public/**/*.js
      - public/**/*.css
      - public/img/*.png
    output: staticAssets.json
    format: json
    concurrency: 4
    ```

Usage:
    >>> from static_upload.utils.config_loader import load_config, validate_config
    >>> config = load_config("static-upload.yaml")
    >>> errors = validate_config(config)
    >>> if not errors:
    ...     print(config["bucket"])
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from static_upload.manifest.formatter import SUPPORTED_FORMATS
from static_upload.utils.errors import ConfigurationError
from static_upload.utils.logging import get_logger

logger = get_logger(__name__)


SUPPORTED_VERSIONS = ["1.0"]

# Known keys and the types their values may take
KNOWN_KEYS: Dict[str, tuple] = {
    "version": (str,),
    "bucket": (str,),
    "default_bucket": (str,),
    "dir": (str,),
    "files": (str, list),
    "output": (str,),
    "format": (str,),
    "dry_run": (bool,),
    "concurrency": (int,),
    "timeout": (int,),
}


@dataclass
class ConfigError:
    """Validation error in configuration file."""

    field: str
    message: str
    value: Optional[Any] = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value})"
        return f"{self.field}: {self.message}"


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Dictionary containing parsed configuration

    Raises:
        ConfigurationError: If the file is missing, unreadable, malformed or
            does not contain a mapping
    """
    path = Path(config_path)
    logger.info(f"Loading configuration from: {path}")

    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read {path}: {e}") from e

    if config is None:
        raise ConfigurationError(f"Configuration file is empty: {path}")
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got {type(config).__name__}"
        )

    return dict(config)


def validate_config(config: Dict[str, Any]) -> List[ConfigError]:
    """
    Validate configuration against the expected schema.

    Returns:
        List of validation errors (empty if valid)
    """
    errors: List[ConfigError] = []

    if "version" not in config:
        errors.append(ConfigError("version", "Missing required field"))
    elif config["version"] not in SUPPORTED_VERSIONS:
        errors.append(
            ConfigError(
                "version",
                f"Unsupported version (supported: {SUPPORTED_VERSIONS})",
                config["version"],
            )
        )

    for key, value in config.items():
        if key not in KNOWN_KEYS:
            errors.append(ConfigError(key, "Unknown field"))
            continue
        if key == "version":
            continue
        # bool is a subclass of int; reject it where a count is expected
        if not isinstance(value, KNOWN_KEYS[key]) or (
            isinstance(value, bool) and bool not in KNOWN_KEYS[key]
        ):
            expected = " or ".join(t.__name__ for t in KNOWN_KEYS[key])
            errors.append(ConfigError(key, f"Must be a {expected}", type(value).__name__))

    files = config.get("files")
    if isinstance(files, list):
        for i, pattern in enumerate(files):
            if not isinstance(pattern, str):
                errors.append(
                    ConfigError(f"files[{i}]", "Must be a string", type(pattern).__name__)
                )

    fmt = config.get("format")
    if isinstance(fmt, str) and fmt not in SUPPORTED_FORMATS:
        errors.append(
            ConfigError("format", f"Invalid format (valid: {list(SUPPORTED_FORMATS)})", fmt)
        )

    for key in ("concurrency", "timeout"):
        value = config.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value < 1:
            errors.append(ConfigError(key, "Must be at least 1", value))

    if errors:
        logger.warning(f"Configuration validation failed with {len(errors)} errors")

    return errors


def load_and_validate(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML config file and fail on the first validation error.

    Raises:
        ConfigurationError: If loading fails or the config is invalid
    """
    config = load_config(config_path)
    errors = validate_config(config)
    if errors:
        details = "; ".join(str(error) for error in errors)
        raise ConfigurationError(f"Invalid configuration in {config_path}: {details}")
    return config
