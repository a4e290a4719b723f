"""
Command-line interface for static-upload.

Usage:
    static-upload --dir v42 --files "public/**/*.js,public/style.css"
    static-upload --bucket my-assets --dir v42 --files "dist/*" --format csv -o assets.csv
    static-upload --dir v42 --files "dist/*" --dry-run
    static-upload --config static-upload.yaml
"""

import argparse
import sys
import time
import uuid
from typing import Any, Callable, Dict, List, Optional

from static_upload import __version__
from static_upload.manifest import SUPPORTED_FORMATS, format_manifest, write_manifest
from static_upload.uploader import (
    GCSStorage,
    ObjectStorage,
    UploadConfig,
    UploadResult,
    version_and_upload_files,
)
from static_upload.utils.config import DEFAULT_FORMAT, DEFAULT_OUTPUT_FILENAME, UploaderConfig
from static_upload.utils.config_loader import load_and_validate
from static_upload.utils.errors import (
    ConfigurationError,
    StaticUploadError,
    UnsupportedFormatError,
)
from static_upload.utils.files import get_files_from_globs, split_patterns
from static_upload.utils.logging import get_logger, set_correlation_id, setup_logging
from static_upload.utils.metrics import UploadMetrics

logger = get_logger(__name__)

StorageFactory = Callable[[UploaderConfig], ObjectStorage]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="static-upload",
        description="Version and upload static assets to Google Cloud Storage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Upload scripts and styles to the default bucket under v42/
  %(prog)s --dir v42 --files "public/**/*.js,public/**/*.css"

  # Upload to another bucket and write a CSV manifest
  %(prog)s --bucket my-assets --dir v42 --files "dist/*" --format csv -o assets.csv

  # Show what would be uploaded without uploading or writing a manifest
  %(prog)s --dir v42 --files "dist/*" --dry-run
        """,
    )

    parser.add_argument(
        "--bucket",
        help="the bucket to upload to (default: STATIC_UPLOAD_BUCKET or the default bucket)",
    )
    parser.add_argument(
        "--dir",
        dest="directory",
        help="the directory to upload files to in the bucket "
        "(required when using the default bucket)",
    )
    parser.add_argument(
        "--files",
        help='comma-separated glob patterns of files to upload, ex. "public/**/*.js,public/style.css"',
    )
    parser.add_argument(
        "-o",
        "--output",
        help=f"the filename for the versions manifest (default: {DEFAULT_OUTPUT_FILENAME})",
    )
    parser.add_argument(
        "--format",
        help=f"format of the manifest [{','.join(SUPPORTED_FORMATS)}] (default: {DEFAULT_FORMAT})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="print the output only, skip file uploads and manifest creation",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="number of files to upload at once (default: 1)",
    )
    parser.add_argument(
        "--config",
        help="YAML file with upload settings (flags override it)",
    )
    parser.add_argument(
        "--metrics-file",
        help="write Prometheus metrics for this run to the given file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=__version__,
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _pick(flag_value: Any, file_config: Dict[str, Any], key: str, default: Any) -> Any:
    """Flag value, else YAML value, else ``default``."""
    if flag_value is not None:
        return flag_value
    if key in file_config:
        return file_config[key]
    return default


def print_progress(result: UploadResult) -> None:
    print(f"{result.label:<10} {result.filename}", flush=True)


def main(
    argv: Optional[List[str]] = None,
    storage_factory: StorageFactory = GCSStorage.from_config,
) -> int:
    """Main entry point for the upload CLI."""
    args = parse_args(argv)
    setup_logging(
        level="DEBUG" if args.verbose else "WARNING",
        enable_colors=sys.stderr.isatty(),
    )
    set_correlation_id(str(uuid.uuid4()))

    metrics = UploadMetrics()
    start_time = time.monotonic()

    try:
        env_config = UploaderConfig.from_env()
        file_config = load_and_validate(args.config) if args.config else {}

        default_bucket = file_config.get("default_bucket", env_config.default_bucket)
        env_config.default_bucket = default_bucket
        env_config.upload_timeout_seconds = file_config.get(
            "timeout", env_config.upload_timeout_seconds
        )

        upload_config = UploadConfig(
            bucket_name=_pick(
                args.bucket, file_config, "bucket", env_config.bucket or default_bucket
            ),
            directory=_pick(args.directory, file_config, "dir", env_config.directory),
            default_bucket=default_bucket,
            dry_run=args.dry_run or bool(file_config.get("dry_run", False)),
            concurrency=_pick(args.concurrency, file_config, "concurrency", env_config.concurrency),
        )
        upload_config.validate()

        manifest_format = _pick(args.format, file_config, "format", DEFAULT_FORMAT)
        if manifest_format not in SUPPORTED_FORMATS:
            raise UnsupportedFormatError(manifest_format, SUPPORTED_FORMATS)
        output_filename = _pick(args.output, file_config, "output", DEFAULT_OUTPUT_FILENAME)

        patterns = split_patterns(_pick(args.files, file_config, "files", ""))
        if not patterns:
            raise ConfigurationError("No input files given; --files is required")

        files = get_files_from_globs(patterns)
        print(f"Found {len(files)} files to upload and version:")

        storage = storage_factory(env_config)
        print(f"Uploading to {upload_config.bucket_name}/{upload_config.directory}")

        batch = version_and_upload_files(
            files, upload_config, storage, on_result=print_progress, metrics=metrics
        )
        output = format_manifest(batch.manifest, manifest_format)

        if not upload_config.dry_run:
            write_manifest(output_filename, output)

    except StaticUploadError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}")
        return 1

    except KeyboardInterrupt:
        print("\nUpload cancelled by user")
        return 130

    finally:
        if args.metrics_file:
            try:
                metrics.write(args.metrics_file)
            except OSError as e:
                logger.warning(f"Failed to write metrics file {args.metrics_file}: {e}")

    elapsed = time.monotonic() - start_time
    if upload_config.dry_run:
        print(f"\nCompleted dry run in {elapsed:.2f}s")
    else:
        print(
            f"\nSuccessfully uploaded static assets and generated {output_filename} "
            f"in {elapsed:.2f}s ({batch.uploaded} uploaded, {batch.skipped} skipped)"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
