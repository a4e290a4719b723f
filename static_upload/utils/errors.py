"""
Exception types raised by static-upload.

Every failure aborts the run. The CLI catches ``StaticUploadError``, prints
the message and exits non-zero; anything else is a bug and keeps its
traceback.
"""


class StaticUploadError(Exception):
    """Base class for all expected, user-facing failures."""


class ConfigurationError(StaticUploadError):
    """Invalid or incomplete settings (flags, env vars, YAML config)."""


class CredentialsError(StaticUploadError):
    """Storage credentials could not be obtained."""


class InputError(StaticUploadError):
    """An input file pattern could not be expanded or a file not opened."""


class ExistenceCheckError(StaticUploadError):
    """The remote metadata query failed for a reason other than "not found"."""


class TransferError(StaticUploadError):
    """An object upload failed."""


class ManifestError(StaticUploadError):
    """The manifest could not be produced or written."""


class UnsupportedFormatError(ManifestError):
    """The manifest format selector is not one of the supported formats."""

    def __init__(self, fmt: str, supported: tuple) -> None:
        self.format = fmt
        self.supported = supported
        super().__init__(
            f"Unsupported manifest format: {fmt!r} (supported: {', '.join(supported)})"
        )
