"""Exception hierarchy for dump-far."""

from __future__ import annotations


class DumpFarError(Exception):
    """Base class for every error raised by dump-far."""


class ConfigurationError(DumpFarError, ValueError):
    """Raised when options are invalid, before any buffer is processed."""


class EncodingError(ConfigurationError):
    """Raised when an encoding identifier is not in the supported list."""


class DumpIOError(DumpFarError, OSError):
    """Raised when the dump cannot be read, backed up, or written."""
