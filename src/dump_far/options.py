"""Run options for the dump-far command."""

from __future__ import annotations

import os

from pydantic import BaseModel, ValidationError, model_validator

from dump_far.encoding_context import DEFAULT_ENCODING, canonical_encoding_name
from dump_far.errors import ConfigurationError, EncodingError
from dump_far.scanner import Dialect

BACKUP_EXT_ENV = "DUMP_FAR_BACKUP_EXT"
ENCODING_ENV = "DUMP_FAR_ENCODING"
SOURCE_TYPE_ENV = "DUMP_FAR_SOURCE_TYPE"

DEFAULT_BACKUP_EXT = ".bak"


class FarOptions(BaseModel):
    """Options controlling one find-and-replace run."""

    backup_ext: str = DEFAULT_BACKUP_EXT  # "" disables the backup copy
    encoding: str = DEFAULT_ENCODING
    source_type: Dialect = Dialect.BACKSLASHED
    preview: bool = False
    verbose: bool = False

    @model_validator(mode="after")
    def _canonicalize_encoding(self) -> FarOptions:
        """Reject unsupported encodings and store the canonical spelling."""
        self.encoding = canonical_encoding_name(self.encoding)
        if "/" in self.backup_ext or "\\" in self.backup_ext:
            raise ValueError("backup_ext must be a file-name suffix, not a path")
        return self

    @classmethod
    def build(cls, **values: object) -> FarOptions:
        """Validate *values*, raising :class:`ConfigurationError` on bad input."""
        try:
            return cls(**values)
        except ValidationError as exc:
            for error in exc.errors():
                cause = (error.get("ctx") or {}).get("error")
                if isinstance(cause, EncodingError):
                    raise cause from None
            raise ConfigurationError(_format_validation_error(exc)) from None

    @classmethod
    def from_env(cls, **overrides: object) -> FarOptions:
        """Build options from ``DUMP_FAR_*`` variables, then apply *overrides*."""
        values: dict[str, object] = {}
        backup_ext = os.getenv(BACKUP_EXT_ENV)
        if backup_ext is not None:
            values["backup_ext"] = backup_ext.strip()
        encoding = os.getenv(ENCODING_ENV, "").strip()
        if encoding:
            values["encoding"] = encoding
        source_type = os.getenv(SOURCE_TYPE_ENV, "").strip().lower()
        if source_type:
            values["source_type"] = source_type
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls.build(**values)

    def describe(self) -> list[tuple[str, str]]:
        """Return ``(option, formatted value)`` pairs for display."""
        return [
            ("backup-ext", _format_value(self.backup_ext)),
            ("encoding", _format_value(self.encoding)),
            ("source-type", _format_value(self.source_type.value)),
            ("preview", _format_value(self.preview)),
            ("verbose", _format_value(self.verbose)),
        ]


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    if " " in text:
        return f'"{text}"'
    return text


def _format_validation_error(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "options"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or str(exc)
