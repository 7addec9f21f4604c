"""Find-and-replace over a dump with serialized-length repair.

The three stages run buffer to buffer:

1. literal substitution of ``search`` by ``replace`` across the whole dump;
2. scanning of the substituted dump for string tokens whose content now
   contains ``replace``;
3. rewriting of those tokens' length prefixes.

Only tokens that contain the inserted text can have a stale length, so the
rest of the dump is copied through untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import BaseModel

from dump_far.encoding_context import DEFAULT_ENCODING, EncodingContext, resolve_encoding
from dump_far.errors import ConfigurationError
from dump_far.repair import repair_counted
from dump_far.scanner import Dialect, find_tokens
from dump_far.substitution import count_occurrences, replace_all

logger = logging.getLogger(__name__)

DEFAULT_DIALECT = Dialect.BACKSLASHED


@dataclass(frozen=True, slots=True)
class ReplacementSpec:
    """The literal search and replacement bytes of one run."""

    search: bytes
    replace: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.search, bytes) or not isinstance(self.replace, bytes):
            raise ConfigurationError("search and replace must be bytes")
        if not self.search:
            raise ConfigurationError("search text must not be empty")


class ReplaceSummary(BaseModel):
    """Counts reported after a pipeline run."""

    dialect: Dialect = DEFAULT_DIALECT
    encoding: str = DEFAULT_ENCODING
    substitutions: int = 0
    repaired_tokens: int = 0
    input_bytes: int = 0
    output_bytes: int = 0

    @property
    def changed(self) -> bool:
        return self.substitutions > 0


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Output buffer of a run together with its summary."""

    buffer: bytes
    summary: ReplaceSummary = field(default_factory=ReplaceSummary)


def run_pipeline(
    buffer: bytes,
    spec: ReplacementSpec,
    dialect: str | Dialect = DEFAULT_DIALECT,
    encoding: str | EncodingContext = DEFAULT_ENCODING,
) -> PipelineResult:
    """Substitute, scan, and repair *buffer*; return the result and its counts."""
    # Resolve everything up front so bad configuration fails before any work.
    dialect = Dialect.parse(dialect)
    context = resolve_encoding(encoding)

    substitutions = count_occurrences(buffer, spec.search)
    substituted = replace_all(buffer, spec.search, spec.replace)
    tokens = find_tokens(substituted, dialect, spec.replace)
    repaired, repaired_tokens = repair_counted(substituted, tokens, context)

    summary = ReplaceSummary(
        dialect=dialect,
        encoding=context.name,
        substitutions=substitutions,
        repaired_tokens=repaired_tokens,
        input_bytes=len(buffer),
        output_bytes=len(repaired),
    )
    logger.debug(
        "Pipeline (%s, %s): %d substitution(s), %d length field(s) repaired",
        dialect.value,
        context.name,
        substitutions,
        repaired_tokens,
    )
    return PipelineResult(buffer=repaired, summary=summary)


def repair_replace(
    buffer: bytes,
    search: bytes,
    replace: bytes,
    dialect: str | Dialect = DEFAULT_DIALECT,
    encoding: str | EncodingContext = DEFAULT_ENCODING,
) -> bytes:
    """Replace *search* by *replace* in *buffer* and fix affected string lengths."""
    spec = ReplacementSpec(search=search, replace=replace)
    return run_pipeline(buffer, spec, dialect, encoding).buffer
