"""Rewrite stale length prefixes of serialized string tokens."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from dump_far.encoding_context import DEFAULT_ENCODING, EncodingContext, resolve_encoding
from dump_far.scanner import SerializedToken

logger = logging.getLogger(__name__)


def repair_counted(
    buffer: bytes,
    tokens: Iterable[SerializedToken],
    encoding: str | EncodingContext = DEFAULT_ENCODING,
) -> tuple[bytes, int]:
    """Like :func:`repair`, also returning how many length fields were rewritten."""
    context = resolve_encoding(encoding)
    chunks: list[bytes] = []
    cursor = 0
    rewritten = 0
    for token in tokens:
        length_start, length_end = token.length_span
        if length_start < cursor:
            raise ValueError(
                f"token at offset {length_start} overlaps or precedes offset {cursor}"
            )
        units = context.count_units(token.content(buffer))
        chunks.append(buffer[cursor:length_start])
        chunks.append(str(units).encode("ascii"))
        cursor = length_end
        rewritten += 1
    if not rewritten:
        return buffer, 0
    chunks.append(buffer[cursor:])
    logger.debug("Rewrote %d length field(s) using %s", rewritten, context.name)
    return b"".join(chunks), rewritten


def repair(
    buffer: bytes,
    tokens: Iterable[SerializedToken],
    encoding: str | EncodingContext = DEFAULT_ENCODING,
) -> bytes:
    """Return a copy of *buffer* with each token's length set to its unit count.

    Only the digit spans change; content and delimiters are copied verbatim.
    Tokens must arrive in ascending, non-overlapping order, which is what
    :func:`dump_far.scanner.find_tokens` produces.
    """
    repaired, _ = repair_counted(buffer, tokens, encoding)
    return repaired
