"""Global literal byte replacement."""

from __future__ import annotations

import logging

from dump_far.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _require_search(search: bytes) -> None:
    if not search:
        raise ConfigurationError("search text must not be empty")


def count_occurrences(buffer: bytes, search: bytes) -> int:
    """Return the number of non-overlapping occurrences of *search*."""
    _require_search(search)
    return buffer.count(search)


def replace_all(buffer: bytes, search: bytes, replace: bytes) -> bytes:
    """Replace every occurrence of *search* with *replace*, left to right.

    Matching resumes after each inserted replacement, so text inserted by one
    substitution is never matched again in the same pass.
    """
    _require_search(search)
    if search not in buffer:
        return buffer
    updated = buffer.replace(search, replace)
    logger.debug("Substitution resized buffer %d -> %d bytes", len(buffer), len(updated))
    return updated
