"""Locate PHP-serialized string tokens in a dump buffer.

A token looks like ``s:<N>:"<content>"`` in raw serializations and like
``s:<N>:\\"<content>\\"`` in SQL dumps, where the quotes are escaped. The
scanner is a small state machine driven by ``bytes.find`` so a multi-gigabyte
dump is walked once, without regex backtracking.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from dump_far.errors import ConfigurationError

_MARKER = b"s:"
_DIGITS = frozenset(b"0123456789")


class Dialect(str, Enum):
    """How string content is delimited inside the dump."""

    RAW = "raw"
    BACKSLASHED = "backslashed"

    @property
    def opener(self) -> bytes:
        """Bytes between the length digits and the first content byte."""
        return b':"' if self is Dialect.RAW else b':\\"'

    @property
    def terminator(self) -> bytes:
        """Bytes that end the content."""
        return b'"' if self is Dialect.RAW else b'\\"'

    @classmethod
    def parse(cls, value: str | Dialect) -> Dialect:
        if isinstance(value, Dialect):
            return value
        key = str(value or "").strip().lower()
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(item.value for item in cls)
            raise ConfigurationError(
                f"Unknown source type {value!r}; expected one of: {choices}"
            ) from None


class ScanState(Enum):
    SEEKING = "seeking"
    READING_LENGTH_DIGITS = "reading_length_digits"
    EXPECT_OPEN_QUOTE = "expect_open_quote"
    READING_CONTENT = "reading_content"
    EXPECT_CLOSE_QUOTE = "expect_close_quote"
    EMIT = "emit"


@dataclass(frozen=True, slots=True)
class SerializedToken:
    """A located string token. Spans are half-open byte offsets."""

    length_span: tuple[int, int]
    content_span: tuple[int, int]
    dialect: Dialect

    def length_field(self, buffer: bytes) -> bytes:
        start, end = self.length_span
        return buffer[start:end]

    def content(self, buffer: bytes) -> bytes:
        start, end = self.content_span
        return buffer[start:end]


def find_tokens(
    buffer: bytes,
    dialect: str | Dialect,
    needle: bytes,
) -> Iterator[SerializedToken]:
    """Yield, left to right, every string token whose content contains *needle*.

    Candidates with a malformed header are skipped and scanning resumes right
    after their ``s:`` marker. A token left unterminated at the end of the
    buffer ends the scan. In the raw dialect the first ``"`` closes the
    content, so strings holding a literal quote are cut short.
    """
    dialect = Dialect.parse(dialect)
    opener = dialect.opener
    terminator = dialect.terminator
    size = len(buffer)

    state = ScanState.SEEKING
    pos = 0
    marker = length_start = length_end = content_start = content_end = 0

    while True:
        if state is ScanState.SEEKING:
            marker = buffer.find(_MARKER, pos)
            if marker < 0:
                return
            length_start = marker + len(_MARKER)
            if length_start < size and buffer[length_start] in _DIGITS:
                state = ScanState.READING_LENGTH_DIGITS
            else:
                pos = marker + 1

        elif state is ScanState.READING_LENGTH_DIGITS:
            length_end = length_start
            while length_end < size and buffer[length_end] in _DIGITS:
                length_end += 1
            state = ScanState.EXPECT_OPEN_QUOTE

        elif state is ScanState.EXPECT_OPEN_QUOTE:
            if buffer.startswith(opener, length_end):
                content_start = length_end + len(opener)
                state = ScanState.READING_CONTENT
            else:
                # No backtracking into the digits already consumed.
                pos = length_start
                state = ScanState.SEEKING

        elif state is ScanState.READING_CONTENT:
            content_end = buffer.find(terminator, content_start)
            if content_end < 0:
                return
            state = ScanState.EXPECT_CLOSE_QUOTE

        elif state is ScanState.EXPECT_CLOSE_QUOTE:
            pos = content_end + len(terminator)
            if buffer.find(needle, content_start, content_end) >= 0:
                state = ScanState.EMIT
            else:
                state = ScanState.SEEKING

        else:
            yield SerializedToken(
                length_span=(length_start, length_end),
                content_span=(content_start, content_end),
                dialect=dialect,
            )
            state = ScanState.SEEKING
