"""Encoding-aware unit counting for serialized string lengths.

PHP writes ``s:<N>:"..."`` with ``N`` measured in the units of the encoding
the dump was produced with. Multibyte-aware dumps count characters, so a
two-character UTF-8 string of six bytes is ``s:2``, not ``s:6``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from dump_far.errors import EncodingError

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "UTF-8"

# mbstring-style identifiers mapped to the Python codec that decodes them.
SUPPORTED_ENCODINGS: dict[str, str] = {
    "UTF-8": "utf-8",
    "ASCII": "ascii",
    "8bit": "latin-1",
    "UTF-7": "utf-7",
    "UTF-16": "utf-16-be",
    "UTF-16BE": "utf-16-be",
    "UTF-16LE": "utf-16-le",
    "UTF-32": "utf-32-be",
    "UTF-32BE": "utf-32-be",
    "UTF-32LE": "utf-32-le",
    "ISO-8859-1": "iso8859-1",
    "ISO-8859-2": "iso8859-2",
    "ISO-8859-3": "iso8859-3",
    "ISO-8859-4": "iso8859-4",
    "ISO-8859-5": "iso8859-5",
    "ISO-8859-6": "iso8859-6",
    "ISO-8859-7": "iso8859-7",
    "ISO-8859-8": "iso8859-8",
    "ISO-8859-9": "iso8859-9",
    "ISO-8859-10": "iso8859-10",
    "ISO-8859-13": "iso8859-13",
    "ISO-8859-14": "iso8859-14",
    "ISO-8859-15": "iso8859-15",
    "ISO-8859-16": "iso8859-16",
    "Windows-1251": "cp1251",
    "Windows-1252": "cp1252",
    "Windows-1254": "cp1254",
    "CP866": "cp866",
    "KOI8-R": "koi8-r",
    "KOI8-U": "koi8-u",
    "SJIS": "shift_jis",
    "CP932": "cp932",
    "EUC-JP": "euc_jp",
    "ISO-2022-JP": "iso2022_jp",
    "EUC-KR": "euc_kr",
    "UHC": "cp949",
    "BIG-5": "big5",
    "CP950": "cp950",
    "EUC-CN": "gb2312",
    "CP936": "gbk",
    "GB18030": "gb18030",
    "HZ": "hz",
}

# Common spellings accepted on the command line.
_ALIASES: dict[str, str] = {
    "utf8": "UTF-8",
    "us-ascii": "ASCII",
    "latin1": "ISO-8859-1",
    "latin-1": "ISO-8859-1",
    "cp1251": "Windows-1251",
    "cp1252": "Windows-1252",
    "cp1254": "Windows-1254",
    "shift_jis": "SJIS",
    "big5": "BIG-5",
    "cp949": "UHC",
}

_CANONICAL_BY_KEY: dict[str, str] = {name.lower(): name for name in SUPPORTED_ENCODINGS}


@dataclass(frozen=True, slots=True)
class EncodingContext:
    """A resolved encoding identifier and the codec that counts its units."""

    name: str
    codec: str

    def count_units(self, data: bytes) -> int:
        """Return the number of characters *data* holds under this encoding.

        Undecodable sequences count as one unit per replacement character, so
        the result is defined for any input.
        """
        if not data:
            return 0
        return len(data.decode(self.codec, errors="replace"))


def supported_encoding_names() -> list[str]:
    """Return the canonical identifiers accepted by :func:`resolve_encoding`."""
    return list(SUPPORTED_ENCODINGS)


def canonical_encoding_name(name: str) -> str:
    """Return the canonical spelling of *name* or raise :class:`EncodingError`."""
    key = str(name or "").strip().lower()
    canonical = _CANONICAL_BY_KEY.get(key) or _ALIASES.get(key)
    if canonical is None:
        raise EncodingError(
            f"The encoding is not supported: {name!r}. "
            "Run 'dump-far --list-encodings' for the supported list."
        )
    return canonical


def resolve_encoding(encoding: str | EncodingContext) -> EncodingContext:
    """Return an :class:`EncodingContext` for an identifier or pass one through."""
    if isinstance(encoding, EncodingContext):
        return encoding
    canonical = canonical_encoding_name(encoding)
    context = EncodingContext(name=canonical, codec=SUPPORTED_ENCODINGS[canonical])
    logger.debug("Resolved encoding %r to codec %s", encoding, context.codec)
    return context


def count_units(data: bytes, encoding: str | EncodingContext = DEFAULT_ENCODING) -> int:
    """Count the units of *data* under *encoding*."""
    return resolve_encoding(encoding).count_units(data)
