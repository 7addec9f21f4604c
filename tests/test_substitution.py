"""Literal whole-buffer replacement."""

from __future__ import annotations

import pytest

from dump_far.errors import ConfigurationError
from dump_far.substitution import count_occurrences, replace_all

pytestmark = pytest.mark.unit


def test_replace_all_replaces_every_occurrence() -> None:
    assert replace_all(b"a-b-a-b", b"a", b"xyz") == b"xyz-b-xyz-b"


def test_replace_all_without_match_returns_buffer_unchanged() -> None:
    buffer = b's:5:"hello";'

    assert replace_all(buffer, b"absent", b"x") is buffer


def test_replace_all_does_not_rescan_inserted_text() -> None:
    assert replace_all(b"aa", b"a", b"aa") == b"aaaa"


def test_replace_all_matches_non_overlapping_left_to_right() -> None:
    assert replace_all(b"aaa", b"aa", b"b") == b"ba"
    assert count_occurrences(b"aaa", b"aa") == 1


def test_replace_all_treats_pattern_characters_literally() -> None:
    assert replace_all(b"a.b a*b", b".", b"!") == b"a!b a*b"
    assert replace_all(b"s:\\\"x", b'\\"', b"Q") == b"s:Qx"


def test_replace_all_can_delete_text() -> None:
    assert replace_all(b"keep-drop-keep", b"-drop", b"") == b"keep-keep"


def test_empty_search_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        replace_all(b"abc", b"", b"x")
    with pytest.raises(ConfigurationError):
        count_occurrences(b"abc", b"")
