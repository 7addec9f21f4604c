"""Tests for the dump-far command-line entrypoint."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

import dump_far.__main__ as main_module

pytestmark = pytest.mark.integration

RAW_DUMP = b'a:2:{s:3:"url";s:19:"http://old.test.com";}'


def _write(tmp_path: Path, data: bytes) -> Path:
    path = tmp_path / "dump.sql"
    path.write_bytes(data)
    return path


def test_main_entrypoint_source_is_ascii_safe() -> None:
    source_text = Path(main_module.__file__).read_text(encoding="utf-8")
    assert source_text.isascii()


def test_main_prints_help_when_arguments_missing(capsys) -> None:
    rc = main_module.main([])
    captured = capsys.readouterr()
    assert rc == 1
    assert "usage: dump-far" in captured.out


def test_main_lists_encodings(capsys) -> None:
    rc = main_module.main(["--list-encodings"])
    lines = capsys.readouterr().out.splitlines()
    assert rc == 0
    assert lines[0] == "UTF-8"
    assert "Windows-1252" in lines


def test_main_replaces_raw_dump_in_place_with_backup(tmp_path: Path) -> None:
    path = _write(tmp_path, RAW_DUMP)

    rc = main_module.main(
        [
            "--source-type=raw",
            "--backup-ext=.old",
            "old.test.com",
            "new.example.org",
            str(path),
        ]
    )

    assert rc == 0
    assert path.read_bytes() == b'a:2:{s:3:"url";s:22:"http://new.example.org";}'
    assert (tmp_path / "dump.sql.old").read_bytes() == RAW_DUMP


def test_main_defaults_to_backslashed_source(tmp_path: Path) -> None:
    path = _write(tmp_path, b's:5:\\"hello\\";')

    rc = main_module.main(["--backup-ext=", "hello", "hi", str(path)])

    assert rc == 0
    assert path.read_bytes() == b's:2:\\"hi\\";'
    assert not (tmp_path / "dump.sql.bak").exists()


def test_main_preview_reports_without_writing(tmp_path: Path, capsys) -> None:
    path = _write(tmp_path, RAW_DUMP)

    rc = main_module.main(
        ["--preview", "--source-type=raw", "old.test.com", "new.example.org", str(path)]
    )
    out = capsys.readouterr().out

    assert rc == 0
    assert path.read_bytes() == RAW_DUMP
    assert not (tmp_path / "dump.sql.bak").exists()
    assert "preview     = true" in out
    assert "search      = old.test.com" in out
    assert "Lengths fixed:   1" in out
    assert "Written:         no (preview)" in out


def test_main_json_summary(tmp_path: Path, capsys) -> None:
    path = _write(tmp_path, RAW_DUMP)

    rc = main_module.main(
        ["--json", "--source-type=raw", "old.test.com", "new.example.org", str(path)]
    )
    payload = json.loads(capsys.readouterr().out)

    assert rc == 0
    assert payload["substitutions"] == 1
    assert payload["repaired_tokens"] == 1
    assert payload["dialect"] == "raw"
    assert payload["encoding"] == "UTF-8"
    assert payload["written"] is True
    assert payload["backup"] == str(tmp_path / "dump.sql.bak")


def test_main_verbose_reports_write_and_backup(tmp_path: Path, capsys) -> None:
    path = _write(tmp_path, RAW_DUMP)

    rc = main_module.main(
        ["--verbose", "--source-type=raw", "old.test.com", "new.example.org", str(path)]
    )
    out = capsys.readouterr().out

    assert rc == 0
    assert "verbose     = true" in out
    assert "Written:         yes" in out
    assert f"Backup:          {tmp_path / 'dump.sql.bak'}" in out
    assert b"s:22:" in path.read_bytes()


def test_main_matches_argument_bytes_in_8bit_mode(tmp_path: Path) -> None:
    path = _write(tmp_path, b's:5:"' + os.fsencode("café") + b'";')

    rc = main_module.main(
        ["--encoding=8bit", "--source-type=raw", "--backup-ext=", "café", "thé", str(path)]
    )

    replaced = os.fsencode("thé")
    assert rc == 0
    assert path.read_bytes() == b's:%d:"' % len(replaced) + replaced + b'";'


def test_main_8bit_accepts_text_outside_latin1(tmp_path: Path) -> None:
    path = _write(tmp_path, b's:3:"abc";')

    rc = main_module.main(
        ["--encoding=8bit", "--source-type=raw", "--backup-ext=", "abc", "日本", str(path)]
    )

    replaced = os.fsencode("日本")
    assert rc == 0
    assert path.read_bytes() == b's:%d:"' % len(replaced) + replaced + b'";'


def test_main_utf16_substitutes_ascii_arguments(tmp_path: Path) -> None:
    path = _write(tmp_path, b's:3:"abc";')

    rc = main_module.main(
        ["--encoding=UTF-16", "--source-type=raw", "--backup-ext=", "abc", "wxyz", str(path)]
    )

    # Four bytes decode to two big-endian UTF-16 code units.
    assert rc == 0
    assert path.read_bytes() == b's:2:"wxyz";'


def test_main_rejects_unknown_encoding(tmp_path: Path, capsys) -> None:
    path = _write(tmp_path, RAW_DUMP)

    rc = main_module.main(["--encoding=klingon", "old", "new", str(path)])

    assert rc == 2
    assert "The encoding is not supported" in capsys.readouterr().err
    assert path.read_bytes() == RAW_DUMP
    assert not (tmp_path / "dump.sql.bak").exists()


def test_main_rejects_empty_search(tmp_path: Path, capsys) -> None:
    path = _write(tmp_path, RAW_DUMP)

    rc = main_module.main(["", "new", str(path)])

    assert rc == 2
    assert "search text must not be empty" in capsys.readouterr().err


def test_main_reports_missing_file(tmp_path: Path, capsys) -> None:
    rc = main_module.main(["old", "new", str(tmp_path / "missing.sql")])

    assert rc == 1
    assert "Could not read" in capsys.readouterr().err


def test_main_uses_environment_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = _write(tmp_path, RAW_DUMP)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DUMP_FAR_SOURCE_TYPE", "raw")
    monkeypatch.setenv("DUMP_FAR_BACKUP_EXT", ".prev")

    rc = main_module.main(["old.test.com", "new.example.org", str(path)])

    assert rc == 0
    assert b"s:22:" in path.read_bytes()
    assert (tmp_path / "dump.sql.prev").exists()


def test_main_loads_dotenv_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = _write(tmp_path, RAW_DUMP)
    (tmp_path / ".env").write_text("DUMP_FAR_SOURCE_TYPE=raw\nDUMP_FAR_BACKUP_EXT=\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    rc = main_module.main(["old.test.com", "new.example.org", str(path)])

    assert rc == 0
    assert b"s:22:" in path.read_bytes()
    assert not (tmp_path / "dump.sql.bak").exists()
