"""Dump file reading, backups, and atomic in-place rewrites."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path

from dump_far.errors import DumpIOError
from dump_far.options import FarOptions
from dump_far.pipeline import ReplacementSpec, ReplaceSummary, run_pipeline

logger = logging.getLogger(__name__)

_ATOMIC_REPLACE_MAX_RETRIES = 8
_ATOMIC_REPLACE_RETRY_SECONDS = 0.01


def _replace_file_with_retry(src: Path, dst: Path) -> None:
    """Replace *dst* with *src*, retrying on transient Windows file-lock races."""
    last_error: OSError | None = None
    for attempt in range(_ATOMIC_REPLACE_MAX_RETRIES):
        try:
            src.replace(dst)
            return
        except PermissionError as exc:
            last_error = exc
        except OSError as exc:
            if exc.errno != 13:
                raise
            last_error = exc
        if attempt < _ATOMIC_REPLACE_MAX_RETRIES - 1:
            time.sleep(_ATOMIC_REPLACE_RETRY_SECONDS * (attempt + 1))
    if last_error is not None:
        raise last_error


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write *data* through a sibling temp file so readers never see a partial dump."""
    fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.", suffix=".tmp", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        with suppress(OSError):
            shutil.copymode(path, tmp_path)
        _replace_file_with_retry(tmp_path, path)
    finally:
        with suppress(OSError):
            tmp_path.unlink(missing_ok=True)


def read_dump(path: Path) -> bytes:
    """Return the raw bytes of the dump at *path*."""
    try:
        return path.read_bytes()
    except OSError as exc:
        raise DumpIOError(f"Could not read {path}: {exc}") from exc


def backup_path_for(path: Path, backup_ext: str) -> Path:
    return path.with_name(path.name + backup_ext)


def create_backup(path: Path, backup_ext: str) -> Path | None:
    """Copy *path* next to itself with *backup_ext* appended; ``""`` skips it."""
    if not backup_ext:
        return None
    target = backup_path_for(path, backup_ext)
    try:
        shutil.copy2(path, target)
    except OSError as exc:
        raise DumpIOError(
            f"The backup file could not be created ({target}): {exc}. Replacement aborted."
        ) from exc
    logger.info("Backup written to %s", target)
    return target


@dataclass(frozen=True, slots=True)
class FileRunResult:
    """Outcome of running the pipeline against a file on disk."""

    path: Path
    summary: ReplaceSummary
    backup_path: Path | None = None
    written: bool = False


def apply_to_file(path: Path, spec: ReplacementSpec, options: FarOptions) -> FileRunResult:
    """Run the find-and-replace pipeline against *path*.

    In preview mode the result is computed but nothing touches the disk.
    Otherwise the backup is made first; if it fails, the dump is left as is.
    """
    path = Path(path)
    original = read_dump(path)
    result = run_pipeline(original, spec, options.source_type, options.encoding)

    if options.preview:
        logger.debug("Preview mode; %s left untouched", path)
        return FileRunResult(path=path, summary=result.summary)

    backup = create_backup(path, options.backup_ext)
    if result.buffer == original:
        logger.info("No occurrences of the search text in %s; file unchanged", path)
        return FileRunResult(path=path, summary=result.summary, backup_path=backup)

    try:
        atomic_write_bytes(path, result.buffer)
    except OSError as exc:
        raise DumpIOError(f"Could not write {path}: {exc}") from exc
    logger.info(
        "Updated %s: %d substitution(s), %d length field(s) repaired",
        path,
        result.summary.substitutions,
        result.summary.repaired_tokens,
    )
    return FileRunResult(path=path, summary=result.summary, backup_path=backup, written=True)
