"""CLI entrypoint for dump-far."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from dump_far.encoding_context import supported_encoding_names
from dump_far.errors import ConfigurationError, DumpIOError
from dump_far.file_io import FileRunResult, apply_to_file
from dump_far.options import FarOptions
from dump_far.pipeline import ReplacementSpec
from dump_far.scanner import Dialect


def _load_dotenv() -> None:
    """Load .env from cwd or its parent so DUMP_FAR_* defaults are picked up."""
    for dir_ in (Path.cwd(), Path.cwd().parent):
        env_file = dir_ / ".env"
        if env_file.is_file():
            load_dotenv(env_file)
            return


EPILOG = """\
examples:
  Domain replacement with a backup file "dump.sql.old":
    dump-far --backup-ext=".old" "http://old.domain.ext" "http://new.domain.ext" dumps/dump.sql

  Raw PHP serialized data, no backup:
    dump-far --source-type=raw --backup-ext="" "old" "new" data.txt

Escape shell specials in SEARCH and REPLACE ("a\\$b", "a\\"b", 'a!b').
"""


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the command-line parser."""
    p = argparse.ArgumentParser(
        prog="dump-far",
        description=(
            "dump-far - find and replace in a database dump, fixing the lengths "
            "of PHP serialized strings."
        ),
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("search", nargs="?", default=None, help="Literal text to find.")
    p.add_argument("replace", nargs="?", default=None, help="Replacement text.")
    p.add_argument("file", nargs="?", default=None, help="Dump file to edit in place.")
    p.add_argument(
        "--backup-ext",
        type=str,
        default=None,
        help='Extension of the backup copy made before writing (default: .bak; "" disables).',
    )
    p.add_argument(
        "--encoding",
        type=str,
        default=None,
        help=(
            "Encoding used to count serialized string lengths (default: UTF-8). "
            "See --list-encodings."
        ),
    )
    p.add_argument(
        "--source-type",
        choices=[item.value for item in Dialect],
        default=None,
        help=(
            'backslashed: strings delimited by \\" as in MySQL dumps, ex: s:5:\\"hello\\"; '
            'raw: plain PHP serialize output, ex: s:5:"hello" (default: backslashed).'
        ),
    )
    p.add_argument(
        "--preview",
        action="store_true",
        help='Like "verbose" but without writing anything.',
    )
    p.add_argument(
        "--json",
        action="store_true",
        help="Print the run summary as JSON.",
    )
    p.add_argument(
        "--list-encodings",
        action="store_true",
        help="List the supported encodings and exit.",
    )
    p.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show options and arguments, and enable DEBUG logging.",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run the replacement."""
    _load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)
    # -- Logging setup -------------------------------------------------------
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.list_encodings:
        for name in supported_encoding_names():
            print(name)
        return 0

    if args.search is None or args.replace is None or args.file is None:
        parser.print_help()
        return 1

    try:
        options = FarOptions.from_env(
            backup_ext=args.backup_ext,
            encoding=args.encoding,
            source_type=args.source_type,
            preview=args.preview or None,
            verbose=args.verbose or None,
        )
        spec = _build_spec(args.search, args.replace)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    try:
        result = apply_to_file(Path(args.file), spec, options)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except DumpIOError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(_result_payload(result), indent=2))
    elif options.preview or options.verbose:
        _print_run_report(options, args.search, args.replace, args.file, result)
    return 0


def _build_spec(search: str, replace: str) -> ReplacementSpec:
    """Turn command-line text back into the bytes the shell passed in.

    The dump is matched byte for byte; ``--encoding`` only decides how string
    lengths are counted.
    """
    return ReplacementSpec(search=os.fsencode(search), replace=os.fsencode(replace))


def _result_payload(result: FileRunResult) -> dict[str, object]:
    payload: dict[str, object] = result.summary.model_dump(mode="json")
    payload["file"] = str(result.path)
    payload["backup"] = str(result.backup_path) if result.backup_path else None
    payload["written"] = result.written
    return payload


def _print_run_report(
    options: FarOptions,
    search: str,
    replace: str,
    file: str,
    result: FileRunResult,
) -> None:
    """Print options, arguments, and what the run did."""
    print("\n  Options")
    print("  " + "-" * 58)
    for key, value in options.describe():
        print(f"    {key:<12}= {value}")

    print("\n  Arguments")
    print("  " + "-" * 58)
    print(f"    {'search':<12}= {search}")
    print(f"    {'replace':<12}= {replace}")
    print(f"    {'file':<12}= {file}")

    summary = result.summary
    print("\n  " + "-" * 58)
    print(f"  Substitutions:   {summary.substitutions}")
    print(f"  Lengths fixed:   {summary.repaired_tokens}")
    print(f"  Size:            {summary.input_bytes} -> {summary.output_bytes} bytes")
    if options.preview:
        print("  Written:         no (preview)")
    else:
        print(f"  Written:         {'yes' if result.written else 'no'}")
        if result.backup_path is not None:
            print(f"  Backup:          {result.backup_path}")
    print()


if __name__ == "__main__":
    sys.exit(main())
