"""Command line tools to list files and dump their newline-delimited records."""

from __future__ import annotations

import argparse
import sys
import time
from typing import Callable, Iterable, Sequence

from .fileinfo import FileInfo, delimiter, has_extension, list_files
from .merge import MergeReader
from .reader import Record, ReaderOptions, open_reader
from .sources import reader_from_list

# Tags given to merged inputs are (argument position * 1000) + file index,
# with the first path counted as position 2.
_FIRST_PATH_POSITION = 2
_TAG_STRIDE = 1000


def extension_filter(extensions: str | Iterable[str]) -> Callable[[str], bool]:
    """Predicate accepting file names with one of ``extensions``.

    ``extensions`` is either a comma separated string or an iterable of
    extensions without the leading dot.
    """
    if isinstance(extensions, str):
        wanted = [ext for ext in extensions.split(",") if ext]
    else:
        wanted = list(extensions)

    def accept(filename: str) -> bool:
        return any(has_extension(filename, ext) for ext in wanted)

    return accept


def _compare_records(a: Record, b: Record) -> int:
    return (a.record > b.record) - (a.record < b.record)


def _compare_records_then_tag(a: Record, b: Record) -> int:
    result = _compare_records(a, b)
    return result if result else a.tag - b.tag


def _text(record: Record) -> str:
    return record.record.decode("utf-8", errors="replace")


def _format_time(timestamp: int) -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(timestamp))


def _files_for(paths: Sequence[str], extensions: str) -> list[list[FileInfo]]:
    accept = extension_filter(extensions)
    return [list_files(path, accept) for path in paths]


def _run_list(args: argparse.Namespace) -> int:
    total_bytes = 0
    total_files = 0
    for files in _files_for(args.paths, args.extensions):
        total_files += len(files)
        for info in files:
            total_bytes += info.size
            print(f"{_format_time(info.last_modified)} {info.size:>20,}\t{info.filename}")
    print(f"{total_bytes:,} byte(s) in {total_files:,} file(s)")
    return 0


def _run_dump(args: argparse.Namespace) -> int:
    options = ReaderOptions(format=delimiter("\n"))
    groups = _files_for(args.paths, args.extensions)

    if args.merge or args.unique or args.by_tag:
        compare = _compare_records_then_tag if args.by_tag else _compare_records
        merged = MergeReader(compare, options)
        if args.unique:
            merged.keep_first()
        for position, files in enumerate(groups, start=_FIRST_PATH_POSITION):
            for index, info in enumerate(files):
                merged.add(open_reader(info.filename, options), position * _TAG_STRIDE + index)
        with merged:
            for record in merged:
                print(f"{record.tag}: {_text(record)}")
        return 0

    for files in groups:
        if args.chain:
            with reader_from_list(files, options) as reader:
                for record in reader:
                    print(_text(record))
            continue
        for info in files:
            with open_reader(info.filename, options) as reader:
                for record in reader:
                    print(_text(record))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recordio", description="List files or dump their lines."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    listing = commands.add_parser("list", help="list matching files with size and time")
    listing.add_argument("extensions", help="a comma delimited list of valid extensions")
    listing.add_argument("paths", nargs="+", metavar="path")
    listing.set_defaults(run=_run_list)

    dump = commands.add_parser("dump", help="print the lines of matching files")
    dump.add_argument("extensions", help="a comma delimited list of valid extensions")
    dump.add_argument("paths", nargs="+", metavar="path")
    mode = dump.add_mutually_exclusive_group()
    mode.add_argument(
        "--chain", action="store_true", help="read each path's files as one stream"
    )
    mode.add_argument(
        "--merge", action="store_true", help="merge sorted files, printing tag and line"
    )
    dump.add_argument(
        "--by-tag", action="store_true", help="order equal lines by their tag (implies --merge)"
    )
    dump.add_argument(
        "--unique", action="store_true", help="keep the first of equal lines (implies --merge)"
    )
    dump.set_defaults(run=_run_dump)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line tool and return its exit status."""
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else list(argv))
    if args.command == "dump" and args.chain and (args.unique or args.by_tag):
        parser.error("--chain cannot be combined with --unique or --by-tag")
    return args.run(args)


if __name__ == "__main__":
    sys.exit(main())