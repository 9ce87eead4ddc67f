"""File metadata, directory listing, record-format codes and whole-file reads."""

from __future__ import annotations

import hashlib
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

_MASK64 = (1 << 64) - 1


@dataclass
class FileInfo:
    """A regular file's name, size, modification time and a caller tag."""

    filename: str
    size: int = 0
    last_modified: int = 0
    tag: int = 0


def has_extension(filename: str | None, extension: str | None) -> bool:
    """Check the extension of the last path component.

    An empty or missing extension matches names without any dot.
    """
    if filename is None:
        return False
    base = filename.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    if not extension:
        return dot == -1
    if dot == -1:
        return False
    return base[dot + 1:] == extension


def _char_code(delim: int | str) -> int:
    if isinstance(delim, str):
        if len(delim) != 1:
            raise ValueError("delimiter must be a single character")
        return ord(delim)
    return delim


def delimiter(delim: int | str) -> int:
    """Format code for records separated by ``delim``."""
    return -(_char_code(delim) + 1)


def csv_delimiter(delim: int | str) -> int:
    """Format code for delimited records where double quotes group text."""
    return -(_char_code(delim) + 257)


def fixed(size: int) -> int:
    """Format code for fixed-size records."""
    return size


def prefix() -> int:
    """Format code for records prefixed by a 4-byte length."""
    return 0


def make_directory(path: str | os.PathLike) -> bool:
    """Create ``path`` and its parents if needed, then set mode 0755."""
    try:
        os.makedirs(path, exist_ok=True)
        os.chmod(path, 0o755)
    except OSError:
        return False
    return True


def make_path_valid(filename: str) -> bool:
    """Make sure the directory part of ``filename`` exists."""
    directory, sep, _ = filename.rpartition("/")
    if not sep:
        return True
    if not directory:
        return True
    return make_directory(directory)


def _hash64(data: bytes) -> int:
    return int.from_bytes(hashlib.blake2b(data, digest_size=8).digest(), "little") & _MASK64


def _as_bytes(data: bytes | str) -> bytes:
    return data.encode() if isinstance(data, str) else bytes(data)


def hash_filename(filename: str) -> int:
    """Stable 64-bit hash of a file name."""
    return _hash64(_as_bytes(filename))


def hash_partition(data: bytes | str, num_partitions: int, offset: int = 0) -> int:
    """Partition index for a record, hashing the bytes from ``offset`` on."""
    if num_partitions <= 0:
        raise ValueError("num_partitions must be positive")
    payload = _as_bytes(data)[offset:] + b"\x00"
    return _hash64(payload) % num_partitions


def _regular_stat(filename: str | os.PathLike | None) -> os.stat_result | None:
    if filename is None:
        return None
    try:
        sb = os.stat(filename)
    except OSError:
        return None
    return sb if stat.S_ISREG(sb.st_mode) else None


def file_info(filename: str | os.PathLike | None) -> FileInfo | None:
    """Metadata of a regular file, or None when it is not one."""
    sb = _regular_stat(filename)
    if sb is None:
        return None
    return FileInfo(os.fspath(filename), sb.st_size, int(sb.st_mtime), 0)


def is_directory(path: str | os.PathLike | None) -> bool:
    """True when ``path`` is a directory."""
    if path is None:
        return False
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError:
        return False


def is_file(path: str | os.PathLike | None) -> bool:
    """True when ``path`` is a regular file."""
    return _regular_stat(path) is not None


def modified(filename: str | os.PathLike | None) -> int:
    """Modification time of a regular file, 0 when it is not one."""
    sb = _regular_stat(filename)
    return int(sb.st_mtime) if sb else 0


def file_size(filename: str | os.PathLike | None) -> int:
    """Size of a regular file, 0 when it is not one."""
    sb = _regular_stat(filename)
    return sb.st_size if sb else 0


def file_exists(filename: str | os.PathLike | None) -> bool:
    """True when ``filename`` is an existing regular file."""
    return _regular_stat(filename) is not None


def find_file_in_parents(path: str | None) -> str | None:
    """Look for ``path`` in the working directory and its parents.

    The filesystem root is searched only when it is the working directory.
    """
    if not path:
        return None
    cwd = Path.cwd()
    directories = [cwd] + [p for p in cwd.parents if p.parent != p]
    for directory in directories:
        candidate = os.path.join(str(directory), path)
        if os.path.exists(candidate):
            return candidate
    return None


def partition_file_info(
    inputs: Iterable[FileInfo],
    partition: int,
    num_partitions: int,
    partition_cb: Callable[[FileInfo, int], int],
) -> list[FileInfo]:
    """Files for which ``partition_cb(info, num_partitions)`` is ``partition``."""
    return [fi for fi in inputs if partition_cb(fi, num_partitions) == partition]


def _walk(path: str, file_valid: Callable[[str], bool] | None, out: list[FileInfo]) -> None:
    try:
        names = sorted(os.listdir(path or "."))
    except OSError:
        return
    for name in names:
        if name.startswith("."):
            continue
        filename = f"{path}/{name}" if path else name
        info = file_info(filename)
        if info is None:
            if is_directory(filename):
                _walk(filename, file_valid, out)
        elif file_valid is None or file_valid(filename):
            out.append(info)


def list_files(
    path: str | os.PathLike | None, file_valid: Callable[[str], bool] | None = None
) -> list[FileInfo]:
    """Recursively list regular files under ``path``, skipping dot entries."""
    result: list[FileInfo] = []
    _walk(os.fspath(path) if path is not None else "", file_valid, result)
    return result


def sort_by_last_modified(files: Iterable[FileInfo], descending: bool = False) -> list[FileInfo]:
    """Files ordered by modification time."""
    return sorted(files, key=lambda fi: fi.last_modified, reverse=descending)


def sort_by_size(files: Iterable[FileInfo], descending: bool = False) -> list[FileInfo]:
    """Files ordered by size."""
    return sorted(files, key=lambda fi: fi.size, reverse=descending)


def sort_by_filename(files: Iterable[FileInfo], descending: bool = False) -> list[FileInfo]:
    """Files ordered by name."""
    return sorted(files, key=lambda fi: fi.filename, reverse=descending)


def read_file(filename: str | os.PathLike) -> bytes:
    """Whole contents of a file."""
    with open(filename, "rb") as fh:
        return fh.read()


def read_chunk(filename: str | os.PathLike, offset: int, length: int) -> bytes:
    """Up to ``length`` bytes from ``offset``; raises EOFError if none are there."""
    if length <= 0:
        raise ValueError("length must be positive")
    with open(filename, "rb") as fh:
        fh.seek(offset)
        data = fh.read(length)
    if not data:
        raise EOFError(f"no data at offset {offset} in {os.fspath(filename)}")
    return data


def read_chunk_exact(filename: str | os.PathLike, offset: int, length: int) -> bytes:
    """Exactly ``length`` bytes from ``offset``; raises EOFError when short."""
    if length <= 0:
        raise ValueError("length must be positive")
    with open(filename, "rb") as fh:
        fh.seek(offset)
        data = fh.read(length)
    if len(data) != length:
        raise EOFError(f"expected {length} bytes, got {len(data)}")
    return data


def read_file_aligned(filename: str | os.PathLike, alignment: int) -> bytes:
    """Whole file, whose size must be a multiple of ``alignment``."""
    if alignment <= 0:
        raise ValueError("alignment must be positive")
    with open(filename, "rb") as fh:
        data = fh.read()
    if len(data) % alignment:
        raise ValueError("File size is not a multiple of the alignment")
    return data