"""Record readers over files, descriptors and in-memory buffers."""

from __future__ import annotations

import dataclasses
import gzip
import io
import os
import zlib
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterable, Iterator, Sequence

from .fileinfo import file_size, has_extension

_QUOTE = ord('"')


@dataclass(frozen=True)
class Record:
    """One record: its bytes and the tag of the input it came from."""

    record: bytes
    tag: int = 0

    @property
    def length(self) -> int:
        return len(self.record)


Compare = Callable[[Record, Record], int]
Reducer = Callable[[Sequence[Record]], "Record | None"]


@dataclass
class ReaderOptions:
    """How a reader splits its input into records.

    ``format`` is a code from :func:`recordio.fileinfo.delimiter`,
    :func:`~recordio.fileinfo.csv_delimiter`, :func:`~recordio.fileinfo.fixed`
    or :func:`~recordio.fileinfo.prefix`.  When ``reducer`` is set,
    consecutive records for which ``compare`` returns 0 are handed to it
    together and it returns the record to emit, or None to emit nothing.
    """

    buffer_size: int = 128 * 1024
    format: int = 0
    full_record_required: bool = True
    abort_on_error: bool = False
    abort_on_partial_record: bool = False
    abort_on_file_not_found: bool = False
    abort_on_file_empty: bool = False
    tag: int = 0
    gz: bool = False
    compare: Compare | None = field(default=None, compare=False)
    reducer: Reducer | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.reducer is not None and self.compare is None:
            raise ValueError("a reducer needs a compare function")

    def allow_partial_records(self) -> None:
        """Let a trailing record without its delimiter through."""
        self.full_record_required = False
        self.abort_on_partial_record = False


def keep_first(records: Sequence[Record]) -> Record:
    """Reducer that keeps the first record of each group."""
    return records[0]


class RecordReader:
    """Base cursor: advance one record at a time, with one-step push back."""

    def __init__(self, options: ReaderOptions | None = None) -> None:
        self.options = dataclasses.replace(options) if options else ReaderOptions()
        self._current: Record | None = None
        self._group: list[Record] = []
        self._pending: tuple[Record, list[Record]] | None = None
        self._exhausted = False
        self._closed = False
        self._limit: int | None = None
        self._taken = 0

    # Hooks for subclasses.
    def _next(self) -> Record | None:
        return None

    def _next_unique(self) -> list[Record]:
        record = self._pull()
        return [record] if record is not None else []

    def _release(self) -> None:
        pass

    # Internal helpers.
    def _pull(self) -> Record | None:
        if self._limit is not None:
            self._taken += 1
            if self._taken > self._limit:
                return None
        return self._next()

    def _exhaust(self) -> None:
        self._current = None
        self._group = []
        self._pending = None
        self._exhausted = True

    def _replay(self) -> Record:
        assert self._pending is not None
        self._current, self._group = self._pending
        self._pending = None
        return self._current

    # Public interface.
    def advance(self) -> Record | None:
        """Next record, or None once the input is used up."""
        if self._pending is not None:
            return self._replay()
        if self._exhausted or self._closed:
            return None
        record = self._pull()
        if record is None:
            self._exhaust()
            return None
        self._current = record
        self._group = [record]
        return record

    def current(self) -> Record | None:
        """The record returned by the last advance."""
        return self._current

    def reset(self) -> None:
        """Push the current record back so the next advance returns it again."""
        if self._current is not None:
            self._pending = (self._current, self._group)
            self._current = None
            self._group = []

    def advance_unique(self) -> list[Record]:
        """Next group of equal records; a single record for plain readers."""
        if self._pending is not None:
            self._replay()
            return list(self._group)
        if self._exhausted or self._closed:
            return []
        group = self._next_unique()
        if not group:
            self._exhaust()
            return []
        self._current = group[0]
        self._group = list(group)
        return list(group)

    def advance_group(self, compare: Compare) -> list[Record]:
        """Consecutive records for which ``compare(first, record)`` is 0."""
        first = self.advance()
        if first is None:
            return []
        group = [first]
        while (record := self.advance()) is not None:
            if compare(first, record):
                self.reset()
                break
            group.append(record)
        return group

    def limit(self, limit: int) -> None:
        """Stop after ``limit`` more records."""
        self._limit = limit
        self._taken = 0

    def count(self) -> int:
        """Consume the remaining records, close the reader and return how many."""
        total = 0
        while self.advance() is not None:
            total += 1
        self.close()
        return total

    def close(self) -> None:
        """Release the input; later advances return None."""
        if not self._closed:
            self._closed = True
            self._exhaust()
            self._release()

    def __iter__(self) -> Iterator[Record]:
        while (record := self.advance()) is not None:
            yield record

    def __enter__(self) -> "RecordReader":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class EmptyReader(RecordReader):
    """A reader with no records."""


def _find_delimiter(buf: bytearray, start: int, delim: int, csv: bool) -> int:
    if not csv:
        return buf.find(bytes((delim,)), start)
    i, n = start, len(buf)
    while i < n:
        c = buf[i]
        if c == _QUOTE:
            i += 1
            while True:
                j = buf.find(b'"', i)
                if j == -1:
                    return -1
                if j + 1 < n and buf[j + 1] == _QUOTE:
                    i = j + 2
                    continue
                i = j + 1
                break
        elif c == delim:
            return i
        else:
            i += 1
    return -1


class _ByteSource:
    """Buffered byte input with exact and delimited reads."""

    def __init__(self, stream: BinaryIO, buffer_size: int, strict: bool) -> None:
        self._stream = stream
        self._size = max(1, buffer_size)
        self._strict = strict
        self._buf = bytearray()
        self._pos = 0
        self.eof = False

    def _fill(self) -> bool:
        if self.eof:
            return False
        try:
            chunk = self._stream.read(self._size)
        except (OSError, EOFError, zlib.error):
            if self._strict:
                raise
            chunk = b""
        if not chunk:
            self.eof = True
            return False
        if self._pos:
            del self._buf[: self._pos]
            self._pos = 0
        self._buf += chunk
        return True

    def read(self, n: int) -> bytes:
        while len(self._buf) - self._pos < n and self._fill():
            pass
        data = bytes(self._buf[self._pos : self._pos + n])
        self._pos += len(data)
        return data

    def read_delimited(self, delim: int, csv: bool) -> tuple[bytes | None, bytes]:
        """A delimited record, or (None, leftover bytes) at end of input."""
        while True:
            idx = _find_delimiter(self._buf, self._pos, delim, csv)
            if idx >= 0:
                record = bytes(self._buf[self._pos : idx])
                self._pos = idx + 1
                return record, b""
            if not self._fill():
                break
        rest = bytes(self._buf[self._pos :])
        self._pos = len(self._buf)
        return None, rest

    def close(self) -> None:
        self._stream.close()


class StreamReader(RecordReader):
    """Reads records from a binary stream in the configured format."""

    def __init__(
        self,
        stream: BinaryIO,
        options: ReaderOptions | None = None,
        *,
        owned: Iterable[BinaryIO] = (),
    ) -> None:
        super().__init__(options)
        opts = self.options
        self._source = _ByteSource(stream, opts.buffer_size, opts.abort_on_error)
        self._owned = list(owned)
        self._lookahead: Record | None = None
        self._csv = False
        self._delim = 0
        if opts.format < 0:
            delim = -opts.format - 1
            if delim >= 256:
                self._csv = True
                delim -= 256
            self._delim = delim

    def _partial(self, data: bytes) -> None:
        if self.options.abort_on_partial_record:
            raise ValueError(f"partial record of {len(data)} bytes at end of input")

    def _read_raw(self) -> bytes | None:
        fmt = self.options.format
        src = self._source
        if fmt < 0:
            record, rest = src.read_delimited(self._delim, self._csv)
            if record is not None:
                return record
            if not rest:
                return None
            if not self.options.full_record_required:
                return rest
            self._partial(rest)
            return None
        if fmt > 0:
            data = src.read(fmt)
            if len(data) == fmt:
                return data
            if data:
                self._partial(data)
            return None
        header = src.read(4)
        if len(header) < 4:
            if header:
                self._partial(header)
            return None
        length = int.from_bytes(header, "little")
        if length == 0:
            return b""
        data = src.read(length)
        if len(data) != length:
            self._partial(data)
            return None
        return data

    def _take(self) -> Record | None:
        if self._lookahead is not None:
            record, self._lookahead = self._lookahead, None
            return record
        data = self._read_raw()
        return None if data is None else Record(data, self.options.tag)

    def _next(self) -> Record | None:
        reducer = self.options.reducer
        if reducer is None:
            return self._take()
        compare = self.options.compare
        assert compare is not None
        while True:
            first = self._take()
            if first is None:
                return None
            group = [first]
            while (record := self._take()) is not None:
                if compare(first, record):
                    self._lookahead = record
                    break
                group.append(record)
            result = reducer(group)
            if result is not None:
                return result

    def _release(self) -> None:
        self._source.close()
        for resource in self._owned:
            resource.close()


def _options(options: ReaderOptions | None) -> ReaderOptions:
    return dataclasses.replace(options) if options else ReaderOptions()


def open_reader(
    filename: str | os.PathLike, options: ReaderOptions | None = None
) -> RecordReader:
    """Reader over a file; ``.gz`` files are decompressed on the fly.

    A missing file gives an empty reader unless ``abort_on_file_not_found``.
    """
    opts = _options(options)
    name = os.fspath(filename)
    if has_extension(name, "lz4"):
        raise ValueError(f"lz4-compressed input is not supported: {name}")
    if opts.abort_on_file_empty and os.path.isfile(name) and file_size(name) == 0:
        raise EOFError(f"file is empty: {name}")
    try:
        stream = gzip.open(name, "rb") if has_extension(name, "gz") else open(name, "rb")
    except OSError:
        if opts.abort_on_file_not_found:
            raise
        return EmptyReader(opts)
    return StreamReader(stream, opts)


def quick_open(
    filename: str | os.PathLike, format: int, buffer_size: int = 128 * 1024
) -> RecordReader:
    """Reader over a file with just a format and a buffer size."""
    return open_reader(filename, ReaderOptions(buffer_size=buffer_size, format=format))


def reader_from_buffer(
    data: bytes | bytearray | memoryview, options: ReaderOptions | None = None
) -> RecordReader:
    """Reader over bytes held in memory."""
    opts = _options(options)
    if opts.gz:
        raise ValueError("gzip is not supported for in-memory buffers")
    if opts.abort_on_file_empty and len(data) == 0:
        raise EOFError("buffer is empty")
    return StreamReader(io.BytesIO(bytes(data)), opts)


def reader_from_fd(
    fd: int, can_close: bool = True, options: ReaderOptions | None = None
) -> RecordReader:
    """Reader over an open file descriptor, closed on close if ``can_close``."""
    opts = _options(options)
    raw = os.fdopen(fd, "rb", closefd=can_close)
    if opts.gz:
        return StreamReader(gzip.GzipFile(fileobj=raw, mode="rb"), opts, owned=[raw])
    return StreamReader(raw, opts)


def empty_reader() -> RecordReader:
    """A reader with no records."""
    return EmptyReader()