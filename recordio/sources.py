"""Readers that draw records from record lists, file lists and reader factories."""

from __future__ import annotations

import dataclasses
from typing import Callable, Iterable, Iterator

from .fileinfo import FileInfo
from .reader import EmptyReader, Record, RecordReader, ReaderOptions, open_reader


class RecordsReader(RecordReader):
    """Reader over records already held in memory.

    When the options carry a reducer, runs of consecutive records that
    ``compare`` finds equal to the first of the run are reduced together.
    """

    def __init__(
        self, records: Iterable[Record], options: ReaderOptions | None = None
    ) -> None:
        super().__init__(options)
        self._records: list[Record] = list(records)
        self._pos = 0

    def _next(self) -> Record | None:
        reducer = self.options.reducer
        records = self._records
        if reducer is None:
            if self._pos >= len(records):
                return None
            record = records[self._pos]
            self._pos += 1
            return record
        compare = self.options.compare
        assert compare is not None
        while self._pos < len(records):
            start = self._pos
            first = records[start]
            end = start + 1
            while end < len(records) and not compare(first, records[end]):
                end += 1
            self._pos = end
            result = reducer(records[start:end])
            if result is not None:
                return result
        return None


class _ChainReader(RecordReader):
    """Reads each sub-reader in turn until the supply of readers runs out."""

    def __init__(self, options: ReaderOptions | None = None) -> None:
        super().__init__(options)
        self._sub: RecordReader | None = None

    def _open_next(self) -> RecordReader | None:
        return None

    def _next(self) -> Record | None:
        while True:
            if self._sub is None:
                self._sub = self._open_next()
                if self._sub is None:
                    return None
            record = self._sub.advance()
            if record is not None:
                return record
            self._sub.close()
            self._sub = None

    def _release(self) -> None:
        if self._sub is not None:
            self._sub.close()
            self._sub = None


class ListReader(_ChainReader):
    """Reads the files of a list one after another.

    Empty files are skipped; each file's records carry that file's tag.
    """

    def __init__(
        self, files: Iterable[FileInfo], options: ReaderOptions | None = None
    ) -> None:
        super().__init__(options)
        self._files: Iterator[FileInfo] = iter(
            [dataclasses.replace(fi) for fi in files if fi.size]
        )

    def _open_next(self) -> RecordReader | None:
        info = next(self._files, None)
        if info is None:
            return None
        opts = dataclasses.replace(self.options)
        if info.size < opts.buffer_size:
            opts.buffer_size = info.size
        opts.tag = info.tag
        return open_reader(info.filename, opts)

    def _release(self) -> None:
        super()._release()
        self._files = iter(())


class CallbackReader(_ChainReader):
    """Reads the readers that ``factory`` returns until it returns None."""

    def __init__(self, factory: Callable[[], RecordReader | None]) -> None:
        super().__init__()
        self._factory: Callable[[], RecordReader | None] | None = factory

    def _open_next(self) -> RecordReader | None:
        if self._factory is None:
            return None
        reader = self._factory()
        if reader is None:
            self._factory = None
        return reader

    def _release(self) -> None:
        super()._release()
        self._factory = None


def reader_from_list(
    files: Iterable[FileInfo], options: ReaderOptions | None = None
) -> RecordReader:
    """Reader over a list of files; an empty list gives an empty reader."""
    files = list(files)
    if not files:
        return EmptyReader(options)
    return ListReader(files, options)


def reader_from_callback(factory: Callable[[], RecordReader | None]) -> RecordReader:
    """Reader over the readers ``factory`` supplies; empty if it supplies none."""
    first = factory()
    if first is None:
        return EmptyReader()
    supplied = [first]

    def chained() -> RecordReader | None:
        if supplied:
            return supplied.pop()
        return factory()

    return CallbackReader(chained)