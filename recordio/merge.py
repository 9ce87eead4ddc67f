"""Merge of several sorted record readers into one ordered stream."""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field

from .reader import Compare, Record, RecordReader, ReaderOptions, Reducer
from .reader import keep_first as _keep_first


@dataclass(eq=False)
class _Entry:
    """A sub-reader waiting in the heap together with its current record."""

    record: Record
    order: int
    reader: RecordReader
    compare: Compare = field(repr=False)

    def __lt__(self, other: "_Entry") -> bool:
        result = self.compare(self.record, other.record)
        if result:
            return result < 0
        return self.order < other.order


class MergeReader(RecordReader):
    """Reads several readers, each sorted by ``compare``, as one sorted stream.

    Records that compare equal come out in the order their readers were added.
    With a reducer set, each run of equal records is handed to it and it
    returns the record to emit, or None to emit nothing for that run.
    """

    def __init__(self, compare: Compare, options: ReaderOptions | None = None) -> None:
        super().__init__(options)
        self._compare = compare
        self._reducer: Reducer | None = None
        self._heap: list[_Entry] = []
        self._active: list[_Entry] = []
        self._order = itertools.count()

    def add(self, reader: RecordReader | None, tag: int = 0) -> None:
        """Add a sorted reader whose records are tagged with ``tag``.

        A reader without records is closed and dropped.
        """
        if reader is None:
            return
        if self._closed:
            reader.close()
            return
        reader.options.tag = tag
        reader.reset()
        record = reader.advance()
        if record is None:
            reader.close()
            return
        # Readers already handed out go back with the record they hold.
        for entry in self._active:
            heapq.heappush(self._heap, entry)
        self._active = []
        heapq.heappush(
            self._heap, _Entry(record, next(self._order), reader, self._compare)
        )
        self._exhausted = False

    def set_reducer(self, reducer: Reducer | None) -> None:
        """Reduce each run of equal records with ``reducer``."""
        self._reducer = reducer

    def keep_first(self) -> None:
        """Emit only the first record of each run of equal records."""
        self._reducer = _keep_first

    def _refill(self) -> None:
        for entry in self._active:
            record = entry.reader.advance()
            if record is None:
                entry.reader.close()
                continue
            entry.record = record
            heapq.heappush(self._heap, entry)
        self._active = []

    def _take_one(self) -> Record | None:
        self._refill()
        if not self._heap:
            return None
        entry = heapq.heappop(self._heap)
        self._active = [entry]
        return entry.record

    def _take_run(self) -> list[Record]:
        self._refill()
        if not self._heap:
            return []
        first = heapq.heappop(self._heap)
        run = [first]
        while self._heap and not self._compare(first.record, self._heap[0].record):
            run.append(heapq.heappop(self._heap))
        self._active = run
        return [entry.record for entry in run]

    def _next(self) -> Record | None:
        if self._reducer is None:
            return self._take_one()
        while True:
            run = self._take_run()
            if not run:
                return None
            result = self._reducer(run)
            if result is not None:
                return result

    def _next_unique(self) -> list[Record]:
        return self._take_run()

    def _release(self) -> None:
        for entry in self._active + self._heap:
            entry.reader.close()
        self._active = []
        self._heap = []