from __future__ import annotations

import pytest

from recordio.fileinfo import FileInfo, delimiter, file_info
from recordio.reader import Record, ReaderOptions, keep_first, reader_from_buffer
from recordio.sources import (
    CallbackReader,
    ListReader,
    RecordsReader,
    reader_from_callback,
    reader_from_list,
)


def _cmp(a: Record, b: Record) -> int:
    return (a.record > b.record) - (a.record < b.record)


def _lines() -> ReaderOptions:
    return ReaderOptions(format=delimiter("\n"))


def _write(path, data: bytes, tag: int) -> FileInfo:
    path.write_bytes(data)
    info = file_info(str(path))
    assert info is not None
    info.tag = tag
    return info


def test_records_reader_yields_in_order():
    records = [Record(b"a", 1), Record(b"b", 2), Record(b"c", 3)]
    reader = RecordsReader(records)
    assert list(reader) == records
    assert reader.advance() is None


def test_records_reader_reducer_keep_first():
    records = [Record(b"a", 1), Record(b"a", 2), Record(b"b", 3), Record(b"b", 4)]
    opts = ReaderOptions(compare=_cmp, reducer=keep_first)
    reader = RecordsReader(records, opts)
    assert list(reader) == [Record(b"a", 1), Record(b"b", 3)]


def test_records_reader_reducer_can_drop_groups():
    records = [Record(b"a"), Record(b"a"), Record(b"b"), Record(b"c"), Record(b"c")]

    def only_pairs(group):
        return group[0] if len(group) > 1 else None

    opts = ReaderOptions(compare=_cmp, reducer=only_pairs)
    assert [r.record for r in RecordsReader(records, opts)] == [b"a", b"c"]


def test_records_reader_limit_and_reset():
    reader = RecordsReader([Record(b"x"), Record(b"y"), Record(b"z")])
    reader.limit(2)
    first = reader.advance()
    reader.reset()
    assert reader.advance() == first
    assert reader.advance() == Record(b"y")
    assert reader.advance() is None


def test_records_reader_count():
    reader = RecordsReader([Record(b"1"), Record(b"2")])
    assert reader.count() == 2
    assert reader.advance() is None


def test_list_reader_reads_files_with_tags(tmp_path):
    f1 = _write(tmp_path / "one.txt", b"a\nb\n", 10)
    f2 = _write(tmp_path / "two.txt", b"c\n", 20)
    reader = reader_from_list([f1, f2], _lines())
    got = [(r.record, r.tag) for r in reader]
    assert got == [(b"a", 10), (b"b", 10), (b"c", 20)]


def test_list_reader_skips_empty_files(tmp_path):
    empty = _write(tmp_path / "empty.txt", b"", 1)
    full = _write(tmp_path / "full.txt", b"q\n", 2)
    reader = ListReader([empty, full], _lines())
    assert [r.record for r in reader] == [b"q"]


def test_list_reader_continues_past_file_without_records(tmp_path):
    partial = _write(tmp_path / "partial.txt", b"no newline", 1)
    full = _write(tmp_path / "full.txt", b"ok\n", 2)
    reader = ListReader([partial, full], _lines())
    assert [r.record for r in reader] == [b"ok"]


def test_reader_from_empty_list_is_empty():
    reader = reader_from_list([], _lines())
    assert reader.advance() is None
    assert reader.count() == 0


def test_list_reader_close_stops_reading(tmp_path):
    f1 = _write(tmp_path / "a.txt", b"1\n2\n", 0)
    reader = ListReader([f1], _lines())
    assert reader.advance() == Record(b"1", 0)
    reader.close()
    assert reader.advance() is None


def test_callback_reader_chains_readers():
    buffers = [b"a\nb\n", b"c\n"]

    def factory():
        if not buffers:
            return None
        return reader_from_buffer(buffers.pop(0), _lines())

    reader = CallbackReader(factory)
    assert [r.record for r in reader] == [b"a", b"b", b"c"]
    assert buffers == []


def test_reader_from_callback_none_first_is_empty():
    calls = []

    def factory():
        calls.append(1)
        return None

    reader = reader_from_callback(factory)
    assert reader.advance() is None
    assert len(calls) == 1


def test_reader_from_callback_skips_empty_readers():
    buffers = [b"x\n", b"", b"y\n"]

    def factory():
        if not buffers:
            return None
        return reader_from_buffer(buffers.pop(0), _lines())

    reader = reader_from_callback(factory)
    assert [r.record for r in reader] == [b"x", b"y"]


def test_records_reader_reducer_requires_compare():
    with pytest.raises(ValueError):
        RecordsReader([Record(b"a")], ReaderOptions(reducer=keep_first))