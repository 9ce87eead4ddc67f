# recordio

Reading record-oriented files. A record can be terminated by a delimiter
byte, delimited with double quotes respected (CSV style), of fixed size, or
preceded by a 4-byte little-endian length. Records come from plain files,
gzip files (`.gz`), open file descriptors or bytes in memory. On top of the
single-input reader there are readers over in-memory records, over a list of
files, over a factory that supplies readers, and a merging reader that
combines several sorted inputs and can reduce runs of equal records.

No third-party dependencies.

## Install

```
pip install .
```

## Modules

- `recordio.fileinfo` – format codes, file metadata, recursive listing,
  sorting and whole-file or chunk reads.
- `recordio.reader` – `Record`, `ReaderOptions`, `RecordReader` and the
  functions that open readers.
- `recordio.sources` – `RecordsReader`, `ListReader`, `CallbackReader`.
- `recordio.merge` – `MergeReader`.
- `recordio.datastore` – `DataStore`, a hashed directory file store.
- `recordio.cli` – the `recordio` command.

## Formats

```python
from recordio.fileinfo import delimiter, csv_delimiter, fixed, prefix

delimiter("\n")      # newline-terminated records
csv_delimiter(",")   # comma-delimited, text in double quotes may hold commas
fixed(16)            # 16-byte records
prefix()             # records preceded by a 4-byte length
```

## Reading

```python
from recordio.fileinfo import delimiter
from recordio.reader import quick_open

with quick_open("data.txt", delimiter("\n"), 128 * 1024) as reader:
    for record in reader:
        print(record.tag, record.record)
```

Each `Record` holds `record` (bytes), `tag` and a `length` property.

`open_reader(filename, options)` takes a `ReaderOptions`. A missing file gives
an empty reader unless `abort_on_file_not_found` is set;
`abort_on_file_empty` raises `EOFError` for an empty file. By default a
trailing delimited record without its delimiter is dropped;
`ReaderOptions.allow_partial_records()` lets it through, and
`abort_on_partial_record` raises `ValueError` instead. Setting `compare` and
`reducer` makes the reader hand each run of consecutive equal records to the
reducer, which returns the record to emit or `None`; `keep_first` is such a
reducer.

`reader_from_buffer(data, options)` reads bytes in memory,
`reader_from_fd(fd, can_close, options)` reads an open descriptor (gzip when
`options.gz` is set), and `empty_reader()` gives a reader with no records.

Every reader has `advance()`, `current()`, `reset()` (the next `advance`
returns the same record again), `advance_unique()`, `advance_group(compare)`,
`limit(n)`, `count()` (consumes and closes), `close()`, iteration and use as
a context manager.

## Other sources

```python
from recordio.fileinfo import list_files
from recordio.reader import Record, ReaderOptions
from recordio.sources import RecordsReader, reader_from_list, reader_from_callback

RecordsReader([Record(b"a"), Record(b"b")])
reader_from_list(list_files("logs"), ReaderOptions())
```

`reader_from_list` skips empty files and tags each record with its file's
`FileInfo.tag`. `reader_from_callback(factory)` reads the readers the factory
returns until it returns `None`.

## Listing files

```python
from recordio.fileinfo import list_files, sort_by_size

files = list_files("logs", lambda name: name.endswith(".txt"))
files = sort_by_size(files, descending=True)
```

`list_files` walks directories recursively, skips names starting with a dot
and returns `FileInfo` objects (`filename`, `size`, `last_modified`, `tag`).
`sort_by_last_modified`, `sort_by_size` and `sort_by_filename` return new
lists. `partition_file_info`, `hash_partition` and `hash_filename` help split
work into partitions.

## Merging sorted inputs

```python
from recordio.fileinfo import delimiter
from recordio.merge import MergeReader
from recordio.reader import quick_open

merged = MergeReader(lambda a, b: (a.record > b.record) - (a.record < b.record), None)
merged.add(quick_open("a.txt", delimiter("\n"), 65536), 1)
merged.add(quick_open("b.txt", delimiter("\n"), 65536), 2)
merged.keep_first()
for record in merged:
    print(record.tag, record.record)
```

Equal records come out in the order their readers were added.
`set_reducer(reducer)` reduces each run of equal records with any reducer.

## Data store

`recordio.datastore.DataStore(path)` keeps files under `path` in a four-level
directory tree named after a 24-bit FNV-1a hash of the file name
(`fnv1a_24`). `write_file(name, data, temp_id)` writes through a temporary
file and renames it into place; `read_file`, `exists`, `remove_file` and
`path_for` complete it.

## Command line

```
recordio list txt,log some/path
recordio dump txt,log some/path other/path
recordio dump --chain txt some/path
recordio dump --merge txt some/path other/path
recordio dump --unique --by-tag txt some/path other/path
```

Extensions are a comma-separated list. `list` prints each matching file with
its modification time and size, then the totals. `dump` prints every line of
every matching file; `--chain` reads each path's files as one stream;
`--merge` merges the sorted files and prints `tag: line`, the tag being
`position * 1000 + file index` with the first path at position 2; `--by-tag`
orders equal lines by tag and `--unique` keeps only the first of equal lines
(both imply `--merge`).

## What it does not do

- It only reads. There is no record writer, no external sort and no way to
  write sorted or reduced output files.
- lz4-compressed input is not supported: `open_reader` raises `ValueError`
  for a `.lz4` file.