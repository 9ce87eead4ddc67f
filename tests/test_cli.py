import re

import pytest

from recordio.cli import extension_filter, main


@pytest.fixture
def two_dirs(tmp_path):
    first = tmp_path / "one"
    second = tmp_path / "two"
    first.mkdir()
    second.mkdir()
    (first / "a.txt").write_bytes(b"apple\ncherry\n")
    (first / "b.txt").write_bytes(b"banana\ncherry\n")
    (first / "skip.log").write_bytes(b"zzz\n")
    (second / "c.txt").write_bytes(b"apple\ndate\n")
    return first, second


def test_extension_filter_from_string():
    accept = extension_filter("txt,csv")
    assert accept("dir/a.txt")
    assert accept("b.csv")
    assert not accept("c.log")
    assert not accept("noext")


def test_extension_filter_from_list():
    accept = extension_filter(["gz"])
    assert accept("x/y.gz")
    assert not accept("x/y.txt")


def test_extension_filter_ignores_empty_entries():
    accept = extension_filter("txt,")
    assert not accept("noext")
    assert accept("a.txt")


def test_list_prints_files_and_totals(tmp_path, capsys):
    (tmp_path / "a.txt").write_bytes(b"hello")
    (tmp_path / "b.log").write_bytes(b"ignored")
    assert main(["list", "txt", str(tmp_path)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert re.match(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} +5\t", lines[0])
    assert lines[0].endswith(f"{tmp_path}/a.txt")
    assert lines[1] == "5 byte(s) in 1 file(s)"


def test_dump_each_file_in_order(two_dirs, capsys):
    first, _ = two_dirs
    main(["dump", "txt", str(first)])
    assert capsys.readouterr().out.splitlines() == ["apple", "cherry", "banana", "cherry"]


def test_dump_chain_matches_per_file(two_dirs, capsys):
    first, second = two_dirs
    main(["dump", "txt", str(first), str(second)])
    each = capsys.readouterr().out
    main(["dump", "--chain", "txt", str(first), str(second)])
    chained = capsys.readouterr().out
    assert chained == each
    assert chained.splitlines()[-2:] == ["apple", "date"]


def test_dump_merge_sorts_with_tags(two_dirs, capsys):
    first, second = two_dirs
    main(["dump", "--merge", "txt", str(first), str(second)])
    lines = capsys.readouterr().out.splitlines()
    records = [line.split(": ", 1)[1] for line in lines]
    assert records == sorted(records)
    assert lines[0] == "2000: apple"
    assert "3000: apple" in lines
    assert "2001: banana" in lines


def test_dump_unique_drops_duplicates(two_dirs, capsys):
    first, second = two_dirs
    main(["dump", "--unique", "txt", str(first), str(second)])
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["2000: apple", "2001: banana", "2000: cherry", "3000: date"]


def test_dump_unique_by_tag_keeps_everything(two_dirs, capsys):
    first, second = two_dirs
    main(["dump", "--unique", "--by-tag", "txt", str(first), str(second)])
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 6
    cherries = [line for line in lines if line.endswith("cherry")]
    assert cherries == ["2000: cherry", "2001: cherry"]


def test_dump_skips_other_extensions(two_dirs, capsys):
    first, _ = two_dirs
    main(["dump", "log", str(first)])
    assert capsys.readouterr().out.splitlines() == ["zzz"]


def test_missing_paths_is_an_error():
    with pytest.raises(SystemExit) as excinfo:
        main(["dump", "txt"])
    assert excinfo.value.code == 2


def test_chain_with_unique_is_an_error(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["dump", "--chain", "--unique", "txt", str(tmp_path)])
    assert excinfo.value.code == 2