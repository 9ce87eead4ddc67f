import pytest

from recordio.datastore import DataStore, fnv1a_24


@pytest.fixture
def store(tmp_path):
    return DataStore(tmp_path / "store" / "nested")


def test_fnv1a_24_empty_is_offset_basis_low_bits():
    assert fnv1a_24("") == 2166136261 & 0xFFFFFF


@pytest.mark.parametrize("key", ["a", "hello", "some/file.txt", "x" * 300])
def test_fnv1a_24_fits_in_24_bits(key):
    assert 0 <= fnv1a_24(key) < (1 << 24)


def test_fnv1a_24_str_and_bytes_agree():
    assert fnv1a_24("record-42") == fnv1a_24(b"record-42")


def test_fnv1a_24_distinguishes_keys():
    assert fnv1a_24("alpha") != fnv1a_24("beta")


def test_init_creates_directory(tmp_path):
    target = tmp_path / "a" / "b" / "c"
    DataStore(target)
    assert target.is_dir()


def test_path_for_layout(store):
    name = "document.json"
    path = store.path_for(name)
    rel = path.relative_to(store.base_path)
    parts = rel.parts
    assert len(parts) == 5
    assert parts[-1] == name
    for part in parts[:4]:
        assert len(part) == 3
        assert int(part, 16) < 64
    a, b, c, d = (int(p, 16) for p in parts[:4])
    assert (a << 18) | (b << 12) | (c << 6) | d == fnv1a_24(name)


def test_write_then_read_round_trip(store):
    store.write_file("one.bin", b"\x00\x01payload\xff", 7)
    assert store.read_file("one.bin") == b"\x00\x01payload\xff"


def test_write_str_data(store):
    store.write_file("text.txt", "hello world")
    assert store.read_file("text.txt") == b"hello world"


def test_exists_before_and_after_write(store):
    assert store.exists("item") is False
    store.write_file("item", b"data", 1)
    assert store.exists("item") is True
    assert store.path_for("item").is_file()


def test_overwrite_replaces_contents(store):
    store.write_file("item", b"first", 1)
    store.write_file("item", b"second", 2)
    assert store.read_file("item") == b"second"


def test_no_temporary_file_left(store):
    store.write_file("item", b"data", 99)
    leftovers = [p.name for p in store.path_for("item").parent.iterdir()]
    assert leftovers == ["item"]


def test_remove_file(store):
    store.write_file("gone", b"x", 3)
    store.remove_file("gone")
    assert store.exists("gone") is False


def test_remove_missing_is_ignored(store):
    store.remove_file("never-written")
    assert store.exists("never-written") is False


def test_read_missing_raises(store):
    with pytest.raises(FileNotFoundError):
        store.read_file("missing")


def test_many_files_round_trip(store):
    contents = {f"file-{n}": f"value {n}".encode() for n in range(20)}
    for n, (name, data) in enumerate(contents.items()):
        store.write_file(name, data, n)
    assert {name: store.read_file(name) for name in contents} == contents


def test_empty_file_round_trip(store):
    store.write_file("empty", b"", 0)
    assert store.exists("empty") is True
    assert store.read_file("empty") == b""