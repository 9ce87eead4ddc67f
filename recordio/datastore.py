"""A file store that spreads files over a four-level hashed directory tree."""

from __future__ import annotations

import os
from pathlib import Path

_FNV_PRIME = 16777619
_FNV_OFFSET_BASIS = 2166136261
_MASK32 = 0xFFFFFFFF
_MASK24 = 0xFFFFFF
_TEMP_PREFIX = ".data_store_tmp."


def fnv1a_24(key: str | bytes) -> int:
    """FNV-1a 32-bit hash of ``key`` folded to its low 24 bits."""
    data = key.encode() if isinstance(key, str) else bytes(key)
    value = _FNV_OFFSET_BASIS
    for byte in data:
        value ^= byte
        value = (value * _FNV_PRIME) & _MASK32
    return value & _MASK24


class DataStore:
    """Files kept under ``path`` in directories named after their hash.

    A file named ``name`` lives at ``path/aaa/bbb/ccc/ddd/name`` where the
    four directory names are the 6-bit slices of ``fnv1a_24(name)`` written
    as three hex digits.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        self.base_path = Path(path)
        self.base_path.mkdir(mode=0o755, parents=True, exist_ok=True)

    def path_for(self, filename: str) -> Path:
        """Where ``filename`` is stored."""
        value = fnv1a_24(filename)
        parts = [
            f"{(value >> shift) & 0x3F:03x}" for shift in (18, 12, 6, 0)
        ]
        return self.base_path.joinpath(*parts, filename)

    def exists(self, filename: str) -> bool:
        """True when ``filename`` is in the store."""
        return self.path_for(filename).exists()

    def read_file(self, filename: str) -> bytes:
        """Contents of ``filename``; raises FileNotFoundError if absent."""
        return self.path_for(filename).read_bytes()

    def write_file(
        self, filename: str, data: bytes | str, temp_id: int = 0
    ) -> None:
        """Write ``filename`` atomically through a temporary file.

        ``temp_id`` names the temporary file, so concurrent writers should
        use different ids.
        """
        target = self.path_for(filename)
        target.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
        payload = data.encode() if isinstance(data, str) else bytes(data)
        temp = target.parent / f"{_TEMP_PREFIX}{temp_id}"
        try:
            with open(temp, "wb") as fh:
                fh.write(payload)
            os.replace(temp, target)
        except BaseException:
            temp.unlink(missing_ok=True)
            raise

    def remove_file(self, filename: str) -> None:
        """Delete ``filename`` from the store; a missing file is ignored."""
        self.path_for(filename).unlink(missing_ok=True)