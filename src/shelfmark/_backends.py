"""Key/value stores for serialized fingerprint sets."""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

import structlog

from ._errors import PersistenceError

log = structlog.get_logger(__name__)


class CacheBackend(Protocol):
    async def read(self, key: str) -> bytes | None:
        ...

    async def write(self, key: str, value: bytes) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class MemoryBackend:
    """Process-local dict. Lost on exit."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    async def read(self, key: str) -> bytes | None:
        return self._data.get(key)

    async def write(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)


class DirectoryBackend:
    """One file per key under ``root``.

    Writes go to a temp file in the same directory and are moved into
    place with ``os.replace``, so a reader sees the old or the new file,
    never a partial one. Last write wins.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}.msgpack"

    def _read(self, key: str) -> bytes | None:
        path = self.path_for(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def _write(self, key: str, value: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=".msgpack")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(value)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

    async def read(self, key: str) -> bytes | None:
        try:
            return await asyncio.to_thread(self._read, key)
        except OSError as e:
            log.error("Cache read failed.", key=key, error=str(e))
            raise PersistenceError(f"Failed to read {key!r}: {e}") from e

    async def write(self, key: str, value: bytes) -> None:
        try:
            await asyncio.to_thread(self._write, key, value)
        except OSError as e:
            log.error("Cache write failed.", key=key, error=str(e))
            raise PersistenceError(f"Failed to write {key!r}: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._delete, key)
        except OSError as e:
            log.error("Cache delete failed.", key=key, error=str(e))
            raise PersistenceError(f"Failed to delete {key!r}: {e}") from e
