"""Persistent key-value caches.

The store only needs three async operations on string keys and string
values. Two implementations ship with the library: :class:`MemoryCache`
(process lifetime, handy in tests) and :class:`JsonFileCache` (durable
across restarts).
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from vendorsync.exceptions import CacheStorageError

_logger = logging.getLogger(__name__)


class PersistentCache(Protocol):
    """Async string key-value store. Every operation may raise :class:`CacheStorageError`."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, keys: Iterable[str]) -> None: ...


class MemoryCache:
    """In-memory cache; contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileCache:
    """Durable cache stored as a single JSON object on disk.

    The file is read lazily on first access and rewritten atomically
    (temp file + ``os.replace``) after every mutation. File I/O runs in
    the default executor so the event loop never blocks on disk.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._data: dict[str, str] | None = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_file(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                loaded = json.load(handle)
        except json.JSONDecodeError:
            _logger.warning("Cache file %s is corrupt; starting empty", self._path)
            return {}
        if not isinstance(loaded, dict):
            _logger.warning("Cache file %s does not hold an object; starting empty", self._path)
            return {}
        return {str(k): v for k, v in loaded.items() if isinstance(v, str)}

    def _write_file(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def _load(self) -> dict[str, str]:
        if self._data is None:
            loop = asyncio.get_running_loop()
            try:
                self._data = await loop.run_in_executor(None, self._read_file)
            except OSError as exc:
                raise CacheStorageError(f"Cannot read cache file {self._path}: {exc}") from exc
        return self._data

    async def _flush(self, data: dict[str, str], key: str) -> None:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._write_file, dict(data))
        except OSError as exc:
            raise CacheStorageError(f"Cannot write cache file {self._path}: {exc}", key=key) from exc

    async def get(self, key: str) -> str | None:
        async with self._lock:
            data = await self._load()
            return data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = await self._load()
            updated = {**data, key: value}
            await self._flush(updated, key)
            self._data = updated

    async def remove(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        async with self._lock:
            data = await self._load()
            if not any(key in data for key in keys):
                return
            updated = {k: v for k, v in data.items() if k not in keys}
            await self._flush(updated, ",".join(keys))
            self._data = updated
