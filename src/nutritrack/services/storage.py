"""Blob persistence abstractions."""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Protocol

_logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """String-to-string persistence used by the tracker services."""

    async def get(self, key: str) -> str | None:
        """Return the stored value for a key, or None if absent."""

    async def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""

    async def remove(self, key: str) -> None:
        """Delete a key; missing keys are ignored."""


@dataclass
class InMemoryBlobStore(BlobStore):
    """Dictionary-backed blob store."""

    values: dict[str, str] = field(default_factory=dict)

    async def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        """Store a value under a key."""
        self.values[key] = value

    async def remove(self, key: str) -> None:
        """Delete a key if present."""
        self.values.pop(key, None)


@dataclass
class PrefixedBlobStore(BlobStore):
    """Blob store wrapper that namespaces every key."""

    store: BlobStore
    prefix: str

    async def get(self, key: str) -> str | None:
        """Return the value stored under the prefixed key."""
        return await self.store.get(self.prefix + key)

    async def set(self, key: str, value: str) -> None:
        """Store a value under the prefixed key."""
        await self.store.set(self.prefix + key, value)

    async def remove(self, key: str) -> None:
        """Delete the prefixed key."""
        await self.store.remove(self.prefix + key)


class KeyedLocks:
    """Per-key asyncio locks, dropped once nobody holds or waits on them."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Serialize the enclosed block against other holders of ``key``."""
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


async def load_json(store: BlobStore, key: str) -> object | None:
    """Read and decode a JSON blob; corrupt data reads as None."""
    raw = await store.get(key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        _logger.warning("Ignoring unparseable JSON stored under %s", key)
        return None


async def save_json(store: BlobStore, key: str, value: object) -> None:
    """Encode a value as JSON and store it."""
    await store.set(key, json.dumps(value, ensure_ascii=False))
