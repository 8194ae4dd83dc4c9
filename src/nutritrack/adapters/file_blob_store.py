"""Local filesystem blob store, one JSON file per key."""

import asyncio
import os
import re
from dataclasses import dataclass
from pathlib import Path

from nutritrack.errors import StorageError
from nutritrack.services.storage import BlobStore

_SAFE_KEY = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


@dataclass
class FileBlobStore(BlobStore):
    """Blob store writing each key to ``<root>/<key>.json``."""

    root: Path

    async def get(self, key: str) -> str | None:
        """Return the file contents for a key, or None if missing."""
        path = self._path(key)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Failed to read {key}") from exc

    async def set(self, key: str, value: str) -> None:
        """Atomically replace the file for a key."""
        path = self._path(key)
        try:
            await asyncio.to_thread(_write_atomic, path, value)
        except OSError as exc:
            raise StorageError(f"Failed to write {key}") from exc

    async def remove(self, key: str) -> None:
        """Delete the file for a key if present."""
        path = self._path(key)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to remove {key}") from exc

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid storage key {key!r}")
        return self.root / f"{key}.json"


def _write_atomic(path: Path, value: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.name}.tmp")
    tmp_path.write_text(value, encoding="utf-8")
    os.replace(tmp_path, path)
