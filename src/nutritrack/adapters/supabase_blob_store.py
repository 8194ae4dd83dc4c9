"""Supabase key/value table used as a blob store."""

import asyncio
from dataclasses import dataclass

import httpx
from supabase import Client, PostgrestAPIError

from nutritrack.errors import StorageError
from nutritrack.services.storage import BlobStore

_STORAGE_ERRORS = (PostgrestAPIError, httpx.HTTPError)


@dataclass
class SupabaseBlobStore(BlobStore):
    """Supabase implementation over a ``(key, value)`` text table."""

    client: Client
    table: str = "kv_store"

    async def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        try:
            response = await asyncio.to_thread(
                lambda: self.client.table(self.table)
                .select("value")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except _STORAGE_ERRORS as exc:
            raise StorageError(f"Failed to read {key}") from exc
        if not response.data:
            return None
        value = response.data[0].get("value")
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str) -> None:
        """Upsert the value for a key."""
        try:
            await asyncio.to_thread(
                lambda: self.client.table(self.table)
                .upsert({"key": key, "value": value})
                .execute()
            )
        except _STORAGE_ERRORS as exc:
            raise StorageError(f"Failed to write {key}") from exc

    async def remove(self, key: str) -> None:
        """Delete the row for a key."""
        try:
            await asyncio.to_thread(
                lambda: self.client.table(self.table).delete().eq("key", key).execute()
            )
        except _STORAGE_ERRORS as exc:
            raise StorageError(f"Failed to remove {key}") from exc
