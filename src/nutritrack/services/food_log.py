"""Date-partitioned food log storage."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime

from pydantic import ValidationError as PydanticValidationError

from nutritrack.domain.food_log import FoodLogEntry
from nutritrack.errors import StorageError, ValidationError
from nutritrack.services.storage import BlobStore, KeyedLocks, load_json, save_json

_logger = logging.getLogger(__name__)

PARTITION_PREFIX = "food_logs_"
DATE_INDEX_KEY = "food_log_dates"
ID_INDEX_KEY = "food_log_ids"


def partition_key(day: str) -> str:
    """Return the blob key holding a day's entries."""
    return f"{PARTITION_PREFIX}{day}"


@dataclass
class FoodLogService:
    """Stores food entries in one blob per day plus a sorted date index.

    A date is listed in the index exactly when its partition holds at
    least one entry. An id-to-date map makes deletes a direct lookup; the
    date index is scanned only when that map is missing or stale.

    Locks are taken per entry id, then per partition, then per index.
    """

    store: BlobStore
    locks: KeyedLocks = field(default_factory=KeyedLocks)

    async def save_entry(
        self, entry: FoodLogEntry | Mapping[str, object]
    ) -> FoodLogEntry:
        """Insert or replace (by id) an entry in its day's partition.

        The date is indexed before the partition is written, so a failed
        write never leaves an entry that the index does not list.
        """
        record = validate_entry(entry)
        day = record.log_date

        async with self.locks.hold(_entry_lock_key(record.id)):
            previous_day = (await self._load_id_index()).get(record.id)
            async with self.locks.hold(partition_key(day)):
                entries = await self._load_partition(day)
                was_empty = not entries
                for position, existing in enumerate(entries):
                    if existing.id == record.id:
                        entries[position] = record
                        break
                else:
                    entries.append(record)
                await self._add_date(day)
                try:
                    await self._write_partition(day, entries)
                except StorageError:
                    if was_empty:
                        await self._discard_date(day)
                    raise
                await self._remember_id(record.id, day)

            if previous_day is not None and previous_day != day:
                _logger.info(
                    "Entry %s moved from %s to %s", record.id, previous_day, day
                )
                await self._remove_from_partition(previous_day, record.id)
        return record

    async def get_entries_for_date(self, day: str | date) -> list[FoodLogEntry]:
        """Return a day's entries; absent or corrupt partitions read as empty."""
        return await self._load_partition(_date_key(day))

    async def get_entry(self, entry_id: str) -> FoodLogEntry | None:
        """Return an entry by id, or None."""
        day = (await self._load_id_index()).get(entry_id)
        candidates = [day] if day is not None else await self.get_log_dates()
        for candidate in candidates:
            for entry in await self._load_partition(candidate):
                if entry.id == entry_id:
                    return entry
        return None

    async def delete_entry(self, entry_id: str) -> bool:
        """Remove an entry by id; unknown ids are a no-op.

        Returns True when an entry was removed.
        """
        async with self.locks.hold(_entry_lock_key(entry_id)):
            day = (await self._load_id_index()).get(entry_id)
            if day is not None and await self._remove_from_partition(day, entry_id):
                await self._forget_id(entry_id)
                return True

            for candidate in await self.get_log_dates():
                if candidate == day:
                    continue
                if await self._remove_from_partition(candidate, entry_id):
                    await self._forget_id(entry_id)
                    return True

            if day is not None:
                await self._forget_id(entry_id)
        _logger.debug("Delete ignored, entry %s not found", entry_id)
        return False

    async def clear(self) -> int:
        """Remove every partition and both indexes.

        Days are taken from the date index and the id index, so partitions
        the date index lost track of are removed too. Returns the number of
        days removed.
        """
        days = set(await self.get_log_dates())
        days.update((await self._load_id_index()).values())
        for day in sorted(days):
            async with self.locks.hold(partition_key(day)):
                await self.store.remove(partition_key(day))
        async with self.locks.hold(DATE_INDEX_KEY):
            await self.store.remove(DATE_INDEX_KEY)
        async with self.locks.hold(ID_INDEX_KEY):
            await self.store.remove(ID_INDEX_KEY)
        _logger.info("Cleared food log across %s days", len(days))
        return len(days)

    async def get_entries_for_range(
        self, start_date: str | date, end_date: str | date
    ) -> dict[str, list[FoodLogEntry]]:
        """Return entries per day for logged days within [start, end]."""
        start = _date_key(start_date)
        end = _date_key(end_date)
        result: dict[str, list[FoodLogEntry]] = {}
        for day in await self.get_log_dates():
            if not start <= day <= end:
                continue
            entries = await self._load_partition(day)
            if entries:
                result[day] = entries
        return result

    async def get_log_dates(self) -> list[str]:
        """Return the sorted list of days holding at least one entry."""
        raw = await load_json(self.store, DATE_INDEX_KEY)
        if not isinstance(raw, list):
            if raw is not None:
                _logger.warning("Date index is not a list, treating as empty")
            return []
        return sorted({day for day in raw if isinstance(day, str)})

    async def _load_partition(self, day: str) -> list[FoodLogEntry]:
        raw = await load_json(self.store, partition_key(day))
        if raw is None:
            return []
        if not isinstance(raw, list):
            _logger.warning("Partition %s is not a list, treating as empty", day)
            return []
        entries: list[FoodLogEntry] = []
        for item in raw:
            try:
                entries.append(FoodLogEntry.model_validate(item))
            except PydanticValidationError:
                _logger.warning("Skipping malformed entry in partition %s", day)
        return entries

    async def _write_partition(self, day: str, entries: list[FoodLogEntry]) -> None:
        await save_json(
            self.store, partition_key(day), [entry.to_record() for entry in entries]
        )

    async def _remove_from_partition(self, day: str, entry_id: str) -> bool:
        async with self.locks.hold(partition_key(day)):
            entries = await self._load_partition(day)
            remaining = [entry for entry in entries if entry.id != entry_id]
            if len(remaining) == len(entries):
                return False
            if remaining:
                await self._write_partition(day, remaining)
            else:
                await self.store.remove(partition_key(day))
                await self._discard_date(day)
            return True

    async def _add_date(self, day: str) -> None:
        async with self.locks.hold(DATE_INDEX_KEY):
            dates = await self.get_log_dates()
            if day in dates:
                return
            dates.append(day)
            await save_json(self.store, DATE_INDEX_KEY, sorted(dates))

    async def _discard_date(self, day: str) -> None:
        async with self.locks.hold(DATE_INDEX_KEY):
            dates = await self.get_log_dates()
            if day not in dates:
                return
            dates.remove(day)
            await save_json(self.store, DATE_INDEX_KEY, dates)

    async def _load_id_index(self) -> dict[str, str]:
        raw = await load_json(self.store, ID_INDEX_KEY)
        if not isinstance(raw, dict):
            return {}
        return {
            str(key): value for key, value in raw.items() if isinstance(value, str)
        }

    async def _remember_id(self, entry_id: str, day: str) -> None:
        async with self.locks.hold(ID_INDEX_KEY):
            ids = await self._load_id_index()
            if ids.get(entry_id) == day:
                return
            ids[entry_id] = day
            await save_json(self.store, ID_INDEX_KEY, ids)

    async def _forget_id(self, entry_id: str) -> None:
        async with self.locks.hold(ID_INDEX_KEY):
            ids = await self._load_id_index()
            if ids.pop(entry_id, None) is None:
                return
            await save_json(self.store, ID_INDEX_KEY, ids)


def validate_entry(entry: FoodLogEntry | Mapping[str, object]) -> FoodLogEntry:
    """Return a validated entry, raising ValidationError on bad input."""
    if isinstance(entry, FoodLogEntry):
        return entry
    if not isinstance(entry, Mapping):
        raise ValidationError("Food log entry must be a mapping")
    missing = [name for name in ("id", "timestamp") if _is_blank(entry.get(name))]
    if missing:
        raise ValidationError(f"Food log entry must have {' and '.join(missing)}")
    try:
        return FoodLogEntry.model_validate(dict(entry))
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid food log entry: {exc}") from exc


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _entry_lock_key(entry_id: str) -> str:
    return f"entry:{entry_id}"


def _date_key(day: str | date) -> str:
    if isinstance(day, datetime):
        return day.date().isoformat()
    if isinstance(day, date):
        return day.isoformat()
    return day.strip()
