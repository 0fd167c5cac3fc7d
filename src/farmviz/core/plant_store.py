from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from farmviz.core.local_cache import LocalCache, load_plants_snapshot, save_plants_snapshot
from farmviz.core.models import PlantRecord
from farmviz.core.run_logger import RunLogger
from farmviz.services.api import FarmApi
from farmviz.util.errors import FarmVizError


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    LOADED_FROM_CACHE = "loaded_from_cache"
    EMPTY_WITH_ERROR = "empty_with_error"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PlantStore:
    """The session's plant collection, keyed by image name.

    Every successful mutation writes a full snapshot to the local cache.
    """

    def __init__(self, cache: LocalCache | None = None, logger: RunLogger | None = None) -> None:
        self.cache = cache
        self.logger = logger or RunLogger.disabled()
        self._records: list[PlantRecord] = []
        self.state = LoadState.IDLE
        self.error: str | None = None
        self.last_fetched: str | None = None

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> list[PlantRecord]:
        return list(self._records)

    def find(self, image_name: str) -> PlantRecord | None:
        for r in self._records:
            if r.image_name == image_name:
                return r
        return None

    def mappable(self) -> list[PlantRecord]:
        return [r for r in self._records if r.has_valid_coordinates()]

    def upsert(self, record: PlantRecord) -> int:
        """Replace the record with the same image name in place, else append. Returns its index."""
        index = next((i for i, r in enumerate(self._records) if r.image_name == record.image_name), None)
        if index is None:
            self._records.append(record)
            index = len(self._records) - 1
        else:
            self._records[index] = record
        self._mirror()
        return index

    def replace_all(self, records: Iterable[PlantRecord]) -> None:
        deduped: dict[str, PlantRecord] = {}
        for r in records:
            deduped[r.image_name] = r
        self._records = list(deduped.values())
        self._mirror()

    def clear_error(self) -> None:
        self.error = None

    def load_from_cache(self) -> bool:
        """Pre-populate from the cached snapshot. Synchronous, no network."""
        if self.cache is None:
            return False
        cached = load_plants_snapshot(self.cache)
        if cached is None:
            return False
        self._records = cached
        self.logger.log(f"Loaded {len(cached)} plant(s) from local cache.")
        return True

    async def fetch_all(self, api: FarmApi) -> LoadState:
        """Reload the collection from the server, falling back to the cache. Never raises."""
        self.state = LoadState.LOADING
        self.error = None
        try:
            items = await asyncio.to_thread(api.fetch_plants)
        except FarmVizError as exc:
            self.error = str(exc) or "Failed to load plant data"
            self.logger.log(f"Fetching plants failed: {self.error}")
            if self.load_from_cache():
                self.state = LoadState.LOADED_FROM_CACHE
            else:
                # No usable cache: the in-memory collection is left as it was.
                self.state = LoadState.EMPTY_WITH_ERROR
            return self.state

        records: list[PlantRecord] = []
        for item in items:
            try:
                records.append(PlantRecord.from_dict(item))
            except ValueError:
                self.logger.log(f"Skipping plant without imageName: {item!r}")
        self.replace_all(records)
        self.last_fetched = utc_now_iso()
        self.state = LoadState.LOADED
        self.logger.log(f"Fetched {len(self._records)} plant(s).")
        return self.state

    def _mirror(self) -> None:
        if self.cache is not None:
            save_plants_snapshot(self.cache, self._records)
