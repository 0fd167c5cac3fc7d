from __future__ import annotations

import asyncio
from typing import Any, Callable, Mapping

from farmviz.core.models import PlantRecord
from farmviz.core.plant_store import PlantStore, utc_now_iso
from farmviz.core.run_logger import RunLogger
from farmviz.services.api import FarmApi
from farmviz.util.errors import DataError

# Acknowledgement keys that describe the request, not the record.
ACK_KEYS = {"success", "message", "emailId"}


class PersistenceCoordinator:
    """Saves plant records remotely and upserts them into the store on success."""

    def __init__(
        self,
        api: FarmApi,
        store: PlantStore,
        clock: Callable[[], str] = utc_now_iso,
        logger: RunLogger | None = None,
    ) -> None:
        self.api = api
        self.store = store
        self.clock = clock
        self.logger = logger or RunLogger.disabled()

    async def save(self, record: PlantRecord) -> PlantRecord:
        """Stamp, send, merge the server response and upsert.

        Raises NetworkError/DataError on failure; the store is left untouched then.
        """
        if not record.has_valid_coordinates():
            raise DataError(f"{record.image_name}: missing or invalid coordinates.")

        stamped = record.with_timestamp(self.clock())
        response = await asyncio.to_thread(self.api.save_plant, stamped)
        enriched = merge_server_fields(stamped, response)

        self.store.upsert(enriched)
        self.logger.log(f"Saved plant {enriched.image_name} ({enriched.latitude}, {enriched.longitude}).")
        return enriched


def merge_server_fields(record: PlantRecord, response: Mapping[str, Any] | None) -> PlantRecord:
    """Overlay server fields on the local record; the server wins on conflicts."""
    body: Any = response or {}
    if isinstance(body.get("data"), dict):
        body = body["data"]

    merged = record.to_dict()
    merged.update({k: v for k, v in body.items() if k not in ACK_KEYS and v is not None})
    if not merged.get("imageName"):
        merged["imageName"] = record.image_name
    try:
        enriched = PlantRecord.from_dict(merged)
    except ValueError as exc:
        raise DataError(f"Save response for {record.image_name} is malformed: {exc}") from exc
    if not enriched.has_valid_coordinates():
        raise DataError(f"Save response for {record.image_name} has invalid coordinates.")
    return enriched
