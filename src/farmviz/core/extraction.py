from __future__ import annotations

import asyncio
from typing import Callable, Sequence

from farmviz.core.models import ExtractionStatus, PlantRecord, UploadSuccess
from farmviz.core.run_logger import RunLogger
from farmviz.services.api import FarmApi

StatusCb = Callable[[str, ExtractionStatus], None]  # file name, new status


class ExtractionCoordinator:
    """Requests coordinates per stored image and tracks a status per file name.

    The status map covers one batch; call reset() before the next one.
    """

    def __init__(
        self,
        api: FarmApi,
        on_status: StatusCb | None = None,
        logger: RunLogger | None = None,
    ) -> None:
        self.api = api
        self.on_status = on_status
        self.logger = logger or RunLogger.disabled()
        self._statuses: dict[str, ExtractionStatus] = {}

    def reset(self) -> None:
        self._statuses = {}

    def mark_pending(self, file_names: Sequence[str]) -> None:
        for name in file_names:
            if name not in self._statuses:
                self._set(name, ExtractionStatus.pending())

    def status(self, file_name: str) -> ExtractionStatus | None:
        return self._statuses.get(file_name)

    def statuses(self) -> dict[str, ExtractionStatus]:
        return dict(self._statuses)

    async def extract(self, file_name: str, storage_url: str) -> ExtractionStatus:
        """Resolve one file to `success` or `failed`. Never raises."""
        current = self._statuses.get(file_name)
        if current is not None and current.state.is_terminal:
            return current

        # Set before the first await so the UI can show progress immediately.
        self._set(file_name, ExtractionStatus.processing())
        try:
            latitude, longitude = await asyncio.to_thread(self.api.extract_location, file_name, storage_url)
        except Exception as exc:
            reason = str(exc) or "Failed to extract location"
            self.logger.log(f"Location extraction failed for {file_name}: {reason}")
            return self._set(file_name, ExtractionStatus.failed(reason))

        record = PlantRecord(
            image_name=file_name,
            image_url=storage_url,
            latitude=latitude,
            longitude=longitude,
        )
        if not record.has_valid_coordinates():
            reason = f"Coordinates out of range: {latitude}, {longitude}"
            self.logger.log(f"Location extraction failed for {file_name}: {reason}")
            return self._set(file_name, ExtractionStatus.failed(reason))
        return self._set(file_name, ExtractionStatus.success(record))

    async def extract_all(self, uploads: Sequence[UploadSuccess]) -> dict[str, ExtractionStatus]:
        self.mark_pending([u.file_name for u in uploads])
        await asyncio.gather(*(self.extract(u.file_name, u.storage_url) for u in uploads))
        return self.statuses()

    def _set(self, file_name: str, status: ExtractionStatus) -> ExtractionStatus:
        self._statuses[file_name] = status
        if self.on_status is not None:
            self.on_status(file_name, status)
        return status
