from __future__ import annotations

from typing import Sequence

from farmviz.core.extraction import ExtractionCoordinator, StatusCb
from farmviz.core.models import BatchReport, CandidateFile, ExtractionState, SaveFailure
from farmviz.core.persistence import PersistenceCoordinator
from farmviz.core.plant_store import PlantStore
from farmviz.core.run_logger import RunLogger
from farmviz.core.settings import AppSettings
from farmviz.core.upload import UploadCoordinator
from farmviz.core.validation import partition_candidates
from farmviz.services.api import FarmApi
from farmviz.services.http import JsonHttpClient, UrlLibJsonHttpClient
from farmviz.services.storage import CloudinaryStorage
from farmviz.util.errors import FarmVizError


class BatchPipeline:
    """upload -> extract (concurrently) -> save (sequentially) for one batch."""

    def __init__(
        self,
        uploader: UploadCoordinator,
        extractor: ExtractionCoordinator,
        persister: PersistenceCoordinator,
        logger: RunLogger | None = None,
    ) -> None:
        self.uploader = uploader
        self.extractor = extractor
        self.persister = persister
        self.logger = logger or RunLogger.disabled()

    async def run(self, candidates: Sequence[CandidateFile]) -> BatchReport:
        """Run one batch to completion. Per-file failures are reported, never raised."""
        report = BatchReport()
        accepted, issues = partition_candidates(candidates)
        report.rejected.extend(i.message for i in issues)

        seen: set[str] = set()
        unique: list[CandidateFile] = []
        for c in accepted:
            if c.name in seen:
                report.rejected.append(f"{c.name}: Duplicate file name in this batch.")
                continue
            seen.add(c.name)
            unique.append(c)

        for msg in report.rejected:
            self.logger.log(f"Rejected: {msg}")
        if not unique:
            self.logger.log("No valid files to upload.")
            return report

        self.logger.log(f"Batch started with {len(unique)} file(s).")
        self.extractor.reset()
        uploaded = await self.uploader.submit_batch(unique)
        report.upload_failures.extend(uploaded.failed)

        report.extraction = await self.extractor.extract_all(uploaded.successful)

        for item in uploaded.successful:
            status = report.extraction.get(item.file_name)
            if status is None or status.state != ExtractionState.SUCCESS or status.record is None:
                continue
            try:
                saved = await self.persister.save(status.record)
            except FarmVizError as exc:
                error = str(exc) or "Failed to save"
                self.logger.log(f"Save failed for {item.file_name}: {error}")
                report.save_failures.append(SaveFailure(file_name=item.file_name, error=error))
                continue
            report.saved.append(saved)

        self.logger.log(f"Batch finished: {report.summary()}.")
        return report


def build_pipeline(
    settings: AppSettings,
    store: PlantStore,
    logger: RunLogger | None = None,
    on_status: StatusCb | None = None,
    http_client: JsonHttpClient | None = None,
) -> BatchPipeline:
    http = http_client or UrlLibJsonHttpClient(timeout_seconds=settings.request_timeout_seconds)
    storage = CloudinaryStorage(
        cloud_name=settings.cloudinary_cloud_name,
        upload_preset=settings.cloudinary_upload_preset,
        folder=settings.upload_folder,
        http_client=http,
    )
    api = build_api(settings, http_client=http)
    return BatchPipeline(
        uploader=UploadCoordinator(storage, logger=logger),
        extractor=ExtractionCoordinator(api, on_status=on_status, logger=logger),
        persister=PersistenceCoordinator(api, store, logger=logger),
        logger=logger,
    )


def build_api(settings: AppSettings, http_client: JsonHttpClient | None = None) -> FarmApi:
    http = http_client or UrlLibJsonHttpClient(timeout_seconds=settings.request_timeout_seconds)
    return FarmApi(settings.api_base_url, settings.user_email, http_client=http)
