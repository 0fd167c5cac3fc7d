from __future__ import annotations

import asyncio
from typing import Sequence

from farmviz.core.models import BatchUploadResult, CandidateFile, UploadFailure, UploadResult, UploadSuccess
from farmviz.core.run_logger import RunLogger
from farmviz.core.validation import partition_candidates
from farmviz.services.storage import ImageStorage
from farmviz.util.errors import ValidationError


class UploadCoordinator:
    """Sends a batch of files to image storage and partitions the outcomes."""

    def __init__(self, storage: ImageStorage, logger: RunLogger | None = None) -> None:
        self.storage = storage
        self.logger = logger or RunLogger.disabled()

    async def submit_batch(self, files: Sequence[CandidateFile]) -> BatchUploadResult:
        """Upload every file concurrently and wait for all of them to settle.

        Raises ValidationError (before any request) for an empty batch or one that
        still contains an invalid file. Once uploads start this never raises: each
        file's error is captured as an UploadFailure and siblings keep going.
        """
        if not files:
            raise ValidationError("Please select files to upload.")
        _, issues = partition_candidates(files)
        if issues:
            raise ValidationError("; ".join(i.message for i in issues))

        self.logger.log(f"Uploading {len(files)} file(s)...")
        outcomes = await asyncio.gather(*(self._upload_one(f) for f in files))

        result = BatchUploadResult()
        for outcome in outcomes:
            if isinstance(outcome, UploadSuccess):
                result.successful.append(outcome)
            else:
                result.failed.append(outcome)
        self.logger.log(f"Upload finished: {len(result.successful)} ok, {len(result.failed)} failed.")
        return result

    async def _upload_one(self, candidate: CandidateFile) -> UploadResult:
        try:
            stored = await asyncio.to_thread(self.storage.upload, candidate)
        except Exception as exc:
            error = str(exc) or "Upload failed"
            self.logger.log(f"Upload failed for {candidate.name}: {error}")
            return UploadFailure(file_name=candidate.name, error=error)
        return UploadSuccess(file_name=candidate.name, storage_url=stored.url, storage_id=stored.id)
