from __future__ import annotations

import asyncio
from typing import Sequence

from PySide6.QtCore import QThread, Signal

from farmviz.core.models import CandidateFile, ExtractionStatus
from farmviz.core.pipeline import BatchPipeline
from farmviz.core.plant_store import PlantStore
from farmviz.services.api import FarmApi


class BatchWorker(QThread):
    """Runs one upload batch on its own event loop, off the GUI thread."""
    status_changed = Signal(str, str, str)  # file name, state, reason
    finished = Signal(object)  # BatchReport
    failed = Signal(str)

    def __init__(self, pipeline: BatchPipeline, candidates: Sequence[CandidateFile]) -> None:
        super().__init__()
        self.pipeline = pipeline
        self.candidates = list(candidates)
        self.pipeline.extractor.on_status = self._emit_status

    def _emit_status(self, file_name: str, status: ExtractionStatus) -> None:
        self.status_changed.emit(file_name, status.state.value, status.reason)

    def run(self) -> None:
        try:
            report = asyncio.run(self.pipeline.run(self.candidates))
            self.finished.emit(report)
        except Exception as e:
            self.failed.emit(str(e))


class FetchWorker(QThread):
    finished = Signal(str)  # LoadState value
    failed = Signal(str)

    def __init__(self, store: PlantStore, api: FarmApi) -> None:
        super().__init__()
        self.store = store
        self.api = api

    def run(self) -> None:
        try:
            state = asyncio.run(self.store.fetch_all(self.api))
            self.finished.emit(state.value)
        except Exception as e:
            self.failed.emit(str(e))
