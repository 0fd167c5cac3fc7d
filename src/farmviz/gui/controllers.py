from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QObject, QThread, Signal

from farmviz.core.export import write_export
from farmviz.core.local_cache import LocalCache
from farmviz.core.models import BatchReport, CandidateFile, ExtractionState, PlantRecord
from farmviz.core.pipeline import build_api, build_pipeline
from farmviz.core.plant_store import LoadState, PlantStore
from farmviz.core.run_logger import RunLogger
from farmviz.core.scanner import scan_image_inputs
from farmviz.core.settings import AppSettings, cache_path, log_path
from farmviz.core.validation import partition_candidates
from farmviz.core.view_state import Theme, View, ViewState
from farmviz.gui.workers import BatchWorker, FetchWorker
from farmviz.util.errors import ValidationError

STATUS_LABELS = {
    "uploading": "Uploading...",
    ExtractionState.PENDING.value: "Waiting...",
    ExtractionState.PROCESSING.value: "Processing...",
    ExtractionState.SUCCESS.value: "Location extracted",
    ExtractionState.FAILED.value: "Failed to extract location",
}


class AppController(QObject):
    """Application state container.

    Owns the plant store, view state and the current file selection. Each
    mutation goes through one method here; long work runs on worker threads.
    """
    files_changed = Signal()
    statuses_changed = Signal()
    plants_changed = Signal()
    view_changed = Signal(str)
    selection_changed = Signal()
    theme_changed = Signal(str)
    busy_changed = Signal(bool)
    batch_finished = Signal(object)  # BatchReport
    fetch_finished = Signal(str)  # LoadState value
    error = Signal(str)

    def __init__(
        self,
        settings: AppSettings,
        cache: LocalCache | None = None,
        logger: RunLogger | None = None,
    ) -> None:
        super().__init__()
        self.settings = settings
        self.logger = logger or RunLogger(log_path())
        self.cache = cache or LocalCache(cache_path(), logger=self.logger)
        self.store = PlantStore(self.cache, logger=self.logger)
        self.store.load_from_cache()
        self.view_state = ViewState.restore(self.cache)

        self.selected_files: list[CandidateFile] = []
        self.file_statuses: dict[str, str] = {}
        self.last_report: BatchReport | None = None
        self._batch_names: set[str] = set()
        self._worker: QThread | None = None

    # ----- selection -----

    def add_paths(self, paths: list[Path]) -> list[str]:
        """Add files/folders to the selection. Returns one message per rejected file."""
        accepted, issues = partition_candidates(scan_image_inputs(paths))
        known = {c.name for c in self.selected_files}
        for c in accepted:
            if c.name in known:
                continue
            known.add(c.name)
            self.selected_files.append(c)
        self.files_changed.emit()
        return [i.message for i in issues]

    def remove_file(self, index: int) -> None:
        if 0 <= index < len(self.selected_files) and not self.is_busy:
            del self.selected_files[index]
            self.files_changed.emit()

    def clear_files(self) -> None:
        self.selected_files = []
        self.files_changed.emit()

    # ----- async work -----

    @property
    def is_busy(self) -> bool:
        return self._worker is not None

    def start_batch(self) -> bool:
        if self.is_busy:
            return False
        if not self.selected_files:
            raise ValidationError("Please select files to upload")
        missing = self.settings.missing_service_fields()
        if missing:
            raise ValidationError(f"Service settings missing: {', '.join(missing)}")

        candidates = list(self.selected_files)
        self._batch_names = {c.name for c in candidates}
        self.file_statuses = {c.name: STATUS_LABELS["uploading"] for c in candidates}
        self.statuses_changed.emit()

        pipeline = build_pipeline(self.settings, self.store, logger=self.logger)
        worker = BatchWorker(pipeline, candidates)
        worker.status_changed.connect(self._on_status_changed)
        worker.finished.connect(self._on_batch_finished)
        worker.failed.connect(self._on_worker_failed)
        self._start(worker)
        return True

    @property
    def can_fetch(self) -> bool:
        missing = self.settings.missing_service_fields()
        return "api_base_url" not in missing and "user_email" not in missing

    def refresh_plants(self) -> bool:
        if self.is_busy:
            return False
        if not self.can_fetch:
            self.error.emit("Service settings missing: API base URL and user e-mail are required.")
            return False
        worker = FetchWorker(self.store, build_api(self.settings))
        worker.finished.connect(self._on_fetch_finished)
        worker.failed.connect(self._on_worker_failed)
        self._start(worker)
        return True

    def wait_for_worker(self, msecs: int = 5000) -> None:
        if self._worker is not None:
            self._worker.wait(msecs)

    def _start(self, worker: QThread) -> None:
        self._worker = worker
        self.busy_changed.emit(True)
        worker.start()

    def _done(self) -> None:
        worker, self._worker = self._worker, None
        if worker is not None:
            # run() has already emitted its result; let the thread return before release.
            worker.wait()
            worker.deleteLater()
        self.busy_changed.emit(False)

    def _on_status_changed(self, file_name: str, state: str, reason: str) -> None:
        label = STATUS_LABELS.get(state, state)
        if reason:
            label = f"{label}: {reason}"
        self.file_statuses[file_name] = label
        self.statuses_changed.emit()

    def _on_batch_finished(self, report: BatchReport) -> None:
        self.last_report = report
        for failure in report.upload_failures:
            self.file_statuses[failure.file_name] = f"Upload failed: {failure.error}"
        for failure in report.save_failures:
            self.file_statuses[failure.file_name] = f"Failed to save: {failure.error}"
        for record in report.saved:
            self.file_statuses[record.image_name] = "Saved"
        self.selected_files = [c for c in self.selected_files if c.name not in self._batch_names]
        self._batch_names = set()
        self._done()
        self.files_changed.emit()
        self.statuses_changed.emit()
        self.plants_changed.emit()
        self.batch_finished.emit(report)

    def _on_fetch_finished(self, state: str) -> None:
        self._done()
        self.plants_changed.emit()
        self.fetch_finished.emit(state)
        if state in (LoadState.LOADED_FROM_CACHE.value, LoadState.EMPTY_WITH_ERROR.value):
            self.error.emit(f"Failed to load plant data: {self.store.error}")
            self.store.clear_error()

    def _on_worker_failed(self, err: str) -> None:
        self.logger.log(f"Worker failed: {err}")
        self._done()
        self.error.emit(err or "Failed.")

    # ----- navigation -----

    def set_view(self, view: View | str) -> None:
        self.view_state.set_view(view)
        self.view_changed.emit(self.view_state.view.value)

    def select_plant(self, record: PlantRecord | None) -> None:
        self.view_state.select(record)
        self.selection_changed.emit()

    def show_detail(self, record: PlantRecord) -> None:
        self.view_state.show_detail(record)
        self.selection_changed.emit()
        self.view_changed.emit(self.view_state.view.value)

    def close_detail(self) -> None:
        self.view_state.close_detail()
        self.selection_changed.emit()
        self.view_changed.emit(self.view_state.view.value)

    def toggle_theme(self) -> Theme:
        theme = self.view_state.toggle_theme()
        self.theme_changed.emit(theme.value)
        return theme

    # ----- export -----

    def export_csv(self, dest_dir: Path) -> Path:
        path = write_export(self.store.snapshot(), dest_dir)
        self.settings.last_export_dir = str(dest_dir)
        self.logger.log(f"Exported {len(self.store)} plant(s) to {path}")
        return path
