from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Slot
from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QGroupBox,
    QListWidget,
    QFileDialog,
    QMessageBox,
    QTableView,
    QHeaderView,
)

from farmviz.core.models import BatchReport
from farmviz.gui.controllers import AppController
from farmviz.gui.models.upload_status_model import UploadStatusModel
from farmviz.gui.widgets.drop_zone import DropZone
from farmviz.util.errors import ValidationError


class UploadPage(QWidget):
    def __init__(self, controller: AppController, parent=None) -> None:
        super().__init__(parent)
        self.controller = controller
        self.controller.files_changed.connect(self._refresh_files)
        self.controller.statuses_changed.connect(self._refresh_statuses)
        self.controller.busy_changed.connect(self._on_busy_changed)
        self.controller.batch_finished.connect(self._on_batch_finished)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 16, 20, 16)
        layout.setSpacing(12)

        title = QLabel("Upload Plant Images")
        title_font = title.font()
        title_font.setBold(True)
        title_font.setPointSize(title_font.pointSize() + 2)
        title.setFont(title_font)
        layout.addWidget(title)
        layout.addWidget(QLabel("Upload geo-tagged images of your crops to visualize them on the farm map."))

        self.drop_zone = DropZone()
        self.drop_zone.paths_dropped.connect(self._on_paths_dropped)
        self.drop_zone.browse_requested.connect(self._browse_files)
        self.drop_zone.setMinimumHeight(110)
        layout.addWidget(self.drop_zone)

        files_group = QGroupBox("Selected Files")
        files_layout = QVBoxLayout(files_group)
        btn_row = QHBoxLayout()
        browse_btn = QPushButton("Browse Files…")
        browse_btn.clicked.connect(self._browse_files)
        self.remove_btn = QPushButton("Remove")
        self.remove_btn.clicked.connect(self._remove_selected)
        self.clear_btn = QPushButton("Clear")
        self.clear_btn.clicked.connect(self.controller.clear_files)
        btn_row.addWidget(browse_btn)
        btn_row.addStretch(1)
        btn_row.addWidget(self.remove_btn)
        btn_row.addWidget(self.clear_btn)
        files_layout.addLayout(btn_row)
        self.files_list = QListWidget()
        self.files_list.setMinimumHeight(80)
        files_layout.addWidget(self.files_list)
        layout.addWidget(files_group)

        self.upload_btn = QPushButton("Upload && Process Images")
        self.upload_btn.setMinimumHeight(36)
        self.upload_btn.clicked.connect(self._upload)
        layout.addWidget(self.upload_btn)

        results_group = QGroupBox("Recently Uploaded")
        results_layout = QVBoxLayout(results_group)
        self.status_model = UploadStatusModel(controller)
        self.status_table = QTableView()
        self.status_table.setModel(self.status_model)
        self.status_table.horizontalHeader().setSectionResizeMode(1, QHeaderView.Stretch)
        self.status_table.verticalHeader().setVisible(False)
        results_layout.addWidget(self.status_table)
        self.summary_label = QLabel("")
        self.summary_label.setWordWrap(True)
        results_layout.addWidget(self.summary_label)
        layout.addWidget(results_group, 1)

        self._refresh_files()
        self._refresh_statuses()

    @Slot(list)
    def _on_paths_dropped(self, paths: list[str]) -> None:
        self._add_paths([Path(p) for p in paths])

    def _browse_files(self) -> None:
        files, _ = QFileDialog.getOpenFileNames(
            self, "Select plant images", str(Path.home()), "Images (*.jpg *.jpeg *.png)"
        )
        if files:
            self._add_paths([Path(f) for f in files])

    def _add_paths(self, paths: list[Path]) -> None:
        rejected = self.controller.add_paths(paths)
        if rejected:
            QMessageBox.warning(self, "Some files were rejected", "\n".join(rejected))

    def _remove_selected(self) -> None:
        row = self.files_list.currentRow()
        if row >= 0:
            self.controller.remove_file(row)

    def _upload(self) -> None:
        try:
            self.controller.start_batch()
        except ValidationError as exc:
            QMessageBox.warning(self, "Cannot upload", str(exc))

    def _refresh_files(self) -> None:
        self.files_list.clear()
        for c in self.controller.selected_files:
            self.files_list.addItem(f"{c.name}  ({c.size_bytes / 1024 / 1024:.2f} MB)")
        self._on_busy_changed(self.controller.is_busy)

    def _refresh_statuses(self) -> None:
        self.status_model.refresh()

    def _on_busy_changed(self, busy: bool) -> None:
        has_files = bool(self.controller.selected_files)
        self.upload_btn.setEnabled(has_files and not busy)
        self.upload_btn.setText("Uploading..." if busy else "Upload && Process Images")
        self.remove_btn.setEnabled(has_files and not busy)
        self.clear_btn.setEnabled(has_files and not busy)

    def _on_batch_finished(self, report: BatchReport) -> None:
        self.summary_label.setText(f"Batch complete: {report.summary()}.")
