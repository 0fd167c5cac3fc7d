from __future__ import annotations

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QFormLayout,
    QStackedWidget,
    QApplication,
)

from farmviz.core.map_view import format_coordinates, format_timestamp, google_maps_url
from farmviz.core.view_state import View
from farmviz.gui.controllers import AppController


class DetailPage(QWidget):
    def __init__(self, controller: AppController, parent=None) -> None:
        super().__init__(parent)
        self.controller = controller
        self.controller.selection_changed.connect(self.refresh)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 16, 20, 16)
        self.stack = QStackedWidget()
        layout.addWidget(self.stack)

        # Empty state
        self.empty_page = QWidget()
        empty_layout = QVBoxLayout(self.empty_page)
        empty_layout.addStretch(1)
        empty_layout.addWidget(QLabel("No Plant Selected"))
        empty_layout.addWidget(QLabel("Select a plant on the farm map to view details."))
        go_map_btn = QPushButton("Go to Map")
        go_map_btn.clicked.connect(lambda: self.controller.set_view(View.MAP))
        empty_layout.addWidget(go_map_btn)
        empty_layout.addStretch(1)
        self.stack.addWidget(self.empty_page)

        # Details
        self.detail_page = QWidget()
        detail_layout = QVBoxLayout(self.detail_page)
        header = QHBoxLayout()
        title = QLabel("Plant Details")
        title_font = title.font()
        title_font.setBold(True)
        title_font.setPointSize(title_font.pointSize() + 2)
        title.setFont(title_font)
        header.addWidget(title)
        header.addStretch(1)
        close_btn = QPushButton("Close")
        close_btn.setToolTip("Close and return to map")
        close_btn.clicked.connect(self.controller.close_detail)
        header.addWidget(close_btn)
        detail_layout.addLayout(header)

        form = QFormLayout()
        self.name_label = QLabel()
        self.location_label = QLabel()
        self.date_label = QLabel()
        self.url_label = QLabel()
        self.url_label.setWordWrap(True)
        form.addRow("Image Name", self.name_label)
        form.addRow("Location", self.location_label)
        form.addRow("Upload Date", self.date_label)
        form.addRow("Image URL", self.url_label)
        detail_layout.addLayout(form)

        actions = QHBoxLayout()
        self.copy_btn = QPushButton("Copy Coordinates")
        self.copy_btn.clicked.connect(self._copy_coordinates)
        self.maps_btn = QPushButton("Open in Google Maps")
        self.maps_btn.clicked.connect(self._open_in_maps)
        self.image_btn = QPushButton("Open Image")
        self.image_btn.clicked.connect(self._open_image)
        actions.addWidget(self.copy_btn)
        actions.addWidget(self.maps_btn)
        actions.addWidget(self.image_btn)
        actions.addStretch(1)
        detail_layout.addLayout(actions)
        detail_layout.addStretch(1)
        self.stack.addWidget(self.detail_page)

        self.refresh()

    def refresh(self) -> None:
        record = self.controller.view_state.selected
        if record is None:
            self.stack.setCurrentWidget(self.empty_page)
            return
        self.name_label.setText(record.image_name)
        self.location_label.setText(format_coordinates(record))
        self.date_label.setText(format_timestamp(record.timestamp) or "Unknown")
        self.url_label.setText(record.image_url)
        self.maps_btn.setEnabled(google_maps_url(record) is not None)
        self.image_btn.setEnabled(bool(record.image_url))
        self.stack.setCurrentWidget(self.detail_page)

    def _copy_coordinates(self) -> None:
        record = self.controller.view_state.selected
        if record is None or not record.has_valid_coordinates():
            return
        QApplication.clipboard().setText(f"{record.latitude}, {record.longitude}")

    def _open_in_maps(self) -> None:
        record = self.controller.view_state.selected
        url = google_maps_url(record) if record is not None else None
        if url:
            QDesktopServices.openUrl(QUrl(url))

    def _open_image(self) -> None:
        record = self.controller.view_state.selected
        if record is not None and record.image_url:
            QDesktopServices.openUrl(QUrl(record.image_url))
