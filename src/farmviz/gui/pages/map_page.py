from __future__ import annotations

from PySide6.QtCore import QModelIndex
from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QLineEdit,
    QComboBox,
    QTableView,
    QHeaderView,
)

from farmviz.core.map_view import SORT_BY_DATE, SORT_BY_NAME, map_bounds, map_center
from farmviz.gui.controllers import AppController
from farmviz.gui.models.plant_table_model import PlantTableModel


class MapPage(QWidget):
    """Farm map listing. Tile rendering is left to an external viewer (Google Maps)."""

    def __init__(self, controller: AppController, parent=None) -> None:
        super().__init__(parent)
        self.controller = controller
        self.controller.plants_changed.connect(self.refresh)
        self.controller.busy_changed.connect(self._on_busy_changed)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 16, 20, 16)
        layout.setSpacing(12)

        header = QHBoxLayout()
        title = QLabel("Farm Crop Visualization")
        title_font = title.font()
        title_font.setBold(True)
        title_font.setPointSize(title_font.pointSize() + 2)
        title.setFont(title_font)
        header.addWidget(title)
        header.addStretch(1)
        self.count_label = QLabel("")
        header.addWidget(self.count_label)
        layout.addLayout(header)

        controls = QHBoxLayout()
        self.filter_edit = QLineEdit()
        self.filter_edit.setPlaceholderText("Search plants...")
        self.filter_edit.textChanged.connect(self._on_filter_changed)
        self.sort_combo = QComboBox()
        self.sort_combo.addItem("Sort by Date", userData=SORT_BY_DATE)
        self.sort_combo.addItem("Sort by Name", userData=SORT_BY_NAME)
        self.sort_combo.currentIndexChanged.connect(self._on_sort_changed)
        self.refresh_btn = QPushButton("Refresh")
        self.refresh_btn.clicked.connect(self.controller.refresh_plants)
        controls.addWidget(self.filter_edit, 1)
        controls.addWidget(self.sort_combo)
        controls.addWidget(self.refresh_btn)
        layout.addLayout(controls)

        self.model = PlantTableModel(controller.store)
        self.table = QTableView()
        self.table.setModel(self.model)
        self.table.setSelectionBehavior(QTableView.SelectRows)
        self.table.setSelectionMode(QTableView.SingleSelection)
        self.table.horizontalHeader().setSectionResizeMode(4, QHeaderView.Stretch)
        self.table.doubleClicked.connect(self._on_double_clicked)
        self.table.selectionModel().selectionChanged.connect(self._on_selection_changed)
        layout.addWidget(self.table, 1)

        self.empty_label = QLabel("No plants mapped yet. Upload some images to get started!")
        layout.addWidget(self.empty_label)
        self.extent_label = QLabel("")
        self.extent_label.setWordWrap(True)
        layout.addWidget(self.extent_label)

        actions = QHBoxLayout()
        actions.addStretch(1)
        self.details_btn = QPushButton("View Details")
        self.details_btn.clicked.connect(self._view_details)
        actions.addWidget(self.details_btn)
        layout.addLayout(actions)

        self.refresh()

    def refresh(self) -> None:
        self.model.refresh()
        self._update_labels()

    def _update_labels(self) -> None:
        rows = self.model.records
        self.count_label.setText(f"{len(rows)} plants mapped")
        self.empty_label.setVisible(not rows)
        self.table.setVisible(bool(rows))
        center = map_center(rows)
        bounds = map_bounds(rows)
        text = f"Center: {center[0]:.4f}, {center[1]:.4f}"
        if bounds:
            (south, west), (north, east) = bounds
            text += f"  |  Extent: {south:.4f}, {west:.4f} to {north:.4f}, {east:.4f}"
        self.extent_label.setText(text)
        self._update_buttons()

    def _on_filter_changed(self, text: str) -> None:
        self.model.set_filter_text(text)
        self._update_labels()

    def _on_sort_changed(self, _index: int) -> None:
        self.model.set_sort_by(self.sort_combo.currentData())
        self._update_labels()

    def _selected_row(self) -> int:
        sel = self.table.selectionModel().selectedRows()
        return sel[0].row() if sel else -1

    def _on_selection_changed(self, *_args) -> None:
        record = self.model.record_at(self._selected_row())
        if record is not None:
            self.controller.select_plant(record)
        self._update_buttons()

    def _on_double_clicked(self, index: QModelIndex) -> None:
        record = self.model.record_at(index.row())
        if record is not None:
            self.controller.show_detail(record)

    def _view_details(self) -> None:
        record = self.model.record_at(self._selected_row())
        if record is not None:
            self.controller.show_detail(record)

    def _on_busy_changed(self, busy: bool) -> None:
        self.refresh_btn.setEnabled(not busy)
        self.refresh_btn.setText("Loading..." if busy else "Refresh")

    def _update_buttons(self) -> None:
        self.details_btn.setEnabled(self._selected_row() >= 0)
