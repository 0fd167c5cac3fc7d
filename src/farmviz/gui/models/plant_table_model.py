from __future__ import annotations

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from farmviz.core.map_view import SORT_BY_DATE, format_timestamp, visible_plants
from farmviz.core.models import PlantRecord
from farmviz.core.plant_store import PlantStore

HEADERS = [
    "Image",
    "Latitude",
    "Longitude",
    "Uploaded",
    "Image URL",
]

class PlantTableModel(QAbstractTableModel):
    """Mapped plants from the store, filtered by name and sorted for display."""

    def __init__(self, store: PlantStore) -> None:
        super().__init__()
        self.store = store
        self._filter_text = ""
        self._sort_by = SORT_BY_DATE
        self._rows: list[PlantRecord] = []
        self.refresh()

    def set_filter_text(self, value: str) -> None:
        text = (value or "").strip()
        if self._filter_text == text:
            return
        self._filter_text = text
        self.refresh()

    def set_sort_by(self, value: str) -> None:
        if self._sort_by == value:
            return
        self._sort_by = value
        self.refresh()

    def refresh(self) -> None:
        self.beginResetModel()
        self._rows = visible_plants(self.store.snapshot(), self._filter_text, self._sort_by)
        self.endResetModel()

    def record_at(self, row: int) -> PlantRecord | None:
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None

    @property
    def records(self) -> list[PlantRecord]:
        return list(self._rows)

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(HEADERS)

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole):
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Horizontal:
            return HEADERS[section]
        return str(section + 1)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):
        if role != Qt.DisplayRole:
            return None
        r = self._rows[index.row()]
        col = index.column()
        if col == 0:
            return r.image_name
        if col == 1:
            return f"{r.latitude:.4f}"
        if col == 2:
            return f"{r.longitude:.4f}"
        if col == 3:
            return format_timestamp(r.timestamp, "%Y-%m-%d")
        if col == 4:
            return r.image_url
        return None
