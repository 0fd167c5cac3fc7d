from __future__ import annotations

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

HEADERS = ["File", "Status"]

class UploadStatusModel(QAbstractTableModel):
    """Per-file status of the current (or last) upload batch."""

    def __init__(self, controller) -> None:
        super().__init__()
        self.controller = controller
        self._names: list[str] = []

    def refresh(self) -> None:
        self.beginResetModel()
        self._names = list(self.controller.file_statuses.keys())
        self.endResetModel()

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._names)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(HEADERS)

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole):
        if role != Qt.DisplayRole or orientation != Qt.Horizontal:
            return None
        return HEADERS[section]

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):
        if role != Qt.DisplayRole:
            return None
        name = self._names[index.row()]
        if index.column() == 0:
            return name
        return self.controller.file_statuses.get(name, "")
