from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QFrame, QLabel, QVBoxLayout

from farmviz.util.paths import is_image

_IDLE_TEXT = "Drag & drop plant images here, or click to select files"


class DropZone(QFrame):
    """Drop target for plant images and folders. Clicking it asks for the file picker.

    Drags are accepted only when at least one local item is a folder or a JPG/PNG;
    everything dropped is forwarded so validation can report bad files by name.
    """
    paths_dropped = Signal(list)
    browse_requested = Signal()

    def __init__(self) -> None:
        super().__init__()
        self.setFrameShape(QFrame.StyledPanel)
        self.setAcceptDrops(True)
        self.setCursor(Qt.PointingHandCursor)
        self.setProperty("cssClass", "dropzone")
        self.setProperty("dragActive", False)

        layout = QVBoxLayout(self)
        self.title_label = QLabel(_IDLE_TEXT)
        self.title_label.setAlignment(Qt.AlignCenter)
        hint = QLabel("Supports: JPG, PNG (Max 10MB)")
        hint.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.title_label)
        layout.addWidget(hint)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.browse_requested.emit()
        super().mouseReleaseEvent(event)

    def dragEnterEvent(self, event):
        paths = _local_paths(event.mimeData())
        if any(p.is_dir() or is_image(p) for p in paths):
            self._set_active(True)
            event.acceptProposedAction()

    def dragLeaveEvent(self, event):
        self._set_active(False)
        super().dragLeaveEvent(event)

    def dropEvent(self, event):
        self._set_active(False)
        paths = _local_paths(event.mimeData())
        if paths:
            self.paths_dropped.emit([str(p) for p in paths])
        event.acceptProposedAction()

    def _set_active(self, active: bool) -> None:
        self.title_label.setText("Drop images here..." if active else _IDLE_TEXT)
        self.setProperty("dragActive", active)
        # Re-polish so the dragActive selector takes effect.
        self.style().unpolish(self)
        self.style().polish(self)


def _local_paths(mime) -> list[Path]:
    if not mime.hasUrls():
        return []
    return [Path(u.toLocalFile()) for u in mime.urls() if u.isLocalFile()]
