from __future__ import annotations

from PySide6.QtCore import Qt, QPointF, QSize, Signal
from PySide6.QtGui import QIcon, QPainter, QPainterPath, QPalette, QPixmap

from PySide6.QtWidgets import QToolButton

_ICON_SIZE = QSize(18, 18)


class ThemeToggle(QToolButton):
    """One button: shows a moon in light mode and a sun in dark mode."""
    toggle_requested = Signal()

    def __init__(self, theme: str = "light", parent=None) -> None:
        super().__init__(parent)
        self.setAutoRaise(True)
        self.setIconSize(_ICON_SIZE)
        self.clicked.connect(self.toggle_requested.emit)
        self._theme = "light"
        self.set_theme(theme)

    @property
    def theme(self) -> str:
        return self._theme

    def set_theme(self, theme: str) -> None:
        self._theme = "dark" if (theme or "").strip().lower() == "dark" else "light"
        target = "light" if self._theme == "dark" else "dark"
        self.setToolTip(f"Switch to {target} mode")
        self.refresh_icon()

    def refresh_icon(self) -> None:
        fg = self.palette().color(QPalette.Text)
        self.setIcon(QIcon(_glyph(fg, sun=self._theme == "dark")))


def _glyph(color, sun: bool) -> QPixmap:
    size = _ICON_SIZE.width()
    pm = QPixmap(size, size)
    pm.fill(Qt.transparent)
    painter = QPainter(pm)
    painter.setRenderHint(QPainter.Antialiasing, True)
    painter.setPen(Qt.NoPen)
    painter.setBrush(color)
    center = QPointF(size / 2.0, size / 2.0)
    if sun:
        painter.drawEllipse(center, size * 0.3, size * 0.3)
    else:
        disc = QPainterPath()
        disc.addEllipse(center, size * 0.4, size * 0.4)
        bite = QPainterPath()
        bite.addEllipse(center + QPointF(size * 0.18, -size * 0.1), size * 0.32, size * 0.32)
        painter.drawPath(disc.subtracted(bite))
    painter.end()
    return pm
