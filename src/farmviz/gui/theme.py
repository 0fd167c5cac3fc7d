from __future__ import annotations

from PySide6.QtGui import QPalette, QColor
from PySide6.QtWidgets import QApplication, QStyleFactory

from farmviz.core.view_state import Theme, parse_theme

# role -> (light, dark)
_COLORS = {
    QPalette.Window: ("#f6f8f4", "#141714"),
    QPalette.WindowText: ("#1b2a1b", "#e6ede6"),
    QPalette.Base: ("#ffffff", "#1e221e"),
    QPalette.AlternateBase: ("#eef3ea", "#262b26"),
    QPalette.ToolTipBase: ("#ffffe1", "#2b2f2b"),
    QPalette.ToolTipText: ("#111111", "#f2f2f2"),
    QPalette.Text: ("#1b2a1b", "#e6ede6"),
    QPalette.Button: ("#eef3ea", "#2a302a"),
    QPalette.ButtonText: ("#1b2a1b", "#e6ede6"),
    QPalette.Highlight: ("#2e7d32", "#66bb6a"),
    QPalette.Link: ("#1b5e20", "#81c784"),
}


def apply_theme(app: QApplication, theme: Theme | str) -> None:
    mode = parse_theme(theme.value if isinstance(theme, Theme) else theme)
    app.setStyle(QStyleFactory.create("Fusion"))
    app.setPalette(build_palette(mode))

    accent = "#2e7d32" if mode == Theme.LIGHT else "#66bb6a"
    border = "#c5d3c0" if mode == Theme.LIGHT else "#3a423a"
    app.setStyleSheet(
        f"QFrame[cssClass=\"dropzone\"] {{ border: 2px dashed {border}; border-radius: 10px; }}"
        f"QFrame[cssClass=\"dropzone\"][dragActive=\"true\"] {{ border-color: {accent}; }}"
        f"QLabel[cssClass=\"badge\"] {{ border: 1px solid {accent}; border-radius: 9px; padding: 2px 8px; }}"
        f"QPushButton[navButton=\"true\"]:checked {{ background: {accent}; color: #ffffff; }}"
    )


def build_palette(mode: Theme) -> QPalette:
    idx = 0 if mode == Theme.LIGHT else 1
    palette = QPalette()
    for role, pair in _COLORS.items():
        palette.setColor(role, QColor(pair[idx]))
    highlight = QColor(_COLORS[QPalette.Highlight][idx])
    palette.setColor(QPalette.HighlightedText, _contrast_text(highlight))

    disabled_text = QColor(120, 120, 120) if mode == Theme.LIGHT else QColor(140, 140, 140)
    palette.setColor(QPalette.Disabled, QPalette.Text, disabled_text)
    palette.setColor(QPalette.Disabled, QPalette.WindowText, disabled_text)
    palette.setColor(QPalette.Disabled, QPalette.ButtonText, disabled_text)
    return palette


def _contrast_text(color: QColor) -> QColor:
    # Relative luminance to ensure readable highlight text.
    r = color.red() / 255.0
    g = color.green() / 255.0
    b = color.blue() / 255.0
    luminance = (0.2126 * r) + (0.7152 * g) + (0.0722 * b)
    return QColor(0, 0, 0) if luminance > 0.6 else QColor(255, 255, 255)
