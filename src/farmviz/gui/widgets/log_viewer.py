from __future__ import annotations

from pathlib import Path

from PySide6.QtWidgets import QDialog, QVBoxLayout, QLabel, QTextEdit, QDialogButtonBox, QPushButton

from farmviz.util.platform import open_in_finder


class LogViewerDialog(QDialog):
    def __init__(self, log_path: Path, parent=None) -> None:
        super().__init__(parent)
        self.log_path = log_path
        self.setWindowTitle("Session Log")
        self.resize(700, 500)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel(str(log_path)))

        self.text = QTextEdit()
        self.text.setReadOnly(True)
        self.text.setPlainText(read_log(log_path))
        layout.addWidget(self.text, 1)

        buttons = QDialogButtonBox(QDialogButtonBox.Close)
        open_btn = QPushButton("Show Folder")
        open_btn.clicked.connect(lambda: open_in_finder(self.log_path.parent))
        buttons.addButton(open_btn, QDialogButtonBox.ActionRole)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)


def read_log(path: Path) -> str:
    if not path.exists():
        return "No log entries yet."
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        return f"Unable to read log: {exc}"
