from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Slot
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QFileDialog, QMessageBox, QStackedWidget, QButtonGroup, QApplication, QStyle
)

from farmviz.core.local_cache import LocalCache
from farmviz.core.run_logger import RunLogger
from farmviz.core.settings import AppSettings
from farmviz.core.view_state import View
from farmviz.gui.controllers import AppController
from farmviz.gui.pages import UploadPage, MapPage, DetailPage
from farmviz.gui.theme import apply_theme
from farmviz.gui.widgets.log_viewer import LogViewerDialog
from farmviz.gui.widgets.settings_dialog import SettingsDialog
from farmviz.gui.widgets.theme_toggle import ThemeToggle
from farmviz.util.errors import ValidationError
from farmviz.util.platform import open_in_finder

NAV_ITEMS = [
    (View.UPLOAD, "Upload"),
    (View.MAP, "Farm Map"),
    (View.DETAIL, "Details"),
]


class MainWindow(QMainWindow):
    def __init__(
        self,
        settings: AppSettings,
        cache: LocalCache | None = None,
        logger: RunLogger | None = None,
    ) -> None:
        super().__init__()
        self.settings = settings
        self.setWindowTitle("FarmViz - Crop Location Tracker")
        self.resize(980, 680)
        self.setMinimumSize(780, 560)

        self.controller = AppController(settings=settings, cache=cache, logger=logger)
        self.controller.view_changed.connect(self._on_view_changed)
        self.controller.theme_changed.connect(self._on_theme_changed)
        self.controller.plants_changed.connect(self._update_count)
        self.controller.batch_finished.connect(self._on_batch_finished)
        self.controller.error.connect(self._on_error)

        self._build_ui()
        self._on_view_changed(self.controller.view_state.view.value)
        self._update_count()

    def _build_ui(self) -> None:
        root = QWidget()
        self.setCentralWidget(root)
        layout = QVBoxLayout(root)

        # ----- header -----
        header = QHBoxLayout()
        title = QLabel("FarmViz")
        title_font = title.font()
        title_font.setBold(True)
        title_font.setPointSize(title_font.pointSize() + 4)
        title.setFont(title_font)
        header.addWidget(title)
        header.addSpacing(16)

        self.nav_group = QButtonGroup(self)
        self.nav_group.setExclusive(True)
        self.nav_buttons: dict[View, QPushButton] = {}
        for view, label in NAV_ITEMS:
            btn = QPushButton(label)
            btn.setCheckable(True)
            btn.setProperty("navButton", True)
            btn.clicked.connect(lambda _checked=False, v=view: self.controller.set_view(v))
            self.nav_group.addButton(btn)
            self.nav_buttons[view] = btn
            header.addWidget(btn)
        header.addStretch(1)

        self.export_btn = QPushButton("Export CSV")
        self.export_btn.setIcon(self.style().standardIcon(QStyle.SP_DialogSaveButton))
        self.export_btn.clicked.connect(self._export_csv)
        header.addWidget(self.export_btn)

        self.count_badge = QLabel("0")
        self.count_badge.setProperty("cssClass", "badge")
        self.count_badge.setToolTip("Plants in collection")
        header.addWidget(self.count_badge)

        self.log_btn = QPushButton("Log")
        self.log_btn.clicked.connect(self._view_log)
        header.addWidget(self.log_btn)
        self.settings_btn = QPushButton("Settings")
        self.settings_btn.clicked.connect(self._open_settings)
        header.addWidget(self.settings_btn)

        self.theme_toggle = ThemeToggle(self.controller.view_state.theme.value)
        self.theme_toggle.toggle_requested.connect(self.controller.toggle_theme)
        header.addWidget(self.theme_toggle)
        layout.addLayout(header)

        # ----- pages -----
        self.main_stack = QStackedWidget()
        layout.addWidget(self.main_stack, 1)
        self.upload_page = UploadPage(self.controller)
        self.map_page = MapPage(self.controller)
        self.detail_page = DetailPage(self.controller)
        self._pages = {
            View.UPLOAD: self.upload_page,
            View.MAP: self.map_page,
            View.DETAIL: self.detail_page,
        }
        for page in self._pages.values():
            self.main_stack.addWidget(page)

        self.statusBar().showMessage(self._cache_status())

    def _cache_status(self) -> str:
        count = len(self.controller.store)
        if count:
            return f"Loaded {count} plant(s) from local cache."
        return "Ready."

    @Slot(str)
    def _on_view_changed(self, value: str) -> None:
        view = View(value)
        self.nav_buttons[view].setChecked(True)
        self.main_stack.setCurrentWidget(self._pages[view])
        if view == View.MAP and self.controller.can_fetch and not self.controller.is_busy:
            self.controller.refresh_plants()

    @Slot(str)
    def _on_theme_changed(self, theme: str) -> None:
        app = QApplication.instance()
        if app:
            apply_theme(app, theme)
        self.theme_toggle.set_theme(theme)

    def _update_count(self) -> None:
        self.count_badge.setText(str(len(self.controller.store)))

    def _on_batch_finished(self, report) -> None:
        self.statusBar().showMessage(f"Batch complete: {report.summary()}.", 10000)

    def _on_error(self, message: str) -> None:
        self.statusBar().showMessage(message, 10000)
        QMessageBox.warning(self, "FarmViz", message)

    def _export_csv(self) -> None:
        start = self.settings.last_export_dir or str(Path.home())
        d = QFileDialog.getExistingDirectory(self, "Select export folder", start)
        if not d:
            return
        try:
            path = self.controller.export_csv(Path(d))
        except ValidationError as exc:
            QMessageBox.information(self, "Export", str(exc))
            return
        self.settings.save()
        self.statusBar().showMessage(f"Data exported successfully: {path}", 10000)
        open_in_finder(path.parent, logger=self.controller.logger)

    def _view_log(self) -> None:
        path = self.controller.logger.path
        if path is None:
            QMessageBox.information(self, "Session Log", "Logging is disabled for this session.")
            return
        LogViewerDialog(path, parent=self).exec()

    def closeEvent(self, event) -> None:
        self.controller.wait_for_worker()
        super().closeEvent(event)

    def _open_settings(self) -> None:
        dlg = SettingsDialog(self.settings, parent=self)
        if dlg.exec():
            self.statusBar().showMessage("Settings saved.", 5000)
