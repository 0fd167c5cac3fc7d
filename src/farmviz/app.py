"""Application entrypoint.

Run in development:
    python -m farmviz.app
"""

from __future__ import annotations

import sys
from PySide6.QtWidgets import QApplication

from farmviz.core.local_cache import LocalCache
from farmviz.core.run_logger import RunLogger
from farmviz.core.settings import AppSettings, cache_path, log_path
from farmviz.gui.main_window import MainWindow
from farmviz.gui.theme import apply_theme


def main() -> int:
    app = QApplication(sys.argv)
    app.setApplicationName("FarmViz")

    settings = AppSettings.load().with_env_overrides()
    logger = RunLogger(log_path())
    logger.log("Session started.")
    cache = LocalCache(cache_path(), logger=logger)

    win = MainWindow(settings=settings, cache=cache, logger=logger)
    apply_theme(app, win.controller.view_state.theme)
    win.theme_toggle.refresh_icon()
    win.show()

    code = app.exec()
    logger.log("Session ended.")
    return code


if __name__ == "__main__":
    raise SystemExit(main())
