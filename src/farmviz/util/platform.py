from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from farmviz.core.run_logger import RunLogger

def open_in_finder(path: Path, logger: RunLogger | None = None) -> bool:
    """Open a folder (or file) in the platform file browser; best-effort.

    Returns False when the browser could not be launched; the reason goes to `logger`.
    """
    if sys.platform == "darwin":
        cmd = ["open", str(path)]
    elif sys.platform.startswith("win"):
        cmd = ["explorer", str(path)]
    else:
        cmd = ["xdg-open", str(path)]
    try:
        subprocess.run(cmd, check=False)
    except OSError as exc:
        if logger is not None:
            logger.log(f"Could not open {path} in the file browser: {exc}")
        return False
    return True
