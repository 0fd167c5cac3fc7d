from __future__ import annotations

from pathlib import Path

from farmviz.core.run_logger import RunLogger
from farmviz.util import platform


def test_open_in_finder_logs_launch_failure(tmp_path: Path, monkeypatch) -> None:
    def fail(cmd, check=False):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr(platform.subprocess, "run", fail)
    log = tmp_path / "run.log"

    assert platform.open_in_finder(tmp_path, logger=RunLogger(log)) is False
    text = log.read_text(encoding="utf-8")
    assert f"Could not open {tmp_path}" in text
    assert "No such file or directory" in text


def test_open_in_finder_runs_browser_command(tmp_path: Path, monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(platform.subprocess, "run", lambda cmd, check=False: calls.append(cmd))

    assert platform.open_in_finder(tmp_path) is True
    assert calls and calls[0][-1] == str(tmp_path)
