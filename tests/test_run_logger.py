from __future__ import annotations

from pathlib import Path

from farmviz.core.run_logger import RunLogger


def test_log_appends_timestamped_lines(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "farmviz.log"
    logger = RunLogger(path)

    logger.log("Batch started with 2 file(s).")
    logger.log("Batch finished: 2 saved.")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("[")
    assert lines[1].endswith("Batch finished: 2 saved.")


def test_disabled_logger_writes_nothing(tmp_path: Path) -> None:
    RunLogger.disabled().log("ignored")
    assert list(tmp_path.iterdir()) == []
