from __future__ import annotations

import json
import os
from pathlib import Path
import tempfile
import threading
from typing import Iterable

from farmviz.core.models import PlantRecord
from farmviz.core.run_logger import RunLogger

PLANTS_KEY = "farmPlants"
THEME_KEY = "theme"


class LocalCache:
    """Durable string key/value store backed by one JSON file.

    Reads never fail: a missing or corrupt file behaves like an empty cache.
    Writes replace the whole file atomically and are best-effort. One instance may
    be shared by the GUI thread and a worker thread; each read-modify-write holds a lock.
    """

    def __init__(self, path: Path, logger: RunLogger | None = None) -> None:
        self.path = path
        self.logger = logger or RunLogger.disabled()
        self._lock = threading.Lock()

    def get_item(self, key: str) -> str | None:
        with self._lock:
            value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> bool:
        with self._lock:
            data = self._read()
            data[key] = value
            return self._write(data)

    def remove_item(self, key: str) -> bool:
        with self._lock:
            data = self._read()
            if key not in data:
                return True
            del data[key]
            return self._write(data)

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            self.logger.log(f"Local cache unreadable ({exc}); treating as empty.")
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            self.logger.log("Local cache is corrupt; treating as empty.")
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> bool:
        tmp: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=self.path.name + ".",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp = Path(f.name)
                f.write(json.dumps(data))
            os.replace(tmp, self.path)
        except OSError as exc:
            self.logger.log(f"Local cache write failed: {exc}")
            if tmp is not None:
                tmp.unlink(missing_ok=True)
            return False
        return True


def save_plants_snapshot(cache: LocalCache, records: Iterable[PlantRecord]) -> bool:
    payload = json.dumps([r.to_dict() for r in records])
    return cache.set_item(PLANTS_KEY, payload)


def load_plants_snapshot(cache: LocalCache) -> list[PlantRecord] | None:
    """Return the cached collection, or None when nothing usable is cached."""
    raw = cache.get_item(PLANTS_KEY)
    if raw is None:
        return None
    try:
        items = json.loads(raw)
    except json.JSONDecodeError:
        cache.logger.log("Cached plant snapshot is not valid JSON; ignoring it.")
        return None
    if not isinstance(items, list):
        return None

    records: list[PlantRecord] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            records.append(PlantRecord.from_dict(item))
        except ValueError:
            continue
    return records
