from __future__ import annotations

import json
from pathlib import Path
import threading

from farmviz.core.local_cache import (
    PLANTS_KEY,
    THEME_KEY,
    LocalCache,
    load_plants_snapshot,
    save_plants_snapshot,
)
from farmviz.core.models import PlantRecord
from farmviz.core.plant_store import PlantStore
from farmviz.core.run_logger import RunLogger
from farmviz.core.view_state import ViewState


def test_items_survive_a_new_instance(tmp_path: Path) -> None:
    path = tmp_path / "store" / "local_storage.json"
    cache = LocalCache(path)
    assert cache.set_item(THEME_KEY, "dark")

    reopened = LocalCache(path)
    assert reopened.get_item(THEME_KEY) == "dark"
    assert reopened.get_item("missing") is None

    assert reopened.remove_item(THEME_KEY)
    assert LocalCache(path).get_item(THEME_KEY) is None


def test_corrupt_cache_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "local_storage.json"
    path.write_text("{not json", encoding="utf-8")
    log = tmp_path / "run.log"
    cache = LocalCache(path, logger=RunLogger(log))

    assert cache.get_item(THEME_KEY) is None
    assert "corrupt" in log.read_text(encoding="utf-8")

    # A write replaces the corrupt file with a valid one.
    assert cache.set_item(THEME_KEY, "light")
    assert json.loads(path.read_text(encoding="utf-8")) == {THEME_KEY: "light"}


def test_plants_snapshot_round_trip(tmp_path: Path) -> None:
    cache = LocalCache(tmp_path / "local_storage.json")
    records = [
        PlantRecord("plant1.jpg", "https://cdn/x/plant1.jpg", 12.9, 77.6, "2026-03-01T10:00:00.000Z"),
        PlantRecord("plant2.jpg", "https://cdn/x/plant2.jpg", -1.5, 36.8, extra={"_id": "42"}),
    ]
    assert save_plants_snapshot(cache, records)

    loaded = load_plants_snapshot(cache)

    assert loaded == records


def test_plants_snapshot_skips_bad_items(tmp_path: Path) -> None:
    cache = LocalCache(tmp_path / "local_storage.json")
    cache.set_item(PLANTS_KEY, json.dumps([{"imageName": "ok.jpg"}, {"latitude": 1}, "junk"]))

    loaded = load_plants_snapshot(cache)

    assert [r.image_name for r in loaded] == ["ok.jpg"]


def test_plants_snapshot_missing_or_invalid(tmp_path: Path) -> None:
    cache = LocalCache(tmp_path / "local_storage.json")
    assert load_plants_snapshot(cache) is None
    cache.set_item(PLANTS_KEY, "[broken")
    assert load_plants_snapshot(cache) is None


def test_write_failure_is_reported_not_raised(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    cache = LocalCache(blocker / "local_storage.json")

    assert cache.set_item(THEME_KEY, "dark") is False


def test_theme_writes_do_not_drop_plants_saved_from_another_thread(tmp_path: Path) -> None:
    log = tmp_path / "run.log"
    cache = LocalCache(tmp_path / "local_storage.json", logger=RunLogger(log))
    store = PlantStore(cache)
    view = ViewState.restore(cache)
    lost: list[int] = []

    def save_plants() -> None:
        for i in range(200):
            store.upsert(PlantRecord(f"p{i}.jpg", f"https://cdn/p{i}.jpg", 1.0, 2.0))
            if len(load_plants_snapshot(cache) or []) != i + 1:
                lost.append(i)

    def toggle_theme() -> None:
        for _ in range(200):
            view.toggle_theme()

    threads = [threading.Thread(target=save_plants), threading.Thread(target=toggle_theme)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert lost == []
    assert len(load_plants_snapshot(cache)) == 200
    assert cache.get_item(THEME_KEY) == view.theme.value
    assert not log.exists() or "write failed" not in log.read_text(encoding="utf-8")
    assert [p.name for p in tmp_path.iterdir() if p.suffix == ".tmp"] == []
