from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Mapping, Sequence

from farmviz.core.local_cache import LocalCache, load_plants_snapshot
from farmviz.core.models import CandidateFile, ExtractionState
from farmviz.core.pipeline import build_pipeline
from farmviz.core.plant_store import PlantStore
from farmviz.core.settings import AppSettings
from farmviz.services.http import JsonHttpClient, MultipartFile
from farmviz.util.errors import NetworkError

API = "https://api.test"
UPLOAD_URL = "https://api.cloudinary.com/v1_1/demo/image/upload"


class FakeServices(JsonHttpClient):
    """Image storage and farm API in one fake, keyed by file name."""

    def __init__(
        self,
        coordinates: dict[str, tuple[float, float] | dict[str, Any]],
        upload_errors: set[str] | None = None,
        save_errors: set[str] | None = None,
    ) -> None:
        self.coordinates = coordinates
        self.upload_errors = upload_errors or set()
        self.save_errors = save_errors or set()
        self.json_calls: list[tuple[str, dict[str, Any]]] = []
        self.uploads: list[str] = []

    def post_multipart(
        self,
        url: str,
        fields: Mapping[str, str],
        files: Sequence[MultipartFile],
    ) -> dict[str, Any]:
        assert url == UPLOAD_URL
        name = files[0].file_name
        self.uploads.append(name)
        if name in self.upload_errors:
            raise NetworkError(f"Request to {url} failed: HTTP 400 Bad Request")
        return {"secure_url": f"https://cdn/x/{name}", "public_id": f"{fields['folder']}/{name}"}

    def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        self.json_calls.append((url, dict(payload)))
        if url == f"{API}/extract-latitude-longitude":
            result = self.coordinates[payload["imageName"]]
            if isinstance(result, dict):
                return result
            lat, lon = result
            return {"success": True, "data": {"latitude": lat, "longitude": lon}}
        if url == f"{API}/save-plant-location-data":
            if payload["imageName"] in self.save_errors:
                raise NetworkError(f"Request to {url} failed: HTTP 500 Internal Server Error")
            return {"success": True, "message": "Plant location saved"}
        raise AssertionError(f"No fake response configured for: {url}")


def _settings() -> AppSettings:
    return AppSettings(
        api_base_url=API,
        user_email="grower@example.com",
        cloudinary_cloud_name="demo",
        cloudinary_upload_preset="unsigned",
    )


def _candidate(tmp_path: Path, name: str, mime: str = "image/jpeg") -> CandidateFile:
    p = tmp_path / name
    p.write_bytes(b"image-bytes")
    return CandidateFile(path=p, name=name, mime_type=mime, size_bytes=p.stat().st_size)


def test_single_image_is_uploaded_located_and_saved(tmp_path: Path) -> None:
    services = FakeServices({"plant1.jpg": (12.9, 77.6)})
    store = PlantStore(LocalCache(tmp_path / "local_storage.json"))
    statuses: list[ExtractionState] = []
    pipeline = build_pipeline(
        _settings(), store, on_status=lambda _n, s: statuses.append(s.state), http_client=services
    )

    report = asyncio.run(pipeline.run([_candidate(tmp_path, "plant1.jpg")]))

    assert statuses == [ExtractionState.PENDING, ExtractionState.PROCESSING, ExtractionState.SUCCESS]
    assert [r.image_name for r in report.saved] == ["plant1.jpg"]
    record = store.find("plant1.jpg")
    assert record.image_url == "https://cdn/x/plant1.jpg"
    assert (record.latitude, record.longitude) == (12.9, 77.6)
    assert record.timestamp is not None
    assert load_plants_snapshot(store.cache) == [record]

    save_calls = [p for u, p in services.json_calls if u.endswith("/save-plant-location-data")]
    assert save_calls[0]["emailId"] == "grower@example.com"
    assert save_calls[0]["imageUrl"] == "https://cdn/x/plant1.jpg"


def test_failed_upload_does_not_block_sibling(tmp_path: Path) -> None:
    services = FakeServices({"b.jpg": (1.0, 2.0)}, upload_errors={"a.jpg"})
    store = PlantStore(LocalCache(tmp_path / "local_storage.json"))
    pipeline = build_pipeline(_settings(), store, http_client=services)

    report = asyncio.run(pipeline.run([_candidate(tmp_path, "a.jpg"), _candidate(tmp_path, "b.jpg")]))

    assert [f.file_name for f in report.upload_failures] == ["a.jpg"]
    assert "HTTP 400" in report.upload_failures[0].error
    assert "a.jpg" not in report.extraction
    assert report.extraction["b.jpg"].state == ExtractionState.SUCCESS
    assert [r.image_name for r in store.snapshot()] == ["b.jpg"]


def test_invalid_files_are_reported_and_valid_ones_processed(tmp_path: Path) -> None:
    services = FakeServices({"good.png": (5.0, 6.0)})
    store = PlantStore()
    pipeline = build_pipeline(_settings(), store, http_client=services)

    report = asyncio.run(
        pipeline.run(
            [
                _candidate(tmp_path, "good.png", "image/png"),
                _candidate(tmp_path, "anim.gif", "image/gif"),
            ]
        )
    )

    assert report.rejected == ["anim.gif: Invalid file type. Please upload JPG or PNG."]
    assert services.uploads == ["good.png"]
    assert [r.image_name for r in report.saved] == ["good.png"]


def test_nothing_valid_means_no_requests(tmp_path: Path) -> None:
    services = FakeServices({})
    pipeline = build_pipeline(_settings(), PlantStore(), http_client=services)

    report = asyncio.run(pipeline.run([_candidate(tmp_path, "anim.gif", "image/gif")]))

    assert len(report.rejected) == 1
    assert services.uploads == []
    assert services.json_calls == []
    assert report.summary() == "0 saved, 1 rejected"


def test_location_without_coordinates_fails_only_that_file(tmp_path: Path) -> None:
    services = FakeServices({"a.jpg": {"success": True, "data": {}}, "b.jpg": (1.0, 2.0)})
    store = PlantStore(LocalCache(tmp_path / "local_storage.json"))
    pipeline = build_pipeline(_settings(), store, http_client=services)

    report = asyncio.run(pipeline.run([_candidate(tmp_path, "a.jpg"), _candidate(tmp_path, "b.jpg")]))

    assert report.extraction["a.jpg"].state == ExtractionState.FAILED
    assert "missing coordinates" in report.extraction["a.jpg"].reason
    assert report.extraction["b.jpg"].state == ExtractionState.SUCCESS
    assert [r.image_name for r in store.snapshot()] == ["b.jpg"]
    assert report.save_failures == []
    save_calls = [p["imageName"] for u, p in services.json_calls if u.endswith("/save-plant-location-data")]
    assert save_calls == ["b.jpg"]


def test_failed_save_is_reported_and_not_stored(tmp_path: Path) -> None:
    services = FakeServices({"a.jpg": (1.0, 2.0), "b.jpg": (3.0, 4.0)}, save_errors={"a.jpg"})
    store = PlantStore(LocalCache(tmp_path / "local_storage.json"))
    pipeline = build_pipeline(_settings(), store, http_client=services)

    report = asyncio.run(pipeline.run([_candidate(tmp_path, "a.jpg"), _candidate(tmp_path, "b.jpg")]))

    assert [f.file_name for f in report.save_failures] == ["a.jpg"]
    assert "HTTP 500" in report.save_failures[0].error
    assert [r.image_name for r in report.saved] == ["b.jpg"]
    assert store.find("a.jpg") is None
    assert [r.image_name for r in load_plants_snapshot(store.cache)] == ["b.jpg"]
    assert report.summary() == "1 saved, 1 failed to save"
