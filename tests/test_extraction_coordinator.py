from __future__ import annotations

import asyncio

from farmviz.core.extraction import ExtractionCoordinator
from farmviz.core.models import ExtractionState, ExtractionStatus, UploadSuccess
from farmviz.util.errors import NetworkError


class FakeLocationApi:
    def __init__(self, coordinates: dict[str, object]) -> None:
        self.coordinates = coordinates
        self.calls: list[tuple[str, str]] = []

    def extract_location(self, image_name: str, image_url: str) -> tuple[float, float]:
        self.calls.append((image_name, image_url))
        result = self.coordinates[image_name]
        if isinstance(result, Exception):
            raise result
        return result


def _upload(name: str) -> UploadSuccess:
    return UploadSuccess(file_name=name, storage_url=f"https://cdn/x/{name}", storage_id=name)


def test_status_sequence_ends_in_success() -> None:
    seen: list[tuple[str, ExtractionState]] = []
    api = FakeLocationApi({"plant1.jpg": (12.9, 77.6)})
    coordinator = ExtractionCoordinator(api, on_status=lambda name, s: seen.append((name, s.state)))

    statuses = asyncio.run(coordinator.extract_all([_upload("plant1.jpg")]))

    assert seen == [
        ("plant1.jpg", ExtractionState.PENDING),
        ("plant1.jpg", ExtractionState.PROCESSING),
        ("plant1.jpg", ExtractionState.SUCCESS),
    ]
    record = statuses["plant1.jpg"].record
    assert record.image_url == "https://cdn/x/plant1.jpg"
    assert (record.latitude, record.longitude) == (12.9, 77.6)
    assert api.calls == [("plant1.jpg", "https://cdn/x/plant1.jpg")]


def test_one_failure_does_not_affect_siblings() -> None:
    api = FakeLocationApi(
        {
            "a.jpg": NetworkError("No GPS data in image"),
            "b.jpg": (1.0, 2.0),
            "c.jpg": (95.0, 2.0),
        }
    )
    coordinator = ExtractionCoordinator(api)

    statuses = asyncio.run(coordinator.extract_all([_upload("a.jpg"), _upload("b.jpg"), _upload("c.jpg")]))

    assert statuses["a.jpg"].state == ExtractionState.FAILED
    assert statuses["a.jpg"].reason == "No GPS data in image"
    assert statuses["b.jpg"].state == ExtractionState.SUCCESS
    assert statuses["c.jpg"].state == ExtractionState.FAILED
    assert "out of range" in statuses["c.jpg"].reason


def test_terminal_status_is_not_retried() -> None:
    api = FakeLocationApi({"a.jpg": (1.0, 2.0)})
    coordinator = ExtractionCoordinator(api)

    first = asyncio.run(coordinator.extract("a.jpg", "https://cdn/x/a.jpg"))
    again = asyncio.run(coordinator.extract("a.jpg", "https://cdn/x/a.jpg"))

    assert first is again
    assert len(api.calls) == 1


def test_reset_clears_statuses_and_returns_copies() -> None:
    coordinator = ExtractionCoordinator(FakeLocationApi({}))
    coordinator.mark_pending(["a.jpg"])
    snapshot = coordinator.statuses()
    snapshot["b.jpg"] = ExtractionStatus.pending()

    assert coordinator.status("a.jpg").state == ExtractionState.PENDING
    assert coordinator.status("b.jpg") is None
    coordinator.reset()
    assert coordinator.statuses() == {}
