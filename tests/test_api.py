from __future__ import annotations

from typing import Any, Mapping

import pytest

from farmviz.core.models import PlantRecord
from farmviz.services.api import FarmApi
from farmviz.services.http import JsonHttpClient
from farmviz.util.errors import DataError, NetworkError

BASE = "https://api.test"


class FakeJsonHttpClient(JsonHttpClient):
    def __init__(self, responses: dict[str, object]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append((url, dict(payload)))
        if url not in self.responses:
            raise AssertionError(f"No fake response configured for: {url}")
        result = self.responses[url]
        if isinstance(result, Exception):
            raise result
        assert isinstance(result, dict)
        return result


def _api(responses: dict[str, object]) -> tuple[FarmApi, FakeJsonHttpClient]:
    client = FakeJsonHttpClient(responses)
    return FarmApi(BASE + "/", "grower@example.com", http_client=client), client


def test_extract_location_sends_identity_and_reads_coordinates() -> None:
    api, client = _api(
        {f"{BASE}/extract-latitude-longitude": {"success": True, "data": {"latitude": "12.9", "longitude": 77.6}}}
    )

    assert api.extract_location("plant1.jpg", "https://cdn/x/plant1.jpg") == (12.9, 77.6)
    assert client.calls == [
        (
            f"{BASE}/extract-latitude-longitude",
            {"emailId": "grower@example.com", "imageName": "plant1.jpg", "imageUrl": "https://cdn/x/plant1.jpg"},
        )
    ]


def test_extract_location_unsuccessful_uses_server_message() -> None:
    api, _ = _api({f"{BASE}/extract-latitude-longitude": {"success": False, "message": "No GPS data in image"}})
    with pytest.raises(NetworkError, match="No GPS data in image"):
        api.extract_location("a.jpg", "https://cdn/a.jpg")


def test_extract_location_missing_coordinates() -> None:
    api, _ = _api({f"{BASE}/extract-latitude-longitude": {"success": True, "data": {"latitude": 1.0}}})
    with pytest.raises(DataError):
        api.extract_location("a.jpg", "https://cdn/a.jpg")


def test_save_plant_merges_identity_into_record() -> None:
    api, client = _api({f"{BASE}/save-plant-location-data": {"success": True}})
    record = PlantRecord("a.jpg", "https://cdn/a.jpg", 1.0, 2.0, "2026-01-01T00:00:00.000Z")

    assert api.save_plant(record) == {"success": True}
    _, payload = client.calls[0]
    assert payload == {
        "emailId": "grower@example.com",
        "imageName": "a.jpg",
        "imageUrl": "https://cdn/a.jpg",
        "latitude": 1.0,
        "longitude": 2.0,
        "timestamp": "2026-01-01T00:00:00.000Z",
    }


def test_fetch_plants_shapes() -> None:
    api, _ = _api({f"{BASE}/get-plant-location-data": {"success": True, "data": [{"imageName": "a"}, "junk"]}})
    assert api.fetch_plants() == [{"imageName": "a"}]

    api, _ = _api({f"{BASE}/get-plant-location-data": {"success": True}})
    assert api.fetch_plants() == []

    api, _ = _api({f"{BASE}/get-plant-location-data": {"data": {"imageName": "a"}}})
    with pytest.raises(DataError):
        api.fetch_plants()
