from __future__ import annotations

from typing import Any

from farmviz.core.models import PlantRecord, as_float
from farmviz.services.http import JsonHttpClient, UrlLibJsonHttpClient
from farmviz.util.errors import DataError, NetworkError

EXTRACT_PATH = "/extract-latitude-longitude"
SAVE_PATH = "/save-plant-location-data"
FETCH_PATH = "/get-plant-location-data"


class FarmApi:
    """Client for the extraction and persistence endpoints.

    Every request carries the configured user e-mail as its identity.
    """

    def __init__(self, base_url: str, user_email: str, http_client: JsonHttpClient | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_email = user_email
        self._http = http_client or UrlLibJsonHttpClient()

    def extract_location(self, image_name: str, image_url: str) -> tuple[float, float]:
        data = self._http.post_json(
            self._url(EXTRACT_PATH),
            {"emailId": self.user_email, "imageName": image_name, "imageUrl": image_url},
        )
        if not data.get("success"):
            raise NetworkError(_message(data, "Failed to extract location data"))

        body = data.get("data")
        if not isinstance(body, dict):
            raise DataError("Location response has no data.")
        latitude = as_float(body.get("latitude"))
        longitude = as_float(body.get("longitude"))
        if latitude is None or longitude is None:
            raise DataError("Location response is missing coordinates.")
        return latitude, longitude

    def save_plant(self, record: PlantRecord) -> dict[str, Any]:
        payload = {"emailId": self.user_email}
        payload.update(record.to_dict())
        return self._http.post_json(self._url(SAVE_PATH), payload)

    def fetch_plants(self) -> list[dict[str, Any]]:
        data = self._http.post_json(self._url(FETCH_PATH), {"emailId": self.user_email})
        items = data.get("data")
        if items is None:
            return []
        if not isinstance(items, list):
            raise DataError("Plant list response has an unexpected shape.")
        return [item for item in items if isinstance(item, dict)]

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"


def _message(data: dict[str, Any], default: str) -> str:
    msg = data.get("message") or data.get("error")
    return str(msg) if msg else default
