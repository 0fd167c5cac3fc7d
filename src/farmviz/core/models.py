from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
import math
from pathlib import Path
from typing import Any, Mapping

# Wire/cache keys for the core schema. Anything else the server returns is kept in `extra`.
_CORE_KEYS = ("imageName", "imageUrl", "latitude", "longitude", "timestamp")


@dataclass
class PlantRecord:
    """One geo-located crop image.

    `image_name` is the natural key inside the plant collection.
    """
    image_name: str
    image_url: str
    latitude: float | None = None
    longitude: float | None = None
    timestamp: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def has_valid_coordinates(self) -> bool:
        return is_valid_latitude(self.latitude) and is_valid_longitude(self.longitude)

    def with_timestamp(self, timestamp: str) -> "PlantRecord":
        return replace(self, timestamp=timestamp, extra=dict(self.extra))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.extra)
        data.update(
            {
                "imageName": self.image_name,
                "imageUrl": self.image_url,
                "latitude": self.latitude,
                "longitude": self.longitude,
            }
        )
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlantRecord":
        name = data.get("imageName")
        if not isinstance(name, str) or not name:
            raise ValueError("Plant record is missing imageName.")
        timestamp = data.get("timestamp")
        return cls(
            image_name=name,
            image_url=str(data.get("imageUrl") or ""),
            latitude=as_float(data.get("latitude")),
            longitude=as_float(data.get("longitude")),
            timestamp=str(timestamp) if timestamp else None,
            extra={k: v for k, v in data.items() if k not in _CORE_KEYS},
        )


@dataclass(frozen=True)
class CandidateFile:
    """A user-selected file. Bytes are read only when the upload is sent."""
    path: Path
    name: str
    mime_type: str
    size_bytes: int


@dataclass(frozen=True)
class UploadSuccess:
    file_name: str
    storage_url: str
    storage_id: str


@dataclass(frozen=True)
class UploadFailure:
    file_name: str
    error: str


UploadResult = UploadSuccess | UploadFailure


@dataclass
class BatchUploadResult:
    successful: list[UploadSuccess] = field(default_factory=list)
    failed: list[UploadFailure] = field(default_factory=list)


class ExtractionState(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExtractionState.SUCCESS, ExtractionState.FAILED)


@dataclass(frozen=True)
class ExtractionStatus:
    state: ExtractionState
    record: PlantRecord | None = None
    reason: str = ""

    @classmethod
    def pending(cls) -> "ExtractionStatus":
        return cls(ExtractionState.PENDING)

    @classmethod
    def processing(cls) -> "ExtractionStatus":
        return cls(ExtractionState.PROCESSING)

    @classmethod
    def success(cls, record: PlantRecord) -> "ExtractionStatus":
        return cls(ExtractionState.SUCCESS, record=record)

    @classmethod
    def failed(cls, reason: str) -> "ExtractionStatus":
        return cls(ExtractionState.FAILED, reason=reason)


@dataclass(frozen=True)
class SaveFailure:
    file_name: str
    error: str


@dataclass
class BatchReport:
    rejected: list[str] = field(default_factory=list)
    upload_failures: list[UploadFailure] = field(default_factory=list)
    extraction: dict[str, ExtractionStatus] = field(default_factory=dict)
    saved: list[PlantRecord] = field(default_factory=list)
    save_failures: list[SaveFailure] = field(default_factory=list)

    @property
    def extraction_failures(self) -> dict[str, str]:
        return {
            name: status.reason
            for name, status in self.extraction.items()
            if status.state == ExtractionState.FAILED
        }

    def summary(self) -> str:
        parts = [f"{len(self.saved)} saved"]
        if self.rejected:
            parts.append(f"{len(self.rejected)} rejected")
        if self.upload_failures:
            parts.append(f"{len(self.upload_failures)} failed to upload")
        if self.extraction_failures:
            parts.append(f"{len(self.extraction_failures)} without location")
        if self.save_failures:
            parts.append(f"{len(self.save_failures)} failed to save")
        return ", ".join(parts)


def is_valid_latitude(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and -90.0 <= value <= 90.0


def is_valid_longitude(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and -180.0 <= value <= 180.0


def as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
