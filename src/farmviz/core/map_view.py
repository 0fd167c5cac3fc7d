from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from dateutil import parser as dtparser

from farmviz.core.models import PlantRecord

# Used when nothing is mapped yet (center of India).
DEFAULT_CENTER = (20.5937, 78.9629)

SORT_BY_DATE = "date"
SORT_BY_NAME = "name"


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        dt = dtparser.isoparse(value)
    except (ValueError, OverflowError):
        try:
            dt = dtparser.parse(value)
        except (ValueError, OverflowError):
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def visible_plants(
    records: Iterable[PlantRecord],
    filter_text: str = "",
    sort_by: str = SORT_BY_DATE,
) -> list[PlantRecord]:
    """Mappable plants matching the name filter, sorted for display.

    - date: newest first, records without a timestamp last
    - name: case-insensitive alphabetical
    """
    needle = (filter_text or "").strip().lower()
    items = [
        r for r in records
        if r.has_valid_coordinates() and (not needle or needle in r.image_name.lower())
    ]
    if sort_by == SORT_BY_NAME:
        return sorted(items, key=lambda r: r.image_name.lower())
    if sort_by == SORT_BY_DATE:
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(items, key=lambda r: parse_timestamp(r.timestamp) or epoch, reverse=True)
    return items


def map_center(records: Iterable[PlantRecord]) -> tuple[float, float]:
    for r in records:
        if r.has_valid_coordinates():
            return (r.latitude, r.longitude)
    return DEFAULT_CENTER


def map_bounds(records: Iterable[PlantRecord]) -> tuple[tuple[float, float], tuple[float, float]] | None:
    points = [(r.latitude, r.longitude) for r in records if r.has_valid_coordinates()]
    if not points:
        return None
    lats = [p[0] for p in points]
    lons = [p[1] for p in points]
    return (min(lats), min(lons)), (max(lats), max(lons))


def format_coordinates(record: PlantRecord, places: int = 6) -> str:
    if not record.has_valid_coordinates():
        return "No location"
    return f"{record.latitude:.{places}f}, {record.longitude:.{places}f}"


def google_maps_url(record: PlantRecord) -> str | None:
    if not record.has_valid_coordinates():
        return None
    return f"https://www.google.com/maps?q={record.latitude},{record.longitude}"


def format_timestamp(value: str | None, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    dt = parse_timestamp(value)
    if dt is None:
        return ""
    return dt.astimezone().strftime(fmt)
