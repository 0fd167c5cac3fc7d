from __future__ import annotations

from datetime import date
from pathlib import Path
import csv
from typing import Iterable

from farmviz.core.map_view import format_timestamp
from farmviz.core.models import PlantRecord
from farmviz.util.errors import ValidationError

EXPORT_COLUMNS = ["ImageName", "Latitude", "Longitude", "Date", "ImageUrl"]

def export_rows(records: Iterable[PlantRecord]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for r in records:
        rows.append(
            {
                "ImageName": r.image_name,
                "Latitude": "" if r.latitude is None else str(r.latitude),
                "Longitude": "" if r.longitude is None else str(r.longitude),
                "Date": format_timestamp(r.timestamp),
                "ImageUrl": r.image_url,
            }
        )
    return rows

def export_filename(today: date | None = None) -> str:
    day = today or date.today()
    return f"farm-data-{day.isoformat()}.csv"

def write_export(records: Iterable[PlantRecord], dest_dir: Path, today: date | None = None) -> Path:
    """Write the collection to dest_dir/farm-data-YYYY-MM-DD.csv and return the path."""
    rows = export_rows(records)
    if not rows:
        raise ValidationError("No data to export")
    dest_dir.mkdir(parents=True, exist_ok=True)
    path = dest_dir / export_filename(today)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=EXPORT_COLUMNS)
        w.writeheader()
        for row in rows:
            w.writerow(row)
    return path
