from __future__ import annotations

import mimetypes
from pathlib import Path

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png"}

def is_image(p: Path) -> bool:
    return p.suffix.lower() in IMAGE_SUFFIXES

def guess_mime_type(p: Path) -> str:
    mime, _ = mimetypes.guess_type(p.name)
    return mime or "application/octet-stream"

def is_macos_artifact(p: Path) -> bool:
    name = p.name
    if name.startswith("._") or name == ".DS_Store":
        return True
    parts = p.parts
    return "__MACOSX" in parts
