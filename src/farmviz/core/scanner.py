from __future__ import annotations

from pathlib import Path
from typing import Iterable

from farmviz.core.models import CandidateFile
from farmviz.util.paths import guess_mime_type, is_image, is_macos_artifact

def scan_image_inputs(inputs: Iterable[Path]) -> list[CandidateFile]:
    """Turn selected files/folders into upload candidates.

    - Directories are scanned recursively for JPG/PNG files.
    - Files given directly are kept whatever their type, so validation can
      report them instead of silently dropping them.
    - Duplicate paths are deduplicated.
    """
    found: set[Path] = set()

    for p in inputs:
        p = Path(p).expanduser().resolve()
        if not p.exists() or is_macos_artifact(p):
            continue
        if p.is_file():
            found.add(p)
            continue

        for child in p.rglob("*"):
            if not child.is_file() or is_macos_artifact(child):
                continue
            if is_image(child):
                found.add(child)

    return [to_candidate(p) for p in sorted(found)]

def to_candidate(path: Path) -> CandidateFile:
    return CandidateFile(
        path=path,
        name=path.name,
        mime_type=guess_mime_type(path),
        size_bytes=path.stat().st_size,
    )
