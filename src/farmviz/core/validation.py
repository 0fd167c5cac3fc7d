from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from farmviz.core.models import CandidateFile

ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png"})
MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024  # 10MB


@dataclass(frozen=True)
class ValidationIssue:
    file_name: str
    message: str


def validate_candidate(candidate: CandidateFile) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if candidate.mime_type.lower() not in ALLOWED_MIME_TYPES:
        issues.append(
            ValidationIssue(candidate.name, f"{candidate.name}: Invalid file type. Please upload JPG or PNG.")
        )
    if candidate.size_bytes > MAX_FILE_SIZE_BYTES:
        issues.append(
            ValidationIssue(candidate.name, f"{candidate.name}: File too large. Max size is 10MB.")
        )
    return issues


def partition_candidates(
    candidates: Iterable[CandidateFile],
) -> tuple[list[CandidateFile], list[ValidationIssue]]:
    """Split candidates into (accepted, issues). Every rejected file is reported on its own."""
    accepted: list[CandidateFile] = []
    rejected: list[ValidationIssue] = []
    for c in candidates:
        issues = validate_candidate(c)
        if issues:
            rejected.extend(issues)
        else:
            accepted.append(c)
    return accepted, rejected
