from __future__ import annotations

class FarmVizError(Exception):
    """Base exception for the application."""

class ValidationError(FarmVizError):
    """Raised when a file or batch is rejected before any network call."""

class NetworkError(FarmVizError):
    """Raised when a collaborator is unreachable or answers with a failure."""

class DataError(FarmVizError):
    """Raised when a collaborator response is malformed or missing fields."""
