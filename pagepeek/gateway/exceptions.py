from typing import Any


class APIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {"detail": str(self)}


class ValidationError(APIError):
    """Raised for missing or invalid request parameters - maps to HTTP 400."""

    status_code = 400


class PathRejectedError(ValidationError):
    """Raised when a file identifier tries to leave the storage root."""

    def __init__(self, identifier: str, *, message: str | None = None):
        super().__init__(message or "Invalid path")
        self.identifier = identifier


class SourceNotFoundError(APIError):
    """Raised when the requested source file does not exist - maps to HTTP 404."""

    status_code = 404

    def __init__(self, identifier: str, *, message: str | None = None):
        super().__init__(message or f"File {identifier!r} not found")
        self.identifier = identifier

    def to_dict(self) -> dict[str, Any]:
        return {"detail": str(self), "identifier": self.identifier}
