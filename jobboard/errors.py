"""Error types shared across the job board."""
from __future__ import annotations


class JobBoardError(Exception):
    """Base class for every error raised by this package."""


class TransportError(JobBoardError):
    """A data source or webhook could not be reached, or refused the request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(JobBoardError):
    """Malformed date or URL. Always recovered where it is raised."""


class NotAuthenticatedError(JobBoardError, PermissionError):
    """A mutation was attempted without a signed-in user."""

    def __init__(self, message: str = "Must be logged in") -> None:
        super().__init__(message)


class ValidationError(JobBoardError, ValueError):
    """User input rejected before anything is sent."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
