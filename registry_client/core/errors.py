"""Client exception types.

Every failure the client raises on purpose derives from AppError so callers
can catch one type and still branch on a stable ``code``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability."""

    limit: int
    interval_seconds: float
    http_status: int
    method: str
    path: str
    fields: list[str]


@dataclass
class AppError(Exception):
    """Base error for client failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationError(AppError):
    """Raised at construction time when limiter/client settings are invalid."""


class InvalidInputError(AppError):
    """Raised when empty or missing data is handed to a collaborator."""


@dataclass
class ApiError(AppError):
    """Raised when the registry answers with an unexpected status code.

    Attributes:
        status_code: HTTP status returned by the registry.
        body: Raw response body, verbatim.
    """

    status_code: int = 0
    body: str = ""


class RequestCancelledError(AppError):
    """Raised when a suspended wait is cancelled by its caller."""
