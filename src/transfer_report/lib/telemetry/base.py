"""Error types and credential interface shared by the telemetry clients."""

from typing import Protocol

HTTP_FORBIDDEN = 403


class InvalidArgumentError(ValueError):
    """Raised when a caller passes an empty or malformed query parameter."""


class QueryError(Exception):
    """Raised when the telemetry backend cannot answer a query.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code reported by the backend, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendQueryError(QueryError):
    """The backend answered with a failed request status."""

    @property
    def is_access_denied(self) -> bool:
        """True when the backend refused the caller's credentials (HTTP 403)."""
        return self.status_code == HTTP_FORBIDDEN


class UnknownQueryError(QueryError):
    """The query failed for a reason other than a backend request status."""


class TokenProvider(Protocol):
    """Supplies bearer tokens for the telemetry query API."""

    async def get_token(self) -> str:
        """Return a bearer token valid for at least the next request."""
        ...
