"""
Custom exceptions for pubglookup.

Every failure a fetch can end in carries an ``ErrorKind`` so callers can
branch on the kind without matching exception classes one by one.
"""

from enum import Enum


class ErrorKind(Enum):
    """Stable taxonomy of fetch failures."""

    NETWORK_UNAVAILABLE = "network_unavailable"
    CANCELLED = "cancelled"
    UNAUTHORIZED = "unauthorized"
    SERVER_ERROR = "server_error"
    HTTP_ERROR = "http_error"
    EMPTY_BODY = "empty_body"
    DECODE_ERROR = "decode_error"

    def __str__(self) -> str:
        return self.value


class PubgLookupError(Exception):
    """Base exception for all pubglookup errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class FetchError(PubgLookupError):
    """Base class for failures surfaced by a fetch."""

    kind: ErrorKind

    def __init__(self, url: str, message: str, details: str | None = None):
        super().__init__(message, details=details)
        self.url = url


class NetworkUnavailableError(FetchError):
    """Raised on transport failures (DNS, connection refused, no network)."""

    kind = ErrorKind.NETWORK_UNAVAILABLE

    def __init__(self, url: str, details: str | None = None):
        super().__init__(url, "No connection or network error", details=details)


class RequestCancelledError(FetchError):
    """Raised when the cancellation signal fires before or during a fetch."""

    kind = ErrorKind.CANCELLED

    def __init__(self, url: str):
        super().__init__(url, f"Request cancelled: {url}")


class UnauthorizedError(FetchError):
    """Raised on 401/403. Usually an invalid or revoked API key."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, url: str, status_code: int, body: str):
        super().__init__(url, "Unauthorized, check the API key", details=body or None)
        self.status_code = status_code
        self.body = body


class ServerError(FetchError):
    """Raised on any 5xx response."""

    kind = ErrorKind.SERVER_ERROR

    def __init__(self, url: str, status_code: int, body: str):
        super().__init__(
            url, f"API server error (status {status_code})", details=body or None
        )
        self.status_code = status_code
        self.body = body


class HttpError(FetchError):
    """Raised on any other non-2xx response."""

    kind = ErrorKind.HTTP_ERROR

    def __init__(self, url: str, status_code: int, reason: str | None, body: str):
        reason = reason or ""
        super().__init__(
            url,
            f"HTTP error {status_code} {reason}".rstrip(),
            details=f"URL: {url}\nResponse: {body}",
        )
        self.status_code = status_code
        self.reason = reason
        self.body = body


class EmptyBodyError(FetchError):
    """Raised when a 2xx response carries nothing to decode."""

    kind = ErrorKind.EMPTY_BODY

    def __init__(self, url: str, status_code: int = 200):
        super().__init__(url, "Empty response from the API")
        self.status_code = status_code


class DecodeError(FetchError):
    """Raised when a body does not fit the requested model."""

    kind = ErrorKind.DECODE_ERROR

    def __init__(self, url: str, model: str, details: str | None = None):
        super().__init__(url, f"Failed to decode response as {model}", details=details)
        self.model = model


class ValidationError(PubgLookupError):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(
            f"Validation failed for {field}",
            details=f"Value '{value}' is invalid: {reason}",
        )
        self.field = field
        self.value = value
        self.reason = reason


class PlayerNotFoundError(PubgLookupError):
    """Raised when a player search returns no players."""

    def __init__(self, player_name: str, shard: str):
        super().__init__(f"Player not found on {shard}: {player_name}")
        self.player_name = player_name
        self.shard = shard
