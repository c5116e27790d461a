"""Custom exceptions for the war room application."""

import math
from enum import Enum


class WarRoomException(Exception):
    """Base class for application exceptions with HTTP status code.

    All custom exceptions should inherit from this class and define
    their specific status_code for consistent HTTP response handling.
    """
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str = "War room error"):
        self.message = message
        super().__init__(message)


class RateLimitExceeded(WarRoomException):
    """Raised when a caller has exhausted its request allowance.

    Maps to HTTP 429 Too Many Requests. Never retried by the API client;
    the caller has to wait ``retry_after`` seconds.
    """
    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(self, retry_after: float, identifier: str | None = None):
        self.retry_after = max(1, math.ceil(retry_after))
        self.identifier = identifier
        super().__init__(
            f"Rate limit exceeded. Try again in {self.retry_after} seconds."
        )


class NotFoundError(WarRoomException):
    """Maps to HTTP 404 Not Found."""
    status_code = 404
    error_code = "not_found"

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail)


class InvalidRequestError(WarRoomException):
    """Maps to HTTP 400 Bad Request."""
    status_code = 400
    error_code = "invalid_request"

    def __init__(self, detail: str = "Invalid request"):
        super().__init__(detail)


class ErrorCategory(str, Enum):
    """Failure categories attached where an upstream call fails."""

    TIMEOUT = "timeout"
    NETWORK = "network"
    RATE_LIMITED = "rate_limited"
    HTTP_STATUS = "http_status"
    INVALID_RESPONSE = "invalid_response"
    REQUEST = "request"

    @property
    def retryable(self) -> bool:
        return self in (ErrorCategory.TIMEOUT, ErrorCategory.NETWORK)


class UpstreamError(WarRoomException):
    """An external API call failed.

    Maps to HTTP 502 Bad Gateway when it escapes to the outer boundary.
    """
    status_code = 502
    error_code = "upstream_error"
    category: ErrorCategory = ErrorCategory.REQUEST

    def __init__(self, message: str, endpoint: str | None = None):
        self.endpoint = endpoint
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.category.retryable


class UpstreamTimeoutError(UpstreamError):
    """A single attempt exceeded its deadline."""
    status_code = 504
    error_code = "upstream_timeout"
    category = ErrorCategory.TIMEOUT

    def __init__(self, endpoint: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Request to '{endpoint}' timed out after {timeout}s", endpoint=endpoint
        )


class TransientNetworkError(UpstreamError):
    """Connection reset, refused, DNS failure or similar transport fault."""
    category = ErrorCategory.NETWORK


class UpstreamHTTPError(UpstreamError):
    """The upstream answered with a non-2xx status."""

    def __init__(
        self,
        status: int,
        reason: str = "",
        endpoint: str | None = None,
        retry_after: float | None = None,
    ):
        self.status = status
        self.reason = reason
        self.retry_after = retry_after
        self.category = (
            ErrorCategory.RATE_LIMITED if status == 429 else ErrorCategory.HTTP_STATUS
        )
        message = f"HTTP {status}: {reason}" if reason else f"HTTP {status}"
        super().__init__(message, endpoint=endpoint)


class InvalidUpstreamResponseError(UpstreamError):
    """The upstream body could not be decoded."""
    category = ErrorCategory.INVALID_RESPONSE


class RetriesExhaustedError(UpstreamError):
    """Every attempt failed with a retryable error; carries the last one."""

    def __init__(self, last_error: UpstreamError, attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        self.category = last_error.category
        super().__init__(
            f"Request to '{last_error.endpoint}' failed after {attempts} attempt(s): "
            f"{last_error.message}",
            endpoint=last_error.endpoint,
        )
