"""
Exception types for the Waitly client.

Callers only ever see three kinds of errors:

- ConfigError when a client is built with missing credentials,
- BadInput when an argument fails local validation (no request is sent),
- WaitlyError, the normalized shape for every network-stage failure.

RequestFailure and its subclasses are raised by the request executor and
converted to WaitlyError by normalize_error() at the public boundary.
"""

from enum import Enum
from typing import Any, Dict, Optional


class WaitlyBaseError(Exception):
    """Base exception for all Waitly client errors."""

    def __init__(self, message: str = "An unexpected error occurred", details: Any = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class ConfigError(WaitlyBaseError):
    """Raised when the client configuration is missing or invalid."""
    pass


class BadInput(WaitlyBaseError):
    """Raised when an argument fails local validation."""
    pass


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class WaitlyError(WaitlyBaseError):
    """Normalized error surfaced by every client operation."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Any = None,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.status_code = status_code
        super().__init__(message, details)

    def __str__(self) -> str:
        if self.status_code:
            return f"[{self.code.value}] {self.message} (HTTP {self.status_code})"
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details is not None:
            data["details"] = self.details
        if self.status_code is not None:
            data["statusCode"] = self.status_code
        return data


class RequestFailure(WaitlyBaseError):
    """Raw failure observed while executing a request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Any = None,
        body: Any = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message, details)


class ClientError(RequestFailure):
    """4xx response. Never retried."""
    pass


class ServerError(RequestFailure):
    """5xx (or any other non-2xx outside the 4xx band) response."""
    pass


class NetworkError(RequestFailure):
    """The transport failed before a response was received."""
    pass


class RequestTimeoutError(RequestFailure):
    """The request did not settle within the configured timeout."""

    def __init__(self, message: str = "Request timeout", **kwargs):
        super().__init__(message, **kwargs)


class RequestCancelledError(RequestFailure):
    """The request was aborted by a bulk cancel."""

    def __init__(self, message: str = "Request cancelled", **kwargs):
        super().__init__(message, **kwargs)


class ResponseDecodeError(RequestFailure):
    """A successful response carried a body that is not valid JSON."""
    pass


TIMEOUT_MESSAGE = "Request timeout"

# status -> (code, fallback message)
_STATUS_CODES = {
    400: (ErrorCode.VALIDATION_ERROR, "Invalid request data"),
    401: (ErrorCode.UNAUTHORIZED, "Invalid API key"),
    404: (ErrorCode.NOT_FOUND, "Waitlist not found"),
    409: (ErrorCode.DUPLICATE_ENTRY, "Email already registered"),
    429: (ErrorCode.RATE_LIMIT, "Too many requests"),
}


def normalize_error(error: Exception) -> WaitlyError:
    """
    Map any failure to a WaitlyError.

    Args:
        error: The raw exception raised while executing a request

    Returns:
        WaitlyError: Normalized error; anything not matched by a known
        status code or a timeout becomes UNKNOWN_ERROR
    """
    if isinstance(error, WaitlyError):
        return error

    status_code = getattr(error, "status_code", None)
    message = getattr(error, "message", None) or str(error) or None
    details = getattr(error, "details", None)

    if status_code in _STATUS_CODES:
        code, fallback = _STATUS_CODES[status_code]
        return WaitlyError(code, message or fallback, details=details, status_code=status_code)

    if isinstance(error, RequestTimeoutError) or message == TIMEOUT_MESSAGE:
        return WaitlyError(ErrorCode.TIMEOUT, TIMEOUT_MESSAGE, status_code=0)

    if details is None:
        details = getattr(error, "body", None)

    return WaitlyError(
        ErrorCode.UNKNOWN_ERROR,
        message or "An unexpected error occurred",
        details=details,
        status_code=status_code or 0,
    )
