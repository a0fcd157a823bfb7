"""Async Python client for the Waitly waitlist API."""

from .client import WaitlyClient, create_waitly_client
from .config import WaitlyConfig, WaitlySettings, get_settings
from .executor import SDK_VERSION, RequestExecutor
from .models import EntryResponse, WaitlyEntry, is_valid_email
from .registry import CancellationRegistry
from .retry import RetryPolicy
from .exceptions import (
    WaitlyBaseError,
    ConfigError,
    BadInput,
    ErrorCode,
    WaitlyError,

    # Raw request failures (normalized before reaching callers)
    RequestFailure,
    ClientError,
    ServerError,
    NetworkError,
    RequestTimeoutError,
    RequestCancelledError,
    ResponseDecodeError,

    normalize_error,
)

__version__ = SDK_VERSION

__all__ = [
    # Client
    "WaitlyClient",
    "create_waitly_client",
    "WaitlyConfig",
    "WaitlySettings",
    "get_settings",
    "WaitlyEntry",
    "EntryResponse",
    "is_valid_email",

    # Request execution
    "RequestExecutor",
    "RetryPolicy",
    "CancellationRegistry",
    "SDK_VERSION",

    # Errors
    "WaitlyBaseError",
    "ConfigError",
    "BadInput",
    "ErrorCode",
    "WaitlyError",
    "RequestFailure",
    "ClientError",
    "ServerError",
    "NetworkError",
    "RequestTimeoutError",
    "RequestCancelledError",
    "ResponseDecodeError",
    "normalize_error",
]
