"""Async client for the Waitly waitlist API."""

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

import httpx

from .config import WaitlyConfig
from .exceptions import BadInput, ErrorCode, RequestFailure, WaitlyError, normalize_error
from .executor import RequestExecutor
from .models import EntryResponse, WaitlyEntry, is_valid_email, normalize_email

logger = logging.getLogger(__name__)


class WaitlyClient:
    """Client for one waitlist.

    Every operation raises BadInput before touching the network when its
    argument is invalid, and WaitlyError for any failure after that.
    """

    def __init__(
        self,
        config: Union[WaitlyConfig, Mapping[str, Any]],
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        """Initialize the client.

        Args:
            config: A WaitlyConfig or a mapping accepted by WaitlyConfig.from_mapping
            transport: Optional httpx transport, mainly for tests
            sleep: Optional coroutine used for backoff waits

        Raises:
            ConfigError: If waitlist_id or api_key is missing
        """
        if not isinstance(config, WaitlyConfig):
            config = WaitlyConfig.from_mapping(config)
        self.config = config
        self._executor = RequestExecutor(config, transport=transport, sleep=sleep)

    @property
    def _base_path(self) -> str:
        return f"/api/waitlists/{self.config.waitlist_id}"

    async def _call(self, method: str, path: str, body: Any = None) -> Any:
        try:
            return await self._executor.execute(method, path, body)
        except RequestFailure as e:
            raise normalize_error(e) from e

    async def create_entry(self, entry: Union[WaitlyEntry, Mapping[str, Any]]) -> EntryResponse:
        """Add a registrant to the waitlist.

        Args:
            entry: Entry data; the email is trimmed and lower-cased before sending

        Returns:
            EntryResponse: The created entry as returned by the API
        """
        entry = WaitlyEntry.from_value(entry)
        if not entry.email:
            raise BadInput("Email is required")
        if not is_valid_email(entry.email):
            raise BadInput("Invalid email format", details={"email": entry.email})

        return await self._call("POST", f"{self._base_path}/entries", entry.to_payload())

    async def get_entries_count(self) -> int:
        """Get the number of entries in the waitlist."""
        data = await self._call("GET", f"{self._base_path}/count")

        if isinstance(data, dict):
            if data.get("totalEntries") is not None:
                return data["totalEntries"]
            if data.get("count") is not None:
                return data["count"]

        raise WaitlyError(
            ErrorCode.UNKNOWN_ERROR,
            "Unexpected count response",
            details=data,
            status_code=0,
        )

    async def check_email_exists(self, email: str) -> bool:
        """Check whether an email is already registered."""
        if not is_valid_email(email):
            raise BadInput("Invalid email format", details={"email": email})

        data = await self._call(
            "POST", f"{self._base_path}/check", {"email": normalize_email(email)}
        )
        if isinstance(data, dict) and "exists" in data:
            return bool(data["exists"])

        raise WaitlyError(
            ErrorCode.UNKNOWN_ERROR,
            "Unexpected check response",
            details=data,
            status_code=0,
        )

    def cancel_all_requests(self) -> None:
        """Abort every in-flight request. Safe to call at any time."""
        self._executor.cancel_all()

    @property
    def in_flight(self) -> int:
        return self._executor.in_flight

    async def aclose(self) -> None:
        await self._executor.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.cancel_all_requests()
        await self.aclose()


def create_waitly_client(
    config: Union[WaitlyConfig, Mapping[str, Any], None] = None,
    **kwargs: Any,
) -> WaitlyClient:
    """Create a client from a config object, a mapping, or keyword arguments.

    Example:
        client = create_waitly_client(waitlist_id="wl_123", api_key="key")
    """
    transport = kwargs.pop("transport", None)
    sleep = kwargs.pop("sleep", None)
    if config is None:
        config = WaitlyConfig.from_mapping(kwargs)
    elif kwargs:
        raise TypeError("Pass either a config or keyword arguments, not both")
    return WaitlyClient(config, transport=transport, sleep=sleep)
