"""Request execution with retries, timeouts and cancellation."""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from .config import WaitlyConfig
from .exceptions import (
    ClientError,
    NetworkError,
    RequestCancelledError,
    RequestFailure,
    RequestTimeoutError,
    ResponseDecodeError,
    ServerError,
)
from .registry import ABORT_CANCELLED, ABORT_TIMEOUT, CancellationRegistry
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

SDK_VERSION = "1.0.0"


class RequestExecutor:
    """Runs every Waitly API call: headers, retries, timeout and cancellation."""

    def __init__(
        self,
        config: WaitlyConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        """Initialize the executor.

        Args:
            config: Resolved client configuration
            transport: Optional httpx transport (tests pass httpx.MockTransport)
            sleep: Coroutine used for backoff waits. Defaults to asyncio.sleep.
            retry_policy: Overrides the policy derived from config.retry_attempts
        """
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=config.retry_attempts)
        self.registry = CancellationRegistry()
        self._transport = transport
        self._sleep = sleep or asyncio.sleep
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                timeout=httpx.Timeout(self.config.timeout_seconds),
            )
        return self._client

    def build_headers(self) -> httpx.Headers:
        """Standard headers plus configured extras. Credentials are always applied last."""
        headers = httpx.Headers({
            "Content-Type": "application/json",
            "X-SDK-Version": SDK_VERSION,
        })
        headers.update(self.config.headers)
        headers["X-API-Key"] = self.config.api_key
        headers["X-Waitlist-ID"] = self.config.waitlist_id
        return headers

    @property
    def in_flight(self) -> int:
        return len(self.registry)

    async def execute(self, method: str, path: str, body: Any = None) -> Any:
        """Send a request to the Waitly API and return the decoded JSON payload.

        The attempts run in their own task so that the timeout and
        cancel_all() can abort exactly this request. The timeout bounds each
        network call; backoff waits between attempts do not count against it.

        Raises:
            ClientError: 4xx response, raised on the first occurrence
            ServerError: 5xx response after all attempts
            NetworkError: transport failure after all attempts
            RequestTimeoutError: the configured timeout expired
            RequestCancelledError: cancel_all() aborted the request
        """
        method = method.upper()
        url = f"{self.config.api_url}{path}"
        request_id = self.registry.new_request_id(method, path)

        task = asyncio.ensure_future(self._run_attempts(request_id, method, url, body))
        handle = self.registry.register(request_id, task)
        logger.debug("Request %s started: %s %s", request_id, method, url)

        try:
            return await task
        except asyncio.CancelledError:
            if handle.reason == ABORT_TIMEOUT:
                logger.error(
                    "%s %s timed out after %dms", method, url, self.config.timeout_ms
                )
                raise RequestTimeoutError() from None
            if handle.reason == ABORT_CANCELLED:
                logger.info("%s %s cancelled", method, url)
                raise RequestCancelledError() from None
            # the caller itself was cancelled
            raise
        finally:
            self.registry.discard(request_id)

    async def _send(self, request_id: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """One network call, aborted with reason "timeout" if it outlives timeout_ms."""
        handle = self.registry.get(request_id)
        timer = asyncio.get_running_loop().call_later(
            self.config.timeout_seconds, handle.abort, ABORT_TIMEOUT
        )
        try:
            return await self._get_client().request(method, url, **kwargs)
        finally:
            timer.cancel()

    async def _run_attempts(self, request_id: str, method: str, url: str, body: Any) -> Any:
        headers = self.build_headers()
        content = None
        if body is not None and method != "GET":
            content = json.dumps(body)

        max_attempts = self.retry_policy.max_attempts
        last_error: Optional[RequestFailure] = None

        for attempt in range(max_attempts):
            try:
                response = await self._send(request_id, method, url, content=content, headers=headers)
            except httpx.TimeoutException as exc:
                logger.error("%s %s timed out at the transport: %s", method, url, exc)
                raise RequestTimeoutError() from exc
            except httpx.HTTPError as exc:
                last_error = NetworkError(
                    f"Network error: {str(exc) or type(exc).__name__}",
                    details={"url": url, "error_type": type(exc).__name__},
                )
            else:
                if response.is_success:
                    return self._decode(response)

                failure = self._failure_from_response(response)
                if not self.retry_policy.is_retryable(failure):
                    logger.error(
                        "%s %s returned %d, not retrying", method, url, response.status_code
                    )
                    raise failure
                last_error = failure

            if not self.retry_policy.has_next_attempt(attempt):
                break

            delay = self.retry_policy.calculate_delay(attempt)
            logger.warning(
                "%s %s failed (attempt %d/%d): %s. Retrying in %.1fs",
                method,
                url,
                attempt + 1,
                max_attempts,
                last_error.message or type(last_error).__name__,
                delay,
            )
            await self._sleep(delay)

        logger.error(
            "%s %s failed after %d attempt(s): %s",
            method,
            url,
            max_attempts,
            last_error.message or type(last_error).__name__,
        )
        raise last_error

    def _failure_from_response(self, response: httpx.Response) -> RequestFailure:
        """Build a ClientError or ServerError from a non-2xx response."""
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            message = body.get("message") or ""
            details = body.get("details")
        else:
            message = f"HTTP {status}: {response.reason_phrase}"
            details = None

        error_class = ClientError if 400 <= status < 500 else ServerError
        return error_class(
            message,
            status_code=status,
            details=details,
            body=body if body is not None else response.text,
        )

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ResponseDecodeError(
                f"Failed to decode JSON response: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def cancel_all(self) -> int:
        return self.registry.cancel_all()

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
