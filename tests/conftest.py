"""Shared fixtures for the Waitly client tests."""

import asyncio

import httpx
import pytest

from waitly import WaitlyClient, WaitlyConfig

WAITLIST_ID = "wl_123"
API_KEY = "test-key"


class RecordingSleep:
    """Stand-in for asyncio.sleep that records backoff delays without waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class WaitingSleep(RecordingSleep):
    """Records backoff delays but really waits `pause` seconds per backoff."""

    def __init__(self, pause: float):
        super().__init__()
        self.pause = pause

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(self.pause)


class TransportRecorder:
    """Wraps a handler and keeps every request it receives."""

    def __init__(self, handler):
        self.handler = handler
        self.requests = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.handler(request)
        if hasattr(result, "__await__"):
            result = await result
        return result

    @property
    def calls(self) -> int:
        return len(self.requests)


def responses(*items):
    """Handler returning the given responses (or raising exceptions) in order."""
    queue = list(items)

    def handler(request):
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        # fresh copy so a repeated response is never sent twice
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    return handler


@pytest.fixture
def config():
    return WaitlyConfig(waitlist_id=WAITLIST_ID, api_key=API_KEY)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def make_client(recording_sleep):
    """Build a client whose network is a MockTransport around `handler`.

    Returns (client, recorder).
    """

    def _make(handler, sleep=None, **overrides):
        values = {"waitlist_id": WAITLIST_ID, "api_key": API_KEY}
        values.update(overrides)
        recorder = TransportRecorder(handler)
        client = WaitlyClient(
            WaitlyConfig(**values),
            transport=httpx.MockTransport(recorder),
            sleep=sleep or recording_sleep,
        )
        return client, recorder

    return _make
