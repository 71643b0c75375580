"""
Test fixtures for fetcher and source client tests.

HTTP is mocked with httpx.MockTransport, backoff sleeps are recorded
instead of awaited. No network access is needed.
"""

from collections.abc import Callable

import httpx
import pytest


class RecordingTransport:
    """
    Serves queued responses and records every request.

    Each request consumes the next queued item; the last item is
    repeated once the queue is exhausted (as a copy). An exception instance in the
    queue is raised instead of returning a response.
    """

    def __init__(self, *items: httpx.Response | Exception):
        self.items = list(items)
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.items.pop(0) if len(self.items) > 1 else self.items[0]
        if isinstance(item, Exception):
            raise item
        # Fresh response per request, the client binds each one to its request
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    @property
    def calls(self) -> int:
        """Number of requests served."""
        return len(self.requests)


class FakeSleep:
    """Records requested delays without waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_sleep() -> FakeSleep:
    """Sleep replacement that records delays."""
    return FakeSleep()


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    """Factory for recording mock transports."""
    return RecordingTransport
