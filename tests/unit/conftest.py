"""Unit test fixtures (mocks and stubs).

Provides scripted transports, retryers and response streams for testing
the retry loop without any network access.
"""

import httpx
import pytest

from roundtrip_retry.retry.strategies import Decision


class TrackingStream(httpx.SyncByteStream):
    """Sync response body that records how much of it was read and whether it was closed."""

    def __init__(self, body: bytes = b"x" * 10_000, chunk_size: int = 1024, fail_after: int | None = None):
        self.body = body
        self.chunk_size = chunk_size
        self.fail_after = fail_after
        self.bytes_read = 0
        self.closed = False

    def __iter__(self):
        for offset in range(0, len(self.body), self.chunk_size):
            if self.fail_after is not None and self.bytes_read >= self.fail_after:
                raise OSError("connection reset while reading body")
            chunk = self.body[offset:offset + self.chunk_size]
            self.bytes_read += len(chunk)
            yield chunk

    def close(self) -> None:
        self.closed = True


class AsyncTrackingStream(httpx.AsyncByteStream):
    """Async counterpart of TrackingStream."""

    def __init__(self, body: bytes = b"x" * 10_000, chunk_size: int = 1024, fail_after: int | None = None):
        self.body = body
        self.chunk_size = chunk_size
        self.fail_after = fail_after
        self.bytes_read = 0
        self.closed = False

    async def __aiter__(self):
        for offset in range(0, len(self.body), self.chunk_size):
            if self.fail_after is not None and self.bytes_read >= self.fail_after:
                raise OSError("connection reset while reading body")
            chunk = self.body[offset:offset + self.chunk_size]
            self.bytes_read += len(chunk)
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


class ScriptedRetryer:
    """Retryer returning a fixed sequence of decisions and recording every attempt.

    Each script entry is either a Decision or a (Decision, error) tuple.
    Running past the end of the script raises IndexError, which keeps a
    broken test from looping forever.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.attempts = []

    def __call__(self, attempt):
        self.attempts.append(attempt)
        entry = self.script.pop(0)
        if isinstance(entry, Decision):
            return entry, None
        return entry


@pytest.fixture
def tracking_stream():
    """Factory fixture for TrackingStream.

    Usage:
        def test_something(tracking_stream):
            stream = tracking_stream(body=b"abc")
    """
    return TrackingStream


@pytest.fixture
def async_tracking_stream():
    """Factory fixture for AsyncTrackingStream."""
    return AsyncTrackingStream


@pytest.fixture
def scripted_retryer():
    """Factory fixture for ScriptedRetryer.

    Usage:
        def test_something(scripted_retryer):
            retryer = scripted_retryer(Decision.RETRY, Decision.IGNORE)
    """
    return ScriptedRetryer


@pytest.fixture
def scripted_transport():
    """Factory fixture for an httpx.MockTransport replaying outcomes in order.

    Each outcome is an exception to raise, an httpx.Response to return, or
    a zero-argument callable building a fresh Response. The last outcome
    repeats once the others are used up. Requests seen by the transport are
    recorded on ``transport.calls``. Works for sync and async clients.

    Usage:
        def test_something(scripted_transport):
            transport = scripted_transport(httpx.ConnectError("boom"), httpx.Response(200))
    """
    def _create(*outcomes) -> httpx.MockTransport:
        queue = list(outcomes)
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            outcome = queue.pop(0) if len(queue) > 1 else queue[0]
            if isinstance(outcome, Exception):
                raise outcome
            if callable(outcome):
                return outcome()
            return outcome

        transport = httpx.MockTransport(handler)
        transport.calls = calls
        return transport

    return _create
