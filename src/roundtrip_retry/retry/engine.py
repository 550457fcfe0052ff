"""
Retrying transports for httpx.

This module implements the retry loop that decorates an httpx transport.
A retrying transport looks exactly like the transport it wraps: it accepts
a request and returns a response or raises. Internally it may issue the
request several times.

Retry loop (per request):
    1. Attempting: send the unmodified request through the wrapped transport
    2. Deciding: hand the Attempt to the retryer
    3. IGNORE: return the response / re-raise the transport error
       ABORT: release the response, raise the retryer's error
       RETRY: drain and release the response, run the delayer, go to 1

The loop has no attempt cap of its own. A retryer that never returns
IGNORE or ABORT keeps the loop running forever.

Usage:
    transport = RetryTransport(httpx.HTTPTransport(), retryer=DefaultRetryer(max_attempts=5))
    with httpx.Client(transport=transport) as client:
        response = client.get("https://example.com/")
"""

import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, NoReturn

import httpx
import structlog

from roundtrip_retry.config import Settings, settings as default_settings
from roundtrip_retry.monitoring.metrics import (
    transport_attempts_total,
    transport_drain_errors_total,
    transport_retry_delay_seconds,
)
from roundtrip_retry.retry.attempt import Attempt
from roundtrip_retry.retry.exceptions import RetryAborted
from roundtrip_retry.retry.strategies import (
    AsyncDelayer,
    Decision,
    DefaultRetryer,
    Delayer,
    Retryer,
)

# Failures while discarding a rejected body. httpx.StreamError is a RuntimeError.
_DRAIN_ERRORS = (httpx.HTTPError, RuntimeError, OSError)


def utcnow() -> datetime:
    """Default clock for attempt start times."""
    return datetime.now(timezone.utc)


class _RetryLoop:
    """
    State shared by the sync and async retrying transports.

    Holds the injected retryer, clock, drain limit and logger, and implements
    the parts of the loop that do not touch I/O: building attempts, asking
    the retryer, and turning a terminal decision into a result.
    """

    def __init__(
        self,
        retryer: Retryer | None = None,
        *,
        logger: Any = None,
        clock: Callable[[], datetime] = utcnow,
        drain_limit: int | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or default_settings
        self.retryer: Retryer = retryer if retryer is not None else DefaultRetryer(settings=self.settings)
        self.logger = logger if logger is not None else structlog.get_logger(__name__)
        self.clock = clock
        self.drain_limit = drain_limit if drain_limit is not None else self.settings.BODY_DRAIN_LIMIT
        if self.drain_limit < 1:
            raise ValueError("drain_limit must be >= 1")

    def _bind(self, request: httpx.Request) -> Any:
        return self.logger.bind(method=request.method, url=str(request.url))

    def _record_attempt(
        self,
        log: Any,
        start: datetime,
        count: int,
        request: httpx.Request,
        response: httpx.Response | None,
        error: Exception | None,
    ) -> Attempt:
        if error is not None:
            log.info(
                "Request error",
                attempt=count,
                error_type=type(error).__name__,
                error=str(error),
            )
        return Attempt(
            start=start,
            count=count,
            error=error,
            request=request,
            response=response,
        )

    def _decide(self, log: Any, attempt: Attempt) -> tuple[Decision, BaseException | None]:
        decision, retry_error = self.retryer(attempt)
        if not isinstance(decision, Decision):
            raise TypeError(f"Retryer returned {decision!r}, expected a Decision")

        if retry_error is not None:
            # Only surfaced on ABORT; otherwise informational
            log.info(
                "Retryer error",
                attempt=attempt.count,
                decision=decision.value,
                error_type=type(retry_error).__name__,
                error=str(retry_error),
            )

        if self.settings.METRICS_ENABLED:
            transport_attempts_total.labels(
                method=attempt.request.method, decision=decision.value
            ).inc()

        return decision, retry_error

    @staticmethod
    def _ignore(attempt: Attempt) -> httpx.Response:
        """Return the attempt outcome exactly as the wrapped transport produced it."""
        if attempt.error is not None:
            raise attempt.error
        if attempt.response is None:
            raise TypeError("Wrapped transport returned neither a response nor an error")
        return attempt.response

    def _abort(self, log: Any, attempt: Attempt, retry_error: BaseException | None) -> NoReturn:
        if retry_error is None:
            retry_error = RetryAborted(attempt)

        log.error(
            "Aborting request",
            attempt=attempt.count,
            error_type=type(retry_error).__name__,
            error=str(retry_error),
        )

        if attempt.error is not None and attempt.error is not retry_error:
            raise retry_error from attempt.error
        raise retry_error

    def _drain_failed(self, log: Any, attempt: Attempt, exc: BaseException) -> None:
        log.error(
            "Error draining response body",
            attempt=attempt.count,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        if self.settings.METRICS_ENABLED:
            transport_drain_errors_total.inc()

    def _observe_delay(self, started: float) -> None:
        if self.settings.METRICS_ENABLED:
            transport_retry_delay_seconds.observe(time.monotonic() - started)


class RetryTransport(_RetryLoop, httpx.BaseTransport):
    """
    Sync httpx transport that retries through a wrapped transport.

    Attributes:
        transport: Wrapped transport performing the actual round trips
        retryer: Decision policy called after every attempt
        delay: Delay policy called before every retry (None: no wait)
        logger: structlog logger for diagnostics
        clock: Source of the attempt start time
        drain_limit: Max bytes read from a rejected response before closing it
    """

    def __init__(
        self,
        transport: httpx.BaseTransport,
        retryer: Retryer | None = None,
        delay: Delayer | None = None,
        **kwargs: Any,
    ):
        """
        Initialize retrying transport.

        Args:
            transport: Wrapped transport (e.g. httpx.HTTPTransport)
            retryer: Decision policy (defaults to DefaultRetryer)
            delay: Delay policy, None to retry immediately
            **kwargs: logger, clock, drain_limit, settings
        """
        super().__init__(retryer, **kwargs)
        self.transport = transport
        self.delay = delay

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """
        Send the request, retrying as the retryer decides.

        Returns:
            The response of the attempt the retryer ignored

        Raises:
            Exception: The wrapped transport's error on IGNORE, or the
                retryer's error on ABORT (RetryAborted if it gave none)
        """
        log = self._bind(request)
        start = self.clock()
        count = 0

        while True:
            count += 1
            if count > 1:
                log.debug("Retrying request", attempt=count)

            response: httpx.Response | None = None
            error: Exception | None = None
            try:
                response = self.transport.handle_request(request)
            except Exception as e:
                error = e

            attempt = self._record_attempt(log, start, count, request, response, error)
            try:
                decision, retry_error = self._decide(log, attempt)
            except BaseException:
                self._release(log, attempt)
                raise

            if decision is Decision.IGNORE:
                if attempt.error is not None and attempt.response is not None:
                    self._release(log, attempt)
                return self._ignore(attempt)

            self._release(log, attempt)

            if decision is Decision.ABORT:
                self._abort(log, attempt, retry_error)

            if self.delay is not None:
                log.debug("Delaying before retry", attempt=count)
                started = time.monotonic()
                self.delay(attempt)
                self._observe_delay(started)

    def _release(self, log: Any, attempt: Attempt) -> None:
        """Drain up to drain_limit bytes of the response body, then close it."""
        response = attempt.response
        if response is None:
            return
        try:
            try:
                if not (response.is_stream_consumed or response.is_closed):
                    drained = 0
                    for chunk in response.iter_raw(chunk_size=self.drain_limit):
                        drained += len(chunk)
                        if drained >= self.drain_limit:
                            break
            finally:
                response.close()
        except _DRAIN_ERRORS as e:
            self._drain_failed(log, attempt, e)

    def close(self) -> None:
        self.transport.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"transport={self.transport!r}, "
            f"retryer={self.retryer!r})"
        )


class AsyncRetryTransport(_RetryLoop, httpx.AsyncBaseTransport):
    """
    Async counterpart of RetryTransport.

    Same loop, same retryer contract; the delay policy returns an awaitable
    which is awaited before the next attempt.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        retryer: Retryer | None = None,
        delay: AsyncDelayer | None = None,
        **kwargs: Any,
    ):
        super().__init__(retryer, **kwargs)
        self.transport = transport
        self.delay = delay

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Send the request, retrying as the retryer decides."""
        log = self._bind(request)
        start = self.clock()
        count = 0

        while True:
            count += 1
            if count > 1:
                log.debug("Retrying request", attempt=count)

            response: httpx.Response | None = None
            error: Exception | None = None
            try:
                response = await self.transport.handle_async_request(request)
            except Exception as e:
                error = e

            attempt = self._record_attempt(log, start, count, request, response, error)
            try:
                decision, retry_error = self._decide(log, attempt)
            except BaseException:
                await self._release(log, attempt)
                raise

            if decision is Decision.IGNORE:
                if attempt.error is not None and attempt.response is not None:
                    await self._release(log, attempt)
                return self._ignore(attempt)

            await self._release(log, attempt)

            if decision is Decision.ABORT:
                self._abort(log, attempt, retry_error)

            if self.delay is not None:
                log.debug("Delaying before retry", attempt=count)
                started = time.monotonic()
                await self.delay(attempt)
                self._observe_delay(started)

    async def _release(self, log: Any, attempt: Attempt) -> None:
        response = attempt.response
        if response is None:
            return
        try:
            try:
                if not (response.is_stream_consumed or response.is_closed):
                    drained = 0
                    async for chunk in response.aiter_raw(chunk_size=self.drain_limit):
                        drained += len(chunk)
                        if drained >= self.drain_limit:
                            break
            finally:
                await response.aclose()
        except _DRAIN_ERRORS as e:
            self._drain_failed(log, attempt, e)

    async def aclose(self) -> None:
        await self.transport.aclose()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"transport={self.transport!r}, "
            f"retryer={self.retryer!r})"
        )
