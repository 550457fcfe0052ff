"""
httpx client factories with a retrying transport.

Builds ready-to-use clients whose transport is wrapped in RetryTransport
(or AsyncRetryTransport), so callers keep the plain httpx API.
"""

from typing import Any

import httpx
import structlog

from roundtrip_retry.config import Settings, settings as default_settings
from roundtrip_retry.retry.engine import AsyncRetryTransport, RetryTransport
from roundtrip_retry.retry.strategies import AsyncDelayer, Delayer, Retryer

logger = structlog.get_logger(__name__)


def make_retrying_client(
    retryer: Retryer | None = None,
    delay: Delayer | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
    settings: Settings | None = None,
    **client_kwargs: Any,
) -> httpx.Client:
    """
    Create a sync httpx client that retries through RetryTransport.

    Args:
        retryer: Decision policy (defaults to DefaultRetryer)
        delay: Delay policy, None to retry immediately
        transport: Transport to wrap (defaults to httpx.HTTPTransport())
        settings: Settings for timeout and loop defaults (defaults to global settings)
        **client_kwargs: Passed through to httpx.Client (base_url, headers, ...)

    Returns:
        Configured httpx.Client; the caller owns and closes it
    """
    settings = settings or default_settings
    wrapped = transport if transport is not None else httpx.HTTPTransport()
    retrying = RetryTransport(wrapped, retryer=retryer, delay=delay, settings=settings)
    client_kwargs.setdefault("timeout", httpx.Timeout(settings.HTTP_TIMEOUT))

    logger.debug(
        "Created retrying client",
        transport=repr(retrying),
        timeout=settings.HTTP_TIMEOUT,
    )
    return httpx.Client(transport=retrying, **client_kwargs)


def make_async_retrying_client(
    retryer: Retryer | None = None,
    delay: AsyncDelayer | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    settings: Settings | None = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """Async counterpart of make_retrying_client."""
    settings = settings or default_settings
    wrapped = transport if transport is not None else httpx.AsyncHTTPTransport()
    retrying = AsyncRetryTransport(wrapped, retryer=retryer, delay=delay, settings=settings)
    client_kwargs.setdefault("timeout", httpx.Timeout(settings.HTTP_TIMEOUT))

    logger.debug(
        "Created async retrying client",
        transport=repr(retrying),
        timeout=settings.HTTP_TIMEOUT,
    )
    return httpx.AsyncClient(transport=retrying, **client_kwargs)
