"""
Retry loop for httpx transports.

This package implements a transport decorator: it wraps any httpx
transport and re-sends requests according to a pluggable retryer,
waiting between attempts with a pluggable delayer.

Main Components:
    - RetryTransport / AsyncRetryTransport: The retry loop
    - Attempt: Immutable facts about one round trip
    - Decision: IGNORE, RETRY or ABORT
    - DefaultRetryer: Retryer used when none is configured
    - RetryAborted / RetryLimitExceeded: Errors surfaced on ABORT

Usage:
    >>> from roundtrip_retry.retry import RetryTransport
    >>> transport = RetryTransport(httpx.HTTPTransport(), retryer=my_retryer, delay=my_delay)
"""

from roundtrip_retry.retry.attempt import Attempt
from roundtrip_retry.retry.engine import AsyncRetryTransport, RetryTransport
from roundtrip_retry.retry.exceptions import (
    RetryAborted,
    RetryLimitExceeded,
    RetryTransportError,
)
from roundtrip_retry.retry.strategies import (
    AsyncDelayer,
    Decision,
    DefaultRetryer,
    Delayer,
    Retryer,
)

__all__ = [
    "AsyncDelayer",
    "AsyncRetryTransport",
    "Attempt",
    "Decision",
    "DefaultRetryer",
    "Delayer",
    "RetryAborted",
    "RetryLimitExceeded",
    "RetryTransport",
    "RetryTransportError",
    "Retryer",
]
