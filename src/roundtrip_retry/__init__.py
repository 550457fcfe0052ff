"""
Retrying transport decorator for httpx.

Wraps an httpx transport and re-sends requests according to caller-supplied
policies, while looking like a single round trip to the caller:
- Retryer decides IGNORE / RETRY / ABORT after every attempt
- Delayer waits between attempts
- Rejected response bodies are drained and closed so connections get reused

Architecture: httpx transport decorator + pluggable policies + structlog diagnostics
"""

from roundtrip_retry.client import make_async_retrying_client, make_retrying_client
from roundtrip_retry.logging_config import configure_logging
from roundtrip_retry.retry import (
    AsyncRetryTransport,
    Attempt,
    Decision,
    DefaultRetryer,
    RetryAborted,
    RetryLimitExceeded,
    RetryTransport,
    RetryTransportError,
)

__version__ = "0.1.0"

__all__ = [
    "AsyncRetryTransport",
    "Attempt",
    "Decision",
    "DefaultRetryer",
    "RetryAborted",
    "RetryLimitExceeded",
    "RetryTransport",
    "RetryTransportError",
    "configure_logging",
    "make_async_retrying_client",
    "make_retrying_client",
]
