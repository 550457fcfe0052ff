"""
Retry and delay policies for the retrying transport.

The transport is pure mechanism: after every round trip it asks a retryer
what to do with the attempt, and before every retry it lets a delayer wait.
Both are plain callables so that any function, lambda or object with
``__call__`` can be plugged in.

Decisions:
    - IGNORE: the attempt is final, hand it back to the caller as-is
    - RETRY: discard the response and send the request again
    - ABORT: discard the response and raise the retryer's error
"""

from collections.abc import Awaitable, Iterable
from enum import Enum
from typing import Protocol

import httpx
import structlog

from roundtrip_retry.config import Settings, settings as default_settings
from roundtrip_retry.retry.attempt import Attempt
from roundtrip_retry.retry.exceptions import RetryLimitExceeded

logger = structlog.get_logger(__name__)


class Decision(Enum):
    """Outcome of a retryer for one attempt."""

    IGNORE = "ignore"
    RETRY = "retry"
    ABORT = "abort"


class Retryer(Protocol):
    """
    Protocol for retry decision policies.

    Called once per attempt. Returns the decision together with an optional
    error; the error is only surfaced on ABORT; alongside IGNORE or RETRY
    it is logged and dropped.
    """

    def __call__(self, attempt: Attempt) -> tuple[Decision, BaseException | None]:
        ...


class Delayer(Protocol):
    """
    Protocol for delay policies used by the sync transport.

    Called once per RETRY decision with the attempt that triggered it, and
    expected to block until the next attempt may be issued.
    """

    def __call__(self, attempt: Attempt) -> None:
        ...


class AsyncDelayer(Protocol):
    """Protocol for delay policies used by the async transport."""

    def __call__(self, attempt: Attempt) -> Awaitable[None]:
        ...


class DefaultRetryer:
    """
    Retryer used when none is configured.

    Retries transport failures (any ``httpx.TransportError``) and responses
    whose status is in ``retry_statuses``. Once ``max_attempts`` attempts
    have been made it aborts with RetryLimitExceeded. Every other outcome,
    including non-httpx exceptions and error statuses not listed, is
    returned to the caller unchanged.
    """

    def __init__(
        self,
        max_attempts: int | None = None,
        retry_statuses: Iterable[int] | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize default retryer.

        Args:
            max_attempts: Total attempts allowed (defaults to DEFAULT_MAX_ATTEMPTS)
            retry_statuses: Status codes worth retrying (defaults to DEFAULT_RETRY_STATUSES)
            settings: Settings to read defaults from (defaults to global settings)
        """
        settings = settings or default_settings
        self.max_attempts = max_attempts if max_attempts is not None else settings.DEFAULT_MAX_ATTEMPTS
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.retry_statuses = frozenset(
            retry_statuses if retry_statuses is not None else settings.DEFAULT_RETRY_STATUSES
        )

    def is_retryable(self, attempt: Attempt) -> bool:
        """Whether the attempt failed in a way worth sending again."""
        if attempt.error is not None:
            return isinstance(attempt.error, httpx.TransportError)
        return attempt.status_code in self.retry_statuses

    def __call__(self, attempt: Attempt) -> tuple[Decision, BaseException | None]:
        if not self.is_retryable(attempt):
            return Decision.IGNORE, None

        if attempt.count >= self.max_attempts:
            logger.debug(
                "Default retryer out of attempts",
                attempt=attempt.count,
                max_attempts=self.max_attempts,
                status_code=attempt.status_code,
            )
            return Decision.ABORT, RetryLimitExceeded(attempt)

        return Decision.RETRY, None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"max_attempts={self.max_attempts}, "
            f"retry_statuses={sorted(self.retry_statuses)})"
        )
