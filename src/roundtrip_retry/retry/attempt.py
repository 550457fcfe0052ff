"""
Attempt record passed to retry and delay policies.

This module defines the Attempt dataclass that captures the facts of a
single round trip through the wrapped transport.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

import httpx


@dataclass(frozen=True)
class Attempt:
    """
    Snapshot of one round trip issued by a retrying transport.

    One Attempt is built per loop iteration and handed to the retryer and,
    when the retryer asks for a retry, to the delayer. It is never kept
    past that iteration.

    Attributes:
        start: When the first attempt of this call was issued (shared by all attempts)
        count: Attempt number, starting at 1
        error: Exception raised by the wrapped transport, if any
        request: The original request, reused unchanged for every attempt
        response: Response returned by the wrapped transport, if any
    """

    start: datetime
    count: int
    error: BaseException | None
    request: httpx.Request
    response: httpx.Response | None = None

    def __post_init__(self) -> None:
        """Validate attempt invariants."""
        if self.count < 1:
            raise ValueError("count must be >= 1")

    @property
    def status_code(self) -> int | None:
        """Status code of the response, or None when the transport failed."""
        if self.response is None:
            return None
        return self.response.status_code

    def elapsed(self, now: datetime) -> timedelta:
        """Time between the first attempt and ``now``."""
        return now - self.start
