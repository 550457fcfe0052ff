"""
Retrying transport exceptions.

These exceptions are raised through a retrying transport when a retryer
aborts. The transport never raises its own "too many attempts" error:
bounding retries belongs to the retryer, which surfaces whatever error it
chooses (RetryLimitExceeded for the default retryer).
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from roundtrip_retry.retry.attempt import Attempt


class RetryTransportError(Exception):
    """
    Base exception for all retrying transport errors.

    All errors defined here inherit from this to allow catching any
    retry-related abort with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RetryAborted(RetryTransportError):
    """
    Raised when a retryer aborts without supplying an error of its own.

    Attributes:
        attempt: The attempt that triggered the abort
    """

    def __init__(self, attempt: "Attempt") -> None:
        self.attempt = attempt
        super().__init__(
            f"{attempt.request.method} {attempt.request.url} aborted "
            f"after {attempt.count} attempt(s)",
            {"attempts": attempt.count},
        )


class RetryLimitExceeded(RetryTransportError):
    """
    Raised by the default retryer once its attempt budget is used up.

    Attributes:
        attempt: The last attempt made
        last_error: Transport exception of the last attempt, if any
        status_code: Response status of the last attempt, if any
    """

    def __init__(self, attempt: "Attempt") -> None:
        self.attempt = attempt
        self.last_error = attempt.error
        self.status_code = attempt.status_code

        if self.last_error is not None:
            outcome = f"last error: {type(self.last_error).__name__}: {self.last_error}"
        else:
            outcome = f"last status: {self.status_code}"

        super().__init__(
            f"{attempt.request.method} {attempt.request.url} failed after "
            f"{attempt.count} attempts ({outcome})",
            {
                "attempts": attempt.count,
                "status_code": self.status_code,
                "error_type": type(self.last_error).__name__ if self.last_error else None,
            },
        )
