"""
Backoff Exceptions
==================
Terminal outcomes of a retry loop.

Every executor failure is raised as a subclass of BackoffError, except errors
the quota-aware executor is told not to handle: those propagate unchanged.
"""

from typing import Any, Optional

import httpx


class BackoffError(Exception):
    """Base class for terminal retry outcomes."""

    def __init__(self, message: str, last_exception: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.last_exception = last_exception


class RequestNotRetryable(BackoffError):
    """Raised when the outgoing request cannot be cloned for another attempt."""
    pass


class TransportRetriesExhausted(BackoffError):
    """Raised when transport failures exceed the configured ceiling."""

    def __init__(self, attempts: int, last_exception: BaseException):
        super().__init__(
            f"Transport failed after {attempts} attempts: {last_exception}",
            last_exception=last_exception,
        )
        self.attempts = attempts


class RateLimitSignalError(BackoffError):
    """A throttled response without a usable reset hint."""
    pass


class MissingRateLimitReset(RateLimitSignalError):
    """Raised when a 429 response carries no reset header."""

    def __init__(self, header: str):
        super().__init__(f"No rate limit reset given ({header} header missing)")
        self.header = header


class InvalidRateLimitReset(RateLimitSignalError):
    """Raised when the reset header is not an integer Unix timestamp."""

    def __init__(self, value: Any):
        super().__init__(f"Could not convert the provided timestamp: {value!r}")
        self.value = value


class UnexpectedStatusError(BackoffError):
    """Raised for any status code that is neither success nor throttling."""

    def __init__(self, status_code: int, response: Optional[httpx.Response] = None):
        message = f"Unexpected status code {status_code}"
        detail = _response_excerpt(response)
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.status_code = status_code
        self.response = response


def _response_excerpt(response: Optional[httpx.Response], limit: int = 200) -> str:
    if response is None:
        return ""
    try:
        return response.text[:limit]
    except httpx.ResponseNotRead:
        return ""


class QuotaRetriesExhausted(BackoffError):
    """Raised when quota backoff exceeds the attempt ceiling."""

    def __init__(self, attempts: int, last_exception: Optional[BaseException] = None):
        super().__init__(
            f"Quota still exceeded after {attempts} attempts",
            last_exception=last_exception,
        )
        self.attempts = attempts


class DeadlineExceeded(BackoffError):
    """Raised when the caller's deadline passes before the next attempt."""

    def __init__(self, timeout: float, attempts: int, last_exception: Optional[BaseException] = None):
        super().__init__(
            f"Deadline of {timeout}s exceeded after {attempts} attempts",
            last_exception=last_exception,
        )
        self.timeout = timeout
        self.attempts = attempts
