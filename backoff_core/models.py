"""
Backoff Models
==============
Data models shared by the clock, classifier and executors.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class BackoffRequest:
    """One scheduling request to the backoff clock."""
    base_seconds: int
    add_buffer: bool
    jitter: bool = True

    def __post_init__(self) -> None:
        if self.base_seconds < 0:
            raise ValueError("base_seconds must be >= 0")


@dataclass
class RetryAttempt:
    """Per-call loop state. Never shared between calls."""
    attempt_index: int = 0
    last_error: Optional[BaseException] = None


@dataclass
class QuotaBackoffState:
    """
    Capped exponential backoff state for one quota-aware call.

    wait = min(base ** attempt_count, cap_seconds)
    """
    attempt_count: int = 0
    base: int = 2
    cap_seconds: int = 3600
    max_attempts: int = 50

    @property
    def exhausted(self) -> bool:
        return self.attempt_count > self.max_attempts

    def next_wait(self) -> int:
        return min(self.base ** self.attempt_count, self.cap_seconds)


# Retry decisions

@dataclass(frozen=True)
class Success(Generic[T]):
    result: T


@dataclass(frozen=True)
class RetryAfter:
    seconds: int
    add_buffer: bool = True


@dataclass(frozen=True)
class RetryNow:
    pass


@dataclass(frozen=True)
class Fail:
    error: BaseException


RetryDecision = Union[Success[Any], RetryAfter, RetryNow, Fail]


class StructuredBadRequest(Exception):
    """
    A "bad request" failure carrying a structured JSON error body.

    Wrapped API clients raise this (or a subclass) so the quota-aware executor
    can inspect the payload. Any other exception is treated as an
    unclassified failure and is never retried.
    """

    def __init__(self, payload: Any, message: Optional[str] = None):
        super().__init__(message or f"Bad request: {payload!r}")
        self.payload = payload
