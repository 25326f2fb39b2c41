"""
Quota Retry Strategies
======================
tenacity ``retry`` / ``stop`` / ``wait`` strategies for quota exhaustion.

One QuotaBackoff instance is created per logical call and owns that call's
QuotaBackoffState.
"""

from typing import Callable

from tenacity import RetryCallState, retry_if_exception

from ..config import QuotaRetryConfig
from ..models import QuotaBackoffState

QuotaPredicate = Callable[[BaseException], bool]


def retry_if_quota_exceeded(is_quota_error: QuotaPredicate) -> retry_if_exception:
    """Retry only failures the predicate classifies as quota exhaustion."""
    return retry_if_exception(is_quota_error)


class QuotaBackoff:
    """Capped exponential wait with an attempt ceiling, driven by tenacity."""

    def __init__(self, config: QuotaRetryConfig):
        self.state = QuotaBackoffState(
            base=config.base,
            cap_seconds=config.cap_seconds,
            max_attempts=config.max_attempts,
        )

    def _sync(self, retry_state: RetryCallState) -> None:
        # Every failed attempt tenacity asks about is a quota failure
        self.state.attempt_count = retry_state.attempt_number

    def stop(self, retry_state: RetryCallState) -> bool:
        self._sync(retry_state)
        return self.state.exhausted

    def wait(self, retry_state: RetryCallState) -> float:
        self._sync(retry_state)
        return float(self.state.next_wait())
