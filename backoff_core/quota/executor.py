"""
Quota-Aware Retry Executor
==========================
Retries async actions that fail with a quota-exhaustion error.

The wrapped API gives no reset hint for quota errors, so the wait grows as
min(base ** n, cap) for the n-th consecutive quota failure, and the loop
gives up after max_attempts backoffs. Every other failure propagates
unchanged on the first occurrence.
"""

import time
from functools import partial, wraps
from typing import Any, Awaitable, Callable, Optional, TypeVar

import structlog
from tenacity import AsyncRetrying, RetryCallState, RetryError

from ..classifier import is_quota_exhaustion
from ..clock import BackoffClock, default_clock
from ..config import QuotaRetryConfig
from ..exceptions import DeadlineExceeded, QuotaRetriesExhausted
from ..log import new_call_id
from .strategies import QuotaBackoff, QuotaPredicate, retry_if_quota_exceeded

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class QuotaRetryExecutor:
    """
    Executes an async action with capped exponential backoff on quota errors.

    Example:
        executor = QuotaRetryExecutor()
        video = await executor.execute(upload_video, params)

    The action must raise StructuredBadRequest for bad-request errors with a
    JSON body; only those whose reason is on the quota allow-list are retried.
    """

    def __init__(
        self,
        config: Optional[QuotaRetryConfig] = None,
        clock: Optional[BackoffClock] = None,
        is_quota_error: Optional[QuotaPredicate] = None,
        monotonic: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            config: Backoff base, cap and attempt ceiling
            clock: Backoff clock used for every wait
            is_quota_error: Classification strategy; defaults to matching
                the configured quota reasons
            monotonic: Clock used for caller deadlines
        """
        self.config = config or QuotaRetryConfig.from_env()
        self.clock = clock or default_clock()
        self.is_quota_error = is_quota_error or partial(
            is_quota_exhaustion, quota_reasons=self.config.quota_reasons
        )
        self._monotonic = monotonic or time.monotonic

    async def _sleep(self, seconds: float) -> None:
        await self.clock.wait(int(seconds), add_buffer=False)

    async def execute(
        self,
        action: Callable[..., Awaitable[T]],
        *args: Any,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> T:
        """
        Run ``action(*args, **kwargs)`` until it succeeds or fails terminally.

        Args:
            action: Async callable performing one attempt
            *args: Positional arguments for action
            timeout: Optional overall deadline in seconds, checked before
                each attempt
            **kwargs: Keyword arguments for action

        Returns:
            Result of action

        Raises:
            QuotaRetriesExhausted: Quota still exceeded after max_attempts backoffs
            DeadlineExceeded: ``timeout`` passed before the next attempt
            Exception: Any non-quota error raised by action, unchanged
        """
        log = logger.bind(call_id=new_call_id(), action=getattr(action, "__name__", repr(action)))
        backoff = QuotaBackoff(self.config)
        deadline = None if timeout is None else self._monotonic() + timeout
        attempts = 0
        last_error: Optional[BaseException] = None

        async def attempt() -> T:
            nonlocal attempts
            if deadline is not None and self._monotonic() >= deadline:
                log.error("retry_deadline_exceeded", attempts=attempts)
                raise DeadlineExceeded(timeout, attempts, last_error) from last_error
            attempts += 1
            log.debug("quota_attempt", attempt=attempts)
            return await action(*args, **kwargs)

        def before_sleep(retry_state: RetryCallState) -> None:
            nonlocal last_error
            last_error = retry_state.outcome.exception()
            log.info(
                "quota_exceeded_retry",
                attempt=retry_state.attempt_number,
                wait_seconds=retry_state.next_action.sleep,
                error=str(last_error),
            )

        retrying = AsyncRetrying(
            retry=retry_if_quota_exceeded(self.is_quota_error),
            stop=backoff.stop,
            wait=backoff.wait,
            sleep=self._sleep,
            before_sleep=before_sleep,
            reraise=False,
        )

        try:
            return await retrying(attempt)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            log.error(
                "quota_retry_exhausted",
                attempts=attempts,
                error=str(last_error),
            )
            raise QuotaRetriesExhausted(attempts, last_exception=last_error) from last_error


def with_quota_retry(
    config: Optional[QuotaRetryConfig] = None,
    clock: Optional[BackoffClock] = None,
    is_quota_error: Optional[QuotaPredicate] = None,
):
    """
    Decorator for quota-aware retry.

    Usage:
        @with_quota_retry()
        async def insert_video(client, video):
            ...
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        executor = QuotaRetryExecutor(config=config, clock=clock, is_quota_error=is_quota_error)

        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await executor.execute(func, *args, **kwargs)
        return wrapper
    return decorator
