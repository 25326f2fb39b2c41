"""
Backoff Clock
=============
Computes jittered suspension lengths and suspends the calling task.

The clock holds no per-call state, so one instance can be shared by any
number of concurrent retry loops.
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional

import structlog

from .config import ClockConfig
from .models import BackoffRequest

logger = structlog.get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class BackoffClock:
    """
    Jittered, cancellable async sleep.

    Example:
        clock = BackoffClock()
        await clock.wait(5, add_buffer=True)   # 5.100s - 5.199s

    Tests inject a recording ``sleep`` and a seeded ``rng`` instead of
    waiting on real timers.
    """

    def __init__(
        self,
        sleep: Optional[SleepFunc] = None,
        rng: Optional[random.Random] = None,
        config: Optional[ClockConfig] = None,
    ):
        self._sleep = sleep or asyncio.sleep
        self._rng = rng or random.Random()
        self.config = config or ClockConfig()

    def jitter_ms(self) -> int:
        """Uniform random integer in [0, jitter_ms)."""
        if self.config.jitter_ms == 0:
            return 0
        return self._rng.randrange(0, self.config.jitter_ms)

    def compute_delay(self, request: BackoffRequest) -> float:
        """
        Convert a backoff request into seconds to sleep.

        Args:
            request: Base duration and buffer/jitter flags

        Returns:
            Delay in seconds, at millisecond resolution
        """
        delay_ms = request.base_seconds * 1000
        if request.add_buffer:
            delay_ms += self.config.buffer_ms
        if request.jitter:
            delay_ms += self.jitter_ms()
        return delay_ms / 1000

    async def wait(self, base_seconds: int, add_buffer: bool = True) -> float:
        """
        Suspend the calling task for the jittered delay.

        Cancellation of the underlying sleep propagates to the caller.

        Returns:
            The delay that was slept, in seconds
        """
        request = BackoffRequest(base_seconds=base_seconds, add_buffer=add_buffer)
        delay = self.compute_delay(request)
        logger.debug(
            "backoff_sleep",
            base_seconds=base_seconds,
            add_buffer=add_buffer,
            delay=delay,
        )
        await self._sleep(delay)
        return delay


_default_clock: Optional[BackoffClock] = None


def default_clock() -> BackoffClock:
    """Process-wide clock used when an executor is given none."""
    global _default_clock
    if _default_clock is None:
        _default_clock = BackoffClock(config=ClockConfig.from_env())
    return _default_clock
