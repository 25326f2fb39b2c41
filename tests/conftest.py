"""Shared fixtures: a recording sleep and deterministic jitter."""

import pytest

from backoff_core.clock import BackoffClock


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FixedJitter:
    """Stand-in RNG whose randrange always returns the same value."""

    def __init__(self, value: int = 0):
        self.value = value
        self.calls = 0

    def randrange(self, start: int, stop: int) -> int:
        self.calls += 1
        assert start <= self.value < stop
        return self.value


@pytest.fixture
def sleeper():
    return RecordingSleep()


@pytest.fixture
def clock(sleeper):
    """Clock that never waits and adds no jitter."""
    return BackoffClock(sleep=sleeper, rng=FixedJitter(0))
