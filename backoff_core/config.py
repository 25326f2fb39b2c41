"""
Backoff Configuration
=====================
Tunable limits for the clock and both executors.

Defaults match the production APIs; every field can be overridden through
the environment or by passing a config object, so tests can use small values.
"""

import os
from dataclasses import dataclass, field
from typing import FrozenSet

QUOTA_REASONS: FrozenSet[str] = frozenset({"quotaExceeded", "uploadLimitExceeded"})

DEFAULT_RESET_HEADER = "Ratelimit-Reset"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class ClockConfig:
    """Configuration for the backoff clock."""
    buffer_ms: int = 100    # Added when a wait asks for the buffer
    jitter_ms: int = 100    # Jitter is drawn from [0, jitter_ms)

    def __post_init__(self) -> None:
        if self.buffer_ms < 0:
            raise ValueError("buffer_ms must be >= 0")
        if self.jitter_ms < 0:
            raise ValueError("jitter_ms must be >= 0")

    @classmethod
    def from_env(cls) -> "ClockConfig":
        return cls(
            buffer_ms=_env_int("BACKOFF_BUFFER_MS", cls.buffer_ms),
            jitter_ms=_env_int("BACKOFF_JITTER_MS", cls.jitter_ms),
        )


@dataclass(frozen=True)
class HeaderRetryConfig:
    """Configuration for the header-driven executor."""
    max_transport_retries: int = 5       # Retries after the first transport failure
    transport_backoff_step: int = 5      # Seconds per transport failure so far in the call
    reset_header: str = DEFAULT_RESET_HEADER
    allow_request_reset_hint: bool = True  # Fall back to the outgoing request's header

    def __post_init__(self) -> None:
        if self.max_transport_retries < 0:
            raise ValueError("max_transport_retries must be >= 0")
        if self.transport_backoff_step < 0:
            raise ValueError("transport_backoff_step must be >= 0")
        if not self.reset_header:
            raise ValueError("reset_header must not be empty")

    @classmethod
    def from_env(cls) -> "HeaderRetryConfig":
        return cls(
            max_transport_retries=_env_int(
                "HEADER_RETRY_MAX_TRANSPORT_RETRIES", cls.max_transport_retries
            ),
            transport_backoff_step=_env_int(
                "HEADER_RETRY_TRANSPORT_STEP", cls.transport_backoff_step
            ),
            reset_header=os.getenv("HEADER_RETRY_RESET_HEADER", DEFAULT_RESET_HEADER),
        )


@dataclass(frozen=True)
class QuotaRetryConfig:
    """Configuration for the quota-aware executor."""
    base: int = 2               # Wait is base ** attempt_count
    cap_seconds: int = 3600     # Upper bound for a single wait
    max_attempts: int = 50      # Quota backoffs allowed before giving up
    quota_reasons: FrozenSet[str] = field(default=QUOTA_REASONS)

    def __post_init__(self) -> None:
        if self.base < 1:
            raise ValueError("base must be >= 1")
        if self.cap_seconds < 0:
            raise ValueError("cap_seconds must be >= 0")
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")

    @classmethod
    def from_env(cls) -> "QuotaRetryConfig":
        return cls(
            base=_env_int("QUOTA_BACKOFF_BASE", cls.base),
            cap_seconds=_env_int("QUOTA_BACKOFF_CAP_SECONDS", cls.cap_seconds),
            max_attempts=_env_int("QUOTA_MAX_ATTEMPTS", cls.max_attempts),
        )
