"""
Backoff Core Library
====================
Retry/backoff layer for calls to rate-limited external APIs.

Two executors share one backoff clock:

* HeaderRetryExecutor - HTTP requests throttled with 429 + reset timestamp
* QuotaRetryExecutor  - async actions failing with quota-exhaustion payloads
"""

__version__ = "0.3.0"

# Clock
from backoff_core.clock import BackoffClock, default_clock

# Config
from backoff_core.config import (
    ClockConfig,
    HeaderRetryConfig,
    QuotaRetryConfig,
    QUOTA_REASONS,
)

# Classifier
from backoff_core.classifier import (
    HttpStatusClass,
    StructuredErrorClass,
    classify_http_status,
    classify_structured_error,
    extract_error_reason,
    is_quota_exhaustion,
    parse_rate_limit_reset,
    seconds_until_reset,
    quota_backoff_seconds,
)

# Models
from backoff_core.models import (
    BackoffRequest,
    RetryAttempt,
    QuotaBackoffState,
    RetryDecision,
    Success,
    RetryAfter,
    RetryNow,
    Fail,
    StructuredBadRequest,
)

# Exceptions
from backoff_core.exceptions import (
    BackoffError,
    RequestNotRetryable,
    TransportRetriesExhausted,
    RateLimitSignalError,
    MissingRateLimitReset,
    InvalidRateLimitReset,
    UnexpectedStatusError,
    QuotaRetriesExhausted,
    DeadlineExceeded,
)

# Executors
from backoff_core.http import HeaderRetryExecutor, clone_request
from backoff_core.quota import QuotaRetryExecutor, with_quota_retry

# Logging
from backoff_core.log import setup_logging

__all__ = [
    "__version__",
    # Clock
    "BackoffClock",
    "default_clock",
    # Config
    "ClockConfig",
    "HeaderRetryConfig",
    "QuotaRetryConfig",
    "QUOTA_REASONS",
    # Classifier
    "HttpStatusClass",
    "StructuredErrorClass",
    "classify_http_status",
    "classify_structured_error",
    "extract_error_reason",
    "is_quota_exhaustion",
    "parse_rate_limit_reset",
    "seconds_until_reset",
    "quota_backoff_seconds",
    # Models
    "BackoffRequest",
    "RetryAttempt",
    "QuotaBackoffState",
    "RetryDecision",
    "Success",
    "RetryAfter",
    "RetryNow",
    "Fail",
    "StructuredBadRequest",
    # Exceptions
    "BackoffError",
    "RequestNotRetryable",
    "TransportRetriesExhausted",
    "RateLimitSignalError",
    "MissingRateLimitReset",
    "InvalidRateLimitReset",
    "UnexpectedStatusError",
    "QuotaRetriesExhausted",
    "DeadlineExceeded",
    # Executors
    "HeaderRetryExecutor",
    "clone_request",
    "QuotaRetryExecutor",
    "with_quota_retry",
    # Logging
    "setup_logging",
]
