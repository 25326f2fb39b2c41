"""
Quota-Aware Retry
=================
Executor for APIs that report quota exhaustion in structured error payloads.
"""

from .strategies import QuotaBackoff, retry_if_quota_exceeded
from .executor import QuotaRetryExecutor, with_quota_retry

__all__ = [
    "QuotaBackoff",
    "retry_if_quota_exceeded",
    "QuotaRetryExecutor",
    "with_quota_retry",
]
