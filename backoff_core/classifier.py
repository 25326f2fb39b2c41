"""
Error Classifier
================
Pure functions turning raw attempt outcomes into retry signals.

Nothing here sleeps, logs or touches the network.
"""

import json
import math
import re
from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ValidationError

from .config import QUOTA_REASONS
from .exceptions import InvalidRateLimitReset
from .models import StructuredBadRequest

HTTP_OK = 200
HTTP_TOO_MANY_REQUESTS = 429

# Reset hints are non-negative 64-bit Unix seconds
MAX_RESET_TIMESTAMP = 2**63 - 1
_RESET_PATTERN = re.compile(r"[+-]?[0-9]+")


class HttpStatusClass(str, Enum):
    """Outcome class of an HTTP status code."""
    OK = "ok"
    THROTTLED = "throttled"
    OTHER = "other"


class StructuredErrorClass(str, Enum):
    """Outcome class of a structured bad-request payload."""
    QUOTA_EXCEEDED = "quota_exceeded"
    OTHER_BAD_REQUEST = "other_bad_request"


# Expected payload: {"error": {"errors": [{"reason": "..."}]}}

class _ErrorItem(BaseModel):
    reason: str


class _ErrorBody(BaseModel):
    errors: List[_ErrorItem]


class _ErrorPayload(BaseModel):
    error: _ErrorBody


def classify_http_status(code: int) -> HttpStatusClass:
    if code == HTTP_OK:
        return HttpStatusClass.OK
    if code == HTTP_TOO_MANY_REQUESTS:
        return HttpStatusClass.THROTTLED
    return HttpStatusClass.OTHER


def extract_error_reason(payload: Any) -> Optional[str]:
    """
    Return ``payload.error.errors[0].reason`` or None.

    Accepts a mapping, JSON text or JSON bytes. Any shape or parse problem
    yields None.
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError:
            return None
    try:
        parsed = _ErrorPayload.model_validate(payload)
    except ValidationError:
        return None
    if not parsed.error.errors:
        return None
    return parsed.error.errors[0].reason


def classify_structured_error(
    payload: Any,
    quota_reasons: Iterable[str] = QUOTA_REASONS,
) -> StructuredErrorClass:
    """
    Classify a structured error payload.

    Unrecognized shapes are never treated as quota exhaustion, so a malformed
    payload cannot cause an endless retry loop.
    """
    reason = extract_error_reason(payload)
    if reason is not None and reason in frozenset(quota_reasons):
        return StructuredErrorClass.QUOTA_EXCEEDED
    return StructuredErrorClass.OTHER_BAD_REQUEST


def is_quota_exhaustion(
    error: BaseException,
    quota_reasons: Iterable[str] = QUOTA_REASONS,
) -> bool:
    """True only for a StructuredBadRequest whose payload names a quota reason."""
    if not isinstance(error, StructuredBadRequest):
        return False
    return (
        classify_structured_error(error.payload, quota_reasons)
        is StructuredErrorClass.QUOTA_EXCEEDED
    )


def parse_rate_limit_reset(value: Any) -> int:
    """
    Parse a reset header value as integer Unix seconds.

    Only plain decimal digits with an optional sign are accepted, in the
    range ``0..MAX_RESET_TIMESTAMP``.

    Raises:
        InvalidRateLimitReset: If the value is not such an integer
    """
    text = value.decode("latin-1") if isinstance(value, bytes) else str(value)
    text = text.strip()
    if not _RESET_PATTERN.fullmatch(text):
        raise InvalidRateLimitReset(value)

    reset_timestamp = int(text)
    if not 0 <= reset_timestamp <= MAX_RESET_TIMESTAMP:
        raise InvalidRateLimitReset(value)
    return reset_timestamp


def seconds_until_reset(reset_timestamp: int, now: float) -> int:
    """
    Whole seconds to wait for a reset timestamp.

    A reset at or before ``now`` waits one second. Otherwise the remaining
    time is rounded up so the retry never lands before the reset.
    """
    remaining = reset_timestamp - now
    if remaining <= 0:
        return 1
    return int(math.ceil(remaining))


def quota_backoff_seconds(counter: int, base: int = 2, cap: int = 3600) -> int:
    """min(base ** counter, cap)"""
    if counter < 0:
        raise ValueError("counter must be >= 0")
    return min(base ** counter, cap)
