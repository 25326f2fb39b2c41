"""
Tests for the error classifier.
"""

import json

import pytest

from backoff_core.classifier import (
    HttpStatusClass,
    StructuredErrorClass,
    classify_http_status,
    classify_structured_error,
    extract_error_reason,
    is_quota_exhaustion,
    parse_rate_limit_reset,
    quota_backoff_seconds,
    seconds_until_reset,
)
from backoff_core.exceptions import InvalidRateLimitReset
from backoff_core.models import StructuredBadRequest


def _payload(reason):
    return {"error": {"errors": [{"reason": reason}]}}


class TestHttpStatus:

    def test_ok(self):
        assert classify_http_status(200) is HttpStatusClass.OK

    def test_throttled(self):
        assert classify_http_status(429) is HttpStatusClass.THROTTLED

    @pytest.mark.parametrize("code", [201, 204, 301, 400, 401, 403, 404, 500, 503])
    def test_everything_else_is_other(self, code):
        assert classify_http_status(code) is HttpStatusClass.OTHER


class TestStructuredError:

    @pytest.mark.parametrize("reason", ["quotaExceeded", "uploadLimitExceeded"])
    def test_quota_reasons(self, reason):
        assert classify_structured_error(_payload(reason)) is StructuredErrorClass.QUOTA_EXCEEDED

    def test_other_reason(self):
        result = classify_structured_error(_payload("somethingElse"))

        assert result is StructuredErrorClass.OTHER_BAD_REQUEST

    def test_json_text_and_bytes(self):
        text = json.dumps(_payload("quotaExceeded"))

        assert classify_structured_error(text) is StructuredErrorClass.QUOTA_EXCEEDED
        assert classify_structured_error(text.encode()) is StructuredErrorClass.QUOTA_EXCEEDED

    def test_only_first_error_is_inspected(self):
        payload = {"error": {"errors": [{"reason": "badContent"}, {"reason": "quotaExceeded"}]}}

        assert classify_structured_error(payload) is StructuredErrorClass.OTHER_BAD_REQUEST

    def test_extra_fields_are_ignored(self):
        payload = {
            "error": {
                "code": 403,
                "message": "quota",
                "errors": [{"reason": "quotaExceeded", "domain": "youtube.quota"}],
            }
        }

        assert extract_error_reason(payload) == "quotaExceeded"

    @pytest.mark.parametrize("payload", [
        None,
        {},
        {"error": None},
        {"error": {}},
        {"error": {"errors": []}},
        {"error": {"errors": {}}},
        {"error": {"errors": [{}]}},
        {"error": {"errors": [{"reason": 5}]}},
        {"error": {"errors": ["quotaExceeded"]}},
        ["quotaExceeded"],
        "not json",
        b"\xff\xfe",
        "quotaExceeded",
    ])
    def test_malformed_payloads_fail_closed(self, payload):
        """Unrecognized shapes are never classified as quota exhaustion."""
        assert classify_structured_error(payload) is StructuredErrorClass.OTHER_BAD_REQUEST

    def test_custom_reason_list(self):
        payload = _payload("rateLimitExceeded")

        result = classify_structured_error(payload, quota_reasons={"rateLimitExceeded"})

        assert result is StructuredErrorClass.QUOTA_EXCEEDED


class TestIsQuotaExhaustion:

    def test_structured_quota_error(self):
        assert is_quota_exhaustion(StructuredBadRequest(_payload("quotaExceeded"))) is True

    def test_structured_other_error(self):
        assert is_quota_exhaustion(StructuredBadRequest(_payload("somethingElse"))) is False

    def test_unstructured_error_with_quota_text(self):
        """Only the tagged StructuredBadRequest variant is inspected."""
        assert is_quota_exhaustion(RuntimeError(json.dumps(_payload("quotaExceeded")))) is False


class TestRateLimitReset:

    def test_parse_integer(self):
        assert parse_rate_limit_reset("1700000030") == 1700000030

    def test_parse_with_whitespace(self):
        assert parse_rate_limit_reset(" 1700000030 ") == 1700000030

    def test_parse_bytes(self):
        assert parse_rate_limit_reset(b"1700000030") == 1700000030

    def test_parse_accepts_upper_bound(self):
        assert parse_rate_limit_reset(str(2**63 - 1)) == 2**63 - 1

    @pytest.mark.parametrize("value", [
        "",
        "soon",
        "1700000030.5",
        "Tue, 15 Nov 1994 08:12:31 GMT",
        "1_700_000_030",
        "0x10",
        "-5",
        "9" * 400,
        str(2**63),
    ])
    def test_parse_rejects_non_integers(self, value):
        with pytest.raises(InvalidRateLimitReset) as exc_info:
            parse_rate_limit_reset(value)

        assert exc_info.value.value == value

    def test_reset_in_past_waits_one_second(self):
        assert seconds_until_reset(1_700_000_000 - 10, now=1_700_000_000.0) == 1

    def test_reset_equal_to_now_waits_one_second(self):
        assert seconds_until_reset(1_700_000_000, now=1_700_000_000.0) == 1

    def test_reset_in_future(self):
        assert seconds_until_reset(1_700_000_030, now=1_700_000_000.0) == 30

    def test_partial_second_rounds_up(self):
        assert seconds_until_reset(1_700_000_030, now=1_700_000_000.4) == 30
        assert seconds_until_reset(1_700_000_001, now=1_700_000_000.9) == 1


class TestQuotaBackoffSeconds:

    def test_schedule_is_capped_exponential(self):
        for counter in range(0, 51):
            assert quota_backoff_seconds(counter) == min(2 ** counter, 3600)

    def test_cap_reached_at_twelve(self):
        assert quota_backoff_seconds(11) == 2048
        assert quota_backoff_seconds(12) == 3600

    def test_custom_base_and_cap(self):
        assert [quota_backoff_seconds(n, base=3, cap=20) for n in range(5)] == [1, 3, 9, 20, 20]

    def test_negative_counter_rejected(self):
        with pytest.raises(ValueError):
            quota_backoff_seconds(-1)
