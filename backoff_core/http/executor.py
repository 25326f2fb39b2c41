"""
Header-Driven Retry Executor
============================
Retries throttled HTTP requests using the server's rate-limit-reset hint.

* 200          -> success
* 429          -> wait until the ``Ratelimit-Reset`` timestamp, then retry
* other status -> terminal failure
* transport errors -> linear backoff, bounded by max_transport_retries
"""

import time
from typing import Callable, Optional

import httpx
import structlog

from ..classifier import (
    HttpStatusClass,
    classify_http_status,
    parse_rate_limit_reset,
    seconds_until_reset,
)
from ..clock import BackoffClock, default_clock
from ..config import HeaderRetryConfig
from ..exceptions import (
    DeadlineExceeded,
    InvalidRateLimitReset,
    MissingRateLimitReset,
    TransportRetriesExhausted,
    UnexpectedStatusError,
)
from ..log import new_call_id
from ..models import Fail, RetryAfter, RetryAttempt, RetryDecision, RetryNow, Success
from .requests import clone_request

logger = structlog.get_logger(__name__)


class HeaderRetryExecutor:
    """
    Executes idempotent HTTP requests until success or a terminal outcome.

    Example:
        async with HeaderRetryExecutor() as executor:
            request = executor.client.build_request("GET", url, headers=auth)
            response = await executor.execute(request)

    The executor keeps no per-call state, so one instance (and its client)
    can serve many concurrent calls.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        config: Optional[HeaderRetryConfig] = None,
        clock: Optional[BackoffClock] = None,
        now: Optional[Callable[[], float]] = None,
        monotonic: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            client: Shared client; one is created and owned when omitted
            config: Retry limits (defaults read from the environment)
            clock: Backoff clock used for every wait
            now: Wall-clock source in Unix seconds, compared with reset hints
            monotonic: Clock used for caller deadlines
        """
        self._client = client
        self._owns_client = client is None
        self.config = config or HeaderRetryConfig.from_env()
        self.clock = clock or default_clock()
        self._now = now or time.time
        self._monotonic = monotonic or time.monotonic

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HeaderRetryExecutor":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    def reset_hint(self, request: httpx.Request, response: httpx.Response) -> Optional[str]:
        """
        Read the reset timestamp header.

        The response is authoritative. Some APIs have been integrated by
        setting the header on the outgoing request instead; that value is
        used only when the response has none and the config allows it.
        """
        header = self.config.reset_header
        value = response.headers.get(header)
        if value is not None:
            return value

        if self.config.allow_request_reset_hint:
            value = request.headers.get(header)
            if value is not None:
                logger.warning(
                    "rate_limit_reset_from_request",
                    header=header,
                    url=str(request.url),
                )
        return value

    def decide(self, request: httpx.Request, response: httpx.Response) -> RetryDecision:
        """Turn one response into a retry decision."""
        status_class = classify_http_status(response.status_code)

        if status_class is HttpStatusClass.OK:
            return Success(response)

        if status_class is HttpStatusClass.OTHER:
            return Fail(UnexpectedStatusError(response.status_code, response))

        raw_reset = self.reset_hint(request, response)
        if raw_reset is None:
            return Fail(MissingRateLimitReset(self.config.reset_header))

        try:
            reset_timestamp = parse_rate_limit_reset(raw_reset)
        except InvalidRateLimitReset as e:
            return Fail(e)

        return RetryAfter(seconds_until_reset(reset_timestamp, self._now()), add_buffer=True)

    def decide_transport_failure(self, failures: int, error: httpx.TransportError) -> RetryDecision:
        """Linear backoff for the n-th transport failure of one call.

        ``failures`` is cumulative; throttled responses in between do not reset it.
        """
        if failures > self.config.max_transport_retries:
            return Fail(TransportRetriesExhausted(failures, error))
        if self.config.transport_backoff_step == 0:
            return RetryNow()
        return RetryAfter(failures * self.config.transport_backoff_step, add_buffer=True)

    async def execute(
        self,
        request: httpx.Request,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """
        Send ``request`` until it succeeds or fails terminally.

        Args:
            request: Idempotent request; a clone is sent on every attempt
            timeout: Optional overall deadline in seconds, checked before
                each attempt

        Returns:
            The 200 response

        Raises:
            RequestNotRetryable: Request body cannot be replayed
            TransportRetriesExhausted: Too many transport errors during the call
            MissingRateLimitReset: 429 without a reset header
            InvalidRateLimitReset: Reset header is not an integer timestamp
            UnexpectedStatusError: Any status other than 200 or 429
            DeadlineExceeded: ``timeout`` passed before the next attempt
        """
        log = logger.bind(call_id=new_call_id(), method=request.method, url=str(request.url))
        attempt = RetryAttempt()
        transport_failures = 0
        deadline = None if timeout is None else self._monotonic() + timeout

        while True:
            if deadline is not None and self._monotonic() >= deadline:
                log.error("retry_deadline_exceeded", attempts=attempt.attempt_index)
                raise DeadlineExceeded(timeout, attempt.attempt_index, attempt.last_error)

            outgoing = clone_request(request)
            attempt.attempt_index += 1
            log.debug("http_attempt", attempt=attempt.attempt_index)

            try:
                response = await self.client.send(outgoing)
            except httpx.TransportError as e:
                transport_failures += 1
                attempt.last_error = e
                decision = self.decide_transport_failure(transport_failures, e)
                if not isinstance(decision, Fail):
                    log.warning(
                        "transport_error_retry",
                        attempt=attempt.attempt_index,
                        failures=transport_failures,
                        error=str(e),
                    )
            else:
                decision = self.decide(request, response)
                if isinstance(decision, RetryAfter):
                    log.info(
                        "rate_limited_retry",
                        attempt=attempt.attempt_index,
                        wait_seconds=decision.seconds,
                    )

            if isinstance(decision, Success):
                return decision.result

            if isinstance(decision, Fail):
                log.error(
                    "http_retry_failed",
                    attempts=attempt.attempt_index,
                    error=str(decision.error),
                )
                cause = getattr(decision.error, "last_exception", None)
                if cause is not None:
                    raise decision.error from cause
                raise decision.error

            if isinstance(decision, RetryAfter):
                await self.clock.wait(decision.seconds, add_buffer=decision.add_buffer)
