"""Tests for retry, backoff and deadline handling."""

import asyncio
import pytest
from unittest.mock import AsyncMock

from deep_research import resilience
from deep_research.errors import (
    CallTimeoutError,
    ErrorKind,
    ExternalCallError,
    MaxRetriesExceeded,
)
from deep_research.rate_limiter import RateLimiter
from deep_research.resilience import RetryPolicy, call_with_resilience, is_retryable, with_retry, with_timeout


@pytest.fixture
def recorded_sleep(monkeypatch):
    """Replace backoff sleeps with a recorder."""
    sleep = AsyncMock()
    monkeypatch.setattr(resilience, "_sleep", sleep)
    return sleep


def failing(*errors, result="ok"):
    """Coroutine factory raising ``errors`` in order, then returning ``result``."""
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if calls["count"] <= len(errors):
            raise errors[calls["count"] - 1]
        return result

    return operation, calls


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    @pytest.mark.unit
    def test_exponential_schedule(self):
        """Delays double with every failed attempt."""
        policy = RetryPolicy(max_attempts=4, initial_delay=2.0)
        error = ExternalCallError(ErrorKind.TRANSIENT, "boom")

        assert [policy.backoff_delay(n, error) for n in (1, 2, 3)] == [2.0, 4.0, 8.0]

    @pytest.mark.unit
    def test_rate_limit_hint_wins(self):
        """Server reset hint replaces the exponential delay."""
        policy = RetryPolicy(initial_delay=10.0)
        error = ExternalCallError(ErrorKind.RATE_LIMITED, "slow down", retry_after=1.5)

        assert policy.backoff_delay(3, error) == 1.5

    @pytest.mark.unit
    def test_fixed_delay(self):
        """Without exponential backoff every wait is the initial delay."""
        policy = RetryPolicy(initial_delay=3.0, use_exponential_backoff=False)
        error = ExternalCallError(ErrorKind.TRANSIENT, "boom")

        assert policy.backoff_delay(3, error) == 3.0

    @pytest.mark.unit
    def test_rejects_zero_attempts(self):
        """At least one attempt is required."""
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    @pytest.mark.unit
    def test_is_retryable(self):
        """Only rate-limited and transient external errors are retryable."""
        assert is_retryable(ExternalCallError(ErrorKind.RATE_LIMITED, "x"))
        assert is_retryable(ExternalCallError(ErrorKind.TRANSIENT, "x"))
        assert not is_retryable(ExternalCallError(ErrorKind.FATAL, "x"))
        assert not is_retryable(RuntimeError("x"))


class TestWithRetry:
    """Tests for with_retry."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success_first_try(self, recorded_sleep):
        """Successful calls are not retried."""
        operation, calls = failing()

        assert await with_retry(operation, RetryPolicy()) == "ok"
        assert calls["count"] == 1
        recorded_sleep.assert_not_awaited()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_recovers_from_transient(self, recorded_sleep):
        """Transient failures are retried until the call succeeds."""
        operation, calls = failing(
            ExternalCallError(ErrorKind.TRANSIENT, "reset"),
            ExternalCallError(ErrorKind.TRANSIENT, "reset"),
        )

        result = await with_retry(operation, RetryPolicy(initial_delay=1.0))

        assert result == "ok"
        assert calls["count"] == 3
        assert [c.args[0] for c in recorded_sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_always_rate_limited(self, recorded_sleep):
        """Exactly max_attempts attempts, non-decreasing delays, then MaxRetriesExceeded."""
        errors = [ExternalCallError(ErrorKind.RATE_LIMITED, "429") for _ in range(10)]
        operation, calls = failing(*errors)

        with pytest.raises(MaxRetriesExceeded) as exc_info:
            await with_retry(operation, RetryPolicy(max_attempts=3, initial_delay=10.0))

        assert calls["count"] == 3
        assert exc_info.value.attempts == 3
        assert exc_info.value.last_error is errors[2]
        assert exc_info.value.__cause__ is errors[2]

        delays = [c.args[0] for c in recorded_sleep.await_args_list]
        assert delays == [10.0, 20.0]
        assert delays == sorted(delays)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fatal_not_retried(self, recorded_sleep):
        """Fatal errors propagate on first occurrence."""
        error = ExternalCallError(ErrorKind.FATAL, "401")
        operation, calls = failing(error)

        with pytest.raises(ExternalCallError) as exc_info:
            await with_retry(operation, RetryPolicy())

        assert exc_info.value is error
        assert calls["count"] == 1
        recorded_sleep.assert_not_awaited()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unclassified_not_retried(self, recorded_sleep):
        """Exceptions outside the taxonomy are never retried."""
        operation, calls = failing(KeyError("missing"))

        with pytest.raises(KeyError):
            await with_retry(operation, RetryPolicy())

        assert calls["count"] == 1


class TestCallWithResilience:
    """Tests for call_with_resilience."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout_raises_call_timeout(self):
        """Deadline expiry raises CallTimeoutError without retrying."""
        calls = {"count": 0}

        async def hang():
            calls["count"] += 1
            await asyncio.sleep(10)

        with pytest.raises(CallTimeoutError) as exc_info:
            await call_with_resilience(hang, timeout=0.05, operation_name="Search operation")

        assert isinstance(exc_info.value, TimeoutError)
        assert exc_info.value.operation == "Search operation"
        assert calls["count"] == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_timeout(self, recorded_sleep):
        """A None timeout disables the deadline."""
        operation, _ = failing(result=42)

        assert await call_with_resilience(operation, timeout=None) == 42

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_limiter_acquired_every_attempt(self, recorded_sleep):
        """Retries are paced by the limiter like first attempts."""
        limiter = RateLimiter(0.0)
        limiter.acquire = AsyncMock()
        operation, calls = failing(ExternalCallError(ErrorKind.TRANSIENT, "reset"))

        result = await call_with_resilience(
            operation,
            timeout=1.0,
            policy=RetryPolicy(initial_delay=0.0),
            limiter=limiter,
        )

        assert result == "ok"
        assert calls["count"] == 2
        assert limiter.acquire.await_count == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_deadline_applies_per_attempt(self):
        """Slow transient failures are retried, each attempt with a fresh deadline."""
        calls = {"count": 0}

        async def slow_then_reset():
            calls["count"] += 1
            await asyncio.sleep(0.06)
            raise ExternalCallError(ErrorKind.TRANSIENT, "connection reset")

        with pytest.raises(MaxRetriesExceeded) as exc_info:
            await call_with_resilience(
                slow_then_reset,
                timeout=0.1,
                policy=RetryPolicy(max_attempts=3, initial_delay=0.0),
            )

        assert calls["count"] == 3
        assert exc_info.value.attempts == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_limiter_wait_outside_deadline(self):
        """Waiting for the limiter does not eat into an attempt's deadline."""
        limiter = RateLimiter(0.15)
        await limiter.acquire()

        async def quick():
            return "ok"

        assert await call_with_resilience(quick, timeout=0.1, limiter=limiter) == "ok"


class TestWithTimeout:
    """Tests for with_timeout."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_operation_timeout_not_relabelled(self):
        """A TimeoutError raised by the operation itself propagates unchanged."""
        error = TimeoutError("socket read timed out")

        async def socket_timeout():
            raise error

        with pytest.raises(TimeoutError) as exc_info:
            await with_timeout(socket_timeout(), 1.0, "Search operation")

        assert exc_info.value is error
        assert not isinstance(exc_info.value, CallTimeoutError)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_deadline_raises_call_timeout(self):
        """The wrapper's own deadline surfaces as CallTimeoutError."""
        with pytest.raises(CallTimeoutError) as exc_info:
            await with_timeout(asyncio.sleep(10), 0.05, "Processing operation")

        assert exc_info.value.operation == "Processing operation"
