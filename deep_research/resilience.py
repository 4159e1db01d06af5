"""
Retry, backoff and deadline enforcement for external calls.

Every search and LLM call made by an exploration strategy goes through
:func:`call_with_resilience`. It is the only place in the engine where
retries happen:

- Retryable failures (``ErrorKind.RATE_LIMITED``, ``ErrorKind.TRANSIENT``)
  are retried up to ``RetryPolicy.max_attempts`` times.
- Rate-limited failures wait for the server-advertised reset when one is
  known, otherwise the exponential schedule applies.
- Each attempt runs under its own deadline. When it elapses the call fails
  with :class:`CallTimeoutError`, which is never retried here.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from .config import settings
from .errors import CallTimeoutError, ErrorKind, ExternalCallError, MaxRetriesExceeded
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Indirection so tests can observe backoff without real sleeps
_sleep = asyncio.sleep


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and backoff schedule for one class of calls."""
    max_attempts: int = 3
    initial_delay: float = 1.0
    use_exponential_backoff: bool = True

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be non-negative")

    @classmethod
    def from_settings(cls, initial_delay: Optional[float] = None) -> "RetryPolicy":
        return cls(
            max_attempts=settings.retry_max_attempts,
            initial_delay=settings.retry_initial_delay if initial_delay is None else initial_delay,
        )

    def backoff_delay(self, attempt: int, error: ExternalCallError) -> float:
        """
        Delay before the attempt following failed attempt number ``attempt``.

        Args:
            attempt: 1-based number of the attempt that just failed
            error: The classified failure

        Returns:
            Seconds to wait
        """
        if error.kind is ErrorKind.RATE_LIMITED and error.retry_after is not None:
            return max(0.0, error.retry_after)
        if not self.use_exponential_backoff:
            return self.initial_delay
        return self.initial_delay * (2 ** (attempt - 1))


def is_retryable(error: BaseException) -> bool:
    """Whether the wrapper should retry this failure."""
    return isinstance(error, ExternalCallError) and error.retryable


async def with_timeout(awaitable: Awaitable[T], timeout: Optional[float], operation: str) -> T:
    """
    Race ``awaitable`` against a deadline; ``None`` disables it.

    A ``TimeoutError`` raised by the awaitable itself before the deadline
    (a socket timeout, say) propagates unchanged.
    """
    if timeout is None:
        return await awaitable
    raised_by_operation = False

    async def guarded() -> T:
        nonlocal raised_by_operation
        try:
            return await awaitable
        except asyncio.TimeoutError:
            raised_by_operation = True
            raise

    try:
        return await asyncio.wait_for(guarded(), timeout)
    except asyncio.TimeoutError as e:
        if raised_by_operation:
            raise
        raise CallTimeoutError(operation, timeout) from e


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    operation_name: str = "operation",
) -> T:
    """
    Run ``operation`` until it succeeds or the attempt budget is spent.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        policy: Attempt count and backoff schedule
        operation_name: Label for log messages

    Returns:
        The operation's result

    Raises:
        MaxRetriesExceeded: Every attempt failed with a retryable error
        Exception: Any non-retryable failure, on first occurrence
    """
    last_error: Optional[ExternalCallError] = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except ExternalCallError as e:
            if not e.retryable:
                raise
            last_error = e
            if attempt == policy.max_attempts:
                break
            delay = policy.backoff_delay(attempt, e)
            if e.kind is ErrorKind.RATE_LIMITED:
                logger.warning(
                    f"{operation_name}: rate limited (attempt {attempt}/{policy.max_attempts}), "
                    f"waiting {delay:.1f}s before retry"
                )
            else:
                logger.warning(
                    f"{operation_name}: transient failure (attempt {attempt}/{policy.max_attempts}): {e}, "
                    f"retrying in {delay:.1f}s"
                )
            await _sleep(delay)

    logger.error(f"{operation_name}: giving up after {policy.max_attempts} attempts")
    raise MaxRetriesExceeded(policy.max_attempts, last_error) from last_error


async def call_with_resilience(
    operation: Callable[[], Awaitable[T]],
    *,
    timeout: Optional[float],
    policy: Optional[RetryPolicy] = None,
    limiter: Optional[RateLimiter] = None,
    operation_name: str = "operation",
) -> T:
    """
    Run an external call under rate limiting, retry and a deadline.

    The limiter is acquired before every attempt, so retries are paced the
    same way as first attempts. The deadline applies to each attempt on its
    own; limiter and backoff waits do not count against it.
    """
    policy = policy or RetryPolicy.from_settings()

    async def attempt() -> T:
        if limiter is not None:
            await limiter.acquire()
        return await with_timeout(operation(), timeout, operation_name)

    return await with_retry(attempt, policy, operation_name)
