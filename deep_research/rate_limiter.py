"""Minimum-interval pacing for calls to a single external resource."""

import asyncio
import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Serialize calls so that no two start less than ``min_interval`` apart.

    The interval is measured from the start of the previous call. The lock
    makes the wait and the timestamp update a single step, so concurrent
    acquirers queue behind each other instead of both slipping through.

    Usage:
        limiter = RateLimiter(5.0)
        await limiter.acquire()
        response = await client.get(...)
    """

    def __init__(self, min_interval: float, name: str = ""):
        """
        Initialize the limiter.

        Args:
            min_interval: Minimum seconds between call starts (0 disables pacing)
            name: Resource name used in log messages
        """
        self.min_interval = max(0.0, min_interval)
        self.name = name
        self._last_call: Optional[float] = None
        self._lock = asyncio.Lock()

    def time_until_next_slot(self) -> float:
        """Seconds until a call may start without waiting."""
        if self._last_call is None:
            return 0.0
        elapsed = time.monotonic() - self._last_call
        return max(0.0, self.min_interval - elapsed)

    async def acquire(self) -> None:
        """Wait for the next free slot and claim it."""
        async with self._lock:
            wait = self.time_until_next_slot()
            if wait > 0:
                logger.debug(f"Rate limiter {self.name or 'default'}: waiting {wait:.2f}s")
            # Loop guards against timers firing a hair early
            while wait > 0:
                await asyncio.sleep(wait)
                wait = self.time_until_next_slot()
            self._last_call = time.monotonic()
