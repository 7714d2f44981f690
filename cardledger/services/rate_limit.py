"""
Async rate limiting for outbound API calls.

Scryfall asks clients to stay under 10 requests per second; calls wait
for a free slot instead of failing.
"""

import asyncio
import time
from collections.abc import Callable


class AsyncRateLimiter:
    """
    Spaces calls so that at most ``rate`` happen per ``period`` seconds.

    Up to ``rate`` calls may burst immediately after a quiet period.
    """

    def __init__(
        self,
        rate: int,
        period: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if rate <= 0:
            raise ValueError(f"rate must be positive (got {rate})")
        self.rate = rate
        self.period = period
        self._clock = clock
        self._tokens = float(rate)
        self._updated_at = clock()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._updated_at
        self._updated_at = now
        self._tokens = min(float(self.rate), self._tokens + elapsed * self.rate / self.period)

    async def acquire(self) -> None:
        """Wait until a call is allowed, then consume one slot."""
        async with self._lock:
            self._refill()
            if self._tokens < 1:
                wait = (1 - self._tokens) * self.period / self.rate
                await asyncio.sleep(wait)
                self._refill()
                self._tokens = max(self._tokens, 1.0)
            self._tokens -= 1

    async def __aenter__(self) -> "AsyncRateLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None
