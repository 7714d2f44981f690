"""Tests for the async rate limiter."""

from unittest.mock import AsyncMock, patch

import pytest

from cardledger.services.rate_limit import AsyncRateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestAsyncRateLimiter:
    def test_rejects_non_positive_rate(self) -> None:
        with pytest.raises(ValueError):
            AsyncRateLimiter(0)

    async def test_burst_does_not_wait(self) -> None:
        clock = FakeClock()
        limiter = AsyncRateLimiter(3, clock=clock)

        with patch("cardledger.services.rate_limit.asyncio.sleep", new_callable=AsyncMock) as sleep:
            for _ in range(3):
                await limiter.acquire()

        sleep.assert_not_awaited()

    async def test_waits_when_exhausted(self) -> None:
        clock = FakeClock()
        limiter = AsyncRateLimiter(2, period=1.0, clock=clock)

        with patch("cardledger.services.rate_limit.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await limiter.acquire()
            await limiter.acquire()
            await limiter.acquire()

        sleep.assert_awaited_once()
        assert sleep.await_args.args[0] == pytest.approx(0.5)

    async def test_refills_over_time(self) -> None:
        clock = FakeClock()
        limiter = AsyncRateLimiter(2, period=1.0, clock=clock)

        with patch("cardledger.services.rate_limit.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await limiter.acquire()
            await limiter.acquire()
            clock.now = 1.0
            await limiter.acquire()

        sleep.assert_not_awaited()

    async def test_context_manager(self) -> None:
        limiter = AsyncRateLimiter(1, clock=FakeClock())

        async with limiter as acquired:
            assert acquired is limiter
