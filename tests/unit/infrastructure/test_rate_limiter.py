"""Tests for the catalog token bucket."""

from unittest.mock import AsyncMock

import pytest
from pytest_mock import MockerFixture

from soundrate.infrastructure.rate_limiter import RateLimiter, RateLimiterConfig


@pytest.fixture
def sleep(mocker: MockerFixture) -> AsyncMock:
    return mocker.patch(
        "soundrate.infrastructure.rate_limiter.asyncio.sleep", new_callable=AsyncMock
    )


class TestRateLimiter:
    async def test_burst_is_served_without_waiting(self, sleep: AsyncMock) -> None:
        limiter = RateLimiter(config=RateLimiterConfig(max_tokens=3))

        for _ in range(3):
            async with limiter:
                pass

        sleep.assert_not_called()

    async def test_retry_after_wins_over_backoff(self, sleep: AsyncMock) -> None:
        limiter = RateLimiter.for_catalog()

        waited = await limiter.handle_rate_limit_response(retry_after=7)

        assert waited == 7.0
        sleep.assert_awaited_once_with(7.0)

    async def test_backoff_doubles_and_resets(self, sleep: AsyncMock) -> None:
        limiter = RateLimiter(config=RateLimiterConfig(initial_backoff_seconds=1.0))

        assert await limiter.handle_rate_limit_response() == 1.0
        assert await limiter.handle_rate_limit_response() == 2.0
        limiter.reset_backoff()
        assert await limiter.handle_rate_limit_response() == 1.0

    async def test_wait_is_capped(self, sleep: AsyncMock) -> None:
        limiter = RateLimiter(config=RateLimiterConfig(max_backoff_seconds=30.0))

        assert await limiter.handle_rate_limit_response(retry_after=3600) == 30.0

    async def test_max_wait_clamps_retry_after(self, sleep: AsyncMock) -> None:
        limiter = RateLimiter.for_catalog()

        waited = await limiter.handle_rate_limit_response(retry_after=300, max_wait=4.5)

        assert waited == 4.5
        sleep.assert_awaited_once_with(4.5)
