"""Token bucket rate limiter for catalog API calls.

Hey future me - fan-out reads fire up to five catalog calls at once, and a busy
dashboard multiplies that. The bucket smooths bursts so we stay below Spotify's
limits, and handle_rate_limit_response() backs off when we get a 429 anyway.

USAGE:
    limiter = RateLimiter.for_catalog()

    async with limiter:
        response = await client.get(url)

    # On 429:
    await limiter.handle_rate_limit_response(retry_after)
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class RateLimiterConfig:
    """Configuration for rate limiter.

    Spotify allows roughly 180 requests / minute; 2 req/sec sustained with a
    burst of 10 leaves headroom. max_backoff_seconds must stay high because a
    Retry-After of several minutes is possible.
    """

    max_tokens: int = 10
    refill_rate: float = 2.0  # tokens per second
    max_backoff_seconds: float = 600.0
    initial_backoff_seconds: float = 1.0
    backoff_multiplier: float = 2.0


@dataclass
class RateLimiter:
    """Token bucket rate limiter with adaptive backoff."""

    config: RateLimiterConfig = field(default_factory=RateLimiterConfig)
    name: str = "default"

    _tokens: float = field(default=0.0, init=False)
    _last_refill: float = field(default_factory=time.monotonic, init=False)
    _current_backoff: float = field(default=0.0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __post_init__(self) -> None:
        self._tokens = float(self.config.max_tokens)
        self._current_backoff = self.config.initial_backoff_seconds

    @classmethod
    def for_catalog(cls) -> "RateLimiter":
        """Create a limiter tuned for the Spotify catalog API."""
        return cls(config=RateLimiterConfig(), name="catalog")

    def _refill_tokens(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(
            float(self.config.max_tokens),
            self._tokens + elapsed * self.config.refill_rate,
        )
        self._last_refill = now

    async def acquire(self) -> None:
        """Take one token, sleeping until one is available."""
        while True:
            async with self._lock:
                self._refill_tokens()
                if self._tokens >= 1.0:
                    self._tokens -= 1.0
                    return
                wait_time = (1.0 - self._tokens) / self.config.refill_rate

            logger.debug("RateLimiter[%s]: waiting %.2fs for a token", self.name, wait_time)
            await asyncio.sleep(wait_time)

    async def handle_rate_limit_response(
        self, retry_after: int | None = None, max_wait: float | None = None
    ) -> float:
        """Back off after a 429 and return the time waited.

        Retry-After wins when present; otherwise the exponential backoff level is
        used and then doubled for the next 429. max_wait clamps this one wait
        below max_backoff_seconds (the caller's remaining time budget).
        """
        async with self._lock:
            if retry_after is not None:
                wait_time = float(retry_after)
            else:
                wait_time = self._current_backoff
            wait_time = min(wait_time, self.config.max_backoff_seconds)
            if max_wait is not None:
                wait_time = max(0.0, min(wait_time, max_wait))

            self._current_backoff = min(
                self._current_backoff * self.config.backoff_multiplier,
                self.config.max_backoff_seconds,
            )
            self._tokens = 0.0

        logger.warning(
            "RateLimiter[%s]: 429 rate limited, waiting %.1fs before retry",
            self.name,
            wait_time,
        )
        await asyncio.sleep(wait_time)
        return wait_time

    def reset_backoff(self) -> None:
        self._current_backoff = self.config.initial_backoff_seconds

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object
    ) -> None:
        # Backoff is reset by the caller once it sees a non-429 response
        return None


__all__ = ["RateLimiter", "RateLimiterConfig"]
