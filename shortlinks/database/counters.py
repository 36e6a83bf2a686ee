"""Fixed-window request counters used by the rate limiter."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import redis.asyncio as redis


class WindowCounter(ABC):
    """Counts hits per key inside fixed time windows."""

    def __init__(self, window_seconds: int):
        if window_seconds < 1:
            raise ValueError("Window must be at least one second")
        self.window_seconds = window_seconds

    def _window(self, now: float) -> Tuple[int, int]:
        """Window index and seconds left until it closes."""
        index = int(now // self.window_seconds)
        reset_in = int((index + 1) * self.window_seconds - now) or 1
        return index, reset_in

    @abstractmethod
    async def hit(self, key: str, now: Optional[float] = None) -> Tuple[Optional[int], int]:
        """Record one hit for `key`.

        Args:
            key: Counter key (e.g. client address)
            now: Current time in seconds (defaults to time.time())

        Returns:
            Tuple of (hits in the current window or None if unknown, seconds until reset)
        """
        pass

    async def connect(self) -> None:
        """Open connections, if any."""

    async def close(self) -> None:
        """Release resources."""


class MemoryWindowCounter(WindowCounter):
    """Process-local counters. Each worker process limits on its own."""

    def __init__(self, window_seconds: int):
        super().__init__(window_seconds)
        self._counts: Dict[str, Tuple[int, int]] = {}

    async def hit(self, key: str, now: Optional[float] = None) -> Tuple[Optional[int], int]:
        now = time.time() if now is None else now
        index, reset_in = self._window(now)

        window, count = self._counts.get(key, (index, 0))
        if window != index:
            count = 0
            # Drop counters of closed windows while we are here
            self._counts = {k: v for k, v in self._counts.items() if v[0] == index}

        count += 1
        self._counts[key] = (index, count)
        return count, reset_in


class RedisWindowCounter(WindowCounter):
    """Counters shared by all workers through Redis."""

    def __init__(
        self,
        redis_url: str,
        window_seconds: int,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis counter.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            window_seconds: Length of each window
            logger: Optional logger instance
        """
        super().__init__(window_seconds)
        self.redis_url = redis_url
        self.logger = logger or logging.getLogger(__name__)
        self.client: Optional[redis.Redis] = None
        self.enabled = True

    async def connect(self) -> None:
        """Connect to Redis."""
        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis for rate limiting")
        except Exception as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    def get_counter_key(self, key: str, index: int) -> str:
        """Redis key for a client in a given window."""
        return f"shortlinks:ratelimit:{key}:{index}"

    async def hit(self, key: str, now: Optional[float] = None) -> Tuple[Optional[int], int]:
        now = time.time() if now is None else now
        index, reset_in = self._window(now)

        if not self.enabled or not self.client:
            return None, reset_in

        counter_key = self.get_counter_key(key, index)
        try:
            count = await self.client.incr(counter_key)
            if count == 1:
                await self.client.expire(counter_key, self.window_seconds)
            return count, reset_in
        except Exception as e:
            # Limiting is skipped rather than failing the request
            self.logger.error(f"Rate limit counter error: {e}")
            return None, reset_in

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")
