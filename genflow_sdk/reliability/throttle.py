"""
Throttles gate the admission of API calls.

A throttle is an async callable `await throttle(fn)` that waits for
admission, then awaits `fn()` and returns its result.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ThrottleOff:
    """Admit every call immediately."""

    async def __call__(self, fn: Callable[[], Awaitable[T]]) -> T:
        return await fn()

    def __repr__(self) -> str:
        return "ThrottleOff()"


class MaxConcurrencyThrottle:
    """Admit at most `max_concurrent_calls` calls at a time."""

    def __init__(self, max_concurrent_calls: int):
        if max_concurrent_calls < 1:
            raise ValueError("max_concurrent_calls must be at least 1")
        self.max_concurrent_calls = max_concurrent_calls
        # created on first use so it binds to the running loop
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._active = 0

    @property
    def active_calls(self) -> int:
        return self._active

    def _get_semaphore(self) -> asyncio.Semaphore:
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrent_calls)
        return self._semaphore

    async def __call__(self, fn: Callable[[], Awaitable[T]]) -> T:
        semaphore = self._get_semaphore()
        if semaphore.locked():
            logger.debug(f"Waiting for admission ({self.max_concurrent_calls} calls in flight)")

        async with semaphore:
            self._active += 1
            try:
                return await fn()
            finally:
                self._active -= 1

    def __repr__(self) -> str:
        return f"MaxConcurrencyThrottle(max_concurrent_calls={self.max_concurrent_calls})"


class RateLimitThrottle:
    """
    Token bucket admission.

    Tokens refill at `calls_per_second`; up to `burst` calls may be admitted
    back to back.
    """

    def __init__(self, calls_per_second: float, burst: int = 1):
        if calls_per_second <= 0:
            raise ValueError("calls_per_second must be positive")
        self.calls_per_second = calls_per_second
        self.burst = max(1, burst)
        self._tokens = float(self.burst)
        self._last_refill = time.monotonic()
        self._lock: Optional[asyncio.Lock] = None

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.calls_per_second)
        self._last_refill = now

    async def acquire(self) -> None:
        """Wait until a token is available and take it."""
        if self._lock is None:
            self._lock = asyncio.Lock()

        # the lock keeps waiters in arrival order
        async with self._lock:
            self._refill()
            while self._tokens < 1:
                wait_time = (1 - self._tokens) / self.calls_per_second
                logger.debug(f"Rate limit reached, waiting {wait_time * 1000:.0f}ms")
                await asyncio.sleep(wait_time)
                self._refill()
            self._tokens -= 1

    async def __call__(self, fn: Callable[[], Awaitable[T]]) -> T:
        await self.acquire()
        return await fn()

    def __repr__(self) -> str:
        return f"RateLimitThrottle(calls_per_second={self.calls_per_second}, burst={self.burst})"


ThrottleFunction = Callable[[Callable[[], Awaitable]], Awaitable]


def throttle_off() -> ThrottleOff:
    """The default throttle: no admission control."""
    return ThrottleOff()


def throttle_max_concurrency(max_concurrent_calls: int) -> MaxConcurrencyThrottle:
    return MaxConcurrencyThrottle(max_concurrent_calls)


def throttle_rate_limit(calls_per_second: float, burst: int = 1) -> RateLimitThrottle:
    return RateLimitThrottle(calls_per_second, burst)
