"""
Retry policies.

A retry policy is an async callable `await retry(fn, abort_signal=None)` that
invokes the zero-argument coroutine function `fn` one or more times.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, TypeVar

from ..core.errors import AbortError, RetryError
from ..core.run import AbortSignal, run_abortable
from .error_classifier import ErrorClassifier

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RetryNever:
    """Invoke `fn` exactly once."""

    async def __call__(
        self,
        fn: Callable[[], Awaitable[T]],
        abort_signal: Optional[AbortSignal] = None,
    ) -> T:
        return await fn()

    def __repr__(self) -> str:
        return "RetryNever()"


@dataclass
class ExponentialBackoffRetry:
    """
    Retry retryable errors with exponential backoff.

    Attributes:
        max_tries: Maximum number of attempts, including the first one
        initial_delay_in_ms: Delay before the second attempt
        backoff_factor: Multiplier applied to the delay after each retry
        jitter_factor: Random +/- fraction applied to each delay
    """
    max_tries: int = 3
    initial_delay_in_ms: float = 2000
    backoff_factor: float = 2.0
    jitter_factor: float = 0.0

    async def __call__(
        self,
        fn: Callable[[], Awaitable[T]],
        abort_signal: Optional[AbortSignal] = None,
    ) -> T:
        errors: List[BaseException] = []
        delay_in_ms = self.initial_delay_in_ms

        while True:
            try:
                return await fn()
            except AbortError:
                raise
            except Exception as error:  # noqa: BLE001
                errors.append(error)
                try_number = len(errors)
                classification = ErrorClassifier.classify_error(error)

                if not classification.is_retryable:
                    if try_number == 1:
                        raise
                    raise RetryError(
                        f"Failed after {try_number} attempts with non-retryable error: '{error}'",
                        reason="error_not_retryable",
                        errors=errors,
                    ) from error

                if try_number >= self.max_tries:
                    raise RetryError(
                        f"Failed after {try_number} attempts. Last error: {error}",
                        reason="max_tries_exceeded",
                        errors=errors,
                    ) from error

                wait_in_ms = self._calculate_delay(delay_in_ms, classification.suggested_delay)
                logger.warning(
                    f"Retrying after {type(error).__name__} "
                    f"(attempt {try_number + 1}/{self.max_tries}, waiting {wait_in_ms:.0f}ms)",
                    extra={
                        "attempt": try_number + 1,
                        "error_type": type(error).__name__,
                        "error_category": classification.category.value,
                        "delay_ms": wait_in_ms,
                    },
                )

                await run_abortable(asyncio.sleep(wait_in_ms / 1000), abort_signal)
                delay_in_ms = delay_in_ms * self.backoff_factor

    def _calculate_delay(self, delay_in_ms: float, retry_after: Optional[float]) -> float:
        """Backoff delay, raised to the provider's Retry-After when that is longer."""
        if retry_after is not None and retry_after * 1000 > delay_in_ms:
            delay_in_ms = retry_after * 1000

        if self.jitter_factor > 0:
            jitter = random.uniform(-self.jitter_factor, self.jitter_factor) * delay_in_ms
            delay_in_ms = max(0.0, delay_in_ms + jitter)

        return delay_in_ms


RetryFunction = Callable[..., Awaitable]


def retry_never() -> RetryNever:
    """The default policy: no retries."""
    return RetryNever()


def retry_with_exponential_backoff(
    max_tries: int = 3,
    initial_delay_in_ms: float = 2000,
    backoff_factor: float = 2.0,
    jitter_factor: float = 0.0,
) -> ExponentialBackoffRetry:
    """Retry retryable errors up to `max_tries` attempts with growing delays."""
    return ExponentialBackoffRetry(
        max_tries=max(1, max_tries),
        initial_delay_in_ms=initial_delay_in_ms,
        backoff_factor=backoff_factor,
        jitter_factor=jitter_factor,
    )
