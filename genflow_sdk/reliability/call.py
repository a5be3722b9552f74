"""Composition of retry and throttle around one API call."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from ..core.errors import AbortError
from ..core.run import AbortSignal, run_abortable
from .retry import retry_never
from .throttle import throttle_off

logger = logging.getLogger(__name__)

T = TypeVar('T')


async def call_with_retry_and_throttle(
    fn: Callable[[], Awaitable[T]],
    retry=None,
    throttle=None,
    abort_signal: Optional[AbortSignal] = None,
) -> T:
    """
    Run `fn` under a throttle and a retry policy.

    The throttle admits the call once; all retries run inside the admitted
    slot. Abort is checked before admission and raced against the wait for
    admission, the backoff sleeps and the call itself.

    Args:
        fn: Zero-argument coroutine function performing the API call
        retry: Retry policy (default: retry_never())
        throttle: Throttle (default: throttle_off())
        abort_signal: Cancels the call

    Raises:
        AbortError: If the signal is aborted before or during the call
        RetryError: If the retry policy gives up
    """
    retry = retry or retry_never()
    throttle = throttle or throttle_off()

    if abort_signal is not None and abort_signal.aborted:
        raise AbortError(reason=abort_signal.reason)

    async def attempt() -> T:
        return await run_abortable(fn(), abort_signal)

    async def admitted() -> T:
        return await retry(attempt, abort_signal=abort_signal)

    try:
        return await run_abortable(throttle(admitted), abort_signal)
    except AbortError:
        logger.debug("API call aborted")
        raise
