"""
Run context and cancellation primitives.

A RunContext bundles correlation ids, the abort signal, an error handler and a
run-scoped observer. It is created by the caller of a top-level operation and
passed by reference into every nested call; the SDK never mutates it.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from .errors import AbortError

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorHandler = Callable[[BaseException], None]


class AbortSignal:
    """Read side of a cancellation source. Created by AbortController."""

    def __init__(self) -> None:
        self._aborted = False
        self._reason: Any = None
        self._listeners: List[Callable[[Any], None]] = []
        self._event: Optional[asyncio.Event] = None

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def reason(self) -> Any:
        return self._reason

    def throw_if_aborted(self) -> None:
        if self._aborted:
            raise AbortError(reason=self._reason)

    def add_listener(self, listener: Callable[[Any], None]) -> None:
        """Register a callback fired once when the signal is aborted."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[Any], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def wait(self) -> None:
        """Suspend until the signal is aborted."""
        if self._aborted:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def _abort(self, reason: Any) -> None:
        if self._aborted:
            return
        self._aborted = True
        self._reason = reason
        if self._event is not None:
            self._event.set()
        for listener in list(self._listeners):
            try:
                listener(reason)
            except Exception as e:  # noqa: BLE001
                logger.warning(f"Abort listener failed: {type(e).__name__}: {e}")


class AbortController:
    """Write side of a cancellation source."""

    def __init__(self) -> None:
        self.signal = AbortSignal()

    def abort(self, reason: Any = None) -> None:
        """Abort the signal. Calling it again has no effect."""
        self.signal._abort(reason)


@dataclass(frozen=True)
class RunContext:
    """
    Correlation and cancellation bundle threaded through nested calls.

    Attributes:
        run_id: Identifier of the run
        session_id: Optional session identifier
        user_id: Optional user identifier
        abort_signal: The single cancellation source for the run
        error_handler: Receives observer failures and stream errors
        function_observer: Observer notified about every call in the run
    """
    run_id: str = ""
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    abort_signal: Optional[AbortSignal] = None
    error_handler: Optional[ErrorHandler] = None
    function_observer: Optional[Any] = None

    @classmethod
    def create(cls, **kwargs: Any) -> "RunContext":
        """Create a run context with a fresh run id."""
        kwargs.setdefault("run_id", f"run-{uuid.uuid4().hex}")
        return cls(**kwargs)


async def run_abortable(awaitable: Awaitable[T], abort_signal: Optional[AbortSignal]) -> T:
    """
    Await `awaitable`, cancelling it if `abort_signal` fires first.

    Raises:
        AbortError: If the signal is (or becomes) aborted before completion
    """
    if abort_signal is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    if abort_signal.aborted:
        task.cancel()
        raise AbortError(reason=abort_signal.reason)

    waiter = asyncio.ensure_future(abort_signal.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        raise

    if task in done:
        waiter.cancel()
        return task.result()

    task.cancel()
    try:
        await task
    except (asyncio.CancelledError, Exception):  # noqa: BLE001
        # the task's own outcome is superseded by the abort
        pass
    raise AbortError(reason=abort_signal.reason)
