"""
Close-able asynchronous queue with broadcast iteration.

AsyncQueue bridges push-based producers (background tasks reading a network
stream) to pull-based consumers (`async for`). Values are kept for the lifetime
of the queue, and every iteration keeps its own cursor into the buffer, so
several consumers can each observe the full sequence.
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Deque, Generic, List, Optional, TypeVar

from ..core.errors import IllegalStateError

T = TypeVar("T")


class AsyncQueue(Generic[T]):
    """
    Single-writer, multi-reader async sequence.

    - push(value) appends a value and wakes waiting readers in FIFO order
    - close() ends the sequence; readers drain buffered values, then stop
    - close(error) ends the sequence with an error that readers raise after
      draining the buffered values
    """

    def __init__(self) -> None:
        self._values: List[T] = []
        self._waiters: Deque[asyncio.Future] = deque()
        self._closed = False
        self._error: Optional[BaseException] = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def __len__(self) -> int:
        return len(self._values)

    def push(self, value: T) -> None:
        """
        Append a value.

        Raises:
            IllegalStateError: If the queue is closed
        """
        if self._closed:
            raise IllegalStateError("Cannot push value to closed queue.")
        self._values.append(value)
        self._wake_waiters()

    def close(self, error: Optional[BaseException] = None) -> None:
        """Close the queue. Only the first call has an effect."""
        if self._closed:
            return
        self._closed = True
        self._error = error
        self._wake_waiters()

    def _wake_waiters(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)

    def __aiter__(self) -> "AsyncQueueIterator[T]":
        return AsyncQueueIterator(self)


class AsyncQueueIterator(Generic[T]):
    """Cursor over an AsyncQueue, starting at the first buffered value."""

    def __init__(self, queue: AsyncQueue[T]):
        self._queue = queue
        self._position = 0

    def __aiter__(self) -> "AsyncQueueIterator[T]":
        return self

    async def __anext__(self) -> T:
        queue = self._queue
        while True:
            if self._position < len(queue._values):
                value = queue._values[self._position]
                self._position += 1
                return value

            if queue._closed:
                if queue._error is not None:
                    raise queue._error
                raise StopAsyncIteration

            waiter = asyncio.get_running_loop().create_future()
            queue._waiters.append(waiter)
            try:
                await waiter
            except asyncio.CancelledError:
                if waiter in queue._waiters:
                    queue._waiters.remove(waiter)
                raise
