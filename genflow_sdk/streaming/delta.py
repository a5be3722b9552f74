"""
Typed deltas and the event-source delta adapter.

A streamed model response is a sequence of Delta values: DeltaValue for a
parsed chunk, DeltaError for a chunk (or transport) failure. The sequence ends
when the carrying AsyncQueue is closed.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterable, Generic, Optional, TypeVar, Union

from ..core.errors import AbortError
from ..core.run import AbortSignal
from ..core.schema import Schema, safe_parse_json
from .async_queue import AsyncQueue
from .event_source import parse_event_source_stream

logger = logging.getLogger(__name__)

T = TypeVar("T")

DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class DeltaValue(Generic[T]):
    """A successfully parsed chunk."""
    delta_value: T
    type: str = field(default="delta", init=False)


@dataclass(frozen=True)
class DeltaError:
    """A chunk that failed to parse, or a failure of the underlying stream."""
    error: BaseException
    type: str = field(default="error", init=False)


Delta = Union[DeltaValue[T], DeltaError]

# keep references to background readers so they are not garbage collected
_background_tasks = set()


def spawn_background(coro) -> asyncio.Task:
    task = asyncio.ensure_future(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


async def _pump_event_source(
    stream: AsyncIterable[bytes],
    schema: Schema[T],
    queue: AsyncQueue[Delta[T]],
    abort_signal: Optional[AbortSignal],
) -> None:
    messages = parse_event_source_stream(stream, abort_signal=abort_signal)
    try:
        async for message in messages:
            if message.data == DONE_SENTINEL:
                queue.close()
                return

            result = safe_parse_json(message.data, schema)
            if not result.success:
                # unparsable chunks (e.g. keep-alives) do not end the stream
                queue.push(DeltaError(result.error))
                continue

            queue.push(DeltaValue(result.value))
    except Exception as error:  # noqa: BLE001
        logger.debug(f"Event-source stream failed: {type(error).__name__}: {error}")
        if not queue.closed:
            queue.push(DeltaError(error))
            queue.close()
        return
    except asyncio.CancelledError:
        # readers still waiting on the queue must not hang
        queue.close(AbortError("Event-source reader cancelled"))
        raise
    finally:
        if not queue.closed:
            queue.close()
        # releases the source (e.g. an HTTP response) when reading stops early
        await messages.aclose()
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()


def parse_event_source_stream_as_async_iterable(
    stream: AsyncIterable[bytes],
    schema: Schema[T],
    abort_signal: Optional[AbortSignal] = None,
) -> AsyncQueue[Delta[T]]:
    """
    Turn an SSE byte stream into a queue of typed deltas.

    For each record: "[DONE]" closes the queue; data that parses against
    `schema` becomes a DeltaValue; data that does not becomes a DeltaError and
    the stream continues. A failure of the byte stream itself pushes one
    DeltaError and closes the queue.

    Must be called with a running event loop; reading happens in a
    background task.
    """
    queue: AsyncQueue[Delta[T]] = AsyncQueue()
    spawn_background(_pump_event_source(stream, schema, queue, abort_signal))
    return queue
