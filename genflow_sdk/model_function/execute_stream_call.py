"""
Streaming model call executor.

The stream is started inside the function-call envelope. The call stays
open while a background task drains the model's deltas into an output queue;
the finished event is emitted when the stream ends, fails or is aborted.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterable, AsyncIterator, Awaitable, Callable, Generic, Optional, Tuple, TypeVar

from ..core.errors import AbortError
from ..core.execute_function_call import FunctionCall
from ..core.options import FunctionCallOptions, FunctionOptions
from ..core.run import run_abortable
from ..streaming.async_queue import AsyncQueue
from ..streaming.delta import Delta, DeltaError, DeltaValue, spawn_background
from .events import ModelCallMetadata, ModelCallSuccessResult
from .execute_standard_call import create_model_call, create_model_call_metadata
from .model import Model

logger = logging.getLogger(__name__)

T = TypeVar("T")
OUT = TypeVar("OUT")


@dataclass
class StreamCallResult(Generic[OUT]):
    """
    Output stream of a streaming model call.

    `value` yields the processed outputs; it raises the stream's error after
    the buffered outputs once the stream has failed. `metadata` is the call
    record at start time.
    """
    value: AsyncQueue[OUT]
    metadata: ModelCallMetadata


def _consume_exception(future: asyncio.Future) -> None:
    if not future.cancelled():
        future.exception()


def create_completion_future(observed: bool) -> asyncio.Future:
    """
    Future settled when a stream ends.

    An unobserved future (the caller did not ask for it) retrieves its own
    exception so that a failed stream does not log "exception was never retrieved".
    """
    future = asyncio.get_running_loop().create_future()
    if not observed:
        future.add_done_callback(_consume_exception)
    return future


async def _next(iterator: AsyncIterator[T]) -> Tuple[bool, Optional[T]]:
    try:
        return True, await iterator.__anext__()
    except StopAsyncIteration:
        return False, None


class _StreamDrain(Generic[OUT]):
    """Moves deltas from the model stream to the output queue."""

    def __init__(
        self,
        call: FunctionCall,
        delta_stream: AsyncIterable[Delta[Any]],
        output_queue: AsyncQueue[OUT],
        process_delta: Callable[[DeltaValue[Any]], Optional[OUT]],
        process_finished: Optional[Callable[[], Optional[OUT]]],
        on_done: Optional[Callable[..., None]],
    ):
        self.call = call
        self.delta_stream = delta_stream
        self.output_queue = output_queue
        self.process_delta = process_delta
        self.process_finished = process_finished
        self.on_done = on_done
        self.last_value: Optional[OUT] = None

    def _handle_error(self, error: BaseException) -> None:
        error_handler = self.call.event_source.error_handler
        if error_handler is None:
            return
        try:
            error_handler(error)
        except Exception as handler_error:  # noqa: BLE001
            logger.warning(f"Error handler failed: {type(handler_error).__name__}: {handler_error}")

    def _emit(self, value: Optional[OUT]) -> None:
        if value is None:
            return
        self.output_queue.push(value)
        self.last_value = value

    def _notify_done(self, error: Optional[BaseException] = None) -> None:
        if self.on_done is None:
            return
        try:
            if error is None:
                self.on_done()
            else:
                self.on_done(error)
        except Exception as done_error:  # noqa: BLE001
            logger.warning(f"on_done callback failed: {type(done_error).__name__}: {done_error}")
            self._handle_error(done_error)

    def _check_abort(self) -> None:
        signal = self.call.abort_signal
        if signal is not None:
            signal.throw_if_aborted()

    async def run(self) -> None:
        signal = self.call.abort_signal
        try:
            iterator = self.delta_stream.__aiter__()
            while True:
                has_value, delta = await run_abortable(_next(iterator), signal)
                if not has_value:
                    break
                self._check_abort()

                if isinstance(delta, DeltaError):
                    # per-delta failures are reported but do not end the stream
                    logger.warning(
                        f"Stream delta error in {self.call.function_type} call {self.call.call_id}: "
                        f"{type(delta.error).__name__}: {delta.error}"
                    )
                    self._handle_error(delta.error)
                    continue

                self._emit(self.process_delta(delta))

            self._check_abort()
            if self.process_finished is not None:
                self._emit(self.process_finished())
        except (Exception, asyncio.CancelledError) as error:
            if isinstance(error, AbortError) or not self.call.is_abort(error):
                surfaced = error
            else:
                surfaced = AbortError(reason=signal.reason if signal is not None else None)

            self.output_queue.close(surfaced)
            self._notify_done(surfaced)
            self.call.fail(surfaced)

            if isinstance(error, asyncio.CancelledError):
                raise
            return

        self.output_queue.close()
        self._notify_done()
        self.call.succeed(ModelCallSuccessResult(value=self.last_value))


async def execute_stream_call(
    function_type: str,
    input: Any,
    model: Model,
    start_stream: Callable[[FunctionCallOptions], Awaitable[AsyncIterable[Delta[Any]]]],
    process_delta: Callable[[DeltaValue[Any]], Optional[OUT]],
    process_finished: Optional[Callable[[], Optional[OUT]]] = None,
    on_done: Optional[Callable[..., None]] = None,
    options: Optional[FunctionOptions] = None,
) -> StreamCallResult[OUT]:
    """
    Start a model stream and return its processed outputs.

    Args:
        function_type: Event function type (e.g. "stream-text")
        input: Input reported in events
        model: The model serving the call
        start_stream: Starts the request and returns the delta stream
        process_delta: Maps a DeltaValue to an output; None emits nothing
        process_finished: Produces one last output after the stream ends
        on_done: Called once when the stream ends; receives the error if it failed
        options: Per-call options

    Returns:
        StreamCallResult whose value yields the outputs

    Raises:
        AbortError: If the call was aborted before the stream started
        Exception: Whatever `start_stream` raised
    """
    call = create_model_call(function_type, input, model, options)
    call_options = call.start()

    try:
        delta_stream = await start_stream(call_options)
    except (Exception, asyncio.CancelledError) as error:
        raised = call.fail(error)
        if raised is error:
            raise
        raise raised from error

    output_queue: AsyncQueue[OUT] = AsyncQueue()
    drain = _StreamDrain(call, delta_stream, output_queue, process_delta, process_finished, on_done)
    spawn_background(drain.run())

    return StreamCallResult(value=output_queue, metadata=create_model_call_metadata(call, model))
