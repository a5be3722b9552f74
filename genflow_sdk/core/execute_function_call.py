"""
Function-call envelope.

Every model, tool and retriever invocation passes through FunctionCall so that
observers see a uniform event stream: one started event, then exactly one
finished event whose result is success, error or abort. The envelope never
changes the logical outcome of the wrapped operation.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

from .duration import start_duration_measurement
from .errors import AbortError, IllegalStateError
from .events import (
    AbortResult,
    ErrorResult,
    FunctionFinishedEvent,
    FunctionResult,
    FunctionStartedEvent,
    SuccessResult,
)
from .logging import get_function_call_logger
from .observers import FunctionEventSource, get_default_registry
from .options import FunctionCallOptions, FunctionOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FunctionCallState(Enum):
    """Lifecycle of an instrumented call."""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"


def create_call_id() -> str:
    return f"call-{uuid.uuid4().hex}"


class FunctionCall:
    """
    One instrumented invocation.

    Observers are merged in this order: function call logger (per-call logging
    level, else the registry's), registry observers, the run's observer, then
    call-scoped observers.
    """

    def __init__(
        self,
        function_type: str,
        input: Any = None,
        options: Optional[FunctionOptions] = None,
        event_fields: Optional[Dict[str, Any]] = None,
        started_event_class: Type[FunctionStartedEvent] = FunctionStartedEvent,
        finished_event_class: Type[FunctionFinishedEvent] = FunctionFinishedEvent,
    ):
        self.function_type = function_type
        self.input = input
        self.options = options or FunctionOptions()
        self.event_fields = event_fields or {}
        self.started_event_class = started_event_class
        self.finished_event_class = finished_event_class

        self.call_id = create_call_id()
        self.state = FunctionCallState.NOT_STARTED

        run = self.options.run
        registry = self.options.registry or get_default_registry()
        logging_level = self.options.logging if self.options.logging is not None else registry.logging

        observers = [
            *get_function_call_logger(logging_level),
            *registry.observers,
            *([run.function_observer] if run is not None and run.function_observer is not None else []),
            *self.options.observers,
        ]
        error_handler = (
            run.error_handler if run is not None and run.error_handler is not None else registry.error_handler
        )
        self.event_source = FunctionEventSource(observers, error_handler)

        self._duration = None
        self._start_fields: Dict[str, Any] = {}
        self._final_duration_in_ms: Optional[int] = None
        self.finish_timestamp: Optional[datetime] = None

    @property
    def abort_signal(self):
        return self.options.abort_signal

    @property
    def start_timestamp(self) -> Optional[datetime]:
        return self._duration.start_timestamp if self._duration is not None else None

    def is_abort(self, error: BaseException) -> bool:
        """An error counts as an abort if it is an AbortError or the signal has fired."""
        if isinstance(error, (AbortError, asyncio.CancelledError)):
            return True
        signal = self.abort_signal
        return signal is not None and signal.aborted

    def start(self) -> FunctionCallOptions:
        """Emit the started event and return the options for the wrapped operation."""
        if self.state is not FunctionCallState.NOT_STARTED:
            raise IllegalStateError(f"Call {self.call_id} already started")

        self._duration = start_duration_measurement()
        run = self.options.run
        self._start_fields = dict(
            function_type=self.function_type,
            call_id=self.call_id,
            parent_call_id=self.options.parent_call_id,
            function_id=self.options.function_id,
            run_id=run.run_id if run is not None else None,
            session_id=run.session_id if run is not None else None,
            user_id=run.user_id if run is not None else None,
            input=self.input,
            start_timestamp=self._duration.start_timestamp,
            **self.event_fields,
        )

        self.state = FunctionCallState.RUNNING
        self.event_source.notify(self.started_event_class(**self._start_fields))

        return FunctionCallOptions(
            function_id=self.options.function_id,
            logging=self.options.logging,
            observers=list(self.options.observers),
            run=run,
            parent_call_id=self.call_id,
            registry=self.options.registry,
            call_id=self.call_id,
            function_type=self.function_type,
        )

    @property
    def duration_in_ms(self) -> int:
        if self._final_duration_in_ms is not None:
            return self._final_duration_in_ms
        return self._duration.duration_in_ms if self._duration is not None else 0

    def succeed(self, result: SuccessResult) -> None:
        self._finish(result, FunctionCallState.SUCCEEDED)

    def abort(self) -> None:
        self._finish(AbortResult(), FunctionCallState.ABORTED)

    def fail(self, error: BaseException) -> BaseException:
        """
        Classify `error`, emit the finished event and return the exception to raise.

        Aborts surface as AbortError (or the original CancelledError); all other
        errors are returned unchanged.
        """
        if self.is_abort(error):
            self.abort()
            if isinstance(error, (AbortError, asyncio.CancelledError)):
                return error
            signal = self.abort_signal
            return AbortError(reason=signal.reason if signal is not None else None)

        self._finish(ErrorResult(error), FunctionCallState.FAILED)
        return error

    def _finish(self, result: FunctionResult, state: FunctionCallState) -> None:
        if self.state is not FunctionCallState.RUNNING:
            raise IllegalStateError(f"Call {self.call_id} is not running (state={self.state.value})")

        self.state = state
        self.finish_timestamp = datetime.now(timezone.utc)
        self._final_duration_in_ms = self._duration.duration_in_ms
        self.event_source.notify(
            self.finished_event_class(
                **self._start_fields,
                finish_timestamp=self.finish_timestamp,
                duration_in_ms=self._final_duration_in_ms,
                result=result,
            )
        )


async def execute_function_call(
    function_type: str,
    execute: Callable[[FunctionCallOptions], Awaitable[T]],
    input: Any = None,
    options: Optional[FunctionOptions] = None,
) -> T:
    """
    Run `execute` inside the function-call envelope.

    Args:
        function_type: Event function type (e.g. "execute-function")
        execute: The wrapped operation; receives options whose parent_call_id
            is this call's id
        input: Input reported in events
        options: Per-call options

    Returns:
        The value returned by `execute`

    Raises:
        AbortError: If the call was aborted
        Exception: Whatever `execute` raised
    """
    call = FunctionCall(function_type, input=input, options=options)
    call_options = call.start()

    try:
        value = await execute(call_options)
    except (Exception, asyncio.CancelledError) as error:
        raised = call.fail(error)
        if raised is error:
            raise
        raise raised from error

    call.succeed(SuccessResult(value))
    return value
