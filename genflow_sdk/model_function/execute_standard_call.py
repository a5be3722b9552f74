"""
Standard (request/response) model call executor.

Wraps one model request in the function-call envelope and returns the
extracted value together with the call metadata.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from ..core.execute_function_call import FunctionCall
from ..core.options import FunctionCallOptions, FunctionOptions
from .events import (
    ModelCallFinishedEvent,
    ModelCallMetadata,
    ModelCallStartedEvent,
    ModelCallSuccessResult,
)
from .model import Model

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class StandardCallResponse(Generic[T]):
    """What `generate_response` returns."""
    raw_response: Any
    extracted_value: T
    usage: Any = None


@dataclass
class StandardCallResult(Generic[T]):
    """Value of a standard model call plus its metadata."""
    value: T
    raw_response: Any
    usage: Any
    metadata: ModelCallMetadata


def create_model_call(
    function_type: str,
    input: Any,
    model: Model,
    options: Optional[FunctionOptions],
) -> FunctionCall:
    """Function call whose events carry the model and its settings."""
    return FunctionCall(
        function_type,
        input=input,
        options=options,
        event_fields=dict(model=model.model_information, settings=model.settings_for_event),
        started_event_class=ModelCallStartedEvent,
        finished_event_class=ModelCallFinishedEvent,
    )


def create_model_call_metadata(call: FunctionCall, model: Model, usage: Any = None) -> ModelCallMetadata:
    run = call.options.run
    return ModelCallMetadata(
        model=model.model_information,
        call_id=call.call_id,
        start_timestamp=call.start_timestamp,
        finish_timestamp=call.finish_timestamp,
        duration_in_ms=call.duration_in_ms,
        run_id=run.run_id if run is not None else None,
        session_id=run.session_id if run is not None else None,
        user_id=run.user_id if run is not None else None,
        function_id=call.options.function_id,
        usage=usage,
    )


async def execute_standard_call(
    function_type: str,
    input: Any,
    model: Model,
    generate_response: Callable[[FunctionCallOptions], Awaitable[StandardCallResponse[T]]],
    options: Optional[FunctionOptions] = None,
) -> StandardCallResult[T]:
    """
    Execute one model request inside the envelope.

    Args:
        function_type: Event function type (e.g. "generate-text")
        input: Input reported in events
        model: The model serving the call
        generate_response: Performs the request; retries are its responsibility
        options: Per-call options

    Returns:
        StandardCallResult with value, raw response, usage and metadata

    Raises:
        AbortError: If the call was aborted
        Exception: Whatever `generate_response` raised
    """
    call = create_model_call(function_type, input, model, options)
    call_options = call.start()

    try:
        response = await generate_response(call_options)
    except (Exception, asyncio.CancelledError) as error:
        raised = call.fail(error)
        if raised is error:
            raise
        raise raised from error

    call.succeed(
        ModelCallSuccessResult(
            value=response.extracted_value,
            usage=response.usage,
            raw_response=response.raw_response,
        )
    )

    return StandardCallResult(
        value=response.extracted_value,
        raw_response=response.raw_response,
        usage=response.usage,
        metadata=create_model_call_metadata(call, model, response.usage),
    )
