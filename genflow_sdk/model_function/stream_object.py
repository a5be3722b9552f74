"""
Streaming object generation.

The model streams the object's JSON text. After every text delta the whole
accumulated text is reparsed into a partial object, and a part is emitted
only when the partial object changed structurally. The final object is
validated once the stream has ended.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterable, Optional, TypeVar, Union

from ..core.errors import ObjectValidationError
from ..core.options import FunctionCallOptions, FunctionOptions
from ..core.schema import Schema
from ..streaming.delta import DeltaValue
from ..streaming.partial_json import is_deep_equal_data
from .events import ModelCallMetadata
from .execute_stream_call import create_completion_future, execute_stream_call
from .model import ObjectStreamingModel

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ObjectStreamPart:
    """
    One emission of an object stream.

    Attributes:
        partial_object: Object parsed from the text received so far (not validated)
        partial_text: All text received so far
        text_delta: Text received since the previous emission
    """
    partial_object: Any
    partial_text: str
    text_delta: str


@dataclass
class StreamObjectResponse:
    object_stream: AsyncIterable[ObjectStreamPart]
    object_future: "asyncio.Future[Any]"
    metadata: ModelCallMetadata


class _ObjectAccumulator:
    """Partial object state of one stream_object call."""

    def __init__(self, model: ObjectStreamingModel):
        self.model = model
        self.accumulated_text = ""
        self.accumulated_text_delta = ""
        self.latest_object: Any = None

    def process_delta(self, delta: DeltaValue[Any]) -> Optional[ObjectStreamPart]:
        text_delta = self.model.extract_object_text_delta(delta.delta_value)
        if text_delta is None:
            return None

        self.accumulated_text += text_delta
        self.accumulated_text_delta += text_delta

        current_object = self.model.parse_accumulated_object_text(self.accumulated_text)
        if is_deep_equal_data(self.latest_object, current_object):
            # the delta keeps accumulating until an emission carries it
            return None

        self.latest_object = current_object
        part = ObjectStreamPart(
            partial_object=current_object,
            partial_text=self.accumulated_text,
            text_delta=self.accumulated_text_delta,
        )
        self.accumulated_text_delta = ""
        return part

    def process_finished(self) -> ObjectStreamPart:
        return ObjectStreamPart(
            partial_object=self.latest_object,
            partial_text=self.accumulated_text,
            text_delta=self.accumulated_text_delta,
        )


async def stream_object(
    model: ObjectStreamingModel,
    schema: Schema[T],
    prompt: Any,
    options: Optional[FunctionOptions] = None,
    full_response: bool = False,
) -> Union[AsyncIterable[ObjectStreamPart], StreamObjectResponse]:
    """
    Stream partial objects while the model generates them.

    Parts are emitted when the parsed partial object changes, plus one final
    part when the stream ends. With `full_response` the returned
    StreamObjectResponse also carries `object_future`, which resolves to the
    validated final object or fails with ObjectValidationError.
    """
    accumulator = _ObjectAccumulator(model)
    object_future = create_completion_future(observed=full_response)

    def on_done(error: Optional[BaseException] = None) -> None:
        if object_future.done():
            return
        if error is not None:
            object_future.set_exception(error)
            return

        result = schema.validate(accumulator.latest_object)
        if result.success:
            object_future.set_result(result.value)
        else:
            logger.debug(f"Streamed object failed validation: {result.error}")
            object_future.set_exception(
                ObjectValidationError(
                    value_text=accumulator.accumulated_text,
                    value=accumulator.latest_object,
                    cause=result.error,
                )
            )

    async def start_stream(call_options: FunctionCallOptions):
        return await model.do_stream_object(schema, prompt, call_options)

    result = await execute_stream_call(
        "stream-object",
        prompt,
        model,
        start_stream=start_stream,
        process_delta=accumulator.process_delta,
        process_finished=accumulator.process_finished,
        on_done=on_done,
        options=options,
    )

    if full_response:
        return StreamObjectResponse(
            object_stream=result.value,
            object_future=object_future,
            metadata=result.metadata,
        )
    return result.value
