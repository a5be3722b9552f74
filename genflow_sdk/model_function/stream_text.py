from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, AsyncIterable, List, Optional, Union

from ..core.options import FunctionCallOptions, FunctionOptions
from ..streaming.delta import DeltaValue
from .events import ModelCallMetadata
from .execute_stream_call import create_completion_future, execute_stream_call
from .model import TextStreamingModel


@dataclass
class StreamTextResponse:
    """
    Attributes:
        text_stream: Yields the text deltas as they arrive
        text_future: Resolves to the full text once the stream ends
        metadata: Call record at start time
    """
    text_stream: AsyncIterable[str]
    text_future: "asyncio.Future[str]"
    metadata: ModelCallMetadata


async def stream_text(
    model: TextStreamingModel,
    prompt: Any,
    options: Optional[FunctionOptions] = None,
    full_response: bool = False,
) -> Union[AsyncIterable[str], StreamTextResponse]:
    """Stream generated text as deltas."""
    accumulated: List[str] = []
    text_future = create_completion_future(observed=full_response)

    def process_delta(delta: DeltaValue[Any]) -> Optional[str]:
        text_delta = model.extract_text_delta(delta.delta_value)
        if not text_delta:
            return None
        accumulated.append(text_delta)
        return text_delta

    def on_done(error: Optional[BaseException] = None) -> None:
        if text_future.done():
            return
        if error is not None:
            text_future.set_exception(error)
        else:
            text_future.set_result("".join(accumulated))

    async def start_stream(call_options: FunctionCallOptions):
        return await model.do_stream_text(prompt, call_options)

    result = await execute_stream_call(
        "stream-text",
        prompt,
        model,
        start_stream=start_stream,
        process_delta=process_delta,
        on_done=on_done,
        options=options,
    )

    if full_response:
        return StreamTextResponse(text_stream=result.value, text_future=text_future, metadata=result.metadata)
    return result.value
