from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterable, Optional, Union

from ..core.options import FunctionCallOptions, FunctionOptions
from ..streaming.async_queue import AsyncQueue
from ..streaming.delta import DeltaValue
from .events import ModelCallMetadata
from .execute_standard_call import StandardCallResponse, execute_standard_call
from .execute_stream_call import execute_stream_call
from .model import SpeechGenerationModel, StreamingSpeechGenerationModel


@dataclass
class GenerateSpeechResponse:
    audio: bytes
    raw_response: Any
    metadata: ModelCallMetadata


@dataclass
class StreamSpeechResponse:
    audio_stream: AsyncIterable[bytes]
    metadata: ModelCallMetadata


async def generate_speech(
    model: SpeechGenerationModel,
    text: str,
    options: Optional[FunctionOptions] = None,
    full_response: bool = False,
) -> Union[bytes, GenerateSpeechResponse]:
    """Synthesize speech for `text` and return the audio bytes."""

    async def generate_response(call_options: FunctionCallOptions) -> StandardCallResponse[bytes]:
        response = await model.do_generate_speech_standard(text, call_options)
        return StandardCallResponse(
            raw_response=response.raw_response,
            extracted_value=response.audio,
            usage=response.usage,
        )

    result = await execute_standard_call("generate-speech", text, model, generate_response, options)

    if full_response:
        return GenerateSpeechResponse(audio=result.value, raw_response=result.raw_response, metadata=result.metadata)
    return result.value


async def stream_speech(
    model: StreamingSpeechGenerationModel,
    text: Union[str, AsyncIterable[str]],
    options: Optional[FunctionOptions] = None,
    full_response: bool = False,
) -> Union[AsyncIterable[bytes], StreamSpeechResponse]:
    """
    Synthesize speech while text arrives.

    `text` may be a complete string or an async iterable of text pieces.
    """
    if isinstance(text, str):
        text_stream: AsyncQueue[str] = AsyncQueue()
        text_stream.push(text)
        text_stream.close()
    else:
        text_stream = text

    def process_delta(delta: DeltaValue[bytes]) -> Optional[bytes]:
        return delta.delta_value

    async def start_stream(call_options: FunctionCallOptions):
        return await model.do_generate_speech_stream_duplex(text_stream, call_options)

    result = await execute_stream_call(
        "stream-speech",
        text if isinstance(text, str) else None,
        model,
        start_stream=start_stream,
        process_delta=process_delta,
        options=options,
    )

    if full_response:
        return StreamSpeechResponse(audio_stream=result.value, metadata=result.metadata)
    return result.value
