"""In-memory model implementations for tests."""

import base64
from typing import Any, AsyncIterable, Dict, List, Optional

from genflow_sdk.core.options import FunctionCallOptions
from genflow_sdk.core.schema import Schema
from genflow_sdk.model_function.model import (
    EmbeddingModel,
    EmbeddingModelResponse,
    ImageGenerationModel,
    ImageGenerationModelResponse,
    ObjectGenerationModelResponse,
    ObjectStreamingModel,
    SpeechGenerationModel,
    SpeechGenerationModelResponse,
    StreamingSpeechGenerationModel,
    TextGenerationModelResponse,
    TextStreamingModel,
)
from genflow_sdk.streaming.async_queue import AsyncQueue
from genflow_sdk.streaming.delta import DeltaValue

from .streaming_mocks import delta_queue


class FakeTextModel(TextStreamingModel):
    """Text model whose stream yields {"text": chunk} deltas."""

    def __init__(self, texts: Optional[List[str]] = None, chunks: Optional[List[str]] = None,
                 settings: Optional[Dict[str, Any]] = None, error: Optional[BaseException] = None):
        super().__init__(settings or {"model": "fake-text-1", "temperature": 0.2, "api_key": "secret"})
        self.texts = texts or ["Hello"]
        self.chunks = chunks or ["Hel", "lo"]
        self.error = error
        self.calls: List[FunctionCallOptions] = []

    @property
    def provider(self) -> str:
        return "fake"

    async def do_generate_texts(self, prompt: Any, options: FunctionCallOptions) -> TextGenerationModelResponse:
        self.calls.append(options)
        if self.error is not None:
            raise self.error
        return TextGenerationModelResponse(
            texts=self.texts,
            raw_response={"choices": self.texts},
            usage={"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5},
        )

    async def do_stream_text(self, prompt: Any, options: FunctionCallOptions) -> AsyncIterable[Any]:
        self.calls.append(options)
        if self.error is not None:
            raise self.error
        return delta_queue([{"text": chunk} for chunk in self.chunks])

    def extract_text_delta(self, delta: Any) -> Optional[str]:
        return delta.get("text")


class FakeObjectModel(ObjectStreamingModel):
    """Object model streaming {"json": piece} deltas and returning a fixed object."""

    def __init__(self, pieces: Optional[List[str]] = None, value: Any = None, value_text: Optional[str] = None):
        super().__init__({"model": "fake-object-1"})
        self.pieces = pieces if pieces is not None else ['{"a":1', '}']
        self.value = value
        self.value_text = value_text

    @property
    def provider(self) -> str:
        return "fake"

    async def do_generate_object(self, schema: Schema[Any], prompt: Any,
                                 options: FunctionCallOptions) -> ObjectGenerationModelResponse:
        return ObjectGenerationModelResponse(
            value=self.value,
            value_text=self.value_text,
            raw_response={"object": self.value_text},
        )

    async def do_stream_object(self, schema: Schema[Any], prompt: Any,
                               options: FunctionCallOptions) -> AsyncIterable[Any]:
        return delta_queue([{"json": piece} for piece in self.pieces])

    def extract_object_text_delta(self, delta: Any) -> Optional[str]:
        return delta.get("json")


class FakeEmbeddingModel(EmbeddingModel):
    """Embeds a string as [len(value), index-in-call]."""

    def __init__(self, max_values_per_call: Optional[int] = None, is_parallelizable: bool = True):
        super().__init__({"model": "fake-embed-1"})
        self.max_values_per_call = max_values_per_call
        self.is_parallelizable = is_parallelizable
        self.batches: List[List[Any]] = []

    @property
    def provider(self) -> str:
        return "fake"

    async def do_embed_values(self, values: List[Any], options: FunctionCallOptions) -> EmbeddingModelResponse:
        self.batches.append(list(values))
        return EmbeddingModelResponse(
            embeddings=[[float(len(value)), float(index)] for index, value in enumerate(values)],
            raw_response={"count": len(values)},
            usage={"total_tokens": len(values)},
        )


class FakeImageModel(ImageGenerationModel):
    def __init__(self, images: List[bytes]):
        super().__init__({"model": "fake-image-1"})
        self.images = images

    @property
    def provider(self) -> str:
        return "fake"

    async def do_generate_images(self, prompt: Any, options: FunctionCallOptions) -> ImageGenerationModelResponse:
        return ImageGenerationModelResponse(
            base64_images=[base64.b64encode(image).decode("ascii") for image in self.images],
            raw_response={"created": 1},
        )


class FakeSpeechModel(SpeechGenerationModel, StreamingSpeechGenerationModel):
    """Returns the UTF-8 bytes of the text as "audio"."""

    def __init__(self):
        super().__init__({"model": "fake-speech-1", "voice": "calm"})
        self.received_text: List[str] = []

    @property
    def provider(self) -> str:
        return "fake"

    async def do_generate_speech_standard(self, text: str, options: FunctionCallOptions) -> SpeechGenerationModelResponse:
        return SpeechGenerationModelResponse(audio=text.encode("utf-8"), raw_response=None)

    async def do_generate_speech_stream_duplex(self, text_stream: AsyncIterable[str],
                                               options: FunctionCallOptions) -> AsyncIterable[Any]:
        queue: AsyncQueue = AsyncQueue()
        async for text in text_stream:
            self.received_text.append(text)
            queue.push(DeltaValue(text.encode("utf-8")))
        queue.close()
        return queue
