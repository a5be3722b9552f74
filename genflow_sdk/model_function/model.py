"""
Model base class and capability interfaces.

A concrete provider model subclasses Model together with the capability
interfaces it supports. The model functions (generate_text, stream_object,
...) only depend on these interfaces; request building and response parsing
stay inside the provider implementation.

Model implementations should NOT contain:
- Event emission (the call executors do that)
- Retry or throttling logic outside call_with_retry_and_throttle
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any, AsyncIterable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.options import FunctionCallOptions
from ..core.schema import Schema
from ..streaming.delta import Delta
from ..streaming.partial_json import parse_partial_json
from .events import ModelInformation

# settings that never appear in events
PRIVATE_SETTINGS = {"api_key", "api_configuration", "client", "observers"}


class ModelResponse(BaseModel):
    """Common shape of standard (non-streaming) model responses."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    raw_response: Any = Field(None, description="Provider response as received")
    usage: Optional[Dict[str, Any]] = Field(None, description="Provider usage data")


class TextGenerationModelResponse(ModelResponse):
    texts: List[str]


class ObjectGenerationModelResponse(ModelResponse):
    value: Any = None
    value_text: Optional[str] = None


class EmbeddingModelResponse(ModelResponse):
    embeddings: List[List[float]]


class ImageGenerationModelResponse(ModelResponse):
    base64_images: List[str]


class SpeechGenerationModelResponse(ModelResponse):
    audio: bytes


class Model(ABC):
    """
    Base class for provider models.

    Attributes:
        settings: Model settings (model name, sampling parameters, api configuration)
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        self.settings: Dict[str, Any] = dict(settings or {})

    @property
    @abstractmethod
    def provider(self) -> str:
        """Provider name, e.g. "openai"."""
        pass

    @property
    def model_name(self) -> Optional[str]:
        return self.settings.get("model")

    @property
    def model_information(self) -> ModelInformation:
        return ModelInformation(provider=self.provider, model_name=self.model_name)

    @property
    def settings_for_event(self) -> Dict[str, Any]:
        """Settings safe to report in events."""
        return {key: value for key, value in self.settings.items() if key not in PRIVATE_SETTINGS}

    def with_settings(self, **settings: Any) -> "Model":
        """Copy of this model with `settings` merged into its settings."""
        model = copy.copy(self)
        model.settings = {**self.settings, **settings}
        return model

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self.provider!r}, model_name={self.model_name!r})"


class TextGenerationModel(Model):
    @abstractmethod
    async def do_generate_texts(self, prompt: Any, options: FunctionCallOptions) -> TextGenerationModelResponse:
        pass


class TextStreamingModel(TextGenerationModel):
    @abstractmethod
    async def do_stream_text(self, prompt: Any, options: FunctionCallOptions) -> AsyncIterable[Delta[Any]]:
        """Start a streaming request and return its deltas."""
        pass

    @abstractmethod
    def extract_text_delta(self, delta: Any) -> Optional[str]:
        """Text carried by one delta, or None."""
        pass


class ObjectGenerationModel(Model):
    @abstractmethod
    async def do_generate_object(
        self, schema: Schema[Any], prompt: Any, options: FunctionCallOptions
    ) -> ObjectGenerationModelResponse:
        pass


class ObjectStreamingModel(ObjectGenerationModel):
    @abstractmethod
    async def do_stream_object(
        self, schema: Schema[Any], prompt: Any, options: FunctionCallOptions
    ) -> AsyncIterable[Delta[Any]]:
        pass

    @abstractmethod
    def extract_object_text_delta(self, delta: Any) -> Optional[str]:
        """Piece of the object's JSON text carried by one delta, or None."""
        pass

    def parse_accumulated_object_text(self, accumulated_text: str) -> Any:
        """Parse the JSON text received so far into a partial object."""
        return parse_partial_json(accumulated_text)


class EmbeddingModel(Model):
    # None means no limit
    max_values_per_call: Optional[int] = None
    is_parallelizable: bool = True

    @abstractmethod
    async def do_embed_values(self, values: List[Any], options: FunctionCallOptions) -> EmbeddingModelResponse:
        pass


class ImageGenerationModel(Model):
    @abstractmethod
    async def do_generate_images(self, prompt: Any, options: FunctionCallOptions) -> ImageGenerationModelResponse:
        pass


class SpeechGenerationModel(Model):
    @abstractmethod
    async def do_generate_speech_standard(
        self, text: str, options: FunctionCallOptions
    ) -> SpeechGenerationModelResponse:
        pass


class StreamingSpeechGenerationModel(Model):
    @abstractmethod
    async def do_generate_speech_stream_duplex(
        self, text_stream: AsyncIterable[str], options: FunctionCallOptions
    ) -> AsyncIterable[Delta[bytes]]:
        """Send text as it arrives and return the audio deltas."""
        pass
