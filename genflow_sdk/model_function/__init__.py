"""Model functions and the call executors behind them.

This layer handles:
- Model capability interfaces implemented by providers
- Standard and streaming call execution inside the function-call envelope
- Text, object, embedding, image and speech generation
"""

from .embed import EmbedManyResponse, EmbedResponse, embed, embed_many
from .events import ModelCallFinishedEvent, ModelCallMetadata, ModelCallStartedEvent, ModelCallSuccessResult, ModelInformation
from .execute_standard_call import StandardCallResponse, StandardCallResult, execute_standard_call
from .execute_stream_call import StreamCallResult, execute_stream_call
from .generate_image import GenerateImageResponse, generate_image
from .generate_object import GenerateObjectResponse, generate_object
from .generate_speech import GenerateSpeechResponse, StreamSpeechResponse, generate_speech, stream_speech
from .generate_text import GenerateTextResponse, generate_text
from .model import (
    EmbeddingModel,
    EmbeddingModelResponse,
    ImageGenerationModel,
    ImageGenerationModelResponse,
    Model,
    ModelResponse,
    ObjectGenerationModel,
    ObjectGenerationModelResponse,
    ObjectStreamingModel,
    SpeechGenerationModel,
    SpeechGenerationModelResponse,
    StreamingSpeechGenerationModel,
    TextGenerationModel,
    TextGenerationModelResponse,
    TextStreamingModel,
)
from .stream_object import ObjectStreamPart, StreamObjectResponse, stream_object
from .stream_text import StreamTextResponse, stream_text

__all__ = [
    "EmbedManyResponse",
    "EmbedResponse",
    "embed",
    "embed_many",
    "ModelCallFinishedEvent",
    "ModelCallMetadata",
    "ModelCallStartedEvent",
    "ModelCallSuccessResult",
    "ModelInformation",
    "StandardCallResponse",
    "StandardCallResult",
    "execute_standard_call",
    "StreamCallResult",
    "execute_stream_call",
    "GenerateImageResponse",
    "generate_image",
    "GenerateObjectResponse",
    "generate_object",
    "GenerateSpeechResponse",
    "StreamSpeechResponse",
    "generate_speech",
    "stream_speech",
    "GenerateTextResponse",
    "generate_text",
    "EmbeddingModel",
    "EmbeddingModelResponse",
    "ImageGenerationModel",
    "ImageGenerationModelResponse",
    "Model",
    "ModelResponse",
    "ObjectGenerationModel",
    "ObjectGenerationModelResponse",
    "ObjectStreamingModel",
    "SpeechGenerationModel",
    "SpeechGenerationModelResponse",
    "StreamingSpeechGenerationModel",
    "TextGenerationModel",
    "TextGenerationModelResponse",
    "TextStreamingModel",
    "ObjectStreamPart",
    "StreamObjectResponse",
    "stream_object",
    "StreamTextResponse",
    "stream_text",
]
