"""
Genflow SDK - Instrumented calls to generative-model services.

This package wraps heterogeneous provider APIs (text, objects, embeddings,
images, speech) in one call contract:
- Retry and throttling around network calls
- Cancellation through abort signals
- Duration and usage accounting
- Hierarchical started/finished events for observers and logging
- Incremental consumption of streamed output (text deltas, partial objects)
"""

__version__ = "0.1.0"

from .api import ApiConfiguration, post_json_to_api
from .config import GenflowSettings, load_settings
from .core import (
    AbortController,
    AbortError,
    AbortSignal,
    ApiCallError,
    FunctionCallOptions,
    FunctionEvent,
    FunctionFinishedEvent,
    FunctionObserverRegistry,
    FunctionOptions,
    FunctionStartedEvent,
    GenflowError,
    JsonSchema,
    ObjectValidationError,
    PydanticSchema,
    RetryError,
    RunContext,
    UncheckedSchema,
    execute_function,
    execute_function_call,
    set_global_function_logging,
    set_global_function_observers,
)
from .model_function import (
    ObjectStreamPart,
    embed,
    embed_many,
    execute_standard_call,
    execute_stream_call,
    generate_image,
    generate_object,
    generate_speech,
    generate_text,
    stream_object,
    stream_speech,
    stream_text,
)
from .reliability import (
    call_with_retry_and_throttle,
    retry_never,
    retry_with_exponential_backoff,
    throttle_max_concurrency,
    throttle_off,
    throttle_rate_limit,
)
from .retriever import Retriever, retrieve
from .streaming import AsyncQueue, parse_event_source_stream

__all__ = [
    # Model functions
    "generate_text",
    "stream_text",
    "generate_object",
    "stream_object",
    "ObjectStreamPart",
    "embed",
    "embed_many",
    "generate_image",
    "generate_speech",
    "stream_speech",
    "execute_function",
    "retrieve",
    "Retriever",

    # Executors
    "execute_function_call",
    "execute_standard_call",
    "execute_stream_call",

    # Options and run context
    "FunctionOptions",
    "FunctionCallOptions",
    "RunContext",
    "AbortController",
    "AbortSignal",

    # Observers
    "FunctionEvent",
    "FunctionStartedEvent",
    "FunctionFinishedEvent",
    "FunctionObserverRegistry",
    "set_global_function_observers",
    "set_global_function_logging",

    # Reliability
    "call_with_retry_and_throttle",
    "retry_never",
    "retry_with_exponential_backoff",
    "throttle_off",
    "throttle_max_concurrency",
    "throttle_rate_limit",

    # Schemas
    "JsonSchema",
    "PydanticSchema",
    "UncheckedSchema",

    # Streaming
    "AsyncQueue",
    "parse_event_source_stream",

    # HTTP
    "ApiConfiguration",
    "post_json_to_api",

    # Configuration
    "GenflowSettings",
    "load_settings",

    # Errors
    "GenflowError",
    "AbortError",
    "ApiCallError",
    "RetryError",
    "ObjectValidationError",
]
