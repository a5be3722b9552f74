"""Core layer: the function-call envelope and what it is built from.

This layer handles:
- Error taxonomy
- Run context and abort signals
- Function events, observers and the observer registry
- Function call logging
- Schema adapters and JSON parsing
"""

from .errors import (
    AbortError,
    ApiCallError,
    GenflowError,
    IllegalStateError,
    JSONParseError,
    ObjectValidationError,
    RetryError,
    TransportError,
    TypeValidationError,
    ValidationError,
)
from .events import (
    AbortResult,
    ErrorResult,
    FunctionEvent,
    FunctionFinishedEvent,
    FunctionStartedEvent,
    SuccessResult,
)
from .execute_function import execute_function
from .execute_function_call import FunctionCall, FunctionCallState, execute_function_call
from .logging import FunctionCallLogger, FunctionLogging
from .observers import (
    FunctionEventSource,
    FunctionObserver,
    FunctionObserverRegistry,
    get_default_registry,
    get_global_function_logging,
    get_global_function_observers,
    set_default_registry,
    set_global_function_logging,
    set_global_function_observers,
)
from .options import FunctionCallOptions, FunctionOptions
from .run import AbortController, AbortSignal, RunContext, run_abortable
from .schema import JsonSchema, PydanticSchema, Schema, UncheckedSchema, ValidationResult, parse_json, safe_parse_json

__all__ = [
    "AbortError",
    "ApiCallError",
    "GenflowError",
    "IllegalStateError",
    "JSONParseError",
    "ObjectValidationError",
    "RetryError",
    "TransportError",
    "TypeValidationError",
    "ValidationError",
    "AbortResult",
    "ErrorResult",
    "FunctionEvent",
    "FunctionFinishedEvent",
    "FunctionStartedEvent",
    "SuccessResult",
    "execute_function",
    "FunctionCall",
    "FunctionCallState",
    "execute_function_call",
    "FunctionCallLogger",
    "FunctionLogging",
    "FunctionEventSource",
    "FunctionObserver",
    "FunctionObserverRegistry",
    "get_default_registry",
    "get_global_function_logging",
    "get_global_function_observers",
    "set_default_registry",
    "set_global_function_logging",
    "set_global_function_observers",
    "FunctionCallOptions",
    "FunctionOptions",
    "AbortController",
    "AbortSignal",
    "RunContext",
    "run_abortable",
    "JsonSchema",
    "PydanticSchema",
    "Schema",
    "UncheckedSchema",
    "ValidationResult",
    "parse_json",
    "safe_parse_json",
]
