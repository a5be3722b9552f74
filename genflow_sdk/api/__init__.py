"""HTTP transport helpers for provider model implementations."""

from .configuration import ApiConfiguration
from .http import (
    ResponseHandlerContext,
    create_audio_bytes_response_handler,
    create_event_source_response_handler,
    create_json_error_response_handler,
    create_json_response_handler,
    create_status_code_error_response_handler,
    create_text_response_handler,
    post_json_to_api,
    post_to_api,
)

__all__ = [
    "ApiConfiguration",
    "ResponseHandlerContext",
    "create_audio_bytes_response_handler",
    "create_event_source_response_handler",
    "create_json_error_response_handler",
    "create_json_response_handler",
    "create_status_code_error_response_handler",
    "create_text_response_handler",
    "post_json_to_api",
    "post_to_api",
]
