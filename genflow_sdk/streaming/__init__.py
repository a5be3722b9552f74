"""Streaming layer for incremental model output.

This layer handles:
- The async queue that bridges background readers to consumers
- Server-sent-events decoding
- Typed deltas parsed from event streams
- Partial JSON parsing for streamed objects
"""

from .async_queue import AsyncQueue
from .delta import DONE_SENTINEL, Delta, DeltaError, DeltaValue, parse_event_source_stream_as_async_iterable
from .event_source import EventSourceMessage, EventSourceParser, format_event_source_message, parse_event_source_stream
from .partial_json import fix_json, is_deep_equal_data, parse_partial_json

__all__ = [
    "AsyncQueue",
    "DONE_SENTINEL",
    "Delta",
    "DeltaError",
    "DeltaValue",
    "parse_event_source_stream_as_async_iterable",
    "EventSourceMessage",
    "EventSourceParser",
    "format_event_source_message",
    "parse_event_source_stream",
    "fix_json",
    "is_deep_equal_data",
    "parse_partial_json",
]
