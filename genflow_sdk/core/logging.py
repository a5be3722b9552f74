"""
Structured logging for function calls.

FunctionCallLogger is an observer that writes started/finished events to the
standard logging module, using the same `[key=value ...] message` layout for
every line so that call trees can be grepped by call_id or run_id.
"""

import json
import logging
from typing import Any, List, Literal, Optional

from .events import ErrorResult, FunctionEvent, FunctionFinishedEvent

FunctionLogging = Literal["off", "basic-text", "detailed-object", "detailed-json"]

FUNCTION_LOGGING_LEVELS = ("off", "basic-text", "detailed-object", "detailed-json")

FUNCTION_CALL_LOGGER_NAME = "genflow_sdk.function_calls"


class FunctionCallLogger:
    """Observer that logs function events at a given detail level."""

    def __init__(self, level: str = "basic-text", logger_name: str = FUNCTION_CALL_LOGGER_NAME):
        """
        Initialize the logger observer.

        Args:
            level: One of "basic-text", "detailed-object", "detailed-json"
            logger_name: Name of the underlying logging.Logger
        """
        if level not in FUNCTION_LOGGING_LEVELS or level == "off":
            raise ValueError(f"Invalid function logging level: {level}")
        self.level = level
        self.logger = logging.getLogger(logger_name)

    def _format_message(self, message: str, **kwargs: Any) -> str:
        """Format message with structured fields."""
        fields = []
        for key, value in kwargs.items():
            if value is not None:
                fields.append(f"{key}={value}")
        return f"[{' '.join(fields)}] {message}"

    def on_function_event(self, event: FunctionEvent) -> None:
        if self.level == "basic-text":
            self._log_basic_text(event)
        elif self.level == "detailed-object":
            self.logger.info(
                self._format_message(f"{event.function_type} {event.event_type}", call_id=event.call_id),
                extra={"function_event": event},
            )
        else:
            self.logger.info(json.dumps(event.to_dict(), default=str))

    def _log_basic_text(self, event: FunctionEvent) -> None:
        common = dict(
            call_id=event.call_id,
            parent_call_id=event.parent_call_id,
            function_id=event.function_id,
            run_id=event.run_id,
        )

        if not isinstance(event, FunctionFinishedEvent):
            self.logger.info(self._format_message(f"{event.function_type} started", **common))
            return

        result = event.result
        if isinstance(result, ErrorResult):
            self.logger.error(
                self._format_message(
                    f"{event.function_type} finished",
                    status=result.status,
                    duration_ms=event.duration_in_ms,
                    error_type=type(result.error).__name__,
                    error_msg=str(result.error),
                    **common,
                )
            )
        else:
            self.logger.info(
                self._format_message(
                    f"{event.function_type} finished",
                    status=result.status,
                    duration_ms=event.duration_in_ms,
                    **common,
                )
            )


def get_function_call_logger(level: Optional[str]) -> List[FunctionCallLogger]:
    """Return the logger observers for a function logging level."""
    if level is None or level == "off":
        return []
    return [FunctionCallLogger(level)]
