"""Function event models.

Every instrumented call emits exactly one started event followed by exactly
one finished event. Events are plain notifications; the SDK never stores them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class SuccessResult:
    """The call returned a value."""
    value: Any = None
    status: str = field(default="success", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "value": self.value}


@dataclass(frozen=True)
class ErrorResult:
    """The call raised an error."""
    error: Optional[BaseException] = None
    status: str = field(default="error", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "error": self.error}


@dataclass(frozen=True)
class AbortResult:
    """The call was cancelled through the abort signal."""
    status: str = field(default="abort", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status}


FunctionResult = Union[SuccessResult, ErrorResult, AbortResult]


@dataclass(frozen=True)
class FunctionEvent:
    """Base class for function events. Carries the call record."""
    function_type: str = ""
    call_id: str = ""
    start_timestamp: Optional[datetime] = None
    parent_call_id: Optional[str] = None
    function_id: Optional[str] = None
    run_id: Optional[str] = None
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    input: Any = None
    event_type: str = field(default="", init=False)

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.start_timestamp

    def to_dict(self) -> Dict[str, Any]:
        """Shallow dictionary view with timestamps as ISO strings."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, datetime):
                value = value.isoformat()
            elif hasattr(value, "to_dict"):
                value = value.to_dict()
            data[f.name] = value
        return data


@dataclass(frozen=True)
class FunctionStartedEvent(FunctionEvent):
    """Emitted before the wrapped operation is invoked."""
    event_type: str = field(default="started", init=False)


@dataclass(frozen=True)
class FunctionFinishedEvent(FunctionEvent):
    """Emitted once the wrapped operation has an outcome."""
    finish_timestamp: Optional[datetime] = None
    duration_in_ms: int = 0
    result: FunctionResult = field(default_factory=AbortResult)
    event_type: str = field(default="finished", init=False)

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.finish_timestamp
