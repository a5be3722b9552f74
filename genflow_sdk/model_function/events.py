"""Model call events and metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.events import FunctionFinishedEvent, FunctionStartedEvent, SuccessResult


@dataclass(frozen=True)
class ModelInformation:
    """Identifies the model that served a call."""
    provider: str
    model_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"provider": self.provider, "model_name": self.model_name}


@dataclass(frozen=True)
class ModelCallStartedEvent(FunctionStartedEvent):
    """Started event of a model call."""
    model: Optional[ModelInformation] = None
    settings: Any = None


@dataclass(frozen=True)
class ModelCallFinishedEvent(FunctionFinishedEvent):
    """Finished event of a model call."""
    model: Optional[ModelInformation] = None
    settings: Any = None


@dataclass(frozen=True)
class ModelCallSuccessResult(SuccessResult):
    """Success result of a model call, with provider usage and raw response."""
    usage: Any = None
    raw_response: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "usage": self.usage}


@dataclass
class ModelCallMetadata:
    """Call record returned alongside a model call's value."""
    model: ModelInformation
    call_id: str
    start_timestamp: datetime
    finish_timestamp: Optional[datetime] = None
    duration_in_ms: Optional[int] = None
    run_id: Optional[str] = None
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    function_id: Optional[str] = None
    usage: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)
