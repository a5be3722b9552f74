from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, List, Optional

from .run import AbortSignal, RunContext


@dataclass
class FunctionOptions:
    """
    Per-call options accepted by every instrumented function.

    Attributes:
        function_id: Optional identifier reported in events
        logging: Function logging level override for this call
        observers: Call-scoped observers
        run: Run context (correlation ids, abort signal, error handler)
        parent_call_id: Call id of the enclosing instrumented call
        registry: Observer registry to use instead of the default one
    """
    function_id: Optional[str] = None
    logging: Optional[str] = None
    observers: List[Any] = field(default_factory=list)
    run: Optional[RunContext] = None
    parent_call_id: Optional[str] = None
    registry: Optional[Any] = None

    @property
    def abort_signal(self) -> Optional[AbortSignal]:
        return self.run.abort_signal if self.run is not None else None

    def with_(self, **changes: Any) -> "FunctionOptions":
        return replace(self, **changes)


@dataclass
class FunctionCallOptions(FunctionOptions):
    """
    Options handed to the wrapped operation of an instrumented call.

    `call_id` identifies the running call; `parent_call_id` is set to the same
    value so that instrumented calls made with these options become children.
    """
    call_id: str = ""
    function_type: str = ""
