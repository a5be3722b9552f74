"""
Function observers and the observer registry.

An observer is either an object with an `on_function_event(event)` method or a
plain callable taking the event. Observers are registered at three scopes:
process (FunctionObserverRegistry), run (RunContext.function_observer) and
call (FunctionOptions.observers).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, Protocol, Sequence, Union, runtime_checkable

from .events import FunctionEvent
from .logging import FUNCTION_LOGGING_LEVELS

logger = logging.getLogger(__name__)


@runtime_checkable
class FunctionObserver(Protocol):
    """Protocol for function event observers."""

    def on_function_event(self, event: FunctionEvent) -> None:
        """Receive a started or finished event."""
        ...


ObserverLike = Union[FunctionObserver, Callable[[FunctionEvent], None]]


def _dispatch(observer: ObserverLike, event: FunctionEvent) -> None:
    if hasattr(observer, "on_function_event"):
        observer.on_function_event(event)
    else:
        observer(event)


class FunctionEventSource:
    """
    Fans an event out to a fixed list of observers.

    Observer failures never propagate: they are routed to the error handler,
    or logged when there is none.
    """

    def __init__(
        self,
        observers: Sequence[ObserverLike],
        error_handler: Optional[Callable[[BaseException], None]] = None,
    ):
        self.observers = list(observers)
        self.error_handler = error_handler

    def notify(self, event: FunctionEvent) -> None:
        for observer in self.observers:
            try:
                _dispatch(observer, event)
            except Exception as error:  # noqa: BLE001
                self._handle_error(error)

    def _handle_error(self, error: BaseException) -> None:
        if self.error_handler is None:
            logger.warning(f"Function observer failed: {type(error).__name__}: {error}")
            return
        try:
            self.error_handler(error)
        except Exception as handler_error:  # noqa: BLE001
            logger.warning(
                f"Error handler failed while handling observer error: "
                f"{type(handler_error).__name__}: {handler_error}"
            )


class FunctionObserverRegistry:
    """
    Process-scoped observers and default function logging level.

    Create one at process start and pass it to calls through FunctionOptions,
    or rely on the default registry. Updates go through set_observers /
    add_observer / set_logging; last writer wins.
    """

    def __init__(
        self,
        observers: Optional[Iterable[ObserverLike]] = None,
        logging: str = "off",
        error_handler: Optional[Callable[[BaseException], None]] = None,
    ):
        self._observers: List[ObserverLike] = list(observers or [])
        self._logging = "off"
        self.set_logging(logging)
        self.error_handler = error_handler

    @classmethod
    def from_settings(cls, settings: Any) -> "FunctionObserverRegistry":
        return cls(logging=settings.function_logging)

    @property
    def observers(self) -> List[ObserverLike]:
        return list(self._observers)

    @property
    def logging(self) -> str:
        return self._logging

    def set_observers(self, observers: Iterable[ObserverLike]) -> None:
        self._observers = list(observers)

    def add_observer(self, observer: ObserverLike) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: ObserverLike) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def set_logging(self, level: str) -> None:
        if level not in FUNCTION_LOGGING_LEVELS:
            raise ValueError(f"Invalid function logging level: {level}")
        self._logging = level


_default_registry: Optional[FunctionObserverRegistry] = None


def get_default_registry() -> FunctionObserverRegistry:
    """Get the default registry, creating it from the environment on first use."""
    global _default_registry
    if _default_registry is None:
        from ..config.settings import load_settings

        _default_registry = FunctionObserverRegistry.from_settings(load_settings())
    return _default_registry


def set_default_registry(registry: Optional[FunctionObserverRegistry]) -> None:
    """Replace the default registry (None recreates it lazily)."""
    global _default_registry
    _default_registry = registry


def set_global_function_observers(observers: Iterable[ObserverLike]) -> None:
    get_default_registry().set_observers(observers)


def get_global_function_observers() -> List[ObserverLike]:
    return get_default_registry().observers


def set_global_function_logging(level: str) -> None:
    get_default_registry().set_logging(level)


def get_global_function_logging() -> str:
    return get_default_registry().logging
