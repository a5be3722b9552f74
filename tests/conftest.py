"""Shared pytest fixtures for Genflow SDK tests."""

import pytest
from typing import Any, List

from genflow_sdk.core.observers import FunctionObserverRegistry, set_default_registry
from genflow_sdk.core.run import AbortController, RunContext
from tests.helpers.fake_models import FakeEmbeddingModel, FakeObjectModel, FakeTextModel


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without I/O")
    config.addinivalue_line("markers", "integration: tests that exercise the full pipeline")
    config.addinivalue_line("markers", "slow: tests that sleep")


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "tests/unit/" in item.nodeid.replace("\\", "/"):
            item.add_marker(pytest.mark.unit)


class RecordingObserver:
    """Observer that keeps every event it receives."""

    def __init__(self):
        self.events: List[Any] = []

    def on_function_event(self, event):
        self.events.append(event)

    @property
    def event_types(self) -> List[str]:
        return [event.event_type for event in self.events]

    def finished(self) -> List[Any]:
        return [event for event in self.events if event.event_type == "finished"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep GENFLOW_* variables from the developer's shell out of tests."""
    for name in (
        "GENFLOW_FUNCTION_LOGGING",
        "GENFLOW_MAX_TRIES",
        "GENFLOW_INITIAL_DELAY_MS",
        "GENFLOW_BACKOFF_FACTOR",
        "GENFLOW_MAX_CONCURRENCY",
        "GENFLOW_HTTP_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def registry():
    """A fresh default observer registry for every test."""
    registry = FunctionObserverRegistry()
    set_default_registry(registry)
    yield registry
    set_default_registry(None)


@pytest.fixture
def recording_observer():
    return RecordingObserver()


@pytest.fixture
def abort_controller():
    return AbortController()


@pytest.fixture
def errors():
    """List that the run_context error handler appends to."""
    return []


@pytest.fixture
def run_context(abort_controller, errors):
    return RunContext(
        run_id="run-test",
        session_id="session-test",
        user_id="user-test",
        abort_signal=abort_controller.signal,
        error_handler=errors.append,
    )


@pytest.fixture
def text_model():
    return FakeTextModel()


@pytest.fixture
def object_model():
    return FakeObjectModel()


@pytest.fixture
def embedding_model():
    return FakeEmbeddingModel()
