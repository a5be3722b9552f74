"""Unit tests for generate_text and stream_text."""

import pytest

from genflow_sdk.core.options import FunctionOptions
from genflow_sdk.model_function.generate_text import GenerateTextResponse, generate_text
from genflow_sdk.model_function.stream_text import stream_text
from tests.helpers.fake_models import FakeTextModel
from tests.helpers.mock_exceptions import bad_request_error
from tests.helpers.streaming_mocks import collect


class TestGenerateText:
    """Test generate_text."""

    @pytest.mark.asyncio
    async def test_returns_first_text(self):
        model = FakeTextModel(texts=["first", "second"])
        assert await generate_text(model, "Say something") == "first"

    @pytest.mark.asyncio
    async def test_full_response(self, text_model, recording_observer):
        response = await generate_text(
            text_model, "Say hello", FunctionOptions(observers=[recording_observer]), full_response=True
        )

        assert isinstance(response, GenerateTextResponse)
        assert response.text == "Hello"
        assert response.texts == ["Hello"]
        assert response.raw_response == {"choices": ["Hello"]}
        assert response.metadata.usage["total_tokens"] == 5

        started, finished = recording_observer.events
        assert started.function_type == "generate-text"
        assert started.input == "Say hello"
        assert finished.result.value == ["Hello"]

    @pytest.mark.asyncio
    async def test_model_error_propagates(self, recording_observer):
        model = FakeTextModel(error=bad_request_error())

        with pytest.raises(Exception) as exc_info:
            await generate_text(model, "x", FunctionOptions(observers=[recording_observer]))

        assert exc_info.value.status_code == 400
        assert recording_observer.finished()[0].result.status == "error"

    @pytest.mark.asyncio
    async def test_with_settings_returns_copy(self, text_model):
        hotter = text_model.with_settings(temperature=0.9)

        assert hotter.settings["temperature"] == 0.9
        assert text_model.settings["temperature"] == 0.2
        assert hotter.model_name == "fake-text-1"


class TestStreamText:
    """Test stream_text."""

    @pytest.mark.asyncio
    async def test_yields_text_deltas(self, text_model):
        stream = await stream_text(text_model, "Say hello")
        assert await collect(stream) == ["Hel", "lo"]

    @pytest.mark.asyncio
    async def test_text_future_resolves_to_full_text(self, recording_observer):
        model = FakeTextModel(chunks=["A", "", "B", "C"])

        response = await stream_text(
            model, "Spell", FunctionOptions(observers=[recording_observer]), full_response=True
        )

        assert await collect(response.text_stream) == ["A", "B", "C"]
        assert await response.text_future == "ABC"
        assert recording_observer.events[0].function_type == "stream-text"

    @pytest.mark.asyncio
    async def test_start_error_propagates(self):
        model = FakeTextModel(error=bad_request_error())

        with pytest.raises(Exception) as exc_info:
            await stream_text(model, "x")

        assert exc_info.value.status_code == 400
