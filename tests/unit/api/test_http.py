"""Unit tests for the httpx transport helpers."""

import json

import httpx
import pytest

from genflow_sdk.api.configuration import ApiConfiguration
from genflow_sdk.api.http import (
    create_audio_bytes_response_handler,
    create_event_source_response_handler,
    create_json_error_response_handler,
    create_json_response_handler,
    create_text_response_handler,
    post_json_to_api,
)
from genflow_sdk.config.settings import GenflowSettings
from genflow_sdk.core.errors import AbortError, ApiCallError
from genflow_sdk.core.schema import JsonSchema, UncheckedSchema
from genflow_sdk.reliability.retry import ExponentialBackoffRetry
from genflow_sdk.streaming.delta import DeltaError, DeltaValue
from tests.helpers.streaming_mocks import collect, sse_body

URL = "https://api.test/v1/generate"

ERROR_SCHEMA = JsonSchema({
    "type": "object",
    "properties": {"error": {"type": "object", "properties": {"message": {"type": "string"}}}},
    "required": ["error"],
})


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestPostJsonToApi:
    """Test post_json_to_api with the built-in response handlers."""

    @pytest.mark.asyncio
    async def test_sends_json_and_parses_response(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            seen["headers"] = request.headers
            return httpx.Response(200, json={"text": "hi"})

        async with mock_client(handler) as client:
            result = await post_json_to_api(
                URL, {"prompt": "hello"}, create_json_response_handler(),
                headers={"Authorization": "Bearer k", "X-Skip": None}, client=client,
            )

        assert result == {"text": "hi"}
        assert seen["body"] == {"prompt": "hello"}
        assert seen["headers"]["content-type"] == "application/json"
        assert seen["headers"]["authorization"] == "Bearer k"
        assert "x-skip" not in seen["headers"]

    @pytest.mark.asyncio
    async def test_invalid_json_response(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        async with mock_client(handler) as client:
            with pytest.raises(ApiCallError) as exc_info:
                await post_json_to_api(URL, {}, create_json_response_handler(), client=client)

        assert str(exc_info.value) == "Invalid JSON response"
        assert exc_info.value.is_retryable is False

    @pytest.mark.asyncio
    async def test_text_and_audio_handlers(self):
        def handler(request):
            return httpx.Response(200, content=b"RIFF....WAVE")

        async with mock_client(handler) as client:
            assert await post_json_to_api(URL, {}, create_text_response_handler(), client=client) == "RIFF....WAVE"
            assert await post_json_to_api(URL, {}, create_audio_bytes_response_handler(), client=client) == b"RIFF....WAVE"

    @pytest.mark.asyncio
    async def test_status_code_error(self):
        def handler(request):
            return httpx.Response(503, text="busy", headers={"retry-after": "4"})

        async with mock_client(handler) as client:
            with pytest.raises(ApiCallError) as exc_info:
                await post_json_to_api(URL, {"prompt": "x"}, create_json_response_handler(), client=client)

        error = exc_info.value
        assert error.status_code == 503
        assert error.is_retryable
        assert error.retry_after == 4.0
        assert error.response_body == "busy"
        assert error.request_body == {"prompt": "x"}
        assert error.url == URL

    @pytest.mark.asyncio
    async def test_json_error_handler(self):
        def handler(request):
            return httpx.Response(400, json={"error": {"message": "prompt too long"}})

        failed = create_json_error_response_handler(ERROR_SCHEMA, lambda data: data["error"]["message"])

        async with mock_client(handler) as client:
            with pytest.raises(ApiCallError) as exc_info:
                await post_json_to_api(
                    URL, {}, create_json_response_handler(), failed_response_handler=failed, client=client
                )

        assert str(exc_info.value) == "prompt too long"
        assert exc_info.value.data == {"error": {"message": "prompt too long"}}
        assert not exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_json_error_handler_retry_override(self):
        def handler(request):
            return httpx.Response(400, json={"error": {"message": "overloaded, try again"}})

        failed = create_json_error_response_handler(
            ERROR_SCHEMA,
            lambda data: data["error"]["message"],
            is_retryable=lambda response, data: "try again" in data["error"]["message"],
        )

        async with mock_client(handler) as client:
            with pytest.raises(ApiCallError) as exc_info:
                await post_json_to_api(
                    URL, {}, create_json_response_handler(), failed_response_handler=failed, client=client
                )

        assert exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_json_error_handler_with_unexpected_body(self):
        def handler(request):
            return httpx.Response(502, text="Bad gateway page")

        failed = create_json_error_response_handler(ERROR_SCHEMA, lambda data: data["error"]["message"])

        async with mock_client(handler) as client:
            with pytest.raises(ApiCallError) as exc_info:
                await post_json_to_api(
                    URL, {}, create_json_response_handler(), failed_response_handler=failed, client=client
                )

        assert str(exc_info.value) == "Bad gateway page"
        assert exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_connection_error_is_retryable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with mock_client(handler) as client:
            with pytest.raises(ApiCallError) as exc_info:
                await post_json_to_api(URL, {}, create_json_response_handler(), client=client)

        assert exc_info.value.is_retryable
        assert isinstance(exc_info.value.original_error, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout_is_retryable(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        async with mock_client(handler) as client:
            with pytest.raises(ApiCallError) as exc_info:
                await post_json_to_api(URL, {}, create_json_response_handler(), client=client)

        assert "timed out" in str(exc_info.value)
        assert exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_already_aborted(self, abort_controller):
        abort_controller.abort()

        def handler(request):
            return httpx.Response(200, json={})

        async with mock_client(handler) as client:
            with pytest.raises(AbortError):
                await post_json_to_api(
                    URL, {}, create_json_response_handler(),
                    abort_signal=abort_controller.signal, client=client,
                )


class TestEventSourceResponseHandler:
    """Test create_event_source_response_handler."""

    @pytest.mark.asyncio
    async def test_streams_deltas(self):
        body = sse_body([{"text": "Hel"}, {"text": "lo"}])

        def handler(request):
            return httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})

        async with mock_client(handler) as client:
            deltas = await post_json_to_api(
                URL, {"stream": True}, create_event_source_response_handler(UncheckedSchema()), client=client
            )
            received = await collect(deltas)

        assert received == [DeltaValue({"text": "Hel"}), DeltaValue({"text": "lo"})]

    @pytest.mark.asyncio
    async def test_invalid_chunk_becomes_delta_error(self):
        schema = JsonSchema({"type": "object", "required": ["text"]})
        body = sse_body([{"text": "a"}, {"ping": True}, {"text": "b"}])

        def handler(request):
            return httpx.Response(200, content=body)

        async with mock_client(handler) as client:
            deltas = await post_json_to_api(URL, {}, create_event_source_response_handler(schema), client=client)
            received = await collect(deltas)

        assert received[0] == DeltaValue({"text": "a"})
        assert isinstance(received[1], DeltaError)
        assert received[2] == DeltaValue({"text": "b"})


class TestApiConfiguration:
    def test_assemble_url(self):
        config = ApiConfiguration(base_url="https://api.test/v1/")

        assert config.assemble_url("/chat") == "https://api.test/v1/chat"
        assert config.assemble_url("embeddings") == "https://api.test/v1/embeddings"
        assert config.assemble_url("https://other.test/x") == "https://other.test/x"

    def test_headers_merge(self):
        config = ApiConfiguration(base_url="https://api.test", headers={"Authorization": "Bearer k"})

        assert config.get_headers({"X-Trace": "1"}) == {"Authorization": "Bearer k", "X-Trace": "1"}
        assert config.headers == {"Authorization": "Bearer k"}

    def test_from_settings(self):
        config = ApiConfiguration.from_settings(
            "https://api.test", settings=GenflowSettings(max_tries=5, http_timeout=5)
        )

        assert isinstance(config.retry, ExponentialBackoffRetry)
        assert config.retry.max_tries == 5
        assert config.timeout == 5
