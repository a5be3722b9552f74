"""
HTTP transport helpers built on httpx.

`post_json_to_api` sends one request and hands the response to a response
handler: the failed-response handler turns a non-2xx response into an
ApiCallError, the successful-response handler extracts the value (parsed
JSON, text, audio bytes, or a delta queue for server-sent events).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, TypeVar

import httpx

from ..core.errors import AbortError, ApiCallError, ValidationError
from ..core.run import AbortSignal, run_abortable
from ..core.schema import Schema, parse_json
from ..reliability.error_classifier import parse_retry_after
from ..streaming.async_queue import AsyncQueue
from ..streaming.delta import Delta, parse_event_source_stream_as_async_iterable

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 60.0


@dataclass
class ResponseHandlerContext:
    """What a response handler gets to see."""
    url: str
    request_body: Any
    response: httpx.Response
    abort_signal: Optional[AbortSignal] = None
    _close: Optional[Callable[[], Awaitable[None]]] = field(default=None, repr=False)
    detached: bool = False

    def detach(self) -> Callable[[], Awaitable[None]]:
        """
        Take over closing the response.

        Handlers that return a lazily consumed body (event streams) call this
        and close the response when they are done reading.
        """
        self.detached = True
        return self._close

    async def read_text(self) -> str:
        await self.response.aread()
        return self.response.text


ResponseHandler = Callable[[ResponseHandlerContext], Awaitable[T]]


def _retry_after(response: httpx.Response) -> Optional[float]:
    return parse_retry_after(response.headers.get("retry-after"))


async def post_to_api(
    url: str,
    content: bytes,
    successful_response_handler: ResponseHandler[T],
    headers: Optional[Dict[str, str]] = None,
    failed_response_handler: Optional[ResponseHandler[ApiCallError]] = None,
    request_body: Any = None,
    abort_signal: Optional[AbortSignal] = None,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> T:
    """
    POST raw content and pass the response to a handler.

    Args:
        url: Target URL
        content: Request body bytes
        successful_response_handler: Extracts the value from a 2xx response
        headers: Request headers (None values are dropped)
        failed_response_handler: Builds the ApiCallError for a non-2xx response
        request_body: Body recorded on errors (defaults to `content`)
        abort_signal: Cancels the request
        client: httpx client to use; a short-lived one is created when omitted
        timeout: Timeout in seconds for an internally created client

    Raises:
        ApiCallError: For connection failures and non-2xx responses
        AbortError: If the signal is aborted
    """
    failed_response_handler = failed_response_handler or create_status_code_error_response_handler()
    request_body = content if request_body is None else request_body
    headers = {key: value for key, value in (headers or {}).items() if value is not None}

    owns_client = client is None
    http_client = client or httpx.AsyncClient(timeout=timeout)
    response: Optional[httpx.Response] = None

    async def close() -> None:
        if response is not None:
            await response.aclose()
        if owns_client:
            await http_client.aclose()

    context: Optional[ResponseHandlerContext] = None
    try:
        request = http_client.build_request("POST", url, headers=headers, content=content)
        logger.debug(f"POST {url}")

        try:
            response = await run_abortable(http_client.send(request, stream=True), abort_signal)
        except AbortError:
            raise
        except httpx.TimeoutException as e:
            raise ApiCallError(
                f"Request to {url} timed out",
                url=url,
                request_body=request_body,
                is_retryable=True,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise ApiCallError(
                f"Cannot connect to API: {e}",
                url=url,
                request_body=request_body,
                is_retryable=True,
                original_error=e,
            ) from e

        context = ResponseHandlerContext(
            url=url,
            request_body=request_body,
            response=response,
            abort_signal=abort_signal,
            _close=close,
        )

        if not response.is_success:
            error = await failed_response_handler(context)
            logger.debug(f"POST {url} failed with status {response.status_code}")
            raise error

        try:
            return await successful_response_handler(context)
        except (ApiCallError, AbortError):
            raise
        except ValidationError as e:
            raise ApiCallError(
                "Invalid JSON response",
                url=url,
                request_body=request_body,
                status_code=response.status_code,
                response_body=response.text if response.is_stream_consumed else None,
                is_retryable=False,
                original_error=e,
            ) from e
    finally:
        if context is None or not context.detached:
            await close()


async def post_json_to_api(
    url: str,
    body: Any,
    successful_response_handler: ResponseHandler[T],
    headers: Optional[Dict[str, str]] = None,
    failed_response_handler: Optional[ResponseHandler[ApiCallError]] = None,
    abort_signal: Optional[AbortSignal] = None,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> T:
    """POST `body` serialized as JSON. See post_to_api."""
    return await post_to_api(
        url=url,
        content=json.dumps(body).encode("utf-8"),
        successful_response_handler=successful_response_handler,
        headers={**(headers or {}), "Content-Type": "application/json"},
        failed_response_handler=failed_response_handler,
        request_body=body,
        abort_signal=abort_signal,
        client=client,
        timeout=timeout,
    )


def create_json_response_handler(schema: Optional[Schema[T]] = None) -> ResponseHandler[T]:
    """Parse the body as JSON and validate it against `schema`."""

    async def handler(context: ResponseHandlerContext) -> T:
        return parse_json(await context.read_text(), schema)

    return handler


def create_text_response_handler() -> ResponseHandler[str]:
    async def handler(context: ResponseHandlerContext) -> str:
        return await context.read_text()

    return handler


def create_audio_bytes_response_handler() -> ResponseHandler[bytes]:
    async def handler(context: ResponseHandlerContext) -> bytes:
        await context.response.aread()
        return context.response.content

    return handler


def create_event_source_response_handler(schema: Schema[T]) -> ResponseHandler[AsyncQueue[Delta[T]]]:
    """
    Decode a `text/event-stream` body into a queue of deltas.

    The response stays open until the stream ends, fails or is aborted.
    """

    async def handler(context: ResponseHandlerContext) -> AsyncQueue[Delta[T]]:
        close = context.detach()
        response = context.response

        async def body() -> AsyncIterator[bytes]:
            try:
                async for chunk in response.aiter_bytes():
                    yield chunk
            finally:
                await close()

        return parse_event_source_stream_as_async_iterable(
            body(), schema, abort_signal=context.abort_signal
        )

    return handler


def create_status_code_error_response_handler() -> ResponseHandler[ApiCallError]:
    """Build an ApiCallError from the status line and raw body."""

    async def handler(context: ResponseHandlerContext) -> ApiCallError:
        response_body = await context.read_text()
        return ApiCallError(
            context.response.reason_phrase or f"HTTP {context.response.status_code}",
            url=context.url,
            request_body=context.request_body,
            status_code=context.response.status_code,
            response_body=response_body,
            retry_after=_retry_after(context.response),
        )

    return handler


def create_json_error_response_handler(
    schema: Schema[Any],
    error_to_message: Callable[[Any], str],
    is_retryable: Optional[Callable[[httpx.Response, Any], bool]] = None,
) -> ResponseHandler[ApiCallError]:
    """
    Build an ApiCallError from a JSON error payload.

    Args:
        schema: Schema of the provider's error payload
        error_to_message: Extracts the error message from the parsed payload
        is_retryable: Overrides the status-code based retry decision
    """

    async def handler(context: ResponseHandlerContext) -> ApiCallError:
        response = context.response
        response_body = await context.read_text()

        base = dict(
            url=context.url,
            request_body=context.request_body,
            status_code=response.status_code,
            response_body=response_body,
            retry_after=_retry_after(response),
        )

        if response_body.strip() == "":
            return ApiCallError(response.reason_phrase or f"HTTP {response.status_code}", **base)

        try:
            data = parse_json(response_body, schema)
        except ValidationError:
            return ApiCallError(response_body or response.reason_phrase, **base)

        return ApiCallError(
            error_to_message(data),
            data=data,
            is_retryable=is_retryable(response, data) if is_retryable is not None else None,
            **base,
        )

    return handler
