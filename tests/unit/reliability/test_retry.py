"""Unit tests for retry policies."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from genflow_sdk.core.errors import AbortError, RetryError
from genflow_sdk.core.run import AbortController
from genflow_sdk.reliability.retry import retry_never, retry_with_exponential_backoff
from tests.helpers.mock_exceptions import bad_request_error, rate_limit_error, server_error


class TestRetryNever:
    @pytest.mark.asyncio
    async def test_calls_once_and_propagates(self):
        fn = AsyncMock(side_effect=server_error())

        with pytest.raises(Exception) as exc_info:
            await retry_never()(fn)

        assert exc_info.value.status_code == 503
        assert fn.await_count == 1


class TestExponentialBackoff:
    """Test retry_with_exponential_backoff."""

    @pytest.mark.asyncio
    async def test_fail_fail_succeed(self):
        fn = AsyncMock(side_effect=[server_error(), server_error(), "ok"])
        retry = retry_with_exponential_backoff(max_tries=3, initial_delay_in_ms=1)

        assert await retry(fn) == "ok"
        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_always_failing_exceeds_max_tries(self):
        fn = AsyncMock(side_effect=server_error())
        retry = retry_with_exponential_backoff(max_tries=3, initial_delay_in_ms=1)

        with pytest.raises(RetryError) as exc_info:
            await retry(fn)

        assert fn.await_count == 3
        assert exc_info.value.reason == "max_tries_exceeded"
        assert len(exc_info.value.errors) == 3
        assert exc_info.value.last_error.status_code == 503

    @pytest.mark.asyncio
    async def test_non_retryable_on_first_try_raises_original(self):
        error = bad_request_error()
        fn = AsyncMock(side_effect=error)
        retry = retry_with_exponential_backoff(max_tries=3, initial_delay_in_ms=1)

        with pytest.raises(type(error)) as exc_info:
            await retry(fn)

        assert exc_info.value is error
        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_non_retryable_after_retry_is_wrapped(self):
        fn = AsyncMock(side_effect=[server_error(), bad_request_error()])
        retry = retry_with_exponential_backoff(max_tries=5, initial_delay_in_ms=1)

        with pytest.raises(RetryError) as exc_info:
            await retry(fn)

        assert exc_info.value.reason == "error_not_retryable"
        assert [e.status_code for e in exc_info.value.errors] == [503, 400]

    @pytest.mark.asyncio
    async def test_abort_error_is_never_retried(self):
        fn = AsyncMock(side_effect=AbortError())
        retry = retry_with_exponential_backoff(max_tries=3, initial_delay_in_ms=1)

        with pytest.raises(AbortError):
            await retry(fn)

        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_delays_grow_by_backoff_factor(self):
        fn = AsyncMock(side_effect=[server_error(), server_error(), server_error(), "ok"])
        retry = retry_with_exponential_backoff(max_tries=4, initial_delay_in_ms=100, backoff_factor=3)

        with patch("genflow_sdk.reliability.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            assert await retry(fn) == "ok"

        assert [c.args[0] for c in sleep.await_args_list] == [0.1, pytest.approx(0.3), pytest.approx(0.9)]

    @pytest.mark.asyncio
    async def test_retry_after_raises_the_delay(self):
        fn = AsyncMock(side_effect=[rate_limit_error(retry_after=2.5), "ok"])
        retry = retry_with_exponential_backoff(max_tries=2, initial_delay_in_ms=100)

        with patch("genflow_sdk.reliability.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            assert await retry(fn) == "ok"

        assert sleep.await_args.args[0] == pytest.approx(2.5)

    @pytest.mark.asyncio
    async def test_shorter_retry_after_keeps_backoff_delay(self):
        fn = AsyncMock(side_effect=[rate_limit_error(retry_after=0.01), "ok"])
        retry = retry_with_exponential_backoff(max_tries=2, initial_delay_in_ms=500)

        with patch("genflow_sdk.reliability.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            await retry(fn)

        assert sleep.await_args.args[0] == pytest.approx(0.5)

    @pytest.mark.asyncio
    async def test_abort_during_backoff(self):
        controller = AbortController()
        fn = AsyncMock(side_effect=server_error())
        retry = retry_with_exponential_backoff(max_tries=3, initial_delay_in_ms=10_000)

        task = asyncio.ensure_future(retry(fn, abort_signal=controller.signal))
        await asyncio.sleep(0.01)
        controller.abort("user cancelled")

        with pytest.raises(AbortError) as exc_info:
            await asyncio.wait_for(task, timeout=1)

        assert exc_info.value.reason == "user cancelled"
        assert fn.await_count == 1

    def test_max_tries_is_at_least_one(self):
        assert retry_with_exponential_backoff(max_tries=0).max_tries == 1
