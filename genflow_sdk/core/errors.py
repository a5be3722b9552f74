"""
Error taxonomy for Genflow SDK.

All errors raised by the SDK derive from GenflowError:

- AbortError: the call was cancelled through the run's abort signal
- TransportError / ApiCallError: network or provider failures (retry candidates)
- RetryError: retries were exhausted or stopped on a non-retryable error
- ValidationError: a value did not match its schema
- IllegalStateError: programming misuse (e.g. pushing to a closed queue)
"""

from typing import Any, List, Optional


class GenflowError(Exception):
    """Base exception for all SDK errors."""
    pass


class AbortError(GenflowError):
    """Raised when an operation is cancelled through an abort signal."""

    def __init__(self, message: str = "Aborted", reason: Any = None):
        super().__init__(message)
        self.reason = reason


class IllegalStateError(GenflowError):
    """Raised on misuse of an object in its current state."""
    pass


class TransportError(GenflowError):
    """
    Base exception for network and provider failures.

    Attributes:
        is_retryable: Whether this error should be retried
        retry_after: Seconds to wait before retry if the provider said so
        original_error: The wrapped exception, if any
    """

    def __init__(
        self,
        message: str,
        is_retryable: bool = False,
        retry_after: Optional[float] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.is_retryable = is_retryable
        self.retry_after = retry_after
        self.original_error = original_error


class ApiCallError(TransportError):
    """
    A failed HTTP call to a provider API.

    Attributes:
        url: The requested URL
        request_body: The body that was sent
        status_code: HTTP status code if a response was received
        response_body: Raw response body text if available
        data: Parsed error payload if available
    """

    def __init__(
        self,
        message: str,
        url: str,
        request_body: Any = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        data: Any = None,
        is_retryable: Optional[bool] = None,
        retry_after: Optional[float] = None,
        original_error: Optional[BaseException] = None,
    ):
        if is_retryable is None:
            is_retryable = status_code is not None and (
                status_code == 408 or status_code == 409 or status_code == 429 or status_code >= 500
            )
        super().__init__(
            message,
            is_retryable=is_retryable,
            retry_after=retry_after,
            original_error=original_error,
        )
        self.url = url
        self.request_body = request_body
        self.status_code = status_code
        self.response_body = response_body
        self.data = data


class RetryError(TransportError):
    """
    Raised when a retry policy gives up.

    Attributes:
        reason: "max_tries_exceeded" or "error_not_retryable"
        errors: Every error observed, in attempt order
    """

    def __init__(self, message: str, reason: str, errors: List[BaseException]):
        super().__init__(message, is_retryable=False, original_error=errors[-1] if errors else None)
        self.reason = reason
        self.errors = errors

    @property
    def last_error(self) -> Optional[BaseException]:
        return self.errors[-1] if self.errors else None


class ValidationError(GenflowError):
    """Base exception for schema mismatches."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class JSONParseError(ValidationError):
    """Text could not be parsed as JSON."""

    def __init__(self, text: str, cause: Optional[BaseException] = None):
        super().__init__(f"JSON parsing failed: Text: {text}.\nError message: {cause}", cause)
        self.text = text


class TypeValidationError(ValidationError):
    """A parsed value did not satisfy its schema."""

    def __init__(self, value: Any, cause: Optional[BaseException] = None):
        super().__init__(f"Type validation failed: Value: {value!r}.\nError message: {cause}", cause)
        self.value = value


class ObjectValidationError(ValidationError):
    """A generated object did not satisfy the requested schema."""

    def __init__(self, value_text: Optional[str], value: Any, cause: Optional[BaseException] = None):
        super().__init__(
            f"Object validation failed. Value: {value!r}.\nError message: {cause}", cause
        )
        self.value_text = value_text
        self.value = value
