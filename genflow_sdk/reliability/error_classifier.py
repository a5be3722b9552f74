"""
Error classification for retry decisions.

Maps SDK errors, httpx transport exceptions, HTTP status codes and error
message patterns to a category and a retryable flag.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Set

import httpx

from ..core.errors import AbortError, TransportError, ValidationError


class ErrorCategory(Enum):
    """Error categories used by the retry policies."""
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    VALIDATION = "validation"
    SERVER_ERROR = "server_error"
    NETWORK = "network"
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    CONFLICT = "conflict"
    ABORT = "abort"
    UNKNOWN = "unknown"


@dataclass
class ErrorClassification:
    """Outcome of classifying one error."""
    category: ErrorCategory
    is_retryable: bool
    suggested_delay: Optional[float] = None


class ErrorClassifier:
    """Classifies errors raised by model calls."""

    ERROR_PATTERNS = {
        'timeout': {
            'patterns': ['timeout', 'timed out', 'read timeout'],
            'category': ErrorCategory.TIMEOUT,
            'retryable': True
        },
        'rate_limit': {
            'patterns': ['rate limit', 'too many requests', 'quota exceeded',
                         'rate_limit_exceeded', 'throttled', 'try again later'],
            'category': ErrorCategory.RATE_LIMIT,
            'retryable': True
        },
        'authentication': {
            'patterns': ['invalid api key', 'authentication failed', 'unauthorized',
                         'invalid_api_key'],
            'category': ErrorCategory.AUTHENTICATION,
            'retryable': False
        },
        'server_error': {
            'patterns': ['server error', 'internal error', 'service unavailable',
                         'overloaded'],
            'category': ErrorCategory.SERVER_ERROR,
            'retryable': True
        },
        'validation': {
            'patterns': ['invalid request', 'bad request', 'context_length_exceeded'],
            'category': ErrorCategory.VALIDATION,
            'retryable': False
        },
        'network': {
            'patterns': ['connection error', 'network error', 'connection refused',
                         'connection reset'],
            'category': ErrorCategory.NETWORK,
            'retryable': True
        },
    }

    # checked in this order (timeout before network)
    PATTERN_PRIORITY = ['timeout', 'rate_limit', 'authentication', 'server_error',
                        'validation', 'network']

    RETRYABLE_STATUS_CODES: Set[int] = {408, 409, 429, 500, 502, 503, 504, 520, 521, 522, 523, 524}
    NON_RETRYABLE_STATUS_CODES: Set[int] = {400, 401, 403, 404, 405, 410, 422}

    @classmethod
    def classify_error(cls, error: BaseException) -> ErrorClassification:
        """
        Classify an error.

        Order of precedence: abort, explicit `is_retryable` on SDK transport
        errors, httpx exception type, status code, message patterns.
        """
        if isinstance(error, AbortError):
            return ErrorClassification(category=ErrorCategory.ABORT, is_retryable=False)

        if isinstance(error, ValidationError):
            return ErrorClassification(category=ErrorCategory.VALIDATION, is_retryable=False)

        if isinstance(error, TransportError):
            status_code = getattr(error, "status_code", None)
            if status_code is not None:
                category = cls._categorize_by_status_code(status_code)
            elif error.original_error is not None:
                category = cls.classify_error(error.original_error).category
            else:
                category = ErrorCategory.UNKNOWN
            return ErrorClassification(
                category=category,
                is_retryable=error.is_retryable,
                suggested_delay=error.retry_after,
            )

        if isinstance(error, httpx.TimeoutException):
            return ErrorClassification(category=ErrorCategory.TIMEOUT, is_retryable=True)

        if isinstance(error, (httpx.NetworkError, httpx.RemoteProtocolError)):
            return ErrorClassification(category=ErrorCategory.NETWORK, is_retryable=True)

        if isinstance(error, httpx.HTTPStatusError):
            return cls._classify_status_code(
                error.response.status_code,
                cls._get_retry_delay(error.response.headers.get("retry-after")),
            )

        status_code = getattr(error, "status_code", None)
        if isinstance(status_code, int):
            return cls._classify_status_code(status_code, None)

        return cls._classify_by_message(error)

    @classmethod
    def is_retryable(cls, error: BaseException) -> bool:
        return cls.classify_error(error).is_retryable

    @classmethod
    def _classify_status_code(cls, status_code: int, suggested_delay: Optional[float]) -> ErrorClassification:
        category = cls._categorize_by_status_code(status_code)
        if status_code in cls.RETRYABLE_STATUS_CODES or status_code >= 500:
            return ErrorClassification(category=category, is_retryable=True, suggested_delay=suggested_delay)
        return ErrorClassification(category=category, is_retryable=False)

    @classmethod
    def _classify_by_message(cls, error: BaseException) -> ErrorClassification:
        error_str = str(error).lower()

        for pattern_key in cls.PATTERN_PRIORITY:
            pattern_info = cls.ERROR_PATTERNS[pattern_key]
            if any(pattern in error_str for pattern in pattern_info['patterns']):
                return ErrorClassification(
                    category=pattern_info['category'],
                    is_retryable=pattern_info['retryable'],
                )

        return ErrorClassification(category=ErrorCategory.UNKNOWN, is_retryable=False)

    @classmethod
    def _categorize_by_status_code(cls, status_code: int) -> ErrorCategory:
        """Categorize error based on HTTP status code."""
        if status_code == 401:
            return ErrorCategory.AUTHENTICATION
        elif status_code == 403:
            return ErrorCategory.PERMISSION_DENIED
        elif status_code == 404:
            return ErrorCategory.NOT_FOUND
        elif status_code == 408:
            return ErrorCategory.TIMEOUT
        elif status_code == 409:
            return ErrorCategory.CONFLICT
        elif status_code == 429:
            return ErrorCategory.RATE_LIMIT
        elif status_code >= 500:
            return ErrorCategory.SERVER_ERROR
        elif status_code >= 400:
            return ErrorCategory.VALIDATION
        else:
            return ErrorCategory.UNKNOWN

    @classmethod
    def _get_retry_delay(cls, retry_after: Optional[str]) -> Optional[float]:
        """Parse a Retry-After header value given in seconds."""
        if not retry_after:
            return None
        try:
            return float(retry_after)
        except ValueError:
            return None


def parse_retry_after(retry_after: Optional[str]) -> Optional[float]:
    """Seconds from a Retry-After header, or None when absent or not numeric."""
    return ErrorClassifier._get_retry_delay(retry_after)
