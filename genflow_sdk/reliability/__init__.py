"""Reliability layer for API calls.

This layer handles:
- Retry policies with exponential backoff
- Throttles (concurrency limit, token bucket)
- Error classification for retry decisions
"""

from .call import call_with_retry_and_throttle
from .error_classifier import ErrorCategory, ErrorClassification, ErrorClassifier
from .retry import ExponentialBackoffRetry, RetryNever, retry_never, retry_with_exponential_backoff
from .throttle import (
    MaxConcurrencyThrottle,
    RateLimitThrottle,
    ThrottleOff,
    throttle_max_concurrency,
    throttle_off,
    throttle_rate_limit,
)

__all__ = [
    "call_with_retry_and_throttle",
    "ErrorCategory",
    "ErrorClassification",
    "ErrorClassifier",
    "ExponentialBackoffRetry",
    "RetryNever",
    "retry_never",
    "retry_with_exponential_backoff",
    "MaxConcurrencyThrottle",
    "RateLimitThrottle",
    "ThrottleOff",
    "throttle_max_concurrency",
    "throttle_off",
    "throttle_rate_limit",
]
