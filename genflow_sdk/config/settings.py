"""
Process configuration for Genflow SDK.

Settings are read from environment variables (after loading a `.env` file if
present). Everything here is a default: per-call options always win.

Environment variables:
    GENFLOW_FUNCTION_LOGGING: off | basic-text | detailed-object | detailed-json
    GENFLOW_MAX_TRIES: Maximum attempts per API call (1 disables retries)
    GENFLOW_INITIAL_DELAY_MS: First retry delay in milliseconds
    GENFLOW_BACKOFF_FACTOR: Multiplier applied to the delay after each retry
    GENFLOW_MAX_CONCURRENCY: Maximum concurrent API calls (unset = unlimited)
    GENFLOW_HTTP_TIMEOUT: HTTP timeout in seconds
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass
class GenflowSettings:
    """Process-wide defaults."""
    function_logging: str = "off"
    max_tries: int = 3
    initial_delay_in_ms: int = 2000
    backoff_factor: float = 2.0
    max_concurrency: Optional[int] = None
    http_timeout: float = 60.0

    def __post_init__(self):
        """Clamp invalid values to safe defaults."""
        from ..core.logging import FUNCTION_LOGGING_LEVELS

        if self.function_logging not in FUNCTION_LOGGING_LEVELS:
            logger.warning(f"Unknown function logging level '{self.function_logging}', using 'off'")
            self.function_logging = "off"
        if self.max_tries < 1:
            self.max_tries = 1
        if self.initial_delay_in_ms < 0:
            self.initial_delay_in_ms = 0
        if self.max_concurrency is not None and self.max_concurrency < 1:
            self.max_concurrency = None

    def default_retry(self):
        """Build the retry policy described by these settings."""
        from ..reliability.retry import retry_never, retry_with_exponential_backoff

        if self.max_tries <= 1:
            return retry_never()
        return retry_with_exponential_backoff(
            max_tries=self.max_tries,
            initial_delay_in_ms=self.initial_delay_in_ms,
            backoff_factor=self.backoff_factor,
        )

    def default_throttle(self):
        """Build the throttle described by these settings."""
        from ..reliability.throttle import throttle_max_concurrency, throttle_off

        if self.max_concurrency is None:
            return throttle_off()
        return throttle_max_concurrency(self.max_concurrency)


def _int_env(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer value for {name}: {raw!r}")
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric value for {name}: {raw!r}")
        return default


def load_settings(dotenv: bool = True) -> GenflowSettings:
    """
    Load settings from the environment.

    Args:
        dotenv: Load a `.env` file first (existing variables are kept)

    Returns:
        GenflowSettings instance
    """
    if dotenv:
        load_dotenv()

    return GenflowSettings(
        function_logging=os.getenv("GENFLOW_FUNCTION_LOGGING", "off"),
        max_tries=_int_env("GENFLOW_MAX_TRIES", 3),
        initial_delay_in_ms=_int_env("GENFLOW_INITIAL_DELAY_MS", 2000),
        backoff_factor=_float_env("GENFLOW_BACKOFF_FACTOR", 2.0),
        max_concurrency=_int_env("GENFLOW_MAX_CONCURRENCY", None),
        http_timeout=_float_env("GENFLOW_HTTP_TIMEOUT", 60.0),
    )
