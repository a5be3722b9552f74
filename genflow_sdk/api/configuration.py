"""API endpoint configuration shared by model implementations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from ..config.settings import GenflowSettings, load_settings
from ..reliability.retry import retry_never
from ..reliability.throttle import throttle_off


@dataclass
class ApiConfiguration:
    """
    Where and how to call a provider API.

    Attributes:
        base_url: Base URL that relative paths are resolved against
        headers: Headers sent with every request
        retry: Retry policy for calls to this API
        throttle: Throttle for calls to this API
        timeout: HTTP timeout in seconds
        client: Shared httpx client (optional)
    """
    base_url: str
    headers: Dict[str, str] = field(default_factory=dict)
    retry: Any = field(default_factory=retry_never)
    throttle: Any = field(default_factory=throttle_off)
    timeout: float = 60.0
    client: Optional[httpx.AsyncClient] = None

    def assemble_url(self, path: str) -> str:
        """Join `path` to the base URL. Absolute URLs are returned unchanged."""
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def get_headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        return {**self.headers, **(extra or {})}

    @classmethod
    def from_settings(
        cls,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        settings: Optional[GenflowSettings] = None,
    ) -> "ApiConfiguration":
        """Configuration whose retry, throttle and timeout come from settings."""
        settings = settings or load_settings()
        return cls(
            base_url=base_url,
            headers=dict(headers or {}),
            retry=settings.default_retry(),
            throttle=settings.default_throttle(),
            timeout=settings.http_timeout,
        )
