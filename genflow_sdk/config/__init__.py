"""Configuration for Genflow SDK."""

from .settings import GenflowSettings, load_settings

__all__ = [
    "GenflowSettings",
    "load_settings",
]
