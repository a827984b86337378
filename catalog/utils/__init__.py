"""Utility modules for the product catalog."""

from .config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
