"""Core package - Shared configuration and rendering."""

from .config import Settings, get_settings, configure_logging

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "configure_logging",
]
