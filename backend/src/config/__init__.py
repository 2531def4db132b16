"""
Configuration module for the museum calendar backend.

Provides centralized configuration for:
- Event listing pagination
- Calendar defaults
- CORS origins
"""

from backend.src.config.settings import AppSettings, get_settings, CALENDAR_VIEWS

__all__ = [
    "AppSettings",
    "get_settings",
    "CALENDAR_VIEWS",
]
