"""Configuration package."""

from finance_tracker.config.settings import (
    AppSettings,
    ServerSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ServerSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
