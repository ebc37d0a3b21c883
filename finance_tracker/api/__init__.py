"""HTTP API package."""

from finance_tracker.api.app import create_app, get_manager

__all__ = ["create_app", "get_manager"]
