"""Services package."""

from finance_tracker.services.storage import (
    InMemoryStateStorage,
    JsonFileStateStorage,
    LoadResult,
    LoadStatus,
    StateDecodeError,
    StateStorageInterface,
    StorageError,
)

__all__ = [
    # Storage services
    "InMemoryStateStorage",
    "JsonFileStateStorage",
    "LoadResult",
    "LoadStatus",
    "StateDecodeError",
    "StateStorageInterface",
    "StorageError",
]
