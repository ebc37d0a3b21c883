"""
Storage Services Package

Provides the abstract state-store interface and concrete implementations.
The JSON file is the production backend; it is designed to be swappable.
"""

from finance_tracker.services.storage.interface import (
    LoadResult,
    LoadStatus,
    StateDecodeError,
    StateStorageInterface,
    StorageError,
    decode_state,
    encode_state,
)
from finance_tracker.services.storage.json_file import JsonFileStateStorage
from finance_tracker.services.storage.memory import InMemoryStateStorage

__all__ = [
    # Interface
    "LoadResult",
    "LoadStatus",
    "StateStorageInterface",
    "decode_state",
    "encode_state",
    # Exceptions
    "StateDecodeError",
    "StorageError",
    # Implementations
    "InMemoryStateStorage",
    "JsonFileStateStorage",
]
