"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the state store.
This allows us to:
1. Swap the JSON file for any key-value or document store later
2. Use in-memory storage for testing
3. Keep the transaction logic decoupled from the storage medium

The whole contract is "get the document" / "put the document".
There is no locking here - callers serialize access externally.

Failures are absorbed, not raised:
- load() falls back to an empty document, but REPORTS why via LoadStatus
  so "first run" and "corrupt data" stay distinguishable.
- save() returns False instead of raising.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

from finance_tracker.models.finance import FinanceState


class LoadStatus(str, Enum):
    """Outcome of reading the persisted document."""
    LOADED = "loaded"    # Document read and decoded
    MISSING = "missing"  # Nothing persisted yet (first run)
    CORRUPT = "corrupt"  # Present but unreadable or undecodable


class LoadResult(BaseModel):
    """
    Result of StateStorageInterface.load().

    `state` is always usable: for MISSING and CORRUPT it is the
    zero-valued FinanceState().
    """
    state: FinanceState = Field(default_factory=FinanceState)
    status: LoadStatus = LoadStatus.LOADED
    error_message: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.status != LoadStatus.LOADED

    @classmethod
    def missing(cls) -> "LoadResult":
        return cls(status=LoadStatus.MISSING)

    @classmethod
    def corrupt(cls, error_message: str) -> "LoadResult":
        return cls(status=LoadStatus.CORRUPT, error_message=error_message)


class StateStorageInterface(ABC):
    """
    Abstract interface for finance document storage.

    Any storage implementation (JSON file, in-memory, database row...)
    must implement these methods.
    """

    def __init__(self):
        self._last_error: Optional[str] = None

    @abstractmethod
    def load(self) -> LoadResult:
        """
        Read the persisted finance document.

        Returns:
            LoadResult with the decoded state, or the empty state and
            the reason it could not be used. Never raises.
        """
        pass

    @abstractmethod
    def save(self, state: FinanceState) -> bool:
        """
        Persist the finance document, replacing any previous one.

        Args:
            state: The full document to write

        Returns:
            True if saved successfully, False otherwise. Never raises.
        """
        pass

    @abstractmethod
    def exists(self) -> bool:
        """
        Check whether a document has been persisted.

        Returns:
            True if something is stored (decodable or not)
        """
        pass

    @property
    def last_error(self) -> Optional[str]:
        """Message of the most recent failed save, if any."""
        return self._last_error


def decode_state(raw: Union[str, bytes]) -> FinanceState:
    """
    Decode a serialized document.

    Raises:
        StateDecodeError: If the content is not a valid finance document
    """
    try:
        return FinanceState.model_validate_json(raw)
    except ValueError as e:
        raise StateDecodeError(str(e)) from e


def encode_state(state: FinanceState) -> str:
    """Serialize a document the way it is persisted."""
    return state.model_dump_json(indent=1)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StateDecodeError(StorageError):
    """Persisted content could not be decoded into a FinanceState."""
    pass
