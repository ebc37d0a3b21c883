"""
In-Memory Storage Implementation

Keeps the serialized document in memory. Used for tests and throwaway
runs. It goes through the same encode/decode path as the file store,
so a document that survives here survives on disk too.
"""

from typing import Optional

from finance_tracker.models.finance import FinanceState
from finance_tracker.services.storage.interface import (
    LoadResult,
    StateDecodeError,
    StateStorageInterface,
    decode_state,
    encode_state,
)


class InMemoryStateStorage(StateStorageInterface):
    """
    Holds the finance document as JSON text.

    Args:
        raw: Optional pre-seeded content (may be deliberately invalid)
        fail_saves: Simulate a storage medium that rejects every write
    """

    def __init__(self, raw: Optional[str] = None, fail_saves: bool = False):
        super().__init__()
        self._raw = raw
        self.fail_saves = fail_saves
        self.save_count = 0

    @property
    def raw(self) -> Optional[str]:
        return self._raw

    def exists(self) -> bool:
        return self._raw is not None

    def load(self) -> LoadResult:
        if self._raw is None:
            return LoadResult.missing()
        try:
            return LoadResult(state=decode_state(self._raw))
        except StateDecodeError as e:
            return LoadResult.corrupt(str(e))

    def save(self, state: FinanceState) -> bool:
        if self.fail_saves:
            self._last_error = "Simulated write failure"
            return False
        self._raw = encode_state(state)
        self._last_error = None
        self.save_count += 1
        return True
