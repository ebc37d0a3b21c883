"""
JSON File Storage Implementation

DESIGN DECISION: The whole finance state is one small JSON document, so a
flat file is the storage medium:
1. Nothing to install or run
2. Human-readable, easy to back up or edit by hand
3. Whole-document read/write matches the load-mutate-save discipline

TRADEOFFS:
- No concurrent writers across processes (one process owns the file)
- Every save rewrites the full document (fine at this scale)

Writes go to a temporary sibling file which is then renamed over the
target, so a crash mid-write never leaves a truncated document.
"""

import os
from pathlib import Path
from typing import Union

from finance_tracker.models.finance import FinanceState
from finance_tracker.services.storage.interface import (
    LoadResult,
    StateDecodeError,
    StateStorageInterface,
    decode_state,
    encode_state,
)


class JsonFileStateStorage(StateStorageInterface):
    """
    Stores the finance document as a single JSON file.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> LoadResult:
        """
        Read and decode the document.

        An absent file is MISSING; an unreadable or undecodable file
        is CORRUPT. Both come back with the empty state.
        """
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return LoadResult.missing()
        except OSError as e:
            return LoadResult.corrupt(f"Could not read {self._path}: {e}")

        try:
            state = decode_state(raw)
        except StateDecodeError as e:
            return LoadResult.corrupt(f"Could not decode {self._path}: {e}")

        return LoadResult(state=state)

    def save(self, state: FinanceState) -> bool:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(encode_state(state), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            self._last_error = f"Could not write {self._path}: {e}"
            return False

        self._last_error = None
        return True
