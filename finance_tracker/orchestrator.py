"""
Main Orchestrator for the Finance Tracker

This module ties together storage, statistics and audit logging and
defines the four operations the API exposes:
1. Get snapshot
2. Add income
3. Add expense
4. Set savings

DESIGN DECISION: One coarse-grained transaction per operation.
Each operation holds the manager's lock for its entire
load -> rollover -> mutate -> save span, so no two operations
ever interleave their reads and writes of the document.

The manager owns the lock and the storage handle. There is no module-level
state: whoever serves requests is handed a FinanceStateManager.
"""

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, Optional
from uuid import UUID

from finance_tracker.audit import AuditLogger
from finance_tracker.config import Settings, get_settings
from finance_tracker.models.finance import (
    FinanceState,
    SavingsRequest,
    TransactionRequest,
)
from finance_tracker.services.storage import (
    JsonFileStateStorage,
    LoadResult,
    LoadStatus,
    StateStorageInterface,
)
from finance_tracker.stats import (
    apply_rollover,
    new_finance_state,
    record_transaction,
)


Clock = Callable[[], datetime]


class FinanceStateManager:
    """
    Owns the finance document and serializes every access to it.

    Flow of every operation:
    1. Acquire lock
    2. Load document (empty fallback if missing/corrupt)
    3. Apply rollover for "now"
    4. Mutate
    5. Save (best-effort - failures are logged, not raised)
    6. Release lock, return the document

    NOTE: Income/expense statistics are bucketed by the processing
    instant, NOT by the transaction's own date string. The date string is
    stored verbatim in the log only.
    """

    def __init__(
        self,
        storage: StateStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        clock: Clock = datetime.now,
        persist_rollover_on_read: bool = True,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock
        self._persist_rollover_on_read = persist_rollover_on_read
        self._lock = threading.Lock()

    @property
    def storage(self) -> StateStorageInterface:
        return self._storage

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    def initialize(self) -> FinanceState:
        """
        Create the document if nothing is persisted yet.

        An existing document - even a corrupt one - is left untouched.
        """
        with self._lock:
            if self._storage.exists():
                return self._storage.load().state

            state = new_finance_state(self._clock())
            self._save(state)
            self._audit_logger.log_state_created(
                start_date=state.weekly_stats.start_date,
                week=state.last_reset_week,
                year=state.last_reset_year,
            )
            return state

    def get_snapshot(self, correlation_id: Optional[UUID] = None) -> FinanceState:
        """
        Return the current document with stale statistics cleared.
        """
        with self._transaction(correlation_id, save=False) as (state, _):
            return state

    def add_income(
        self,
        request: TransactionRequest,
        correlation_id: Optional[UUID] = None,
    ) -> FinanceState:
        """
        Record an income: raise the balance, log it, count it in the stats.
        """
        with self._transaction(correlation_id) as (state, now):
            state.balance += request.amount
            state.incomes.append(request.to_transaction())
            record_transaction(state, request.amount, 0, now)

        self._audit_logger.log_income_recorded(
            request.amount, state.balance, correlation_id
        )
        return state

    def add_expense(
        self,
        request: TransactionRequest,
        correlation_id: Optional[UUID] = None,
    ) -> FinanceState:
        """
        Record an expense: lower the balance, log it, count it in the stats.
        """
        with self._transaction(correlation_id) as (state, now):
            state.balance -= request.amount
            state.expenses.append(request.to_transaction())
            record_transaction(state, 0, request.amount, now)

        self._audit_logger.log_expense_recorded(
            request.amount, state.balance, correlation_id
        )
        return state

    def set_savings(
        self,
        request: SavingsRequest,
        correlation_id: Optional[UUID] = None,
    ) -> FinanceState:
        """
        Overwrite the savings amount (not additive).
        """
        with self._transaction(correlation_id) as (state, _):
            previous = state.savings
            state.savings = request.amount

        self._audit_logger.log_savings_updated(
            previous, request.amount, correlation_id
        )
        return state

    @contextmanager
    def _transaction(
        self,
        correlation_id: Optional[UUID],
        save: bool = True,
    ) -> Iterator[tuple[FinanceState, datetime]]:
        """
        Locked load -> rollover -> (caller mutates) -> save span.

        With save=False the document is only written back when the
        rollover changed it and persisting rollovers on read is enabled.
        A mutation that raises, or leaves a non-finite total, is logged
        and propagates without saving. A corrupt document is never
        overwritten by a read.
        """
        with self._lock:
            now = self._clock()
            loaded = self._load(correlation_id)
            state = loaded.state

            rollover = apply_rollover(state, now)
            if rollover.changed:
                self._audit_logger.log_rollover(
                    year_reset=rollover.year_reset,
                    week_reset=rollover.week_reset,
                    year=state.last_reset_year,
                    week=state.last_reset_week,
                    correlation_id=correlation_id,
                )

            try:
                yield state, now
                state.ensure_finite()
            except Exception as e:
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
                raise

            # A read never overwrites a corrupt document
            persist_rollover = (
                rollover.changed
                and self._persist_rollover_on_read
                and loaded.status != LoadStatus.CORRUPT
            )
            if save or persist_rollover:
                self._save(state, correlation_id)

    def _load(self, correlation_id: Optional[UUID] = None) -> LoadResult:
        result = self._storage.load()
        if result.status == LoadStatus.CORRUPT:
            self._audit_logger.log_load_fallback(
                status=result.status.value,
                error_message=result.error_message,
                correlation_id=correlation_id,
            )
        return result

    def _save(
        self,
        state: FinanceState,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        saved = self._storage.save(state)
        if not saved:
            self._audit_logger.log_save_failed(
                self._storage.last_error or "unknown error",
                correlation_id,
            )
        return saved


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[StateStorageInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> FinanceStateManager:
    """
    Factory function to create the state manager.

    Args:
        settings: Settings to use (defaults to the cached global settings)
        storage: Storage backend override. Defaults to the JSON file
                 configured in settings.
        audit_logger: Audit logger override

    Returns:
        A ready-to-use FinanceStateManager (not yet initialized)
    """
    settings = settings or get_settings()

    if storage is None:
        storage = JsonFileStateStorage(settings.storage.data_path)

    return FinanceStateManager(
        storage=storage,
        audit_logger=audit_logger or AuditLogger(),
        persist_rollover_on_read=settings.app.persist_rollover_on_read,
    )
