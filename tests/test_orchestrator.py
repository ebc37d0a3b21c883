"""
Integration tests for FinanceStateManager.

Storage is in-memory and "now" comes from a fake clock, so rollovers
are driven explicitly.
"""

import threading
from datetime import datetime

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.config import Settings, get_settings, validate_all_settings
from finance_tracker.models.audit import AuditEventType
from finance_tracker.models.finance import (
    FinanceState,
    NonFiniteStateError,
    SavingsRequest,
    TransactionRequest,
)
from finance_tracker.orchestrator import FinanceStateManager, create_app_components
from finance_tracker.services.storage import (
    InMemoryStateStorage,
    JsonFileStateStorage,
    encode_state,
)
from finance_tracker.stats import new_finance_state


def income(amount, date="2024-01-10", note="pay"):
    return TransactionRequest(amount=amount, date=date, note=note)


def expense(amount, date="2024-01-11", note="food"):
    return TransactionRequest(amount=amount, date=date, note=note)


def event_types(audit_logger):
    return [e.event_type for e in audit_logger.events]


class TestInitialize:
    """Tests for first-start document creation."""

    def test_creates_document_once(self, manager, storage, clock, audit_logger):
        """Test a fresh document is persisted with current watermarks."""
        state = manager.initialize()

        assert storage.exists()
        assert state == new_finance_state(clock())
        assert state.weekly_stats.start_date == "2024-03-04"
        assert event_types(audit_logger) == [AuditEventType.STATE_CREATED]

    def test_keeps_existing_document(self, manager, storage):
        """Test an existing document is not overwritten."""
        existing = FinanceState(balance=42.0, last_reset_week=10, last_reset_year=2024)
        storage.save(existing)

        assert manager.initialize() == existing
        assert storage.save_count == 1


class TestScenarios:
    """End-to-end operation sequences."""

    def test_add_income_buckets_by_processing_time(self, manager, storage):
        """Test stats use "now", not the transaction's own date."""
        manager.initialize()

        state = manager.add_income(income(100, date="2024-01-10"))

        assert state.balance == 100
        assert [t.amount for t in state.incomes] == [100]
        assert state.incomes[0].date == "2024-01-10"
        # Clock says March 5th (a Tuesday), the payload said January
        assert state.yearly_stats[2024][3].incomes == 100
        assert 1 not in state.yearly_stats[2024]
        assert state.weekly_stats.days[1].incomes == 100
        assert storage.load().state == state

    def test_add_expense_after_income(self, manager):
        """Test AddExpense lowers balance and counts in the same month."""
        manager.add_income(income(100))

        state = manager.add_expense(expense(30))

        assert state.balance == 70
        assert [t.amount for t in state.expenses] == [30]
        assert state.yearly_stats[2024][3].expenses == 30
        assert state.yearly_stats[2024][3].incomes == 100

    def test_savings_overwrite(self, manager):
        """Test SetSavings replaces rather than accumulates."""
        manager.set_savings(SavingsRequest(amount=500))
        state = manager.set_savings(SavingsRequest(amount=200))

        assert state.savings == 200
        assert manager.get_snapshot().savings == 200

    def test_savings_do_not_touch_balance(self, manager):
        manager.add_income(income(10))
        state = manager.set_savings(SavingsRequest(amount=999))
        assert state.balance == 10

    def test_balance_matches_logs(self, manager):
        """Test balance == sum(incomes) - sum(expenses) for any order."""
        for amount in (5, 12.5, 100):
            manager.add_income(income(amount))
            manager.add_expense(expense(amount / 5))
        manager.add_expense(expense(3))

        state = manager.get_snapshot()

        assert state.balance == pytest.approx(state.total_incomes - state.total_expenses)
        assert len(state.incomes) == 3
        assert len(state.expenses) == 4


class TestSnapshotAndRollover:
    """Tests for reads and the shared rollover path."""

    def test_snapshot_is_idempotent(self, manager):
        """Test two reads without crossing a boundary are identical."""
        manager.add_income(income(50))
        assert manager.get_snapshot() == manager.get_snapshot()

    def test_snapshot_does_not_write_without_rollover(self, manager, storage):
        manager.initialize()
        saves = storage.save_count

        manager.get_snapshot()

        assert storage.save_count == saves

    def test_week_rollover_on_read(self, manager, storage, clock, audit_logger):
        """Test crossing a week clears the days and is persisted."""
        manager.add_income(income(50))
        clock.set(datetime(2024, 3, 11, 8, 0))  # next Monday

        state = manager.get_snapshot()

        assert all(d.incomes == 0 for d in state.weekly_stats.days)
        assert state.weekly_stats.start_date == "2024-03-11"
        assert state.last_reset_week == 11
        assert state.yearly_stats[2024][3].incomes == 50
        assert storage.load().state == state
        assert AuditEventType.STATS_ROLLED_OVER in event_types(audit_logger)

    def test_rollover_on_read_not_persisted_when_disabled(self, storage, clock):
        manager = FinanceStateManager(
            storage=storage,
            clock=clock,
            persist_rollover_on_read=False,
        )
        manager.add_income(income(50))
        raw_before = storage.raw
        clock.set(datetime(2024, 3, 11))

        state = manager.get_snapshot()

        assert state.last_reset_week == 11
        assert storage.raw == raw_before

    def test_year_rollover_on_read(self, manager, clock):
        """Test a new year empties the yearly map."""
        manager.add_income(income(50))
        clock.set(datetime(2025, 1, 15))

        state = manager.get_snapshot()

        assert state.yearly_stats == {}
        assert state.last_reset_year == 2025
        assert state.balance == 50

    def test_rollover_runs_before_mutation(self, manager, storage, clock):
        """Test a stale week is cleared before the new income is counted."""
        manager.add_income(income(50))
        clock.set(datetime(2024, 3, 13))  # Wednesday of the next week

        state = manager.add_income(income(7))

        assert state.weekly_stats.start_date == "2024-03-11"
        assert state.weekly_stats.days[1].incomes == 0
        assert state.weekly_stats.days[2].incomes == 7
        assert state.yearly_stats[2024][3].incomes == 57

    def test_new_year_first_transaction(self, manager, clock):
        """Test one {year: {month: ...}} entry after a year rollover."""
        manager.add_income(income(50))
        clock.set(datetime(2025, 2, 3))

        state = manager.add_expense(expense(4))

        assert list(state.yearly_stats) == [2025]
        assert list(state.yearly_stats[2025]) == [2]
        assert state.yearly_stats[2025][2].expenses == 4


class TestStorageFailures:
    """Storage problems are absorbed but logged."""

    def test_corrupt_document_falls_back(self, clock, audit_logger):
        """Test a corrupt document reads as an empty, rolled-over state."""
        storage = InMemoryStateStorage(raw="{broken")
        manager = FinanceStateManager(storage, audit_logger, clock=clock)

        state = manager.get_snapshot()

        assert state.balance == 0
        assert state.last_reset_year == 2024
        assert state.last_reset_week == 10
        assert AuditEventType.STATE_LOAD_FALLBACK in event_types(audit_logger)

    def test_missing_document_is_not_a_warning(self, manager, audit_logger):
        manager.get_snapshot()
        assert AuditEventType.STATE_LOAD_FALLBACK not in event_types(audit_logger)

    def test_initialize_leaves_corrupt_document(self, clock):
        storage = InMemoryStateStorage(raw="{broken")
        manager = FinanceStateManager(storage, clock=clock)

        manager.initialize()

        assert storage.raw == "{broken"

    def test_snapshot_leaves_corrupt_document(self, clock):
        """Test a read that rolls over the fallback does not overwrite the file."""
        raw = '{"balance": 1234.5, "savings": "oops"'
        storage = InMemoryStateStorage(raw=raw)
        manager = FinanceStateManager(storage, clock=clock)

        manager.initialize()
        manager.get_snapshot()

        assert storage.raw == raw
        assert storage.save_count == 0

    def test_mutation_replaces_corrupt_document(self, clock):
        storage = InMemoryStateStorage(raw="{broken")
        manager = FinanceStateManager(storage, clock=clock)

        manager.add_income(income(10))

        assert storage.raw != "{broken"
        assert manager.get_snapshot().balance == 10

    def test_failed_save_is_not_surfaced(self, clock, audit_logger):
        """Test the response reflects the mutation even if the write fails."""
        storage = InMemoryStateStorage(
            raw=encode_state(new_finance_state(clock())),
            fail_saves=True,
        )
        manager = FinanceStateManager(storage, audit_logger, clock=clock)

        state = manager.add_income(income(25))

        assert state.balance == 25
        assert AuditEventType.SAVE_FAILED in event_types(audit_logger)
        # The mutation is lost on the next read
        assert manager.get_snapshot().balance == 0

    def test_exception_in_operation_releases_lock(self, manager, audit_logger):
        """Test a failing mutation does not leave the manager locked."""
        with pytest.raises(AttributeError):
            manager.add_income(None)

        errors = [
            e for e in audit_logger.events
            if e.event_type == AuditEventType.SYSTEM_ERROR
        ]
        assert len(errors) == 1
        assert errors[0].description == "System error: AttributeError"

        assert manager.add_income(income(1)).balance == 1

    def test_overflowing_total_is_rejected(self, manager, storage, audit_logger):
        """Test a mutation that overflows the balance is not saved."""
        manager.add_income(income(1.7e308))
        saved = storage.raw

        with pytest.raises(NonFiniteStateError):
            manager.add_income(income(1.7e308))

        assert storage.raw == saved
        assert manager.get_snapshot().balance == 1.7e308
        assert AuditEventType.SYSTEM_ERROR in event_types(audit_logger)


class TestConcurrency:
    """The lock serializes every load-mutate-save span."""

    def test_parallel_writers_lose_nothing(self, manager):
        threads_count = 8
        per_thread = 25

        def worker():
            for _ in range(per_thread):
                manager.add_income(income(2))
                manager.add_expense(expense(1))

        threads = [threading.Thread(target=worker) for _ in range(threads_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        state = manager.get_snapshot()
        total = threads_count * per_thread
        assert len(state.incomes) == total
        assert len(state.expenses) == total
        assert state.balance == total
        assert state.yearly_stats[2024][3].incomes == total * 2
        assert state.weekly_stats.days[1].expenses == total


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_uses_configured_json_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FINANCE_STORAGE_DATA_FILE", str(tmp_path / "data.json"))
        monkeypatch.setenv("PERSIST_ROLLOVER_ON_READ", "false")

        manager = create_app_components(Settings())

        assert isinstance(manager.storage, JsonFileStateStorage)
        assert manager.storage.path == tmp_path / "data.json"
        assert manager._persist_rollover_on_read is False

    def test_storage_override(self):
        storage = InMemoryStateStorage()
        logger = AuditLogger()
        manager = create_app_components(Settings(), storage=storage, audit_logger=logger)
        assert manager.storage is storage
        assert manager.audit_logger is logger

    def test_validate_all_settings_reports_errors(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "loud")
        get_settings.cache_clear()
        try:
            results = validate_all_settings()
        finally:
            get_settings.cache_clear()

        assert results["storage"] is True
        assert results["server"] is True
        assert results["app"] is False
        assert "Unknown log level" in results["app_error"]
        assert "app_environment" not in Settings().app.model_dump()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
