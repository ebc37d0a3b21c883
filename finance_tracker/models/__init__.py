"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.finance import (
    DAYS_PER_WEEK,
    DayStats,
    FinanceState,
    MonthStats,
    NonFiniteStateError,
    SavingsRequest,
    Transaction,
    TransactionRequest,
    WeekStats,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "DAYS_PER_WEEK",
    "DayStats",
    "FinanceState",
    "MonthStats",
    "NonFiniteStateError",
    "SavingsRequest",
    "Transaction",
    "TransactionRequest",
    "WeekStats",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
