"""
Audit Models for the Finance Tracker

Every state transition of the finance document is logged.
This provides:
1. Traceability of each balance change
2. Debugging information when storage misbehaves
3. Visibility into silent fallbacks (missing/corrupt document, failed writes)

DESIGN DECISION: Audit events are emitted to the structured log only.
Historical retention is not a goal of this system.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field


STATE_ENTITY = "finance_state"
REQUEST_ENTITY = "request"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Document lifecycle
    STATE_CREATED = "state_created"
    STATE_LOAD_FALLBACK = "state_load_fallback"
    STATS_ROLLED_OVER = "stats_rolled_over"

    # Mutations
    INCOME_RECORDED = "income_recorded"
    EXPENSE_RECORDED = "expense_recorded"
    SAVINGS_UPDATED = "savings_updated"

    # Persistence
    SAVE_FAILED = "save_failed"

    # API boundary
    REQUEST_REJECTED = "request_rejected"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    entity_type: Optional[str] = Field(
        default=None,
        description="What the event is about (e.g., 'finance_state', 'request')"
    )

    # Correlation - one id per API request
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate the events of one request"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user request?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.income_recorded(100.0, 100.0, correlation_id)
        event = AuditEventBuilder.save_failed("disk full", correlation_id)
    """

    @staticmethod
    def state_created(
        start_date: str,
        week: int,
        year: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_CREATED,
            entity_type=STATE_ENTITY,
            description="Fresh finance document created",
            details={
                "start_date": start_date,
                "last_reset_week": week,
                "last_reset_year": year,
            },
        )

    @staticmethod
    def state_load_fallback(
        status: str,
        error_message: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOAD_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type=STATE_ENTITY,
            correlation_id=correlation_id,
            description=f"Stored document unusable ({status}), using empty state",
            details={"status": status},
            error_message=error_message,
        )

    @staticmethod
    def stats_rolled_over(
        year_reset: bool,
        week_reset: bool,
        year: int,
        week: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATS_ROLLED_OVER,
            entity_type=STATE_ENTITY,
            correlation_id=correlation_id,
            description=f"Statistics rolled over to week {week} of {year}",
            details={
                "year_reset": year_reset,
                "week_reset": week_reset,
                "last_reset_year": year,
                "last_reset_week": week,
            },
        )

    @staticmethod
    def income_recorded(
        amount: float,
        balance: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INCOME_RECORDED,
            entity_type=STATE_ENTITY,
            correlation_id=correlation_id,
            description=f"Income recorded: {amount:.2f}",
            details={"amount": amount, "balance": balance},
            is_user_action=True,
        )

    @staticmethod
    def expense_recorded(
        amount: float,
        balance: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_RECORDED,
            entity_type=STATE_ENTITY,
            correlation_id=correlation_id,
            description=f"Expense recorded: {amount:.2f}",
            details={"amount": amount, "balance": balance},
            is_user_action=True,
        )

    @staticmethod
    def savings_updated(
        previous: float,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVINGS_UPDATED,
            entity_type=STATE_ENTITY,
            correlation_id=correlation_id,
            description=f"Savings set to {amount:.2f}",
            details={"previous": previous, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=STATE_ENTITY,
            correlation_id=correlation_id,
            description="Finance document could not be persisted",
            error_message=error_message,
        )

    @staticmethod
    def request_rejected(
        path: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REQUEST_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=REQUEST_ENTITY,
            correlation_id=correlation_id,
            description=f"Request rejected: {path}",
            details={"path": path},
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
