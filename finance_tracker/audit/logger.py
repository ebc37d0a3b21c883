"""
Audit Logger

DESIGN DECISION: Every state transition of the finance document is logged.
This provides:
1. Traceability of balance and savings changes
2. Debugging capability
3. Visibility into failures the API deliberately does not surface
   (corrupt document fallback, failed writes)

The audit logger:
- Is synchronous - it runs inside the state lock, next to the file I/O
- Gracefully handles failures (never crashes an operation if logging fails)
- Supports correlation IDs to trace the events of one request
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging and structlog.

    Events are rendered as JSON lines on stderr.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    logging.getLogger().setLevel(level.upper())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Writes AuditEvents to the structured log, at a level matching
    the event severity.
    """

    def __init__(self, logger_name: str = "finance_tracker.audit"):
        self._logger = structlog.get_logger(logger_name)
        self.events: list[AuditEvent] = []
        self._keep_events = False

    def keep_events(self, enabled: bool = True) -> "AuditLogger":
        """Also retain emitted events in memory (used by tests)."""
        self._keep_events = enabled
        return self

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        if self._keep_events:
            self.events.append(event)

        log_dict = event.to_log_dict()

        try:
            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Logging must never break a state transition
            print(f"Warning: audit logging failed: {e}", file=sys.stderr)
            return False

        return True

    def log_state_created(self, start_date: str, week: int, year: int) -> None:
        """Log creation of a fresh document."""
        self.log(AuditEventBuilder.state_created(start_date, week, year))

    def log_load_fallback(
        self,
        status: str,
        error_message: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log that the stored document was replaced by the empty state."""
        self.log(AuditEventBuilder.state_load_fallback(
            status=status,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_rollover(
        self,
        year_reset: bool,
        week_reset: bool,
        year: int,
        week: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a statistics reset."""
        self.log(AuditEventBuilder.stats_rolled_over(
            year_reset=year_reset,
            week_reset=week_reset,
            year=year,
            week=week,
            correlation_id=correlation_id,
        ))

    def log_income_recorded(
        self,
        amount: float,
        balance: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.income_recorded(amount, balance, correlation_id))

    def log_expense_recorded(
        self,
        amount: float,
        balance: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_recorded(amount, balance, correlation_id))

    def log_savings_updated(
        self,
        previous: float,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.savings_updated(previous, amount, correlation_id))

    def log_save_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a write the caller will never hear about."""
        self.log(AuditEventBuilder.save_failed(error_message, correlation_id))

    def log_request_rejected(
        self,
        path: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.request_rejected(path, reason, correlation_id))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of each API request.
    Pass it through all subsequent operations.
    """
    return uuid4()
