"""Weekly/yearly statistics package."""

from finance_tracker.stats.aggregation import record_transaction, weekday_index
from finance_tracker.stats.rollover import (
    RolloverResult,
    apply_rollover,
    iso_week_number,
    new_finance_state,
    start_of_week,
)

__all__ = [
    "RolloverResult",
    "apply_rollover",
    "iso_week_number",
    "new_finance_state",
    "record_transaction",
    "start_of_week",
    "weekday_index",
]
