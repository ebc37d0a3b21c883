"""
Core Data Models for the Finance Tracker

The whole persistent state is ONE document: FinanceState.
Every operation loads it, mutates it in memory and writes it back.

These models define:
1. The persisted document and its nested statistics
2. The request payloads accepted by the HTTP API

DESIGN DECISION: Field names are snake_case and map 1:1 to the JSON keys
on disk and on the wire. No aliases, no translation layer.
"""

import math
from datetime import date
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


DAYS_PER_WEEK = 7


# =============================================================================
# STATISTICS
# =============================================================================

class DayStats(BaseModel):
    """Income/expense totals for one day of the live week."""
    model_config = ConfigDict(allow_inf_nan=False)

    incomes: float = 0.0
    expenses: float = 0.0


class MonthStats(BaseModel):
    """
    Accumulated totals for one calendar month.

    Totals are never attributable back to individual transactions.
    """
    model_config = ConfigDict(allow_inf_nan=False)

    incomes: float = 0.0
    expenses: float = 0.0


def _empty_week() -> list[DayStats]:
    return [DayStats() for _ in range(DAYS_PER_WEEK)]


class WeekStats(BaseModel):
    """
    The single live week window.

    days[0] is Monday, days[6] is Sunday.
    """
    start_date: str = Field(
        default="",
        description="ISO date of the Monday that starts the window"
    )
    days: list[DayStats] = Field(
        default_factory=_empty_week,
        description="Exactly seven entries, Monday first"
    )

    @field_validator('days')
    @classmethod
    def validate_seven_days(cls, v: list[DayStats]) -> list[DayStats]:
        if len(v) != DAYS_PER_WEEK:
            raise ValueError(
                f"Week must have exactly {DAYS_PER_WEEK} days, got {len(v)}"
            )
        return v

    @classmethod
    def starting(cls, monday: date) -> "WeekStats":
        """Fresh all-zero window starting on the given Monday."""
        return cls(start_date=monday.isoformat())


# =============================================================================
# TRANSACTIONS & DOCUMENT
# =============================================================================

class Transaction(BaseModel):
    """
    One entry of the income or expense log.

    The amount is always positive - the sign is implied by which
    log the transaction lives in.

    NOTE: `date` is free text supplied by the user. It is stored verbatim
    and is NOT used for bucketing statistics.
    """
    model_config = ConfigDict(allow_inf_nan=False)

    amount: float = 0.0
    date: str = ""
    note: str = ""


class FinanceState(BaseModel):
    """
    The single persisted finance document.

    A default-constructed FinanceState is the zero-valued fallback
    returned when nothing usable is persisted. Its watermarks are 0,
    so the first read rolls both windows over to "now".
    """
    model_config = ConfigDict(allow_inf_nan=False)

    balance: float = Field(
        default=0.0,
        description="Sum of all incomes minus all expenses"
    )
    savings: float = Field(
        default=0.0,
        description="Latest savings amount set by the user (overwritten)"
    )
    incomes: list[Transaction] = Field(default_factory=list)
    expenses: list[Transaction] = Field(default_factory=list)

    # year -> month (1-12) -> totals. JSON keys are stringified ints.
    yearly_stats: dict[int, dict[int, MonthStats]] = Field(default_factory=dict)
    weekly_stats: WeekStats = Field(default_factory=WeekStats)

    # Rollover watermarks
    last_reset_week: int = Field(
        default=0,
        description="ISO week number of the live week window"
    )
    last_reset_year: int = Field(
        default=0,
        description="Calendar year represented by yearly_stats"
    )

    @property
    def total_incomes(self) -> float:
        return sum(t.amount for t in self.incomes)

    @property
    def total_expenses(self) -> float:
        return sum(t.amount for t in self.expenses)

    def month_stats(self, year: int, month: int) -> Optional[MonthStats]:
        """Get the totals for a month, or None if nothing was recorded."""
        return self.yearly_stats.get(year, {}).get(month)

    def ensure_finite(self) -> None:
        """
        Check every total is a finite number.

        JSON has no representation for inf/NaN, so a document holding one
        could not be read back after saving.

        Raises:
            NonFiniteStateError: If any total overflowed or is NaN
        """
        totals = {"balance": self.balance, "savings": self.savings}
        for i, day in enumerate(self.weekly_stats.days):
            totals[f"weekly_stats.days[{i}].incomes"] = day.incomes
            totals[f"weekly_stats.days[{i}].expenses"] = day.expenses
        for year, months in self.yearly_stats.items():
            for month, stats in months.items():
                totals[f"yearly_stats[{year}][{month}].incomes"] = stats.incomes
                totals[f"yearly_stats[{year}][{month}].expenses"] = stats.expenses

        for name, value in totals.items():
            if not math.isfinite(value):
                raise NonFiniteStateError(f"{name} is not a finite number")


class NonFiniteStateError(ValueError):
    """A mutation pushed a total out of the finite float range."""
    pass


# =============================================================================
# REQUEST PAYLOADS
# =============================================================================

class TransactionRequest(BaseModel):
    """
    Payload for add-income / add-expense.

    Missing fields fall back to zero values.
    """
    model_config = ConfigDict(allow_inf_nan=False)

    amount: float = Field(
        default=0.0,
        ge=0,
        description="Positive amount; the endpoint decides the sign"
    )
    date: str = Field(
        default="",
        description="User-supplied date, stored verbatim"
    )
    note: str = Field(
        default="",
        description="Free-text description"
    )

    def to_transaction(self) -> Transaction:
        return Transaction(amount=self.amount, date=self.date, note=self.note)


class SavingsRequest(BaseModel):
    """Payload for update-savings."""
    model_config = ConfigDict(allow_inf_nan=False)

    amount: float = Field(
        default=0.0,
        description="New savings amount (replaces the previous value)"
    )
