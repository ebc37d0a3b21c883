"""
Statistics Aggregation

Accumulates income/expense amounts into the live week window and the
per-year/per-month totals of a FinanceState.

This is pure accumulation: it never removes data and never fails.
Clearing stale buckets is the job of the rollover policy.
"""

from datetime import date

from finance_tracker.models.finance import FinanceState, MonthStats


def weekday_index(d: date) -> int:
    """
    Position of a date in the week window: Monday = 0 ... Sunday = 6.
    """
    return d.weekday()


def record_transaction(
    state: FinanceState,
    income_amount: float,
    expense_amount: float,
    effective_date: date,
) -> None:
    """
    Add amounts to the weekly and yearly statistics.

    Callers pass one non-zero amount per call: an income is recorded as
    (amount, 0), an expense as (0, amount).

    Args:
        state: Document to mutate in place
        income_amount: Amount to add to the income side
        expense_amount: Amount to add to the expense side
        effective_date: Date deciding the weekday and month buckets
    """
    day = state.weekly_stats.days[weekday_index(effective_date)]
    day.incomes += income_amount
    day.expenses += expense_amount

    months = state.yearly_stats.setdefault(effective_date.year, {})
    month = months.setdefault(effective_date.month, MonthStats())
    month.incomes += income_amount
    month.expenses += expense_amount
