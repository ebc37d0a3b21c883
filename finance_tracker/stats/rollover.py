"""
Statistics Rollover Policy

The document keeps exactly one live week and the months of the current
year. Two watermarks record which window the statistics belong to:
- last_reset_week: ISO-8601 week number (1-53)
- last_reset_year: calendar year

Whenever "now" no longer matches a watermark, the matching statistics are
cleared and the watermark moves. The two checks are independent.

KNOWN QUIRKS (kept on purpose, they are observable behaviour):
1. A year rollover clears the ENTIRE yearly map, not just the stale year.
2. The week check compares week numbers only. A document untouched for
   exactly a whole number of years can keep a stale week window.
"""

from datetime import date, datetime, timedelta

from pydantic import BaseModel

from finance_tracker.models.finance import FinanceState, WeekStats


class RolloverResult(BaseModel):
    """What apply_rollover changed."""
    year_reset: bool = False
    week_reset: bool = False

    @property
    def changed(self) -> bool:
        return self.year_reset or self.week_reset


def iso_week_number(d: date) -> int:
    """ISO-8601 week number: week 1 contains the year's first Thursday."""
    return d.isocalendar()[1]


def start_of_week(d: date) -> date:
    """
    The most recent Monday on or before d.

    Sunday belongs to the week that started six days earlier.
    """
    if isinstance(d, datetime):
        d = d.date()
    return d - timedelta(days=d.weekday())


def apply_rollover(state: FinanceState, now: datetime) -> RolloverResult:
    """
    Clear statistics whose window has passed.

    Mutates the state in place.

    Args:
        state: Document to check
        now: Current instant

    Returns:
        RolloverResult describing which resets happened
    """
    result = RolloverResult()

    current_year = now.year
    current_week = iso_week_number(now)

    if current_year != state.last_reset_year:
        state.yearly_stats = {}
        state.last_reset_year = current_year
        result.year_reset = True

    if current_week != state.last_reset_week:
        state.weekly_stats = WeekStats.starting(start_of_week(now))
        state.last_reset_week = current_week
        result.week_reset = True

    return result


def new_finance_state(now: datetime) -> FinanceState:
    """
    The document written on first start.

    Empty logs and statistics, watermarks pointing at "now".
    """
    return FinanceState(
        weekly_stats=WeekStats.starting(start_of_week(now)),
        last_reset_week=iso_week_number(now),
        last_reset_year=now.year,
    )
