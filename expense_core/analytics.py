"""Aggregations over expense records: totals, category breakdowns and time series.

Every function is pure. The reference instant ``now`` is always passed in by
the caller; a plain ``date`` stands for the whole of that day.
"""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, NamedTuple, Tuple, Union

from .models import Expense, category_color, category_label

__all__ = [
    "Series",
    "category_chart",
    "category_totals",
    "current_month_sum",
    "current_week_sum",
    "month_start",
    "monthly_series",
    "total_sum",
    "week_start",
    "weekly_series",
]

Moment = Union[date, datetime]

WEEK = timedelta(days=7)
WEEKLY_BUCKETS = 4
MONTHLY_BUCKETS = 6
ZERO = Decimal("0.00")


class Series(NamedTuple):
    labels: List[str]
    values: List[Decimal]

    def to_dict(self) -> Dict[str, list]:
        """Chart-ready form; amounts become floats for the plotting side."""
        return {"labels": list(self.labels), "data": [float(value) for value in self.values]}


def _as_datetime(now: Moment) -> datetime:
    if isinstance(now, datetime):
        return now
    return datetime.combine(now, time.max)


def _sum_between(records: Iterable[Expense], start: date, end: date) -> Decimal:
    return sum(
        (expense.amount for expense in records if start <= expense.date <= end),
        start=ZERO,
    )


def week_start(now: Moment) -> date:
    """Return the most recent Sunday on or before ``now``."""
    today = _as_datetime(now).date()
    # date.weekday() counts from Monday == 0; shift so Sunday == 0.
    return today - timedelta(days=(today.weekday() + 1) % 7)


def month_start(now: Moment) -> date:
    return _as_datetime(now).date().replace(day=1)


def total_sum(records: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in records), start=ZERO)


def current_week_sum(records: Iterable[Expense], now: Moment) -> Decimal:
    return _sum_between(records, week_start(now), _as_datetime(now).date())


def current_month_sum(records: Iterable[Expense], now: Moment) -> Decimal:
    return _sum_between(records, month_start(now), _as_datetime(now).date())


def category_totals(records: Iterable[Expense]) -> Dict[str, Decimal]:
    """Sum amounts per category in order of first appearance; empty categories are omitted."""
    totals: Dict[str, Decimal] = {}
    for expense in records:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return totals


def category_chart(records: Iterable[Expense]) -> Dict[str, list]:
    totals = category_totals(records)
    return {
        "labels": [category_label(category) for category in totals],
        "data": [float(amount) for amount in totals.values()],
        "colors": [category_color(category) for category in totals],
    }


def weekly_series(records: Iterable[Expense], now: Moment) -> Series:
    """Totals for the current week and the three before it, oldest first."""
    records = list(records)
    moment = _as_datetime(now)
    anchor = week_start(moment)
    labels: List[str] = []
    values: List[Decimal] = []
    for weeks_ago in range(WEEKLY_BUCKETS - 1, -1, -1):
        start = anchor - weeks_ago * WEEK
        end = start + timedelta(days=6)
        values.append(_sum_between(records, start, end))
        elapsed = moment - datetime.combine(start, time.min, tzinfo=moment.tzinfo)
        labels.append(f"Week {math.ceil(elapsed / WEEK)}")
    return Series(labels, values)


def _shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def monthly_series(records: Iterable[Expense], now: Moment) -> Series:
    """Totals for the current calendar month and the five before it, oldest first."""
    records = list(records)
    today = _as_datetime(now).date()
    labels: List[str] = []
    values: List[Decimal] = []
    for months_ago in range(MONTHLY_BUCKETS - 1, -1, -1):
        year, month = _shift_month(today.year, today.month, -months_ago)
        last_day = calendar.monthrange(year, month)[1]
        values.append(_sum_between(records, date(year, month, 1), date(year, month, last_day)))
        labels.append(f"{calendar.month_abbr[month]} {year}")
    return Series(labels, values)
