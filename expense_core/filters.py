"""Filtering of expense records by category and date range."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Mapping, Optional

from .models import Expense
from .validators import validate_optional_date

__all__ = ["FilterCriteria", "filter_expenses"]


@dataclass(frozen=True)
class FilterCriteria:
    """Optional constraints applied to the expense table.

    Absent fields act as wildcards; present ones are ANDed together. Both
    ends of the date range are inclusive.
    """

    category: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> "FilterCriteria":
        """Build criteria from string input such as query parameters or CLI flags."""
        category = raw.get("category")
        if isinstance(category, str):
            category = category.strip().lower() or None
        elif category is not None:
            category = str(category)
        return cls(
            category=category,
            date_from=validate_optional_date(raw.get("date_from"), "date_from"),
            date_to=validate_optional_date(raw.get("date_to"), "date_to"),
        )

    @property
    def is_empty(self) -> bool:
        return self.category is None and self.date_from is None and self.date_to is None

    def matches(self, expense: Expense) -> bool:
        if self.category is not None and expense.category != self.category:
            return False
        if self.date_from is not None and expense.date < self.date_from:
            return False
        if self.date_to is not None and expense.date > self.date_to:
            return False
        return True


def filter_expenses(
    records: Iterable[Expense], criteria: Optional[FilterCriteria] = None
) -> List[Expense]:
    """Return the records matching ``criteria``, keeping their relative order."""
    if criteria is None or criteria.is_empty:
        return list(records)
    return [expense for expense in records if criteria.matches(expense)]
