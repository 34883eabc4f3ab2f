"""Framework-agnostic business services for the expense tracker."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import analytics
from .exceptions import InvalidDataError, NotFoundError, PersistenceError
from .filters import FilterCriteria, filter_expenses
from .models import EXPENSE_CATEGORIES, Expense
from .storage import JSONStorage
from .validators import normalize_description, parse_amount, validate_date, validate_enum

logger = logging.getLogger(__name__)

STORAGE_KEY = "expenseTrackerData"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExpenseService:
    """Owns the expense collection and mediates persistence.

    The collection is kept sorted by date, newest first. Records sharing a
    date keep their insertion order, most recent insertion first. Every
    mutation rewrites the whole collection.
    """

    def __init__(
        self,
        storage: JSONStorage,
        key: str = STORAGE_KEY,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock
        self._expenses: List[Expense] = []
        # Stored payloads that could not be parsed, kept so saving never drops them.
        self._invalid: List[Tuple[Any, str]] = []
        self._last_issued_id = 0
        self.load()  # Hydrate in-memory cache from persistence on construction.

    # Public API -----------------------------------------------------------
    def add(self, payload: Dict[str, object]) -> Expense:
        data = self._validate_payload(payload)
        expense = Expense(id=self._issue_id(), **data)
        self._commit([expense] + self._expenses)
        logger.info("Added expense %s (%s %s)", expense.id, expense.category, expense.amount)
        return expense

    def update(self, expense_id: str, changes: Dict[str, object]) -> Expense:
        """Replace the given fields of an expense, keeping its id.

        Only the fields present in ``changes`` are validated, so a stored
        record with a legacy category can still have its amount corrected.
        """
        index = self._index_or_raise(expense_id)
        existing = self._expenses[index]
        data = {
            "date": existing.date,
            "category": existing.category,
            "amount": existing.amount,
            "description": existing.description,
        }
        data.update(self._validate_payload(changes, partial=True))
        updated = Expense(id=existing.id, **data)
        expenses = list(self._expenses)
        expenses[index] = updated
        self._commit(expenses)
        logger.info("Updated expense %s", updated.id)
        return updated

    def delete(self, expense_id: str) -> bool:
        """Remove an expense; an unknown id is a no-op and returns False."""
        index = self._find_index(expense_id)
        if index is None:
            logger.debug("Delete ignored, expense %s not found", expense_id)
            return False
        self._commit(self._expenses[:index] + self._expenses[index + 1:])
        logger.info("Deleted expense %s", expense_id)
        return True

    def get(self, expense_id: str) -> Expense:
        """Return an expense or raise if it does not exist."""
        return self._expenses[self._index_or_raise(expense_id)]

    def list(self, criteria: Optional[FilterCriteria] = None) -> List[Expense]:
        return filter_expenses(self._expenses, criteria)

    def load(self) -> List[Expense]:
        """Load existing expenses from persistence, skipping unreadable records."""
        raw_records = self._storage.load(self._key)
        expenses: List[Expense] = []
        invalid: List[Tuple[Any, str]] = []
        seen = set()
        for payload in raw_records:
            try:
                expense = Expense.from_dict(payload)
            except InvalidDataError as exc:
                logger.warning("Skipping unreadable stored expense: %s", exc)
                invalid.append((payload, str(exc)))
                continue
            if expense.id in seen:
                reason = f"Duplicate expense id {expense.id}"
                logger.warning("Skipping stored expense: %s", reason)
                invalid.append((payload, reason))
                continue
            seen.add(expense.id)
            expenses.append(expense)
        self._expenses = _sorted(expenses)
        self._invalid = invalid
        self._last_issued_id = max(
            [self._last_issued_id] + [_numeric_id(expense.id) for expense in expenses]
            + [_numeric_id(payload.get("id")) for payload, _ in invalid if isinstance(payload, dict)]
        )
        return list(self._expenses)

    @property
    def invalid_records(self) -> List[Tuple[Any, str]]:
        """Stored payloads skipped during load, with the reason for each."""
        return list(self._invalid)

    # Internal helpers -----------------------------------------------------
    def _commit(self, expenses: List[Expense]) -> None:
        # Swap the new collection in only once it is on disk.
        expenses = _sorted(expenses)
        self._persist(expenses)
        self._expenses = expenses

    def _persist(self, expenses: List[Expense]) -> None:
        records: List[Any] = [expense.to_dict() for expense in expenses]
        records.extend(payload for payload, _ in self._invalid)
        try:
            self._storage.save(self._key, records)
        except PersistenceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive guard
            raise PersistenceError("Unexpected error while saving expenses") from exc

    def _issue_id(self) -> str:
        millis = int(self._clock().timestamp() * 1000)
        self._last_issued_id = max(millis, self._last_issued_id + 1)
        return str(self._last_issued_id)

    def _find_index(self, expense_id: str) -> Optional[int]:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        return None

    def _index_or_raise(self, expense_id: str) -> int:
        index = self._find_index(expense_id)
        if index is None:
            raise NotFoundError(f"Expense {expense_id} not found")
        return index

    def _validate_payload(
        self, payload: Dict[str, object], *, partial: bool = False
    ) -> Dict[str, object]:
        # With partial=True, fields absent from the payload are left out of the result.
        checks: Dict[str, Callable[[object], object]] = {
            "date": lambda value: validate_date(value, "date"),
            "category": lambda value: validate_enum(value, "category", EXPENSE_CATEGORIES),
            "amount": lambda value: parse_amount(value, "amount"),
            "description": normalize_description,
        }
        return {
            field: check(payload.get(field))
            for field, check in checks.items()
            if not partial or field in payload
        }


class DashboardService:
    """Builds the view model handed to presentation layers after each change."""

    def __init__(
        self,
        expense_service: ExpenseService,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._expenses = expense_service
        self._clock = clock

    def snapshot(
        self,
        criteria: Optional[FilterCriteria] = None,
        now: Optional[analytics.Moment] = None,
    ) -> Dict[str, object]:
        """Return serialisable dashboard data.

        Only the expense table honours ``criteria``; totals, breakdowns and
        series always cover the whole collection.
        """
        moment = now if now is not None else self._clock()
        records = self._expenses.list()
        visible = filter_expenses(records, criteria)
        return {
            "expenses": [expense.to_dict() for expense in visible],
            "filtered_total": f"{analytics.total_sum(visible):.2f}",
            "totals": {
                "all_time": f"{analytics.total_sum(records):.2f}",
                "week": f"{analytics.current_week_sum(records, moment):.2f}",
                "month": f"{analytics.current_month_sum(records, moment):.2f}",
            },
            "category_totals": {
                category: f"{amount:.2f}"
                for category, amount in analytics.category_totals(records).items()
            },
            "category_chart": analytics.category_chart(records),
            "weekly": analytics.weekly_series(records, moment).to_dict(),
            "monthly": analytics.monthly_series(records, moment).to_dict(),
            "skipped_records": len(self._expenses.invalid_records),
        }


def _numeric_id(value: object) -> int:
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return 0


def _sorted(expenses: List[Expense]) -> List[Expense]:
    # sorted() is stable, so same-day records keep their relative order.
    return sorted(expenses, key=lambda expense: expense.date, reverse=True)
