"""Data models for the expense tracker domain."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict

from .exceptions import InvalidDataError

__all__ = [
    "CATEGORY_COLORS",
    "DEFAULT_DESCRIPTION",
    "EXPENSE_CATEGORIES",
    "Expense",
    "category_color",
    "category_label",
    "parse_date",
    "quantize_cents",
]

EXPENSE_CATEGORIES = (
    "fuel",
    "food",
    "travel",
    "utilities",
    "entertainment",
    "shopping",
    "other",
)

CATEGORY_COLORS = {
    "fuel": "#f59e0b",
    "food": "#10b981",
    "travel": "#3b82f6",
    "utilities": "#8b5cf6",
    "entertainment": "#ec4899",
    "shopping": "#f97316",
    "other": "#6b7280",
}

DEFAULT_DESCRIPTION = "No description"

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def category_color(category: str) -> str:
    """Return the display color for a category, falling back to the 'other' color."""
    return CATEGORY_COLORS.get(category, CATEGORY_COLORS["other"])


def category_label(category: str) -> str:
    return category[:1].upper() + category[1:]


def parse_date(value: str) -> date:
    """Parse an ISO 8601 calendar date written exactly as YYYY-MM-DD."""
    value = value.strip()
    if not DATE_PATTERN.fullmatch(value):
        raise ValueError(f"Expected YYYY-MM-DD, got {value!r}")
    return date.fromisoformat(value)


def quantize_cents(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Expense:
    id: str
    date: date
    category: str
    amount: Decimal
    description: str = DEFAULT_DESCRIPTION

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "category": self.category,
            "amount": f"{self.amount:.2f}",
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        """Hydrate an Expense from stored data.

        Stored records are trusted for shape only: anything that cannot be
        turned into a dated, positive amount raises InvalidDataError so the
        caller can skip the record instead of failing the whole load.
        """
        if not isinstance(data, dict):
            raise InvalidDataError(f"Expected an object, got {type(data).__name__}")
        try:
            record_id = "" if data["id"] is None else str(data["id"]).strip()
            raw_date = data["date"]
            category = data["category"]
            amount = Decimal(str(data["amount"]))
        except KeyError as exc:
            raise InvalidDataError(f"Stored expense is missing field {exc.args[0]!r}") from exc
        except InvalidOperation as exc:
            raise InvalidDataError(f"Stored expense has a non-numeric amount: {data.get('amount')!r}") from exc

        if not record_id:
            raise InvalidDataError("Stored expense has an empty id")
        if not isinstance(raw_date, str):
            raise InvalidDataError(f"Stored expense {record_id} has a non-string date")
        try:
            parsed_date = parse_date(raw_date)
        except ValueError as exc:
            raise InvalidDataError(f"Stored expense {record_id} has an unparsable date: {raw_date!r}") from exc
        if not isinstance(category, str) or not category.strip():
            raise InvalidDataError(f"Stored expense {record_id} has no category")
        if not amount.is_finite():
            raise InvalidDataError(f"Stored expense {record_id} has a non-finite amount")
        # Amounts are held in cents so that saving writes back exactly what was loaded.
        amount = quantize_cents(amount)
        if amount <= 0:
            raise InvalidDataError(f"Stored expense {record_id} has a non-positive amount")

        description = data.get("description")
        if not isinstance(description, str) or not description.strip():
            description = DEFAULT_DESCRIPTION
        return cls(
            id=record_id,
            date=parsed_date,
            category=category.strip(),
            amount=amount,
            description=description.strip(),
        )
