from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from expense_core.exceptions import InvalidDataError
from expense_core.models import (
    DEFAULT_DESCRIPTION,
    Expense,
    category_color,
    category_label,
    parse_date,
)


def test_to_dict_uses_flat_storage_shape() -> None:
    expense = Expense(
        id="1718000000000",
        date=date(2024, 6, 10),
        category="food",
        amount=Decimal("12.50"),
        description="Lunch",
    )
    assert expense.to_dict() == {
        "id": "1718000000000",
        "date": "2024-06-10",
        "category": "food",
        "amount": "12.50",
        "description": "Lunch",
    }


def test_from_dict_accepts_numeric_amounts_and_fills_blank_description() -> None:
    expense = Expense.from_dict(
        {"id": 42, "date": "2024-01-01", "category": "fuel", "amount": 30.5, "description": "  "}
    )
    assert expense.id == "42"
    assert expense.amount == Decimal("30.5")
    assert expense.description == DEFAULT_DESCRIPTION


def test_from_dict_keeps_unrecognised_categories() -> None:
    expense = Expense.from_dict(
        {"id": "1", "date": "2024-01-01", "category": "pets", "amount": "4.00"}
    )
    assert expense.category == "pets"
    assert category_color(expense.category) == category_color("other")


@pytest.mark.parametrize(
    "payload",
    [
        {"date": "2024-01-01", "category": "food", "amount": "1"},
        {"id": "1", "date": "01/02/2024", "category": "food", "amount": "1"},
        {"id": "1", "date": "2024-02-30", "category": "food", "amount": "1"},
        {"id": "1", "date": "2024-01-01", "category": "food", "amount": "abc"},
        {"id": "1", "date": "2024-01-01", "category": "food", "amount": "-3"},
        {"id": "1", "date": "2024-01-01", "category": "", "amount": "3"},
        {"id": None, "date": "2024-01-01", "category": "food", "amount": "3"},
        ["not", "a", "record"],
    ],
)
def test_from_dict_rejects_malformed_records(payload) -> None:
    with pytest.raises(InvalidDataError):
        Expense.from_dict(payload)


def test_category_label_capitalises_first_letter() -> None:
    assert category_label("entertainment") == "Entertainment"
    assert category_color("travel") == "#3b82f6"


@pytest.mark.parametrize("raw", ["2024-6-1", "20240601", "2024-06-01T10:00"])
def test_parse_date_requires_zero_padded_iso_dates(raw) -> None:
    with pytest.raises(ValueError):
        parse_date(raw)
    assert parse_date(" 2024-06-01 ") == date(2024, 6, 1)


def test_from_dict_rounds_amounts_to_cents() -> None:
    expense = Expense.from_dict({"id": "1", "date": "2024-01-01", "category": "food", "amount": 12.345})
    assert expense.amount == Decimal("12.35")
    assert expense.to_dict()["amount"] == "12.35"


def test_from_dict_rejects_amounts_that_round_to_zero() -> None:
    with pytest.raises(InvalidDataError):
        Expense.from_dict({"id": "1", "date": "2024-01-01", "category": "food", "amount": 0.004})
