from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from expense_core.exceptions import ValidationError
from expense_core.models import DEFAULT_DESCRIPTION, EXPENSE_CATEGORIES
from expense_core.validators import (
    normalize_description,
    parse_amount,
    validate_date,
    validate_enum,
    validate_optional_date,
)


def test_parse_amount_rounds_to_cents() -> None:
    assert parse_amount("10.005", "amount") == Decimal("10.01")
    assert parse_amount(7, "amount") == Decimal("7.00")


@pytest.mark.parametrize("raw", [None, "", "0", "-5", "abc", "NaN", "Infinity", "0.001", True])
def test_parse_amount_rejects_invalid_values(raw) -> None:
    with pytest.raises(ValidationError):
        parse_amount(raw, "amount")


def test_validate_date_accepts_strings_and_dates() -> None:
    assert validate_date("2024-06-12", "date") == date(2024, 6, 12)
    assert validate_date(date(2024, 6, 12), "date") == date(2024, 6, 12)
    assert validate_date(datetime(2024, 6, 12, 18, 30), "date") == date(2024, 6, 12)


@pytest.mark.parametrize("raw", [None, "", "12/06/2024", "2024-13-01", "2024-6-1", "20240612", 20240612])
def test_validate_date_rejects_invalid_values(raw) -> None:
    with pytest.raises(ValidationError):
        validate_date(raw, "date")


def test_validate_optional_date_treats_blank_as_absent() -> None:
    assert validate_optional_date("", "date_from") is None
    assert validate_optional_date(None, "date_from") is None


def test_validate_enum_normalises_case() -> None:
    assert validate_enum(" Food ", "category", EXPENSE_CATEGORIES) == "food"
    with pytest.raises(ValidationError):
        validate_enum("groceries", "category", EXPENSE_CATEGORIES)


def test_normalize_description() -> None:
    assert normalize_description(None) == DEFAULT_DESCRIPTION
    assert normalize_description("   ") == DEFAULT_DESCRIPTION
    assert normalize_description("  Lunch ") == "Lunch"
    with pytest.raises(ValidationError):
        normalize_description("x" * 201)
