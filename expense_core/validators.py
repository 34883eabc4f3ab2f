"""Validation helpers shared across expense tracker services."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from .exceptions import ValidationError
from .models import DEFAULT_DESCRIPTION, parse_date, quantize_cents

DESCRIPTION_MAX_LENGTH = 200


def _is_blank(raw: object) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def parse_amount(raw: object, field: str) -> Decimal:
    """Convert raw input to a positive Decimal with exactly two fraction digits."""
    if _is_blank(raw):
        raise ValidationError(f"{field} is required")
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")

    amount = quantize_cents(amount)
    if amount <= 0:
        raise ValidationError(f"{field} must be at least 0.01")
    return amount


def validate_date(value: object, field: str) -> date:
    if _is_blank(value):
        raise ValidationError(f"{field} is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a date or YYYY-MM-DD string")
    try:
        return parse_date(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be a valid date in YYYY-MM-DD format") from exc


def validate_optional_date(value: object, field: str) -> Optional[date]:
    if _is_blank(value):
        return None
    return validate_date(value, field)


def validate_enum(value: object, field: str, allowed: Iterable[str]) -> str:
    if _is_blank(value):
        raise ValidationError(f"{field} is required")
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = value.strip().lower()
    if canonical not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(allowed)}")
    return canonical


def normalize_description(value: object, field: str = "description") -> str:
    """Trim the description, substituting the default label when blank."""
    if _is_blank(value):
        return DEFAULT_DESCRIPTION
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if len(trimmed) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"{field} must be at most {DESCRIPTION_MAX_LENGTH} characters")
    return trimmed
