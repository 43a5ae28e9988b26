"""Validation helpers shared across budget tracker services."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable

from .exceptions import ValidationError
from .models import parse_datetime

DAY_PATTERN = re.compile(r"^[+-]?[0-9]+$")

MIN_DAY = 1
MAX_DAY = 31

FREQUENCIES = {
    "monthly",
    "weekly",
    "yearly",
}

DEFAULT_FREQUENCY = "monthly"

DEDUCTION_CATEGORIES = {
    "housing",
    "transport",
    "insurance",
    "utilities",
    "subscription",
    "other",
}

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _to_decimal(raw: object, field: str) -> Decimal:
    if raw is None or isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    # Go through str() so JSON floats keep their shortest decimal form.
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError(f"{field} must be a numeric value") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return amount


def parse_amount(raw: object, field: str) -> Decimal:
    """Convert raw input to a positive Decimal with exactly two fraction digits."""
    amount = _to_decimal(raw, field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    quantized = _quantize_two_decimals(amount)
    if quantized <= 0:
        raise ValidationError(f"{field} must be at least 0.01")
    return quantized


def parse_non_negative_amount(raw: object, field: str) -> Decimal:
    amount = _to_decimal(raw, field)
    if amount < 0:
        raise ValidationError(f"{field} must not be negative")
    return _quantize_two_decimals(amount)


def parse_signed_amount(raw: object, field: str) -> Decimal:
    return _quantize_two_decimals(_to_decimal(raw, field))


def validate_day_of_month(raw: object, field: str) -> int:
    """Accept an int or integral numeric string within 1..31."""
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be an integer day of month")
    if isinstance(raw, int):
        day = raw
    elif isinstance(raw, str) and DAY_PATTERN.fullmatch(raw.strip()):
        day = int(raw.strip())
    else:
        raise ValidationError(f"{field} must be an integer day of month")
    if not MIN_DAY <= day <= MAX_DAY:
        raise ValidationError(f"{field} must be between {MIN_DAY} and {MAX_DAY}")
    return day


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_enum(value: object, field: str, allowed: Iterable[str]) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = value.strip().lower()
    if canonical not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(sorted(allowed))}")
    return canonical


def validate_datetime(value: object, field: str) -> datetime:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = parse_datetime(value)
        except ValueError as exc:
            raise ValidationError(f"{field} must be an ISO 8601 datetime") from exc
    else:
        raise ValidationError(f"{field} must be a datetime or ISO 8601 string")
    return dt.astimezone(timezone.utc)


def parse_bool(raw: object, field: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        canonical = raw.strip().lower()
        if canonical in _TRUE_STRINGS:
            return True
        if canonical in _FALSE_STRINGS:
            return False
    raise ValidationError(f"{field} must be a boolean flag")
