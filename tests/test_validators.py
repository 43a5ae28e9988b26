from datetime import datetime, timezone
from decimal import Decimal

import pytest

from budget.exceptions import ValidationError
from budget.validators import (
    DEDUCTION_CATEGORIES,
    FREQUENCIES,
    parse_amount,
    parse_bool,
    parse_non_negative_amount,
    parse_signed_amount,
    validate_datetime,
    validate_day_of_month,
    validate_enum,
    validate_required_str,
)


@pytest.mark.parametrize(
    "raw, expected",
    [("12.5", Decimal("12.50")), (3, Decimal("3.00")), ("0.005", Decimal("0.01")), (19.99, Decimal("19.99"))],
)
def test_parse_amount_quantizes(raw, expected):
    assert parse_amount(raw, "amount") == expected


@pytest.mark.parametrize("raw", ["0", "-5", "abc", None, True, "NaN", "Infinity", "0.001"])
def test_parse_amount_rejects(raw):
    with pytest.raises(ValidationError):
        parse_amount(raw, "amount")


def test_non_negative_amount_allows_zero():
    assert parse_non_negative_amount("0", "overdraft_limit") == Decimal("0.00")
    with pytest.raises(ValidationError):
        parse_non_negative_amount("-1", "overdraft_limit")


def test_signed_amount_allows_negative():
    assert parse_signed_amount("-42.5", "amount") == Decimal("-42.50")


@pytest.mark.parametrize("raw, expected", [(1, 1), (31, 31), ("15", 15), (" 7 ", 7)])
def test_day_of_month_accepts(raw, expected):
    assert validate_day_of_month(raw, "income_date") == expected


@pytest.mark.parametrize(
    "raw", [0, 32, -1, "32", "abc", 1.5, None, True, "", "\u00b2", "\u0665", "1\u00b9"]
)
def test_day_of_month_rejects(raw):
    with pytest.raises(ValidationError):
        validate_day_of_month(raw, "income_date")


def test_required_str_strips_and_rejects_blank():
    assert validate_required_str("  Rent ", "description", 100) == "Rent"
    with pytest.raises(ValidationError):
        validate_required_str("   ", "description", 100)
    with pytest.raises(ValidationError):
        validate_required_str("x" * 101, "description", 100)
    with pytest.raises(ValidationError):
        validate_required_str(12, "description", 100)


def test_enum_canonicalises_case():
    assert validate_enum(" Housing ", "category", DEDUCTION_CATEGORIES) == "housing"
    assert validate_enum("WEEKLY", "frequency", FREQUENCIES) == "weekly"
    with pytest.raises(ValidationError):
        validate_enum("groceries", "category", DEDUCTION_CATEGORIES)


@pytest.mark.parametrize("raw, expected", [("true", True), ("0", False), ("ON", True), (False, False)])
def test_parse_bool(raw, expected):
    assert parse_bool(raw, "flag") is expected


def test_parse_bool_rejects_unknown():
    with pytest.raises(ValidationError):
        parse_bool("maybe", "flag")


def test_validate_datetime():
    parsed = validate_datetime("2024-03-01T10:00:00Z", "created_at")
    assert parsed == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)
    with pytest.raises(ValidationError):
        validate_datetime("yesterday", "created_at")
