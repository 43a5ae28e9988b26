from decimal import Decimal

import pytest

from budget.models import Deduction, Income
from budget.storage import JSONStorage


def make_income(amount, day, description="Salary", frequency="monthly", id=None):
    return Income(
        id=id or f"inc-{description}-{day}",
        description=description,
        amount=Decimal(amount),
        income_date=day,
        frequency=frequency,
    )


def make_deduction(amount, day, description="Bill", category="other", id=None):
    return Deduction(
        id=id or f"ded-{description}-{day}",
        description=description,
        amount=Decimal(amount),
        category=category,
        deduction_date=day,
    )


@pytest.fixture
def storage(tmp_path):
    return JSONStorage(tmp_path / "data")


@pytest.fixture
def month():
    """Salary on the 1st, rent on the 5th and insurance on the 20th."""
    incomes = [make_income("2000.00", 1)]
    deductions = [
        make_deduction("800.00", 5, description="Rent", category="housing"),
        make_deduction("500.00", 20, description="Insurance", category="insurance"),
    ]
    return incomes, deductions
