"""Core business logic package for the budget tracker."""

from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .models import AccountBalance, Deduction, Income
from .projection import (
    Availability,
    ProjectionPoint,
    Totals,
    add_projection_date,
    availability,
    budget_at_date,
    compute_totals,
    monthly_tracking,
    projection_series,
    remove_projection_date,
    split_processed_pending,
)
from .services import (
    AccountBalanceService,
    BudgetService,
    DeductionService,
    IncomeService,
    ProjectionDateService,
)
from .storage import JSONStorage

__all__ = [
    "AccountBalance",
    "Deduction",
    "Income",
    "Availability",
    "ProjectionPoint",
    "Totals",
    "add_projection_date",
    "availability",
    "budget_at_date",
    "compute_totals",
    "monthly_tracking",
    "projection_series",
    "remove_projection_date",
    "split_processed_pending",
    "AccountBalanceService",
    "BudgetService",
    "DeductionService",
    "IncomeService",
    "ProjectionDateService",
    "JSONStorage",
    "PersistenceError",
    "ValidationError",
    "RecordNotFoundError",
]
