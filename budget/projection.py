"""Pure budget projection over day-of-month anchored records.

Nothing in this module reads the clock, touches storage or caches results.
Callers pass the record snapshot, the current day of the month and any
overdraft settings explicitly, so every function is deterministic for a
given set of arguments.

Two notions of "budget as of day X" coexist here and are kept apart on
purpose:

* :func:`budget_at_date` answers what has actually happened by day X and
  clamps X to the current day, so it never shows future money.
* :func:`projection_series` forecasts the month and does not clamp, so
  points after the current day include scheduled records still pending.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence

from .validators import MAX_DAY, MIN_DAY

__all__ = [
    "Availability",
    "ProjectionPoint",
    "Split",
    "Totals",
    "Tracking",
    "add_projection_date",
    "availability",
    "budget_at_date",
    "compute_totals",
    "monthly_tracking",
    "projection_series",
    "remove_projection_date",
    "split_processed_pending",
    "sum_amounts",
]

ZERO = Decimal("0.00")

INCOME_DATE_FIELD = "income_date"
DEDUCTION_DATE_FIELD = "deduction_date"


@dataclass(frozen=True)
class Totals:
    total_income: Decimal
    total_deductions: Decimal
    remaining_budget: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            "total_income": f"{self.total_income:.2f}",
            "total_deductions": f"{self.total_deductions:.2f}",
            "remaining_budget": f"{self.remaining_budget:.2f}",
        }


@dataclass(frozen=True)
class Split:
    processed: List[Any]
    pending: List[Any]


@dataclass(frozen=True)
class Tracking:
    """Processed-only view of the month as of the current day."""

    current_day: int
    incomes: Split
    deductions: Split
    processed_income: Decimal
    processed_deductions: Decimal

    @property
    def raw_budget(self) -> Decimal:
        return self.processed_income - self.processed_deductions


@dataclass(frozen=True)
class ProjectionPoint:
    date: int
    cumulative_income: Decimal
    cumulative_deductions: Decimal
    is_past: bool
    is_today: bool

    @property
    def budget(self) -> Decimal:
        return self.cumulative_income - self.cumulative_deductions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "cumulative_income": f"{self.cumulative_income:.2f}",
            "cumulative_deductions": f"{self.cumulative_deductions:.2f}",
            "budget": f"{self.budget:.2f}",
            "is_past": self.is_past,
            "is_today": self.is_today,
        }


@dataclass(frozen=True)
class Availability:
    available: Decimal
    used: Decimal
    remaining: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            "available": f"{self.available:.2f}",
            "used_overdraft": f"{self.used:.2f}",
            "remaining_overdraft": f"{self.remaining:.2f}",
        }


def sum_amounts(records: Iterable[Any]) -> Decimal:
    return sum((record.amount for record in records), start=ZERO)


def compute_totals(incomes: Iterable[Any], deductions: Iterable[Any]) -> Totals:
    """Whole-month totals, regardless of which days have already passed."""
    total_income = sum_amounts(incomes)
    total_deductions = sum_amounts(deductions)
    return Totals(total_income, total_deductions, total_income - total_deductions)


def split_processed_pending(records: Iterable[Any], date_field: str, current_day: int) -> Split:
    """Partition records into processed (day <= current_day) and pending."""
    processed: List[Any] = []
    pending: List[Any] = []
    for record in records:
        if getattr(record, date_field) <= current_day:
            processed.append(record)
        else:
            pending.append(record)
    return Split(processed, pending)


def _sum_through(records: Iterable[Any], date_field: str, day: int) -> Decimal:
    return sum_amounts(r for r in records if getattr(r, date_field) <= day)


def budget_at_date(
    incomes: Sequence[Any],
    deductions: Sequence[Any],
    current_day: int,
    target_date: int,
) -> Decimal:
    """Budget actually realised by ``target_date``, never later than today."""
    effective = min(target_date, current_day)
    income = _sum_through(incomes, INCOME_DATE_FIELD, effective)
    spent = _sum_through(deductions, DEDUCTION_DATE_FIELD, effective)
    return income - spent


def projection_series(
    incomes: Sequence[Any],
    deductions: Sequence[Any],
    current_day: int,
    dates: Iterable[int],
) -> List[ProjectionPoint]:
    """Forecast the cumulative budget at each distinct date, ascending."""
    points = []
    for day in sorted(set(dates)):
        points.append(
            ProjectionPoint(
                date=day,
                cumulative_income=_sum_through(incomes, INCOME_DATE_FIELD, day),
                cumulative_deductions=_sum_through(deductions, DEDUCTION_DATE_FIELD, day),
                is_past=day <= current_day,
                is_today=day == current_day,
            )
        )
    return points


def monthly_tracking(
    incomes: Sequence[Any], deductions: Sequence[Any], current_day: int
) -> Tracking:
    income_split = split_processed_pending(incomes, INCOME_DATE_FIELD, current_day)
    deduction_split = split_processed_pending(deductions, DEDUCTION_DATE_FIELD, current_day)
    return Tracking(
        current_day=current_day,
        incomes=income_split,
        deductions=deduction_split,
        processed_income=sum_amounts(income_split.processed),
        processed_deductions=sum_amounts(deduction_split.processed),
    )


def availability(
    remaining_budget: Decimal, overdraft_enabled: bool, overdraft_limit: Decimal = ZERO
) -> Availability:
    """Overdraft-adjusted view of a budget figure.

    Without overdraft the deficit is reported as-is (a negative ``available``).
    With overdraft ``available`` floors at zero and the deficit is charged
    against ``overdraft_limit`` instead.
    """
    if not overdraft_enabled:
        return Availability(available=remaining_budget, used=ZERO, remaining=ZERO)
    used = -remaining_budget if remaining_budget < 0 else ZERO
    return Availability(
        available=max(ZERO, remaining_budget),
        used=used,
        remaining=max(ZERO, overdraft_limit - used),
    )


def add_projection_date(dates: Iterable[int], day: object) -> List[int]:
    """Return a sorted copy of ``dates`` with ``day`` added.

    Days that are not integers in 1..31, or already present, leave the set
    unchanged.
    """
    current = sorted(set(dates))
    if isinstance(day, bool) or not isinstance(day, int):
        return current
    if not MIN_DAY <= day <= MAX_DAY or day in current:
        return current
    current.append(day)
    current.sort()
    return current


def remove_projection_date(dates: Iterable[int], day: object) -> List[int]:
    return sorted(d for d in set(dates) if d != day)
